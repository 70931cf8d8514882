from __future__ import annotations

from quizium.models.setup import Topic


def classify(text: str, topics: list[Topic]) -> list[str]:
    """Names of the topics whose hashtag occurs anywhere in the raw note text."""
    names: list[str] = []
    for topic in topics:
        if topic.hashtag in text and topic.name not in names:
            names.append(topic.name)
    return names


def strip_hashtags(text: str, topics: list[Topic]) -> str:
    # Literal replacement: hashtags may contain regex metacharacters
    for topic in topics:
        text = text.replace(topic.hashtag, "")
    return text
