from __future__ import annotations

from collections import Counter
from collections.abc import Sequence

from quizium.models.flashcard import Difficulty, FlashcardItem, QuizItem
from quizium.models.setup import Topic
from quizium.models.stats import ItemStats, TopicDifficultyStats, TopicStats


def item_stats(items: Sequence[FlashcardItem] | Sequence[QuizItem], topics: list[Topic]) -> ItemStats:
    """Distinct question count plus per-topic item counts (not deduplicated)."""
    per_topic: Counter[str] = Counter()
    for item in items:
        per_topic.update(item.topics)

    return ItemStats(
        total_unique=len({item.question for item in items}),
        topics=[
            TopicStats(topic_name=t.name, hashtag=t.hashtag, count=per_topic[t.name])
            for t in topics
        ],
    )


def topic_difficulty_stats(
    flashcards: Sequence[FlashcardItem], topics: list[Topic]
) -> list[TopicDifficultyStats]:
    result: list[TopicDifficultyStats] = []
    for topic in topics:
        cards = [c for c in flashcards if topic.name in c.topics]
        counts = Counter(c.difficulty for c in cards)
        result.append(
            TopicDifficultyStats(
                topic_name=topic.name,
                hashtag=topic.hashtag,
                easy=counts[Difficulty.EASY.value],
                moderate=counts[Difficulty.MODERATE.value],
                challenging=counts[Difficulty.CHALLENGING.value],
                unrated=sum(1 for c in cards if not c.difficulty),
                total=len(cards),
            )
        )
    return result
