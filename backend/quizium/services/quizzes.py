from __future__ import annotations

import math
import random
from datetime import datetime

from quizium.models.flashcard import QuizItem
from quizium.models.quiz import QuizQuestion, QuizSession
from quizium.services.sequencer import ALL, fisher_yates

ALL_TOPICS_LABEL = "All Topics"


def present(quiz: QuizItem, rng: random.Random) -> QuizQuestion:
    """The quiz with its four options in a fresh random order."""
    options = fisher_yates([quiz.correct_answer, *quiz.wrong_answers], rng)
    return QuizQuestion(
        question=quiz.question,
        options=list(options),
        correct_answer=quiz.correct_answer,
        document=quiz.document,
        topics=list(quiz.topics),
    )


def build_session(quizzes: list[QuizItem], topic: str | None, rng: random.Random) -> QuizSession:
    selected = [q for q in quizzes if not topic or topic == ALL or topic in q.topics]
    ordered = fisher_yates(selected, rng)
    return QuizSession(
        topic=topic or ALL,
        questions=[present(q, rng) for q in ordered],
        total=len(ordered),
    )


def score_percentage(correct: int, total: int) -> int:
    if total <= 0:
        raise ValueError("total must be positive")
    # Half-up rounding, not Python's banker's rounding
    return math.floor(correct / total * 100 + 0.5)


def result_topic(topic: str | None) -> str:
    if not topic or topic == ALL:
        return ALL_TOPICS_LABEL
    return topic


def format_result_date(created_at: str) -> str:
    """``2024-05-01 09:30:00`` -> ``1 May 2024, 09:30:00``"""
    try:
        ts = datetime.strptime(created_at, "%Y-%m-%d %H:%M:%S")
    except ValueError:
        return created_at
    return f"{ts.day} {ts.strftime('%b %Y, %H:%M:%S')}"
