"""
Spaced repetition due-ness.

Each difficulty has a waiting period in days (SpacedRepetitionSettings). An
item is due once its last rating is at least that old:

  unrated (no difficulty or no timestamp)  -> always due
  challenging                              -> due if challenging_days == 0 or waited
  moderate / easy                          -> due if waited
  anything else                            -> never due
"""
from __future__ import annotations

from datetime import datetime, timedelta, timezone

from quizium.models.flashcard import Difficulty, FlashcardItem
from quizium.models.setup import SpacedRepetitionSettings
from quizium.models.stats import SpacedRepetitionStats


def is_unrated(item: FlashcardItem) -> bool:
    return not item.difficulty or item.last_rated is None


def _as_utc(ts: datetime) -> datetime:
    if ts.tzinfo is None:
        return ts.replace(tzinfo=timezone.utc)
    return ts


def is_due(item: FlashcardItem, settings: SpacedRepetitionSettings, now: datetime) -> bool:
    if is_unrated(item):
        return True

    now = _as_utc(now)
    last_rated = _as_utc(item.last_rated)  # type: ignore[arg-type]

    if item.difficulty == Difficulty.CHALLENGING.value:
        return (
            settings.challenging_days == 0
            or last_rated <= now - timedelta(days=settings.challenging_days)
        )
    if item.difficulty == Difficulty.MODERATE.value:
        return last_rated <= now - timedelta(days=settings.moderate_days)
    if item.difficulty == Difficulty.EASY.value:
        return last_rated <= now - timedelta(days=settings.easy_days)
    return False


def due_for_review(
    items: list[FlashcardItem],
    settings: SpacedRepetitionSettings,
    now: datetime,
) -> list[FlashcardItem]:
    return [item for item in items if is_due(item, settings, now)]


def summarize_due(due: list[FlashcardItem], topic: str = "all") -> SpacedRepetitionStats:
    """Difficulty breakdown of an already filtered list of due items."""
    return SpacedRepetitionStats(
        topic=topic,
        total=len(due),
        challenging=sum(1 for i in due if i.difficulty == Difficulty.CHALLENGING.value),
        moderate=sum(1 for i in due if i.difficulty == Difficulty.MODERATE.value),
        easy=sum(1 for i in due if i.difficulty == Difficulty.EASY.value),
        unrated=sum(1 for i in due if is_unrated(i)),
    )
