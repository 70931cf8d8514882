from __future__ import annotations

from pydantic import BaseModel

from quizium.models.flashcard import DifficultyFilter, FlashcardItem


class SessionRequest(BaseModel):
    topic: str = "all"
    difficulty: DifficultyFilter = DifficultyFilter.ALL


class SpacedSessionRequest(BaseModel):
    topic: str = "all"


class SequenceProgress(BaseModel):
    current: int
    total: int


class SessionCard(BaseModel):
    key: str
    item: FlashcardItem | None   # None = nothing left to show
    progress: SequenceProgress
    completed: bool
