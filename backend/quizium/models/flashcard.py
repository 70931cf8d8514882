from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field


class Difficulty(str, Enum):
    EASY = "easy"
    MODERATE = "moderate"
    CHALLENGING = "challenging"


class DifficultyFilter(str, Enum):
    EASY = "easy"
    MODERATE = "moderate"
    CHALLENGING = "challenging"
    UNRATED = "unrated"
    ALL = "all"


class FlashcardItem(BaseModel):
    question: str
    answer: str
    hint: str | None = None
    document: str                         # store path of the source note
    topics: list[str] = Field(default_factory=list)
    difficulty: str | None = None         # raw annotation value; may be unrecognized
    last_rated: datetime | None = None


class QuizItem(BaseModel):
    question: str
    correct_answer: str
    wrong_answers: list[str]              # exactly three, not necessarily distinct
    document: str
    topics: list[str] = Field(default_factory=list)


class ExtractionResult(BaseModel):
    flashcards: list[FlashcardItem]
    quizzes: list[QuizItem]


class FlashcardList(BaseModel):
    items: list[FlashcardItem]
    total: int


class RatingRequest(BaseModel):
    document: str
    question: str
    difficulty: Difficulty


class RatingResult(BaseModel):
    document: str
    question: str
    difficulty: Difficulty
    saved: bool  # False = question line no longer present verbatim


class RatingReset(BaseModel):
    files_modified: int
    annotations_removed: int
