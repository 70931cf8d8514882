from __future__ import annotations

from pydantic import BaseModel, Field, model_validator


class QuizQuestion(BaseModel):
    question: str
    options: list[str]      # correct + wrong answers, shuffled
    correct_answer: str
    document: str
    topics: list[str]


class QuizSession(BaseModel):
    topic: str
    questions: list[QuizQuestion]
    total: int


class QuizResultCreate(BaseModel):
    topic: str | None = None   # None = all topics
    correct: int = Field(ge=0)
    total: int = Field(gt=0)

    @model_validator(mode="after")
    def check_correct(self) -> QuizResultCreate:
        if self.correct > self.total:
            raise ValueError("correct cannot exceed total")
        return self


class QuizResult(BaseModel):
    id: str
    topic: str
    score_percentage: int
    created_at: str
    formatted_date: str = ""


class QuizHistory(BaseModel):
    items: list[QuizResult]
    total: int
