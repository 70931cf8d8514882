from __future__ import annotations

from pydantic import BaseModel


class TopicStats(BaseModel):
    topic_name: str
    hashtag: str
    count: int


class ItemStats(BaseModel):
    total_unique: int
    topics: list[TopicStats]


class TopicDifficultyStats(BaseModel):
    topic_name: str
    hashtag: str
    easy: int
    moderate: int
    challenging: int
    unrated: int
    total: int


class SpacedRepetitionStats(BaseModel):
    topic: str = "all"
    total: int
    challenging: int
    moderate: int
    easy: int
    unrated: int
    topics: list[SpacedRepetitionStats] = []
