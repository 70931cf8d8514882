from __future__ import annotations

from fastapi import APIRouter, Depends

from quizium.models.stats import ItemStats, SpacedRepetitionStats, TopicDifficultyStats
from quizium.services.study import StudyService, get_study

router = APIRouter()


@router.get("/flashcards", response_model=ItemStats)
async def flashcard_stats(study: StudyService = Depends(get_study)) -> ItemStats:
    return await study.flashcard_stats()


@router.get("/quizzes", response_model=ItemStats)
async def quiz_stats(study: StudyService = Depends(get_study)) -> ItemStats:
    return await study.quiz_stats()


@router.get("/topics", response_model=list[TopicDifficultyStats])
async def topic_stats(study: StudyService = Depends(get_study)) -> list[TopicDifficultyStats]:
    """Per-topic flashcard counts broken down by rating."""
    return await study.topic_difficulty_stats()


@router.get("/spaced", response_model=SpacedRepetitionStats)
async def spaced_stats(study: StudyService = Depends(get_study)) -> SpacedRepetitionStats:
    return await study.spaced_repetition_stats()
