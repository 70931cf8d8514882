"""
Extracted study items.

Endpoints:
  GET /items              all flashcards and quizzes in the vault
  GET /items/flashcards   flashcards filtered by topic and difficulty
  GET /items/due          flashcards due for spaced repetition review
"""
from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from quizium.models.flashcard import DifficultyFilter, ExtractionResult, FlashcardList
from quizium.services.study import StudyService, get_study

router = APIRouter()


@router.get("", response_model=ExtractionResult)
async def list_items(study: StudyService = Depends(get_study)) -> ExtractionResult:
    return await study.extract_all()


@router.get("/flashcards", response_model=FlashcardList)
async def list_flashcards(
    topic: str = Query(default="all"),
    difficulty: DifficultyFilter = Query(default=DifficultyFilter.ALL),
    study: StudyService = Depends(get_study),
) -> FlashcardList:
    items = await study.filter_by_topic_and_difficulty(topic, difficulty.value)
    return FlashcardList(items=items, total=len(items))


@router.get("/due", response_model=FlashcardList)
async def list_due(
    topic: str = Query(default="all"),
    study: StudyService = Depends(get_study),
) -> FlashcardList:
    """Flashcards due now under the current spaced repetition settings."""
    items = await study.due_for_review(topic=topic)
    return FlashcardList(items=items, total=len(items))
