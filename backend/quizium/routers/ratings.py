from __future__ import annotations

import logging

from fastapi import APIRouter, Depends

from quizium.models.flashcard import RatingRequest, RatingReset, RatingResult
from quizium.services.study import StudyService, get_study

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("", response_model=RatingResult)
async def rate_flashcard(
    body: RatingRequest,
    study: StudyService = Depends(get_study),
) -> RatingResult:
    """Record a difficulty rating in the source note, next to the question."""
    saved = await study.rate_question(body.document, body.question, body.difficulty.value)
    return RatingResult(
        document=body.document,
        question=body.question,
        difficulty=body.difficulty,
        saved=saved,
    )


@router.delete("", response_model=RatingReset)
async def reset_ratings(study: StudyService = Depends(get_study)) -> RatingReset:
    result = await study.reset_ratings()
    logger.info("Ratings reset: %d files modified", result.files_modified)
    return result
