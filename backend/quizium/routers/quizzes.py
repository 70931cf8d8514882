"""
Multiple choice quizzes and their score history.

Endpoints:
  GET    /quizzes            shuffled quiz session for a topic
  POST   /quizzes/results    record a finished session's score
  GET    /quizzes/history    recorded scores, newest first
  DELETE /quizzes/history    clear the history
"""
from __future__ import annotations

import logging

import aiosqlite
from fastapi import APIRouter, Depends, Query

from quizium.db.sqlite import (
    delete_quiz_results,
    get_db,
    insert_quiz_result,
    list_quiz_results,
)
from quizium.models.quiz import QuizHistory, QuizResult, QuizResultCreate, QuizSession
from quizium.services.quizzes import format_result_date, result_topic, score_percentage
from quizium.services.study import StudyService, get_study

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("", response_model=QuizSession)
async def get_quiz_session(
    topic: str = Query(default="all"),
    study: StudyService = Depends(get_study),
) -> QuizSession:
    return await study.quiz_session(topic)


@router.post("/results", response_model=QuizResult, status_code=201)
async def record_result(
    body: QuizResultCreate,
    db: aiosqlite.Connection = Depends(get_db),
) -> QuizResult:
    score = score_percentage(body.correct, body.total)
    result = await insert_quiz_result(db, result_topic(body.topic), score)
    logger.info("Quiz result recorded: %s %d%%", result.topic, score)
    return result.model_copy(update={"formatted_date": format_result_date(result.created_at)})


@router.get("/history", response_model=QuizHistory)
async def quiz_history(db: aiosqlite.Connection = Depends(get_db)) -> QuizHistory:
    results = await list_quiz_results(db)
    items = [
        r.model_copy(update={"formatted_date": format_result_date(r.created_at)})
        for r in results
    ]
    return QuizHistory(items=items, total=len(items))


@router.delete("/history")
async def clear_history(db: aiosqlite.Connection = Depends(get_db)) -> dict:
    deleted = await delete_quiz_results(db)
    return {"deleted": deleted}
