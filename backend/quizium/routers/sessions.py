"""
Study sessions: shuffled, non-repeating walks over a selection of flashcards.

Endpoints:
  POST   /sessions/flashcards/start     restart a topic + difficulty selection
  POST   /sessions/flashcards/next      advance it
  GET    /sessions/flashcards/progress  current position
  DELETE /sessions/flashcards           forget one selection
  POST   /sessions/spaced/start         snapshot the cards due now and begin
  POST   /sessions/spaced/next
  GET    /sessions/spaced/progress
  DELETE /sessions                      forget every selection
"""
from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from quizium.models.flashcard import DifficultyFilter
from quizium.models.session import SessionCard, SessionRequest, SpacedSessionRequest
from quizium.services.sequencer import SequenceKey
from quizium.services.study import StudyService, get_study

router = APIRouter()


# --- Topic + difficulty sessions ---


@router.post("/flashcards/start", response_model=SessionCard)
async def start_session(
    body: SessionRequest,
    study: StudyService = Depends(get_study),
) -> SessionCard:
    return await study.start_session(body.topic, body.difficulty.value)


@router.post("/flashcards/next", response_model=SessionCard)
async def next_card(
    body: SessionRequest,
    study: StudyService = Depends(get_study),
) -> SessionCard:
    return await study.next_card(body.topic, body.difficulty.value)


@router.get("/flashcards/progress", response_model=SessionCard)
async def session_progress(
    topic: str = Query(default="all"),
    difficulty: DifficultyFilter = Query(default=DifficultyFilter.ALL),
    study: StudyService = Depends(get_study),
) -> SessionCard:
    return await study.session_progress(topic, difficulty.value)


@router.delete("/flashcards", status_code=204)
async def reset_session(
    topic: str = Query(default="all"),
    difficulty: DifficultyFilter = Query(default=DifficultyFilter.ALL),
    study: StudyService = Depends(get_study),
) -> None:
    study.sequencer.reset(SequenceKey.for_selection(topic, difficulty.value))


@router.delete("", status_code=204)
async def reset_all_sessions(study: StudyService = Depends(get_study)) -> None:
    study.sequencer.reset_all()


# --- Spaced repetition sessions ---


@router.post("/spaced/start", response_model=SessionCard)
async def start_spaced_session(
    body: SpacedSessionRequest,
    study: StudyService = Depends(get_study),
) -> SessionCard:
    return await study.start_spaced_session(body.topic)


@router.post("/spaced/next", response_model=SessionCard)
async def next_spaced_card(
    body: SpacedSessionRequest,
    study: StudyService = Depends(get_study),
) -> SessionCard:
    return await study.next_spaced_card(body.topic)


@router.get("/spaced/progress", response_model=SessionCard)
async def spaced_progress(
    topic: str = Query(default="all"),
    study: StudyService = Depends(get_study),
) -> SessionCard:
    return await study.spaced_progress(topic)
