from fastapi import APIRouter, Depends, HTTPException

from quizium.db.sqlite import get_db, save_spaced_settings, save_topics
from quizium.models.setup import SpacedRepetitionSettings, TopicList
from quizium.services.study import StudyService, get_study

router = APIRouter()


# --- Monitored topics ---


@router.get("/topics", response_model=TopicList)
async def get_topics(study: StudyService = Depends(get_study)):
    return TopicList(items=study.topics)


@router.put("/topics", response_model=TopicList)
async def update_topics(
    body: TopicList,
    db=Depends(get_db),
    study: StudyService = Depends(get_study),
):
    await save_topics(db, body.items)
    study.update_topics(body.items)
    return TopicList(items=study.topics)


# --- Spaced repetition intervals ---


@router.get("/spaced-repetition", response_model=SpacedRepetitionSettings)
async def get_spaced_settings(study: StudyService = Depends(get_study)):
    return study.spaced_settings


@router.put("/spaced-repetition", response_model=SpacedRepetitionSettings)
async def update_spaced_settings(
    body: SpacedRepetitionSettings,
    db=Depends(get_db),
    study: StudyService = Depends(get_study),
):
    if not body.challenging_days < body.moderate_days < body.easy_days:
        raise HTTPException(422, "Intervals must satisfy challenging < moderate < easy")
    await save_spaced_settings(db, body)
    study.update_spaced_settings(body)
    return study.spaced_settings
