import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from quizium.config import settings
from quizium.db import init_all_databases
from quizium.db.vault import DocumentNotFoundError, DocumentStoreError

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    await init_all_databases(settings.data_dir)
    settings.vault_dir.mkdir(parents=True, exist_ok=True)
    from quizium.services.study import create_study_service

    app.state.study = await create_study_service()
    yield


def create_app() -> FastAPI:
    application = FastAPI(
        title="Quizium Backend", version="0.1.0", lifespan=lifespan
    )

    application.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @application.exception_handler(DocumentStoreError)
    async def document_store_error(request: Request, exc: DocumentStoreError):
        if isinstance(exc, DocumentNotFoundError):
            return JSONResponse(status_code=404, content={"detail": str(exc)})
        logger.error("Document store failure on %s: %s", request.url.path, exc)
        return JSONResponse(status_code=500, content={"detail": "Document store error"})

    from quizium.routers import health, items, quizzes, ratings, sessions, setup, stats

    application.include_router(health.router)
    application.include_router(
        items.router, prefix="/items", tags=["items"]
    )
    application.include_router(
        ratings.router, prefix="/ratings", tags=["ratings"]
    )
    application.include_router(
        sessions.router, prefix="/sessions", tags=["sessions"]
    )
    application.include_router(
        quizzes.router, prefix="/quizzes", tags=["quizzes"]
    )
    application.include_router(
        stats.router, prefix="/stats", tags=["stats"]
    )
    application.include_router(
        setup.router, prefix="/settings", tags=["settings"]
    )

    return application


app = create_app()
