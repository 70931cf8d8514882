import json
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import AsyncIterator

import aiosqlite

from quizium.config import settings
from quizium.models.quiz import QuizResult
from quizium.models.setup import SpacedRepetitionSettings, Topic

_db_path: Path | None = None

SCHEMA_SQL = """
PRAGMA journal_mode=WAL;

CREATE TABLE IF NOT EXISTS quiz_results (
    id               TEXT PRIMARY KEY,
    topic            TEXT NOT NULL,
    score_percentage INTEGER NOT NULL,
    created_at       TEXT NOT NULL DEFAULT (datetime('now'))
);
CREATE INDEX IF NOT EXISTS idx_quiz_results_time ON quiz_results(created_at);

CREATE TABLE IF NOT EXISTS settings (
    key        TEXT PRIMARY KEY,
    value      TEXT NOT NULL DEFAULT '',
    updated_at TEXT NOT NULL DEFAULT (datetime('now'))
);

CREATE TABLE IF NOT EXISTS schema_version (
    version    INTEGER PRIMARY KEY,
    applied_at TEXT NOT NULL DEFAULT (datetime('now'))
);
INSERT OR IGNORE INTO schema_version(version) VALUES (1);
"""

TOPICS_KEY = "monitored_topics"
SPACED_REPETITION_KEY = "spaced_repetition"


async def init_sqlite(data_dir: Path) -> None:
    global _db_path
    _db_path = data_dir / settings.sqlite_filename
    async with aiosqlite.connect(_db_path) as db:
        await db.executescript(SCHEMA_SQL)
        await db.commit()


async def get_db() -> AsyncIterator[aiosqlite.Connection]:
    assert _db_path is not None, "SQLite not initialized"
    async with aiosqlite.connect(_db_path) as db:
        db.row_factory = aiosqlite.Row
        yield db


def _now() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S")


# --- Settings key-value store ---


async def get_setting(db: aiosqlite.Connection, key: str) -> str | None:
    cursor = await db.execute("SELECT value FROM settings WHERE key = ?", (key,))
    row = await cursor.fetchone()
    return row[0] if row else None


async def set_setting(db: aiosqlite.Connection, key: str, value: str) -> None:
    now = _now()
    await db.execute(
        "INSERT INTO settings(key, value, updated_at) VALUES (?, ?, ?) "
        "ON CONFLICT(key) DO UPDATE SET value = excluded.value, updated_at = excluded.updated_at",
        (key, value, now),
    )
    await db.commit()


async def load_topics(db: aiosqlite.Connection) -> list[Topic] | None:
    """Stored monitored topics, or None if they were never saved."""
    raw = await get_setting(db, TOPICS_KEY)
    if raw is None:
        return None
    return [Topic(**t) for t in json.loads(raw)]


async def save_topics(db: aiosqlite.Connection, topics: list[Topic]) -> None:
    await set_setting(db, TOPICS_KEY, json.dumps([t.model_dump() for t in topics]))


async def load_spaced_settings(db: aiosqlite.Connection) -> SpacedRepetitionSettings | None:
    raw = await get_setting(db, SPACED_REPETITION_KEY)
    if raw is None:
        return None
    return SpacedRepetitionSettings.model_validate_json(raw)


async def save_spaced_settings(
    db: aiosqlite.Connection, spaced: SpacedRepetitionSettings
) -> None:
    await set_setting(db, SPACED_REPETITION_KEY, spaced.model_dump_json())


# --- Quiz history ---


def _row_to_quiz_result(row: aiosqlite.Row) -> QuizResult:
    return QuizResult(**dict(row))


async def insert_quiz_result(
    db: aiosqlite.Connection, topic: str, score_percentage: int
) -> QuizResult:
    result_id = str(uuid.uuid4())
    await db.execute(
        "INSERT INTO quiz_results (id, topic, score_percentage, created_at) VALUES (?, ?, ?, ?)",
        (result_id, topic, score_percentage, _now()),
    )
    await db.commit()
    cursor = await db.execute("SELECT * FROM quiz_results WHERE id = ?", (result_id,))
    return _row_to_quiz_result(await cursor.fetchone())


async def list_quiz_results(db: aiosqlite.Connection) -> list[QuizResult]:
    """All results, most recent first."""
    cursor = await db.execute(
        "SELECT * FROM quiz_results ORDER BY created_at DESC, rowid DESC"
    )
    rows = await cursor.fetchall()
    return [_row_to_quiz_result(r) for r in rows]


async def delete_quiz_results(db: aiosqlite.Connection) -> int:
    cursor = await db.execute("DELETE FROM quiz_results")
    await db.commit()
    return cursor.rowcount or 0
