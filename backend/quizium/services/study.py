"""
Study service: the entry point the routers talk to.

Owns the document store handle, the monitored topics, the spaced repetition
settings and the session sequencer (the shuffle cache). One instance lives on
``app.state.study`` for the lifetime of the process.
"""
from __future__ import annotations

import logging
import random
from collections.abc import Callable
from datetime import datetime, timezone
from pathlib import PurePosixPath

from fastapi import Request

from quizium.db.vault import DocumentStore
from quizium.models.document import Document
from quizium.models.flashcard import (
    DifficultyFilter,
    ExtractionResult,
    FlashcardItem,
    QuizItem,
    RatingReset,
)
from quizium.models.quiz import QuizSession
from quizium.models.session import SessionCard
from quizium.models.setup import SpacedRepetitionSettings, Topic
from quizium.models.stats import ItemStats, SpacedRepetitionStats, TopicDifficultyStats
from quizium.services import annotations, extraction, quizzes, spaced_repetition, stats
from quizium.services.sequencer import ALL, SequenceKey, SessionSequencer
from quizium.services.topics import classify

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def matches_topic(item: FlashcardItem | QuizItem, topic: str | None) -> bool:
    return not topic or topic == ALL or topic in item.topics


def matches_difficulty(item: FlashcardItem, difficulty: str | None) -> bool:
    if not difficulty or difficulty == DifficultyFilter.ALL.value:
        return True
    if difficulty == DifficultyFilter.UNRATED.value:
        return not item.difficulty
    return item.difficulty == difficulty


class StudyService:
    def __init__(
        self,
        store: DocumentStore,
        topics: list[Topic] | None = None,
        spaced_settings: SpacedRepetitionSettings | None = None,
        rng: random.Random | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.store = store
        self._topics = list(topics or [])
        self._spaced_settings = spaced_settings or SpacedRepetitionSettings()
        self._rng = rng or random.Random()
        self._clock = clock
        self.sequencer = SessionSequencer(self._load_sequence, rng=self._rng)

    # --- Settings ---

    @property
    def topics(self) -> list[Topic]:
        return list(self._topics)

    @property
    def spaced_settings(self) -> SpacedRepetitionSettings:
        return self._spaced_settings

    def update_topics(self, topics: list[Topic]) -> None:
        self._topics = list(topics)
        self.sequencer.reset_all()

    def update_spaced_settings(self, settings: SpacedRepetitionSettings) -> None:
        self._spaced_settings = settings
        self.sequencer.reset_all()

    # --- Corpus ---

    async def extract_all(self) -> ExtractionResult:
        return await extraction.extract_all(self.store, self._topics)

    async def flashcards(self, topic: str | None = None) -> list[FlashcardItem]:
        corpus = await self.extract_all()
        return [c for c in corpus.flashcards if matches_topic(c, topic)]

    async def quizzes(self, topic: str | None = None) -> list[QuizItem]:
        corpus = await self.extract_all()
        return [q for q in corpus.quizzes if matches_topic(q, topic)]

    async def filter_by_topic_and_difficulty(
        self, topic: str | None, difficulty: str | None
    ) -> list[FlashcardItem]:
        cards = await self.flashcards(topic)
        return [c for c in cards if matches_difficulty(c, difficulty)]

    async def due_for_review(
        self,
        settings: SpacedRepetitionSettings | None = None,
        now: datetime | None = None,
        topic: str | None = None,
    ) -> list[FlashcardItem]:
        cards = await self.flashcards(topic)
        return spaced_repetition.due_for_review(
            cards, settings or self._spaced_settings, now or self._clock()
        )

    # --- Sessions ---

    async def _load_sequence(self, key: SequenceKey) -> list[FlashcardItem]:
        if key.spaced:
            return await self.due_for_review(topic=key.topic)
        return await self.filter_by_topic_and_difficulty(key.topic, key.difficulty)

    async def _session_card(self, key: SequenceKey, item: FlashcardItem | None) -> SessionCard:
        state = await self.sequencer.state(key)
        return SessionCard(
            key=str(key),
            item=item,
            progress=state.progress(),
            completed=state.completed,
        )

    async def start_session(self, topic: str | None, difficulty: str | None) -> SessionCard:
        """Restart the selection with a fresh shuffle and return its first card."""
        key = SequenceKey.for_selection(topic, difficulty)
        self.sequencer.reset(key)
        if key.topic != ALL:
            self.sequencer.reset(SequenceKey.for_selection(ALL, key.difficulty))
        item = await self.sequencer.first(key)
        return await self._session_card(key, item)

    async def next_card(self, topic: str | None, difficulty: str | None) -> SessionCard:
        key = SequenceKey.for_selection(topic, difficulty)
        item = await self.sequencer.next(key)
        return await self._session_card(key, item)

    async def session_progress(self, topic: str | None, difficulty: str | None) -> SessionCard:
        key = SequenceKey.for_selection(topic, difficulty)
        state = await self.sequencer.state(key)
        current = state.items[state.cursor] if 0 <= state.cursor < state.total else None
        return await self._session_card(key, current)

    async def start_spaced_session(self, topic: str | None) -> SessionCard:
        """Snapshot the items due now; ratings made during the session do not refilter it."""
        key = SequenceKey.for_spaced(topic)
        due = await self.due_for_review(topic=key.topic)
        self.sequencer.build(key, due)
        item = await self.sequencer.first(key)
        return await self._session_card(key, item)

    async def next_spaced_card(self, topic: str | None) -> SessionCard:
        key = SequenceKey.for_spaced(topic)
        item = await self.sequencer.next(key)
        return await self._session_card(key, item)

    async def spaced_progress(self, topic: str | None) -> SessionCard:
        key = SequenceKey.for_spaced(topic)
        state = await self.sequencer.state(key)
        current = state.items[state.cursor] if 0 <= state.cursor < state.total else None
        return await self._session_card(key, current)

    # --- Ratings ---

    async def rate(self, item: FlashcardItem, difficulty: str, now: datetime | None = None) -> bool:
        return await self.rate_question(item.document, item.question, difficulty, now)

    async def rate_question(
        self,
        document: str,
        question: str,
        difficulty: str,
        now: datetime | None = None,
    ) -> bool:
        """
        Write a rating annotation for ``question`` in ``document``.

        Returns False, without writing, when no line holds the question
        verbatim any more (e.g. it was edited after extraction).
        """
        difficulty = getattr(difficulty, "value", difficulty)
        doc = Document(path=document, title=PurePosixPath(document).stem)
        text = await self.store.read_text(doc)

        updated = annotations.apply_rating(text, question, difficulty, now or self._clock())
        if updated is None:
            logger.info("Rating target not found in %s: %r", document, question)
            return False

        previous = annotations.current_rating(text, question) or DifficultyFilter.UNRATED.value
        await self.store.write_text(doc, updated)

        # Only the selectors the card leaves and joins can change membership
        dropped = 0
        if previous != difficulty:
            dropped = self.sequencer.reset_topics(
                classify(text, self._topics), difficulties=(previous, difficulty)
            )
        logger.debug("Rated %r in %s as %s, %d sequences reset", question, document, difficulty, dropped)
        return True

    async def reset_ratings(self) -> RatingReset:
        """Remove every annotation line from notes that belong to a topic."""
        files_modified = 0
        removed_total = 0
        for doc in await self.store.list_documents():
            text = await self.store.read_text(doc)
            if not classify(text, self._topics):
                continue
            cleaned, removed = annotations.strip_annotations(text)
            if removed:
                await self.store.write_text(doc, cleaned)
                files_modified += 1
                removed_total += removed

        self.sequencer.reset_all()
        logger.info("Removed %d ratings from %d documents", removed_total, files_modified)
        return RatingReset(files_modified=files_modified, annotations_removed=removed_total)

    # --- Quizzes ---

    async def quiz_session(self, topic: str | None) -> QuizSession:
        corpus = await self.extract_all()
        return quizzes.build_session(corpus.quizzes, topic, self._rng)

    # --- Statistics ---

    async def flashcard_stats(self) -> ItemStats:
        corpus = await self.extract_all()
        return stats.item_stats(corpus.flashcards, self._topics)

    async def quiz_stats(self) -> ItemStats:
        corpus = await self.extract_all()
        return stats.item_stats(corpus.quizzes, self._topics)

    async def topic_difficulty_stats(self) -> list[TopicDifficultyStats]:
        corpus = await self.extract_all()
        return stats.topic_difficulty_stats(corpus.flashcards, self._topics)

    async def spaced_repetition_stats(self, now: datetime | None = None) -> SpacedRepetitionStats:
        due = await self.due_for_review(now=now)
        overall = spaced_repetition.summarize_due(due)
        overall.topics = [
            spaced_repetition.summarize_due(
                [c for c in due if t.name in c.topics], topic=t.name
            )
            for t in self._topics
        ]
        return overall


async def create_study_service() -> StudyService:
    """Build the process-wide service from stored settings, falling back to env defaults."""
    from quizium.config import settings
    from quizium.db.sqlite import get_db, load_spaced_settings, load_topics
    from quizium.db.vault import VaultStore

    topics: list[Topic] = []
    spaced = SpacedRepetitionSettings(
        easy_days=settings.easy_days,
        moderate_days=settings.moderate_days,
        challenging_days=settings.challenging_days,
    )
    async for db in get_db():
        topics = await load_topics(db) or []
        spaced = await load_spaced_settings(db) or spaced

    store = VaultStore(settings.vault_dir, settings.notes_glob)
    logger.info("Study service ready: vault %s, %d topics", settings.vault_dir, len(topics))
    return StudyService(store, topics=topics, spaced_settings=spaced)


def get_study(request: Request) -> StudyService:
    return request.app.state.study
