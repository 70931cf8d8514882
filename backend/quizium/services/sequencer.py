"""
Shuffled, forward-only traversal of study items.

Each selection (topic + difficulty, or a spaced repetition topic) gets its
own sequence: the filtered items in a uniformly random order plus a cursor.
Sequences are built lazily on first access and cached until reset, so a
session never repeats an item until it is explicitly restarted.

    Uninitialized --(first access)--> Ready (cursor = -1)
    Ready --first()--> cursor = 0
    Ready --next()--> cursor + 1 ... --> Completed (next() returns None)
"""
from __future__ import annotations

import logging
import random
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass
from typing import TypeVar

from quizium.models.flashcard import FlashcardItem
from quizium.models.session import SequenceProgress

logger = logging.getLogger(__name__)

ALL = "all"

T = TypeVar("T")


@dataclass(frozen=True)
class SequenceKey:
    topic: str = ALL
    difficulty: str = ALL
    spaced: bool = False

    @classmethod
    def for_selection(cls, topic: str | None, difficulty: str | None) -> SequenceKey:
        # Enum selectors hash by name, so keys always hold the plain value
        difficulty = getattr(difficulty, "value", difficulty)
        return cls(topic=topic or ALL, difficulty=difficulty or ALL)

    @classmethod
    def for_spaced(cls, topic: str | None) -> SequenceKey:
        return cls(topic=topic or ALL, spaced=True)

    def __str__(self) -> str:
        if self.spaced:
            return f"spaced-{self.topic}"
        return f"{self.topic}:{self.difficulty}"


@dataclass
class SequenceState:
    items: tuple[FlashcardItem, ...]
    cursor: int = -1  # -1 = nothing shown yet

    @property
    def total(self) -> int:
        return len(self.items)

    @property
    def completed(self) -> bool:
        # Vacuously true for an empty sequence
        return self.cursor >= self.total - 1

    def first(self) -> FlashcardItem | None:
        if not self.items:
            return None
        self.cursor = 0
        return self.items[0]

    def advance(self) -> FlashcardItem | None:
        if self.cursor >= self.total:
            return None
        self.cursor += 1
        if self.cursor >= self.total:
            return None
        return self.items[self.cursor]

    def progress(self) -> SequenceProgress:
        return SequenceProgress(
            current=min(self.total, max(0, self.cursor + 1)),
            total=self.total,
        )


def fisher_yates(items: Iterable[T], rng: random.Random) -> tuple[T, ...]:
    """Uniform shuffle into a new tuple; the input is left untouched."""
    shuffled = list(items)
    for i in range(len(shuffled) - 1, 0, -1):
        j = rng.randint(0, i)
        shuffled[i], shuffled[j] = shuffled[j], shuffled[i]
    return tuple(shuffled)


Loader = Callable[[SequenceKey], Awaitable[list[FlashcardItem]]]


class SessionSequencer:
    """Cache of sequences keyed by SequenceKey; ``loader`` supplies the filtered items."""

    def __init__(self, loader: Loader, rng: random.Random | None = None) -> None:
        self._loader = loader
        self._rng = rng or random.Random()
        self._states: dict[SequenceKey, SequenceState] = {}

    def __contains__(self, key: SequenceKey) -> bool:
        return key in self._states

    def keys(self) -> list[SequenceKey]:
        return list(self._states)

    async def state(self, key: SequenceKey) -> SequenceState:
        state = self._states.get(key)
        if state is not None:
            return state

        items = await self._loader(key)
        built = SequenceState(items=fisher_yates(items, self._rng))
        # Concurrent builds of one key: the first stored state is kept
        state = self._states.setdefault(key, built)
        if state is built:
            logger.debug("Built sequence %s with %d items", key, built.total)
        return state

    def build(self, key: SequenceKey, items: list[FlashcardItem]) -> SequenceState:
        """Replace ``key`` with a freshly shuffled sequence over ``items``."""
        state = SequenceState(items=fisher_yates(items, self._rng))
        self._states[key] = state
        return state

    async def first(self, key: SequenceKey) -> FlashcardItem | None:
        return (await self.state(key)).first()

    async def next(self, key: SequenceKey) -> FlashcardItem | None:
        return (await self.state(key)).advance()

    async def progress(self, key: SequenceKey) -> SequenceProgress:
        return (await self.state(key)).progress()

    async def has_completed(self, key: SequenceKey) -> bool:
        return (await self.state(key)).completed

    def reset(self, key: SequenceKey) -> None:
        self._states.pop(key, None)

    def reset_all(self) -> None:
        self._states.clear()

    def reset_topics(
        self, topics: Iterable[str], difficulties: Iterable[str] | None = None
    ) -> int:
        """
        Drop cached difficulty-filtered sequences that a rating in ``topics``
        could change. Spaced sequences and difficulty "all" sequences keep
        their membership and are left alone. With ``difficulties`` only those
        selectors are dropped.
        """
        affected = {ALL, *topics}
        selectors = set(difficulties) if difficulties is not None else None
        stale = [
            key
            for key in self._states
            if not key.spaced
            and key.difficulty != ALL
            and key.topic in affected
            and (selectors is None or key.difficulty in selectors)
        ]
        for key in stale:
            del self._states[key]
        return len(stale)
