"""
Difficulty annotations embedded in notes.

A rating is stored as an HTML comment on its own line, normally right above
the question line of its block:

    <!--QZ:2024-05-01T09:30:00.000Z,moderate-->
    [Q]What is the capital of France?
    [A]Paris

Reading and writing locate the annotation differently:
  - read:  first marker found scanning forward from 3 lines before the
           block start through the block end
  - write: only the first non-blank line above the question line
The two lookups are intentionally different and must not be unified.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import datetime, timezone

from quizium.services.blocks import ANSWER_MARKER, QUESTION_MARKER, is_blank, marker_text

logger = logging.getLogger(__name__)

ANNOTATION_PREFIX = "<!--QZ:"
ANNOTATION_SUFFIX = "-->"
ANNOTATION_PATTERN = re.compile(r"<!--QZ:(.*?),(.*?)-->")

READ_LOOKBEHIND_LINES = 3


@dataclass
class Annotation:
    timestamp: datetime
    difficulty: str


def is_annotation_line(line: str) -> bool:
    stripped = line.strip()
    return stripped.startswith(ANNOTATION_PREFIX) and stripped.endswith(ANNOTATION_SUFFIX)


def format_timestamp(ts: datetime) -> str:
    """ISO-8601 in UTC with millisecond precision and a ``Z`` suffix."""
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    ts = ts.astimezone(timezone.utc)
    return ts.strftime("%Y-%m-%dT%H:%M:%S.") + f"{ts.microsecond // 1000:03d}Z"


def parse_timestamp(raw: str) -> datetime | None:
    value = raw.strip()
    if value.endswith(("Z", "z")):
        value = value[:-1] + "+00:00"
    try:
        ts = datetime.fromisoformat(value)
    except ValueError:
        return None
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts


def format_annotation(ts: datetime, difficulty: str) -> str:
    return f"{ANNOTATION_PREFIX}{format_timestamp(ts)},{difficulty}{ANNOTATION_SUFFIX}"


def parse_annotation(line: str) -> Annotation | None:
    """Parse the first marker in ``line``. Malformed markers yield None."""
    match = ANNOTATION_PATTERN.search(line)
    if match is None:
        return None
    ts = parse_timestamp(match.group(1))
    difficulty = match.group(2).strip()
    if ts is None or not difficulty:
        logger.debug("Ignoring malformed annotation: %r", line.strip())
        return None
    return Annotation(timestamp=ts, difficulty=difficulty)


def strip_annotations(text: str) -> tuple[str, int]:
    """Remove every annotation line. Returns (new_text, lines_removed)."""
    lines = text.split("\n")
    kept = [line for line in lines if not is_annotation_line(line)]
    return "\n".join(kept), len(lines) - len(kept)


def clean_annotations(text: str) -> str:
    """Drop annotation lines and inline markers so they never split a block."""
    kept = []
    for line in text.split("\n"):
        if is_annotation_line(line):
            continue
        kept.append(ANNOTATION_PATTERN.sub("", line))
    return "\n".join(kept)


# --- Read path ---


def _block_bounds(lines: list[str], index: int) -> tuple[int, int]:
    """Inclusive (start, end) of the non-blank run containing ``index``."""
    start = index
    while start > 0 and not is_blank(lines[start - 1]):
        start -= 1
    end = index
    while end < len(lines) - 1 and not is_blank(lines[end + 1]):
        end += 1
    return start, end


def _owning_block(lines: list[str], question: str, answer: str) -> tuple[int, int] | None:
    question = question.strip()
    answer = answer.strip()
    for i, line in enumerate(lines):
        if marker_text(line, QUESTION_MARKER) != question:
            continue
        start, end = _block_bounds(lines, i)
        if any(marker_text(lines[j], ANSWER_MARKER) == answer for j in range(start, end + 1)):
            return start, end
    return None


def find_annotation(text: str, question: str, answer: str) -> Annotation | None:
    """Rating for the block holding ``question``/``answer`` in the raw note text."""
    lines = text.split("\n")
    bounds = _owning_block(lines, question, answer)
    if bounds is None:
        return None

    start, end = bounds
    for line in lines[max(0, start - READ_LOOKBEHIND_LINES): end + 1]:
        if ANNOTATION_PATTERN.search(line):
            # First marker is authoritative even when malformed
            return parse_annotation(line)
    return None


# --- Write path ---


def find_question_line(lines: list[str], question: str) -> int | None:
    question = question.strip()
    for i, line in enumerate(lines):
        if marker_text(line, QUESTION_MARKER) == question:
            return i
    return None


def current_rating(text: str, question: str) -> str | None:
    """
    Difficulty that extraction currently reports for ``question``, read from
    the block of the line :func:`apply_rating` would rate. None = unrated.
    """
    lines = text.split("\n")
    q_index = find_question_line(lines, question)
    if q_index is None:
        return None

    _, end = _block_bounds(lines, q_index)
    answer = None
    for line in lines[q_index + 1: end + 1]:
        text_after = marker_text(line, ANSWER_MARKER)
        if text_after is not None:
            answer = text_after  # last [A] wins, as in parsing
    if not answer:
        return None

    annotation = find_annotation(text, question, answer)
    return annotation.difficulty if annotation else None


def apply_rating(text: str, question: str, difficulty: str, now: datetime) -> str | None:
    """
    Return ``text`` with the rating for ``question`` added or replaced.

    Returns None when no question line matches verbatim; the caller must not
    write anything in that case.
    """
    lines = text.split("\n")
    q_index = find_question_line(lines, question)
    if q_index is None:
        return None

    annotation = format_annotation(now, difficulty)
    if lines[q_index].endswith("\r"):
        # CRLF notes keep CRLF on the annotation line
        annotation += "\r"

    existing = None
    for i in range(q_index - 1, -1, -1):
        if is_blank(lines[i]):
            continue
        if is_annotation_line(lines[i]):
            existing = i
        break

    if existing is not None:
        lines[existing] = annotation
    else:
        lines.insert(q_index, annotation)
    return "\n".join(lines)
