"""
Block scanning and card grammar.

A note is split into blocks: maximal runs of non-blank lines bounded by
blank lines or the edges of the text. A block is a study block when its
first line is a question marker line:

    [Q]What is the capital of France?
    [A]Paris
    [H]It is on the Seine          (optional, flashcards only)
    [B]Lyon                        (wrong answers, quizzes need exactly 3)
    [B]Marseille
    [B]Nice

Any other line inside a block is ignored. Blocks that fail the grammar are
skipped without error since notes mix prose with study blocks.
"""
from __future__ import annotations

from dataclasses import dataclass

QUESTION_MARKER = "[Q]"
ANSWER_MARKER = "[A]"
WRONG_ANSWER_MARKER = "[B]"
HINT_MARKER = "[H]"

QUIZ_WRONG_ANSWERS = 3


@dataclass
class Block:
    start: int  # index of the first line
    end: int    # index one past the last line
    lines: list[str]


@dataclass
class ParsedFlashcard:
    question: str
    answer: str
    hint: str | None = None


@dataclass
class ParsedQuiz:
    question: str
    correct_answer: str
    wrong_answers: list[str]


def is_blank(line: str) -> bool:
    return not line or not line.strip()


def marker_text(line: str, marker: str) -> str | None:
    """Return the trimmed text after ``marker`` or None if the line has another role."""
    stripped = line.strip()
    if not stripped.startswith(marker):
        return None
    return stripped[len(marker):].strip()


def scan_blocks(lines: list[str]) -> list[Block]:
    """Split lines into blocks separated by one or more blank lines."""
    blocks: list[Block] = []
    i = 0
    n = len(lines)
    while i < n:
        if is_blank(lines[i]):
            # Skip the whole run of blank lines
            while i < n and is_blank(lines[i]):
                i += 1
            continue

        start = i
        while i < n and not is_blank(lines[i]):
            i += 1
        blocks.append(Block(start=start, end=i, lines=lines[start:i]))
    return blocks


def parse_block(block: Block) -> tuple[ParsedFlashcard | None, ParsedQuiz | None]:
    """
    Interpret a block as a flashcard, a quiz, both, or neither.

    The flashcard and quiz readings are independent: a block with one [A]
    line and three [B] lines yields both, the flashcard simply ignoring the
    wrong answers.
    """
    if not block.lines:
        return None, None

    question = marker_text(block.lines[0], QUESTION_MARKER)
    if not question:
        return None, None

    answer = ""
    answer_lines = 0
    hint: str | None = None
    wrong_answers: list[str] = []

    for line in block.lines[1:]:
        if is_blank(line):
            break

        text = marker_text(line, ANSWER_MARKER)
        if text is not None:
            answer = text  # last [A] wins
            answer_lines += 1
            continue

        text = marker_text(line, WRONG_ANSWER_MARKER)
        if text is not None:
            wrong_answers.append(text)
            continue

        text = marker_text(line, HINT_MARKER)
        if text is not None and hint is None:
            hint = text

    flashcard = None
    if answer:
        flashcard = ParsedFlashcard(question=question, answer=answer, hint=hint or None)

    quiz = None
    if (
        answer
        and answer_lines == 1
        and len(wrong_answers) == QUIZ_WRONG_ANSWERS
        and all(wrong_answers)
    ):
        quiz = ParsedQuiz(
            question=question,
            correct_answer=answer,
            wrong_answers=wrong_answers,
        )

    return flashcard, quiz
