"""
Corpus extraction: every note in the store -> flashcards + quizzes.

For each note:
  1. Classify topics on the raw text (notes with no topic contribute nothing)
  2. Strip hashtags and annotations, split into blocks
  3. Parse each block as flashcard and/or quiz
  4. Attach topics, and ratings looked up in the raw text

Text is read fresh on every pass; nothing is cached here.
"""
from __future__ import annotations

import logging
import time

from quizium.db.vault import DocumentStore
from quizium.models.document import Document
from quizium.models.flashcard import ExtractionResult, FlashcardItem, QuizItem
from quizium.models.setup import Topic
from quizium.services.annotations import clean_annotations, find_annotation
from quizium.services.blocks import parse_block, scan_blocks
from quizium.services.topics import classify, strip_hashtags

logger = logging.getLogger(__name__)


def parse_document(
    doc: Document,
    text: str,
    topics: list[Topic],
) -> tuple[list[FlashcardItem], list[QuizItem]]:
    doc_topics = classify(text, topics)
    if not doc_topics:
        return [], []

    cleaned = clean_annotations(strip_hashtags(text, topics))
    flashcards: list[FlashcardItem] = []
    quizzes: list[QuizItem] = []

    for block in scan_blocks(cleaned.split("\n")):
        parsed_card, parsed_quiz = parse_block(block)

        if parsed_card is not None:
            annotation = find_annotation(text, parsed_card.question, parsed_card.answer)
            flashcards.append(
                FlashcardItem(
                    question=parsed_card.question,
                    answer=parsed_card.answer,
                    hint=parsed_card.hint,
                    document=doc.path,
                    topics=list(doc_topics),
                    difficulty=annotation.difficulty if annotation else None,
                    last_rated=annotation.timestamp if annotation else None,
                )
            )

        if parsed_quiz is not None:
            quizzes.append(
                QuizItem(
                    question=parsed_quiz.question,
                    correct_answer=parsed_quiz.correct_answer,
                    wrong_answers=list(parsed_quiz.wrong_answers),
                    document=doc.path,
                    topics=list(doc_topics),
                )
            )

    return flashcards, quizzes


async def extract_all(store: DocumentStore, topics: list[Topic]) -> ExtractionResult:
    """Scan the whole store. Store errors propagate to the caller."""
    start = time.time()
    flashcards: list[FlashcardItem] = []
    quizzes: list[QuizItem] = []

    documents = await store.list_documents()
    for doc in documents:
        text = await store.read_text(doc)
        doc_cards, doc_quizzes = parse_document(doc, text, topics)
        flashcards.extend(doc_cards)
        quizzes.extend(doc_quizzes)

    logger.info(
        "Extracted %d flashcards, %d quizzes from %d documents in %d ms",
        len(flashcards),
        len(quizzes),
        len(documents),
        int((time.time() - start) * 1000),
    )
    return ExtractionResult(flashcards=flashcards, quizzes=quizzes)
