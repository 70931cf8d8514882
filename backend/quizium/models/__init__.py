from quizium.models.document import Document
from quizium.models.flashcard import (
    Difficulty,
    DifficultyFilter,
    ExtractionResult,
    FlashcardItem,
    FlashcardList,
    QuizItem,
    RatingRequest,
    RatingReset,
    RatingResult,
)
from quizium.models.quiz import (
    QuizHistory,
    QuizQuestion,
    QuizResult,
    QuizResultCreate,
    QuizSession,
)
from quizium.models.session import (
    SequenceProgress,
    SessionCard,
    SessionRequest,
    SpacedSessionRequest,
)
from quizium.models.setup import SpacedRepetitionSettings, Topic, TopicList
from quizium.models.stats import (
    ItemStats,
    SpacedRepetitionStats,
    TopicDifficultyStats,
    TopicStats,
)

__all__ = [
    "Difficulty",
    "DifficultyFilter",
    "Document",
    "ExtractionResult",
    "FlashcardItem",
    "FlashcardList",
    "ItemStats",
    "QuizHistory",
    "QuizItem",
    "QuizQuestion",
    "QuizResult",
    "QuizResultCreate",
    "QuizSession",
    "RatingRequest",
    "RatingReset",
    "RatingResult",
    "SequenceProgress",
    "SessionCard",
    "SessionRequest",
    "SpacedRepetitionSettings",
    "SpacedRepetitionStats",
    "SpacedSessionRequest",
    "Topic",
    "TopicDifficultyStats",
    "TopicList",
    "TopicStats",
]
