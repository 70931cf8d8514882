import asyncio
from datetime import timedelta

import pytest

from quizium.db.vault import DocumentNotFoundError
from quizium.models.flashcard import Difficulty
from quizium.models.setup import SpacedRepetitionSettings, Topic
from quizium.services.sequencer import SequenceKey
from quizium.services.study import StudyService

from tests.conftest import NOW, MemoryStore


def _questions(items):
    return sorted(i.question for i in items)


def test_filter_by_topic_and_difficulty(study):
    spain = asyncio.run(study.filter_by_topic_and_difficulty("Geography", "easy"))
    unrated = asyncio.run(study.filter_by_topic_and_difficulty("all", "unrated"))
    everything = asyncio.run(study.filter_by_topic_and_difficulty(None, None))
    assert _questions(spain) == ["Capital of Spain?"]
    assert _questions(unrated) == ["2+2?", "3*3?"]
    assert len(everything) == 4


def test_due_for_review(study):
    due = asyncio.run(study.due_for_review())
    assert _questions(due) == ["2+2?", "3*3?", "Capital of Spain?"]


def test_due_for_review_with_explicit_settings(study):
    settings = SpacedRepetitionSettings(easy_days=30, moderate_days=1, challenging_days=0)
    due = asyncio.run(study.due_for_review(settings=settings, topic="Geography"))
    assert _questions(due) == ["Capital of France?"]


def test_rate_writes_annotation(study, store):
    saved = asyncio.run(study.rate_question("math.md", "2+2?", Difficulty.EASY))
    assert saved
    assert store.writes == ["math.md"]
    assert "<!--QZ:2024-05-10T12:00:00.000Z,easy-->\n[Q]2+2?" in store.notes["math.md"]

    cards = asyncio.run(study.flashcards("Math"))
    rated = next(c for c in cards if c.question == "2+2?")
    assert rated.difficulty == "easy"
    assert rated.last_rated == NOW


def test_rate_item_replaces_previous_rating(study, store):
    france = asyncio.run(study.flashcards("Geography"))[0]
    assert asyncio.run(study.rate(france, "challenging"))
    assert store.notes["geo.md"].count("<!--QZ:") == 2
    cards = asyncio.run(study.flashcards("Geography"))
    assert cards[0].difficulty == "challenging"


def test_rate_missing_question_is_a_no_op(study, store):
    assert not asyncio.run(study.rate_question("math.md", "5+5?", "easy"))
    assert store.writes == []


def test_rate_missing_document_raises(study):
    with pytest.raises(DocumentNotFoundError):
        asyncio.run(study.rate_question("nope.md", "q", "easy"))


def test_rate_invalidates_affected_sequences(study):
    async def run():
        await study.start_session("all", "unrated")
        await study.start_session("Math", "challenging")
        await study.start_session("Geography", "easy")
        await study.start_session("Math", "all")
        await study.start_spaced_session("Math")
        await study.rate_question("math.md", "2+2?", "easy")

    asyncio.run(run())
    keys = study.sequencer.keys()
    assert SequenceKey.for_selection("all", "unrated") not in keys
    assert SequenceKey.for_selection("Math", "challenging") in keys
    assert SequenceKey.for_selection("Geography", "easy") in keys
    assert SequenceKey.for_selection("Math", "all") in keys
    assert SequenceKey.for_spaced("Math") in keys


def test_rate_changing_difficulty_drops_old_and_new_selectors(study):
    async def run():
        for difficulty in ("moderate", "easy", "challenging"):
            await study.start_session("Geography", difficulty)
        await study.start_session("all", "unrated")
        await study.rate_question("geo.md", "Capital of France?", "easy")

    asyncio.run(run())
    keys = study.sequencer.keys()
    assert SequenceKey.for_selection("Geography", "moderate") not in keys
    assert SequenceKey.for_selection("Geography", "easy") not in keys
    assert SequenceKey.for_selection("Geography", "challenging") in keys
    assert SequenceKey.for_selection("all", "unrated") in keys


def test_same_difficulty_rating_keeps_session(study):
    async def run():
        await study.start_session("Geography", "moderate")
        await study.rate_question("geo.md", "Capital of France?", "moderate")
        return await study.session_progress("Geography", "moderate")

    card = asyncio.run(run())
    assert SequenceKey.for_selection("Geography", "moderate") in study.sequencer.keys()
    assert card.progress.current == 1
    assert card.completed


def test_challenging_review_completes_without_repeats(topics):
    note = "#math\n\n<!--QZ:2024-05-01T12:00:00.000Z,challenging-->\n[Q]{q}\n[A]a\n"
    store = MemoryStore({f"n{i}.md": note.format(q=f"q{i}") for i in range(3)})
    service = StudyService(store, topics=topics, clock=lambda: NOW)

    async def run():
        shown = []
        card = await service.start_session("Math", "challenging")
        while card.item is not None:
            shown.append(card.item)
            await service.rate(card.item, "challenging")
            card = await service.next_card("Math", "challenging")
        return shown, card

    shown, last = asyncio.run(run())
    assert _questions(shown) == ["q0", "q1", "q2"]
    assert last.completed
    assert (last.progress.current, last.progress.total) == (3, 3)


def test_rated_card_comes_due_after_waiting_period(study):
    assert asyncio.run(study.rate_question("math.md", "2+2?", "easy"))

    early = asyncio.run(study.due_for_review(now=NOW + timedelta(days=3), topic="Math"))
    later = asyncio.run(study.due_for_review(now=NOW + timedelta(days=4), topic="Math"))
    assert _questions(early) == ["3*3?"]
    assert _questions(later) == ["2+2?", "3*3?"]


def test_session_walks_selection(study):
    async def run():
        first = await study.start_session("Math", "all")
        second = await study.next_card("Math", "all")
        third = await study.next_card("Math", "all")
        progress = await study.session_progress("Math", "all")
        return first, second, third, progress

    first, second, third, progress = asyncio.run(run())
    assert first.key == "Math:all"
    assert (first.progress.current, first.progress.total) == (1, 2)
    assert not first.completed
    assert second.completed
    assert _questions([first.item, second.item]) == ["2+2?", "3*3?"]
    assert third.item is None
    assert (progress.progress.current, progress.progress.total) == (2, 2)


def test_start_session_restarts(study):
    async def run():
        await study.start_session("Math", "all")
        await study.next_card("Math", "all")
        return await study.start_session("Math", "all")

    restarted = asyncio.run(run())
    assert restarted.progress.current == 1
    assert not restarted.completed


def test_empty_session(study):
    card = asyncio.run(study.start_session("Math", "challenging"))
    assert card.item is None
    assert card.progress.total == 0
    assert card.completed


def test_spaced_session_is_a_snapshot(study):
    async def run():
        first = await study.start_spaced_session("all")
        await study.rate(first.item, "easy")
        rest = [await study.next_spaced_card("all") for _ in range(3)]
        return first, rest

    first, rest = asyncio.run(run())
    assert first.key == "spaced-all"
    assert first.progress.total == 3
    shown = [first.item] + [c.item for c in rest[:2]]
    assert _questions(shown) == ["2+2?", "3*3?", "Capital of Spain?"]
    assert rest[2].item is None


def test_reset_ratings(study, store):
    result = asyncio.run(study.reset_ratings())
    assert result.files_modified == 1
    assert result.annotations_removed == 2
    assert "<!--QZ:" not in store.notes["geo.md"]
    assert store.writes == ["geo.md"]
    unrated = asyncio.run(study.filter_by_topic_and_difficulty("all", "unrated"))
    assert len(unrated) == 4


def test_reset_ratings_skips_untagged_documents(topics):
    untagged = "<!--QZ:2024-05-01T12:00:00.000Z,easy-->\n[Q]q\n[A]a"
    store = MemoryStore({"n.md": untagged})
    service = StudyService(store, topics=topics)
    result = asyncio.run(service.reset_ratings())
    assert (result.files_modified, result.annotations_removed) == (0, 0)
    assert store.notes["n.md"] == untagged


def test_quiz_session(study):
    session = asyncio.run(study.quiz_session("Math"))
    assert session.total == 1
    question = session.questions[0]
    assert question.question == "3*3?"
    assert sorted(question.options) == ["12", "6", "8", "9"]
    assert question.correct_answer == "9"
    assert asyncio.run(study.quiz_session("Geography")).total == 0


def test_item_stats(study):
    cards = asyncio.run(study.flashcard_stats())
    assert cards.total_unique == 4
    assert [(t.topic_name, t.count) for t in cards.topics] == [("Math", 2), ("Geography", 2)]

    quizzes = asyncio.run(study.quiz_stats())
    assert quizzes.total_unique == 1
    assert [(t.topic_name, t.count) for t in quizzes.topics] == [("Math", 1), ("Geography", 0)]


def test_item_stats_dedupe_by_question(topics):
    store = MemoryStore({
        "a.md": "#math\n\n[Q]q\n[A]a",
        "b.md": "#math #geo\n\n[Q]q\n[A]a",
    })
    stats = asyncio.run(StudyService(store, topics=topics).flashcard_stats())
    assert stats.total_unique == 1
    assert [t.count for t in stats.topics] == [2, 1]


def test_topic_difficulty_stats(study):
    stats = asyncio.run(study.topic_difficulty_stats())
    math, geo = stats
    assert (math.topic_name, math.unrated, math.total) == ("Math", 2, 2)
    assert (geo.easy, geo.moderate, geo.challenging, geo.unrated, geo.total) == (1, 1, 0, 0, 2)


def test_spaced_repetition_stats(study):
    stats = asyncio.run(study.spaced_repetition_stats())
    assert (stats.topic, stats.total, stats.easy, stats.unrated) == ("all", 3, 1, 2)
    assert [(t.topic, t.total) for t in stats.topics] == [("Math", 2), ("Geography", 1)]


def test_settings_changes_reset_sequences(study):
    asyncio.run(study.start_session("all", "all"))
    study.update_topics([Topic(hashtag="#math", name="Math")])
    assert study.sequencer.keys() == []

    asyncio.run(study.start_session("all", "all"))
    study.update_spaced_settings(SpacedRepetitionSettings(easy_days=10))
    assert study.sequencer.keys() == []
    assert study.spaced_settings.easy_days == 10
