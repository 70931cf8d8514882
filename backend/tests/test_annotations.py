from datetime import datetime, timedelta, timezone

from quizium.services.annotations import (
    apply_rating,
    clean_annotations,
    current_rating,
    find_annotation,
    format_annotation,
    format_timestamp,
    parse_annotation,
    parse_timestamp,
    strip_annotations,
)

T1 = datetime(2024, 5, 1, 9, 30, 0, 123456, tzinfo=timezone.utc)
T2 = datetime(2024, 5, 2, 10, 0, 0, tzinfo=timezone.utc)


def test_format_timestamp_millis_and_z():
    assert format_timestamp(T1) == "2024-05-01T09:30:00.123Z"


def test_format_timestamp_converts_to_utc():
    local = T2.astimezone(timezone(timedelta(hours=2)))
    assert format_timestamp(local) == "2024-05-02T10:00:00.000Z"


def test_parse_timestamp():
    assert parse_timestamp("2024-05-02T10:00:00.000Z") == T2
    assert parse_timestamp("2024-05-02T10:00:00") == T2
    assert parse_timestamp("yesterday") is None


def test_parse_annotation():
    annotation = parse_annotation("<!--QZ:2024-05-02T10:00:00.000Z,moderate-->")
    assert annotation.timestamp == T2
    assert annotation.difficulty == "moderate"


def test_parse_annotation_malformed():
    assert parse_annotation("<!--QZ:not-a-date,easy-->") is None
    assert parse_annotation("<!--QZ:2024-05-02T10:00:00.000Z,-->") is None
    assert parse_annotation("plain text") is None


def test_strip_annotations_counts_lines():
    text = "a\n<!--QZ:x,easy-->\n  <!--QZ:y,hard-->  \nb <!--QZ:z,easy-->"
    cleaned, removed = strip_annotations(text)
    assert cleaned == "a\nb <!--QZ:z,easy-->"
    assert removed == 2


def test_clean_annotations_drops_lines_and_inline_markers():
    text = "<!--QZ:x,easy-->\n[Q]q <!--QZ:y,easy-->\n[A]a"
    assert clean_annotations(text) == "[Q]q \n[A]a"


def test_find_annotation_above_question():
    text = "intro\n\n<!--QZ:2024-05-02T10:00:00.000Z,easy-->\n[Q]q\n[A]a\n"
    annotation = find_annotation(text, "q", "a")
    assert annotation.difficulty == "easy"
    assert annotation.timestamp == T2


def test_find_annotation_separated_by_blank_line():
    text = "<!--QZ:2024-05-02T10:00:00.000Z,easy-->\n\n[Q]q\n[A]a"
    assert find_annotation(text, "q", "a").difficulty == "easy"


def test_find_annotation_out_of_window():
    text = "<!--QZ:2024-05-02T10:00:00.000Z,easy-->\n\n\n\n[Q]q\n[A]a"
    assert find_annotation(text, "q", "a") is None


def test_find_annotation_needs_matching_answer():
    text = "<!--QZ:2024-05-02T10:00:00.000Z,easy-->\n[Q]q\n[A]other"
    assert find_annotation(text, "q", "a") is None


def test_find_annotation_first_marker_wins_even_if_malformed():
    text = "<!--QZ:bad,easy-->\n<!--QZ:2024-05-02T10:00:00.000Z,easy-->\n[Q]q\n[A]a"
    assert find_annotation(text, "q", "a") is None


def test_apply_rating_inserts_above_question():
    text = "#math\n\n[Q]2+2?\n[A]4\n"
    updated = apply_rating(text, "2+2?", "easy", T2)
    assert updated == (
        "#math\n\n<!--QZ:2024-05-02T10:00:00.000Z,easy-->\n[Q]2+2?\n[A]4\n"
    )


def test_apply_rating_replaces_existing_annotation():
    text = "<!--QZ:2024-05-01T09:30:00.123Z,easy-->\n\n[Q]q\n[A]a"
    updated = apply_rating(text, "q", "challenging", T2)
    assert updated == "<!--QZ:2024-05-02T10:00:00.000Z,challenging-->\n\n[Q]q\n[A]a"


def test_apply_rating_is_idempotent():
    text = "[Q]q\n[A]a"
    once = apply_rating(text, "q", "moderate", T2)
    twice = apply_rating(once, "q", "moderate", T2)
    assert once == twice
    assert once.count("<!--QZ:") == 1


def test_apply_rating_unknown_question():
    assert apply_rating("[Q]q\n[A]a", "missing", "easy", T2) is None


def test_rating_written_is_read_back():
    text = "#geo\n\n[Q]Capital?\n[A]Paris\n"
    updated = apply_rating(text, "Capital?", "moderate", T1)
    annotation = find_annotation(updated, "Capital?", "Paris")
    assert annotation.difficulty == "moderate"
    assert annotation.timestamp == T1.replace(microsecond=123000)


def test_apply_rating_keeps_crlf_line_endings():
    text = "#math\r\n\r\n[Q]q\r\n[A]a\r\n"
    inserted = apply_rating(text, "q", "easy", T2)
    assert inserted == (
        "#math\r\n\r\n<!--QZ:2024-05-02T10:00:00.000Z,easy-->\r\n[Q]q\r\n[A]a\r\n"
    )
    replaced = apply_rating(inserted, "q", "moderate", T2)
    assert replaced == (
        "#math\r\n\r\n<!--QZ:2024-05-02T10:00:00.000Z,moderate-->\r\n[Q]q\r\n[A]a\r\n"
    )
    assert find_annotation(replaced, "q", "a").difficulty == "moderate"


def test_current_rating():
    text = "<!--QZ:2024-05-02T10:00:00.000Z,challenging-->\n[Q]q\n[A]a\n\n[Q]other\n[A]b"
    assert current_rating(text, "q") == "challenging"
    assert current_rating(text, "other") is None
    assert current_rating(text, "missing") is None


def test_current_rating_uses_last_answer():
    text = "<!--QZ:2024-05-02T10:00:00.000Z,easy-->\n[Q]q\n[A]first\n[A]second"
    assert current_rating(text, "q") == "easy"
