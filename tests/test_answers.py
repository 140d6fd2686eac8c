"""Tests for typed answers and their wire/storage forms."""
from datetime import date, datetime, timezone

import pytest

from careconnect.forms.answers import (
    UNANSWERED,
    BooleanAnswer,
    ChoicesAnswer,
    DateAnswer,
    NumberAnswer,
    TextAnswer,
    coerce_answer,
    format_date,
    from_storage,
    is_absent,
    parse_date,
    storage_columns,
    to_form_value,
    to_wire,
)
from careconnect.models.survey import QuestionType


def test_unanswered_is_a_falsy_singleton():
    assert not UNANSWERED
    assert type(UNANSWERED)() is UNANSWERED


@pytest.mark.parametrize("value", [None, UNANSWERED, "", [], ()])
def test_absent_values(value):
    assert is_absent(value)


@pytest.mark.parametrize("value", [0, False, "x", ["a"]])
def test_present_values(value):
    assert not is_absent(value)


def test_date_serializes_as_midnight_utc():
    assert format_date(date(2026, 3, 1)) == "2026-03-01T00:00:00Z"
    assert to_wire(DateAnswer(date(2026, 3, 1))) == "2026-03-01T00:00:00Z"


@pytest.mark.parametrize("raw", [
    "2026-03-01",
    "2026-03-01T00:00:00Z",
    "2026-03-01T23:30:00-08:00",
    "2026-03-01T00:30:00+05:00",
    datetime(2026, 3, 1, 23, 59, tzinfo=timezone.utc),
])
def test_parse_date_keeps_the_written_calendar_day(raw):
    assert parse_date(raw) == date(2026, 3, 1)


def test_coerce_answer_builds_each_variant():
    assert coerce_answer(QuestionType.TEXT, "hi") == TextAnswer("hi")
    assert coerce_answer(QuestionType.NUMBER, "4") == NumberAnswer(4.0)
    assert coerce_answer(QuestionType.BOOLEAN, False) == BooleanAnswer(False)
    assert coerce_answer(QuestionType.DATE, "2026-03-01") == DateAnswer(date(2026, 3, 1))
    assert coerce_answer(QuestionType.SINGLE_CHOICE, "yes") == TextAnswer("yes")
    assert coerce_answer(QuestionType.MULTI_CHOICE, ["b", "a", "b"]) == ChoicesAnswer(("b", "a"))


def test_coerce_answer_rejects_wrong_shape():
    with pytest.raises(ValueError):
        coerce_answer(QuestionType.BOOLEAN, "true")
    with pytest.raises(ValueError):
        coerce_answer(QuestionType.MULTI_CHOICE, "a")


def test_numbers_on_the_wire():
    assert to_wire(NumberAnswer(3.0)) == 3
    assert isinstance(to_wire(NumberAnswer(3.0)), int)
    assert to_wire(NumberAnswer(2.5)) == 2.5


def test_storage_columns_fill_the_matching_typed_column():
    columns = storage_columns(DateAnswer(date(2026, 3, 1)))
    assert columns["answer"] == "2026-03-01T00:00:00Z"
    assert columns["answer_kind"] == "date"
    assert columns["answer_date"] == date(2026, 3, 1)
    assert columns["answer_text"] is None

    columns = storage_columns(ChoicesAnswer(("cane", "walker")))
    assert columns["answer"] == ["cane", "walker"]
    assert columns["answer_text"] == "cane, walker"

    columns = storage_columns(NumberAnswer(7.0))
    assert columns["answer_number"] == 7.0
    assert columns["answer"] == 7


def test_from_storage_restores_the_variant():
    assert from_storage("date", "2026-03-01T00:00:00Z") == DateAnswer(date(2026, 3, 1))
    assert from_storage("choices", ["a"]) == ChoicesAnswer(("a",))
    assert from_storage("number", 7) == NumberAnswer(7.0)
    with pytest.raises(ValueError):
        from_storage("photo", "x")


def test_date_form_value_round_trip():
    wire = to_wire(coerce_answer(QuestionType.DATE, date(2026, 11, 2)))
    assert to_form_value(QuestionType.DATE, wire) == date(2026, 11, 2)
