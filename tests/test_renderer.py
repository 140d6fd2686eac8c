"""Tests for the survey form contract."""
from dataclasses import dataclass, field
from datetime import date
from typing import List, Optional

import pytest

from careconnect.forms import (
    UNANSWERED,
    ChoicesAnswer,
    DateAnswer,
    FormValidationError,
    NumberAnswer,
    SurveyForm,
    TextAnswer,
    Widget,
)
from careconnect.forms.answers import to_wire


@dataclass
class Opt:
    value: str
    label: str
    order_index: int


@dataclass
class Q:
    id: int
    text: str
    type: str
    order_index: int
    required: bool = False
    validation: Optional[dict] = None
    options: List[Opt] = field(default_factory=list)
    help_text: Optional[str] = None


def questions():
    return [
        Q(5, "Mood", "single_choice", 4, required=True,
          options=[Opt("bad", "Bad", 1), Opt("good", "Good", 0)]),
        Q(1, "Notes", "text", 0),
        Q(2, "Hours of sleep", "number", 1, required=True, validation={"min": 0, "max": 24}),
        Q(3, "Took medication?", "boolean", 2),
        Q(4, "Last doctor visit", "date", 3),
        Q(6, "Aids used", "multi_choice", 5, options=[Opt("cane", "Cane", 0)]),
    ]


def test_fields_follow_order_index_and_pick_widgets():
    form = SurveyForm(questions())
    assert [f.question_id for f in form.fields] == [1, 2, 3, 4, 5, 6]
    assert [f.widget for f in form.fields] == [
        Widget.TEXT_BOX, Widget.NUMBER_BOX, Widget.YES_NO,
        Widget.DATE_PICKER, Widget.RADIO_LIST, Widget.CHECKLIST,
    ]
    assert form.field(5).choices == (("good", "Good"), ("bad", "Bad"))


def test_initial_values():
    form = SurveyForm(questions())
    assert form.answers == {1: "", 2: UNANSWERED, 3: UNANSWERED, 4: UNANSWERED, 5: "", 6: []}
    assert not form.has_answers


def test_collect_blocks_on_required_questions():
    form = SurveyForm(questions())
    with pytest.raises(FormValidationError) as excinfo:
        form.collect()
    assert excinfo.value.errors == {
        2: ["This field is required"],
        5: ["This field is required"],
    }


def test_collect_omits_unanswered_optional_questions():
    form = SurveyForm(questions())
    form.set_answer(2, "7")
    form.set_answer(5, "good")
    assert form.collect() == {2: NumberAnswer(7.0), 5: TextAnswer("good")}


def test_collect_is_all_or_nothing():
    form = SurveyForm(questions())
    form.set_answer(2, 30)
    form.set_answer(5, "good")
    assert form.errors() == {2: ["Maximum value is 24"]}
    with pytest.raises(FormValidationError):
        form.collect()
    # nothing was lost
    assert form.get_answer(2) == 30
    assert form.get_answer(5) == "good"


def test_oversized_number_blocks_collect():
    form = SurveyForm(questions())
    form.set_answer(2, 10 ** 400)
    form.set_answer(5, "good")
    assert form.errors() == {2: ["Please enter a valid number"]}
    assert not form.is_valid
    with pytest.raises(FormValidationError):
        form.collect()

def test_collect_typed_answers():
    form = SurveyForm(questions())
    form.set_answer(2, 8)
    form.set_answer(4, date(2026, 3, 1))
    form.set_answer(5, "bad")
    form.set_answer(6, ("cane",))
    collected = form.collect()
    assert collected[4] == DateAnswer(date(2026, 3, 1))
    assert collected[6] == ChoicesAnswer(("cane",))
    assert to_wire(collected[4]) == "2026-03-01T00:00:00Z"


def test_clear_answer_resets_to_initial_state():
    form = SurveyForm(questions())
    form.set_answer(3, True)
    form.clear_answer(3)
    assert form.get_answer(3) is UNANSWERED


def test_unknown_question_id():
    form = SurveyForm(questions())
    with pytest.raises(KeyError):
        form.set_answer(99, "x")


def test_answers_snapshot_is_a_copy():
    form = SurveyForm(questions())
    snapshot = form.answers
    snapshot[6].append("cane")
    assert form.get_answer(6) == []


def test_copy_previous_fills_only_unanswered_questions():
    form = SurveyForm(questions())
    form.set_answer(2, 6)
    filled = form.copy_previous({"2": 9, "4": "2026-03-01T00:00:00Z", "5": "good", "99": "x"})
    assert filled == 2
    assert form.get_answer(2) == 6
    assert form.get_answer(4) == date(2026, 3, 1)
    assert form.get_answer(5) == "good"


def test_copy_previous_overwrite_replaces_answers():
    form = SurveyForm(questions())
    form.set_answer(2, 6)
    form.copy_previous({"2": 9}, overwrite=True)
    assert form.get_answer(2) == 9.0


def test_copy_previous_skips_values_that_no_longer_fit():
    form = SurveyForm(questions())
    filled = form.copy_previous({"3": "yes", "6": "cane"})
    assert filled == 0
    assert form.get_answer(3) is UNANSWERED
