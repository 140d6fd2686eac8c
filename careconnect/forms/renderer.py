"""Generic survey form.

``SurveyForm`` is the toolkit-independent half of a survey screen: it picks
a widget per question type, holds the in-progress answers keyed by question
id and decides what may be submitted. A web page, a terminal prompt or a
test drives it the same way.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Tuple

from careconnect.forms.answers import (
    UNANSWERED,
    AnswerValue,
    coerce_answer,
    is_absent,
    to_form_value,
)
from careconnect.forms.rules import AnswerRule, rule_for_question
from careconnect.models.survey import QuestionType


class Widget(str, Enum):
    """Input control used to render a question."""
    TEXT_BOX = "text_box"
    NUMBER_BOX = "number_box"
    YES_NO = "yes_no"
    DATE_PICKER = "date_picker"
    RADIO_LIST = "radio_list"
    CHECKLIST = "checklist"


WIDGETS: Dict[QuestionType, Widget] = {
    QuestionType.TEXT: Widget.TEXT_BOX,
    QuestionType.NUMBER: Widget.NUMBER_BOX,
    QuestionType.BOOLEAN: Widget.YES_NO,
    QuestionType.DATE: Widget.DATE_PICKER,
    QuestionType.SINGLE_CHOICE: Widget.RADIO_LIST,
    QuestionType.MULTI_CHOICE: Widget.CHECKLIST,
}


def initial_value(question_type: QuestionType) -> Any:
    """Value a field starts with before the caregiver touches it."""
    question_type = QuestionType(question_type)
    if question_type in (QuestionType.TEXT, QuestionType.SINGLE_CHOICE):
        return ""
    if question_type == QuestionType.MULTI_CHOICE:
        return []
    return UNANSWERED


class FormValidationError(Exception):
    """Raised when answers are collected while some question fails its rule."""

    def __init__(self, errors: Dict[int, List[str]]):
        super().__init__("Some answers need attention")
        self.errors = errors


@dataclass(frozen=True)
class FormField:
    question_id: int
    text: str
    question_type: QuestionType
    required: bool
    order_index: int
    widget: Widget
    rule: AnswerRule
    help_text: str = ""
    choices: Tuple[Tuple[str, str], ...] = field(default=())  # (value, label)


class SurveyForm:
    """In-progress answers for one survey."""

    def __init__(self, questions: Iterable):
        ordered = sorted(questions, key=lambda q: q.order_index)
        self.fields: List[FormField] = [self._field(q) for q in ordered]
        self._by_id: Dict[int, FormField] = {f.question_id: f for f in self.fields}
        self._answers: Dict[int, Any] = {
            f.question_id: initial_value(f.question_type) for f in self.fields
        }

    @classmethod
    def for_survey(cls, survey) -> "SurveyForm":
        """Build from anything with a ``questions`` list (ORM row or schema)."""
        return cls(survey.questions)

    @staticmethod
    def _field(question) -> FormField:
        question_type = QuestionType(question.type)
        options = sorted(question.options or (), key=lambda o: o.order_index)
        return FormField(
            question_id=question.id,
            text=question.text,
            question_type=question_type,
            required=question.required,
            order_index=question.order_index,
            widget=WIDGETS[question_type],
            rule=rule_for_question(question),
            help_text=getattr(question, "help_text", None) or "",
            choices=tuple((o.value, o.label) for o in options),
        )

    def field(self, question_id: int) -> FormField:
        try:
            return self._by_id[question_id]
        except KeyError:
            raise KeyError(f"Question {question_id} is not part of this survey") from None

    @property
    def answers(self) -> Dict[int, Any]:
        """Snapshot of the current answer map."""
        return {qid: (list(v) if isinstance(v, list) else v) for qid, v in self._answers.items()}

    def get_answer(self, question_id: int) -> Any:
        self.field(question_id)
        return self._answers[question_id]

    def set_answer(self, question_id: int, value: Any) -> None:
        self.field(question_id)
        self._answers[question_id] = list(value) if isinstance(value, (list, tuple, set, frozenset)) else value

    def clear_answer(self, question_id: int) -> None:
        self._answers[question_id] = initial_value(self.field(question_id).question_type)

    @property
    def has_answers(self) -> bool:
        return any(not is_absent(v) for v in self._answers.values())

    def errors(self) -> Dict[int, List[str]]:
        """Reasons per question id for every answer that fails its rule."""
        problems = {}
        for f in self.fields:
            result = f.rule.check(self._answers[f.question_id])
            if not result.valid:
                problems[f.question_id] = list(result.reasons)
        return problems

    @property
    def is_valid(self) -> bool:
        return not self.errors()

    def collect(self) -> Dict[int, AnswerValue]:
        """
        Typed answers ready for submission, in question order.

        Unanswered optional questions are left out rather than sent as nulls.

        Raises:
            FormValidationError: if any question fails its rule; nothing is
                collected in that case
        """
        problems = self.errors()
        if problems:
            raise FormValidationError(problems)
        collected = {}
        for f in self.fields:
            value = self._answers[f.question_id]
            if not is_absent(value):
                collected[f.question_id] = coerce_answer(f.question_type, value)
        return collected

    def copy_previous(self, previous: Mapping[Any, Any], overwrite: bool = False) -> int:
        """
        Prefill from a previously submitted answer map (wire form, keyed by
        question id as string or int).

        Without ``overwrite`` only questions that are still unanswered are
        filled, so partial work is never lost. Answers that no longer fit the
        question (type changed, bad value) are skipped.

        Returns:
            Number of questions filled
        """
        filled = 0
        for key, wire in previous.items():
            try:
                question_id = int(key)
            except (TypeError, ValueError):
                continue
            f = self._by_id.get(question_id)
            if f is None:
                continue
            if not overwrite and not is_absent(self._answers[question_id]):
                continue
            try:
                value = to_form_value(f.question_type, wire)
            except (TypeError, ValueError):
                continue
            self.set_answer(question_id, value)
            filled += 1
        return filled
