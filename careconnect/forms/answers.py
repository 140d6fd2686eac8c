"""Typed answer values.

An answer is one of five shapes. The wire form (JSON scalars and string
lists) and the storage form (JSON column plus typed columns) are derived
from it here and nowhere else.
"""
import math
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Any, Dict, Optional, Tuple, Union

from careconnect.models.survey import QuestionType


class _Unanswered:
    """Marker for a question the caregiver has not touched yet."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self):
        return False

    def __repr__(self):
        return "UNANSWERED"


UNANSWERED = _Unanswered()


@dataclass(frozen=True)
class TextAnswer:
    value: str
    kind = "text"


@dataclass(frozen=True)
class NumberAnswer:
    value: float
    kind = "number"


@dataclass(frozen=True)
class BooleanAnswer:
    value: bool
    kind = "boolean"


@dataclass(frozen=True)
class DateAnswer:
    value: date
    kind = "date"


@dataclass(frozen=True)
class ChoicesAnswer:
    values: Tuple[str, ...]
    kind = "choices"


AnswerValue = Union[TextAnswer, NumberAnswer, BooleanAnswer, DateAnswer, ChoicesAnswer]


def is_absent(value: Any) -> bool:
    """True for every "no answer" state a form field can be in."""
    if value is None or value is UNANSWERED:
        return True
    if isinstance(value, str):
        return value == ""
    if isinstance(value, (list, tuple, set, frozenset)):
        return len(value) == 0
    return False


def parse_number(raw: Any) -> float:
    """
    Coerce ``raw`` to a finite float.

    Raises:
        ValueError: booleans, non-numeric strings, NaN, infinities and
            integers too large for a float
    """
    if isinstance(raw, bool):
        raise ValueError("booleans are not numbers")
    if isinstance(raw, (int, float)):
        try:
            number = float(raw)
        except OverflowError as exc:
            raise ValueError("number is too large") from exc
    elif isinstance(raw, str):
        number = float(raw.strip())
    else:
        raise ValueError(f"cannot interpret {type(raw).__name__} as a number")
    if math.isnan(number) or math.isinf(number):
        raise ValueError("number must be finite")
    return number


def parse_date(raw: Any) -> date:
    """
    Resolve ``raw`` to a calendar date.

    Timestamps keep the calendar date they were written with; no timezone
    conversion happens, so ``2026-03-01T00:00:00Z`` and
    ``2026-03-01T00:00:00-08:00`` both resolve to March 1st.

    Raises:
        ValueError: if ``raw`` is not a date, datetime or ISO 8601 string
    """
    if isinstance(raw, datetime):
        return raw.date()
    if isinstance(raw, date):
        return raw
    if isinstance(raw, str):
        text = raw.strip()
        if len(text) == 10:
            return date.fromisoformat(text)
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        return datetime.fromisoformat(text).date()
    raise ValueError(f"cannot interpret {type(raw).__name__} as a date")


def format_date(value: date) -> str:
    """Canonical ISO 8601 form of a calendar date: midnight UTC."""
    midnight = datetime(value.year, value.month, value.day, tzinfo=timezone.utc)
    return midnight.isoformat().replace("+00:00", "Z")


def coerce_answer(question_type: QuestionType, raw: Any) -> AnswerValue:
    """
    Build the typed answer for a raw form or wire value.

    The value is expected to have passed the question's rule already;
    anything that cannot be represented raises ``ValueError``.
    """
    question_type = QuestionType(question_type)
    if question_type in (QuestionType.TEXT, QuestionType.SINGLE_CHOICE):
        if not isinstance(raw, str):
            raise ValueError("expected a string")
        return TextAnswer(raw)
    if question_type == QuestionType.NUMBER:
        return NumberAnswer(parse_number(raw))
    if question_type == QuestionType.BOOLEAN:
        if raw is not True and raw is not False:
            raise ValueError("expected true or false")
        return BooleanAnswer(raw)
    if question_type == QuestionType.DATE:
        return DateAnswer(parse_date(raw))
    if isinstance(raw, str) or not isinstance(raw, (list, tuple, set, frozenset)):
        raise ValueError("expected a list of option values")
    # Selection order is kept, duplicates dropped
    return ChoicesAnswer(tuple(dict.fromkeys(str(v) for v in raw)))


def to_wire(answer: AnswerValue) -> Union[str, int, float, bool, list]:
    """JSON-ready value sent to (and stored by) the server."""
    if isinstance(answer, NumberAnswer):
        return int(answer.value) if answer.value.is_integer() else answer.value
    if isinstance(answer, DateAnswer):
        return format_date(answer.value)
    if isinstance(answer, ChoicesAnswer):
        return list(answer.values)
    return answer.value


def to_form_value(question_type: QuestionType, wire: Any) -> Any:
    """Turn a stored wire value back into what a form field holds."""
    answer = coerce_answer(question_type, wire)
    if isinstance(answer, ChoicesAnswer):
        return list(answer.values)
    return answer.value


def storage_columns(answer: AnswerValue) -> Dict[str, Any]:
    """Column values for a response item holding ``answer``."""
    columns: Dict[str, Any] = {
        "answer": to_wire(answer),
        "answer_kind": answer.kind,
        "answer_text": None,
        "answer_number": None,
        "answer_boolean": None,
        "answer_date": None,
    }
    if isinstance(answer, TextAnswer):
        columns["answer_text"] = answer.value
    elif isinstance(answer, NumberAnswer):
        columns["answer_number"] = answer.value
    elif isinstance(answer, BooleanAnswer):
        columns["answer_boolean"] = answer.value
    elif isinstance(answer, DateAnswer):
        columns["answer_date"] = answer.value
    else:
        columns["answer_text"] = ", ".join(answer.values)
    return columns


def from_storage(kind: str, answer: Any, answer_date: Optional[date] = None) -> AnswerValue:
    """Rebuild a typed answer from a stored response item."""
    if kind == "text":
        return TextAnswer(answer)
    if kind == "number":
        return NumberAnswer(parse_number(answer))
    if kind == "boolean":
        return BooleanAnswer(bool(answer))
    if kind == "date":
        return DateAnswer(answer_date or parse_date(answer))
    if kind == "choices":
        return ChoicesAnswer(tuple(answer))
    raise ValueError(f"unknown answer kind {kind!r}")
