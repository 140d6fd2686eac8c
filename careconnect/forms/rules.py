"""Answer rules synthesized from question metadata.

``build_rule`` turns a question's type, ``required`` flag, declared
constraints and option values into an ``AnswerRule``. A rule is two
independent layers:

* presence: an absent answer passes when the question is optional and fails
  when it is required;
* content: a present answer must satisfy the type's base check and every
  declared constraint.

Reasons are fixed English strings keyed by constraint and bound so callers
can match them literally.
"""
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Tuple

from careconnect.forms.answers import is_absent, parse_date, parse_number
from careconnect.models.survey import QuestionType

MSG_REQUIRED = "This field is required"
MSG_SELECT_ONE = "Please select at least one option"
MSG_TEXT = "Please enter text"
MSG_NUMBER = "Please enter a valid number"
MSG_BOOLEAN = "Please answer yes or no"
MSG_DATE = "Please enter a valid date"
MSG_OPTION = "Please select a valid option"


def _bound(value: float) -> str:
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value)


def min_length_message(bound: int) -> str:
    return f"Minimum {bound} characters required"


def max_length_message(bound: int) -> str:
    return f"Maximum {bound} characters allowed"


def min_value_message(bound: float) -> str:
    return f"Minimum value is {_bound(bound)}"


def max_value_message(bound: float) -> str:
    return f"Maximum value is {_bound(bound)}"


@dataclass(frozen=True)
class Constraints:
    """Optional bounds a question may declare."""
    min_length: Optional[int] = None
    max_length: Optional[int] = None
    min: Optional[float] = None
    max: Optional[float] = None

    @classmethod
    def from_mapping(cls, raw: Optional[Mapping[str, Any]]) -> "Constraints":
        """Read the stored ``{minLength, maxLength, min, max}`` shape."""
        if not raw:
            return cls()
        return cls(
            min_length=raw.get("minLength"),
            max_length=raw.get("maxLength"),
            min=raw.get("min"),
            max=raw.get("max"),
        )


@dataclass(frozen=True)
class RuleResult:
    valid: bool
    reasons: Tuple[str, ...] = ()

    def __bool__(self):
        return self.valid


ContentCheck = Callable[[Any, Constraints, Tuple[str, ...]], List[str]]


def _check_text(value, constraints, options):
    if not isinstance(value, str):
        return [MSG_TEXT]
    reasons = []
    if constraints.min_length is not None and len(value) < constraints.min_length:
        reasons.append(min_length_message(constraints.min_length))
    if constraints.max_length is not None and len(value) > constraints.max_length:
        reasons.append(max_length_message(constraints.max_length))
    return reasons


def _check_number(value, constraints, options):
    try:
        number = parse_number(value)
    except ValueError:
        return [MSG_NUMBER]
    reasons = []
    if constraints.min is not None and number < constraints.min:
        reasons.append(min_value_message(constraints.min))
    if constraints.max is not None and number > constraints.max:
        reasons.append(max_value_message(constraints.max))
    return reasons


def _check_boolean(value, constraints, options):
    if value is True or value is False:
        return []
    return [MSG_BOOLEAN]


def _check_date(value, constraints, options):
    try:
        parse_date(value)
    except (TypeError, ValueError):
        return [MSG_DATE]
    return []


def _check_single_choice(value, constraints, options):
    if isinstance(value, str) and value in options:
        return []
    return [MSG_OPTION]


def _check_multi_choice(value, constraints, options):
    if isinstance(value, str) or not isinstance(value, (list, tuple, set, frozenset)):
        return [MSG_OPTION]
    if not value:
        return [MSG_SELECT_ONE]
    if all(isinstance(v, str) and v in options for v in value):
        return []
    return [MSG_OPTION]


CONTENT_CHECKS: Dict[QuestionType, ContentCheck] = {
    QuestionType.TEXT: _check_text,
    QuestionType.NUMBER: _check_number,
    QuestionType.BOOLEAN: _check_boolean,
    QuestionType.DATE: _check_date,
    QuestionType.SINGLE_CHOICE: _check_single_choice,
    QuestionType.MULTI_CHOICE: _check_multi_choice,
}


@dataclass(frozen=True)
class AnswerRule:
    """Predicate over a candidate answer value."""
    question_type: QuestionType
    required: bool
    constraints: Constraints
    options: Tuple[str, ...] = ()

    def check(self, value: Any) -> RuleResult:
        if is_absent(value):
            if not self.required:
                return RuleResult(True)
            if self.question_type == QuestionType.MULTI_CHOICE:
                return RuleResult(False, (MSG_SELECT_ONE,))
            return RuleResult(False, (MSG_REQUIRED,))
        reasons = CONTENT_CHECKS[self.question_type](value, self.constraints, self.options)
        return RuleResult(not reasons, tuple(reasons))

    def __call__(self, value: Any) -> bool:
        return self.check(value).valid


def build_rule(question_type: QuestionType, required: bool = False,
               constraints: Optional[Constraints] = None,
               options: Iterable[str] = ()) -> AnswerRule:
    """Synthesize the rule for one question."""
    return AnswerRule(
        question_type=QuestionType(question_type),
        required=bool(required),
        constraints=constraints or Constraints(),
        options=tuple(options),
    )


def rule_for_question(question) -> AnswerRule:
    """
    Rule for a question record.

    Accepts anything exposing ``type``, ``required``, ``validation`` and
    ``options`` (each with a ``value``): ORM rows and API schemas alike.
    """
    return build_rule(
        question.type,
        required=question.required,
        constraints=Constraints.from_mapping(question.validation),
        options=[option.value for option in question.options or ()],
    )
