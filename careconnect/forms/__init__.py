"""Schema-driven survey forms: typed answers, rule synthesis and the form contract."""
from careconnect.forms.answers import (
    UNANSWERED,
    AnswerValue,
    BooleanAnswer,
    ChoicesAnswer,
    DateAnswer,
    NumberAnswer,
    TextAnswer,
    coerce_answer,
    format_date,
    parse_date,
    to_wire,
)
from careconnect.forms.rules import AnswerRule, Constraints, RuleResult, build_rule, rule_for_question
from careconnect.forms.renderer import FormField, FormValidationError, SurveyForm, Widget

__all__ = [
    "UNANSWERED",
    "AnswerValue",
    "BooleanAnswer",
    "ChoicesAnswer",
    "DateAnswer",
    "NumberAnswer",
    "TextAnswer",
    "coerce_answer",
    "format_date",
    "parse_date",
    "to_wire",
    "AnswerRule",
    "Constraints",
    "RuleResult",
    "build_rule",
    "rule_for_question",
    "FormField",
    "FormValidationError",
    "SurveyForm",
    "Widget",
]
