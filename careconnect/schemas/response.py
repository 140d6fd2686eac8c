"""Survey response schemas."""
from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Any, Dict, List, Optional
from datetime import datetime


class ResponseSubmit(BaseModel):
    """
    Submission body.

    ``answers`` is keyed by question id (as a string); values are checked
    against each question's rule by the service, not here. ``meta`` is
    opaque caller context.
    """
    answers: Dict[str, Any]
    meta: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("answers")
    @classmethod
    def check_keys(cls, answers: Dict[str, Any]) -> Dict[str, Any]:
        for key in answers:
            if not key.isdigit():
                raise ValueError(f"Answer key {key!r} is not a question id")
        return answers


class ResponseSubmitted(BaseModel):
    """Successful submission."""
    response_id: int
    assignment_id: Optional[int] = None
    check_in_id: Optional[int] = None
    submitted_at: datetime
    message: str = "Survey submitted successfully"


class ResponseItemResponse(BaseModel):
    question_id: int
    answer: Any
    answer_kind: str

    model_config = ConfigDict(from_attributes=True)


class SurveyResponseDetail(BaseModel):
    """Stored response with its answers."""
    id: int
    survey_id: int
    assignment_id: Optional[int] = None
    check_in_id: Optional[int] = None
    caregiver_id: int
    patient_id: Optional[int] = None
    submitted_at: datetime
    meta: Optional[Dict[str, Any]] = None
    items: List[ResponseItemResponse] = []

    model_config = ConfigDict(from_attributes=True)


class PreviousResponse(BaseModel):
    """Latest response for a patient, shaped for prefilling a form."""
    response_id: int
    survey_id: int
    submitted_at: datetime
    answers: Dict[str, Any]
