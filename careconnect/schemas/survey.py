"""Survey schemas."""
from pydantic import BaseModel, Field, ConfigDict, model_validator
from typing import Optional, List, Dict, Any
from datetime import datetime

from careconnect.models.survey import QuestionType, SurveyStatus


# Validation constraint schema
class ValidationRules(BaseModel):
    """Declared bounds, stored as ``{minLength, maxLength, min, max}``."""
    min_length: Optional[int] = Field(None, alias="minLength", ge=0)
    max_length: Optional[int] = Field(None, alias="maxLength", ge=0)
    min: Optional[float] = None
    max: Optional[float] = None

    model_config = ConfigDict(populate_by_name=True)

    @model_validator(mode="after")
    def check_bounds(self):
        if self.min_length is not None and self.max_length is not None \
                and self.min_length > self.max_length:
            raise ValueError("minLength cannot exceed maxLength")
        if self.min is not None and self.max is not None and self.min > self.max:
            raise ValueError("min cannot exceed max")
        return self

    def to_storage(self) -> Optional[Dict[str, Any]]:
        stored = self.model_dump(by_alias=True, exclude_none=True)
        return stored or None


# Option schemas
class OptionCreate(BaseModel):
    """Option as submitted by the survey builder (order comes from position)."""
    value: str = Field(..., min_length=1)
    label: str = Field(..., min_length=1)


class OptionResponse(BaseModel):
    """Option response."""
    id: int
    value: str
    label: str
    order_index: int

    model_config = ConfigDict(from_attributes=True)


# Question schemas
class QuestionCreate(BaseModel):
    """
    Question as submitted by the survey builder.

    ``id`` keeps an existing question's identity across a replace; new
    questions omit it.
    """
    id: Optional[int] = None
    text: str = Field(..., min_length=1)
    help_text: Optional[str] = None
    type: QuestionType
    required: bool = False
    validation: Optional[ValidationRules] = None
    options: List[OptionCreate] = []

    @model_validator(mode="after")
    def check_options(self):
        if self.type.is_choice:
            if not self.options:
                raise ValueError(f"{self.type.value} questions need at least one option")
            values = [o.value for o in self.options]
            if len(values) != len(set(values)):
                raise ValueError("Option values must be unique within a question")
        elif self.options:
            raise ValueError(f"{self.type.value} questions cannot have options")
        return self


class QuestionResponse(BaseModel):
    """Question response."""
    id: int
    survey_id: int
    text: str
    help_text: Optional[str] = None
    type: QuestionType
    required: bool
    order_index: int
    validation: Optional[Dict[str, Any]] = None
    options: List[OptionResponse] = []

    model_config = ConfigDict(from_attributes=True)


class QuestionSetReplace(BaseModel):
    """Replace the whole question set of a survey."""
    questions: List[QuestionCreate]
    expected_version: Optional[int] = None


# Survey schemas
class SurveyCreate(BaseModel):
    """Create survey (starts as draft, questions added separately)."""
    title: str
    description: Optional[str] = None


class SurveyUpdate(BaseModel):
    """Update survey header fields."""
    title: Optional[str] = None
    description: Optional[str] = None


class SurveyListResponse(BaseModel):
    """Survey header (list view)."""
    id: int
    title: str
    description: Optional[str] = None
    status: SurveyStatus
    version: int
    created_at: datetime
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class SurveyDetailResponse(SurveyListResponse):
    """Survey with its questions sorted by order_index."""
    questions: List[QuestionResponse] = []
