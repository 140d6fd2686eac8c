"""Assignment schemas."""
from pydantic import BaseModel, ConfigDict, Field
from typing import List, Literal, Optional
from datetime import date, datetime

from careconnect.models.assignment import AssignmentStatus
from careconnect.schemas.survey import SurveyDetailResponse


class BulkAssignmentCreate(BaseModel):
    """Assign a survey to every patient of each selected caregiver."""
    caregiver_ids: List[int] = Field(..., min_length=1)
    due_at: datetime


class CheckInLink(BaseModel):
    """Link a legacy check-in to the survey used to answer it."""
    survey_id: int


class AssignmentResponse(BaseModel):
    """Assignment response."""
    id: int
    survey_id: int
    caregiver_id: int
    patient_id: int
    check_in_id: Optional[int] = None
    due_at: datetime
    status: AssignmentStatus
    created_at: datetime
    completed_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class BulkAssignmentResult(BaseModel):
    """Outcome of one bulk-assign action."""
    survey_id: int
    created: int
    assignments: List[AssignmentResponse]
    caregivers_without_patients: List[int] = []


class AssignmentDetailResponse(BaseModel):
    """What a caregiver needs to render an assigned survey."""
    assignment: AssignmentResponse
    patient_name: str
    survey: SurveyDetailResponse


class CheckInResponse(BaseModel):
    """Legacy weekly check-in as seen by its caregiver."""
    id: int
    patient_id: int
    patient_name: str
    survey_id: Optional[int] = None
    week_start_date: datetime
    week_end_date: datetime
    due_date: date
    status: Literal["pending", "overdue", "completed"]
    completed_at: Optional[datetime] = None


class UnifiedAssignmentItem(BaseModel):
    """One entry of a caregiver's task list (check-in or dynamic survey)."""
    id: int
    type: Literal["weekly_checkin", "dynamic_survey"]
    patient_id: int
    patient_name: str
    title: str
    description: Optional[str] = None
    due_date: date
    status: Literal["pending", "overdue", "completed"]
    completed_at: Optional[datetime] = None
    survey_id: Optional[int] = None
    assignment_id: Optional[int] = None
    check_in_id: Optional[int] = None
    priority: int  # 3=overdue, 2=due today, 1=upcoming, 0=completed
    progress_current: int
    progress_total: int
