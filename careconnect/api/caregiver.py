"""Caregiver router: task lists, survey forms and submissions."""
from typing import Annotated, List, Optional
from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from careconnect.core.config import settings
from careconnect.core.database import get_db
from careconnect.core.limiter import limiter
from careconnect.services.assignment_service import AssignmentService
from careconnect.services.check_in_service import CheckInService
from careconnect.services.response_service import ResponseService
from careconnect.services.survey_service import SurveyService
from careconnect.services.task_list import TaskListService
from careconnect.schemas.assignment import (
    AssignmentDetailResponse,
    AssignmentResponse,
    CheckInResponse,
    UnifiedAssignmentItem,
)
from careconnect.schemas.response import PreviousResponse, ResponseSubmit, ResponseSubmitted
from careconnect.schemas.survey import SurveyDetailResponse
from careconnect.api.dependencies import CaregiverUser

router = APIRouter(prefix="/caregiver", tags=["Caregiver"])


@router.get("/assignments/unified", response_model=List[UnifiedAssignmentItem])
def unified_assignments(
    db: Annotated[Session, Depends(get_db)],
    caregiver: CaregiverUser,
    include_completed: bool = False
):
    """
    Check-ins and survey assignments as one list.

    Overdue first, then due today, then upcoming; earlier due dates first
    within each group. Completed items only with ``include_completed``.
    """
    service = TaskListService(db)
    return service.unified_view(caregiver.id, include_completed=include_completed)


@router.get("/surveys/pending", response_model=List[AssignmentResponse])
def pending_surveys(
    db: Annotated[Session, Depends(get_db)],
    caregiver: CaregiverUser
):
    """Pending survey assignments, earliest due first."""
    service = AssignmentService(db)
    return service.pending_for_caregiver(caregiver.id)


@router.get("/surveys/{assignment_id}", response_model=AssignmentDetailResponse)
def get_assignment_form(
    assignment_id: int,
    db: Annotated[Session, Depends(get_db)],
    caregiver: CaregiverUser
):
    """Everything needed to render an assigned survey."""
    assignment = AssignmentService(db).get_caregiver_assignment(caregiver.id, assignment_id)
    survey = SurveyService(db).get_survey(assignment.survey_id)
    return AssignmentDetailResponse(
        assignment=AssignmentResponse.model_validate(assignment),
        patient_name=assignment.patient.name if assignment.patient else "",
        survey=SurveyDetailResponse.model_validate(survey),
    )


@router.post("/surveys/{assignment_id}/submit", response_model=ResponseSubmitted, status_code=201)
@limiter.limit(settings.SUBMIT_RATE_LIMIT)
def submit_survey(
    request: Request,
    assignment_id: int,
    submission: ResponseSubmit,
    db: Annotated[Session, Depends(get_db)],
    caregiver: CaregiverUser
):
    """
    Submit answers for an assignment.

    **Errors:**
    - 404 unknown assignment
    - 409 already submitted or cancelled
    - 422 answers fail validation (``errors`` maps question id to reasons)
    """
    service = ResponseService(db)
    return service.submit_for_assignment(caregiver.id, assignment_id, submission)


@router.get("/checkins/pending", response_model=List[CheckInResponse])
def pending_check_ins(
    db: Annotated[Session, Depends(get_db)],
    caregiver: CaregiverUser
):
    """Weekly check-ins not yet completed."""
    return CheckInService(db).pending(caregiver.id)


@router.get("/checkins/completed", response_model=List[CheckInResponse])
def completed_check_ins(
    db: Annotated[Session, Depends(get_db)],
    caregiver: CaregiverUser
):
    """Completed weekly check-ins, most recent first."""
    return CheckInService(db).completed(caregiver.id)


@router.post("/checkins/{check_in_id}/submit", response_model=ResponseSubmitted, status_code=201)
@limiter.limit(settings.SUBMIT_RATE_LIMIT)
def submit_check_in(
    request: Request,
    check_in_id: int,
    submission: ResponseSubmit,
    db: Annotated[Session, Depends(get_db)],
    caregiver: CaregiverUser
):
    """Submit answers for a weekly check-in."""
    service = ResponseService(db)
    return service.submit_for_check_in(caregiver.id, check_in_id, submission)


@router.get("/patients/{patient_id}/previous-response", response_model=PreviousResponse)
def previous_response(
    patient_id: int,
    db: Annotated[Session, Depends(get_db)],
    caregiver: CaregiverUser,
    survey_id: Optional[int] = None
):
    """Latest answers for a patient, used to prefill this week's form."""
    service = ResponseService(db)
    return service.get_previous_response(caregiver.id, patient_id, survey_id)
