"""Assignment router (Admin)."""
from typing import Annotated, List, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from careconnect.core.database import get_db
from careconnect.services.assignment_service import AssignmentService
from careconnect.schemas.assignment import (
    AssignmentResponse,
    BulkAssignmentCreate,
    BulkAssignmentResult,
    CheckInLink,
)
from careconnect.models.assignment import AssignmentStatus
from careconnect.api.dependencies import AdminUser

router = APIRouter(prefix="/admin", tags=["Admin - Assignments"])


@router.post("/surveys/{survey_id}/assign", response_model=BulkAssignmentResult, status_code=201)
def bulk_assign(
    survey_id: int,
    payload: BulkAssignmentCreate,
    db: Annotated[Session, Depends(get_db)],
    current_user: AdminUser
):
    """
    Assign a survey to selected caregivers (Admin only).

    One assignment is created per caregiver × active patient, all or none.
    Caregivers without patients are listed in the result.
    """
    service = AssignmentService(db)
    return service.bulk_assign(survey_id, payload.caregiver_ids, payload.due_at, current_user.id)


@router.get("/assignments", response_model=List[AssignmentResponse])
def list_assignments(
    db: Annotated[Session, Depends(get_db)],
    current_user: AdminUser,
    survey_id: Optional[int] = None,
    status: Optional[AssignmentStatus] = None,
    skip: int = Query(0, ge=0),
    limit: int = Query(200, ge=1, le=500)
):
    """
    List assignments, newest first (Admin only).
    """
    service = AssignmentService(db)
    return service.list_assignments(survey_id=survey_id, status=status, skip=skip, limit=limit)


@router.post("/assignments/{assignment_id}/cancel", response_model=AssignmentResponse)
def cancel_assignment(
    assignment_id: int,
    db: Annotated[Session, Depends(get_db)],
    current_user: AdminUser
):
    """
    Cancel a pending assignment (Admin only).
    """
    service = AssignmentService(db)
    return service.cancel_assignment(assignment_id)


@router.post("/check-ins/{check_in_id}/link", response_model=AssignmentResponse, status_code=201)
def link_check_in(
    check_in_id: int,
    payload: CheckInLink,
    db: Annotated[Session, Depends(get_db)],
    current_user: AdminUser
):
    """
    Answer a weekly check-in through a survey (Admin only).
    """
    service = AssignmentService(db)
    return service.link_check_in(check_in_id, payload.survey_id, current_user.id)
