"""Survey router (Admin control plane)."""
from typing import Annotated, List, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from careconnect.core.database import get_db
from careconnect.models.survey import SurveyStatus
from careconnect.services.survey_service import SurveyService
from careconnect.services.response_service import ResponseService
from careconnect.schemas.survey import (
    SurveyCreate,
    SurveyUpdate,
    SurveyListResponse,
    SurveyDetailResponse,
    QuestionSetReplace,
)
from careconnect.schemas.response import SurveyResponseDetail
from careconnect.api.dependencies import AdminUser

router = APIRouter(prefix="/admin/surveys", tags=["Admin - Surveys"])


@router.post("", response_model=SurveyDetailResponse, status_code=201)
def create_survey(
    survey_data: SurveyCreate,
    db: Annotated[Session, Depends(get_db)],
    current_user: AdminUser
):
    """
    Create a new draft survey (Admin only).

    Questions are added with ``PUT /admin/surveys/{id}/questions``.
    """
    service = SurveyService(db)
    survey = service.create_survey(survey_data.title, survey_data.description, current_user.id)
    return service.get_survey(survey.id)


@router.get("", response_model=List[SurveyListResponse])
def list_surveys(
    db: Annotated[Session, Depends(get_db)],
    current_user: AdminUser,
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    status: Optional[SurveyStatus] = None
):
    """
    List all surveys, newest first (Admin only).
    """
    service = SurveyService(db)
    return service.get_surveys(skip=skip, limit=limit, status=status)


@router.get("/{survey_id}", response_model=SurveyDetailResponse)
def get_survey(
    survey_id: int,
    db: Annotated[Session, Depends(get_db)],
    current_user: AdminUser
):
    """
    Get survey with its questions in render order (Admin only).
    """
    service = SurveyService(db)
    return service.get_survey(survey_id)


@router.put("/{survey_id}", response_model=SurveyDetailResponse)
def update_survey(
    survey_id: int,
    survey_data: SurveyUpdate,
    db: Annotated[Session, Depends(get_db)],
    current_user: AdminUser
):
    """
    Update title or description (Admin only).
    """
    service = SurveyService(db)
    return service.update_survey(survey_id, survey_data)


@router.put("/{survey_id}/questions", response_model=SurveyDetailResponse)
def replace_questions(
    survey_id: int,
    payload: QuestionSetReplace,
    db: Annotated[Session, Depends(get_db)],
    current_user: AdminUser
):
    """
    Replace the whole question set (Admin only).

    Order follows list position. Send ``expected_version`` to reject the
    save if someone else changed the survey in the meantime.
    """
    service = SurveyService(db)
    return service.save_questions(survey_id, payload.questions, payload.expected_version)


@router.delete("/{survey_id}", status_code=204)
def delete_survey(
    survey_id: int,
    db: Annotated[Session, Depends(get_db)],
    current_user: AdminUser
):
    """
    Delete a draft survey with its questions (Admin only).
    """
    service = SurveyService(db)
    service.delete_survey(survey_id)


@router.post("/{survey_id}/publish", response_model=SurveyDetailResponse)
def publish_survey(
    survey_id: int,
    db: Annotated[Session, Depends(get_db)],
    current_user: AdminUser
):
    """
    Publish a survey (Admin only).
    """
    service = SurveyService(db)
    return service.publish_survey(survey_id)


@router.post("/{survey_id}/archive", response_model=SurveyDetailResponse)
def archive_survey(
    survey_id: int,
    db: Annotated[Session, Depends(get_db)],
    current_user: AdminUser
):
    """
    Archive a survey (Admin only).
    """
    service = SurveyService(db)
    return service.archive_survey(survey_id)


@router.get("/{survey_id}/responses", response_model=List[SurveyResponseDetail])
def list_survey_responses(
    survey_id: int,
    db: Annotated[Session, Depends(get_db)],
    current_user: AdminUser,
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500)
):
    """
    Submitted responses for a survey, newest first (Admin only).
    """
    service = ResponseService(db)
    return service.get_survey_responses(survey_id, skip=skip, limit=limit)
