"""Survey response service."""
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from careconnect.core.errors import ConflictError, NotFoundError, ValidationError
from careconnect.forms.answers import coerce_answer, is_absent, storage_columns
from careconnect.forms.rules import rule_for_question
from careconnect.models.assignment import Assignment, AssignmentStatus
from careconnect.models.check_in import WeeklyCheckIn
from careconnect.models.response import SurveyResponse
from careconnect.models.survey import Survey
from careconnect.repositories.assignment_repository import AssignmentRepository
from careconnect.repositories.caregiver_repository import CaregiverRepository, CheckInRepository
from careconnect.repositories.response_repository import ResponseRepository
from careconnect.repositories.survey_repository import SurveyRepository
from careconnect.schemas.response import PreviousResponse, ResponseSubmit, ResponseSubmitted

logger = logging.getLogger(__name__)


class ResponseService:
    """Survey response business logic."""

    def __init__(self, db: Session):
        self.db = db
        self.response_repo = ResponseRepository(db)
        self.survey_repo = SurveyRepository(db)
        self.assignment_repo = AssignmentRepository(db)
        self.check_in_repo = CheckInRepository(db)
        self.caregiver_repo = CaregiverRepository(db)

    def normalize_answers(self, survey: Survey, answers: Dict[str, Any]) -> List[dict]:
        """
        Check submitted answers against each question's rule and build the
        response item rows.

        Absent answers to optional questions produce no row.

        Raises:
            ValidationError: With per-question reasons if anything fails
        """
        questions = {str(q.id): q for q in survey.questions}
        errors: Dict[str, List[str]] = {}

        for key in answers:
            if key not in questions:
                errors[key] = ["Question is not part of this survey"]

        items = []
        for key, question in questions.items():
            value = answers.get(key)
            result = rule_for_question(question).check(value)
            if not result.valid:
                errors[key] = list(result.reasons)
                continue
            if is_absent(value):
                continue
            columns = storage_columns(coerce_answer(question.type, value))
            columns["question_id"] = question.id
            items.append(columns)

        if errors:
            raise ValidationError("Response validation failed", errors=errors)
        return items

    def _load_survey(self, survey_id: int) -> Survey:
        survey = self.survey_repo.get_by_id(survey_id)
        if not survey:
            raise NotFoundError(f"Survey {survey_id} not found")
        return survey

    def _commit(self, response: SurveyResponse, label: str) -> SurveyResponse:
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            logger.warning("Duplicate submission rejected for %s", label)
            raise ConflictError(f"{label} has already been submitted")
        self.db.refresh(response)
        return response

    def submit_for_assignment(self, caregiver_id: int, assignment_id: int,
                              submission: ResponseSubmit) -> ResponseSubmitted:
        """
        Record a response for an assignment and mark it completed.

        The response, its items and the status change are one commit.

        Raises:
            NotFoundError: Unknown assignment, or owned by another caregiver
            ConflictError: Assignment already completed or cancelled
            ValidationError: Answers fail their question rules
        """
        assignment = self.assignment_repo.get_by_id(assignment_id)
        if not assignment or assignment.caregiver_id != caregiver_id:
            raise NotFoundError(f"Assignment {assignment_id} not found")
        return self._submit_assignment(assignment, submission)

    def _submit_assignment(self, assignment: Assignment,
                           submission: ResponseSubmit) -> ResponseSubmitted:
        label = f"Assignment {assignment.id}"
        if assignment.status == AssignmentStatus.COMPLETED:
            logger.warning("Submission for completed assignment %s rejected", assignment.id)
            raise ConflictError(f"{label} has already been submitted")
        if assignment.status == AssignmentStatus.CANCELLED:
            logger.warning("Submission for cancelled assignment %s rejected", assignment.id)
            raise ConflictError(f"{label} was cancelled")

        survey = self._load_survey(assignment.survey_id)
        try:
            items = self.normalize_answers(survey, submission.answers)
        except ValidationError as exc:
            logger.warning("Submission for assignment %s rejected: %s", assignment.id, exc.errors)
            raise

        now = datetime.now(timezone.utc)
        response = self.response_repo.add_response(
            survey_id=survey.id,
            caregiver_id=assignment.caregiver_id,
            patient_id=assignment.patient_id,
            items=items,
            meta=submission.meta,
            assignment_id=assignment.id,
            check_in_id=assignment.check_in_id,
        )
        assignment.status = AssignmentStatus.COMPLETED
        assignment.completed_at = now
        if assignment.check_in is not None and not assignment.check_in.is_completed:
            assignment.check_in.is_completed = True
            assignment.check_in.completed_at = now

        response = self._commit(response, label)
        logger.info("Response %s recorded for assignment %s (%d answers)",
                    response.id, assignment.id, len(items))
        return ResponseSubmitted(
            response_id=response.id,
            assignment_id=assignment.id,
            check_in_id=assignment.check_in_id,
            submitted_at=response.submitted_at,
        )

    def submit_for_check_in(self, caregiver_id: int, check_in_id: int,
                            submission: ResponseSubmit) -> ResponseSubmitted:
        """
        Record a response for a legacy check-in and mark it completed.

        A check-in answered through a linked assignment completes that
        assignment as well.

        Raises:
            NotFoundError: Unknown check-in, or owned by another caregiver
            ConflictError: Check-in already completed
            ValidationError: No survey linked, or answers fail their rules
        """
        check_in: Optional[WeeklyCheckIn] = self.check_in_repo.get_by_id(check_in_id)
        if not check_in or check_in.caregiver_id != caregiver_id:
            raise NotFoundError(f"Check-in {check_in_id} not found")
        label = f"Check-in {check_in_id}"
        if check_in.is_completed:
            logger.warning("Submission for completed check-in %s rejected", check_in_id)
            raise ConflictError(f"{label} has already been submitted")

        linked = self.assignment_repo.get_by_check_in(check_in_id)
        if linked is not None:
            return self._submit_assignment(linked, submission)

        if check_in.survey_id is None:
            raise ValidationError(f"{label} has no survey to answer")
        survey = self._load_survey(check_in.survey_id)
        try:
            items = self.normalize_answers(survey, submission.answers)
        except ValidationError as exc:
            logger.warning("Submission for check-in %s rejected: %s", check_in_id, exc.errors)
            raise

        now = datetime.now(timezone.utc)
        response = self.response_repo.add_response(
            survey_id=survey.id,
            caregiver_id=check_in.caregiver_id,
            patient_id=check_in.patient_id,
            items=items,
            meta=submission.meta,
            check_in_id=check_in.id,
        )
        check_in.is_completed = True
        check_in.completed_at = now

        response = self._commit(response, label)
        logger.info("Response %s recorded for check-in %s (%d answers)",
                    response.id, check_in_id, len(items))
        return ResponseSubmitted(
            response_id=response.id,
            check_in_id=check_in.id,
            submitted_at=response.submitted_at,
        )

    def get_previous_response(self, caregiver_id: int, patient_id: int,
                              survey_id: Optional[int] = None) -> PreviousResponse:
        """
        Latest answers this caregiver gave for a patient, in wire form.

        Raises:
            NotFoundError: Patient not under this caregiver, or no response yet
        """
        patient = self.caregiver_repo.get_patient(patient_id)
        if not patient or patient.caregiver_id != caregiver_id:
            raise NotFoundError(f"Patient {patient_id} not found")
        response = self.response_repo.get_latest_for_patient(caregiver_id, patient_id, survey_id)
        if not response:
            raise NotFoundError(f"No previous response for patient {patient_id}")
        return PreviousResponse(
            response_id=response.id,
            survey_id=response.survey_id,
            submitted_at=response.submitted_at,
            answers={str(item.question_id): item.answer for item in response.items},
        )

    def get_survey_responses(self, survey_id: int, skip: int = 0,
                             limit: int = 100) -> List[SurveyResponse]:
        """Responses for a survey (admin)."""
        self._load_survey(survey_id)
        return self.response_repo.get_by_survey(survey_id, skip=skip, limit=limit)
