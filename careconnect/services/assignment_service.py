"""Assignment service."""
import logging
from datetime import datetime
from typing import List, Optional
from sqlalchemy.orm import Session

from careconnect.core.errors import ConflictError, NotFoundError
from careconnect.repositories.assignment_repository import AssignmentRepository
from careconnect.repositories.caregiver_repository import CaregiverRepository, CheckInRepository
from careconnect.repositories.survey_repository import SurveyRepository
from careconnect.services.notification_service import NotificationService
from careconnect.models.assignment import Assignment, AssignmentStatus
from careconnect.schemas.assignment import BulkAssignmentResult, AssignmentResponse

logger = logging.getLogger(__name__)


class AssignmentService:
    """Assignment business logic."""

    def __init__(self, db: Session):
        self.db = db
        self.assignment_repo = AssignmentRepository(db)
        self.caregiver_repo = CaregiverRepository(db)
        self.check_in_repo = CheckInRepository(db)
        self.survey_repo = SurveyRepository(db)
        self.notifications = NotificationService(db)

    def bulk_assign(self, survey_id: int, caregiver_ids: List[int], due_at: datetime,
                    assigned_by: Optional[int] = None) -> BulkAssignmentResult:
        """
        Assign a survey to every active patient of each selected caregiver.

        All expansions are written in one transaction: either every
        caregiver × patient assignment exists afterwards or none does. A
        caregiver with no patients expands to nothing and is reported, not
        rejected.

        Raises:
            NotFoundError: If the survey or any caregiver does not exist
        """
        survey = self.survey_repo.get_by_id(survey_id, include_questions=False)
        if not survey:
            raise NotFoundError(f"Survey {survey_id} not found")

        requested = list(dict.fromkeys(caregiver_ids))
        found = {c.id for c in self.caregiver_repo.get_many(requested)}
        missing = [cid for cid in requested if cid not in found]
        if missing:
            raise NotFoundError(f"Caregivers {missing} not found")

        patients = self.assignment_repo.active_patients_for(requested)
        assignments = [
            Assignment(
                survey_id=survey_id,
                caregiver_id=patient.caregiver_id,
                patient_id=patient.id,
                due_at=due_at,
                status=AssignmentStatus.PENDING,
                assigned_by=assigned_by,
            )
            for patient in patients
        ]
        with_patients = {patient.caregiver_id for patient in patients}
        without_patients = [cid for cid in requested if cid not in with_patients]

        if assignments:
            self.assignment_repo.create_many(assignments)
        logger.info(
            "Survey %s assigned: %d assignments across %d caregivers (%d without patients)",
            survey_id, len(assignments), len(requested), len(without_patients),
        )

        result = BulkAssignmentResult(
            survey_id=survey_id,
            created=len(assignments),
            assignments=[AssignmentResponse.model_validate(a) for a in assignments],
            caregivers_without_patients=without_patients,
        )

        # Notifications are out-of-band; a failure here must not undo the assignments
        if assignments:
            try:
                self.notifications.notify_assignments_created(
                    survey.title, survey_id, len(assignments), with_patients
                )
            except Exception:
                self.db.rollback()
                logger.exception("Could not record notifications for survey %s assignments", survey_id)

        return result

    def get_assignment(self, assignment_id: int) -> Assignment:
        """
        Get assignment by ID.

        Raises:
            NotFoundError: If assignment not found
        """
        assignment = self.assignment_repo.get_by_id(assignment_id)
        if not assignment:
            raise NotFoundError(f"Assignment {assignment_id} not found")
        return assignment

    def get_caregiver_assignment(self, caregiver_id: int, assignment_id: int) -> Assignment:
        """
        Assignment visible to a caregiver: their own and not cancelled.

        Raises:
            NotFoundError: Otherwise
        """
        assignment = self.assignment_repo.get_by_id(assignment_id)
        if (not assignment or assignment.caregiver_id != caregiver_id
                or assignment.status == AssignmentStatus.CANCELLED):
            raise NotFoundError(f"Assignment {assignment_id} not found")
        return assignment

    def list_assignments(self, survey_id: Optional[int] = None,
                         status: Optional[AssignmentStatus] = None,
                         skip: int = 0, limit: int = 200) -> List[Assignment]:
        return self.assignment_repo.get_all(survey_id=survey_id, status=status,
                                            skip=skip, limit=limit)

    def pending_for_caregiver(self, caregiver_id: int) -> List[Assignment]:
        """Pending dynamic-survey assignments, earliest due first."""
        return self.assignment_repo.get_by_caregiver(
            caregiver_id, statuses=[AssignmentStatus.PENDING]
        )

    def cancel_assignment(self, assignment_id: int) -> Assignment:
        """
        Cancel a pending assignment; it disappears from caregiver lists.

        Raises:
            ConflictError: If the assignment is not pending
        """
        assignment = self.get_assignment(assignment_id)
        if assignment.status != AssignmentStatus.PENDING:
            raise ConflictError(
                f"Assignment {assignment_id} is {assignment.status.value} and cannot be cancelled"
            )
        assignment = self.assignment_repo.update_status(assignment, AssignmentStatus.CANCELLED)
        logger.info("Assignment %s cancelled", assignment_id)
        return assignment

    def link_check_in(self, check_in_id: int, survey_id: int,
                      assigned_by: Optional[int] = None) -> Assignment:
        """
        Answer a legacy check-in through a survey.

        Creates the assignment that stands for the check-in, due at the end
        of its week, and records the survey on the check-in.

        Raises:
            NotFoundError: If the check-in or survey does not exist
            ConflictError: If the check-in is completed or already linked
        """
        check_in = self.check_in_repo.get_by_id(check_in_id)
        if not check_in:
            raise NotFoundError(f"Check-in {check_in_id} not found")
        survey = self.survey_repo.get_by_id(survey_id, include_questions=False)
        if not survey:
            raise NotFoundError(f"Survey {survey_id} not found")
        if check_in.is_completed:
            raise ConflictError(f"Check-in {check_in_id} is already completed")
        if self.assignment_repo.get_by_check_in(check_in_id):
            raise ConflictError(f"Check-in {check_in_id} is already linked to a survey")

        check_in.survey_id = survey_id
        assignment = Assignment(
            survey_id=survey_id,
            caregiver_id=check_in.caregiver_id,
            patient_id=check_in.patient_id,
            check_in_id=check_in.id,
            due_at=check_in.week_end_date,
            status=AssignmentStatus.PENDING,
            assigned_by=assigned_by,
        )
        self.assignment_repo.create_many([assignment])
        logger.info("Check-in %s linked to survey %s as assignment %s",
                    check_in_id, survey_id, assignment.id)
        return assignment
