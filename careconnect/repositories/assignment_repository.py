"""Assignment repository."""
from typing import Optional, List
from sqlalchemy.orm import Session, joinedload

from careconnect.models.assignment import Assignment, AssignmentStatus
from careconnect.models.caregiver import Patient


class AssignmentRepository:
    """Assignment data access layer."""

    def __init__(self, db: Session):
        self.db = db

    def create_many(self, assignments: List[Assignment]) -> List[Assignment]:
        """Persist a batch of assignments in a single commit (all or nothing)."""
        try:
            self.db.add_all(assignments)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        for assignment in assignments:
            self.db.refresh(assignment)
        return assignments

    def get_by_id(self, assignment_id: int) -> Optional[Assignment]:
        """Get assignment by ID."""
        return self.db.query(Assignment)\
            .options(joinedload(Assignment.patient), joinedload(Assignment.survey))\
            .filter(Assignment.id == assignment_id)\
            .first()

    def get_all(self, survey_id: Optional[int] = None,
                status: Optional[AssignmentStatus] = None,
                skip: int = 0, limit: int = 200) -> List[Assignment]:
        """Get assignments (admin view)."""
        query = self.db.query(Assignment)
        if survey_id is not None:
            query = query.filter(Assignment.survey_id == survey_id)
        if status is not None:
            query = query.filter(Assignment.status == status)
        return query.order_by(Assignment.created_at.desc(), Assignment.id.desc())\
            .offset(skip).limit(limit).all()

    def get_by_caregiver(self, caregiver_id: int,
                         statuses: Optional[List[AssignmentStatus]] = None) -> List[Assignment]:
        """Get a caregiver's assignments with survey and patient loaded."""
        query = self.db.query(Assignment)\
            .options(joinedload(Assignment.survey), joinedload(Assignment.patient))\
            .filter(Assignment.caregiver_id == caregiver_id)
        if statuses:
            query = query.filter(Assignment.status.in_(statuses))
        return query.order_by(Assignment.due_at).all()

    def get_by_check_in(self, check_in_id: int) -> Optional[Assignment]:
        """Non-cancelled assignment standing for a legacy check-in."""
        return self.db.query(Assignment)\
            .filter(
                Assignment.check_in_id == check_in_id,
                Assignment.status != AssignmentStatus.CANCELLED,
            )\
            .first()

    def linked_check_in_ids(self, caregiver_id: int) -> List[int]:
        """Check-in ids represented by a non-cancelled assignment of this caregiver."""
        rows = self.db.query(Assignment.check_in_id)\
            .filter(
                Assignment.caregiver_id == caregiver_id,
                Assignment.check_in_id.isnot(None),
                Assignment.status != AssignmentStatus.CANCELLED,
            )\
            .all()
        return [row[0] for row in rows]

    def active_patients_for(self, caregiver_ids: List[int]) -> List[Patient]:
        """Active patients currently under any of the given caregivers."""
        if not caregiver_ids:
            return []
        return self.db.query(Patient)\
            .filter(Patient.caregiver_id.in_(caregiver_ids), Patient.is_active.is_(True))\
            .order_by(Patient.caregiver_id, Patient.id)\
            .all()

    def update_status(self, assignment: Assignment, status: AssignmentStatus) -> Assignment:
        """Update assignment status."""
        assignment.status = status
        self.db.commit()
        self.db.refresh(assignment)
        return assignment
