"""Caregiver, patient and weekly check-in repository."""
from datetime import datetime
from typing import Optional, List, Set, Tuple
from sqlalchemy.orm import Session, joinedload

from careconnect.models.caregiver import Caregiver, Patient
from careconnect.models.check_in import WeeklyCheckIn


class CaregiverRepository:
    """Caregiver data access layer."""

    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, caregiver_id: int) -> Optional[Caregiver]:
        return self.db.query(Caregiver).filter(Caregiver.id == caregiver_id).first()

    def get_many(self, caregiver_ids: List[int]) -> List[Caregiver]:
        """Caregivers among ``caregiver_ids`` that exist."""
        if not caregiver_ids:
            return []
        return self.db.query(Caregiver).filter(Caregiver.id.in_(caregiver_ids)).all()

    def get_patient(self, patient_id: int) -> Optional[Patient]:
        return self.db.query(Patient).filter(Patient.id == patient_id).first()

    def active_assignments(self) -> List[Tuple[int, int]]:
        """(caregiver_id, patient_id) for every active patient with an active caregiver."""
        rows = self.db.query(Patient.caregiver_id, Patient.id)\
            .join(Caregiver, Patient.caregiver_id == Caregiver.id)\
            .filter(Patient.is_active.is_(True), Caregiver.is_active.is_(True))\
            .order_by(Patient.caregiver_id, Patient.id)\
            .all()
        return [(caregiver_id, patient_id) for caregiver_id, patient_id in rows]


class CheckInRepository:
    """Weekly check-in data access layer."""

    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, check_in_id: int) -> Optional[WeeklyCheckIn]:
        return self.db.query(WeeklyCheckIn)\
            .options(joinedload(WeeklyCheckIn.patient), joinedload(WeeklyCheckIn.survey))\
            .filter(WeeklyCheckIn.id == check_in_id)\
            .first()

    def get_by_caregiver(self, caregiver_id: int,
                         completed: Optional[bool] = None) -> List[WeeklyCheckIn]:
        """A caregiver's check-ins, oldest week first."""
        query = self.db.query(WeeklyCheckIn)\
            .options(joinedload(WeeklyCheckIn.patient), joinedload(WeeklyCheckIn.survey))\
            .filter(WeeklyCheckIn.caregiver_id == caregiver_id)
        if completed is not None:
            query = query.filter(WeeklyCheckIn.is_completed.is_(completed))
        return query.order_by(WeeklyCheckIn.week_end_date, WeeklyCheckIn.id).all()

    def existing_pairs(self, week_start: datetime) -> Set[Tuple[int, int]]:
        """(caregiver_id, patient_id) pairs that already have a check-in for the week."""
        rows = self.db.query(WeeklyCheckIn.caregiver_id, WeeklyCheckIn.patient_id)\
            .filter(WeeklyCheckIn.week_start_date == week_start)\
            .all()
        return {(caregiver_id, patient_id) for caregiver_id, patient_id in rows}

    def create_many(self, check_ins: List[WeeklyCheckIn]) -> List[WeeklyCheckIn]:
        try:
            self.db.add_all(check_ins)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        return check_ins
