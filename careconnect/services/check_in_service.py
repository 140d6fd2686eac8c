"""Legacy weekly check-in service."""
import logging
from datetime import date, datetime, time, timedelta, timezone
from typing import List, Optional, Tuple
from sqlalchemy.orm import Session

from careconnect.core.config import settings
from careconnect.core.errors import NotFoundError
from careconnect.models.check_in import WeeklyCheckIn
from careconnect.repositories.caregiver_repository import CaregiverRepository, CheckInRepository
from careconnect.schemas.assignment import CheckInResponse
from careconnect.services.task_list import utc_date, utc_today

logger = logging.getLogger(__name__)


def week_bounds(today: date) -> Tuple[datetime, datetime]:
    """Monday 00:00 and Sunday 23:59:59 (UTC) of the week containing ``today``."""
    monday = today - timedelta(days=today.weekday())
    sunday = monday + timedelta(days=6)
    start = datetime.combine(monday, time.min, tzinfo=timezone.utc)
    end = datetime.combine(sunday, time(23, 59, 59), tzinfo=timezone.utc)
    return start, end


def to_check_in_response(check_in: WeeklyCheckIn, today: date) -> CheckInResponse:
    due_date = utc_date(check_in.week_end_date)
    if check_in.is_completed:
        status = "completed"
    elif due_date < today:
        status = "overdue"
    else:
        status = "pending"
    return CheckInResponse(
        id=check_in.id,
        patient_id=check_in.patient_id,
        patient_name=check_in.patient.name if check_in.patient else "",
        survey_id=check_in.survey_id,
        week_start_date=check_in.week_start_date,
        week_end_date=check_in.week_end_date,
        due_date=due_date,
        status=status,
        completed_at=check_in.completed_at,
    )


class CheckInService:
    """Weekly check-in scheduling and caregiver lists."""

    def __init__(self, db: Session):
        self.db = db
        self.repo = CheckInRepository(db)
        self.caregiver_repo = CaregiverRepository(db)

    def create_weekly_check_ins(self, today: Optional[date] = None,
                                survey_id: Optional[int] = None) -> List[WeeklyCheckIn]:
        """
        Create this week's check-in for every active caregiver × active patient.

        Pairs that already have a check-in for the week are skipped, so the
        job can run more than once a week. New check-ins are linked to
        ``survey_id`` (default ``WEEKLY_CHECKIN_SURVEY_ID``) when set.
        """
        week_start, week_end = week_bounds(today or utc_today())
        if survey_id is None:
            survey_id = settings.WEEKLY_CHECKIN_SURVEY_ID
        existing = self.repo.existing_pairs(week_start)
        check_ins = [
            WeeklyCheckIn(
                caregiver_id=caregiver_id,
                patient_id=patient_id,
                survey_id=survey_id,
                week_start_date=week_start,
                week_end_date=week_end,
            )
            for caregiver_id, patient_id in self.caregiver_repo.active_assignments()
            if (caregiver_id, patient_id) not in existing
        ]
        if check_ins:
            self.repo.create_many(check_ins)
        logger.info("Weekly check-ins for %s: %d created, %d already present",
                    week_start.date(), len(check_ins), len(existing))
        return check_ins

    def get_caregiver_check_in(self, caregiver_id: int, check_in_id: int) -> WeeklyCheckIn:
        """
        Raises:
            NotFoundError: If missing or owned by another caregiver
        """
        check_in = self.repo.get_by_id(check_in_id)
        if not check_in or check_in.caregiver_id != caregiver_id:
            raise NotFoundError(f"Check-in {check_in_id} not found")
        return check_in

    def pending(self, caregiver_id: int, today: Optional[date] = None) -> List[CheckInResponse]:
        today = today or utc_today()
        return [to_check_in_response(c, today)
                for c in self.repo.get_by_caregiver(caregiver_id, completed=False)]

    def completed(self, caregiver_id: int, today: Optional[date] = None) -> List[CheckInResponse]:
        today = today or utc_today()
        rows = self.repo.get_by_caregiver(caregiver_id, completed=True)
        rows.sort(key=lambda c: c.completed_at or c.week_end_date, reverse=True)
        return [to_check_in_response(c, today) for c in rows]
