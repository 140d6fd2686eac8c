"""Unified caregiver task list.

Legacy weekly check-ins and dynamic survey assignments are two different
records that caregivers see as one list. Each is wrapped in its own task
type; both project onto ``UnifiedAssignmentItem`` the same way, and the
list is ordered by priority band, then due date.
"""
import logging
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import List, Optional, Union
from sqlalchemy.orm import Session

from careconnect.models.assignment import Assignment, AssignmentStatus
from careconnect.models.check_in import WeeklyCheckIn
from careconnect.repositories.assignment_repository import AssignmentRepository
from careconnect.repositories.caregiver_repository import CheckInRepository
from careconnect.repositories.response_repository import ResponseRepository
from careconnect.repositories.survey_repository import SurveyRepository
from careconnect.schemas.assignment import UnifiedAssignmentItem

logger = logging.getLogger(__name__)

PRIORITY_OVERDUE = 3
PRIORITY_DUE_TODAY = 2
PRIORITY_UPCOMING = 1
PRIORITY_COMPLETED = 0

CHECK_IN_TITLE = "Weekly Check-In"


def utc_today() -> date:
    return datetime.now(timezone.utc).date()


def utc_date(moment: datetime) -> date:
    """UTC calendar date of a stored timestamp; naive values are already UTC."""
    if moment.tzinfo is not None:
        moment = moment.astimezone(timezone.utc)
    return moment.date()


def priority_for(due_date: date, today: date, completed: bool = False) -> int:
    """Priority band of a task; compares calendar dates only."""
    if completed:
        return PRIORITY_COMPLETED
    if due_date < today:
        return PRIORITY_OVERDUE
    if due_date == today:
        return PRIORITY_DUE_TODAY
    return PRIORITY_UPCOMING


def status_for(priority: int) -> str:
    if priority == PRIORITY_COMPLETED:
        return "completed"
    if priority == PRIORITY_OVERDUE:
        return "overdue"
    return "pending"


@dataclass(frozen=True)
class Progress:
    current: int = 0
    total: int = 0


@dataclass(frozen=True)
class LegacyCheckInTask:
    check_in: WeeklyCheckIn
    progress: Progress

    @property
    def due_date(self) -> date:
        return utc_date(self.check_in.week_end_date)

    @property
    def completed(self) -> bool:
        return bool(self.check_in.is_completed)

    def project(self, today: date) -> UnifiedAssignmentItem:
        check_in = self.check_in
        priority = priority_for(self.due_date, today, self.completed)
        survey = check_in.survey
        return UnifiedAssignmentItem(
            id=check_in.id,
            type="weekly_checkin",
            patient_id=check_in.patient_id,
            patient_name=check_in.patient.name if check_in.patient else "",
            title=survey.title if survey else CHECK_IN_TITLE,
            description=survey.description if survey else None,
            due_date=self.due_date,
            status=status_for(priority),
            completed_at=check_in.completed_at,
            survey_id=check_in.survey_id,
            assignment_id=None,
            check_in_id=check_in.id,
            priority=priority,
            progress_current=self.progress.current,
            progress_total=self.progress.total,
        )


@dataclass(frozen=True)
class DynamicSurveyTask:
    assignment: Assignment
    progress: Progress

    @property
    def due_date(self) -> date:
        return utc_date(self.assignment.due_at)

    @property
    def completed(self) -> bool:
        return self.assignment.status == AssignmentStatus.COMPLETED

    def project(self, today: date) -> UnifiedAssignmentItem:
        assignment = self.assignment
        priority = priority_for(self.due_date, today, self.completed)
        return UnifiedAssignmentItem(
            id=assignment.id,
            type="dynamic_survey",
            patient_id=assignment.patient_id,
            patient_name=assignment.patient.name if assignment.patient else "",
            title=assignment.survey.title,
            description=assignment.survey.description,
            due_date=self.due_date,
            status=status_for(priority),
            completed_at=assignment.completed_at,
            survey_id=assignment.survey_id,
            assignment_id=assignment.id,
            check_in_id=assignment.check_in_id,
            priority=priority,
            progress_current=self.progress.current,
            progress_total=self.progress.total,
        )


Task = Union[LegacyCheckInTask, DynamicSurveyTask]


def order_tasks(items: List[UnifiedAssignmentItem]) -> List[UnifiedAssignmentItem]:
    """Priority descending, then due date ascending within a band."""
    return sorted(items, key=lambda item: (-item.priority, item.due_date, item.id))


class TaskListService:
    """Builds the merged, prioritized task list for one caregiver."""

    def __init__(self, db: Session):
        self.db = db
        self.assignment_repo = AssignmentRepository(db)
        self.check_in_repo = CheckInRepository(db)
        self.response_repo = ResponseRepository(db)
        self.survey_repo = SurveyRepository(db)

    def gather(self, caregiver_id: int, include_completed: bool = False) -> List[Task]:
        """
        Collect a caregiver's tasks.

        Cancelled assignments never appear. A check-in that is represented by
        a (non-cancelled) assignment is shown only through that assignment.
        Progress is computed from stored responses on every call.
        """
        statuses = [AssignmentStatus.PENDING]
        if include_completed:
            statuses.append(AssignmentStatus.COMPLETED)
        assignments = self.assignment_repo.get_by_caregiver(caregiver_id, statuses=statuses)

        linked = set(self.assignment_repo.linked_check_in_ids(caregiver_id))
        check_ins = [
            c for c in self.check_in_repo.get_by_caregiver(
                caregiver_id, completed=None if include_completed else False
            )
            if c.id not in linked
        ]

        survey_ids = {a.survey_id for a in assignments}
        survey_ids.update(c.survey_id for c in check_ins if c.survey_id)
        totals = self.survey_repo.count_required_questions(sorted(survey_ids))

        by_assignment = self.response_repo.responses_by_assignment([a.id for a in assignments])
        by_check_in = self.response_repo.responses_by_check_in([c.id for c in check_ins])
        answered = self.response_repo.count_answered_required(
            sorted(set(by_assignment.values()) | set(by_check_in.values()))
        )

        tasks: List[Task] = []
        for check_in in check_ins:
            response_id = by_check_in.get(check_in.id)
            tasks.append(LegacyCheckInTask(
                check_in=check_in,
                progress=Progress(
                    current=answered.get(response_id, 0) if response_id else 0,
                    total=totals.get(check_in.survey_id, 0) if check_in.survey_id else 0,
                ),
            ))
        for assignment in assignments:
            response_id = by_assignment.get(assignment.id)
            tasks.append(DynamicSurveyTask(
                assignment=assignment,
                progress=Progress(
                    current=answered.get(response_id, 0) if response_id else 0,
                    total=totals.get(assignment.survey_id, 0),
                ),
            ))
        return tasks

    def unified_view(self, caregiver_id: int, include_completed: bool = False,
                     today: Optional[date] = None) -> List[UnifiedAssignmentItem]:
        today = today or utc_today()
        tasks = self.gather(caregiver_id, include_completed=include_completed)
        items = order_tasks([task.project(today) for task in tasks])
        logger.debug("Task list for caregiver %s: %d items", caregiver_id, len(items))
        return items
