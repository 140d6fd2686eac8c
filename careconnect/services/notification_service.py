"""Notification service."""
from typing import Iterable, List, Optional
from sqlalchemy.orm import Session

from careconnect.core.errors import NotFoundError
from careconnect.repositories.notification_repository import NotificationRepository
from careconnect.models.notification import Notification


class NotificationService:
    """Notification business logic."""

    def __init__(self, db: Session):
        self.db = db
        self.repo = NotificationRepository(db)

    # ------------------------------------------------------------------
    # Factory helpers, called from other services to emit notifications
    # ------------------------------------------------------------------

    def notify_assignments_created(self, survey_title: str, survey_id: int,
                                   created: int, caregiver_ids: Iterable[int]) -> int:
        """One admin-wide summary plus one notice per caregiver that got work."""
        notifications = [
            Notification(
                type="assignments_created",
                title="Survey assigned",
                message=f'{created} assignment(s) created for "{survey_title}".',
                action_url=f"/admin/assignments?survey_id={survey_id}",
            )
        ]
        for caregiver_id in sorted(set(caregiver_ids)):
            notifications.append(
                Notification(
                    caregiver_id=caregiver_id,
                    type="survey_assigned",
                    title="New survey to complete",
                    message=f'You have been asked to complete "{survey_title}".',
                    action_url="/caregiver/assignments",
                )
            )
        return self.repo.create_many(notifications)

    def notify_survey_published(self, survey_title: str, survey_id: int) -> Notification:
        return self.repo.create(
            type="survey_published",
            title="Survey published",
            message=f'"{survey_title}" is now published.',
            action_url=f"/admin/surveys/{survey_id}",
        )

    # ------------------------------------------------------------------
    # Read / manage notifications (used by API endpoints)
    # ------------------------------------------------------------------

    def get_notifications(
        self,
        skip: int = 0,
        limit: int = 50,
        unread_only: bool = False,
        caregiver_id: Optional[int] = None,
    ) -> List[Notification]:
        return self.repo.get_all(skip=skip, limit=limit, unread_only=unread_only,
                                 caregiver_id=caregiver_id)

    def get_unread_count(self, caregiver_id: Optional[int] = None) -> int:
        return self.repo.get_unread_count(caregiver_id=caregiver_id)

    def _get(self, notification_id: int, caregiver_id: Optional[int]) -> Notification:
        notification = self.repo.get_by_id(notification_id)
        if not notification or notification.caregiver_id != caregiver_id:
            raise NotFoundError("Notification not found")
        return notification

    def mark_read(self, notification_id: int, caregiver_id: Optional[int] = None) -> Notification:
        return self.repo.mark_read(self._get(notification_id, caregiver_id))

    def mark_all_read(self, caregiver_id: Optional[int] = None) -> int:
        return self.repo.mark_all_read(caregiver_id=caregiver_id)

    def delete_notification(self, notification_id: int) -> None:
        self.repo.delete(self._get(notification_id, None))
