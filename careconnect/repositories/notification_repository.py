"""Notification repository."""
from typing import List, Optional
from sqlalchemy.orm import Session

from careconnect.models.notification import Notification


class NotificationRepository:
    """Notification data access layer."""

    def __init__(self, db: Session):
        self.db = db

    def create(
        self,
        type: str,
        title: str,
        message: str,
        action_url: Optional[str] = None,
        caregiver_id: Optional[int] = None,
    ) -> Notification:
        """Create a new notification. caregiver_id=None = global (admin-wide)."""
        notification = Notification(
            type=type,
            title=title,
            message=message,
            action_url=action_url,
            caregiver_id=caregiver_id,
        )
        self.db.add(notification)
        self.db.commit()
        self.db.refresh(notification)
        return notification

    def create_many(self, notifications: List[Notification]) -> int:
        """Insert a batch of notifications in one commit."""
        self.db.add_all(notifications)
        self.db.commit()
        return len(notifications)

    def _scoped(self, caregiver_id: Optional[int]):
        query = self.db.query(Notification)
        if caregiver_id is not None:
            return query.filter(Notification.caregiver_id == caregiver_id)
        return query.filter(Notification.caregiver_id == None)  # noqa: E711

    def get_all(self, skip: int = 0, limit: int = 50, unread_only: bool = False,
                caregiver_id: Optional[int] = None) -> List[Notification]:
        """Get notifications ordered by newest first. Filters by caregiver_id if provided, else global."""
        query = self._scoped(caregiver_id)
        if unread_only:
            query = query.filter(Notification.read == False)  # noqa: E712
        return (
            query.order_by(Notification.created_at.desc(), Notification.id.desc())
            .offset(skip)
            .limit(limit)
            .all()
        )

    def get_unread_count(self, caregiver_id: Optional[int] = None) -> int:
        """Count unread notifications. Filters by caregiver_id if provided, else global."""
        return self._scoped(caregiver_id).filter(Notification.read == False).count()  # noqa: E712

    def get_by_id(self, notification_id: int) -> Optional[Notification]:
        return self.db.query(Notification).filter(Notification.id == notification_id).first()

    def mark_read(self, notification: Notification) -> Notification:
        """Mark a single notification as read."""
        notification.read = True
        self.db.commit()
        self.db.refresh(notification)
        return notification

    def mark_all_read(self, caregiver_id: Optional[int] = None) -> int:
        """Mark all unread notifications in scope as read. Returns number updated."""
        count = (
            self._scoped(caregiver_id)
            .filter(Notification.read == False)  # noqa: E712
            .update({"read": True}, synchronize_session=False)
        )
        self.db.commit()
        return count

    def delete(self, notification: Notification) -> None:
        """Delete a notification."""
        self.db.delete(notification)
        self.db.commit()
