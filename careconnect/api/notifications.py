"""Notification routers.

Admins see admin-wide notices (``caregiver_id`` unset); each caregiver sees
only notices addressed to them.
"""
from typing import Annotated, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from careconnect.core.database import get_db
from careconnect.services.notification_service import NotificationService
from careconnect.schemas.notification import (
    MarkedReadResponse,
    NotificationListResponse,
    NotificationResponse,
    UnreadCountResponse,
)
from careconnect.api.dependencies import AdminUser, CaregiverUser

router = APIRouter(prefix="/admin/notifications", tags=["Admin - Notifications"])
caregiver_router = APIRouter(prefix="/caregiver/notifications", tags=["Caregiver"])


def _inbox(service: NotificationService, caregiver_id: Optional[int],
           skip: int, limit: int, unread_only: bool) -> NotificationListResponse:
    return NotificationListResponse(
        notifications=service.get_notifications(
            skip=skip, limit=limit, unread_only=unread_only, caregiver_id=caregiver_id
        ),
        unread_count=service.get_unread_count(caregiver_id=caregiver_id),
    )


@router.get("", response_model=NotificationListResponse)
def list_notifications(
    db: Annotated[Session, Depends(get_db)],
    current_user: AdminUser,
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=100),
    unread_only: bool = Query(False),
):
    """Admin-wide notifications with unread count (Admin only)."""
    return _inbox(NotificationService(db), None, skip, limit, unread_only)


@router.get("/unread-count", response_model=UnreadCountResponse)
def get_unread_count(
    db: Annotated[Session, Depends(get_db)],
    current_user: AdminUser,
):
    """Unread count for the polling badge (Admin only)."""
    return UnreadCountResponse(count=NotificationService(db).get_unread_count())


# Registered before /{notification_id}/read so "read-all" is not taken for an id
@router.patch("/read-all", response_model=MarkedReadResponse)
def mark_all_read(
    db: Annotated[Session, Depends(get_db)],
    current_user: AdminUser,
):
    return MarkedReadResponse(updated=NotificationService(db).mark_all_read())


@router.patch("/{notification_id}/read", response_model=NotificationResponse)
def mark_read(
    notification_id: int,
    db: Annotated[Session, Depends(get_db)],
    current_user: AdminUser,
):
    return NotificationService(db).mark_read(notification_id)


@router.delete("/{notification_id}", status_code=204)
def delete_notification(
    notification_id: int,
    db: Annotated[Session, Depends(get_db)],
    current_user: AdminUser,
):
    """Delete an admin-wide notification (Admin only)."""
    NotificationService(db).delete_notification(notification_id)


@caregiver_router.get("", response_model=NotificationListResponse)
def list_my_notifications(
    db: Annotated[Session, Depends(get_db)],
    caregiver: CaregiverUser,
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=100),
    unread_only: bool = Query(False),
):
    """Notifications addressed to the calling caregiver."""
    return _inbox(NotificationService(db), caregiver.id, skip, limit, unread_only)


@caregiver_router.patch("/read-all", response_model=MarkedReadResponse)
def mark_all_my_notifications_read(
    db: Annotated[Session, Depends(get_db)],
    caregiver: CaregiverUser,
):
    return MarkedReadResponse(updated=NotificationService(db).mark_all_read(caregiver_id=caregiver.id))


@caregiver_router.patch("/{notification_id}/read", response_model=NotificationResponse)
def mark_my_notification_read(
    notification_id: int,
    db: Annotated[Session, Depends(get_db)],
    caregiver: CaregiverUser,
):
    """Mark one of the caller's notifications as read; others' are not found."""
    return NotificationService(db).mark_read(notification_id, caregiver_id=caregiver.id)
