"""Notification schemas."""
from typing import Optional, List
from datetime import datetime
from pydantic import BaseModel


class NotificationResponse(BaseModel):
    """Notice shown in the admin bell or a caregiver's inbox."""
    id: int
    caregiver_id: Optional[int] = None  # None: admin-wide
    type: str
    title: str
    message: str
    read: bool
    action_url: Optional[str] = None
    created_at: datetime

    model_config = {"from_attributes": True}


class NotificationListResponse(BaseModel):
    notifications: List[NotificationResponse]
    unread_count: int


class UnreadCountResponse(BaseModel):
    count: int


class MarkedReadResponse(BaseModel):
    updated: int
