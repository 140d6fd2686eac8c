"""Notification model."""
from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from careconnect.core.database import Base


class Notification(Base):
    """Notification model. caregiver_id=None means global (admin-wide) notification."""
    __tablename__ = "notifications"

    id           = Column(Integer, primary_key=True, index=True)
    caregiver_id = Column(Integer, ForeignKey("caregivers.id", ondelete="CASCADE"), nullable=True, index=True)
    type         = Column(String(50), nullable=False)          # assignments_created, survey_assigned, survey_published
    title        = Column(String(255), nullable=False)
    message      = Column(Text, nullable=False)
    read         = Column(Boolean, default=False, nullable=False)
    action_url   = Column(String(255), nullable=True)          # "/caregiver/assignments" etc.
    created_at   = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    caregiver = relationship("Caregiver", foreign_keys=[caregiver_id])
