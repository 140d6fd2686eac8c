"""Assignment models."""
from sqlalchemy import Column, Integer, DateTime, ForeignKey, Enum as SQLEnum
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from enum import Enum

from careconnect.core.database import Base


class AssignmentStatus(str, Enum):
    """Assignment status. ``pending -> completed`` happens only on submission."""
    PENDING = "pending"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class Assignment(Base):
    """
    Assignment model - this caregiver must answer this survey for this
    patient by ``due_at``.

    Flow:
      Admin  →  bulk-assigns survey to caregivers  →  one Assignment per caregiver × patient
      Caregiver  →  submits response  →  status: completed, completed_at stamped
      Admin  →  cancels  →  status: cancelled, hidden from caregiver lists
    """

    __tablename__ = "survey_assignments"

    id = Column(Integer, primary_key=True, index=True)
    survey_id = Column(Integer, ForeignKey("surveys.id", ondelete="CASCADE"), nullable=False, index=True)
    caregiver_id = Column(Integer, ForeignKey("caregivers.id", ondelete="CASCADE"), nullable=False, index=True)
    patient_id = Column(Integer, ForeignKey("patients.id", ondelete="CASCADE"), nullable=False, index=True)
    # Optional link to the legacy weekly check-in this assignment stands for
    check_in_id = Column(Integer, ForeignKey("weekly_check_ins.id", ondelete="SET NULL"), nullable=True, index=True)
    due_at = Column(DateTime(timezone=True), nullable=False)
    status = Column(
        SQLEnum(AssignmentStatus, values_callable=lambda x: [e.value for e in x]),
        default=AssignmentStatus.PENDING,
        nullable=False,
        index=True,
    )
    assigned_by = Column(Integer, nullable=True)  # Admin id from the auth service
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    completed_at = Column(DateTime(timezone=True), nullable=True)

    # Relationships
    survey = relationship("Survey", back_populates="assignments")
    caregiver = relationship("Caregiver")
    patient = relationship("Patient")
    check_in = relationship("WeeklyCheckIn")

    def __repr__(self):
        return f"<Assignment(id={self.id}, caregiver_id={self.caregiver_id}, survey_id={self.survey_id}, status={self.status})>"
