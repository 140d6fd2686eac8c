"""Legacy weekly check-in model."""
from sqlalchemy import Column, Integer, Boolean, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from careconnect.core.database import Base


class WeeklyCheckIn(Base):
    """
    Weekly check-in created by the scheduler for every caregiver × patient.

    Predates dynamic surveys; ``survey_id`` names the question set used to
    answer it when one has been linked.
    """

    __tablename__ = "weekly_check_ins"

    id = Column(Integer, primary_key=True, index=True)
    caregiver_id = Column(Integer, ForeignKey("caregivers.id", ondelete="CASCADE"), nullable=False, index=True)
    patient_id = Column(Integer, ForeignKey("patients.id", ondelete="CASCADE"), nullable=False, index=True)
    survey_id = Column(Integer, ForeignKey("surveys.id", ondelete="SET NULL"), nullable=True)
    week_start_date = Column(DateTime(timezone=True), nullable=False)
    week_end_date = Column(DateTime(timezone=True), nullable=False)
    is_completed = Column(Boolean, default=False, nullable=False)
    completed_at = Column(DateTime(timezone=True), nullable=True)
    reminders_sent = Column(Integer, default=0, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    caregiver = relationship("Caregiver")
    patient = relationship("Patient")
    survey = relationship("Survey")

    def __repr__(self):
        return f"<WeeklyCheckIn(id={self.id}, caregiver_id={self.caregiver_id}, patient_id={self.patient_id})>"
