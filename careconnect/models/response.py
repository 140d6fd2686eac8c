"""Survey response models."""
from sqlalchemy import Column, Integer, String, Text, Boolean, Date, DateTime, Float, ForeignKey, JSON, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from careconnect.core.database import Base


class SurveyResponse(Base):
    """
    Survey response model - permanent audit record of one submission.
    Tied to either an assignment or a legacy check-in.
    """

    __tablename__ = "survey_responses"

    id = Column(Integer, primary_key=True, index=True)
    survey_id = Column(Integer, ForeignKey("surveys.id", ondelete="RESTRICT"), nullable=False, index=True)
    assignment_id = Column(Integer, ForeignKey("survey_assignments.id", ondelete="SET NULL"), nullable=True, unique=True)
    # One response per check-in, whether answered directly or through its assignment
    check_in_id = Column(Integer, ForeignKey("weekly_check_ins.id", ondelete="SET NULL"), nullable=True, unique=True, index=True)
    caregiver_id = Column(Integer, ForeignKey("caregivers.id", ondelete="CASCADE"), nullable=False, index=True)
    patient_id = Column(Integer, ForeignKey("patients.id", ondelete="SET NULL"), nullable=True, index=True)
    submitted_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    # Opaque caller context: submittedAt, patient name, device info...
    meta = Column(JSON, nullable=True)

    # Relationships
    items = relationship("ResponseItem", back_populates="response", cascade="all, delete-orphan")
    survey = relationship("Survey")

    def __repr__(self):
        return f"<SurveyResponse(id={self.id}, survey_id={self.survey_id}, caregiver_id={self.caregiver_id})>"


class ResponseItem(Base):
    """
    One answered question within a response.

    ``answer`` holds the canonical wire form; the typed columns duplicate it
    for filtering and indexing.
    """

    __tablename__ = "survey_response_items"
    __table_args__ = (
        UniqueConstraint("response_id", "question_id", name="uq_response_items_question"),
    )

    id = Column(Integer, primary_key=True, index=True)
    response_id = Column(Integer, ForeignKey("survey_responses.id", ondelete="CASCADE"), nullable=False, index=True)
    question_id = Column(Integer, ForeignKey("survey_questions.id", ondelete="RESTRICT"), nullable=False, index=True)

    answer = Column(JSON, nullable=False)
    answer_text = Column(Text, nullable=True)
    answer_number = Column(Float, nullable=True)
    answer_boolean = Column(Boolean, nullable=True)
    answer_date = Column(Date, nullable=True)
    answer_kind = Column(String(20), nullable=False)  # text, number, boolean, date, choices

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    # Relationships
    response = relationship("SurveyResponse", back_populates="items")
    question = relationship("Question")

    def __repr__(self):
        return f"<ResponseItem(id={self.id}, question_id={self.question_id})>"
