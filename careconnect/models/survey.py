"""Survey models."""
from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime, ForeignKey, Enum as SQLEnum, JSON
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from enum import Enum

from careconnect.core.database import Base


class QuestionType(str, Enum):
    """Question types supported by the survey engine."""
    TEXT = "text"
    NUMBER = "number"
    BOOLEAN = "boolean"
    DATE = "date"
    SINGLE_CHOICE = "single_choice"
    MULTI_CHOICE = "multi_choice"

    @property
    def is_choice(self) -> bool:
        return self in (QuestionType.SINGLE_CHOICE, QuestionType.MULTI_CHOICE)


class SurveyStatus(str, Enum):
    """Survey lifecycle."""
    DRAFT = "draft"
    PUBLISHED = "published"
    ARCHIVED = "archived"


class Survey(Base):
    """
    Survey model - an administrator-authored, ordered set of questions.

    ``version`` is bumped every time the question set is replaced so that
    editors can detect concurrent changes.
    """

    __tablename__ = "surveys"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(200), nullable=False, index=True)
    description = Column(Text, nullable=True)
    status = Column(
        SQLEnum(SurveyStatus, values_callable=lambda x: [e.value for e in x]),
        default=SurveyStatus.DRAFT,
        nullable=False,
    )
    version = Column(Integer, default=1, nullable=False)
    created_by = Column(Integer, nullable=True)  # Admin id from the auth service
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    questions = relationship(
        "Question",
        back_populates="survey",
        cascade="all, delete-orphan",
        order_by="Question.order_index",
    )
    assignments = relationship("Assignment", back_populates="survey")

    def __repr__(self):
        return f"<Survey(id={self.id}, title={self.title}, status={self.status})>"


class Question(Base):
    """Question model - belongs to a survey, rendered in ``order_index`` order."""

    __tablename__ = "survey_questions"

    id = Column(Integer, primary_key=True, index=True)
    survey_id = Column(Integer, ForeignKey("surveys.id", ondelete="CASCADE"), nullable=False, index=True)
    text = Column(Text, nullable=False)
    help_text = Column(Text, nullable=True)
    type = Column(
        SQLEnum(QuestionType, values_callable=lambda x: [e.value for e in x]),
        nullable=False,
    )
    required = Column(Boolean, default=False, nullable=False)
    order_index = Column(Integer, nullable=False)
    validation = Column(JSON, nullable=True)  # {minLength, maxLength, min, max}

    # Relationships
    survey = relationship("Survey", back_populates="questions")
    options = relationship(
        "QuestionOption",
        back_populates="question",
        cascade="all, delete-orphan",
        order_by="QuestionOption.order_index",
    )

    def __repr__(self):
        return f"<Question(id={self.id}, type={self.type}, text={self.text[:30]})>"


class QuestionOption(Base):
    """Answer options for choice-based questions."""

    __tablename__ = "survey_options"

    id = Column(Integer, primary_key=True, index=True)
    question_id = Column(Integer, ForeignKey("survey_questions.id", ondelete="CASCADE"), nullable=False, index=True)
    value = Column(String, nullable=False)   # Submitted token
    label = Column(String, nullable=False)   # Display text
    order_index = Column(Integer, nullable=False)

    # Relationships
    question = relationship("Question", back_populates="options")

    def __repr__(self):
        return f"<QuestionOption(id={self.id}, value={self.value})>"
