"""Survey repository."""
from typing import Optional, List, Dict
from sqlalchemy.orm import Session, selectinload
from sqlalchemy import func

from careconnect.models.survey import Survey, SurveyStatus, Question, QuestionOption
from careconnect.models.response import ResponseItem


class SurveyRepository:
    """Survey data access layer."""

    def __init__(self, db: Session):
        self.db = db

    def create(self, title: str, description: Optional[str],
               created_by: Optional[int]) -> Survey:
        """Create a new draft survey."""
        survey = Survey(
            title=title,
            description=description,
            created_by=created_by,
            status=SurveyStatus.DRAFT,
            version=1,
        )
        self.db.add(survey)
        self.db.commit()
        self.db.refresh(survey)
        return survey

    def get_by_id(self, survey_id: int, include_questions: bool = True) -> Optional[Survey]:
        """Get survey by ID with optional questions and options."""
        query = self.db.query(Survey)

        if include_questions:
            query = query.options(
                selectinload(Survey.questions)
                .selectinload(Question.options)
            )

        return query.filter(Survey.id == survey_id).first()

    def get_all(self, skip: int = 0, limit: int = 100,
                status: Optional[SurveyStatus] = None) -> List[Survey]:
        """Get surveys, newest first."""
        query = self.db.query(Survey)

        if status is not None:
            query = query.filter(Survey.status == status)

        return query.order_by(Survey.created_at.desc(), Survey.id.desc()).offset(skip).limit(limit).all()

    def update(self, survey_id: int, **kwargs) -> Optional[Survey]:
        """Update survey fields."""
        survey = self.get_by_id(survey_id, include_questions=False)
        if not survey:
            return None

        for key, value in kwargs.items():
            if value is not None and hasattr(survey, key):
                setattr(survey, key, value)

        self.db.commit()
        self.db.refresh(survey)
        return survey

    def delete(self, survey: Survey) -> None:
        """Hard delete a survey; questions and options cascade."""
        self.db.delete(survey)
        self.db.commit()

    # Question operations
    def answered_question_ids(self, question_ids: List[int]) -> List[int]:
        """Question ids among ``question_ids`` that already have stored answers."""
        if not question_ids:
            return []
        rows = self.db.query(ResponseItem.question_id)\
            .filter(ResponseItem.question_id.in_(question_ids))\
            .distinct()\
            .all()
        return [row[0] for row in rows]

    def replace_questions(self, survey: Survey, questions: List[dict]) -> Survey:
        """
        Replace the question set of ``survey`` in one commit.

        Each entry is a dict of question fields plus ``options`` (list of
        ``{value, label}``) and an optional ``id``. Entries whose ``id``
        matches an existing question update it in place; the rest are
        inserted; existing questions not mentioned are deleted. Order
        indices follow list position, option order follows option position.
        """
        existing: Dict[int, Question] = {q.id: q for q in survey.questions}
        kept: List[Question] = []

        try:
            for position, data in enumerate(questions):
                question = existing.pop(data.get("id"), None) if data.get("id") else None
                if question is None:
                    question = Question(survey_id=survey.id)
                    self.db.add(question)
                question.text = data["text"]
                question.help_text = data.get("help_text")
                question.type = data["type"]
                question.required = data.get("required", False)
                question.validation = data.get("validation")
                question.order_index = position
                question.options = [
                    QuestionOption(value=o["value"], label=o["label"], order_index=i)
                    for i, o in enumerate(data.get("options") or [])
                ]
                kept.append(question)

            for stale in existing.values():
                self.db.delete(stale)

            survey.questions = kept
            survey.version = (survey.version or 0) + 1
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        self.db.expire(survey)
        return self.get_by_id(survey.id)

    def count_required_questions(self, survey_ids: List[int]) -> Dict[int, int]:
        """Required question count per survey id."""
        if not survey_ids:
            return {}
        rows = self.db.query(Question.survey_id, func.count(Question.id))\
            .filter(Question.survey_id.in_(survey_ids), Question.required.is_(True))\
            .group_by(Question.survey_id)\
            .all()
        counts = {survey_id: 0 for survey_id in survey_ids}
        counts.update({survey_id: count for survey_id, count in rows})
        return counts
