"""Survey service."""
import logging
from typing import List, Optional
from sqlalchemy.orm import Session

from careconnect.core.config import settings
from careconnect.core.errors import ConflictError, NotFoundError, ValidationError
from careconnect.repositories.survey_repository import SurveyRepository
from careconnect.repositories.response_repository import ResponseRepository
from careconnect.services.notification_service import NotificationService
from careconnect.models.survey import Survey, SurveyStatus
from careconnect.schemas.survey import QuestionCreate, SurveyUpdate

logger = logging.getLogger(__name__)


class SurveyService:
    """Survey business logic."""

    def __init__(self, db: Session):
        self.db = db
        self.survey_repo = SurveyRepository(db)
        self.response_repo = ResponseRepository(db)
        self.notifications = NotificationService(db)

    @staticmethod
    def _clean_title(title: Optional[str]) -> str:
        cleaned = (title or "").strip()
        if not cleaned:
            raise ValidationError("Survey title is required")
        if len(cleaned) > settings.SURVEY_TITLE_MAX_LENGTH:
            raise ValidationError(
                f"Survey title cannot exceed {settings.SURVEY_TITLE_MAX_LENGTH} characters"
            )
        return cleaned

    def create_survey(self, title: str, description: Optional[str] = None,
                      created_by: Optional[int] = None) -> Survey:
        """
        Create a new draft survey with no questions.

        Raises:
            ValidationError: If the title is empty or too long
        """
        survey = self.survey_repo.create(
            title=self._clean_title(title),
            description=description,
            created_by=created_by,
        )
        logger.info("Survey %s created: %r", survey.id, survey.title)
        return survey

    def get_survey(self, survey_id: int) -> Survey:
        """
        Get survey by ID with questions sorted by order_index.

        Raises:
            NotFoundError: If survey not found
        """
        survey = self.survey_repo.get_by_id(survey_id)
        if not survey:
            raise NotFoundError(f"Survey {survey_id} not found")
        return survey

    def get_surveys(self, skip: int = 0, limit: int = 100,
                    status: Optional[SurveyStatus] = None) -> List[Survey]:
        """Get list of surveys."""
        return self.survey_repo.get_all(skip=skip, limit=limit, status=status)

    def update_survey(self, survey_id: int, survey_data: SurveyUpdate) -> Survey:
        """Update title/description."""
        self.get_survey(survey_id)
        kwargs: dict = {}
        if survey_data.title is not None:
            kwargs["title"] = self._clean_title(survey_data.title)
        if survey_data.description is not None:
            kwargs["description"] = survey_data.description
        if kwargs:
            self.survey_repo.update(survey_id, **kwargs)
        return self.get_survey(survey_id)

    def save_questions(self, survey_id: int, questions: List[QuestionCreate],
                       expected_version: Optional[int] = None) -> Survey:
        """
        Replace the full question set of a survey.

        Order indices follow list position. Questions that keep their ``id``
        keep their identity (and their stored answers); questions that are
        dropped may not have answers yet.

        Raises:
            NotFoundError: If survey not found
            ConflictError: If ``expected_version`` is stale, or a dropped
                question already has answers
            ValidationError: If a kept ``id`` belongs to another survey
        """
        survey = self.get_survey(survey_id)

        if expected_version is not None and expected_version != survey.version:
            raise ConflictError(
                f"Survey {survey_id} was modified (version {survey.version}, expected {expected_version})",
                current_version=survey.version,
            )

        existing_ids = {q.id for q in survey.questions}
        submitted_ids = [q.id for q in questions if q.id is not None]
        unknown = [qid for qid in submitted_ids if qid not in existing_ids]
        if unknown:
            raise ValidationError(f"Questions {unknown} do not belong to survey {survey_id}")
        if len(submitted_ids) != len(set(submitted_ids)):
            raise ValidationError("A question id appears more than once")

        dropped = sorted(existing_ids - set(submitted_ids))
        answered = self.survey_repo.answered_question_ids(dropped)
        if answered:
            raise ConflictError(
                f"Questions {sorted(answered)} already have responses and cannot be removed"
            )

        payload = [
            {
                "id": q.id,
                "text": q.text,
                "help_text": q.help_text,
                "type": q.type,
                "required": q.required,
                "validation": q.validation.to_storage() if q.validation else None,
                "options": [{"value": o.value, "label": o.label} for o in q.options],
            }
            for q in questions
        ]
        result = self.survey_repo.replace_questions(survey, payload)
        logger.info(
            "Survey %s questions replaced: %d questions, version %s",
            survey_id, len(payload), result.version,
        )
        return result

    def publish_survey(self, survey_id: int) -> Survey:
        """
        Publish a survey.

        Raises:
            ConflictError: If archived or without questions
        """
        survey = self.get_survey(survey_id)
        if survey.status == SurveyStatus.ARCHIVED:
            raise ConflictError("Archived surveys cannot be published")
        if not survey.questions:
            raise ConflictError("Cannot publish a survey without questions")
        self.survey_repo.update(survey_id, status=SurveyStatus.PUBLISHED)
        logger.info("Survey %s published", survey_id)
        try:
            self.notifications.notify_survey_published(survey.title, survey_id)
        except Exception:
            self.db.rollback()
            logger.exception("Could not record publish notification for survey %s", survey_id)
        return self.get_survey(survey_id)

    def archive_survey(self, survey_id: int) -> Survey:
        """Archive a survey. Existing assignments stay answerable."""
        self.get_survey(survey_id)
        self.survey_repo.update(survey_id, status=SurveyStatus.ARCHIVED)
        logger.info("Survey %s archived", survey_id)
        return self.get_survey(survey_id)

    def delete_survey(self, survey_id: int) -> None:
        """
        Discard a draft survey together with its questions and options.

        Raises:
            ConflictError: If the survey is not a draft or is referenced
        """
        survey = self.get_survey(survey_id)
        if survey.status != SurveyStatus.DRAFT:
            raise ConflictError("Only draft surveys can be deleted")
        if survey.assignments or self.response_repo.count_by_survey(survey_id):
            raise ConflictError("Survey has assignments or responses and cannot be deleted")
        self.survey_repo.delete(survey)
        logger.info("Survey %s deleted", survey_id)
