"""Response repository."""
from typing import Optional, List, Dict
from sqlalchemy.orm import Session, selectinload
from sqlalchemy import func

from careconnect.models.response import SurveyResponse, ResponseItem
from careconnect.models.survey import Question


class ResponseRepository:
    """Survey response data access layer."""

    def __init__(self, db: Session):
        self.db = db

    def add_response(self, survey_id: int, caregiver_id: int, patient_id: Optional[int],
                     items: List[dict], meta: Optional[dict] = None,
                     assignment_id: Optional[int] = None,
                     check_in_id: Optional[int] = None) -> SurveyResponse:
        """
        Stage a response and its items in the session without committing.

        The caller commits together with the assignment/check-in status
        change so both land or neither does.
        """
        response = SurveyResponse(
            survey_id=survey_id,
            caregiver_id=caregiver_id,
            patient_id=patient_id,
            assignment_id=assignment_id,
            check_in_id=check_in_id,
            meta=meta,
        )
        response.items = [ResponseItem(**item) for item in items]
        self.db.add(response)
        return response

    def get_by_id(self, response_id: int) -> Optional[SurveyResponse]:
        """Get response by ID with items."""
        return self.db.query(SurveyResponse)\
            .options(selectinload(SurveyResponse.items))\
            .filter(SurveyResponse.id == response_id)\
            .first()

    def get_by_survey(self, survey_id: int, skip: int = 0, limit: int = 100) -> List[SurveyResponse]:
        """Get all responses for a survey, newest first."""
        return self.db.query(SurveyResponse)\
            .options(selectinload(SurveyResponse.items))\
            .filter(SurveyResponse.survey_id == survey_id)\
            .order_by(SurveyResponse.submitted_at.desc(), SurveyResponse.id.desc())\
            .offset(skip).limit(limit)\
            .all()

    def count_by_survey(self, survey_id: int) -> int:
        return self.db.query(SurveyResponse)\
            .filter(SurveyResponse.survey_id == survey_id)\
            .count()

    def get_latest_for_patient(self, caregiver_id: int, patient_id: int,
                               survey_id: Optional[int] = None) -> Optional[SurveyResponse]:
        """Most recent response a caregiver submitted for a patient."""
        query = self.db.query(SurveyResponse)\
            .options(selectinload(SurveyResponse.items))\
            .filter(
                SurveyResponse.caregiver_id == caregiver_id,
                SurveyResponse.patient_id == patient_id,
            )
        if survey_id is not None:
            query = query.filter(SurveyResponse.survey_id == survey_id)
        return query.order_by(SurveyResponse.submitted_at.desc(), SurveyResponse.id.desc()).first()

    def responses_by_assignment(self, assignment_ids: List[int]) -> Dict[int, int]:
        """Map assignment id → response id."""
        if not assignment_ids:
            return {}
        rows = self.db.query(SurveyResponse.assignment_id, SurveyResponse.id)\
            .filter(SurveyResponse.assignment_id.in_(assignment_ids))\
            .all()
        return {assignment_id: response_id for assignment_id, response_id in rows}

    def responses_by_check_in(self, check_in_ids: List[int]) -> Dict[int, int]:
        """Map check-in id → latest response id."""
        if not check_in_ids:
            return {}
        rows = self.db.query(SurveyResponse.check_in_id, func.max(SurveyResponse.id))\
            .filter(SurveyResponse.check_in_id.in_(check_in_ids))\
            .group_by(SurveyResponse.check_in_id)\
            .all()
        return {check_in_id: response_id for check_in_id, response_id in rows}

    def count_answered_required(self, response_ids: List[int]) -> Dict[int, int]:
        """Answered required questions per response id."""
        if not response_ids:
            return {}
        rows = self.db.query(ResponseItem.response_id, func.count(ResponseItem.id))\
            .join(Question, ResponseItem.question_id == Question.id)\
            .filter(ResponseItem.response_id.in_(response_ids), Question.required.is_(True))\
            .group_by(ResponseItem.response_id)\
            .all()
        counts = {response_id: 0 for response_id in response_ids}
        counts.update({response_id: count for response_id, count in rows})
        return counts
