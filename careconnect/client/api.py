"""Caregiver API client."""
import logging
from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import urlencode

import httpx

from careconnect.client.cache import TaskListCache
from careconnect.forms.renderer import SurveyForm
from careconnect.schemas.assignment import (
    AssignmentDetailResponse,
    AssignmentResponse,
    CheckInResponse,
    UnifiedAssignmentItem,
)

logger = logging.getLogger(__name__)


class CaregiverClient:
    """
    Reads a caregiver's task lists and survey forms.

    List responses are cached until a submission (or an explicit
    ``refresh``) invalidates them.
    """

    def __init__(self, http: httpx.Client, cache: Optional[TaskListCache] = None):
        self.http = http
        self.cache = cache if cache is not None else TaskListCache()

    @classmethod
    def connect(cls, base_url: str, token: str, timeout: Optional[float] = None) -> "CaregiverClient":
        """Client with a bearer token and a bounded timeout."""
        if timeout is None:
            from careconnect.core.config import settings
            timeout = settings.CLIENT_TIMEOUT_SECONDS
        http = httpx.Client(
            base_url=base_url,
            headers={"Authorization": f"Bearer {token}"},
            timeout=httpx.Timeout(timeout),
        )
        return cls(http)

    def close(self) -> None:
        self.http.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()

    @staticmethod
    def _key(path: str, params: Optional[Dict[str, Any]]) -> str:
        query = {k: v for k, v in (params or {}).items() if v is not None}
        return f"{path}?{urlencode(sorted(query.items()))}" if query else path

    def _get_json(self, path: str, params: Optional[Dict[str, Any]] = None,
                  cached: bool = True) -> Any:
        key = self._key(path, params)
        if cached:
            hit = self.cache.get(key)
            if hit is not None:
                return hit
        response = self.http.get(path, params={k: v for k, v in (params or {}).items() if v is not None})
        response.raise_for_status()
        data = response.json()
        if cached:
            self.cache.set(key, data)
        return data

    def unified_tasks(self, include_completed: bool = False) -> List[UnifiedAssignmentItem]:
        data = self._get_json(
            "/caregiver/assignments/unified",
            {"include_completed": "true" if include_completed else "false"},
        )
        return [UnifiedAssignmentItem.model_validate(item) for item in data]

    def pending_surveys(self) -> List[AssignmentResponse]:
        data = self._get_json("/caregiver/surveys/pending")
        return [AssignmentResponse.model_validate(item) for item in data]

    def pending_check_ins(self) -> List[CheckInResponse]:
        data = self._get_json("/caregiver/checkins/pending")
        return [CheckInResponse.model_validate(item) for item in data]

    def completed_check_ins(self) -> List[CheckInResponse]:
        data = self._get_json("/caregiver/checkins/completed")
        return [CheckInResponse.model_validate(item) for item in data]

    def assignment_form(self, assignment_id: int) -> Tuple[AssignmentDetailResponse, SurveyForm]:
        """Assignment detail plus a fresh form for its survey."""
        data = self._get_json(f"/caregiver/surveys/{assignment_id}", cached=False)
        detail = AssignmentDetailResponse.model_validate(data)
        return detail, SurveyForm.for_survey(detail.survey)

    def previous_answers(self, patient_id: int,
                         survey_id: Optional[int] = None) -> Optional[Dict[str, Any]]:
        """Last submitted answers for a patient (wire form), or None if there are none."""
        try:
            data = self._get_json(
                f"/caregiver/patients/{patient_id}/previous-response",
                {"survey_id": survey_id},
            )
        except httpx.HTTPStatusError as exc:
            if exc.response.status_code == 404:
                return None
            raise
        return data["answers"]

    def refresh(self) -> int:
        """Forget cached task lists; returns number of entries dropped."""
        return self.cache.invalidate_task_lists()
