"""Response submission.

Turns a ``SurveyForm`` into the wire payload, posts it and reports the
outcome as a ``SubmissionResult``. Failures are returned, not raised, and
the form is never modified, so a failed submission can be retried as is.
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional

import httpx

from careconnect.client.api import CaregiverClient
from careconnect.forms.answers import to_wire
from careconnect.forms.renderer import FormValidationError, SurveyForm

logger = logging.getLogger(__name__)


class FailureKind(str, Enum):
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    TRANSPORT = "transport"


@dataclass(frozen=True)
class SubmissionResult:
    ok: bool
    response_id: Optional[int] = None
    failure: Optional[FailureKind] = None
    message: str = ""
    errors: Dict[str, List[str]] = field(default_factory=dict)
    status_code: Optional[int] = None

    @classmethod
    def success(cls, response_id: int, status_code: Optional[int] = None) -> "SubmissionResult":
        return cls(ok=True, response_id=response_id, status_code=status_code)

    @classmethod
    def failed(cls, kind: FailureKind, message: str,
               errors: Optional[Mapping[Any, List[str]]] = None,
               status_code: Optional[int] = None) -> "SubmissionResult":
        return cls(
            ok=False,
            failure=kind,
            message=message,
            errors={str(k): list(v) for k, v in (errors or {}).items()},
            status_code=status_code,
        )

    @property
    def retriable(self) -> bool:
        return self.failure == FailureKind.TRANSPORT


def build_payload(form: SurveyForm, context: Optional[Mapping[str, Any]] = None,
                  now: Optional[datetime] = None) -> dict:
    """
    Wire body for a submission.

    Raises:
        FormValidationError: if any answer fails its rule
    """
    answers = form.collect()
    stamp = (now or datetime.now(timezone.utc)).isoformat().replace("+00:00", "Z")
    meta = dict(context or {})
    meta["submittedAt"] = stamp
    return {
        "answers": {str(question_id): to_wire(answer) for question_id, answer in answers.items()},
        "meta": meta,
    }


def classify(status_code: int) -> FailureKind:
    """Failure kind for a non-2xx status."""
    if status_code == 409:
        return FailureKind.CONFLICT
    if status_code in (400, 422):
        return FailureKind.VALIDATION
    if status_code in (401, 403, 404):
        return FailureKind.NOT_FOUND
    return FailureKind.TRANSPORT


class ResponseSubmitter:
    """Submits completed forms for a caregiver."""

    def __init__(self, client: CaregiverClient):
        self.client = client

    def submit_assignment(self, assignment_id: int, form: SurveyForm,
                          context: Optional[Mapping[str, Any]] = None) -> SubmissionResult:
        return self._submit(f"/caregiver/surveys/{assignment_id}/submit", form, context)

    def submit_check_in(self, check_in_id: int, form: SurveyForm,
                        context: Optional[Mapping[str, Any]] = None) -> SubmissionResult:
        return self._submit(f"/caregiver/checkins/{check_in_id}/submit", form, context)

    def _submit(self, path: str, form: SurveyForm,
                context: Optional[Mapping[str, Any]]) -> SubmissionResult:
        try:
            payload = build_payload(form, context)
        except FormValidationError as exc:
            return SubmissionResult.failed(FailureKind.VALIDATION, str(exc), errors=exc.errors)

        try:
            response = self.client.http.post(path, json=payload)
        except httpx.TransportError as exc:
            logger.warning("Submission to %s failed in transport: %s", path, exc)
            return SubmissionResult.failed(FailureKind.TRANSPORT, str(exc) or "Network error")

        if response.is_success:
            try:
                response_id = int(response.json()["response_id"])
            except (ValueError, KeyError, TypeError):
                logger.warning("Submission to %s got an unreadable HTTP %s body",
                               path, response.status_code)
                return SubmissionResult.failed(FailureKind.TRANSPORT, "Unexpected response from server",
                                               status_code=response.status_code)
            self.client.refresh()
            return SubmissionResult.success(response_id, response.status_code)

        try:
            body = response.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}
        kind = classify(response.status_code)
        if kind == FailureKind.TRANSPORT:
            logger.warning("Submission to %s failed with HTTP %s", path, response.status_code)
        elif kind in (FailureKind.CONFLICT, FailureKind.NOT_FOUND):
            # Cached lists still show this task as pending
            self.client.refresh()
        return SubmissionResult.failed(
            kind,
            body.get("message") or response.reason_phrase or "Submission failed",
            errors=body.get("errors"),
            status_code=response.status_code,
        )
