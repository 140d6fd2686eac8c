"""Caregiver-side client: cached task lists and response submission over httpx."""
from careconnect.client.api import CaregiverClient
from careconnect.client.cache import TaskListCache
from careconnect.client.submitter import FailureKind, ResponseSubmitter, SubmissionResult, build_payload

__all__ = [
    "CaregiverClient",
    "TaskListCache",
    "FailureKind",
    "ResponseSubmitter",
    "SubmissionResult",
    "build_payload",
]
