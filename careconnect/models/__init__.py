"""Database models."""
from careconnect.models.caregiver import Caregiver, Patient
from careconnect.models.check_in import WeeklyCheckIn
from careconnect.models.survey import Survey, SurveyStatus, Question, QuestionType, QuestionOption
from careconnect.models.assignment import Assignment, AssignmentStatus
from careconnect.models.response import SurveyResponse, ResponseItem
from careconnect.models.notification import Notification

__all__ = [
    "Caregiver",
    "Patient",
    "WeeklyCheckIn",
    "Survey",
    "SurveyStatus",
    "Question",
    "QuestionType",
    "QuestionOption",
    "Assignment",
    "AssignmentStatus",
    "SurveyResponse",
    "ResponseItem",
    "Notification",
]
