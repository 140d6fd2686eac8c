"""Shared fixtures: SQLite in-memory database, API client, data factories."""
import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("ENVIRONMENT", "test")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from careconnect.core.database import Base, get_db
from careconnect.core.security import ROLE_ADMIN, ROLE_CAREGIVER, create_access_token
from careconnect.main import app
from careconnect.models import Caregiver, Patient
from careconnect.schemas.survey import QuestionCreate
from careconnect.services.survey_service import SurveyService

ADMIN_ID = 1

FALL_RISK_QUESTIONS = [
    {
        "text": "Has the patient fallen since your last visit?",
        "type": "single_choice",
        "required": True,
        "options": [{"value": "yes", "label": "Yes"}, {"value": "no", "label": "No"}],
    },
]

MIXED_QUESTIONS = [
    {"text": "Notes", "type": "text", "required": False, "validation": {"maxLength": 50}},
    {"text": "Hours of sleep", "type": "number", "required": True, "validation": {"min": 0, "max": 24}},
    {"text": "Took medication?", "type": "boolean", "required": True},
    {"text": "Last doctor visit", "type": "date", "required": False},
    {
        "text": "Mood",
        "type": "single_choice",
        "required": True,
        "options": [{"value": "good", "label": "Good"}, {"value": "bad", "label": "Bad"}],
    },
    {
        "text": "Aids used",
        "type": "multi_choice",
        "required": False,
        "options": [{"value": "cane", "label": "Cane"}, {"value": "walker", "label": "Walker"}],
    },
]


def bearer(subject: int, role: str) -> dict:
    return {"Authorization": f"Bearer {create_access_token(subject, role)}"}


@pytest.fixture
def db_session():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def client(db_session):
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def admin_headers():
    return bearer(ADMIN_ID, ROLE_ADMIN)


@pytest.fixture
def caregiver_headers():
    def factory(caregiver) -> dict:
        return bearer(caregiver.id, ROLE_CAREGIVER)
    return factory


@pytest.fixture
def make_caregiver(db_session):
    def factory(name: str = "Maria Lopez", patients: int = 1, active: bool = True) -> Caregiver:
        caregiver = Caregiver(name=name, phone="555-0100", state="NY", is_active=active)
        db_session.add(caregiver)
        db_session.flush()
        for i in range(patients):
            db_session.add(Patient(
                name=f"{name} patient {i + 1}",
                medicaid_id=f"MC{caregiver.id:03d}{i}",
                caregiver_id=caregiver.id,
            ))
        db_session.commit()
        db_session.refresh(caregiver)
        return caregiver
    return factory


@pytest.fixture
def make_survey(db_session):
    def factory(title: str = "Fall Risk Check", questions=None, publish: bool = False):
        service = SurveyService(db_session)
        survey = service.create_survey(title)
        if questions:
            survey = service.save_questions(survey.id, [QuestionCreate(**q) for q in questions])
        if publish:
            survey = service.publish_survey(survey.id)
        return survey
    return factory
