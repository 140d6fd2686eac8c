"""
Seed the "Fall Risk Check" demo survey, a demo caregiver with two patients,
and assign the survey to that caregiver.
Safe to run multiple times: skips creation if the survey title already exists.
"""
import sys
from pathlib import Path
from datetime import datetime, timezone, timedelta

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from careconnect.core.database import SessionLocal, engine, Base
from careconnect.core.security import ROLE_CAREGIVER, create_access_token
from careconnect.models.caregiver import Caregiver, Patient
from careconnect.models.survey import Survey, QuestionType
from careconnect.schemas.survey import QuestionCreate
from careconnect.services.assignment_service import AssignmentService
from careconnect.services.survey_service import SurveyService

SURVEY_TITLE = "Fall Risk Check"
DEMO_CAREGIVER_PHONE = "+15550100"

# -----------------------------------------------------------
# Question definitions: (text, type, required, options, validation)
# options only for choice-based questions.
# -----------------------------------------------------------
QUESTIONS = [
    (
        "Has the patient fallen since your last visit?",
        QuestionType.SINGLE_CHOICE, True,
        [("yes", "Yes"), ("no", "No")],
        None,
    ),
    (
        "How many times did the patient get up unassisted today?",
        QuestionType.NUMBER, False, [],
        {"min": 0, "max": 20},
    ),
    (
        "Is the walking path clear of hazards?",
        QuestionType.BOOLEAN, True, [],
        None,
    ),
    (
        "Date of the last fall (if any)",
        QuestionType.DATE, False, [],
        None,
    ),
    (
        "Which aids does the patient use?",
        QuestionType.MULTI_CHOICE, False,
        [("cane", "Cane"), ("walker", "Walker"), ("wheelchair", "Wheelchair"), ("none", "None")],
        None,
    ),
    (
        "Notes for the care coordinator",
        QuestionType.TEXT, False, [],
        {"maxLength": 500},
    ),
]


def run():
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        existing = db.query(Survey).filter(Survey.title == SURVEY_TITLE).first()
        if existing:
            print(f"Demo survey already exists (id={existing.id}). Nothing to do.")
            return

        caregiver = db.query(Caregiver).filter(Caregiver.phone == DEMO_CAREGIVER_PHONE).first()
        if not caregiver:
            caregiver = Caregiver(name="Demo Caregiver", phone=DEMO_CAREGIVER_PHONE, state="NY")
            db.add(caregiver)
            db.flush()
            db.add_all([
                Patient(name="Ada Patient", medicaid_id="NY000001", caregiver_id=caregiver.id),
                Patient(name="Grace Patient", medicaid_id="NY000002", caregiver_id=caregiver.id),
            ])
            db.commit()

        surveys = SurveyService(db)
        survey = surveys.create_survey(
            SURVEY_TITLE,
            "Weekly fall-risk screening filled in by the caregiver at the visit.",
        )
        surveys.save_questions(survey.id, [
            QuestionCreate(
                text=text,
                type=qtype,
                required=required,
                options=[{"value": value, "label": label} for value, label in options],
                validation=rules,
            )
            for text, qtype, required, options, rules in QUESTIONS
        ])
        surveys.publish_survey(survey.id)

        result = AssignmentService(db).bulk_assign(
            survey.id,
            [caregiver.id],
            due_at=datetime.now(timezone.utc) + timedelta(days=7),
        )

        print(f"Demo survey created (id={survey.id}) with {len(QUESTIONS)} questions")
        print(f"   {result.created} assignment(s) for caregiver id={caregiver.id}")
        print(f"   Caregiver token: {create_access_token(caregiver.id, ROLE_CAREGIVER)}")

    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


if __name__ == "__main__":
    run()
