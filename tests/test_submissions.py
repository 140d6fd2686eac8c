"""Tests for response submission and previous-response lookup."""
from datetime import date, datetime, timedelta, timezone

import pytest

from careconnect.forms.answers import parse_date
from careconnect.forms.rules import MSG_NUMBER, MSG_OPTION, MSG_REQUIRED, max_value_message
from careconnect.models import Assignment, AssignmentStatus, ResponseItem, SurveyResponse, WeeklyCheckIn
from careconnect.services.assignment_service import AssignmentService
from tests.conftest import FALL_RISK_QUESTIONS, MIXED_QUESTIONS


@pytest.fixture
def assigned(db_session, make_survey, make_caregiver):
    """A published fall-risk survey assigned to one caregiver with one patient."""
    survey = make_survey(questions=FALL_RISK_QUESTIONS, publish=True)
    caregiver = make_caregiver("Maria", patients=1)
    result = AssignmentService(db_session).bulk_assign(
        survey.id, [caregiver.id], datetime.now(timezone.utc) + timedelta(days=3)
    )
    return survey, caregiver, result.assignments[0].id


def submit(client, headers, assignment_id, answers, meta=None):
    body = {"answers": answers}
    if meta is not None:
        body["meta"] = meta
    return client.post(f"/caregiver/surveys/{assignment_id}/submit", json=body, headers=headers)


def test_submission_completes_assignment_once(client, db_session, caregiver_headers, assigned):
    survey, caregiver, assignment_id = assigned
    question_id = str(survey.questions[0].id)
    headers = caregiver_headers(caregiver)

    first = submit(client, headers, assignment_id, {question_id: "no"},
                   meta={"submittedAt": "2026-10-14T09:00:00Z"})
    assert first.status_code == 201, first.text
    assert first.json()["assignment_id"] == assignment_id

    assignment = db_session.get(Assignment, assignment_id)
    db_session.refresh(assignment)
    assert assignment.status == AssignmentStatus.COMPLETED
    assert assignment.completed_at is not None

    second = submit(client, headers, assignment_id, {question_id: "yes"})
    assert second.status_code == 409
    assert second.json()["code"] == "conflict"
    assert second.json()["retriable"] is False
    assert db_session.query(SurveyResponse).count() == 1

    pending = client.get("/caregiver/surveys/pending", headers=headers)
    assert pending.json() == []


def test_invalid_choice_is_rejected_then_accepted(client, db_session, caregiver_headers, assigned):
    survey, caregiver, assignment_id = assigned
    question_id = str(survey.questions[0].id)
    headers = caregiver_headers(caregiver)

    rejected = submit(client, headers, assignment_id, {question_id: "maybe"})
    assert rejected.status_code == 422
    assert rejected.json()["errors"] == {question_id: [MSG_OPTION]}
    assert db_session.query(SurveyResponse).count() == 0

    accepted = submit(client, headers, assignment_id, {question_id: "yes"})
    assert accepted.status_code == 201
    assignment = db_session.get(Assignment, assignment_id)
    db_session.refresh(assignment)
    assert assignment.status == AssignmentStatus.COMPLETED


def test_missing_required_answer(client, caregiver_headers, assigned):
    survey, caregiver, assignment_id = assigned
    response = submit(client, caregiver_headers(caregiver), assignment_id, {})
    assert response.status_code == 422
    assert response.json()["errors"] == {str(survey.questions[0].id): [MSG_REQUIRED]}


def test_answer_for_foreign_question(client, caregiver_headers, assigned):
    survey, caregiver, assignment_id = assigned
    question_id = str(survey.questions[0].id)
    response = submit(client, caregiver_headers(caregiver), assignment_id,
                      {question_id: "no", "9999": "x"})
    assert response.status_code == 422
    assert "9999" in response.json()["errors"]


def test_non_numeric_answer_key_is_rejected(client, caregiver_headers, assigned):
    _, caregiver, assignment_id = assigned
    response = submit(client, caregiver_headers(caregiver), assignment_id, {"mood": "good"})
    assert response.status_code == 422


def test_mixed_answers_are_stored_typed(client, db_session, make_survey, make_caregiver, caregiver_headers):
    survey = make_survey(questions=MIXED_QUESTIONS, publish=True)
    caregiver = make_caregiver(patients=1)
    result = AssignmentService(db_session).bulk_assign(
        survey.id, [caregiver.id], datetime.now(timezone.utc) + timedelta(days=1)
    )
    ids = {q.text: str(q.id) for q in survey.questions}

    too_many_hours = submit(client, caregiver_headers(caregiver), result.assignments[0].id, {
        ids["Hours of sleep"]: 30, ids["Took medication?"]: True, ids["Mood"]: "good",
    })
    assert too_many_hours.status_code == 422
    assert too_many_hours.json()["errors"] == {ids["Hours of sleep"]: [max_value_message(24)]}

    huge = submit(client, caregiver_headers(caregiver), result.assignments[0].id, {
        ids["Hours of sleep"]: int("9" * 400), ids["Took medication?"]: True, ids["Mood"]: "good",
    })
    assert huge.status_code == 422
    assert huge.json()["errors"] == {ids["Hours of sleep"]: [MSG_NUMBER]}

    response = submit(client, caregiver_headers(caregiver), result.assignments[0].id, {
        ids["Hours of sleep"]: "7.5",
        ids["Took medication?"]: False,
        ids["Mood"]: "bad",
        ids["Last doctor visit"]: "2026-03-01",
        ids["Aids used"]: ["walker", "cane"],
        ids["Notes"]: "",
    })
    assert response.status_code == 201, response.text

    items = {str(i.question_id): i for i in db_session.query(ResponseItem).all()}
    assert ids["Notes"] not in items
    assert items[ids["Hours of sleep"]].answer_number == 7.5
    assert items[ids["Took medication?"]].answer_boolean is False
    assert items[ids["Last doctor visit"]].answer_date == date(2026, 3, 1)
    assert items[ids["Aids used"]].answer == ["walker", "cane"]


def test_other_caregivers_assignment_is_not_found(client, caregiver_headers, make_caregiver, assigned):
    survey, _, assignment_id = assigned
    intruder = make_caregiver("John", patients=1)
    response = submit(client, caregiver_headers(intruder), assignment_id,
                      {str(survey.questions[0].id): "no"})
    assert response.status_code == 404
    assert response.json()["code"] == "not_found"


def test_cancelled_assignment_cannot_be_answered(client, admin_headers, caregiver_headers, assigned):
    survey, caregiver, assignment_id = assigned
    client.post(f"/admin/assignments/{assignment_id}/cancel", headers=admin_headers)
    response = submit(client, caregiver_headers(caregiver), assignment_id,
                      {str(survey.questions[0].id): "no"})
    assert response.status_code == 409
    form = client.get(f"/caregiver/surveys/{assignment_id}", headers=caregiver_headers(caregiver))
    assert form.status_code == 404


def test_assignment_form_lists_questions_in_order(client, caregiver_headers, assigned):
    survey, caregiver, assignment_id = assigned
    response = client.get(f"/caregiver/surveys/{assignment_id}", headers=caregiver_headers(caregiver))
    assert response.status_code == 200
    body = response.json()
    assert body["patient_name"] == caregiver.patients[0].name
    assert [q["id"] for q in body["survey"]["questions"]] == [q.id for q in survey.questions]


def test_previous_response_keeps_calendar_date(client, db_session, make_survey, make_caregiver,
                                               caregiver_headers):
    survey = make_survey(questions=MIXED_QUESTIONS, publish=True)
    caregiver = make_caregiver(patients=1)
    patient_id = caregiver.patients[0].id
    result = AssignmentService(db_session).bulk_assign(
        survey.id, [caregiver.id], datetime.now(timezone.utc) + timedelta(days=1)
    )
    ids = {q.text: str(q.id) for q in survey.questions}
    headers = caregiver_headers(caregiver)

    submit(client, headers, result.assignments[0].id, {
        ids["Hours of sleep"]: 8,
        ids["Took medication?"]: True,
        ids["Mood"]: "good",
        ids["Last doctor visit"]: "2026-03-01T00:00:00-08:00",
    })

    response = client.get(f"/caregiver/patients/{patient_id}/previous-response",
                          params={"survey_id": survey.id}, headers=headers)
    assert response.status_code == 200
    answers = response.json()["answers"]
    assert parse_date(answers[ids["Last doctor visit"]]) == date(2026, 3, 1)
    assert answers[ids["Hours of sleep"]] == 8
    assert answers[ids["Mood"]] == "good"
    assert ids["Notes"] not in answers


def test_previous_response_missing_or_foreign(client, make_caregiver, caregiver_headers):
    caregiver = make_caregiver(patients=1)
    other = make_caregiver("John", patients=1)
    headers = caregiver_headers(caregiver)

    none_yet = client.get(f"/caregiver/patients/{caregiver.patients[0].id}/previous-response",
                          headers=headers)
    assert none_yet.status_code == 404

    foreign = client.get(f"/caregiver/patients/{other.patients[0].id}/previous-response",
                         headers=headers)
    assert foreign.status_code == 404


def test_check_in_submission(client, db_session, make_survey, make_caregiver, caregiver_headers):
    survey = make_survey(questions=FALL_RISK_QUESTIONS, publish=True)
    caregiver = make_caregiver(patients=1)
    start = datetime.now(timezone.utc) - timedelta(days=2)
    check_in = WeeklyCheckIn(
        caregiver_id=caregiver.id,
        patient_id=caregiver.patients[0].id,
        survey_id=survey.id,
        week_start_date=start,
        week_end_date=start + timedelta(days=6),
    )
    db_session.add(check_in)
    db_session.commit()
    headers = caregiver_headers(caregiver)
    url = f"/caregiver/checkins/{check_in.id}/submit"
    answers = {"answers": {str(survey.questions[0].id): "no"}}

    first = client.post(url, json=answers, headers=headers)
    assert first.status_code == 201
    assert first.json()["check_in_id"] == check_in.id

    db_session.refresh(check_in)
    assert check_in.is_completed is True

    again = client.post(url, json=answers, headers=headers)
    assert again.status_code == 409


def test_check_in_without_survey_cannot_be_answered(client, db_session, make_caregiver, caregiver_headers):
    caregiver = make_caregiver(patients=1)
    start = datetime.now(timezone.utc)
    check_in = WeeklyCheckIn(
        caregiver_id=caregiver.id,
        patient_id=caregiver.patients[0].id,
        week_start_date=start,
        week_end_date=start + timedelta(days=6),
    )
    db_session.add(check_in)
    db_session.commit()
    response = client.post(f"/caregiver/checkins/{check_in.id}/submit",
                           json={"answers": {}}, headers=caregiver_headers(caregiver))
    assert response.status_code == 422


def test_linked_check_in_submission_completes_both(client, db_session, make_survey, make_caregiver,
                                                   caregiver_headers):
    survey = make_survey(questions=FALL_RISK_QUESTIONS, publish=True)
    caregiver = make_caregiver(patients=1)
    start = datetime.now(timezone.utc)
    check_in = WeeklyCheckIn(
        caregiver_id=caregiver.id,
        patient_id=caregiver.patients[0].id,
        week_start_date=start,
        week_end_date=start + timedelta(days=6),
    )
    db_session.add(check_in)
    db_session.commit()
    assignment = AssignmentService(db_session).link_check_in(check_in.id, survey.id)
    assignment_id = assignment.id

    response = client.post(f"/caregiver/checkins/{check_in.id}/submit",
                           json={"answers": {str(survey.questions[0].id): "yes"}},
                           headers=caregiver_headers(caregiver))
    assert response.status_code == 201
    assert response.json()["assignment_id"] == assignment_id

    db_session.refresh(check_in)
    linked = db_session.get(Assignment, assignment_id)
    db_session.refresh(linked)
    assert check_in.is_completed is True
    assert linked.status == AssignmentStatus.COMPLETED


def test_racing_check_in_submission_is_a_conflict(client, db_session, make_survey, make_caregiver,
                                                  caregiver_headers):
    survey = make_survey(questions=FALL_RISK_QUESTIONS, publish=True)
    caregiver = make_caregiver(patients=1)
    start = datetime.now(timezone.utc)
    check_in = WeeklyCheckIn(
        caregiver_id=caregiver.id,
        patient_id=caregiver.patients[0].id,
        survey_id=survey.id,
        week_start_date=start,
        week_end_date=start + timedelta(days=6),
    )
    db_session.add(check_in)
    db_session.commit()
    # Another request already stored its response but the check-in still reads as pending
    db_session.add(SurveyResponse(survey_id=survey.id, caregiver_id=caregiver.id,
                                  patient_id=check_in.patient_id, check_in_id=check_in.id))
    db_session.commit()

    response = client.post(f"/caregiver/checkins/{check_in.id}/submit",
                           json={"answers": {str(survey.questions[0].id): "no"}},
                           headers=caregiver_headers(caregiver))

    assert response.status_code == 409
    assert response.json()["code"] == "conflict"
    assert db_session.query(SurveyResponse).filter_by(check_in_id=check_in.id).count() == 1
    db_session.refresh(check_in)
    assert check_in.is_completed is False
