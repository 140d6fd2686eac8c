"""Tests for bulk assignment, cancellation and check-in linking."""
from datetime import datetime, timedelta, timezone

import pytest

from careconnect.core.errors import ConflictError
from careconnect.models import Assignment, AssignmentStatus, Notification, WeeklyCheckIn
from careconnect.services.assignment_service import AssignmentService
from tests.conftest import FALL_RISK_QUESTIONS

DUE = "2026-11-06T17:00:00Z"


def test_bulk_assign_expands_caregivers_into_patients(client, admin_headers, make_survey, make_caregiver):
    survey = make_survey(questions=FALL_RISK_QUESTIONS, publish=True)
    maria = make_caregiver("Maria", patients=2)
    john = make_caregiver("John", patients=1)

    response = client.post(
        f"/admin/surveys/{survey.id}/assign",
        json={"caregiver_ids": [maria.id, john.id], "due_at": DUE},
        headers=admin_headers,
    )
    assert response.status_code == 201, response.text
    body = response.json()
    assert body["created"] == 3
    assert body["caregivers_without_patients"] == []
    pairs = sorted((a["caregiver_id"], a["patient_id"]) for a in body["assignments"])
    expected = sorted([(maria.id, p.id) for p in maria.patients] + [(john.id, p.id) for p in john.patients])
    assert pairs == expected
    assert {a["status"] for a in body["assignments"]} == {"pending"}


def test_caregiver_without_patients_is_an_empty_expansion(client, admin_headers, make_survey, make_caregiver):
    survey = make_survey(questions=FALL_RISK_QUESTIONS)
    lonely = make_caregiver("Lonely", patients=0)
    busy = make_caregiver("Busy", patients=1)

    response = client.post(
        f"/admin/surveys/{survey.id}/assign",
        json={"caregiver_ids": [lonely.id, busy.id], "due_at": DUE},
        headers=admin_headers,
    )
    assert response.status_code == 201
    assert response.json()["created"] == 1
    assert response.json()["caregivers_without_patients"] == [lonely.id]


def test_only_caregiver_without_patients_creates_nothing(db_session, make_survey, make_caregiver):
    survey = make_survey(questions=FALL_RISK_QUESTIONS)
    lonely = make_caregiver("Lonely", patients=0)
    result = AssignmentService(db_session).bulk_assign(
        survey.id, [lonely.id], datetime(2026, 11, 6, tzinfo=timezone.utc)
    )
    assert result.created == 0
    assert db_session.query(Assignment).count() == 0


def test_inactive_patients_are_not_assigned(db_session, make_survey, make_caregiver):
    survey = make_survey(questions=FALL_RISK_QUESTIONS)
    caregiver = make_caregiver(patients=2)
    caregiver.patients[0].is_active = False
    db_session.commit()
    result = AssignmentService(db_session).bulk_assign(
        survey.id, [caregiver.id], datetime(2026, 11, 6, tzinfo=timezone.utc)
    )
    assert result.created == 1


def test_unknown_caregiver_assigns_nobody(client, admin_headers, db_session, make_survey, make_caregiver):
    survey = make_survey(questions=FALL_RISK_QUESTIONS)
    maria = make_caregiver("Maria", patients=2)
    response = client.post(
        f"/admin/surveys/{survey.id}/assign",
        json={"caregiver_ids": [maria.id, 9999], "due_at": DUE},
        headers=admin_headers,
    )
    assert response.status_code == 404
    assert db_session.query(Assignment).count() == 0


def test_unknown_survey(client, admin_headers, make_caregiver):
    maria = make_caregiver()
    response = client.post(
        "/admin/surveys/999/assign",
        json={"caregiver_ids": [maria.id], "due_at": DUE},
        headers=admin_headers,
    )
    assert response.status_code == 404


def test_empty_caregiver_list_is_rejected(client, admin_headers, make_survey):
    survey = make_survey(questions=FALL_RISK_QUESTIONS)
    response = client.post(
        f"/admin/surveys/{survey.id}/assign",
        json={"caregiver_ids": [], "due_at": DUE},
        headers=admin_headers,
    )
    assert response.status_code == 422


def test_bulk_assign_is_all_or_nothing(db_session, make_survey, make_caregiver, monkeypatch):
    survey = make_survey(questions=FALL_RISK_QUESTIONS)
    maria = make_caregiver("Maria", patients=2)
    john = make_caregiver("John", patients=2)

    def failing_commit():
        raise RuntimeError("database went away")

    monkeypatch.setattr(db_session, "commit", failing_commit)
    with pytest.raises(RuntimeError):
        AssignmentService(db_session).bulk_assign(
            survey.id, [maria.id, john.id], datetime(2026, 11, 6, tzinfo=timezone.utc)
        )
    monkeypatch.undo()

    assert db_session.query(Assignment).count() == 0


def test_bulk_assign_writes_notifications(db_session, make_survey, make_caregiver):
    survey = make_survey(questions=FALL_RISK_QUESTIONS)
    maria = make_caregiver("Maria", patients=2)
    AssignmentService(db_session).bulk_assign(
        survey.id, [maria.id], datetime(2026, 11, 6, tzinfo=timezone.utc)
    )
    notifications = db_session.query(Notification).all()
    assert {n.caregiver_id for n in notifications} == {None, maria.id}
    admin_wide = [n for n in notifications if n.caregiver_id is None][0]
    assert "2 assignment(s)" in admin_wide.message


def test_notification_failure_keeps_assignments(db_session, make_survey, make_caregiver, monkeypatch):
    survey = make_survey(questions=FALL_RISK_QUESTIONS)
    maria = make_caregiver("Maria", patients=1)
    service = AssignmentService(db_session)

    def broken(*args, **kwargs):
        raise RuntimeError("notifier down")

    monkeypatch.setattr(service.notifications, "notify_assignments_created", broken)
    result = service.bulk_assign(survey.id, [maria.id], datetime(2026, 11, 6, tzinfo=timezone.utc))
    assert result.created == 1
    assert db_session.query(Assignment).count() == 1


def test_cancel_assignment(client, admin_headers, db_session, make_survey, make_caregiver):
    survey = make_survey(questions=FALL_RISK_QUESTIONS)
    maria = make_caregiver()
    result = AssignmentService(db_session).bulk_assign(
        survey.id, [maria.id], datetime(2026, 11, 6, tzinfo=timezone.utc)
    )
    assignment_id = result.assignments[0].id

    response = client.post(f"/admin/assignments/{assignment_id}/cancel", headers=admin_headers)
    assert response.status_code == 200
    assert response.json()["status"] == "cancelled"

    again = client.post(f"/admin/assignments/{assignment_id}/cancel", headers=admin_headers)
    assert again.status_code == 409

    listed = client.get("/admin/assignments", params={"status": "cancelled"}, headers=admin_headers)
    assert [a["id"] for a in listed.json()] == [assignment_id]


def test_link_check_in_creates_assignment_due_at_week_end(db_session, make_survey, make_caregiver):
    survey = make_survey(questions=FALL_RISK_QUESTIONS)
    maria = make_caregiver()
    patient = maria.patients[0]
    check_in = WeeklyCheckIn(
        caregiver_id=maria.id,
        patient_id=patient.id,
        week_start_date=datetime(2026, 10, 12, tzinfo=timezone.utc),
        week_end_date=datetime(2026, 10, 18, 23, 59, 59, tzinfo=timezone.utc),
    )
    db_session.add(check_in)
    db_session.commit()

    service = AssignmentService(db_session)
    assignment = service.link_check_in(check_in.id, survey.id)

    assert assignment.check_in_id == check_in.id
    assert assignment.patient_id == patient.id
    assert assignment.due_at.date() == datetime(2026, 10, 18).date()
    assert assignment.status == AssignmentStatus.PENDING
    db_session.refresh(check_in)
    assert check_in.survey_id == survey.id

    with pytest.raises(ConflictError):
        service.link_check_in(check_in.id, survey.id)


def test_link_check_in_endpoint(client, admin_headers, db_session, make_survey, make_caregiver):
    survey = make_survey(questions=FALL_RISK_QUESTIONS)
    maria = make_caregiver()
    start = datetime.now(timezone.utc) - timedelta(days=1)
    check_in = WeeklyCheckIn(
        caregiver_id=maria.id,
        patient_id=maria.patients[0].id,
        week_start_date=start,
        week_end_date=start + timedelta(days=6),
    )
    db_session.add(check_in)
    db_session.commit()

    response = client.post(f"/admin/check-ins/{check_in.id}/link",
                           json={"survey_id": survey.id}, headers=admin_headers)
    assert response.status_code == 201
    assert response.json()["check_in_id"] == check_in.id

    missing = client.post("/admin/check-ins/999/link", json={"survey_id": survey.id},
                          headers=admin_headers)
    assert missing.status_code == 404
