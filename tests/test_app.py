"""Tests for application-level behaviour: health, request ids, error envelope."""


def test_root(client):
    response = client.get("/")
    assert response.status_code == 200
    assert response.json()["status"] == "running"


def test_request_id_is_echoed(client):
    response = client.get("/", headers={"X-Request-Id": "req-123"})
    assert response.headers["X-Request-Id"] == "req-123"


def test_request_id_is_generated(client):
    response = client.get("/")
    assert response.headers["X-Request-Id"]


def test_error_envelope_carries_request_id(client, admin_headers):
    response = client.get("/admin/surveys/404", headers={**admin_headers, "X-Request-Id": "abc"})
    assert response.status_code == 404
    body = response.json()
    assert body["code"] == "not_found"
    assert body["retriable"] is False
    assert body["request_id"] == "abc"


def test_missing_token(client):
    response = client.get("/admin/surveys")
    assert response.status_code in (401, 403)


def test_bad_token(client):
    response = client.get("/admin/surveys", headers={"Authorization": "Bearer not-a-token"})
    assert response.status_code == 401
    assert response.json()["code"] == "http_401"


def test_health_reports_database(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy", "database": "connected"}


def test_unknown_route_uses_error_envelope(client):
    response = client.get("/nowhere")
    assert response.status_code == 404
    assert response.json()["code"] == "http_404"
