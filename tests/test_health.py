from __future__ import annotations

from datetime import timedelta

from contentdesk.core.deps import get_current_user
from contentdesk.core.metrics import normalize_path
from contentdesk.core.security import create_access_token
from contentdesk.main import app


def test_healthz_reports_database(client):
    response = client.get("/healthz")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"
    assert response.json()["database"] == "ok"


def test_request_id_is_echoed(client):
    response = client.get("/healthz", headers={"X-Request-Id": "abc-123"})
    assert response.headers["X-Request-Id"] == "abc-123"

    generated = client.get("/healthz")
    assert generated.headers["X-Request-Id"]


def test_metrics_endpoint_exposes_request_and_invoice_counters(client, make_invoice):
    invoice = make_invoice()
    client.get(f"/api/invoices/{invoice['id']}")

    response = client.get("/metrics")
    assert response.status_code == 200
    body = response.text
    assert "contentdesk_http_requests_total" in body
    assert 'path="/api/invoices/{id}"' in body
    assert 'contentdesk_invoice_events_total{event="invoice_created"}' in body


def test_normalize_path_collapses_ids():
    assert normalize_path("/api/tasks/42/checklist") == "/api/tasks/{id}/checklist"
    assert normalize_path("/api/invoices") == "/api/invoices"


def test_bearer_token_resolves_user(client, user):
    app.dependency_overrides.pop(get_current_user)

    anonymous = client.get("/api/projects")
    assert anonymous.status_code == 401

    garbage = client.get("/api/projects", headers={"Authorization": "Bearer not-a-jwt"})
    assert garbage.status_code == 401
    assert garbage.json()["detail"] == "Could not validate credentials"

    token = create_access_token(user.id)
    authorized = client.get("/api/projects", headers={"Authorization": f"Bearer {token}"})
    assert authorized.status_code == 200
    assert authorized.json()["projects"] == []


def test_unknown_user_token_is_rejected(client):
    app.dependency_overrides.pop(get_current_user)

    token = create_access_token(424242)
    response = client.get("/api/tasks", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401


def test_expired_token_is_rejected(client, user):
    app.dependency_overrides.pop(get_current_user)

    token = create_access_token(user.id, expires_delta=timedelta(minutes=-1))
    response = client.get("/api/tasks", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401
