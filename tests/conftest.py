from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from contentdesk.core.deps import get_current_user
from contentdesk.db.session import get_db
from contentdesk.main import app
from contentdesk.models import Base, User


def days_from_now(days: float) -> str:
    return (datetime.now(timezone.utc) + timedelta(days=days)).isoformat()


@pytest.fixture()
def db_session():
    engine = create_engine(
        "sqlite+pysqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    TestingSessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        engine.dispose()


@pytest.fixture()
def user(db_session):
    owner = User(email="writer@example.com", full_name="Wren Writer", is_active=True)
    db_session.add(owner)
    db_session.commit()
    return owner


@pytest.fixture()
def other_user(db_session):
    stranger = User(email="someone.else@example.com", full_name="Other Freelancer", is_active=True)
    db_session.add(stranger)
    db_session.commit()
    return stranger


@pytest.fixture()
def auth_state(user):
    return {"user": user}


@pytest.fixture()
def act_as(auth_state):
    def _act_as(target: User) -> None:
        auth_state["user"] = target

    return _act_as


@pytest.fixture()
def client(db_session, auth_state):
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    def override_get_current_user():
        return auth_state["user"]

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_current_user] = override_get_current_user

    client_instance = TestClient(app)
    try:
        yield client_instance
    finally:
        client_instance.close()
        app.dependency_overrides.clear()


@pytest.fixture()
def make_client(client):
    counter = {"n": 0}

    def _make_client(**overrides):
        counter["n"] += 1
        payload = {
            "name": f"Acme Media {counter['n']}",
            "email": f"editor{counter['n']}@acme.example.com",
            "company": "Acme Media",
        }
        payload.update(overrides)
        response = client.post("/api/clients", json=payload)
        assert response.status_code == 201, response.text
        return response.json()

    return _make_client


@pytest.fixture()
def make_project(client, make_client):
    def _make_project(client_id=None, **overrides):
        if client_id is None:
            client_id = make_client()["id"]
        payload = {
            "title": "Spring blog series",
            "clientId": client_id,
            "dueDate": days_from_now(14),
            "status": "active",
        }
        payload.update(overrides)
        response = client.post("/api/projects", json=payload)
        assert response.status_code == 201, response.text
        return response.json()

    return _make_project


@pytest.fixture()
def make_task(client, make_project):
    def _make_task(project_id=None, **overrides):
        if project_id is None:
            project_id = make_project()["id"]
        payload = {
            "title": "Draft article",
            "projectId": project_id,
            "dueDate": days_from_now(5),
        }
        payload.update(overrides)
        response = client.post("/api/tasks", json=payload)
        assert response.status_code == 201, response.text
        return response.json()

    return _make_task


@pytest.fixture()
def make_invoice(client, make_client):
    def _make_invoice(client_id=None, **overrides):
        if client_id is None:
            client_id = make_client()["id"]
        payload = {
            "clientId": client_id,
            "dueDate": days_from_now(30),
            "items": [
                {"description": "Blog post", "quantity": 2, "rate": 50, "type": "fixed"},
                {"description": "Editing", "quantity": 1, "rate": 30, "type": "hourly"},
            ],
            "taxRate": 10,
            "discountRate": 5,
        }
        payload.update(overrides)
        response = client.post("/api/invoices", json=payload)
        assert response.status_code == 201, response.text
        return response.json()

    return _make_invoice
