from __future__ import annotations

from datetime import datetime, timedelta, timezone


def _in_days(days: float) -> str:
    return (datetime.now(timezone.utc) + timedelta(days=days)).isoformat()


# Clients


def test_create_client_with_address(client):
    response = client.post(
        "/api/clients",
        json={
            "name": "Northwind Studio",
            "email": "hello@northwind.example.com",
            "address": {"city": "Lisbon", "zipCode": "1100-148", "country": "Portugal"},
            "hourlyRate": 45,
            "tags": ["video"],
        },
    )
    assert response.status_code == 201, response.text
    created = response.json()

    assert created["address"]["zipCode"] == "1100-148"
    assert created["fullAddress"] == "Lisbon, 1100-148, Portugal"
    assert created["status"] == "active"
    assert created["paymentTerms"] == "net30"
    assert created["projectsCount"] == 0


def test_client_email_is_unique_per_owner(client, make_client, act_as, other_user):
    make_client(email="team@brightside.example.com")

    duplicate = client.post("/api/clients", json={"name": "Bright", "email": "TEAM@brightside.example.com"})
    assert duplicate.status_code == 400
    assert duplicate.json()["detail"] == "Client with this email already exists"

    act_as(other_user)
    elsewhere = client.post("/api/clients", json={"name": "Bright", "email": "team@brightside.example.com"})
    assert elsewhere.status_code == 201


def test_update_client_rejects_taken_email(client, make_client):
    first = make_client()
    second = make_client()

    response = client.put(f"/api/clients/{second['id']}", json={"email": first["email"]})
    assert response.status_code == 400

    renamed = client.put(f"/api/clients/{second['id']}", json={"name": "Renamed Media", "address": {"city": "Porto"}})
    assert renamed.status_code == 200
    assert renamed.json()["name"] == "Renamed Media"
    assert renamed.json()["fullAddress"] == "Porto"


def test_client_detail_lists_recent_projects(client, make_client, make_project):
    customer = make_client()
    for idx in range(6):
        make_project(client_id=customer["id"], title=f"Episode {idx}")

    response = client.get(f"/api/clients/{customer['id']}")
    assert response.status_code == 200
    detail = response.json()
    assert detail["client"]["projectsCount"] == 6
    assert len(detail["recentProjects"]) == 5
    assert detail["recentProjects"][0]["title"] == "Episode 5"


def test_client_list_search_and_stats(client, make_client):
    make_client(name="Lumen Podcasts", status="prospect")
    make_client(name="Harbor Books")

    found = client.get("/api/clients", params={"search": "lumen"}).json()
    assert [row["name"] for row in found["clients"]] == ["Lumen Podcasts"]

    prospects = client.get("/api/clients", params={"status": "prospect"}).json()
    assert prospects["pagination"]["total"] == 1

    stats = client.get("/api/clients/stats/overview").json()
    assert stats == {
        "totalClients": 2,
        "activeClients": 1,
        "prospectClients": 1,
        "newClientsThisMonth": 2,
    }


def test_client_delete_blocked_by_open_projects(client, make_client, make_project, make_invoice):
    customer = make_client()
    project = make_project(client_id=customer["id"])
    invoice = make_invoice(client_id=customer["id"])

    blocked = client.delete(f"/api/clients/{customer['id']}")
    assert blocked.status_code == 400
    assert blocked.json()["detail"] == (
        "Cannot delete client with active projects. Please complete or cancel projects first."
    )

    client.put(f"/api/projects/{project['id']}", json={"status": "cancelled"})
    deleted = client.delete(f"/api/clients/{customer['id']}")
    assert deleted.status_code == 204

    assert client.get(f"/api/clients/{customer['id']}").status_code == 404
    assert client.get(f"/api/projects/{project['id']}").json()["project"]["clientId"] is None
    assert client.get(f"/api/invoices/{invoice['id']}").json()["clientId"] is None


def test_clients_are_scoped_to_owner(client, make_client, act_as, other_user):
    customer = make_client()
    act_as(other_user)

    response = client.get(f"/api/clients/{customer['id']}")
    assert response.status_code == 404
    assert response.json()["detail"] == "Client not found"
    assert client.delete(f"/api/clients/{customer['id']}").status_code == 404


# Projects


def test_project_requires_owned_client(client, make_client, act_as, other_user):
    missing_client = client.post("/api/projects", json={"title": "Orphan", "dueDate": _in_days(3)})
    assert missing_client.status_code == 422

    foreign = make_client()
    act_as(other_user)
    response = client.post(
        "/api/projects",
        json={"title": "Borrowed", "clientId": foreign["id"], "dueDate": _in_days(3)},
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "Client not found or access denied"


def test_project_created_completed_is_fully_progressed(client, make_project):
    project = make_project(status="completed", progress=20)

    assert project["completedDate"] is not None
    assert project["progress"] == 100
    assert project["isOverdue"] is False


def test_reopening_project_clears_completed_date_and_keeps_progress(client, make_project):
    project = make_project(progress=30)

    completed = client.put(f"/api/projects/{project['id']}", json={"status": "completed"}).json()
    assert completed["progress"] == 100
    assert completed["completedDate"] is not None

    reopened = client.put(f"/api/projects/{project['id']}", json={"status": "active"}).json()
    assert reopened["completedDate"] is None
    # Progress is not rolled back when a project leaves completed.
    assert reopened["progress"] == 100


def test_overdue_project_flags(client, make_project):
    project = make_project(dueDate=_in_days(-1))

    assert project["isOverdue"] is True
    assert project["daysUntilDue"] == -1

    stats = client.get("/api/projects/stats/overview").json()
    assert stats["overdueProjects"] == 1
    assert stats["activeProjects"] == 1


def test_project_detail_counts_tasks(client, make_project, make_task):
    project = make_project()
    make_task(project_id=project["id"], title="Script")
    make_task(project_id=project["id"], title="Record", status="completed")

    response = client.get(f"/api/projects/{project['id']}")
    assert response.status_code == 200
    detail = response.json()
    assert detail["project"]["tasksCount"] == 2
    assert detail["project"]["completedTasksCount"] == 1
    assert {task["title"] for task in detail["recentTasks"]} == {"Script", "Record"}

    listed = client.get("/api/projects").json()["projects"][0]
    assert listed["tasksCount"] == 2


def test_project_delete_blocked_by_tasks(client, make_project, make_task):
    project = make_project()
    task = make_task(project_id=project["id"])

    blocked = client.delete(f"/api/projects/{project['id']}")
    assert blocked.status_code == 400
    assert blocked.json()["detail"] == (
        "Cannot delete project with existing tasks. Please delete tasks first or archive the project."
    )

    client.delete(f"/api/tasks/{task['id']}")
    assert client.delete(f"/api/projects/{project['id']}").status_code == 204
    assert client.get(f"/api/projects/{project['id']}").status_code == 404


def test_archive_hides_project_from_default_listing(client, make_project):
    project = make_project(title="Winter newsletter")

    archived = client.put(f"/api/projects/{project['id']}/archive", json={})
    assert archived.status_code == 200
    assert archived.json()["isArchived"] is True

    assert client.get("/api/projects").json()["projects"] == []
    shown = client.get("/api/projects", params={"archived": "true"}).json()["projects"]
    assert [p["title"] for p in shown] == ["Winter newsletter"]
    assert client.get("/api/projects/stats/overview").json()["totalProjects"] == 0

    restored = client.put(f"/api/projects/{project['id']}/archive", json={"isArchived": False})
    assert restored.json()["isArchived"] is False


def test_project_list_filters(client, make_client, make_project):
    customer = make_client()
    make_project(client_id=customer["id"], title="Video launch", priority="high")
    make_project(title="Blog refresh", status="planning")

    by_priority = client.get("/api/projects", params={"priority": "high"}).json()
    assert [p["title"] for p in by_priority["projects"]] == ["Video launch"]

    by_client = client.get("/api/projects", params={"client": customer["id"]}).json()
    assert by_client["pagination"]["total"] == 1

    by_status = client.get("/api/projects", params={"status": "planning"}).json()
    assert [p["title"] for p in by_status["projects"]] == ["Blog refresh"]

    by_search = client.get("/api/projects", params={"search": "refresh"}).json()
    assert len(by_search["projects"]) == 1
