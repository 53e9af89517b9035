from __future__ import annotations

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from contentdesk.services.dashboard import InvalidPeriodError, period_bounds


def _in_days(days: float) -> str:
    return (datetime.now(timezone.utc) + timedelta(days=days)).isoformat()


def test_overview_counts(client, make_client, make_project, make_task, make_invoice):
    customer = make_client()
    make_client(status="inactive")
    active = make_project(client_id=customer["id"], dueDate=_in_days(-2))
    make_project(client_id=customer["id"], status="completed")
    make_project(client_id=customer["id"], status="on-hold")
    make_task(project_id=active["id"], status="in-progress")
    make_task(project_id=active["id"], dueDate=_in_days(-1))
    paid = make_invoice(client_id=customer["id"])
    client.put(f"/api/invoices/{paid['id']}/mark-paid")
    late = make_invoice(client_id=customer["id"], dueDate=_in_days(-5))
    client.post(f"/api/invoices/{late['id']}/send")

    response = client.get("/api/dashboard/overview")
    assert response.status_code == 200, response.text
    overview = response.json()

    assert overview["projects"] == {
        "total": 3,
        "planning": 0,
        "active": 1,
        "onHold": 1,
        "completed": 1,
        "cancelled": 0,
    }
    assert overview["tasks"]["total"] == 2
    assert overview["tasks"]["todo"] == 1
    assert overview["tasks"]["inProgress"] == 1
    assert overview["clients"] == {"total": 2, "active": 1, "newThisMonth": 2}
    assert overview["invoices"]["total"] == 2
    assert overview["invoices"]["paid"] == 1
    assert overview["invoices"]["pending"] == 1
    assert Decimal(str(overview["invoices"]["totalRevenue"])) == Decimal("136.50")
    assert Decimal(str(overview["invoices"]["pendingAmount"])) == Decimal("136.50")
    assert overview["overdue"] == {"projects": 1, "tasks": 1, "invoices": 1}


def test_overview_is_scoped_to_caller(client, make_project, act_as, other_user):
    make_project()
    act_as(other_user)

    overview = client.get("/api/dashboard/overview").json()
    assert overview["projects"]["total"] == 0
    assert overview["clients"]["total"] == 0


def test_recent_activity_is_newest_first_and_limited(client, make_project, make_task, make_invoice):
    project = make_project(title="Launch series")
    make_task(project_id=project["id"], title="Storyboard")
    make_invoice()
    client.put(f"/api/projects/{project['id']}", json={"title": "Launch series v2"})

    response = client.get("/api/dashboard/recent-activity")
    assert response.status_code == 200
    activities = response.json()["activities"]

    assert {item["type"] for item in activities} == {"project", "task", "invoice"}
    assert activities[0]["type"] == "project"
    assert activities[0]["title"] == "Launch series v2"
    stamps = [item["updatedAt"] for item in activities]
    assert stamps == sorted(stamps, reverse=True)

    task_entry = next(item for item in activities if item["type"] == "task")
    assert task_entry["project"]["title"] == "Launch series v2"
    invoice_entry = next(item for item in activities if item["type"] == "invoice")
    assert invoice_entry["title"].startswith("INV-")
    assert Decimal(str(invoice_entry["total"])) == Decimal("136.50")

    limited = client.get("/api/dashboard/recent-activity", params={"limit": 2}).json()["activities"]
    assert len(limited) == 2
    assert client.get("/api/dashboard/recent-activity", params={"limit": 0}).status_code == 422


def test_upcoming_deadlines_window_and_exclusions(client, make_client, make_project, make_task):
    customer = make_client(name="Deadline Co")
    project = make_project(client_id=customer["id"], title="Soon project", dueDate=_in_days(3))
    make_task(project_id=project["id"], title="Soon task", dueDate=_in_days(2))
    make_task(project_id=project["id"], title="Later task", dueDate=_in_days(20))
    make_task(project_id=project["id"], title="Done task", dueDate=_in_days(1), status="completed")
    make_task(project_id=project["id"], title="Late task", dueDate=_in_days(-1))

    response = client.get("/api/dashboard/upcoming-deadlines")
    assert response.status_code == 200
    deadlines = response.json()["deadlines"]

    assert [item["title"] for item in deadlines] == ["Soon task", "Soon project"]
    task_entry = deadlines[0]
    assert task_entry["type"] == "task"
    assert task_entry["project"]["id"] == project["id"]
    assert task_entry["client"]["name"] == "Deadline Co"
    assert deadlines[1]["client"]["id"] == customer["id"]

    wider = client.get("/api/dashboard/upcoming-deadlines", params={"days": 30}).json()["deadlines"]
    assert [item["title"] for item in wider] == ["Soon task", "Soon project", "Later task"]

    capped = client.get("/api/dashboard/upcoming-deadlines", params={"days": 30, "limit": 1}).json()
    assert len(capped["deadlines"]) == 1


def test_productivity_stats_for_week(client, make_project, make_task, make_invoice):
    project = make_project()
    make_task(project_id=project["id"], status="completed", actualHours=7)
    make_task(project_id=project["id"], actualHours="3.5")
    make_project(status="completed")
    paid = make_invoice()
    client.put(f"/api/invoices/{paid['id']}/mark-paid")

    response = client.get("/api/dashboard/productivity-stats")
    assert response.status_code == 200, response.text
    stats = response.json()

    assert stats["period"] == "week"
    assert stats["tasksCompleted"] == 1
    assert stats["projectsCompleted"] == 1
    assert Decimal(str(stats["totalHours"])) == Decimal("10.50")
    assert Decimal(str(stats["averageHoursPerDay"])) == Decimal("1.50")
    assert Decimal(str(stats["totalRevenue"])) == Decimal("136.50")


def test_productivity_stats_rejects_unknown_period(client):
    response = client.get("/api/dashboard/productivity-stats", params={"period": "decade"})
    assert response.status_code == 400
    assert response.json()["detail"] == "Invalid period"


def test_period_bounds():
    now = datetime(2026, 12, 15, 9, 30, tzinfo=timezone.utc)

    assert period_bounds("week", now) == (now - timedelta(days=7), now)
    assert period_bounds("month", now) == (
        datetime(2026, 12, 1, tzinfo=timezone.utc),
        datetime(2027, 1, 1, tzinfo=timezone.utc),
    )
    assert period_bounds("year", now) == (
        datetime(2026, 1, 1, tzinfo=timezone.utc),
        datetime(2027, 1, 1, tzinfo=timezone.utc),
    )
    with pytest.raises(InvalidPeriodError):
        period_bounds("fortnight", now)


def test_archived_records_are_left_out_of_dashboard(client, make_project, make_task):
    kept = make_project(title="Kept project", dueDate=_in_days(3))
    make_task(project_id=kept["id"], title="Kept task", dueDate=_in_days(4))
    late_project = make_project(title="Shelved late project", dueDate=_in_days(-2))
    soon_project = make_project(title="Shelved soon project", dueDate=_in_days(2))
    late_task = make_task(project_id=kept["id"], title="Shelved late task", dueDate=_in_days(-1))
    soon_task = make_task(project_id=kept["id"], title="Shelved soon task", dueDate=_in_days(1))
    for project in (late_project, soon_project):
        assert client.put(f"/api/projects/{project['id']}/archive", json={}).status_code == 200
    for task in (late_task, soon_task):
        assert client.put(f"/api/tasks/{task['id']}", json={"isArchived": True}).status_code == 200

    overview = client.get("/api/dashboard/overview").json()
    assert overview["projects"]["total"] == 1
    assert overview["projects"]["active"] == 1
    assert overview["tasks"]["total"] == 1
    assert overview["overdue"]["projects"] == 0
    assert overview["overdue"]["tasks"] == 0

    activities = client.get("/api/dashboard/recent-activity").json()["activities"]
    assert {item["title"] for item in activities} == {"Kept project", "Kept task"}

    deadlines = client.get("/api/dashboard/upcoming-deadlines").json()["deadlines"]
    assert [item["title"] for item in deadlines] == ["Kept project", "Kept task"]
