from __future__ import annotations

from datetime import datetime, timedelta, timezone


def _in_days(days: float) -> str:
    return (datetime.now(timezone.utc) + timedelta(days=days)).isoformat()


def test_create_task_defaults_assignee_to_caller(client, make_task, user):
    task = make_task()

    assert task["status"] == "todo"
    assert task["assignedToUserId"] == user.id
    assert task["assignee"]["email"] == user.email
    assert task["completedDate"] is None
    assert task["isOverdue"] is False
    assert task["daysUntilDue"] == 5
    assert task["checklistProgress"] == 0


def test_create_task_rejects_foreign_project(client, make_project, act_as, other_user):
    project = make_project()
    act_as(other_user)

    response = client.post(
        "/api/tasks",
        json={"title": "Sneaky", "projectId": project["id"], "dueDate": _in_days(2)},
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "Project not found or access denied"


def test_create_task_rejects_unknown_assignee(client, make_project):
    project = make_project()

    response = client.post(
        "/api/tasks",
        json={"title": "Edit", "projectId": project["id"], "dueDate": _in_days(2), "assignedToUserId": 9999},
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "Assignee not found"


def test_checklist_on_create_stamps_completed_items(client, make_task):
    task = make_task(checklist=[{"item": "Outline", "completed": True}, {"item": "Draft"}])

    outline, draft = task["checklist"]
    assert outline["completed"] is True
    assert outline["completedAt"] is not None
    assert draft["completed"] is False
    assert draft["completedAt"] is None
    assert task["checklistProgress"] == 50


def test_checklist_replacement_is_idempotent(client, make_task):
    task = make_task(checklist=[{"item": "Outline", "completed": True}, {"item": "Draft"}])
    stamped = task["checklist"][0]["completedAt"]
    payload = {"checklist": [{"item": "Outline", "completed": True}, {"item": "Draft", "completed": False}]}

    first = client.put(f"/api/tasks/{task['id']}/checklist", json=payload)
    second = client.put(f"/api/tasks/{task['id']}/checklist", json=payload)

    assert first.status_code == 200, first.text
    assert second.status_code == 200, second.text
    assert second.json()["checklist"][0]["completedAt"] == stamped
    assert second.json()["checklistProgress"] == 50


def test_checklist_update_by_id_keeps_stamp_and_unchecking_clears_it(client, make_task):
    task = make_task(checklist=[{"item": "Outline", "completed": True}, {"item": "Draft"}])
    outline, draft = task["checklist"]

    renamed = client.put(
        f"/api/tasks/{task['id']}/checklist",
        json={
            "checklist": [
                {"id": outline["id"], "item": "Outline v2", "completed": True},
                {"id": draft["id"], "item": "Draft", "completed": True},
            ]
        },
    ).json()
    assert renamed["checklist"][0]["item"] == "Outline v2"
    assert renamed["checklist"][0]["completedAt"] == outline["completedAt"]
    assert renamed["checklist"][1]["completedAt"] is not None
    assert renamed["checklistProgress"] == 100

    unchecked = client.put(
        f"/api/tasks/{task['id']}/checklist",
        json={"checklist": [{"item": "Outline v2", "completed": False}, {"item": "Draft", "completed": False}]},
    ).json()
    assert [entry["completedAt"] for entry in unchecked["checklist"]] == [None, None]
    assert unchecked["checklistProgress"] == 0

    fetched = client.get(f"/api/tasks/{task['id']}/checklist")
    assert fetched.status_code == 200
    assert fetched.json() == unchecked


def test_comments_are_trimmed_and_attributed(client, make_task, user):
    task = make_task()

    response = client.post(f"/api/tasks/{task['id']}/comments", json={"text": "  Looks good to me  "})
    assert response.status_code == 201, response.text
    comment = response.json()
    assert comment["text"] == "Looks good to me"
    assert comment["author"]["id"] == user.id

    blank = client.post(f"/api/tasks/{task['id']}/comments", json={"text": "   "})
    assert blank.status_code == 422

    detail = client.get(f"/api/tasks/{task['id']}").json()
    assert [c["text"] for c in detail["comments"]] == ["Looks good to me"]


def test_completion_stamps_and_reopening_clears_without_touching_progress(client, make_task):
    task = make_task(progress=60)

    done = client.put(f"/api/tasks/{task['id']}", json={"status": "completed"}).json()
    assert done["status"] == "completed"
    assert done["completedDate"] is not None
    assert done["progress"] == 60

    # Re-sending completed keeps the original stamp.
    again = client.put(f"/api/tasks/{task['id']}", json={"status": "completed", "title": "Final draft"}).json()
    assert again["completedDate"] == done["completedDate"]

    reopened = client.put(f"/api/tasks/{task['id']}", json={"status": "review"}).json()
    assert reopened["completedDate"] is None
    assert reopened["progress"] == 60


def test_past_due_task_is_overdue_until_completed(client, make_task):
    task = make_task(dueDate=_in_days(-2))
    assert task["isOverdue"] is True
    assert task["daysUntilDue"] == -2

    done = client.put(f"/api/tasks/{task['id']}", json={"status": "completed"}).json()
    assert done["isOverdue"] is False


def test_task_update_can_clear_recurring_and_assignee(client, make_task):
    task = make_task(recurring={"isRecurring": True, "frequency": "weekly", "interval": 2})
    assert task["recurring"]["frequency"] == "weekly"

    cleared = client.put(f"/api/tasks/{task['id']}", json={"recurring": None, "assignedToUserId": None})
    assert cleared.status_code == 200, cleared.text
    assert cleared.json()["recurring"] is None
    assert cleared.json()["assignedToUserId"] is None


def test_list_filters_and_stats(client, make_project, make_task):
    project = make_project()
    make_task(project_id=project["id"], title="Research keywords", status="in-progress")
    make_task(project_id=project["id"], title="Write intro", status="completed")
    make_task(title="Podcast notes", dueDate=_in_days(-1))

    by_project = client.get("/api/tasks", params={"project": project["id"]}).json()
    assert by_project["pagination"]["total"] == 2

    by_status = client.get("/api/tasks", params={"status": "in-progress"}).json()
    assert [t["title"] for t in by_status["tasks"]] == ["Research keywords"]

    by_search = client.get("/api/tasks", params={"search": "podcast"}).json()
    assert len(by_search["tasks"]) == 1

    stats = client.get("/api/tasks/stats/overview").json()
    assert stats == {
        "totalTasks": 3,
        "todoTasks": 1,
        "inProgressTasks": 1,
        "completedTasks": 1,
        "overdueTasks": 1,
    }


def test_archived_tasks_drop_out_of_listing(client, make_task):
    task = make_task()

    archived = client.put(f"/api/tasks/{task['id']}", json={"isArchived": True})
    assert archived.status_code == 200
    assert archived.json()["isArchived"] is True
    assert client.get("/api/tasks").json()["tasks"] == []


def test_delete_task(client, make_task):
    task = make_task()

    assert client.delete(f"/api/tasks/{task['id']}").status_code == 204
    missing = client.get(f"/api/tasks/{task['id']}")
    assert missing.status_code == 404
    assert missing.json()["detail"] == "Task not found"


def test_offset_due_date_is_stored_as_utc(client, make_task):
    due = datetime.now(timezone(timedelta(hours=-5))) + timedelta(hours=2)
    task = make_task(dueDate=due.isoformat())

    stored = datetime.fromisoformat(task["dueDate"].replace("Z", "+00:00"))
    assert stored == due
    assert stored.utcoffset() == timedelta(0)
    assert task["isOverdue"] is False
    assert task["daysUntilDue"] == 1

    deadlines = client.get("/api/dashboard/upcoming-deadlines").json()["deadlines"]
    assert [(item["type"], item["id"]) for item in deadlines] == [("task", task["id"])]
