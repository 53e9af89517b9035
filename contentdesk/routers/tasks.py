from __future__ import annotations

import logging
from typing import Iterable, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from contentdesk.core.deps import get_current_user
from contentdesk.db.base import utcnow
from contentdesk.db.session import get_db
from contentdesk.models.enums import CLOSED_TASK_STATUSES, Priority, TaskStatus
from contentdesk.models.task import Task, TaskChecklistItem, TaskComment
from contentdesk.models.user import User
from contentdesk.schemas.base import Pagination
from contentdesk.schemas.task import (
    ChecklistItemRead,
    ChecklistResponse,
    ChecklistUpdate,
    CommentCreate,
    CommentRead,
    TaskCreate,
    TaskListResponse,
    TaskRead,
    TaskStats,
    TaskUpdate,
)
from contentdesk.services.ownership import OwnershipError, get_owned, require_owned_project
from contentdesk.services.progress import merge_checklist

router = APIRouter(prefix="/api/tasks", tags=["tasks"])
logger = logging.getLogger(__name__)

# Update fields that may be cleared with an explicit null.
_NULLABLE_FIELDS = {"assigned_to_user_id", "recurring"}


def _get_task_or_404(db: Session, task_id: int, user: User) -> Task:
    task = get_owned(db, Task, task_id, user_id=user.id)
    if not task:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Task not found")
    return task


def _require_project(db: Session, project_id: int, user: User) -> None:
    try:
        require_owned_project(db, project_id, user_id=user.id)
    except OwnershipError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc


def _require_assignee(db: Session, user_id: int) -> None:
    assignee = db.get(User, user_id)
    if not assignee or not assignee.is_active:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Assignee not found")


def _replace_checklist(db: Session, task: Task, items: Iterable) -> None:
    merged = merge_checklist(list(task.checklist), items)
    task.checklist.clear()
    db.flush()
    for idx, entry in enumerate(merged):
        task.checklist.append(
            TaskChecklistItem(
                order_index=idx,
                item=entry.item,
                completed=entry.completed,
                completed_at=entry.completed_at,
            )
        )
    db.flush()


def _checklist_response(task: Task) -> ChecklistResponse:
    return ChecklistResponse(
        checklist=[ChecklistItemRead.model_validate(item) for item in task.checklist],
        checklist_progress=task.checklist_progress,
    )


@router.get("/stats/overview", response_model=TaskStats)
def task_stats(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> TaskStats:
    query = db.query(Task).filter(Task.user_id == current_user.id, Task.is_archived.is_(False))
    return TaskStats(
        total_tasks=query.count(),
        todo_tasks=query.filter(Task.status == TaskStatus.TODO).count(),
        in_progress_tasks=query.filter(Task.status == TaskStatus.IN_PROGRESS).count(),
        completed_tasks=query.filter(Task.status == TaskStatus.COMPLETED).count(),
        overdue_tasks=query.filter(Task.status.notin_(CLOSED_TASK_STATUSES), Task.due_date < utcnow()).count(),
    )


@router.get("", response_model=TaskListResponse)
def list_tasks(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    status_filter: Optional[TaskStatus] = Query(None, alias="status"),
    priority: Optional[Priority] = Query(None),
    project_id: Optional[int] = Query(None, alias="project"),
    assigned_to: Optional[int] = Query(None, alias="assignedTo"),
    search: Optional[str] = Query(None, max_length=100),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> TaskListResponse:
    query = db.query(Task).filter(Task.user_id == current_user.id, Task.is_archived.is_(False))
    if status_filter:
        query = query.filter(Task.status == status_filter)
    if priority:
        query = query.filter(Task.priority == priority)
    if project_id:
        query = query.filter(Task.project_id == project_id)
    if assigned_to:
        query = query.filter(Task.assigned_to_user_id == assigned_to)
    if search:
        term = f"%{search.strip().lower()}%"
        query = query.filter(
            or_(
                func.lower(Task.title).like(term),
                func.lower(Task.description).like(term),
            )
        )

    total = query.count()
    tasks = (
        query.order_by(Task.due_date.asc(), Task.id.asc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    return TaskListResponse(
        tasks=[TaskRead.model_validate(t) for t in tasks],
        pagination=Pagination.build(page=page, limit=limit, total=total),
    )


@router.get("/{task_id}", response_model=TaskRead)
def get_task(
    task_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> TaskRead:
    return TaskRead.model_validate(_get_task_or_404(db, task_id, current_user))


@router.post("", response_model=TaskRead, status_code=status.HTTP_201_CREATED)
def create_task(
    task_in: TaskCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> TaskRead:
    _require_project(db, task_in.project_id, current_user)
    if task_in.assigned_to_user_id:
        _require_assignee(db, task_in.assigned_to_user_id)

    task = Task(
        user_id=current_user.id,
        project_id=task_in.project_id,
        assigned_to_user_id=task_in.assigned_to_user_id or current_user.id,
        title=task_in.title,
        description=task_in.description,
        priority=task_in.priority,
        type=task_in.type,
        due_date=task_in.due_date,
        estimated_hours=task_in.estimated_hours,
        actual_hours=task_in.actual_hours,
        progress=task_in.progress,
        tags=task_in.tags,
        recurring=task_in.recurring.model_dump(mode="json") if task_in.recurring else None,
    )
    if task_in.start_date:
        task.start_date = task_in.start_date
    task.set_status(task_in.status)
    db.add(task)
    db.flush()

    if task_in.checklist:
        _replace_checklist(db, task, task_in.checklist)

    db.commit()
    db.refresh(task)
    logger.info("task_created", extra={"user_id": current_user.id, "entity": "task", "entity_id": task.id})
    return TaskRead.model_validate(task)


@router.put("/{task_id}", response_model=TaskRead)
def update_task(
    task_id: int,
    task_update: TaskUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> TaskRead:
    task = _get_task_or_404(db, task_id, current_user)
    update_data = task_update.model_dump(exclude_unset=True)

    if update_data.get("project_id") is not None:
        _require_project(db, update_data["project_id"], current_user)
    if update_data.get("assigned_to_user_id") is not None:
        _require_assignee(db, update_data["assigned_to_user_id"])
    if "recurring" in update_data:
        update_data["recurring"] = task_update.recurring.model_dump(mode="json") if task_update.recurring else None
    new_status = update_data.pop("status", None)

    for field, value in update_data.items():
        if value is None and field not in _NULLABLE_FIELDS:
            continue
        setattr(task, field, value)
    if new_status is not None:
        task.set_status(new_status)

    db.add(task)
    db.commit()
    db.refresh(task)
    return TaskRead.model_validate(task)


@router.get("/{task_id}/checklist", response_model=ChecklistResponse)
def get_checklist(
    task_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> ChecklistResponse:
    task = _get_task_or_404(db, task_id, current_user)
    return _checklist_response(task)


@router.put("/{task_id}/checklist", response_model=ChecklistResponse)
def update_checklist(
    task_id: int,
    payload: ChecklistUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> ChecklistResponse:
    task = _get_task_or_404(db, task_id, current_user)
    _replace_checklist(db, task, payload.checklist)
    db.add(task)
    db.commit()
    db.refresh(task)
    return _checklist_response(task)


@router.post("/{task_id}/comments", response_model=CommentRead, status_code=status.HTTP_201_CREATED)
def add_comment(
    task_id: int,
    comment_in: CommentCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> CommentRead:
    task = _get_task_or_404(db, task_id, current_user)
    comment = TaskComment(author_user_id=current_user.id, text=comment_in.text)
    task.comments.append(comment)
    db.add(task)
    db.commit()
    db.refresh(comment)
    return CommentRead.model_validate(comment)


@router.delete("/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_task(
    task_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> None:
    task = _get_task_or_404(db, task_id, current_user)
    db.delete(task)
    db.commit()
    logger.info("task_deleted", extra={"user_id": current_user.id, "entity": "task", "entity_id": task_id})
