from __future__ import annotations

import logging
from typing import Dict, Iterable, Optional, Tuple

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import case, func, or_
from sqlalchemy.orm import Session

from contentdesk.core.deps import get_current_user
from contentdesk.db.base import utcnow
from contentdesk.db.session import get_db
from contentdesk.models.enums import CLOSED_PROJECT_STATUSES, Priority, ProjectStatus, TaskStatus
from contentdesk.models.project import Project
from contentdesk.models.task import Task
from contentdesk.models.user import User
from contentdesk.schemas.base import Pagination
from contentdesk.schemas.project import (
    ProjectArchivePayload,
    ProjectCreate,
    ProjectDetail,
    ProjectListResponse,
    ProjectRead,
    ProjectStats,
    ProjectTaskPreview,
    ProjectUpdate,
)
from contentdesk.services.ownership import (
    DeleteBlockedError,
    OwnershipError,
    ensure_project_deletable,
    get_owned,
    require_owned_client,
)

router = APIRouter(prefix="/api/projects", tags=["projects"])
logger = logging.getLogger(__name__)

RECENT_TASKS = 10


def _get_project_or_404(db: Session, project_id: int, user: User) -> Project:
    project = get_owned(db, Project, project_id, user_id=user.id)
    if not project:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Project not found")
    return project


def _require_client(db: Session, client_id: int, user: User) -> None:
    try:
        require_owned_client(db, client_id, user_id=user.id)
    except OwnershipError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc


def _task_counts(db: Session, project_ids: Iterable[int]) -> Dict[int, Tuple[int, int]]:
    ids = list(project_ids)
    if not ids:
        return {}
    rows = (
        db.query(
            Task.project_id,
            func.count(Task.id),
            func.sum(case((Task.status == TaskStatus.COMPLETED, 1), else_=0)),
        )
        .filter(Task.project_id.in_(ids))
        .group_by(Task.project_id)
        .all()
    )
    return {project_id: (total, int(completed or 0)) for project_id, total, completed in rows}


def _to_read(db: Session, project: Project) -> ProjectRead:
    total, completed = _task_counts(db, [project.id]).get(project.id, (0, 0))
    return ProjectRead.model_validate(project).model_copy(
        update={"tasks_count": total, "completed_tasks_count": completed}
    )


@router.get("/stats/overview", response_model=ProjectStats)
def project_stats(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> ProjectStats:
    query = db.query(Project).filter(Project.user_id == current_user.id, Project.is_archived.is_(False))
    return ProjectStats(
        total_projects=query.count(),
        active_projects=query.filter(Project.status == ProjectStatus.ACTIVE).count(),
        completed_projects=query.filter(Project.status == ProjectStatus.COMPLETED).count(),
        overdue_projects=query.filter(
            Project.status.notin_(CLOSED_PROJECT_STATUSES),
            Project.due_date < utcnow(),
        ).count(),
    )


@router.get("", response_model=ProjectListResponse)
def list_projects(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    status_filter: Optional[ProjectStatus] = Query(None, alias="status"),
    priority: Optional[Priority] = Query(None),
    client_id: Optional[int] = Query(None, alias="client"),
    search: Optional[str] = Query(None, max_length=100),
    archived: bool = Query(False),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> ProjectListResponse:
    query = db.query(Project).filter(Project.user_id == current_user.id, Project.is_archived.is_(archived))
    if status_filter:
        query = query.filter(Project.status == status_filter)
    if priority:
        query = query.filter(Project.priority == priority)
    if client_id:
        query = query.filter(Project.client_id == client_id)
    if search:
        term = f"%{search.strip().lower()}%"
        query = query.filter(
            or_(
                func.lower(Project.title).like(term),
                func.lower(Project.description).like(term),
            )
        )

    total = query.count()
    projects = (
        query.order_by(Project.created_at.desc(), Project.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    counts = _task_counts(db, (p.id for p in projects))
    items = []
    for project in projects:
        tasks_total, tasks_completed = counts.get(project.id, (0, 0))
        items.append(
            ProjectRead.model_validate(project).model_copy(
                update={"tasks_count": tasks_total, "completed_tasks_count": tasks_completed}
            )
        )
    return ProjectListResponse(projects=items, pagination=Pagination.build(page=page, limit=limit, total=total))


@router.get("/{project_id}", response_model=ProjectDetail)
def get_project(
    project_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> ProjectDetail:
    project = _get_project_or_404(db, project_id, current_user)
    recent = (
        db.query(Task)
        .filter(Task.project_id == project.id, Task.user_id == current_user.id)
        .order_by(Task.created_at.desc(), Task.id.desc())
        .limit(RECENT_TASKS)
        .all()
    )
    return ProjectDetail(
        project=_to_read(db, project),
        recent_tasks=[ProjectTaskPreview.model_validate(t) for t in recent],
    )


@router.post("", response_model=ProjectRead, status_code=status.HTTP_201_CREATED)
def create_project(
    project_in: ProjectCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> ProjectRead:
    _require_client(db, project_in.client_id, current_user)

    data = project_in.model_dump()
    new_status = data.pop("status")
    if data.get("start_date") is None:
        data.pop("start_date")

    project = Project(user_id=current_user.id, **data)
    project.set_status(new_status)
    db.add(project)
    db.flush()
    db.commit()
    db.refresh(project)
    logger.info("project_created", extra={"user_id": current_user.id, "entity": "project", "entity_id": project.id})
    return _to_read(db, project)


@router.put("/{project_id}", response_model=ProjectRead)
def update_project(
    project_id: int,
    project_update: ProjectUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> ProjectRead:
    project = _get_project_or_404(db, project_id, current_user)
    update_data = project_update.model_dump(exclude_unset=True)

    if update_data.get("client_id") is not None:
        _require_client(db, update_data["client_id"], current_user)
    new_status = update_data.pop("status", None)

    for field, value in update_data.items():
        if value is None:
            continue
        setattr(project, field, value)
    if new_status is not None:
        project.set_status(new_status)

    db.add(project)
    db.commit()
    db.refresh(project)
    return _to_read(db, project)


@router.put("/{project_id}/archive", response_model=ProjectRead)
def archive_project(
    project_id: int,
    payload: ProjectArchivePayload,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> ProjectRead:
    project = _get_project_or_404(db, project_id, current_user)
    project.is_archived = payload.is_archived
    db.add(project)
    db.commit()
    db.refresh(project)
    logger.info(
        "project_archived" if payload.is_archived else "project_unarchived",
        extra={"user_id": current_user.id, "entity": "project", "entity_id": project.id},
    )
    return _to_read(db, project)


@router.delete("/{project_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_project(
    project_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> None:
    project = _get_project_or_404(db, project_id, current_user)
    try:
        ensure_project_deletable(db, project)
    except DeleteBlockedError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc

    db.delete(project)
    db.commit()
    logger.info("project_deleted", extra={"user_id": current_user.id, "entity": "project", "entity_id": project_id})
