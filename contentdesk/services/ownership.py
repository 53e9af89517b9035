from __future__ import annotations

from typing import Optional, Type, TypeVar

from sqlalchemy.orm import Session

from contentdesk.models.client import Client
from contentdesk.models.enums import OPEN_PROJECT_STATUSES
from contentdesk.models.project import Project
from contentdesk.models.task import Task

T = TypeVar("T")


class OwnershipError(PermissionError):
    """A referenced record does not exist under the caller's account."""


class DeleteBlockedError(Exception):
    """A record still has dependants that must be resolved first."""


def get_owned(db: Session, model: Type[T], entity_id: int, *, user_id: int) -> Optional[T]:
    return db.query(model).filter(model.id == entity_id, model.user_id == user_id).first()


def require_owned_client(db: Session, client_id: int, *, user_id: int) -> Client:
    client = get_owned(db, Client, client_id, user_id=user_id)
    if not client:
        raise OwnershipError("Client not found or access denied")
    return client


def require_owned_project(db: Session, project_id: int, *, user_id: int) -> Project:
    project = get_owned(db, Project, project_id, user_id=user_id)
    if not project:
        raise OwnershipError("Project not found or access denied")
    return project


def ensure_client_deletable(db: Session, client: Client) -> None:
    open_projects = (
        db.query(Project.id)
        .filter(
            Project.client_id == client.id,
            Project.user_id == client.user_id,
            Project.status.in_(OPEN_PROJECT_STATUSES),
        )
        .count()
    )
    if open_projects:
        raise DeleteBlockedError(
            "Cannot delete client with active projects. Please complete or cancel projects first."
        )


def ensure_project_deletable(db: Session, project: Project) -> None:
    task_count = (
        db.query(Task.id)
        .filter(Task.project_id == project.id, Task.user_id == project.user_id)
        .count()
    )
    if task_count:
        raise DeleteBlockedError(
            "Cannot delete project with existing tasks. Please delete tasks first or archive the project."
        )
