from __future__ import annotations

import logging
from typing import Dict, Iterable, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from contentdesk.core.deps import get_current_user
from contentdesk.db.base import utcnow
from contentdesk.db.session import get_db
from contentdesk.models.client import Client
from contentdesk.models.enums import ClientStatus
from contentdesk.models.project import Project
from contentdesk.models.user import User
from contentdesk.schemas.base import Pagination
from contentdesk.schemas.client import (
    ClientCreate,
    ClientDetail,
    ClientListResponse,
    ClientProjectPreview,
    ClientRead,
    ClientStats,
    ClientUpdate,
)
from contentdesk.services.dashboard import month_bounds
from contentdesk.services.ownership import DeleteBlockedError, ensure_client_deletable, get_owned

router = APIRouter(prefix="/api/clients", tags=["clients"])
logger = logging.getLogger(__name__)

RECENT_PROJECTS = 5


def _get_client_or_404(db: Session, client_id: int, user: User) -> Client:
    client = get_owned(db, Client, client_id, user_id=user.id)
    if not client:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Client not found")
    return client


def _ensure_email_available(db: Session, email: str, user: User, *, exclude_id: Optional[int] = None) -> None:
    query = db.query(Client.id).filter(Client.user_id == user.id, func.lower(Client.email) == email.lower())
    if exclude_id is not None:
        query = query.filter(Client.id != exclude_id)
    if query.first():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Client with this email already exists")


def _column_values(data: dict) -> dict:
    """Flatten the nested address block onto its columns."""
    address = data.pop("address", None)
    if address is not None:
        for key, value in address.items():
            data[f"address_{key}"] = value or ""
    if data.get("email") is not None:
        data["email"] = str(data["email"])
    return data


def _projects_counts(db: Session, client_ids: Iterable[int]) -> Dict[int, int]:
    ids = list(client_ids)
    if not ids:
        return {}
    rows = (
        db.query(Project.client_id, func.count(Project.id))
        .filter(Project.client_id.in_(ids))
        .group_by(Project.client_id)
        .all()
    )
    return {client_id: count for client_id, count in rows}


def _to_read(client: Client, projects_count: int = 0) -> ClientRead:
    return ClientRead.model_validate(client).model_copy(update={"projects_count": projects_count})


@router.get("/stats/overview", response_model=ClientStats)
def client_stats(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> ClientStats:
    query = db.query(Client).filter(Client.user_id == current_user.id)
    month_start, month_end = month_bounds(utcnow())
    return ClientStats(
        total_clients=query.count(),
        active_clients=query.filter(Client.status == ClientStatus.ACTIVE).count(),
        prospect_clients=query.filter(Client.status == ClientStatus.PROSPECT).count(),
        new_clients_this_month=query.filter(Client.created_at >= month_start, Client.created_at < month_end).count(),
    )


@router.get("", response_model=ClientListResponse)
def list_clients(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    status_filter: Optional[ClientStatus] = Query(None, alias="status"),
    search: Optional[str] = Query(None, max_length=100),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> ClientListResponse:
    query = db.query(Client).filter(Client.user_id == current_user.id)
    if status_filter:
        query = query.filter(Client.status == status_filter)
    if search:
        term = f"%{search.strip().lower()}%"
        query = query.filter(
            or_(
                func.lower(Client.name).like(term),
                func.lower(Client.email).like(term),
                func.lower(Client.company).like(term),
            )
        )

    total = query.count()
    clients = (
        query.order_by(Client.created_at.desc(), Client.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    counts = _projects_counts(db, (c.id for c in clients))
    return ClientListResponse(
        clients=[_to_read(c, counts.get(c.id, 0)) for c in clients],
        pagination=Pagination.build(page=page, limit=limit, total=total),
    )


@router.get("/{client_id}", response_model=ClientDetail)
def get_client(
    client_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> ClientDetail:
    client = _get_client_or_404(db, client_id, current_user)
    recent = (
        db.query(Project)
        .filter(Project.client_id == client.id, Project.user_id == current_user.id)
        .order_by(Project.created_at.desc(), Project.id.desc())
        .limit(RECENT_PROJECTS)
        .all()
    )
    counts = _projects_counts(db, [client.id])
    return ClientDetail(
        client=_to_read(client, counts.get(client.id, 0)),
        recent_projects=[ClientProjectPreview.model_validate(p) for p in recent],
    )


@router.post("", response_model=ClientRead, status_code=status.HTTP_201_CREATED)
def create_client(
    client_in: ClientCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> ClientRead:
    _ensure_email_available(db, str(client_in.email), current_user)

    data = _column_values(client_in.model_dump())
    client = Client(user_id=current_user.id, **data)
    db.add(client)
    db.flush()
    db.commit()
    db.refresh(client)
    logger.info("client_created", extra={"user_id": current_user.id, "entity": "client", "entity_id": client.id})
    return _to_read(client)


@router.put("/{client_id}", response_model=ClientRead)
def update_client(
    client_id: int,
    client_update: ClientUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> ClientRead:
    client = _get_client_or_404(db, client_id, current_user)
    update_data = client_update.model_dump(exclude_unset=True)
    if update_data.get("email") is not None:
        _ensure_email_available(db, str(update_data["email"]), current_user, exclude_id=client.id)

    for field, value in _column_values(update_data).items():
        setattr(client, field, value)

    db.add(client)
    db.commit()
    db.refresh(client)
    counts = _projects_counts(db, [client.id])
    return _to_read(client, counts.get(client.id, 0))


@router.delete("/{client_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_client(
    client_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> None:
    client = _get_client_or_404(db, client_id, current_user)
    try:
        ensure_client_deletable(db, client)
    except DeleteBlockedError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc

    # Closed projects and invoices survive with their client link nulled.
    db.delete(client)
    db.commit()
    logger.info("client_deleted", extra={"user_id": current_user.id, "entity": "client", "entity_id": client_id})
