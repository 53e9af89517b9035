from __future__ import annotations

from datetime import datetime, timedelta, timezone
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Session

from contentdesk.db.base import as_utc, utcnow
from contentdesk.models.client import Client
from contentdesk.models.enums import (
    CLOSED_PROJECT_STATUSES,
    CLOSED_TASK_STATUSES,
    ClientStatus,
    InvoiceStatus,
    ProjectStatus,
    TaskStatus,
)
from contentdesk.models.invoice import Invoice
from contentdesk.models.project import Project
from contentdesk.models.task import Task
from contentdesk.schemas.base import ClientRef, ProjectRef
from contentdesk.schemas.dashboard import (
    ActivityItem,
    ClientCounts,
    DashboardOverview,
    DeadlineItem,
    InvoiceSummary,
    OverdueSummary,
    ProductivityStats,
    ProjectCounts,
    TaskCounts,
)
from contentdesk.services.invoices import TWOPLACES, summarize_invoices

# Divisor for average hours per day, per period.
PERIOD_DAYS = {"week": 7, "month": 30, "year": 365}


class InvalidPeriodError(ValueError):
    pass


def month_bounds(now: datetime) -> Tuple[datetime, datetime]:
    start = datetime(now.year, now.month, 1, tzinfo=timezone.utc)
    if now.month == 12:
        end = datetime(now.year + 1, 1, 1, tzinfo=timezone.utc)
    else:
        end = datetime(now.year, now.month + 1, 1, tzinfo=timezone.utc)
    return start, end


def period_bounds(period: str, now: Optional[datetime] = None) -> Tuple[datetime, datetime]:
    """Half-open ``[start, end)`` window in UTC for a productivity period.

    ``week`` trails seven days back from ``now``; ``month`` and ``year`` are
    the calendar month and year containing ``now``.
    """
    now = as_utc(now) or utcnow()
    if period == "week":
        return now - timedelta(days=7), now
    if period == "month":
        return month_bounds(now)
    if period == "year":
        return (
            datetime(now.year, 1, 1, tzinfo=timezone.utc),
            datetime(now.year + 1, 1, 1, tzinfo=timezone.utc),
        )
    raise InvalidPeriodError("Invalid period")


def _counts_by_status(db: Session, model, *, user_id: int) -> Dict[str, int]:
    rows = (
        db.query(model.status, func.count(model.id))
        .filter(model.user_id == user_id, model.is_archived.is_(False))
        .group_by(model.status)
        .all()
    )
    return {str(status_value): count for status_value, count in rows}


def _overdue_count(db: Session, model, closed_statuses, *, user_id: int, now: datetime) -> int:
    return (
        db.query(func.count(model.id))
        .filter(
            model.user_id == user_id,
            model.is_archived.is_(False),
            model.status.notin_(closed_statuses),
            model.due_date < now,
        )
        .scalar()
        or 0
    )


def compute_overview(db: Session, *, user_id: int, now: Optional[datetime] = None) -> DashboardOverview:
    now = as_utc(now) or utcnow()

    project_counts = _counts_by_status(db, Project, user_id=user_id)
    projects = ProjectCounts(
        total=sum(project_counts.values()),
        planning=project_counts.get(ProjectStatus.PLANNING, 0),
        active=project_counts.get(ProjectStatus.ACTIVE, 0),
        on_hold=project_counts.get(ProjectStatus.ON_HOLD, 0),
        completed=project_counts.get(ProjectStatus.COMPLETED, 0),
        cancelled=project_counts.get(ProjectStatus.CANCELLED, 0),
    )

    task_counts = _counts_by_status(db, Task, user_id=user_id)
    tasks = TaskCounts(
        total=sum(task_counts.values()),
        todo=task_counts.get(TaskStatus.TODO, 0),
        in_progress=task_counts.get(TaskStatus.IN_PROGRESS, 0),
        review=task_counts.get(TaskStatus.REVIEW, 0),
        completed=task_counts.get(TaskStatus.COMPLETED, 0),
        cancelled=task_counts.get(TaskStatus.CANCELLED, 0),
    )

    month_start, month_end = month_bounds(now)
    client_query = db.query(Client).filter(Client.user_id == user_id)
    clients = ClientCounts(
        total=client_query.count(),
        active=client_query.filter(Client.status == ClientStatus.ACTIVE).count(),
        new_this_month=client_query.filter(
            Client.created_at >= month_start,
            Client.created_at < month_end,
        ).count(),
    )

    aggregate = summarize_invoices(db, user_id=user_id, now=now)
    invoices = InvoiceSummary(
        total=aggregate.total_invoices,
        paid=aggregate.paid_invoices,
        pending=aggregate.pending_invoices,
        overdue=aggregate.overdue_invoices,
        total_revenue=aggregate.total_revenue,
        pending_amount=aggregate.pending_amount,
    )

    overdue = OverdueSummary(
        projects=_overdue_count(db, Project, CLOSED_PROJECT_STATUSES, user_id=user_id, now=now),
        tasks=_overdue_count(db, Task, CLOSED_TASK_STATUSES, user_id=user_id, now=now),
        invoices=aggregate.overdue_invoices,
    )

    return DashboardOverview(projects=projects, tasks=tasks, clients=clients, invoices=invoices, overdue=overdue)


def _client_ref(client: Optional[Client]) -> Optional[ClientRef]:
    return ClientRef.model_validate(client) if client else None


def _project_ref(project: Optional[Project]) -> Optional[ProjectRef]:
    return ProjectRef.model_validate(project) if project else None


def recent_activity(db: Session, *, user_id: int, limit: int, per_type: int) -> List[ActivityItem]:
    """Most recently touched projects, tasks and invoices, newest first.

    Each entity type contributes at most ``per_type`` rows before the merged
    list is cut to ``limit``.
    """
    projects = (
        db.query(Project)
        .filter(Project.user_id == user_id, Project.is_archived.is_(False))
        .order_by(Project.updated_at.desc(), Project.id.desc())
        .limit(per_type)
        .all()
    )
    tasks = (
        db.query(Task)
        .filter(Task.user_id == user_id, Task.is_archived.is_(False))
        .order_by(Task.updated_at.desc(), Task.id.desc())
        .limit(per_type)
        .all()
    )
    invoices = (
        db.query(Invoice)
        .filter(Invoice.user_id == user_id)
        .order_by(Invoice.updated_at.desc(), Invoice.id.desc())
        .limit(per_type)
        .all()
    )

    activities: List[ActivityItem] = []
    for project in projects:
        activities.append(
            ActivityItem(
                type="project",
                id=project.id,
                title=project.title,
                status=project.status.value,
                client=_client_ref(project.client),
                due_date=project.due_date,
                progress=project.progress,
                updated_at=as_utc(project.updated_at),
            )
        )
    for task in tasks:
        activities.append(
            ActivityItem(
                type="task",
                id=task.id,
                title=task.title,
                status=task.status.value,
                project=_project_ref(task.project),
                due_date=task.due_date,
                progress=task.progress,
                updated_at=as_utc(task.updated_at),
            )
        )
    for invoice in invoices:
        activities.append(
            ActivityItem(
                type="invoice",
                id=invoice.id,
                title=invoice.invoice_number,
                status=invoice.status.value,
                client=_client_ref(invoice.client),
                due_date=invoice.due_date,
                total=invoice.total,
                updated_at=as_utc(invoice.updated_at),
            )
        )

    activities.sort(key=lambda item: item.updated_at, reverse=True)
    return activities[:limit]


def upcoming_deadlines(
    db: Session,
    *,
    user_id: int,
    days: int,
    limit: int,
    now: Optional[datetime] = None,
) -> List[DeadlineItem]:
    now = as_utc(now) or utcnow()
    horizon = now + timedelta(days=days)

    projects = (
        db.query(Project)
        .filter(
            Project.user_id == user_id,
            Project.is_archived.is_(False),
            Project.status.notin_(CLOSED_PROJECT_STATUSES),
            Project.due_date >= now,
            Project.due_date <= horizon,
        )
        .order_by(Project.due_date.asc())
        .limit(limit)
        .all()
    )
    tasks = (
        db.query(Task)
        .filter(
            Task.user_id == user_id,
            Task.is_archived.is_(False),
            Task.status.notin_(CLOSED_TASK_STATUSES),
            Task.due_date >= now,
            Task.due_date <= horizon,
        )
        .order_by(Task.due_date.asc())
        .limit(limit)
        .all()
    )

    deadlines: List[DeadlineItem] = [
        DeadlineItem(
            type="project",
            id=project.id,
            title=project.title,
            due_date=as_utc(project.due_date),
            status=project.status.value,
            priority=project.priority,
            client=_client_ref(project.client),
        )
        for project in projects
    ]
    for task in tasks:
        # Task rows show the client of their parent project.
        deadlines.append(
            DeadlineItem(
                type="task",
                id=task.id,
                title=task.title,
                due_date=as_utc(task.due_date),
                status=task.status.value,
                priority=task.priority,
                project=_project_ref(task.project),
                client=_client_ref(task.project.client if task.project else None),
            )
        )

    deadlines.sort(key=lambda item: item.due_date)
    return deadlines[:limit]


def productivity_stats(
    db: Session,
    *,
    user_id: int,
    period: str,
    now: Optional[datetime] = None,
) -> ProductivityStats:
    start, end = period_bounds(period, now)

    tasks_completed = (
        db.query(func.count(Task.id))
        .filter(
            Task.user_id == user_id,
            Task.status == TaskStatus.COMPLETED,
            Task.completed_date >= start,
            Task.completed_date < end,
        )
        .scalar()
        or 0
    )
    projects_completed = (
        db.query(func.count(Project.id))
        .filter(
            Project.user_id == user_id,
            Project.status == ProjectStatus.COMPLETED,
            Project.completed_date >= start,
            Project.completed_date < end,
        )
        .scalar()
        or 0
    )
    total_hours = (
        db.query(func.sum(Task.actual_hours))
        .filter(
            Task.user_id == user_id,
            Task.actual_hours > 0,
            Task.updated_at >= start,
            Task.updated_at < end,
        )
        .scalar()
    )
    total_revenue = (
        db.query(func.sum(Invoice.total))
        .filter(
            Invoice.user_id == user_id,
            Invoice.status == InvoiceStatus.PAID,
            Invoice.paid_date >= start,
            Invoice.paid_date < end,
        )
        .scalar()
    )

    total_hours = Decimal(str(total_hours or 0)).quantize(TWOPLACES, rounding=ROUND_HALF_UP)
    total_revenue = Decimal(str(total_revenue or 0)).quantize(TWOPLACES, rounding=ROUND_HALF_UP)
    average = (total_hours / PERIOD_DAYS[period]).quantize(TWOPLACES, rounding=ROUND_HALF_UP)

    return ProductivityStats(
        period=period,
        start_date=start,
        end_date=end,
        tasks_completed=tasks_completed,
        projects_completed=projects_completed,
        total_hours=total_hours,
        total_revenue=total_revenue,
        average_hours_per_day=average,
    )
