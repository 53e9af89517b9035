from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import List, Literal, Optional

from pydantic import Field

from contentdesk.models.enums import Priority
from contentdesk.schemas.base import ClientRef, ORMModel, ProjectRef

EntityType = Literal["project", "task", "invoice"]
Period = Literal["week", "month", "year"]


class ProjectCounts(ORMModel):
    total: int = 0
    planning: int = 0
    active: int = 0
    on_hold: int = 0
    completed: int = 0
    cancelled: int = 0


class TaskCounts(ORMModel):
    total: int = 0
    todo: int = 0
    in_progress: int = 0
    review: int = 0
    completed: int = 0
    cancelled: int = 0


class ClientCounts(ORMModel):
    total: int = 0
    active: int = 0
    new_this_month: int = 0


class InvoiceSummary(ORMModel):
    total: int = 0
    paid: int = 0
    pending: int = 0
    overdue: int = 0
    total_revenue: Decimal = Decimal("0.00")
    pending_amount: Decimal = Decimal("0.00")


class OverdueSummary(ORMModel):
    projects: int = 0
    tasks: int = 0
    invoices: int = 0


class DashboardOverview(ORMModel):
    projects: ProjectCounts
    tasks: TaskCounts
    clients: ClientCounts
    invoices: InvoiceSummary
    overdue: OverdueSummary


class ActivityItem(ORMModel):
    type: EntityType
    id: int
    title: str
    status: str
    client: Optional[ClientRef] = None
    project: Optional[ProjectRef] = None
    due_date: Optional[datetime] = None
    progress: Optional[int] = None
    total: Optional[Decimal] = None
    updated_at: datetime


class RecentActivity(ORMModel):
    activities: List[ActivityItem] = Field(default_factory=list)


class DeadlineItem(ORMModel):
    type: EntityType
    id: int
    title: str
    due_date: datetime
    status: str
    priority: Priority
    client: Optional[ClientRef] = None
    project: Optional[ProjectRef] = None


class UpcomingDeadlines(ORMModel):
    deadlines: List[DeadlineItem] = Field(default_factory=list)


class ProductivityStats(ORMModel):
    period: Period
    start_date: datetime
    end_date: datetime
    tasks_completed: int
    projects_completed: int
    total_hours: Decimal
    total_revenue: Decimal
    average_hours_per_day: Decimal
