from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import Field

from contentdesk.models.enums import Priority, ProjectStatus, ProjectType, TaskStatus
from contentdesk.schemas.base import ClientRef, ORMModel, Pagination


class ProjectBase(ORMModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(default="", max_length=2000)
    status: ProjectStatus = ProjectStatus.PLANNING
    priority: Priority = Priority.MEDIUM
    type: ProjectType = ProjectType.OTHER
    start_date: Optional[datetime] = None
    due_date: datetime
    budget_amount: Decimal = Field(default=Decimal("0.00"), ge=0)
    budget_currency: str = Field(default="USD", min_length=3, max_length=3)
    estimated_hours: Decimal = Field(default=Decimal("0.00"), ge=0)
    actual_hours: Decimal = Field(default=Decimal("0.00"), ge=0)
    progress: int = Field(default=0, ge=0, le=100)
    tags: List[str] = Field(default_factory=list)
    notes: str = Field(default="", max_length=2000)


class ProjectCreate(ProjectBase):
    client_id: int


class ProjectUpdate(ORMModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = Field(default=None, max_length=2000)
    client_id: Optional[int] = None
    status: Optional[ProjectStatus] = None
    priority: Optional[Priority] = None
    type: Optional[ProjectType] = None
    start_date: Optional[datetime] = None
    due_date: Optional[datetime] = None
    budget_amount: Optional[Decimal] = Field(default=None, ge=0)
    budget_currency: Optional[str] = Field(default=None, min_length=3, max_length=3)
    estimated_hours: Optional[Decimal] = Field(default=None, ge=0)
    actual_hours: Optional[Decimal] = Field(default=None, ge=0)
    progress: Optional[int] = Field(default=None, ge=0, le=100)
    tags: Optional[List[str]] = None
    notes: Optional[str] = Field(default=None, max_length=2000)


class ProjectArchivePayload(ORMModel):
    is_archived: bool = True


class ProjectRead(ProjectBase):
    id: int
    user_id: int
    client_id: Optional[int] = None
    client: Optional[ClientRef] = None
    start_date: datetime
    completed_date: Optional[datetime] = None
    is_archived: bool
    is_overdue: bool
    days_until_due: Optional[int] = None
    tasks_count: int = 0
    completed_tasks_count: int = 0
    created_at: datetime
    updated_at: datetime


class ProjectTaskPreview(ORMModel):
    id: int
    title: str
    status: TaskStatus
    priority: Priority
    due_date: datetime
    progress: int


class ProjectDetail(ORMModel):
    project: ProjectRead
    recent_tasks: List[ProjectTaskPreview] = Field(default_factory=list)


class ProjectListResponse(ORMModel):
    projects: List[ProjectRead]
    pagination: Pagination


class ProjectStats(ORMModel):
    total_projects: int
    active_projects: int
    completed_projects: int
    overdue_projects: int
