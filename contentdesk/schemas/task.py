from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import Field, field_validator

from contentdesk.models.enums import Priority, RecurringFrequency, TaskStatus, TaskType
from contentdesk.schemas.base import ORMModel, Pagination, ProjectRef


class UserRef(ORMModel):
    id: int
    full_name: Optional[str] = None
    email: str


class RecurringRule(ORMModel):
    is_recurring: bool = False
    frequency: Optional[RecurringFrequency] = None
    interval: int = Field(default=1, ge=1)
    end_date: Optional[datetime] = None


class ChecklistItemIn(ORMModel):
    id: Optional[int] = None
    item: str = Field(..., min_length=1, max_length=255)
    completed: bool = False
    completed_at: Optional[datetime] = None


class ChecklistItemRead(ORMModel):
    id: int
    item: str
    completed: bool
    completed_at: Optional[datetime] = None


class ChecklistUpdate(ORMModel):
    checklist: List[ChecklistItemIn]


class ChecklistResponse(ORMModel):
    checklist: List[ChecklistItemRead]
    checklist_progress: int


class CommentCreate(ORMModel):
    text: str = Field(..., min_length=1, max_length=500)

    @field_validator("text")
    @classmethod
    def strip_text(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Comment text is required")
        return value


class CommentRead(ORMModel):
    id: int
    text: str
    author: UserRef
    created_at: datetime


class TaskBase(ORMModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(default="", max_length=1000)
    status: TaskStatus = TaskStatus.TODO
    priority: Priority = Priority.MEDIUM
    type: TaskType = TaskType.OTHER
    start_date: Optional[datetime] = None
    due_date: datetime
    estimated_hours: Decimal = Field(default=Decimal("0.00"), ge=0)
    actual_hours: Decimal = Field(default=Decimal("0.00"), ge=0)
    progress: int = Field(default=0, ge=0, le=100)
    tags: List[str] = Field(default_factory=list)
    recurring: Optional[RecurringRule] = None


class TaskCreate(TaskBase):
    project_id: int
    assigned_to_user_id: Optional[int] = None
    checklist: List[ChecklistItemIn] = Field(default_factory=list)


class TaskUpdate(ORMModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = Field(default=None, max_length=1000)
    project_id: Optional[int] = None
    assigned_to_user_id: Optional[int] = None
    status: Optional[TaskStatus] = None
    priority: Optional[Priority] = None
    type: Optional[TaskType] = None
    start_date: Optional[datetime] = None
    due_date: Optional[datetime] = None
    estimated_hours: Optional[Decimal] = Field(default=None, ge=0)
    actual_hours: Optional[Decimal] = Field(default=None, ge=0)
    progress: Optional[int] = Field(default=None, ge=0, le=100)
    tags: Optional[List[str]] = None
    recurring: Optional[RecurringRule] = None
    is_archived: Optional[bool] = None


class TaskRead(TaskBase):
    id: int
    user_id: int
    project_id: int
    project: Optional[ProjectRef] = None
    assigned_to_user_id: Optional[int] = None
    assignee: Optional[UserRef] = None
    start_date: datetime
    completed_date: Optional[datetime] = None
    is_archived: bool
    checklist: List[ChecklistItemRead] = Field(default_factory=list)
    checklist_progress: int = 0
    comments: List[CommentRead] = Field(default_factory=list)
    is_overdue: bool
    days_until_due: Optional[int] = None
    created_at: datetime
    updated_at: datetime


class TaskListResponse(ORMModel):
    tasks: List[TaskRead]
    pagination: Pagination


class TaskStats(ORMModel):
    total_tasks: int
    todo_tasks: int
    in_progress_tasks: int
    completed_tasks: int
    overdue_tasks: int
