from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import JSON, Boolean, Enum, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from contentdesk.db.base import Base, IDMixin, OwnedMixin, TimestampMixin, UTCDateTime, utcnow
from contentdesk.models.enums import Priority, TaskStatus, TaskType
from contentdesk.services.progress import checklist_progress, days_until_due, is_overdue, sync_completion


class Task(IDMixin, OwnedMixin, TimestampMixin, Base):
    __tablename__ = "tasks"

    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(Text, default="", nullable=False)
    status: Mapped[TaskStatus] = mapped_column(
        Enum(TaskStatus, name="task_status"),
        default=TaskStatus.TODO,
        nullable=False,
        index=True,
    )
    priority: Mapped[Priority] = mapped_column(
        Enum(Priority, name="priority"),
        default=Priority.MEDIUM,
        nullable=False,
        index=True,
    )
    type: Mapped[TaskType] = mapped_column(
        Enum(TaskType, name="task_type"),
        default=TaskType.OTHER,
        nullable=False,
    )
    project_id: Mapped[int] = mapped_column(ForeignKey("projects.id"), nullable=False, index=True)
    assigned_to_user_id: Mapped[Optional[int]] = mapped_column(ForeignKey("users.id"), nullable=True, index=True)

    start_date: Mapped[datetime] = mapped_column(UTCDateTime(), default=utcnow, nullable=False)
    due_date: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False, index=True)
    completed_date: Mapped[Optional[datetime]] = mapped_column(UTCDateTime(), nullable=True)

    estimated_hours: Mapped[Decimal] = mapped_column(Numeric(8, 2), default=Decimal("0.00"), nullable=False)
    actual_hours: Mapped[Decimal] = mapped_column(Numeric(8, 2), default=Decimal("0.00"), nullable=False)
    progress: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    tags: Mapped[list] = mapped_column(JSON, default=list, nullable=False)
    # Recurrence is stored for the client; nothing schedules from it.
    recurring: Mapped[Optional[dict]] = mapped_column(JSON, nullable=True)
    is_archived: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False, index=True)

    project: Mapped["Project"] = relationship(back_populates="tasks")
    assignee: Mapped[Optional["User"]] = relationship(foreign_keys=[assigned_to_user_id])
    checklist: Mapped[List["TaskChecklistItem"]] = relationship(
        back_populates="task",
        cascade="all, delete-orphan",
        order_by=lambda: TaskChecklistItem.order_index.asc(),
    )
    comments: Mapped[List["TaskComment"]] = relationship(
        back_populates="task",
        cascade="all, delete-orphan",
        order_by=lambda: [TaskComment.created_at.asc(), TaskComment.id.asc()],
    )

    @property
    def is_overdue(self) -> bool:
        return is_overdue(self.due_date, done=self.status == TaskStatus.COMPLETED)

    @property
    def days_until_due(self) -> Optional[int]:
        return days_until_due(self.due_date)

    @property
    def checklist_progress(self) -> int:
        return checklist_progress(self.checklist)

    def set_status(self, status: TaskStatus, now: Optional[datetime] = None) -> None:
        self.status = status
        sync_completion(self, status == TaskStatus.COMPLETED, now=now)


class TaskChecklistItem(IDMixin, TimestampMixin, Base):
    __tablename__ = "task_checklist_items"

    task_id: Mapped[int] = mapped_column(ForeignKey("tasks.id", ondelete="CASCADE"), nullable=False, index=True)
    order_index: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    item: Mapped[str] = mapped_column(String(255), nullable=False)
    completed: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    completed_at: Mapped[Optional[datetime]] = mapped_column(UTCDateTime(), nullable=True)

    task: Mapped[Task] = relationship(back_populates="checklist")


class TaskComment(IDMixin, TimestampMixin, Base):
    __tablename__ = "task_comments"

    task_id: Mapped[int] = mapped_column(ForeignKey("tasks.id", ondelete="CASCADE"), nullable=False, index=True)
    author_user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)
    text: Mapped[str] = mapped_column(String(500), nullable=False)

    task: Mapped[Task] = relationship(back_populates="comments")
    author: Mapped["User"] = relationship()
