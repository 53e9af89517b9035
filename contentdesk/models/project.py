from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import JSON, Boolean, Enum, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from contentdesk.db.base import Base, IDMixin, OwnedMixin, TimestampMixin, UTCDateTime, utcnow
from contentdesk.models.enums import Priority, ProjectStatus, ProjectType
from contentdesk.services.progress import days_until_due, is_overdue, sync_completion


class Project(IDMixin, OwnedMixin, TimestampMixin, Base):
    __tablename__ = "projects"

    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(Text, default="", nullable=False)
    status: Mapped[ProjectStatus] = mapped_column(
        Enum(ProjectStatus, name="project_status"),
        default=ProjectStatus.PLANNING,
        nullable=False,
        index=True,
    )
    priority: Mapped[Priority] = mapped_column(
        Enum(Priority, name="priority"),
        default=Priority.MEDIUM,
        nullable=False,
        index=True,
    )
    type: Mapped[ProjectType] = mapped_column(
        Enum(ProjectType, name="project_type"),
        default=ProjectType.OTHER,
        nullable=False,
    )
    client_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("clients.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    start_date: Mapped[datetime] = mapped_column(UTCDateTime(), default=utcnow, nullable=False)
    due_date: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False, index=True)
    completed_date: Mapped[Optional[datetime]] = mapped_column(UTCDateTime(), nullable=True)

    budget_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=Decimal("0.00"), nullable=False)
    budget_currency: Mapped[str] = mapped_column(String(3), default="USD", nullable=False)
    estimated_hours: Mapped[Decimal] = mapped_column(Numeric(8, 2), default=Decimal("0.00"), nullable=False)
    actual_hours: Mapped[Decimal] = mapped_column(Numeric(8, 2), default=Decimal("0.00"), nullable=False)
    progress: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    tags: Mapped[list] = mapped_column(JSON, default=list, nullable=False)
    notes: Mapped[str] = mapped_column(Text, default="", nullable=False)
    is_archived: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False, index=True)

    client: Mapped[Optional["Client"]] = relationship(back_populates="projects")
    tasks: Mapped[List["Task"]] = relationship(back_populates="project")
    invoices: Mapped[List["Invoice"]] = relationship(back_populates="project")

    @property
    def is_overdue(self) -> bool:
        return is_overdue(self.due_date, done=self.status == ProjectStatus.COMPLETED)

    @property
    def days_until_due(self) -> Optional[int]:
        return days_until_due(self.due_date)

    def set_status(self, status: ProjectStatus, now: Optional[datetime] = None) -> None:
        """Completing a project stamps completed_date and forces progress to 100."""
        self.status = status
        sync_completion(self, status == ProjectStatus.COMPLETED, force_progress=True, now=now)
