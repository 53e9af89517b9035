from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import (
    JSON,
    Boolean,
    Enum,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from contentdesk.db.base import Base, IDMixin, OwnedMixin, TimestampMixin, UTCDateTime, utcnow
from contentdesk.models.enums import PENDING_INVOICE_STATUSES, EmailStatus, InvoiceItemType, InvoiceStatus, PaymentMethod
from contentdesk.services.progress import days_until_due, is_overdue


class Invoice(IDMixin, OwnedMixin, TimestampMixin, Base):
    __tablename__ = "invoices"
    __table_args__ = (UniqueConstraint("user_id", "invoice_number", name="uq_invoices_user_id_invoice_number"),)

    invoice_number: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    client_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("clients.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    project_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("projects.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    status: Mapped[InvoiceStatus] = mapped_column(
        Enum(InvoiceStatus, name="invoice_status"),
        default=InvoiceStatus.DRAFT,
        nullable=False,
        index=True,
    )
    issue_date: Mapped[datetime] = mapped_column(UTCDateTime(), default=utcnow, nullable=False)
    due_date: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False, index=True)
    paid_date: Mapped[Optional[datetime]] = mapped_column(UTCDateTime(), nullable=True)
    currency: Mapped[str] = mapped_column(String(3), default="USD", nullable=False)

    subtotal: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=Decimal("0.00"), nullable=False)
    tax_rate: Mapped[Decimal] = mapped_column(Numeric(5, 2), default=Decimal("0.00"), nullable=False)
    tax_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=Decimal("0.00"), nullable=False)
    discount_rate: Mapped[Decimal] = mapped_column(Numeric(5, 2), default=Decimal("0.00"), nullable=False)
    discount_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=Decimal("0.00"), nullable=False)
    total: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=Decimal("0.00"), nullable=False)

    notes: Mapped[str] = mapped_column(Text, default="", nullable=False)
    terms: Mapped[str] = mapped_column(Text, default="", nullable=False)
    payment_method: Mapped[PaymentMethod] = mapped_column(
        Enum(PaymentMethod, name="payment_method"),
        default=PaymentMethod.BANK_TRANSFER,
        nullable=False,
    )
    payment_details: Mapped[str] = mapped_column(String(500), default="", nullable=False)

    # Recurrence is stored for the client; nothing generates invoices from it.
    is_recurring: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    recurring_settings: Mapped[Optional[dict]] = mapped_column(JSON, nullable=True)

    client: Mapped[Optional["Client"]] = relationship(back_populates="invoices")
    project: Mapped[Optional["Project"]] = relationship(back_populates="invoices")
    items: Mapped[List["InvoiceItem"]] = relationship(
        back_populates="invoice",
        cascade="all, delete-orphan",
        order_by=lambda: InvoiceItem.order_index.asc(),
    )
    email_history: Mapped[List["InvoiceEmail"]] = relationship(
        back_populates="invoice",
        cascade="all, delete-orphan",
        order_by=lambda: [InvoiceEmail.sent_at.asc(), InvoiceEmail.id.asc()],
    )

    @property
    def is_overdue(self) -> bool:
        return is_overdue(self.due_date, done=self.status not in PENDING_INVOICE_STATUSES)

    @property
    def days_until_due(self) -> Optional[int]:
        return days_until_due(self.due_date)


class InvoiceItem(IDMixin, TimestampMixin, Base):
    __tablename__ = "invoice_items"

    invoice_id: Mapped[int] = mapped_column(ForeignKey("invoices.id", ondelete="CASCADE"), nullable=False, index=True)
    description: Mapped[str] = mapped_column(String(500), nullable=False)
    quantity: Mapped[Decimal] = mapped_column(Numeric(10, 2), default=Decimal("1.00"), nullable=False)
    rate: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=Decimal("0.00"), nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=Decimal("0.00"), nullable=False)
    type: Mapped[InvoiceItemType] = mapped_column(
        Enum(InvoiceItemType, name="invoice_item_type"),
        default=InvoiceItemType.FIXED,
        nullable=False,
    )
    order_index: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    invoice: Mapped[Invoice] = relationship(back_populates="items")


class InvoiceEmail(IDMixin, TimestampMixin, Base):
    __tablename__ = "invoice_emails"

    invoice_id: Mapped[int] = mapped_column(ForeignKey("invoices.id", ondelete="CASCADE"), nullable=False, index=True)
    sent_at: Mapped[datetime] = mapped_column(UTCDateTime(), default=utcnow, nullable=False)
    sent_to: Mapped[str] = mapped_column(String(255), nullable=False)
    subject: Mapped[str] = mapped_column(String(255), nullable=False)
    status: Mapped[EmailStatus] = mapped_column(
        Enum(EmailStatus, name="email_status"),
        default=EmailStatus.SENT,
        nullable=False,
    )

    invoice: Mapped[Invoice] = relationship(back_populates="email_history")


class InvoiceSequence(IDMixin, TimestampMixin, Base):
    __tablename__ = "invoice_sequences"
    __table_args__ = (UniqueConstraint("user_id", "year", name="uq_invoice_sequences_user_id_year"),)

    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    last_number: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
