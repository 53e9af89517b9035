from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import Field

from contentdesk.models.enums import (
    EmailStatus,
    InvoiceItemType,
    InvoiceStatus,
    PaymentMethod,
    RecurringFrequency,
)
from contentdesk.schemas.base import ClientRef, ORMModel, Pagination, ProjectRef


class InvoiceItemIn(ORMModel):
    description: str = Field(..., min_length=1, max_length=500)
    quantity: Decimal = Field(default=Decimal("1.00"), ge=0)
    rate: Decimal = Field(..., ge=0)
    type: InvoiceItemType = InvoiceItemType.FIXED


class InvoiceItemRead(ORMModel):
    id: int
    description: str
    quantity: Decimal
    rate: Decimal
    amount: Decimal
    type: InvoiceItemType


class RecurringSettings(ORMModel):
    frequency: Optional[RecurringFrequency] = None
    interval: int = Field(default=1, ge=1)
    next_invoice_date: Optional[datetime] = None
    end_date: Optional[datetime] = None


class InvoiceCreate(ORMModel):
    client_id: int
    project_id: Optional[int] = None
    issue_date: Optional[datetime] = None
    due_date: datetime
    currency: str = Field(default="USD", min_length=3, max_length=3)
    items: List[InvoiceItemIn] = Field(..., min_length=1)
    tax_rate: Decimal = Field(default=Decimal("0.00"), ge=0, le=100)
    discount_rate: Decimal = Field(default=Decimal("0.00"), ge=0, le=100)
    notes: str = Field(default="", max_length=1000)
    terms: str = Field(default="", max_length=1000)
    payment_method: PaymentMethod = PaymentMethod.BANK_TRANSFER
    payment_details: str = Field(default="", max_length=500)
    is_recurring: bool = False
    recurring_settings: Optional[RecurringSettings] = None


class InvoiceUpdate(ORMModel):
    client_id: Optional[int] = None
    project_id: Optional[int] = None
    status: Optional[InvoiceStatus] = None
    issue_date: Optional[datetime] = None
    due_date: Optional[datetime] = None
    currency: Optional[str] = Field(default=None, min_length=3, max_length=3)
    items: Optional[List[InvoiceItemIn]] = Field(default=None, min_length=1)
    tax_rate: Optional[Decimal] = Field(default=None, ge=0, le=100)
    discount_rate: Optional[Decimal] = Field(default=None, ge=0, le=100)
    notes: Optional[str] = Field(default=None, max_length=1000)
    terms: Optional[str] = Field(default=None, max_length=1000)
    payment_method: Optional[PaymentMethod] = None
    payment_details: Optional[str] = Field(default=None, max_length=500)
    is_recurring: Optional[bool] = None
    recurring_settings: Optional[RecurringSettings] = None


class InvoiceEmailRead(ORMModel):
    id: int
    sent_at: datetime
    sent_to: str
    subject: str
    status: EmailStatus


class InvoiceRead(ORMModel):
    id: int
    user_id: int
    invoice_number: str
    client_id: Optional[int] = None
    client: Optional[ClientRef] = None
    project_id: Optional[int] = None
    project: Optional[ProjectRef] = None
    status: InvoiceStatus
    issue_date: datetime
    due_date: datetime
    paid_date: Optional[datetime] = None
    currency: str
    items: List[InvoiceItemRead] = Field(default_factory=list)
    subtotal: Decimal
    tax_rate: Decimal
    tax_amount: Decimal
    discount_rate: Decimal
    discount_amount: Decimal
    total: Decimal
    notes: str
    terms: str
    payment_method: PaymentMethod
    payment_details: str
    is_recurring: bool
    recurring_settings: Optional[RecurringSettings] = None
    email_history: List[InvoiceEmailRead] = Field(default_factory=list)
    is_overdue: bool
    days_until_due: Optional[int] = None
    created_at: datetime
    updated_at: datetime


class InvoiceListResponse(ORMModel):
    invoices: List[InvoiceRead]
    pagination: Pagination


class InvoiceStats(ORMModel):
    total_invoices: int
    paid_invoices: int
    pending_invoices: int
    overdue_invoices: int
    total_revenue: Decimal
    pending_amount: Decimal
