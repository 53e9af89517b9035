from __future__ import annotations

from enum import StrEnum


class ClientStatus(StrEnum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    PROSPECT = "prospect"


class ContractType(StrEnum):
    HOURLY = "hourly"
    PROJECT = "project"
    RETAINER = "retainer"
    OTHER = "other"


class PaymentTerms(StrEnum):
    NET15 = "net15"
    NET30 = "net30"
    NET45 = "net45"
    NET60 = "net60"
    IMMEDIATE = "immediate"
    CUSTOM = "custom"


class Priority(StrEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class ProjectStatus(StrEnum):
    PLANNING = "planning"
    ACTIVE = "active"
    ON_HOLD = "on-hold"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class ProjectType(StrEnum):
    BLOG = "blog"
    SOCIAL_MEDIA = "social-media"
    VIDEO = "video"
    PODCAST = "podcast"
    NEWSLETTER = "newsletter"
    WEBSITE = "website"
    OTHER = "other"


class TaskStatus(StrEnum):
    TODO = "todo"
    IN_PROGRESS = "in-progress"
    REVIEW = "review"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class TaskType(StrEnum):
    RESEARCH = "research"
    WRITING = "writing"
    EDITING = "editing"
    DESIGN = "design"
    REVIEW = "review"
    PUBLISHING = "publishing"
    OTHER = "other"


class InvoiceStatus(StrEnum):
    DRAFT = "draft"
    SENT = "sent"
    VIEWED = "viewed"
    PAID = "paid"
    OVERDUE = "overdue"
    CANCELLED = "cancelled"


class InvoiceItemType(StrEnum):
    HOURLY = "hourly"
    FIXED = "fixed"
    EXPENSE = "expense"


class PaymentMethod(StrEnum):
    BANK_TRANSFER = "bank-transfer"
    PAYPAL = "paypal"
    STRIPE = "stripe"
    CHECK = "check"
    CASH = "cash"
    OTHER = "other"


class EmailStatus(StrEnum):
    SENT = "sent"
    DELIVERED = "delivered"
    OPENED = "opened"
    FAILED = "failed"


class RecurringFrequency(StrEnum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    YEARLY = "yearly"


# Statuses that keep a client from being deleted.
OPEN_PROJECT_STATUSES = (ProjectStatus.PLANNING, ProjectStatus.ACTIVE, ProjectStatus.ON_HOLD)

# Statuses excluded from overdue counts and deadline feeds.
CLOSED_PROJECT_STATUSES = (ProjectStatus.COMPLETED, ProjectStatus.CANCELLED)
CLOSED_TASK_STATUSES = (TaskStatus.COMPLETED, TaskStatus.CANCELLED)

# Invoices that are out with the client and awaiting payment.
PENDING_INVOICE_STATUSES = (InvoiceStatus.SENT, InvoiceStatus.VIEWED)
