"""Import all models so SQLAlchemy metadata is fully registered."""

from contentdesk.db.base import Base

from contentdesk.models.client import Client
from contentdesk.models.enums import (
    ClientStatus,
    ContractType,
    EmailStatus,
    InvoiceItemType,
    InvoiceStatus,
    PaymentMethod,
    PaymentTerms,
    Priority,
    ProjectStatus,
    ProjectType,
    RecurringFrequency,
    TaskStatus,
    TaskType,
)
from contentdesk.models.invoice import Invoice, InvoiceEmail, InvoiceItem, InvoiceSequence
from contentdesk.models.project import Project
from contentdesk.models.task import Task, TaskChecklistItem, TaskComment
from contentdesk.models.user import User

__all__ = [
    "Base",
    "Client",
    "ClientStatus",
    "ContractType",
    "EmailStatus",
    "Invoice",
    "InvoiceEmail",
    "InvoiceItem",
    "InvoiceItemType",
    "InvoiceSequence",
    "InvoiceStatus",
    "PaymentMethod",
    "PaymentTerms",
    "Priority",
    "Project",
    "ProjectStatus",
    "ProjectType",
    "RecurringFrequency",
    "Task",
    "TaskChecklistItem",
    "TaskComment",
    "TaskStatus",
    "TaskType",
    "User",
]
