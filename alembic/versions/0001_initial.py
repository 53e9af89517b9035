"""Initial schema: users, clients, projects, tasks, invoices.

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-18
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None


# Enum labels are the member names, which is what SQLAlchemy persists.
ENUMS = {
    "client_status": ("ACTIVE", "INACTIVE", "PROSPECT"),
    "contract_type": ("HOURLY", "PROJECT", "RETAINER", "OTHER"),
    "payment_terms": ("NET15", "NET30", "NET45", "NET60", "IMMEDIATE", "CUSTOM"),
    "priority": ("LOW", "MEDIUM", "HIGH", "URGENT"),
    "project_status": ("PLANNING", "ACTIVE", "ON_HOLD", "COMPLETED", "CANCELLED"),
    "project_type": ("BLOG", "SOCIAL_MEDIA", "VIDEO", "PODCAST", "NEWSLETTER", "WEBSITE", "OTHER"),
    "task_status": ("TODO", "IN_PROGRESS", "REVIEW", "COMPLETED", "CANCELLED"),
    "task_type": ("RESEARCH", "WRITING", "EDITING", "DESIGN", "REVIEW", "PUBLISHING", "OTHER"),
    "invoice_status": ("DRAFT", "SENT", "VIEWED", "PAID", "OVERDUE", "CANCELLED"),
    "invoice_item_type": ("HOURLY", "FIXED", "EXPENSE"),
    "payment_method": ("BANK_TRANSFER", "PAYPAL", "STRIPE", "CHECK", "CASH", "OTHER"),
    "email_status": ("SENT", "DELIVERED", "OPENED", "FAILED"),
}


def _enum(name: str) -> postgresql.ENUM:
    return postgresql.ENUM(*ENUMS[name], name=name, create_type=False)


def _id() -> sa.Column:
    return sa.Column("id", sa.Integer(), primary_key=True, nullable=False)


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    ]


def _money(name: str, precision: int = 12) -> sa.Column:
    return sa.Column(name, sa.Numeric(precision, 2), nullable=False, server_default="0")


def _text(name: str, length: int | None = None) -> sa.Column:
    column_type = sa.String(length=length) if length else sa.Text()
    return sa.Column(name, column_type, nullable=False, server_default="")


def _indexes(table: str, *columns: str) -> None:
    for column in columns:
        op.create_index(f"ix_{table}_{column}", table, [column], unique=False)


def upgrade() -> None:
    bind = op.get_bind()
    for name, labels in ENUMS.items():
        postgresql.ENUM(*labels, name=name).create(bind, checkfirst=True)

    op.create_table(
        "users",
        _id(),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("full_name", sa.String(length=255), nullable=True),
        sa.Column("company", sa.String(length=255), nullable=True),
        sa.Column("phone", sa.String(length=50), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_users"),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)
    _indexes("users", "id", "is_active")

    op.create_table(
        "clients",
        _id(),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        _text("phone", 50),
        _text("company", 100),
        _text("website", 255),
        _text("address_street", 255),
        _text("address_city", 100),
        _text("address_state", 100),
        _text("address_zip_code", 20),
        _text("address_country", 100),
        _text("notes"),
        sa.Column("status", _enum("client_status"), nullable=False, server_default="ACTIVE"),
        sa.Column("contract_type", _enum("contract_type"), nullable=False, server_default="PROJECT"),
        _money("hourly_rate", 10),
        sa.Column("currency", sa.String(length=3), nullable=False, server_default="USD"),
        sa.Column("payment_terms", _enum("payment_terms"), nullable=False, server_default="NET30"),
        _text("custom_payment_terms", 255),
        sa.Column("tags", sa.JSON(), nullable=False),
        sa.Column("social_media", sa.JSON(), nullable=False),
        sa.Column("last_contact", sa.DateTime(timezone=True), nullable=True),
        sa.Column("next_follow_up", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], name="fk_clients_user_id_users", ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id", name="pk_clients"),
        sa.UniqueConstraint("user_id", "email", name="uq_clients_user_id_email"),
    )
    _indexes("clients", "id", "user_id", "name", "status")

    op.create_table(
        "projects",
        _id(),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("title", sa.String(length=200), nullable=False),
        _text("description"),
        sa.Column("status", _enum("project_status"), nullable=False, server_default="PLANNING"),
        sa.Column("priority", _enum("priority"), nullable=False, server_default="MEDIUM"),
        sa.Column("type", _enum("project_type"), nullable=False, server_default="OTHER"),
        sa.Column("client_id", sa.Integer(), nullable=True),
        sa.Column("start_date", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("due_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("completed_date", sa.DateTime(timezone=True), nullable=True),
        _money("budget_amount"),
        sa.Column("budget_currency", sa.String(length=3), nullable=False, server_default="USD"),
        _money("estimated_hours", 8),
        _money("actual_hours", 8),
        sa.Column("progress", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("tags", sa.JSON(), nullable=False),
        _text("notes"),
        sa.Column("is_archived", sa.Boolean(), nullable=False, server_default=sa.false()),
        *_timestamps(),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], name="fk_projects_user_id_users", ondelete="CASCADE"),
        sa.ForeignKeyConstraint(
            ["client_id"], ["clients.id"], name="fk_projects_client_id_clients", ondelete="SET NULL"
        ),
        sa.PrimaryKeyConstraint("id", name="pk_projects"),
    )
    _indexes("projects", "id", "user_id", "status", "priority", "client_id", "due_date", "is_archived")

    op.create_table(
        "tasks",
        _id(),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("title", sa.String(length=200), nullable=False),
        _text("description"),
        sa.Column("status", _enum("task_status"), nullable=False, server_default="TODO"),
        sa.Column("priority", _enum("priority"), nullable=False, server_default="MEDIUM"),
        sa.Column("type", _enum("task_type"), nullable=False, server_default="OTHER"),
        sa.Column("project_id", sa.Integer(), nullable=False),
        sa.Column("assigned_to_user_id", sa.Integer(), nullable=True),
        sa.Column("start_date", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("due_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("completed_date", sa.DateTime(timezone=True), nullable=True),
        _money("estimated_hours", 8),
        _money("actual_hours", 8),
        sa.Column("progress", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("tags", sa.JSON(), nullable=False),
        sa.Column("recurring", sa.JSON(), nullable=True),
        sa.Column("is_archived", sa.Boolean(), nullable=False, server_default=sa.false()),
        *_timestamps(),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], name="fk_tasks_user_id_users", ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["project_id"], ["projects.id"], name="fk_tasks_project_id_projects"),
        sa.ForeignKeyConstraint(["assigned_to_user_id"], ["users.id"], name="fk_tasks_assigned_to_user_id_users"),
        sa.PrimaryKeyConstraint("id", name="pk_tasks"),
    )
    _indexes(
        "tasks", "id", "user_id", "status", "priority", "project_id", "assigned_to_user_id", "due_date", "is_archived"
    )

    op.create_table(
        "task_checklist_items",
        _id(),
        sa.Column("task_id", sa.Integer(), nullable=False),
        sa.Column("order_index", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("item", sa.String(length=255), nullable=False),
        sa.Column("completed", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(
            ["task_id"], ["tasks.id"], name="fk_task_checklist_items_task_id_tasks", ondelete="CASCADE"
        ),
        sa.PrimaryKeyConstraint("id", name="pk_task_checklist_items"),
    )
    _indexes("task_checklist_items", "id", "task_id")

    op.create_table(
        "task_comments",
        _id(),
        sa.Column("task_id", sa.Integer(), nullable=False),
        sa.Column("author_user_id", sa.Integer(), nullable=False),
        sa.Column("text", sa.String(length=500), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["task_id"], ["tasks.id"], name="fk_task_comments_task_id_tasks", ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["author_user_id"], ["users.id"], name="fk_task_comments_author_user_id_users"),
        sa.PrimaryKeyConstraint("id", name="pk_task_comments"),
    )
    _indexes("task_comments", "id", "task_id", "author_user_id")

    op.create_table(
        "invoices",
        _id(),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("invoice_number", sa.String(length=50), nullable=False),
        sa.Column("client_id", sa.Integer(), nullable=True),
        sa.Column("project_id", sa.Integer(), nullable=True),
        sa.Column("status", _enum("invoice_status"), nullable=False, server_default="DRAFT"),
        sa.Column("issue_date", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("due_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("paid_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("currency", sa.String(length=3), nullable=False, server_default="USD"),
        _money("subtotal"),
        _money("tax_rate", 5),
        _money("tax_amount"),
        _money("discount_rate", 5),
        _money("discount_amount"),
        _money("total"),
        _text("notes"),
        _text("terms"),
        sa.Column("payment_method", _enum("payment_method"), nullable=False, server_default="BANK_TRANSFER"),
        _text("payment_details", 500),
        sa.Column("is_recurring", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("recurring_settings", sa.JSON(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], name="fk_invoices_user_id_users", ondelete="CASCADE"),
        sa.ForeignKeyConstraint(
            ["client_id"], ["clients.id"], name="fk_invoices_client_id_clients", ondelete="SET NULL"
        ),
        sa.ForeignKeyConstraint(
            ["project_id"], ["projects.id"], name="fk_invoices_project_id_projects", ondelete="SET NULL"
        ),
        sa.PrimaryKeyConstraint("id", name="pk_invoices"),
        sa.UniqueConstraint("user_id", "invoice_number", name="uq_invoices_user_id_invoice_number"),
    )
    _indexes("invoices", "id", "user_id", "invoice_number", "client_id", "project_id", "status", "due_date")

    op.create_table(
        "invoice_items",
        _id(),
        sa.Column("invoice_id", sa.Integer(), nullable=False),
        sa.Column("description", sa.String(length=500), nullable=False),
        sa.Column("quantity", sa.Numeric(10, 2), nullable=False, server_default="1"),
        _money("rate"),
        _money("amount"),
        sa.Column("type", _enum("invoice_item_type"), nullable=False, server_default="FIXED"),
        sa.Column("order_index", sa.Integer(), nullable=False, server_default="0"),
        *_timestamps(),
        sa.ForeignKeyConstraint(
            ["invoice_id"], ["invoices.id"], name="fk_invoice_items_invoice_id_invoices", ondelete="CASCADE"
        ),
        sa.PrimaryKeyConstraint("id", name="pk_invoice_items"),
    )
    _indexes("invoice_items", "id", "invoice_id")

    op.create_table(
        "invoice_emails",
        _id(),
        sa.Column("invoice_id", sa.Integer(), nullable=False),
        sa.Column("sent_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("sent_to", sa.String(length=255), nullable=False),
        sa.Column("subject", sa.String(length=255), nullable=False),
        sa.Column("status", _enum("email_status"), nullable=False, server_default="SENT"),
        *_timestamps(),
        sa.ForeignKeyConstraint(
            ["invoice_id"], ["invoices.id"], name="fk_invoice_emails_invoice_id_invoices", ondelete="CASCADE"
        ),
        sa.PrimaryKeyConstraint("id", name="pk_invoice_emails"),
    )
    _indexes("invoice_emails", "id", "invoice_id")

    op.create_table(
        "invoice_sequences",
        _id(),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("year", sa.Integer(), nullable=False),
        sa.Column("last_number", sa.Integer(), nullable=False, server_default="0"),
        *_timestamps(),
        sa.ForeignKeyConstraint(
            ["user_id"], ["users.id"], name="fk_invoice_sequences_user_id_users", ondelete="CASCADE"
        ),
        sa.PrimaryKeyConstraint("id", name="pk_invoice_sequences"),
        sa.UniqueConstraint("user_id", "year", name="uq_invoice_sequences_user_id_year"),
    )
    _indexes("invoice_sequences", "id", "user_id")


def downgrade() -> None:
    for table in (
        "invoice_sequences",
        "invoice_emails",
        "invoice_items",
        "invoices",
        "task_comments",
        "task_checklist_items",
        "tasks",
        "projects",
        "clients",
        "users",
    ):
        op.drop_table(table)

    bind = op.get_bind()
    for name, labels in reversed(list(ENUMS.items())):
        postgresql.ENUM(*labels, name=name).drop(bind, checkfirst=True)
