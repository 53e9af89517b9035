from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Iterable, List, Optional, Sequence, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Session

from contentdesk.db.base import utcnow
from contentdesk.models.enums import PENDING_INVOICE_STATUSES, EmailStatus, InvoiceStatus
from contentdesk.models.invoice import Invoice, InvoiceEmail, InvoiceItem, InvoiceSequence


TWOPLACES = Decimal("0.01")
HUNDRED = Decimal("100")
ZERO = Decimal("0.00")


class InvoiceInputError(ValueError):
    """Raised for line items or rates that cannot be priced."""


class InvoiceStateError(Exception):
    """Raised when a lifecycle action is not allowed in the invoice's current status."""


def _q(value: Decimal) -> Decimal:
    return value.quantize(TWOPLACES, rounding=ROUND_HALF_UP)


def _decimal(value: Any, default: Decimal = ZERO) -> Decimal:
    if value is None:
        return default
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


@dataclass(frozen=True)
class InvoiceTotals:
    amounts: Tuple[Decimal, ...]
    subtotal: Decimal
    tax_amount: Decimal
    discount_amount: Decimal
    total: Decimal


def line_amount(quantity: Any, rate: Any) -> Decimal:
    quantity = _decimal(quantity)
    rate = _decimal(rate)
    if quantity < 0 or rate < 0:
        raise InvoiceInputError("Quantity and rate must be non-negative")
    return _q(quantity * rate)


def compute_totals(
    lines: Iterable[Tuple[Any, Any]],
    *,
    tax_rate: Any = ZERO,
    discount_rate: Any = ZERO,
) -> InvoiceTotals:
    """Price an invoice from ``(quantity, rate)`` pairs and two percentages.

    Every figure is rounded half-up to cents, and tax and discount are both
    taken on the rounded subtotal, so ``total == subtotal + tax - discount``
    holds exactly.
    """
    tax_rate = _decimal(tax_rate)
    discount_rate = _decimal(discount_rate)
    for label, rate in (("Tax", tax_rate), ("Discount", discount_rate)):
        if rate < 0 or rate > HUNDRED:
            raise InvoiceInputError(f"{label} rate must be between 0 and 100")

    amounts = tuple(line_amount(quantity, rate) for quantity, rate in lines)
    subtotal = _q(sum(amounts, start=ZERO))
    tax_amount = _q(subtotal * tax_rate / HUNDRED)
    discount_amount = _q(subtotal * discount_rate / HUNDRED)
    total = _q(subtotal + tax_amount - discount_amount)
    return InvoiceTotals(
        amounts=amounts,
        subtotal=subtotal,
        tax_amount=tax_amount,
        discount_amount=discount_amount,
        total=total,
    )


def generate_invoice_number(db: Session, *, user_id: int, year: Optional[int] = None) -> str:
    year = year or utcnow().year
    sequence = (
        db.query(InvoiceSequence)
        .filter(InvoiceSequence.user_id == user_id, InvoiceSequence.year == year)
        .with_for_update()
        .first()
    )
    if not sequence:
        sequence = InvoiceSequence(user_id=user_id, year=year, last_number=0)
        db.add(sequence)
        db.flush()
    sequence.last_number += 1
    db.add(sequence)
    db.flush()
    return f"INV-{year}-{sequence.last_number:04d}"


def replace_invoice_items(db: Session, invoice: Invoice, items_payload: Iterable[dict]) -> List[InvoiceItem]:
    invoice.items.clear()
    db.flush()

    created: List[InvoiceItem] = []
    for idx, item in enumerate(items_payload):
        quantity = _decimal(item.get("quantity"), Decimal("1.00"))
        rate = _decimal(item.get("rate"))
        invoice_item = InvoiceItem(
            description=str(item["description"]),
            quantity=quantity,
            rate=rate,
            amount=line_amount(quantity, rate),
            order_index=idx,
        )
        if item.get("type") is not None:
            invoice_item.type = item["type"]
        invoice.items.append(invoice_item)
        created.append(invoice_item)
    db.flush()
    return created


def recompute_invoice_totals(invoice: Invoice) -> Invoice:
    totals = compute_totals(
        [(item.quantity, item.rate) for item in invoice.items],
        tax_rate=invoice.tax_rate,
        discount_rate=invoice.discount_rate,
    )
    for item, amount in zip(invoice.items, totals.amounts):
        item.amount = amount
    invoice.subtotal = totals.subtotal
    invoice.tax_amount = totals.tax_amount
    invoice.discount_amount = totals.discount_amount
    invoice.total = totals.total
    return invoice


def set_invoice_status(invoice: Invoice, new_status: InvoiceStatus, now: Optional[datetime] = None) -> None:
    invoice.status = new_status
    # paid_date records the first payment and is never moved afterwards.
    if new_status == InvoiceStatus.PAID and invoice.paid_date is None:
        invoice.paid_date = now or utcnow()


def ensure_invoice_editable(invoice: Invoice, update_data: dict) -> None:
    if invoice.status == InvoiceStatus.PAID and set(update_data) - {"status"}:
        raise InvoiceStateError("Cannot modify paid invoice")


def apply_invoice_update(
    db: Session,
    invoice: Invoice,
    update_data: dict,
    now: Optional[datetime] = None,
) -> Invoice:
    """Apply a partial update, honouring the paid-invoice edit lock.

    A paid invoice accepts only a status-only update. Totals are always
    recomputed from the stored items and rates; any totals in
    ``update_data`` are ignored by the caller's schema.
    """
    ensure_invoice_editable(invoice, update_data)

    update_data = dict(update_data)
    items_payload = update_data.pop("items", None)
    new_status = update_data.pop("status", None)

    for field, value in update_data.items():
        setattr(invoice, field, value)

    if items_payload is not None:
        replace_invoice_items(db, invoice, items_payload)

    recompute_invoice_totals(invoice)
    if new_status is not None:
        set_invoice_status(invoice, new_status, now)
    return invoice


def send_invoice(invoice: Invoice, now: Optional[datetime] = None) -> InvoiceEmail:
    """Mark the invoice sent and record the send in its email history.

    No mail leaves the process; the history row and a log line are the
    whole side effect.
    """
    if invoice.status == InvoiceStatus.PAID:
        raise InvoiceStateError("Cannot send paid invoice")
    if invoice.client is None:
        raise InvoiceStateError("Invoice has no client to send to")

    invoice.status = InvoiceStatus.SENT
    email = InvoiceEmail(
        sent_at=now or utcnow(),
        sent_to=invoice.client.email,
        subject=f"Invoice {invoice.invoice_number}",
        status=EmailStatus.SENT,
    )
    invoice.email_history.append(email)
    return email


def mark_invoice_paid(invoice: Invoice, now: Optional[datetime] = None) -> Invoice:
    set_invoice_status(invoice, InvoiceStatus.PAID, now)
    return invoice


def ensure_invoice_deletable(invoice: Invoice) -> None:
    if invoice.status == InvoiceStatus.PAID:
        raise InvoiceStateError("Cannot delete paid invoice")


@dataclass(frozen=True)
class InvoiceAggregate:
    total_invoices: int
    paid_invoices: int
    pending_invoices: int
    overdue_invoices: int
    total_revenue: Decimal
    pending_amount: Decimal


def summarize_invoices(db: Session, *, user_id: int, now: Optional[datetime] = None) -> InvoiceAggregate:
    """Count and sum a user's invoices by lifecycle bucket.

    Revenue is the sum of paid totals; the pending bucket covers sent and
    viewed invoices; overdue is a pending invoice past its due date.
    """
    now = now or utcnow()
    rows: Sequence[Tuple[InvoiceStatus, int, Optional[Decimal]]] = (
        db.query(Invoice.status, func.count(Invoice.id), func.sum(Invoice.total))
        .filter(Invoice.user_id == user_id)
        .group_by(Invoice.status)
        .all()
    )

    total_invoices = paid_invoices = pending_invoices = 0
    total_revenue = pending_amount = ZERO
    for status_value, count, amount in rows:
        amount = _decimal(amount)
        total_invoices += count
        if status_value == InvoiceStatus.PAID:
            paid_invoices = count
            total_revenue = amount
        elif status_value in PENDING_INVOICE_STATUSES:
            pending_invoices += count
            pending_amount += amount

    overdue_invoices = (
        db.query(func.count(Invoice.id))
        .filter(
            Invoice.user_id == user_id,
            Invoice.status.in_(PENDING_INVOICE_STATUSES),
            Invoice.due_date < now,
        )
        .scalar()
        or 0
    )

    return InvoiceAggregate(
        total_invoices=total_invoices,
        paid_invoices=paid_invoices,
        pending_invoices=pending_invoices,
        overdue_invoices=overdue_invoices,
        total_revenue=_q(total_revenue),
        pending_amount=_q(pending_amount),
    )
