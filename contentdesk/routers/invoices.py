from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from contentdesk.core.deps import get_current_user
from contentdesk.core.metrics import record_invoice_event
from contentdesk.db.session import get_db
from contentdesk.models.enums import InvoiceStatus
from contentdesk.models.invoice import Invoice
from contentdesk.models.user import User
from contentdesk.schemas.base import Pagination
from contentdesk.schemas.invoice import (
    InvoiceCreate,
    InvoiceListResponse,
    InvoiceRead,
    InvoiceStats,
    InvoiceUpdate,
)
from contentdesk.services.invoices import (
    InvoiceStateError,
    apply_invoice_update,
    ensure_invoice_deletable,
    ensure_invoice_editable,
    generate_invoice_number,
    mark_invoice_paid,
    recompute_invoice_totals,
    replace_invoice_items,
    send_invoice as record_invoice_send,
    summarize_invoices,
)
from contentdesk.services.ownership import (
    OwnershipError,
    get_owned,
    require_owned_client,
    require_owned_project,
)

router = APIRouter(prefix="/api/invoices", tags=["invoices"])
logger = logging.getLogger(__name__)


def _get_invoice_or_404(db: Session, invoice_id: int, user: User) -> Invoice:
    invoice = get_owned(db, Invoice, invoice_id, user_id=user.id)
    if not invoice:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Invoice not found")
    return invoice


def _require_references(db: Session, user: User, *, client_id: Optional[int], project_id: Optional[int]) -> None:
    try:
        if client_id is not None:
            require_owned_client(db, client_id, user_id=user.id)
        if project_id is not None:
            require_owned_project(db, project_id, user_id=user.id)
    except OwnershipError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc


def _log_invoice_event(event: str, invoice: Invoice, user: User) -> None:
    record_invoice_event(event)
    logger.info(
        event,
        extra={
            "user_id": user.id,
            "entity": "invoice",
            "invoice_id": invoice.id,
            "invoice_number": invoice.invoice_number,
            "status": str(invoice.status),
        },
    )


@router.get("/stats/overview", response_model=InvoiceStats)
def invoice_stats(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> InvoiceStats:
    aggregate = summarize_invoices(db, user_id=current_user.id)
    return InvoiceStats(
        total_invoices=aggregate.total_invoices,
        paid_invoices=aggregate.paid_invoices,
        pending_invoices=aggregate.pending_invoices,
        overdue_invoices=aggregate.overdue_invoices,
        total_revenue=aggregate.total_revenue,
        pending_amount=aggregate.pending_amount,
    )


@router.get("", response_model=InvoiceListResponse)
def list_invoices(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    status_filter: Optional[InvoiceStatus] = Query(None, alias="status"),
    client_id: Optional[int] = Query(None, alias="client"),
    search: Optional[str] = Query(None, max_length=100),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> InvoiceListResponse:
    query = db.query(Invoice).filter(Invoice.user_id == current_user.id)
    if status_filter:
        query = query.filter(Invoice.status == status_filter)
    if client_id:
        query = query.filter(Invoice.client_id == client_id)
    if search:
        term = f"%{search.strip().lower()}%"
        query = query.filter(
            or_(
                func.lower(Invoice.invoice_number).like(term),
                func.lower(Invoice.notes).like(term),
            )
        )

    total = query.count()
    invoices = (
        query.order_by(Invoice.created_at.desc(), Invoice.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    return InvoiceListResponse(
        invoices=[InvoiceRead.model_validate(inv) for inv in invoices],
        pagination=Pagination.build(page=page, limit=limit, total=total),
    )


@router.get("/{invoice_id}", response_model=InvoiceRead)
def get_invoice(
    invoice_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> InvoiceRead:
    return InvoiceRead.model_validate(_get_invoice_or_404(db, invoice_id, current_user))


@router.post("", response_model=InvoiceRead, status_code=status.HTTP_201_CREATED)
def create_invoice(
    invoice_in: InvoiceCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> InvoiceRead:
    _require_references(db, current_user, client_id=invoice_in.client_id, project_id=invoice_in.project_id)

    invoice = Invoice(
        user_id=current_user.id,
        invoice_number=generate_invoice_number(db, user_id=current_user.id),
        client_id=invoice_in.client_id,
        project_id=invoice_in.project_id,
        status=InvoiceStatus.DRAFT,
        due_date=invoice_in.due_date,
        currency=invoice_in.currency,
        tax_rate=invoice_in.tax_rate,
        discount_rate=invoice_in.discount_rate,
        notes=invoice_in.notes,
        terms=invoice_in.terms,
        payment_method=invoice_in.payment_method,
        payment_details=invoice_in.payment_details,
        is_recurring=invoice_in.is_recurring,
        recurring_settings=(
            invoice_in.recurring_settings.model_dump(mode="json") if invoice_in.recurring_settings else None
        ),
    )
    if invoice_in.issue_date:
        invoice.issue_date = invoice_in.issue_date
    db.add(invoice)
    db.flush()

    replace_invoice_items(db, invoice, [item.model_dump() for item in invoice_in.items])
    recompute_invoice_totals(invoice)
    db.add(invoice)

    db.commit()
    db.refresh(invoice)
    _log_invoice_event("invoice_created", invoice, current_user)
    return InvoiceRead.model_validate(invoice)


@router.put("/{invoice_id}", response_model=InvoiceRead)
def update_invoice(
    invoice_id: int,
    invoice_update: InvoiceUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> InvoiceRead:
    invoice = _get_invoice_or_404(db, invoice_id, current_user)

    update_data = invoice_update.model_dump(exclude_unset=True)
    # Explicit nulls on required columns are treated as "not provided".
    update_data = {
        field: value
        for field, value in update_data.items()
        if value is not None or field in ("project_id", "recurring_settings")
    }
    if "recurring_settings" in update_data and invoice_update.recurring_settings is not None:
        update_data["recurring_settings"] = invoice_update.recurring_settings.model_dump(mode="json")
    try:
        # The paid lock outranks reference checks.
        ensure_invoice_editable(invoice, update_data)
        _require_references(
            db,
            current_user,
            client_id=update_data.get("client_id"),
            project_id=update_data.get("project_id"),
        )
        apply_invoice_update(db, invoice, update_data)
    except InvoiceStateError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc

    db.add(invoice)
    db.commit()
    db.refresh(invoice)
    _log_invoice_event("invoice_updated", invoice, current_user)
    return InvoiceRead.model_validate(invoice)


@router.post("/{invoice_id}/send", response_model=InvoiceRead)
def send_invoice(
    invoice_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> InvoiceRead:
    invoice = _get_invoice_or_404(db, invoice_id, current_user)
    try:
        email = record_invoice_send(invoice)
    except InvoiceStateError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc

    db.add(invoice)
    db.commit()
    db.refresh(invoice)
    record_invoice_event("invoice_sent")
    logger.info(
        "invoice_sent",
        extra={
            "user_id": current_user.id,
            "entity": "invoice",
            "invoice_id": invoice.id,
            "invoice_number": invoice.invoice_number,
            "status": str(email.status),
        },
    )
    return InvoiceRead.model_validate(invoice)


@router.put("/{invoice_id}/mark-paid", response_model=InvoiceRead)
def mark_paid(
    invoice_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> InvoiceRead:
    invoice = _get_invoice_or_404(db, invoice_id, current_user)
    mark_invoice_paid(invoice)
    db.add(invoice)
    db.commit()
    db.refresh(invoice)
    _log_invoice_event("invoice_paid", invoice, current_user)
    return InvoiceRead.model_validate(invoice)


@router.delete("/{invoice_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_invoice(
    invoice_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> None:
    invoice = _get_invoice_or_404(db, invoice_id, current_user)
    try:
        ensure_invoice_deletable(invoice)
    except InvoiceStateError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc

    _log_invoice_event("invoice_deleted", invoice, current_user)
    db.delete(invoice)
    db.commit()
