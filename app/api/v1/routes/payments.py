# app/api/v1/routes/payments.py
"""Payments received against invoices."""

from __future__ import annotations

import logging
import uuid
from datetime import date

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.db import get_db
from app.domain.services import payment_service
from app.infrastructure.audit import log_billing_action
from app.infrastructure.db.models import Payment, User
from app.infrastructure.db.repositories.payment_repository import PaymentRepository

from app.api.v1.deps import get_current_user, owner_scope, require_admin
from app.api.v1.envelope import ok
from app.api.v1.schemas.payments import (
    InvoicePaymentsResponse,
    PaymentCreateRequest,
    PaymentResponse,
    PaymentUpdateRequest,
)

logger = logging.getLogger("api.v1.payments")

router = APIRouter(prefix="/payments", tags=["Payments"])


def payment_to_out(p: Payment) -> dict:
    return PaymentResponse(
        id=str(p.id),
        invoice_id=str(p.invoice_id),
        amount=p.amount,
        payment_date=p.payment_date,
        payment_mode=p.payment_mode,
        transaction_id=p.transaction_id,
        notes=p.notes,
        received_by=str(p.received_by),
        created_at=p.created_at,
    ).model_dump()


@router.get("", response_model=dict)
async def list_payments(
    invoice_id: uuid.UUID | None = Query(None),
    date_from: date | None = Query(None, description="Filter: payment_date >= this"),
    date_to: date | None = Query(None, description="Filter: payment_date <= this"),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    payments = await PaymentRepository(db).search(
        owner_scope(user), invoice_id=invoice_id, date_from=date_from, date_to=date_to
    )
    return ok(data=[payment_to_out(p) for p in payments])


@router.get("/invoice/{invoice_id}", response_model=dict)
async def invoice_payments(
    invoice_id: uuid.UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Payments on one invoice with total paid and remaining balance."""
    summary = await payment_service.invoice_payment_summary(db, invoice_id, owner_scope(user))
    inv = summary["invoice"]
    return ok(
        data=InvoicePaymentsResponse(
            invoice_id=str(inv.id),
            invoice_number=inv.invoice_number,
            payments=[payment_to_out(p) for p in summary["payments"]],
            total_paid=summary["total_paid"],
            remaining=summary["remaining"],
            invoice_total=summary["invoice_total"],
            payment_status=summary["payment_status"],
        ).model_dump()
    )


@router.post("", response_model=dict, status_code=201)
async def create_payment(
    body: PaymentCreateRequest,
    user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    payment = await payment_service.create_payment(
        db, body, received_by=user.id, owner_id=owner_scope(user)
    )
    log_billing_action(
        "create_payment",
        user_id=user.id,
        entity="payment",
        entity_id=payment.id,
        details={"invoice_id": str(payment.invoice_id), "amount": str(payment.amount)},
    )
    return ok(data=payment_to_out(payment), message="Payment recorded")


@router.put("/{payment_id}", response_model=dict)
async def update_payment(
    payment_id: uuid.UUID,
    body: PaymentUpdateRequest,
    user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    payment = await payment_service.update_payment(
        db, payment_id, body, owner_id=owner_scope(user)
    )
    log_billing_action(
        "update_payment",
        user_id=user.id,
        entity="payment",
        entity_id=payment.id,
        details={"fields": sorted(body.model_dump(exclude_unset=True))},
    )
    return ok(data=payment_to_out(payment), message="Payment updated")


@router.delete("/{payment_id}", response_model=dict)
async def delete_payment(
    payment_id: uuid.UUID,
    user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    await payment_service.delete_payment(db, payment_id, owner_id=owner_scope(user))
    log_billing_action("delete_payment", user_id=user.id, entity="payment", entity_id=payment_id)
    return ok(message="Payment deleted")
