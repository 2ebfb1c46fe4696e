# app/domain/services/payment_service.py
"""
Recording customer payments against invoices.

Every write (create / update / delete) runs in one transaction together
with the payment-status recompute of each affected invoice, while the
per-invoice locks are held.
"""

from __future__ import annotations

import logging
import uuid
from datetime import date
from decimal import Decimal
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import NotFoundError
from app.domain.models.billing import PaymentDraft, PaymentUpdate
from app.domain.services.payment_reconciler import (
    invoice_locks,
    lock_invoice,
    recompute_invoice_status,
)
from app.infrastructure.db.models import Payment
from app.infrastructure.db.repositories.invoice_repository import InvoiceRepository
from app.infrastructure.db.repositories.payment_repository import PaymentRepository

logger = logging.getLogger("payment_service")

_NOT_NULL_FIELDS = frozenset({"invoice_id", "amount", "payment_date", "payment_mode"})


async def create_payment(
    db: AsyncSession,
    draft: PaymentDraft,
    *,
    received_by: uuid.UUID,
    owner_id: uuid.UUID | None = None,
) -> Payment:
    """Record a payment and refresh the invoice's payment status."""
    async with invoice_locks([draft.invoice_id]):
        invoice = await lock_invoice(db, draft.invoice_id, owner_id)

        payment = Payment(
            id=uuid.uuid4(),
            invoice_id=invoice.id,
            amount=draft.amount,
            payment_date=draft.payment_date or date.today(),
            payment_mode=draft.payment_mode.value,
            transaction_id=(draft.transaction_id or "").strip() or None,
            notes=(draft.notes or "").strip() or None,
            received_by=received_by,
        )
        await PaymentRepository(db).add(payment)
        status = await recompute_invoice_status(db, invoice.id)
        await db.commit()

    await db.refresh(payment)
    logger.info(
        "Payment recorded for invoice %s: amount=₹%s mode=%s status=%s",
        invoice.invoice_number, payment.amount, payment.payment_mode, status.value,
    )
    return payment


async def update_payment(
    db: AsyncSession,
    payment_id: uuid.UUID,
    changes: PaymentUpdate,
    *,
    owner_id: uuid.UUID | None = None,
) -> Payment:
    """
    Apply an explicit set of payment changes. Moving a payment to another
    invoice recomputes both the old and the new invoice.
    """
    pay_repo = PaymentRepository(db)
    payment = await pay_repo.get_by_id(payment_id, owner_id)
    if payment is None:
        raise NotFoundError("Payment", payment_id)

    old_invoice_id = payment.invoice_id
    new_invoice_id = changes.invoice_id or old_invoice_id
    affected = [old_invoice_id] if new_invoice_id == old_invoice_id else [old_invoice_id, new_invoice_id]

    async with invoice_locks(affected):
        for invoice_id in sorted(affected, key=str):
            await lock_invoice(
                db,
                invoice_id,
                owner_id if invoice_id == new_invoice_id else None,
            )

        fields = changes.model_dump(exclude_unset=True)
        for key, value in fields.items():
            if value is None and key in _NOT_NULL_FIELDS:
                continue
            if key == "payment_mode":
                value = value.value
            if key in ("transaction_id", "notes") and isinstance(value, str):
                value = value.strip() or None
            setattr(payment, key, value)
        await db.flush()

        for invoice_id in affected:
            await recompute_invoice_status(db, invoice_id)
        await db.commit()

    await db.refresh(payment)
    logger.info("Payment %s updated: fields=%s", payment.id, sorted(fields))
    return payment


async def delete_payment(
    db: AsyncSession,
    payment_id: uuid.UUID,
    *,
    owner_id: uuid.UUID | None = None,
) -> None:
    pay_repo = PaymentRepository(db)
    payment = await pay_repo.get_by_id(payment_id, owner_id)
    if payment is None:
        raise NotFoundError("Payment", payment_id)

    invoice_id = payment.invoice_id
    async with invoice_locks([invoice_id]):
        await lock_invoice(db, invoice_id)
        await pay_repo.delete(payment)
        status = await recompute_invoice_status(db, invoice_id)
        await db.commit()

    logger.info("Payment %s deleted; invoice %s now %s", payment_id, invoice_id, status.value)


async def invoice_payment_summary(
    db: AsyncSession,
    invoice_id: uuid.UUID,
    owner_id: uuid.UUID | None = None,
) -> dict[str, Any]:
    """Payments on one invoice with total paid and the remaining balance."""
    invoice = await InvoiceRepository(db).get_by_id(invoice_id, owner_id)
    if invoice is None:
        raise NotFoundError("Invoice", invoice_id)

    payments = await PaymentRepository(db).list_for_invoice(invoice_id)
    total_paid = sum((Decimal(str(p.amount)) for p in payments), Decimal("0"))
    invoice_total = Decimal(str(invoice.total_amount))

    return {
        "invoice": invoice,
        "payments": payments,
        "total_paid": total_paid,
        "remaining": invoice_total - total_paid,
        "invoice_total": invoice_total,
        "payment_status": invoice.payment_status,
    }
