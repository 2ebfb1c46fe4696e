# app/domain/services/payment_reconciler.py
"""
Invoice payment-status reconciliation.

Status is re-derived from scratch on every payment create / update / delete:

    total_paid >= invoice total  -> paid  (overpayment is accepted)
    0 < total_paid < total       -> partially-paid
    total_paid == 0              -> unpaid

Recomputation for one invoice is a critical section: callers hold
``invoice_lock(invoice_id)`` and the invoice row lock (``FOR UPDATE``)
from before the payment write until commit, so two concurrent payments
cannot both compute from a stale total.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
import weakref
from contextlib import AsyncExitStack, asynccontextmanager
from decimal import Decimal
from typing import AsyncIterator, Iterable

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import NotFoundError
from app.domain.models.billing import PaymentStatus
from app.infrastructure.db.models import Invoice
from app.infrastructure.db.repositories.invoice_repository import InvoiceRepository
from app.infrastructure.db.repositories.payment_repository import PaymentRepository

logger = logging.getLogger("payment_reconciler")

ZERO = Decimal("0")

# One lock per invoice id while anyone holds it; entries vanish once unused.
_invoice_locks: "weakref.WeakValueDictionary[str, asyncio.Lock]" = weakref.WeakValueDictionary()


def reconcile_payment_status(invoice_total, payments_sum) -> PaymentStatus:
    total = Decimal(str(invoice_total or 0))
    paid = Decimal(str(payments_sum or 0))

    if paid >= total:
        return PaymentStatus.PAID
    if paid > ZERO:
        return PaymentStatus.PARTIALLY_PAID
    return PaymentStatus.UNPAID


def invoice_lock(invoice_id: uuid.UUID | str) -> asyncio.Lock:
    key = str(invoice_id)
    lock = _invoice_locks.get(key)
    if lock is None:
        lock = asyncio.Lock()
        _invoice_locks[key] = lock
    return lock


@asynccontextmanager
async def invoice_locks(invoice_ids: Iterable[uuid.UUID | str]) -> AsyncIterator[None]:
    """Hold the in-process locks of several invoices, acquired in a stable order."""
    async with AsyncExitStack() as stack:
        for key in sorted({str(i) for i in invoice_ids}):
            await stack.enter_async_context(invoice_lock(key))
        yield


async def lock_invoice(
    db: AsyncSession,
    invoice_id: uuid.UUID,
    owner_id: uuid.UUID | None = None,
) -> Invoice:
    """Row-lock the invoice for the rest of the transaction."""
    invoice = await InvoiceRepository(db).get_by_id(invoice_id, owner_id, for_update=True)
    if invoice is None:
        raise NotFoundError("Invoice", invoice_id)
    return invoice


async def recompute_invoice_status(db: AsyncSession, invoice_id: uuid.UUID) -> PaymentStatus:
    """
    Re-derive and store the invoice's payment status inside the caller's
    transaction. Does not commit.
    """
    invoice = await lock_invoice(db, invoice_id)
    total_paid = await PaymentRepository(db).total_for_invoice(invoice_id)
    status = reconcile_payment_status(invoice.total_amount, total_paid)

    if invoice.payment_status != status.value:
        logger.info(
            "Invoice %s payment status %s -> %s (paid=%s total=%s)",
            invoice.invoice_number,
            invoice.payment_status,
            status.value,
            total_paid,
            invoice.total_amount,
        )
    invoice.payment_status = status.value
    await db.flush()
    return status
