"""Tests for payment-status derivation and the per-invoice critical section."""

import asyncio
import uuid
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from app.core.errors import NotFoundError
from app.domain.models.billing import PaymentStatus
from app.domain.services import payment_reconciler
from app.domain.services.payment_reconciler import (
    invoice_lock,
    invoice_locks,
    recompute_invoice_status,
    reconcile_payment_status,
)


class TestReconcilePaymentStatus:

    def test_no_payments_is_unpaid(self):
        assert reconcile_payment_status(Decimal("1000"), Decimal("0")) == PaymentStatus.UNPAID

    def test_partial(self):
        assert reconcile_payment_status(Decimal("1000"), Decimal("400")) == PaymentStatus.PARTIALLY_PAID

    def test_exact_is_paid(self):
        assert reconcile_payment_status(Decimal("1000"), Decimal("1000")) == PaymentStatus.PAID

    def test_overpayment_is_paid(self):
        assert reconcile_payment_status(Decimal("1000"), Decimal("1200.50")) == PaymentStatus.PAID

    def test_zero_total_is_paid(self):
        assert reconcile_payment_status(Decimal("0"), Decimal("0")) == PaymentStatus.PAID

    def test_payments_sequence(self):
        """1000 billed, 400 then 600 received, then the 600 is deleted."""
        paid = []
        statuses = []
        for amount in ("400", "600"):
            paid.append(Decimal(amount))
            statuses.append(reconcile_payment_status(Decimal("1000"), sum(paid)))
        paid.pop()
        statuses.append(reconcile_payment_status(Decimal("1000"), sum(paid)))
        assert statuses == [
            PaymentStatus.PARTIALLY_PAID,
            PaymentStatus.PAID,
            PaymentStatus.PARTIALLY_PAID,
        ]


class TestInvoiceLocks:

    def test_same_lock_per_invoice(self):
        invoice_id = uuid.uuid4()
        first = invoice_lock(invoice_id)
        assert invoice_lock(str(invoice_id)) is first
        assert invoice_lock(uuid.uuid4()) is not first

    def test_locks_serialize_writers(self, event_loop):
        invoice_id = uuid.uuid4()
        order = []

        async def writer(name):
            async with invoice_locks([invoice_id]):
                order.append(f"{name}-start")
                await asyncio.sleep(0)
                order.append(f"{name}-end")

        async def main():
            await asyncio.gather(writer("a"), writer("b"))

        event_loop.run_until_complete(main())
        assert order == ["a-start", "a-end", "b-start", "b-end"]

    def test_multiple_ids_and_duplicates(self, event_loop):
        a, b = uuid.uuid4(), uuid.uuid4()

        async def main():
            async with invoice_locks([b, a, a]):
                return invoice_lock(a).locked(), invoice_lock(b).locked()

        assert event_loop.run_until_complete(main()) == (True, True)
        assert not invoice_lock(a).locked()


# ---------------------------------------------------------------------------
# recompute_invoice_status
# ---------------------------------------------------------------------------

def _invoice(total="1000.00", status="unpaid"):
    inv = MagicMock()
    inv.id = uuid.uuid4()
    inv.invoice_number = "INV-2025-0001"
    inv.total_amount = Decimal(total)
    inv.payment_status = status
    return inv


def test_recompute_writes_derived_status(event_loop):
    inv = _invoice()
    db = MagicMock()
    db.flush = AsyncMock()

    with patch.object(payment_reconciler, "InvoiceRepository") as MockInv, \
         patch.object(payment_reconciler, "PaymentRepository") as MockPay:
        MockInv.return_value.get_by_id = AsyncMock(return_value=inv)
        MockPay.return_value.total_for_invoice = AsyncMock(return_value=Decimal("400"))

        status = event_loop.run_until_complete(recompute_invoice_status(db, inv.id))

    assert status == PaymentStatus.PARTIALLY_PAID
    assert inv.payment_status == "partially-paid"
    MockInv.return_value.get_by_id.assert_awaited_once_with(inv.id, None, for_update=True)
    db.flush.assert_awaited_once()
    db.commit.assert_not_called()


def test_recompute_after_last_payment_removed(event_loop):
    inv = _invoice(status="paid")
    db = MagicMock()
    db.flush = AsyncMock()

    with patch.object(payment_reconciler, "InvoiceRepository") as MockInv, \
         patch.object(payment_reconciler, "PaymentRepository") as MockPay:
        MockInv.return_value.get_by_id = AsyncMock(return_value=inv)
        MockPay.return_value.total_for_invoice = AsyncMock(return_value=Decimal("0"))

        status = event_loop.run_until_complete(recompute_invoice_status(db, inv.id))

    assert status == PaymentStatus.UNPAID
    assert inv.payment_status == "unpaid"


def test_recompute_zero_total_invoice_is_paid(event_loop):
    inv = _invoice(total="0.00", status="unpaid")
    db = MagicMock()
    db.flush = AsyncMock()

    with patch.object(payment_reconciler, "InvoiceRepository") as MockInv, \
         patch.object(payment_reconciler, "PaymentRepository") as MockPay:
        MockInv.return_value.get_by_id = AsyncMock(return_value=inv)
        MockPay.return_value.total_for_invoice = AsyncMock(return_value=Decimal("0"))

        status = event_loop.run_until_complete(recompute_invoice_status(db, inv.id))

    assert status == PaymentStatus.PAID
    assert inv.payment_status == "paid"


def test_recompute_missing_invoice(event_loop):
    db = MagicMock()
    with patch.object(payment_reconciler, "InvoiceRepository") as MockInv:
        MockInv.return_value.get_by_id = AsyncMock(return_value=None)
        with pytest.raises(NotFoundError):
            event_loop.run_until_complete(recompute_invoice_status(db, uuid.uuid4()))
