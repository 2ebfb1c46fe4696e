"""Shared test fixtures for the GST billing test suite."""

import asyncio
import itertools
import uuid
from datetime import date
from decimal import Decimal
from types import SimpleNamespace

import pytest


@pytest.fixture(scope="session")
def event_loop():
    """Use a single event loop for the entire test session."""
    loop = asyncio.new_event_loop()
    yield loop
    loop.close()


@pytest.fixture
def sample_line_items() -> list[dict]:
    """Two services billed on a typical consulting invoice."""
    return [
        {"description": "UI design", "quantity": 2, "rate": 300},
        {"description": "Hosting setup", "quantity": 1, "rate": 400},
    ]


@pytest.fixture
def make_invoice():
    """Factory for invoice-like objects with the stored (already rounded) fields."""
    _numbers = itertools.count(1)

    def _make(
        total_amount="1180.00",
        invoice_type="tax-invoice",
        payment_status="unpaid",
        subtotal=None,
        cgst="90.00",
        sgst="90.00",
        igst="0.00",
        gst_applicable=True,
        **extra,
    ):
        fields = dict(
            id=uuid.uuid4(),
            invoice_number=f"INV-2025-{next(_numbers):04d}",
            invoice_date=date(2025, 4, 10),
            invoice_type=invoice_type,
            customer_id=uuid.uuid4(),
            subtotal=Decimal(subtotal if subtotal is not None else "1000.00"),
            gst_applicable=gst_applicable,
            gst_rate=Decimal("18"),
            cgst=Decimal(cgst),
            sgst=Decimal(sgst),
            igst=Decimal(igst),
            total_amount=Decimal(total_amount),
            payment_status=payment_status,
        )
        fields.update(extra)
        return SimpleNamespace(**fields)

    return _make


@pytest.fixture
def admin_user():
    return SimpleNamespace(
        id=uuid.uuid4(),
        email="owner@example.com",
        name="Owner",
        role="admin",
        company_name="Acme Studio",
        company_gstin="29ABCDE1234F1Z5",
        company_state="Karnataka",
    )
