"""Pydantic schemas for invoice payment endpoints."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel

from app.domain.models.billing import PaymentDraft, PaymentUpdate

PaymentCreateRequest = PaymentDraft
PaymentUpdateRequest = PaymentUpdate


class PaymentResponse(BaseModel):
    """Single payment record."""
    id: str
    invoice_id: str
    amount: Decimal
    payment_date: date
    payment_mode: str
    transaction_id: str | None = None
    notes: str | None = None
    received_by: str
    created_at: datetime | None = None


class InvoicePaymentsResponse(BaseModel):
    """Payments on one invoice and the remaining balance."""
    invoice_id: str
    invoice_number: str
    payments: list[PaymentResponse]
    total_paid: Decimal
    remaining: Decimal
    invoice_total: Decimal
    payment_status: str
