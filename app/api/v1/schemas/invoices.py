"""Request and response schemas for invoice endpoints."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel

from app.domain.models.billing import InvoiceDraft, InvoiceUpdate

# Request bodies are the domain commands: explicit, allow-listed fields.
InvoiceCreate = InvoiceDraft
InvoiceEdit = InvoiceUpdate


class LineItemOut(BaseModel):
    description: str
    quantity: Decimal
    rate: Decimal
    amount: Decimal


class InvoiceDetail(BaseModel):
    """Full invoice detail returned in responses."""

    id: str
    invoice_number: str
    invoice_date: date
    invoice_type: str
    customer_id: str
    project_id: str | None = None
    items: list[LineItemOut]

    subtotal: Decimal
    gst_applicable: bool
    gst_rate: Decimal
    cgst: Decimal
    sgst: Decimal
    igst: Decimal
    total_amount: Decimal

    tax_id: str | None = None
    gst_paid: bool = False
    company_bank_id: str | None = None
    customer_bank_id: str | None = None
    notes: str | None = None

    payment_status: str
    created_by: str
    created_at: datetime | None = None
    updated_at: datetime | None = None
