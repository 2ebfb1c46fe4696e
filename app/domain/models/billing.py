from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any, Optional
from uuid import UUID

from pydantic import BaseModel, Field


class InvoiceType(str, Enum):
    PROFORMA = "proforma"
    TAX_INVOICE = "tax-invoice"
    NON_TAX_INVOICE = "non-tax-invoice"


class PaymentStatus(str, Enum):
    UNPAID = "unpaid"
    PARTIALLY_PAID = "partially-paid"
    PAID = "paid"


class PaymentMode(str, Enum):
    ONLINE = "online"
    OFFLINE = "offline"
    BANK_TRANSFER = "bank-transfer"
    UPI = "upi"
    CHEQUE = "cheque"
    CASH = "cash"


# Largest amount a Numeric(12, 2) money column holds
MAX_MONEY = Decimal("9999999999.99")


class LineItem(BaseModel):
    """A validated invoice line, as stored inside ``Invoice.items``."""

    description: str
    quantity: Decimal = Field(default=Decimal("1"), gt=0)
    rate: Decimal = Field(ge=0)
    amount: Decimal = Field(ge=0)


class TaxBreakup(BaseModel):
    cgst: Decimal = Field(default=Decimal("0"))
    sgst: Decimal = Field(default=Decimal("0"))
    igst: Decimal = Field(default=Decimal("0"))
    total: Decimal = Field(default=Decimal("0"))


class InvoiceTotals(BaseModel):
    """Every invoice field derived from the line items and tax settings."""

    items: list[LineItem]
    subtotal: Decimal
    gst_applicable: bool = False
    gst_rate: Decimal = Field(default=Decimal("0"))
    cgst: Decimal = Field(default=Decimal("0"))
    sgst: Decimal = Field(default=Decimal("0"))
    igst: Decimal = Field(default=Decimal("0"))
    total_amount: Decimal

    @property
    def total_gst(self) -> Decimal:
        return self.cgst + self.sgst + self.igst


# ---------------------------------------------------------------------------
# Commands (explicit, allow-listed fields; unknown keys are rejected)
# ---------------------------------------------------------------------------

class InvoiceDraft(BaseModel):
    """Fields a caller may set when creating an invoice."""

    model_config = {"extra": "forbid"}

    customer_id: UUID
    invoice_type: InvoiceType
    # Raw items; normalised and validated by invoice_totals.normalize_line_items
    items: list[dict[str, Any]]
    gst_rate: Optional[Decimal] = Field(default=None, ge=0, le=100)
    invoice_date: Optional[date] = None
    project_id: Optional[UUID] = None
    company_bank_id: Optional[UUID] = None
    customer_bank_id: Optional[UUID] = None
    tax_id: Optional[str] = Field(default=None, max_length=50)
    gst_paid: bool = False
    notes: Optional[str] = None


class InvoiceUpdate(BaseModel):
    """Fields a caller may change on an existing invoice. ``None`` means unchanged."""

    model_config = {"extra": "forbid"}

    customer_id: Optional[UUID] = None
    invoice_type: Optional[InvoiceType] = None
    items: Optional[list[dict[str, Any]]] = None
    gst_rate: Optional[Decimal] = Field(default=None, ge=0, le=100)
    invoice_date: Optional[date] = None
    project_id: Optional[UUID] = None
    company_bank_id: Optional[UUID] = None
    customer_bank_id: Optional[UUID] = None
    tax_id: Optional[str] = Field(default=None, max_length=50)
    gst_paid: Optional[bool] = None
    notes: Optional[str] = None


class PaymentDraft(BaseModel):
    model_config = {"extra": "forbid"}

    invoice_id: UUID
    amount: Decimal = Field(gt=0, le=MAX_MONEY)
    payment_mode: PaymentMode
    payment_date: Optional[date] = None
    transaction_id: Optional[str] = Field(default=None, max_length=100)
    notes: Optional[str] = None


class PaymentUpdate(BaseModel):
    model_config = {"extra": "forbid"}

    invoice_id: Optional[UUID] = None
    amount: Optional[Decimal] = Field(default=None, gt=0, le=MAX_MONEY)
    payment_mode: Optional[PaymentMode] = None
    payment_date: Optional[date] = None
    transaction_id: Optional[str] = Field(default=None, max_length=100)
    notes: Optional[str] = None
