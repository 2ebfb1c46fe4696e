# app/domain/services/gst_calculator.py
"""
GST split for a single invoice.

Intra-state supply (customer and issuer in the same state) is taxed as
CGST + SGST in equal halves; inter-state supply is taxed as IGST.
Amounts are rounded to ₹0.01 (ROUND_HALF_UP) only when returned.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

from app.domain.models.billing import InvoiceType, TaxBreakup

ZERO = Decimal("0")
HUNDRED = Decimal("100")
PAISE = Decimal("0.01")


def _to_decimal(value) -> Decimal:
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def round_money(value) -> Decimal:
    """Quantize to 2 decimal places, half-up."""
    return _to_decimal(value).quantize(PAISE, rounding=ROUND_HALF_UP)


def is_inter_state(customer_state: str | None, issuer_state: str | None) -> bool:
    # Exact, case-sensitive comparison; a missing state counts as "".
    return (customer_state or "") != (issuer_state or "")


def compute_tax(
    taxable_amount,
    rate_percent,
    customer_state: str | None,
    issuer_state: str | None,
) -> TaxBreakup:
    """
    Split GST on ``taxable_amount`` at ``rate_percent``.

    Assumes non-negative numeric input; callers validate before calling.
    """
    amount = _to_decimal(taxable_amount)
    rate = _to_decimal(rate_percent)
    gst_amount = amount * rate / HUNDRED

    if is_inter_state(customer_state, issuer_state):
        return TaxBreakup(
            cgst=round_money(ZERO),
            sgst=round_money(ZERO),
            igst=round_money(gst_amount),
            total=round_money(amount + gst_amount),
        )

    half = gst_amount / 2
    return TaxBreakup(
        cgst=round_money(half),
        sgst=round_money(half),
        igst=round_money(ZERO),
        total=round_money(amount + gst_amount),
    )


def effective_rate(invoice_type: InvoiceType | str, requested_rate=None) -> Decimal:
    """Proforma and non-tax invoices never carry GST, whatever rate was asked for."""
    if InvoiceType(invoice_type) in (InvoiceType.PROFORMA, InvoiceType.NON_TAX_INVOICE):
        return ZERO
    return _to_decimal(requested_rate)


def is_gst_applicable(invoice_type: InvoiceType | str, requested_rate=None) -> bool:
    return (
        InvoiceType(invoice_type) == InvoiceType.TAX_INVOICE
        and effective_rate(invoice_type, requested_rate) > ZERO
    )
