# app/domain/services/invoice_totals.py
"""
Derive invoice totals from line items.

subtotal = sum(item.amount)
GST is applied only to tax invoices with a positive rate; everything
else is billed at the subtotal.
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Any, Iterable, Mapping

from app.core.errors import ValidationError
from app.domain.models.billing import MAX_MONEY, InvoiceTotals, InvoiceType, LineItem
from app.domain.services.gst_calculator import (
    compute_tax,
    effective_rate,
    is_gst_applicable,
    round_money,
)

ZERO = Decimal("0")
ONE = Decimal("1")


def _parse_number(value: Any) -> Decimal | None:
    """Decimal for numeric input, ``None`` for blanks / garbage / NaN."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    try:
        number = Decimal(str(value))
    except (InvalidOperation, TypeError, ValueError):
        return None
    if not number.is_finite():
        return None
    return number


def normalize_line_items(items: Iterable[Mapping[str, Any]] | None) -> list[LineItem]:
    """
    Validate raw line items and fill defaults.

    - description must be non-empty
    - rate must be numeric, >= 0 and fit a money column
    - quantity defaults to 1 when absent or non-numeric; a given quantity
      must be positive
    - amount defaults to quantity * rate; a supplied amount is kept as-is
      (manual override, e.g. a discount) but must be numeric and >= 0
    - every line amount, and the sum of them, must fit a money column

    Raises ValidationError listing every problem found.
    """
    raw_items = list(items or [])
    if not raw_items:
        raise ValidationError(
            "Validation failed",
            errors=[{"field": "items", "message": "At least one item is required"}],
        )

    errors: list[dict[str, Any]] = []
    cleaned: list[LineItem] = []

    for idx, raw in enumerate(raw_items):
        seen = len(errors)
        if not isinstance(raw, Mapping):
            errors.append({"field": f"items[{idx}]", "message": "Item must be an object"})
            continue

        description = str(raw.get("description") or "").strip()
        if not description:
            errors.append({"field": f"items[{idx}].description", "message": "Item description is required"})

        rate = _parse_number(raw.get("rate"))
        if rate is None:
            errors.append({"field": f"items[{idx}].rate", "message": "Item rate must be a valid number"})
        elif rate < ZERO:
            errors.append({"field": f"items[{idx}].rate", "message": "Item rate cannot be negative"})
        elif rate > MAX_MONEY:
            errors.append({"field": f"items[{idx}].rate", "message": f"Item rate cannot exceed {MAX_MONEY}"})

        quantity = _parse_number(raw.get("quantity"))
        if quantity is None:
            quantity = ONE
        elif quantity <= ZERO:
            errors.append({"field": f"items[{idx}].quantity", "message": "Item quantity must be positive"})
        elif quantity > MAX_MONEY:
            errors.append({"field": f"items[{idx}].quantity", "message": f"Item quantity cannot exceed {MAX_MONEY}"})

        raw_amount = raw.get("amount")
        amount = _parse_number(raw_amount)
        if amount is None and raw_amount not in (None, ""):
            errors.append({"field": f"items[{idx}].amount", "message": "Item amount must be a valid number"})
        elif amount is not None and amount < ZERO:
            errors.append({"field": f"items[{idx}].amount", "message": "Item amount cannot be negative"})

        if len(errors) > seen:
            continue

        if amount is None:
            amount = quantity * rate
        if amount > MAX_MONEY:
            errors.append({"field": f"items[{idx}].amount", "message": f"Item amount cannot exceed {MAX_MONEY}"})
            continue

        cleaned.append(
            LineItem(
                description=description,
                quantity=quantity,
                rate=rate,
                amount=round_money(amount),
            )
        )

    if not errors and sum((item.amount for item in cleaned), ZERO) > MAX_MONEY:
        errors.append({"field": "items", "message": f"Invoice subtotal cannot exceed {MAX_MONEY}"})

    if errors:
        raise ValidationError("Validation failed", errors=errors)
    return cleaned


def build_invoice_totals(
    items: Iterable[Mapping[str, Any]],
    invoice_type: InvoiceType | str,
    requested_rate=None,
    customer_state: str | None = "",
    issuer_state: str | None = "",
) -> InvoiceTotals:
    """Pure: identical inputs always produce identical totals."""
    line_items = normalize_line_items(items)
    subtotal = round_money(sum((item.amount for item in line_items), ZERO))

    rate = effective_rate(invoice_type, requested_rate)
    if not is_gst_applicable(invoice_type, requested_rate):
        return InvoiceTotals(
            items=line_items,
            subtotal=subtotal,
            gst_applicable=False,
            gst_rate=rate,
            total_amount=subtotal,
        )

    tax = compute_tax(subtotal, rate, customer_state, issuer_state)
    if tax.total > MAX_MONEY:
        raise ValidationError(
            "Validation failed",
            errors=[{"field": "items", "message": f"Invoice total cannot exceed {MAX_MONEY}"}],
        )
    return InvoiceTotals(
        items=line_items,
        subtotal=subtotal,
        gst_applicable=True,
        gst_rate=rate,
        cgst=tax.cgst,
        sgst=tax.sgst,
        igst=tax.igst,
        total_amount=tax.total,
    )
