# app/domain/services/report_service.py
"""
Read-only reporting over invoices and payments.

Pure aggregators (``aggregate_report``, ``gst_summary``, ``account_summary``)
work on any objects exposing the invoice / payment attributes; the async
helpers fetch through the repositories with the caller's ownership filter.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Any, Iterable

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import NotFoundError
from app.domain.models.billing import InvoiceType, PaymentStatus
from app.domain.services.gst_calculator import round_money
from app.infrastructure.db.repositories.invoice_repository import InvoiceRepository
from app.infrastructure.db.repositories.master_data_repository import (
    CustomerRepository,
    ProjectRepository,
)
from app.infrastructure.db.repositories.payment_repository import PaymentRepository

logger = logging.getLogger("report_service")

ZERO = Decimal("0")


def _d(value) -> Decimal:
    if value is None:
        return ZERO
    return value if isinstance(value, Decimal) else Decimal(str(value))


def _money(value: Decimal) -> float:
    return float(round_money(value))


# ---------------------------------------------------------------------------
# Result dataclasses
# ---------------------------------------------------------------------------

@dataclass
class ReportSummary:
    """Dashboard totals for a set of invoices and payments."""
    total_invoices: int = 0
    total_billed: Decimal = ZERO
    total_gst: Decimal = ZERO
    total_paid: Decimal = ZERO
    outstanding: Decimal = ZERO
    counts_by_status: dict[str, int] = field(
        default_factory=lambda: {s.value: 0 for s in PaymentStatus}
    )
    counts_by_type: dict[str, int] = field(
        default_factory=lambda: {t.value: 0 for t in InvoiceType}
    )
    billed_by_status: dict[str, Decimal] = field(
        default_factory=lambda: {s.value: ZERO for s in PaymentStatus}
    )
    billed_by_type: dict[str, Decimal] = field(
        default_factory=lambda: {t.value: ZERO for t in InvoiceType}
    )

    @property
    def collection_rate(self) -> float:
        """Percentage of the billed amount received; 0 when nothing was billed."""
        if self.total_billed <= ZERO:
            return 0.0
        return round(float(self.total_paid / self.total_billed * 100), 2)

    def to_dict(self) -> dict:
        return {
            "total_invoices": self.total_invoices,
            "total_billed": _money(self.total_billed),
            "total_gst": _money(self.total_gst),
            "total_paid": _money(self.total_paid),
            "outstanding": _money(self.outstanding),
            "collection_rate": self.collection_rate,
            "counts_by_status": dict(self.counts_by_status),
            "counts_by_type": dict(self.counts_by_type),
            "billed_by_status": {k: _money(v) for k, v in self.billed_by_status.items()},
            "billed_by_type": {k: _money(v) for k, v in self.billed_by_type.items()},
        }


@dataclass
class GstSummary:
    """Tax-filing totals over GST-applicable tax invoices."""
    invoice_count: int = 0
    total_taxable_value: Decimal = ZERO
    total_cgst: Decimal = ZERO
    total_sgst: Decimal = ZERO
    total_igst: Decimal = ZERO
    total_gst: Decimal = ZERO
    total_amount: Decimal = ZERO

    def to_dict(self) -> dict:
        return {
            "invoice_count": self.invoice_count,
            "total_taxable_value": _money(self.total_taxable_value),
            "total_cgst": _money(self.total_cgst),
            "total_sgst": _money(self.total_sgst),
            "total_igst": _money(self.total_igst),
            "total_gst": _money(self.total_gst),
            "total_amount": _money(self.total_amount),
        }


# ---------------------------------------------------------------------------
# Pure aggregation
# ---------------------------------------------------------------------------

def aggregate_report(invoices: Iterable[Any], payments: Iterable[Any]) -> ReportSummary:
    """Counts and sums by status and type, GST collected, paid and outstanding."""
    summary = ReportSummary()

    for inv in invoices:
        total = _d(inv.total_amount)
        summary.total_invoices += 1
        summary.total_billed += total
        summary.total_gst += _d(inv.cgst) + _d(inv.sgst) + _d(inv.igst)

        status = inv.payment_status or PaymentStatus.UNPAID.value
        summary.counts_by_status[status] = summary.counts_by_status.get(status, 0) + 1
        summary.billed_by_status[status] = summary.billed_by_status.get(status, ZERO) + total

        inv_type = inv.invoice_type
        summary.counts_by_type[inv_type] = summary.counts_by_type.get(inv_type, 0) + 1
        summary.billed_by_type[inv_type] = summary.billed_by_type.get(inv_type, ZERO) + total

    summary.total_paid = sum((_d(p.amount) for p in payments), ZERO)
    summary.outstanding = summary.total_billed - summary.total_paid
    return summary


def gst_summary(invoices: Iterable[Any]) -> GstSummary:
    """Sum CGST / SGST / IGST over tax invoices that actually carry GST."""
    summary = GstSummary()
    for inv in invoices:
        if inv.invoice_type != InvoiceType.TAX_INVOICE.value or not inv.gst_applicable:
            continue
        summary.invoice_count += 1
        summary.total_taxable_value += _d(inv.subtotal)
        summary.total_cgst += _d(inv.cgst)
        summary.total_sgst += _d(inv.sgst)
        summary.total_igst += _d(inv.igst)
        summary.total_amount += _d(inv.total_amount)
    summary.total_gst = summary.total_cgst + summary.total_sgst + summary.total_igst
    return summary


def account_summary(invoices: list[Any], payments: list[Any]) -> dict:
    """Billed / paid / outstanding for one customer or project."""
    total_billed = sum((_d(inv.total_amount) for inv in invoices), ZERO)
    total_paid = sum((_d(p.amount) for p in payments), ZERO)
    return {
        "total_invoices": len(invoices),
        "total_billed": _money(total_billed),
        "total_paid": _money(total_paid),
        "outstanding": _money(total_billed - total_paid),
    }


# ---------------------------------------------------------------------------
# Repository-backed reports
# ---------------------------------------------------------------------------

async def dashboard(
    db: AsyncSession,
    owner_id: uuid.UUID | None,
    start: date | None = None,
    end: date | None = None,
) -> ReportSummary:
    """Invoices by invoice date and payments by payment date, both within [start, end]."""
    invoices = await InvoiceRepository(db).list_for_period(owner_id, start, end)
    payments = await PaymentRepository(db).search(owner_id, date_from=start, date_to=end)
    summary = aggregate_report(invoices, payments)
    logger.debug(
        "Dashboard owner=%s range=%s..%s invoices=%s payments=%s",
        owner_id, start, end, summary.total_invoices, len(payments),
    )
    return summary


async def gst_report(
    db: AsyncSession,
    owner_id: uuid.UUID | None,
    start: date | None = None,
    end: date | None = None,
) -> tuple[GstSummary, list]:
    """GST totals plus the underlying invoices, oldest first."""
    invoices = await InvoiceRepository(db).list_for_period(owner_id, start, end, gst_only=True)
    return gst_summary(invoices), invoices


async def customer_report(
    db: AsyncSession,
    customer_id: uuid.UUID,
    owner_id: uuid.UUID | None,
) -> dict:
    customer = await CustomerRepository(db).get_by_id(customer_id, owner_id)
    if customer is None:
        raise NotFoundError("Customer", customer_id)

    invoices = await InvoiceRepository(db).list_for_customer(customer_id, owner_id)
    payments = await PaymentRepository(db).list_for_invoices([inv.id for inv in invoices])
    return {
        "customer": customer,
        "invoices": invoices,
        "payments": payments,
        "summary": account_summary(invoices, payments),
    }


async def project_report(
    db: AsyncSession,
    project_id: uuid.UUID,
    owner_id: uuid.UUID | None,
) -> dict:
    project = await ProjectRepository(db).get_by_id(project_id, owner_id)
    if project is None:
        raise NotFoundError("Project", project_id)

    invoices = await InvoiceRepository(db).list_for_project(project_id, owner_id)
    payments = await PaymentRepository(db).list_for_invoices([inv.id for inv in invoices])
    return {
        "project": project,
        "invoices": invoices,
        "payments": payments,
        "summary": account_summary(invoices, payments),
    }
