# app/domain/services/gst_report_export.py
"""
GST report spreadsheets (CSV and Excel): one row per GST-applicable tax
invoice followed by a TOTAL row.
"""

from __future__ import annotations

import csv
import io
from decimal import Decimal
from typing import Any, Iterable, Mapping

import openpyxl
from openpyxl.styles import Font
from openpyxl.utils import get_column_letter

from app.domain.services.gst_calculator import round_money

COLUMNS = [
    "Invoice ID",
    "Date",
    "Customer",
    "GSTIN",
    "Taxable Value",
    "CGST",
    "SGST",
    "IGST",
    "Total GST",
    "Total Amount",
]

COLUMN_WIDTHS = [15, 12, 30, 20, 15, 12, 12, 12, 15, 15]

# First money column; everything from here on is an amount
_MONEY_FROM = 4


def _dec(value) -> Decimal:
    if value is None:
        return Decimal("0")
    return value if isinstance(value, Decimal) else Decimal(str(value))


def report_rows(
    invoices: Iterable[Any],
    customers: Mapping[Any, Any] | None = None,
) -> list[list]:
    """
    Data rows plus the TOTAL row (no header). Amount cells are Decimals
    rounded to paise.
    """
    invoices = list(invoices)
    customers = customers or {}

    rows: list[list] = []
    for inv in invoices:
        customer = customers.get(inv.customer_id)
        name = ""
        gstin = ""
        if customer is not None:
            name = customer.name or customer.company_name or ""
            gstin = customer.gstin or ""
        tax = _dec(inv.cgst) + _dec(inv.sgst) + _dec(inv.igst)
        rows.append([
            inv.invoice_number,
            inv.invoice_date.isoformat() if inv.invoice_date else "",
            name or "N/A",
            gstin or "N/A",
            round_money(inv.subtotal),
            round_money(inv.cgst),
            round_money(inv.sgst),
            round_money(inv.igst),
            round_money(tax),
            round_money(inv.total_amount),
        ])

    totals = [
        round_money(sum((row[col] for row in rows), Decimal("0")))
        for col in range(_MONEY_FROM, len(COLUMNS))
    ]
    rows.append(["TOTAL", "", "", ""] + totals)
    return rows


def build_gst_report_csv(
    invoices: Iterable[Any],
    customers: Mapping[Any, Any] | None = None,
) -> str:
    """
    Args:
        invoices: GST-applicable tax invoices, in the order to print them.
        customers: Optional ``{customer_id: Customer}`` for name / GSTIN columns.

    Returns:
        CSV text (header, invoice rows, TOTAL row).
    """
    out = io.StringIO()
    writer = csv.writer(out)
    writer.writerow(COLUMNS)
    for row in report_rows(invoices, customers):
        writer.writerow([f"{cell:.2f}" if isinstance(cell, Decimal) else cell for cell in row])
    return out.getvalue()


def build_gst_report_xlsx(
    invoices: Iterable[Any],
    customers: Mapping[Any, Any] | None = None,
) -> bytes:
    """Same rows as the CSV, as an .xlsx workbook with a single "GST Report" sheet."""
    wb = openpyxl.Workbook()
    ws = wb.active
    ws.title = "GST Report"

    ws.append(COLUMNS)
    for cell in ws[1]:
        cell.font = Font(bold=True)
    for idx, width in enumerate(COLUMN_WIDTHS, start=1):
        ws.column_dimensions[get_column_letter(idx)].width = width

    for row in report_rows(invoices, customers):
        ws.append([float(cell) if isinstance(cell, Decimal) else cell for cell in row])

    total_row = ws.max_row
    for cell in ws[total_row]:
        cell.font = Font(bold=True)
    for row in ws.iter_rows(min_row=2, min_col=_MONEY_FROM + 1):
        for cell in row:
            cell.number_format = "#,##0.00"

    buf = io.BytesIO()
    wb.save(buf)
    return buf.getvalue()
