"""Tests for the GST report CSV export."""

import csv
import io
from decimal import Decimal
from types import SimpleNamespace

from app.domain.services.gst_report_export import COLUMNS, build_gst_report_csv


def _rows(text):
    return list(csv.reader(io.StringIO(text)))


def test_header_rows_and_total(make_invoice):
    first = make_invoice()
    second = make_invoice(cgst="0", sgst="0", igst="180.00")
    customers = {
        first.customer_id: SimpleNamespace(name="Ravi", company_name="Ravi Textiles", gstin="29AAACR1234A1Z5"),
    }

    rows = _rows(build_gst_report_csv([first, second], customers))

    assert rows[0] == COLUMNS
    assert rows[1][:4] == [first.invoice_number, "2025-04-10", "Ravi", "29AAACR1234A1Z5"]
    assert rows[1][4:] == ["1000.00", "90.00", "90.00", "0.00", "180.00", "1180.00"]
    # customer not supplied
    assert rows[2][2:4] == ["N/A", "N/A"]
    assert rows[3] == ["TOTAL", "", "", "", "2000.00", "90.00", "90.00", "180.00", "360.00", "2360.00"]


def test_empty_report_has_zero_total():
    rows = _rows(build_gst_report_csv([]))
    assert len(rows) == 2
    assert rows[1][4:] == ["0.00"] * 6


def test_total_uses_stored_amounts(make_invoice):
    inv = make_invoice(subtotal="0.10", cgst="0.00", sgst="0.00", total_amount="0.11")
    rows = _rows(build_gst_report_csv([inv]))
    assert rows[-1][-1] == "0.11"
    assert Decimal(rows[1][8]) == Decimal("0.00")


def test_total_row_adds_up_every_printed_row(make_invoice):
    taxed = make_invoice()
    proforma = make_invoice(
        invoice_type="proforma", gst_applicable=False,
        cgst="0", sgst="0", total_amount="500.00", subtotal="500.00",
    )
    rows = _rows(build_gst_report_csv([taxed, proforma]))
    assert rows[-1][4:] == ["1500.00", "90.00", "90.00", "0.00", "180.00", "1680.00"]


def test_xlsx_matches_csv_rows(make_invoice):
    import openpyxl

    from app.domain.services.gst_report_export import build_gst_report_xlsx

    invoices = [make_invoice(), make_invoice(cgst="0", sgst="0", igst="180.00")]
    content = build_gst_report_xlsx(invoices)

    assert content[:2] == b"PK"
    ws = openpyxl.load_workbook(io.BytesIO(content)).active
    values = list(ws.iter_rows(values_only=True))

    assert ws.title == "GST Report"
    assert list(values[0]) == COLUMNS
    assert values[1][4:] == (1000.0, 90.0, 90.0, 0.0, 180.0, 1180.0)
    assert values[-1][0] == "TOTAL"
    assert values[-1][-1] == 2360.0
