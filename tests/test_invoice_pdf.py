"""Tests for invoice PDF rendering."""

from datetime import date
from decimal import Decimal
from types import SimpleNamespace

from app.domain.services.invoice_pdf import generate_invoice_pdf, invoice_to_pdf_data


def _invoice(**overrides):
    fields = dict(
        invoice_number="INV-2025-0012",
        invoice_date=date(2025, 8, 14),
        invoice_type="tax-invoice",
        items=[{"description": "Logo design", "quantity": "1", "rate": "5000", "amount": "5000.00"}],
        subtotal=Decimal("5000.00"),
        gst_applicable=True,
        gst_rate=Decimal("18"),
        cgst=Decimal("450.00"),
        sgst=Decimal("450.00"),
        igst=Decimal("0.00"),
        total_amount=Decimal("5900.00"),
        payment_status="unpaid",
        notes="Payable within 15 days",
    )
    fields.update(overrides)
    return SimpleNamespace(**fields)


def _customer():
    return SimpleNamespace(
        name="Ravi",
        company_name="Ravi Textiles",
        gstin="29AAACR1234A1Z5",
        street="12 MG Road",
        city="Bengaluru",
        state="Karnataka",
        pincode="560001",
    )


def _bank():
    return SimpleNamespace(
        bank_name="HDFC Bank",
        account_holder_name="Acme Studio",
        account_number="50100012345678",
        ifsc="HDFC0001234",
        branch=None,
    )


def test_pdf_data_flattens_rows(admin_user):
    data = invoice_to_pdf_data(_invoice(), _customer(), admin_user, _bank())

    assert data["invoice_date"] == "14-Aug-2025"
    assert data["customer_name"] == "Ravi Textiles"
    assert data["customer_address"] == "12 MG Road, Bengaluru, Karnataka, 560001"
    assert data["issuer_gstin"] == "29ABCDE1234F1Z5"
    assert data["bank"]["branch"] == ""


def test_pdf_data_without_related_rows():
    data = invoice_to_pdf_data(_invoice(notes=None))
    assert data["customer_name"] == ""
    assert data["bank"] is None
    assert data["notes"] == ""


def test_generate_intra_state_pdf(admin_user):
    pdf = generate_invoice_pdf(invoice_to_pdf_data(_invoice(), _customer(), admin_user, _bank()))
    assert pdf.startswith(b"%PDF")
    assert len(pdf) > 1000


def test_generate_igst_and_proforma_pdfs():
    igst = _invoice(cgst=Decimal("0"), sgst=Decimal("0"), igst=Decimal("900.00"))
    proforma = _invoice(invoice_type="proforma", gst_applicable=False, gst_rate=Decimal("0"))
    for inv in (igst, proforma):
        assert generate_invoice_pdf(invoice_to_pdf_data(inv)).startswith(b"%PDF")
