# app/domain/services/invoice_pdf.py
"""
Render an invoice (header, line items, GST split, bank details) as PDF.
Uses ReportLab for PDF generation.
"""

from __future__ import annotations

import io
import logging
from datetime import datetime

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.lib.units import mm
from reportlab.platypus import (
    SimpleDocTemplate,
    Table,
    TableStyle,
    Paragraph,
    Spacer,
)

logger = logging.getLogger("invoice_pdf")

TITLES = {
    "tax-invoice": "TAX INVOICE",
    "proforma": "PROFORMA INVOICE",
    "non-tax-invoice": "INVOICE",
}

HEADER_BG = colors.Color(0.2, 0.3, 0.5)
LABEL_BG = colors.Color(0.95, 0.95, 0.95)
TOTAL_BG = colors.Color(0.9, 0.95, 1.0)
GRID = colors.Color(0.8, 0.8, 0.8)


def _fmt_amount(val) -> str:
    if val is None:
        return "0.00"
    try:
        return f"{float(val):,.2f}"
    except (ValueError, TypeError):
        return str(val)


def _fmt_rate(val) -> str:
    try:
        return f"{float(val):g}"
    except (ValueError, TypeError):
        return "0"


def invoice_to_pdf_data(invoice, customer=None, issuer=None, bank=None) -> dict:
    """Flatten ORM rows into the plain dict ``generate_invoice_pdf`` renders."""
    address = []
    if customer is not None:
        address = [
            part for part in (
                customer.street, customer.city, customer.state, customer.pincode,
            ) if part
        ]
    return {
        "invoice_number": invoice.invoice_number,
        "invoice_date": invoice.invoice_date.strftime("%d-%b-%Y") if invoice.invoice_date else "",
        "invoice_type": invoice.invoice_type,
        "items": list(invoice.items or []),
        "subtotal": invoice.subtotal,
        "gst_applicable": invoice.gst_applicable,
        "gst_rate": invoice.gst_rate,
        "cgst": invoice.cgst,
        "sgst": invoice.sgst,
        "igst": invoice.igst,
        "total_amount": invoice.total_amount,
        "payment_status": invoice.payment_status,
        "notes": invoice.notes or "",
        "customer_name": (customer.company_name or customer.name) if customer is not None else "",
        "customer_gstin": (customer.gstin or "") if customer is not None else "",
        "customer_address": ", ".join(address),
        "issuer_name": (issuer.company_name or issuer.name or "") if issuer is not None else "",
        "issuer_gstin": (issuer.company_gstin or "") if issuer is not None else "",
        "issuer_state": (issuer.company_state or "") if issuer is not None else "",
        "bank": {
            "bank_name": bank.bank_name,
            "account_holder_name": bank.account_holder_name,
            "account_number": bank.account_number,
            "ifsc": bank.ifsc,
            "branch": bank.branch or "",
        } if bank is not None else None,
    }


def generate_invoice_pdf(invoice_data: dict) -> bytes:
    """
    Generate an invoice PDF.

    Args:
        invoice_data: Dict as built by ``invoice_to_pdf_data``.

    Returns:
        PDF file as bytes.
    """
    buf = io.BytesIO()
    doc = SimpleDocTemplate(
        buf,
        pagesize=A4,
        leftMargin=15 * mm,
        rightMargin=15 * mm,
        topMargin=15 * mm,
        bottomMargin=15 * mm,
        title=f"Invoice {invoice_data.get('invoice_number') or ''}",
    )

    styles = getSampleStyleSheet()
    title_style = ParagraphStyle(
        "InvoiceTitle",
        parent=styles["Heading1"],
        fontSize=16,
        alignment=1,  # center
        spaceAfter=10,
    )
    subtitle_style = ParagraphStyle(
        "InvoiceSubtitle",
        parent=styles["Normal"],
        fontSize=10,
        alignment=1,
        spaceAfter=20,
    )

    elements = []

    title = TITLES.get(invoice_data.get("invoice_type"), "INVOICE")
    elements.append(Paragraph(title, title_style))
    if invoice_data.get("issuer_name"):
        elements.append(Paragraph(invoice_data["issuer_name"], subtitle_style))

    header_data = [
        ["Invoice Number", invoice_data.get("invoice_number") or "N/A",
         "Invoice Date", invoice_data.get("invoice_date") or "N/A"],
        ["Bill To", invoice_data.get("customer_name") or "N/A",
         "Customer GSTIN", invoice_data.get("customer_gstin") or "N/A"],
        ["Address", invoice_data.get("customer_address") or "N/A",
         "Our GSTIN", invoice_data.get("issuer_gstin") or "N/A"],
    ]
    header_table = Table(header_data, colWidths=[90, 150, 90, 150])
    header_table.setStyle(
        TableStyle(
            [
                ("BACKGROUND", (0, 0), (0, -1), LABEL_BG),
                ("BACKGROUND", (2, 0), (2, -1), LABEL_BG),
                ("TEXTCOLOR", (0, 0), (0, -1), colors.grey),
                ("TEXTCOLOR", (2, 0), (2, -1), colors.grey),
                ("FONTSIZE", (0, 0), (-1, -1), 9),
                ("GRID", (0, 0), (-1, -1), 0.5, GRID),
                ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
                ("TOPPADDING", (0, 0), (-1, -1), 6),
                ("BOTTOMPADDING", (0, 0), (-1, -1), 6),
                ("LEFTPADDING", (0, 0), (-1, -1), 8),
            ]
        )
    )
    elements.append(header_table)
    elements.append(Spacer(1, 15))

    # Line items
    item_rows = [["#", "Description", "Qty", "Rate (Rs)", "Amount (Rs)"]]
    for idx, item in enumerate(invoice_data.get("items") or [], start=1):
        item_rows.append([
            str(idx),
            Paragraph(str(item.get("description") or ""), styles["Normal"]),
            _fmt_rate(item.get("quantity")),
            _fmt_amount(item.get("rate")),
            _fmt_amount(item.get("amount")),
        ])

    items_table = Table(item_rows, colWidths=[25, 235, 50, 80, 90], repeatRows=1)
    items_table.setStyle(
        TableStyle(
            [
                ("BACKGROUND", (0, 0), (-1, 0), HEADER_BG),
                ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
                ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
                ("FONTSIZE", (0, 0), (-1, -1), 9),
                ("GRID", (0, 0), (-1, -1), 0.5, GRID),
                ("ALIGN", (2, 0), (-1, -1), "RIGHT"),
                ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
                ("TOPPADDING", (0, 0), (-1, -1), 5),
                ("BOTTOMPADDING", (0, 0), (-1, -1), 5),
            ]
        )
    )
    elements.append(items_table)
    elements.append(Spacer(1, 12))

    # Amount breakdown
    rate = _fmt_rate(invoice_data.get("gst_rate"))
    amount_rows = [
        ["Description", "Amount (Rs)"],
        ["Subtotal", _fmt_amount(invoice_data.get("subtotal"))],
    ]
    if invoice_data.get("gst_applicable"):
        if invoice_data.get("igst"):
            amount_rows.append([f"IGST @ {rate}%", _fmt_amount(invoice_data.get("igst"))])
        else:
            half = _fmt_rate(float(invoice_data.get("gst_rate") or 0) / 2)
            amount_rows.append([f"CGST @ {half}%", _fmt_amount(invoice_data.get("cgst"))])
            amount_rows.append([f"SGST @ {half}%", _fmt_amount(invoice_data.get("sgst"))])
    amount_rows.append(["TOTAL AMOUNT", _fmt_amount(invoice_data.get("total_amount"))])

    amount_table = Table(amount_rows, colWidths=[300, 180])
    amount_table.setStyle(
        TableStyle(
            [
                # Header row
                ("BACKGROUND", (0, 0), (-1, 0), HEADER_BG),
                ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
                ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
                # Total row (last row)
                ("BACKGROUND", (0, -1), (-1, -1), TOTAL_BG),
                ("FONTNAME", (0, -1), (-1, -1), "Helvetica-Bold"),
                # General
                ("FONTSIZE", (0, 0), (-1, -1), 10),
                ("GRID", (0, 0), (-1, -1), 0.5, GRID),
                ("ALIGN", (1, 0), (1, -1), "RIGHT"),
                ("TOPPADDING", (0, 0), (-1, -1), 8),
                ("BOTTOMPADDING", (0, 0), (-1, -1), 8),
                ("LEFTPADDING", (0, 0), (-1, -1), 10),
                ("RIGHTPADDING", (0, 0), (-1, -1), 10),
            ]
        )
    )
    elements.append(amount_table)
    elements.append(Spacer(1, 15))

    bank = invoice_data.get("bank")
    if bank:
        bank_rows = [
            ["Bank", bank.get("bank_name") or ""],
            ["Account Name", bank.get("account_holder_name") or ""],
            ["Account No.", bank.get("account_number") or ""],
            ["IFSC", bank.get("ifsc") or ""],
        ]
        if bank.get("branch"):
            bank_rows.append(["Branch", bank["branch"]])
        bank_table = Table(bank_rows, colWidths=[100, 250])
        bank_table.setStyle(
            TableStyle(
                [
                    ("BACKGROUND", (0, 0), (0, -1), LABEL_BG),
                    ("FONTSIZE", (0, 0), (-1, -1), 9),
                    ("GRID", (0, 0), (-1, -1), 0.5, GRID),
                ]
            )
        )
        elements.append(Paragraph("Payment Details", styles["Heading4"]))
        elements.append(bank_table)
        elements.append(Spacer(1, 12))

    if invoice_data.get("notes"):
        elements.append(Paragraph(f"Notes: {invoice_data['notes']}", styles["Normal"]))
        elements.append(Spacer(1, 12))

    # Footer
    elements.append(
        Paragraph(
            f"This is a computer-generated invoice. Generated on "
            f"{datetime.now().strftime('%d-%b-%Y %H:%M')}.",
            ParagraphStyle(
                "Footer",
                parent=styles["Normal"],
                fontSize=8,
                textColor=colors.grey,
                alignment=1,
            ),
        )
    )

    doc.build(elements)
    logger.debug("Rendered PDF for invoice %s", invoice_data.get("invoice_number"))
    return buf.getvalue()
