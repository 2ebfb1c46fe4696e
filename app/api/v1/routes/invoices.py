# app/api/v1/routes/invoices.py
"""
Invoice CRUD and PDF download endpoints.
"""

from __future__ import annotations

import io
import logging
import uuid
from datetime import date

from fastapi import APIRouter, Depends, Query
from fastapi.responses import StreamingResponse
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.db import get_db
from app.core.errors import NotFoundError
from app.domain.models.billing import InvoiceType, PaymentStatus
from app.domain.services import invoice_service
from app.domain.services.invoice_pdf import generate_invoice_pdf, invoice_to_pdf_data
from app.infrastructure.audit import log_billing_action
from app.infrastructure.db.models import Invoice, User
from app.infrastructure.db.repositories.invoice_repository import InvoiceRepository
from app.infrastructure.db.repositories.master_data_repository import (
    BankDetailsRepository,
    CustomerRepository,
)
from app.infrastructure.db.repositories.user_repository import UserRepository

from app.api.v1.deps import get_current_user, owner_scope, require_admin
from app.api.v1.envelope import ok, paginated
from app.api.v1.schemas.invoices import InvoiceCreate, InvoiceDetail, InvoiceEdit

logger = logging.getLogger("api.v1.invoices")

router = APIRouter(prefix="/invoices", tags=["Invoices"])


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _opt_str(value) -> str | None:
    return str(value) if value else None


def invoice_to_detail(inv: Invoice) -> dict:
    """Convert an Invoice ORM object to InvoiceDetail dict."""
    return InvoiceDetail(
        id=str(inv.id),
        invoice_number=inv.invoice_number,
        invoice_date=inv.invoice_date,
        invoice_type=inv.invoice_type,
        customer_id=str(inv.customer_id),
        project_id=_opt_str(inv.project_id),
        items=list(inv.items or []),
        subtotal=inv.subtotal,
        gst_applicable=inv.gst_applicable,
        gst_rate=inv.gst_rate,
        cgst=inv.cgst,
        sgst=inv.sgst,
        igst=inv.igst,
        total_amount=inv.total_amount,
        tax_id=inv.tax_id,
        gst_paid=inv.gst_paid,
        company_bank_id=_opt_str(inv.company_bank_id),
        customer_bank_id=_opt_str(inv.customer_bank_id),
        notes=inv.notes,
        payment_status=inv.payment_status,
        created_by=str(inv.created_by),
        created_at=inv.created_at,
        updated_at=inv.updated_at,
    ).model_dump()


async def _get_invoice_or_404(invoice_id: uuid.UUID, user: User, db: AsyncSession) -> Invoice:
    inv = await InvoiceRepository(db).get_by_id(invoice_id, owner_scope(user))
    if inv is None:
        raise NotFoundError("Invoice", invoice_id)
    return inv


# ---------------------------------------------------------------------------
# List / read
# ---------------------------------------------------------------------------

@router.get("", response_model=dict)
async def list_invoices(
    limit: int = Query(default=20, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
    status: PaymentStatus | None = Query(default=None, description="Filter by payment status"),
    invoice_type: InvoiceType | None = Query(default=None),
    customer_id: uuid.UUID | None = Query(default=None),
    project_id: uuid.UUID | None = Query(default=None),
    date_from: date | None = Query(default=None, description="Filter: invoice_date >= this"),
    date_to: date | None = Query(default=None, description="Filter: invoice_date <= this"),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """List invoices, newest first."""
    invoices, total = await InvoiceRepository(db).search(
        owner_scope(user),
        status=status.value if status else None,
        invoice_type=invoice_type.value if invoice_type else None,
        customer_id=customer_id,
        project_id=project_id,
        date_from=date_from,
        date_to=date_to,
        limit=limit,
        offset=offset,
    )
    return paginated(
        items=[invoice_to_detail(inv) for inv in invoices],
        total=total,
        limit=limit,
        offset=offset,
    )


@router.get("/{invoice_id}", response_model=dict)
async def get_invoice(
    invoice_id: uuid.UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    inv = await _get_invoice_or_404(invoice_id, user, db)
    return ok(data=invoice_to_detail(inv))


# ---------------------------------------------------------------------------
# Mutations
# ---------------------------------------------------------------------------

@router.post("", response_model=dict, status_code=201)
async def create_invoice(
    body: InvoiceCreate,
    user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Create an invoice; number, totals and tax split are computed server-side."""
    inv = await invoice_service.create_invoice(db, body, user=user, owner_id=owner_scope(user))
    log_billing_action(
        "create_invoice",
        user_id=user.id,
        entity="invoice",
        entity_id=inv.id,
        details={"invoice_number": inv.invoice_number, "total_amount": str(inv.total_amount)},
    )
    return ok(data=invoice_to_detail(inv), message="Invoice created")


@router.put("/{invoice_id}", response_model=dict)
async def update_invoice(
    invoice_id: uuid.UUID,
    body: InvoiceEdit,
    user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    inv = await invoice_service.update_invoice(
        db, invoice_id, body, user=user, owner_id=owner_scope(user)
    )
    log_billing_action(
        "update_invoice",
        user_id=user.id,
        entity="invoice",
        entity_id=inv.id,
        details={"fields": sorted(body.model_dump(exclude_unset=True))},
    )
    return ok(data=invoice_to_detail(inv), message="Invoice updated")


@router.delete("/{invoice_id}", response_model=dict)
async def delete_invoice(
    invoice_id: uuid.UUID,
    user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Delete an invoice and every payment recorded against it."""
    await invoice_service.delete_invoice(db, invoice_id, owner_id=owner_scope(user))
    log_billing_action("delete_invoice", user_id=user.id, entity="invoice", entity_id=invoice_id)
    return ok(message="Invoice deleted")


# ---------------------------------------------------------------------------
# Download invoice PDF
# ---------------------------------------------------------------------------

@router.get("/{invoice_id}/pdf")
async def download_pdf(
    invoice_id: uuid.UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Generate and download the invoice as PDF."""
    inv = await _get_invoice_or_404(invoice_id, user, db)

    customer = await CustomerRepository(db).get_by_id(inv.customer_id)
    issuer = await UserRepository(db).get_by_id(inv.created_by)
    bank = None
    if inv.company_bank_id:
        bank = await BankDetailsRepository(db).get_by_id(inv.company_bank_id)

    pdf_bytes = generate_invoice_pdf(invoice_to_pdf_data(inv, customer, issuer, bank))

    return StreamingResponse(
        io.BytesIO(pdf_bytes),
        media_type="application/pdf",
        headers={
            "Content-Disposition": f'attachment; filename="invoice_{inv.invoice_number}.pdf"'
        },
    )
