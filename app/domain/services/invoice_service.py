# app/domain/services/invoice_service.py
"""
Invoice lifecycle: create, update, delete.

Creation writes the derived totals, the allocated invoice number and the
row in a single transaction; nothing is visible to readers before commit.
A duplicate invoice number (unique constraint) surfaces as ConflictError,
which callers may retry.
"""

from __future__ import annotations

import logging
import uuid
from datetime import date

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.config.settings import settings
from app.core.errors import ConflictError, NotFoundError
from app.domain.models.billing import InvoiceDraft, InvoiceTotals, InvoiceUpdate
from app.domain.services.invoice_numbering import next_invoice_number
from app.domain.services.invoice_totals import build_invoice_totals
from app.domain.services.payment_reconciler import (
    invoice_locks,
    recompute_invoice_status,
    reconcile_payment_status,
)
from app.infrastructure.db.models import Customer, Invoice, User
from app.infrastructure.db.repositories.invoice_repository import InvoiceRepository
from app.infrastructure.db.repositories.master_data_repository import (
    BankDetailsRepository,
    CustomerRepository,
    ProjectRepository,
)

logger = logging.getLogger("invoice_service")

_NOT_NULL_FIELDS = frozenset({"customer_id", "invoice_type", "invoice_date", "gst_paid"})


def issuer_state_for(user: User) -> str:
    return (user.company_state or settings.DEFAULT_ISSUER_STATE or "").strip()


def _apply_totals(invoice: Invoice, totals: InvoiceTotals) -> None:
    invoice.items = [item.model_dump(mode="json") for item in totals.items]
    invoice.subtotal = totals.subtotal
    invoice.gst_applicable = totals.gst_applicable
    invoice.gst_rate = totals.gst_rate
    invoice.cgst = totals.cgst
    invoice.sgst = totals.sgst
    invoice.igst = totals.igst
    invoice.total_amount = totals.total_amount


async def _get_customer(db: AsyncSession, customer_id: uuid.UUID, owner_id: uuid.UUID | None) -> Customer:
    customer = await CustomerRepository(db).get_by_id(customer_id, owner_id)
    if customer is None:
        raise NotFoundError("Customer", customer_id)
    return customer


async def _check_references(
    db: AsyncSession,
    owner_id: uuid.UUID | None,
    *,
    project_id: uuid.UUID | None = None,
    bank_ids: tuple[uuid.UUID | None, ...] = (),
) -> None:
    if project_id and await ProjectRepository(db).get_by_id(project_id, owner_id) is None:
        raise NotFoundError("Project", project_id)
    bank_repo = BankDetailsRepository(db)
    for bank_id in bank_ids:
        if bank_id and await bank_repo.get_by_id(bank_id, owner_id) is None:
            raise NotFoundError("Bank account", bank_id)


async def _commit_or_conflict(db: AsyncSession, invoice: Invoice) -> None:
    try:
        await db.commit()
    except IntegrityError as exc:
        await db.rollback()
        logger.warning("Duplicate invoice number %s: %s", invoice.invoice_number, exc.orig)
        raise ConflictError(
            f"Invoice number {invoice.invoice_number} already exists. Please try again.",
            errors=[{"field": "invoice_number", "value": invoice.invoice_number}],
        ) from exc


async def create_invoice(
    db: AsyncSession,
    draft: InvoiceDraft,
    *,
    user: User,
    owner_id: uuid.UUID | None = None,
) -> Invoice:
    """Validate, total, number and persist a new invoice (payment status ``unpaid``)."""
    customer = await _get_customer(db, draft.customer_id, owner_id)
    await _check_references(
        db,
        owner_id,
        project_id=draft.project_id,
        bank_ids=(draft.company_bank_id, draft.customer_bank_id),
    )

    totals = build_invoice_totals(
        draft.items,
        draft.invoice_type,
        draft.gst_rate,
        customer.state or "",
        issuer_state_for(user),
    )

    invoice_date = draft.invoice_date or date.today()
    invoice = Invoice(
        id=uuid.uuid4(),
        invoice_date=invoice_date,
        invoice_type=draft.invoice_type.value,
        customer_id=customer.id,
        project_id=draft.project_id,
        company_bank_id=draft.company_bank_id,
        customer_bank_id=draft.customer_bank_id,
        tax_id=(draft.tax_id or "").strip() or None,
        gst_paid=draft.gst_paid,
        notes=(draft.notes or "").strip() or None,
        payment_status=reconcile_payment_status(totals.total_amount, 0).value,
        created_by=user.id,
    )
    _apply_totals(invoice, totals)
    invoice.invoice_number = await next_invoice_number(db, invoice_date)

    await InvoiceRepository(db).add(invoice)
    await _commit_or_conflict(db, invoice)
    await db.refresh(invoice)

    logger.info(
        "Invoice %s created: type=%s subtotal=₹%s gst=₹%s total=₹%s",
        invoice.invoice_number,
        invoice.invoice_type,
        totals.subtotal,
        totals.total_gst,
        totals.total_amount,
    )
    return invoice


async def update_invoice(
    db: AsyncSession,
    invoice_id: uuid.UUID,
    changes: InvoiceUpdate,
    *,
    user: User,
    owner_id: uuid.UUID | None = None,
) -> Invoice:
    """
    Apply an explicit update. Totals are recomputed only when ``items`` is
    supplied, using the (possibly changed) customer, type and rate; the
    payment status is then re-derived against the new total. The invoice
    number is never regenerated.
    """
    repo = InvoiceRepository(db)
    invoice = await repo.get_by_id(invoice_id, owner_id)
    if invoice is None:
        raise NotFoundError("Invoice", invoice_id)

    fields = changes.model_dump(exclude_unset=True)
    items = fields.pop("items", None)

    customer_id = fields.get("customer_id") or invoice.customer_id
    customer = await _get_customer(db, customer_id, owner_id)
    await _check_references(
        db,
        owner_id,
        project_id=fields.get("project_id"),
        bank_ids=(fields.get("company_bank_id"), fields.get("customer_bank_id")),
    )

    async with invoice_locks([invoice.id]):
        if items is not None:
            invoice_type = changes.invoice_type or invoice.invoice_type
            rate = changes.gst_rate if changes.gst_rate is not None else invoice.gst_rate
            totals = build_invoice_totals(
                items,
                invoice_type,
                rate,
                customer.state or "",
                issuer_state_for(user),
            )
            _apply_totals(invoice, totals)

        # gst_rate is derived by the totals above; it only changes together with items
        fields.pop("gst_rate", None)
        for key, value in fields.items():
            if value is None and key in _NOT_NULL_FIELDS:
                continue
            if key == "invoice_type":
                value = value.value
            if key in ("tax_id", "notes") and isinstance(value, str):
                value = value.strip() or None
            setattr(invoice, key, value)

        await db.flush()
        if items is not None:
            await recompute_invoice_status(db, invoice.id)
        await _commit_or_conflict(db, invoice)

    await db.refresh(invoice)
    logger.info(
        "Invoice %s updated: fields=%s recomputed=%s",
        invoice.invoice_number,
        sorted(fields) + (["items"] if items is not None else []),
        items is not None,
    )
    return invoice


async def delete_invoice(
    db: AsyncSession,
    invoice_id: uuid.UUID,
    *,
    owner_id: uuid.UUID | None = None,
) -> None:
    """Delete an invoice together with its payments."""
    repo = InvoiceRepository(db)
    invoice = await repo.get_by_id(invoice_id, owner_id)
    if invoice is None:
        raise NotFoundError("Invoice", invoice_id)

    number = invoice.invoice_number
    async with invoice_locks([invoice.id]):
        await repo.delete(invoice)
        await db.commit()
    logger.info("Invoice %s deleted", number)
