# app/infrastructure/db/repositories/payment_repository.py
"""Repository for customer payments against invoices, and paid-amount aggregation."""

from __future__ import annotations

import uuid
from datetime import date
from decimal import Decimal

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.infrastructure.db.models import Payment


class PaymentRepository:
    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def add(self, payment: Payment) -> Payment:
        self.db.add(payment)
        await self.db.flush()
        return payment

    async def delete(self, payment: Payment) -> None:
        await self.db.delete(payment)
        await self.db.flush()

    async def get_by_id(
        self,
        payment_id: uuid.UUID,
        owner_id: uuid.UUID | None = None,
    ) -> Payment | None:
        stmt = select(Payment).where(Payment.id == payment_id)
        if owner_id is not None:
            stmt = stmt.where(Payment.received_by == owner_id)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def search(
        self,
        owner_id: uuid.UUID | None,
        *,
        invoice_id: uuid.UUID | None = None,
        date_from: date | None = None,
        date_to: date | None = None,
    ) -> list[Payment]:
        """Payments, most recent first, optionally narrowed to an invoice / date range."""
        stmt = select(Payment)
        if owner_id is not None:
            stmt = stmt.where(Payment.received_by == owner_id)
        if invoice_id:
            stmt = stmt.where(Payment.invoice_id == invoice_id)
        if date_from:
            stmt = stmt.where(Payment.payment_date >= date_from)
        if date_to:
            stmt = stmt.where(Payment.payment_date <= date_to)
        stmt = stmt.order_by(Payment.payment_date.desc(), Payment.created_at.desc())
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def list_for_invoice(self, invoice_id: uuid.UUID) -> list[Payment]:
        stmt = (
            select(Payment)
            .where(Payment.invoice_id == invoice_id)
            .order_by(Payment.payment_date.desc())
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def list_for_invoices(self, invoice_ids: list[uuid.UUID]) -> list[Payment]:
        if not invoice_ids:
            return []
        stmt = (
            select(Payment)
            .where(Payment.invoice_id.in_(invoice_ids))
            .order_by(Payment.payment_date.desc())
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def total_for_invoice(self, invoice_id: uuid.UUID) -> Decimal:
        """Sum of every payment currently recorded against the invoice."""
        stmt = select(func.coalesce(func.sum(Payment.amount), 0)).where(
            Payment.invoice_id == invoice_id
        )
        total = (await self.db.execute(stmt)).scalar()
        return Decimal(str(total or 0))
