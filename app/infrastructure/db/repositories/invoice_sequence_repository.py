# app/infrastructure/db/repositories/invoice_sequence_repository.py
"""Atomic per-year invoice counter.

The caller owns the transaction: the counter row stays locked
(``SELECT ... FOR UPDATE``) until the surrounding invoice insert commits
or rolls back, so two creations in the same year never read the same value.
"""

from __future__ import annotations

from datetime import date

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.infrastructure.db.models import Invoice, InvoiceSequence


class InvoiceSequenceRepository:
    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def count_invoices_in_year(self, year: int) -> int:
        """Invoices dated in ``[Jan 1 year, Jan 1 year+1)``."""
        stmt = select(func.count()).select_from(Invoice).where(
            Invoice.invoice_date >= date(year, 1, 1),
            Invoice.invoice_date < date(year + 1, 1, 1),
        )
        return (await self.db.execute(stmt)).scalar() or 0

    async def claim(self, year: int) -> int:
        """
        Increment the counter for ``year`` and return the value before the
        increment (the number of invoices already numbered that year).

        A year's first claim seeds the counter from the invoices already
        dated in that year.
        """
        stmt = (
            select(InvoiceSequence)
            .where(InvoiceSequence.year == year)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        seq = (await self.db.execute(stmt)).scalar_one_or_none()

        if seq is None:
            existing = await self.count_invoices_in_year(year)
            seq = InvoiceSequence(year=year, last_value=existing)
            self.db.add(seq)

        previous = seq.last_value
        seq.last_value = previous + 1
        await self.db.flush()
        return previous
