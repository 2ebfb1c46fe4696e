import uuid
from datetime import date

from sqlalchemy import and_, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.infrastructure.db.models import Invoice


class InvoiceRepository:
    """
    Invoice reads and writes. Writes only ``flush``; the calling service
    commits so totals, number and row land in one transaction.

    ``owner_id=None`` means unrestricted (CA role); otherwise only invoices
    created by that user are visible.
    """

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    @staticmethod
    def _owned(stmt, owner_id: uuid.UUID | None):
        if owner_id is not None:
            stmt = stmt.where(Invoice.created_by == owner_id)
        return stmt

    # ---------- single rows ----------

    async def get_by_id(
        self,
        invoice_id: uuid.UUID,
        owner_id: uuid.UUID | None = None,
        *,
        for_update: bool = False,
    ) -> Invoice | None:
        stmt = self._owned(select(Invoice).where(Invoice.id == invoice_id), owner_id)
        if for_update:
            # Row lock for the rest of the transaction; refresh stale identity-map state
            stmt = stmt.with_for_update().execution_options(populate_existing=True)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def add(self, invoice: Invoice) -> Invoice:
        self.db.add(invoice)
        await self.db.flush()
        return invoice

    async def delete(self, invoice: Invoice) -> None:
        await self.db.delete(invoice)
        await self.db.flush()

    # ---------- listings ----------

    async def search(
        self,
        owner_id: uuid.UUID | None,
        *,
        status: str | None = None,
        invoice_type: str | None = None,
        customer_id: uuid.UUID | None = None,
        project_id: uuid.UUID | None = None,
        date_from: date | None = None,
        date_to: date | None = None,
        limit: int = 20,
        offset: int = 0,
    ) -> tuple[list[Invoice], int]:
        """Filtered, newest-first page of invoices plus the unpaged total."""
        q = self._owned(select(Invoice), owner_id)
        if status:
            q = q.where(Invoice.payment_status == status)
        if invoice_type:
            q = q.where(Invoice.invoice_type == invoice_type)
        if customer_id:
            q = q.where(Invoice.customer_id == customer_id)
        if project_id:
            q = q.where(Invoice.project_id == project_id)
        if date_from:
            q = q.where(Invoice.invoice_date >= date_from)
        if date_to:
            q = q.where(Invoice.invoice_date <= date_to)

        count_q = select(func.count()).select_from(q.subquery())
        total = (await self.db.execute(count_q)).scalar() or 0

        q = q.order_by(Invoice.invoice_date.desc(), Invoice.created_at.desc()).offset(offset).limit(limit)
        result = await self.db.execute(q)
        return list(result.scalars().all()), total

    async def list_for_period(
        self,
        owner_id: uuid.UUID | None,
        start: date | None = None,
        end: date | None = None,
        *,
        gst_only: bool = False,
    ) -> list[Invoice]:
        """
        Invoices with invoice_date in [start, end] (either bound optional).
        ``gst_only`` restricts to GST-applicable tax invoices.
        """
        conditions = []
        if start:
            conditions.append(Invoice.invoice_date >= start)
        if end:
            conditions.append(Invoice.invoice_date <= end)
        if gst_only:
            conditions.append(Invoice.invoice_type == "tax-invoice")
            conditions.append(Invoice.gst_applicable.is_(True))

        stmt = self._owned(select(Invoice), owner_id)
        if conditions:
            stmt = stmt.where(and_(*conditions))
        stmt = stmt.order_by(Invoice.invoice_date, Invoice.created_at)

        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def list_for_customer(
        self, customer_id: uuid.UUID, owner_id: uuid.UUID | None
    ) -> list[Invoice]:
        stmt = self._owned(
            select(Invoice).where(Invoice.customer_id == customer_id), owner_id
        ).order_by(Invoice.invoice_date.desc())
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def list_for_project(
        self, project_id: uuid.UUID, owner_id: uuid.UUID | None
    ) -> list[Invoice]:
        stmt = self._owned(
            select(Invoice).where(Invoice.project_id == project_id), owner_id
        ).order_by(Invoice.invoice_date.desc())
        result = await self.db.execute(stmt)
        return list(result.scalars().all())
