# app/infrastructure/db/repositories/master_data_repository.py
"""Customers, projects and bank accounts: plain owner-scoped CRUD."""

from __future__ import annotations

import uuid
from typing import Any

from sqlalchemy import or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.infrastructure.db.models import BankDetails, Customer, Project


class _OwnedRepository:
    model: Any = None

    def __init__(self, db: AsyncSession):
        self.db = db

    def _select(self, owner_id: uuid.UUID | None):
        stmt = select(self.model)
        if owner_id is not None:
            stmt = stmt.where(self.model.created_by == owner_id)
        return stmt

    async def get_by_id(self, entity_id: uuid.UUID, owner_id: uuid.UUID | None = None):
        stmt = self._select(owner_id).where(self.model.id == entity_id)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def create(self, created_by: uuid.UUID, **fields):
        entity = self.model(created_by=created_by, **fields)
        self.db.add(entity)
        await self.db.commit()
        await self.db.refresh(entity)
        return entity

    async def update(self, entity, fields: dict[str, Any]):
        """Apply already-validated fields (from an explicit update schema)."""
        for key, value in fields.items():
            setattr(entity, key, value)
        await self.db.commit()
        await self.db.refresh(entity)
        return entity

    async def delete(self, entity) -> None:
        await self.db.delete(entity)
        await self.db.commit()


# ---------------------------------------------------------------------------
# Customers
# ---------------------------------------------------------------------------

class CustomerRepository(_OwnedRepository):
    model = Customer

    async def list(self, owner_id: uuid.UUID | None, query: str | None = None) -> list[Customer]:
        """Customers ordered by name; ``query`` matches name, company or GSTIN."""
        stmt = self._select(owner_id)
        if query:
            pattern = f"%{query}%"
            stmt = stmt.where(
                or_(
                    Customer.name.ilike(pattern),
                    Customer.company_name.ilike(pattern),
                    Customer.gstin.ilike(pattern),
                )
            )
        stmt = stmt.order_by(Customer.name.asc())
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def get_many(self, customer_ids) -> dict[uuid.UUID, Customer]:
        ids = {cid for cid in customer_ids if cid}
        if not ids:
            return {}
        result = await self.db.execute(select(Customer).where(Customer.id.in_(ids)))
        return {c.id: c for c in result.scalars().all()}


# ---------------------------------------------------------------------------
# Projects
# ---------------------------------------------------------------------------

class ProjectRepository(_OwnedRepository):
    model = Project

    async def list(
        self,
        owner_id: uuid.UUID | None,
        customer_id: uuid.UUID | None = None,
        status: str | None = None,
    ) -> list[Project]:
        stmt = self._select(owner_id)
        if customer_id:
            stmt = stmt.where(Project.customer_id == customer_id)
        if status:
            stmt = stmt.where(Project.status == status)
        stmt = stmt.order_by(Project.created_at.desc())
        result = await self.db.execute(stmt)
        return list(result.scalars().all())


# ---------------------------------------------------------------------------
# Bank accounts
# ---------------------------------------------------------------------------

class BankDetailsRepository(_OwnedRepository):
    model = BankDetails

    async def list(
        self,
        owner_id: uuid.UUID | None,
        company_only: bool | None = None,
        customer_id: uuid.UUID | None = None,
    ) -> list[BankDetails]:
        stmt = self._select(owner_id)
        if company_only is not None:
            stmt = stmt.where(BankDetails.is_company_account == company_only)
        if customer_id:
            stmt = stmt.where(BankDetails.customer_id == customer_id)
        stmt = stmt.order_by(BankDetails.is_default.desc(), BankDetails.created_at.desc())
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def clear_default(self, owner_id: uuid.UUID, is_company_account: bool) -> None:
        """Only one default account per owner and account kind."""
        stmt = (
            update(BankDetails)
            .where(BankDetails.created_by == owner_id)
            .where(BankDetails.is_company_account == is_company_account)
            .values(is_default=False)
        )
        await self.db.execute(stmt)
