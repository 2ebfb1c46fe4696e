# app/api/v1/routes/banks.py
"""Bank accounts (own company accounts and customer accounts) printed on invoices."""

from __future__ import annotations

import logging
import uuid

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.db import get_db
from app.core.errors import NotFoundError
from app.infrastructure.audit import log_billing_action
from app.infrastructure.db.models import BankDetails, User
from app.infrastructure.db.repositories.master_data_repository import (
    BankDetailsRepository,
    CustomerRepository,
)

from app.api.v1.deps import get_current_user, owner_scope, require_admin
from app.api.v1.envelope import ok
from app.api.v1.schemas.customers import BankCreate, BankOut, BankUpdate

logger = logging.getLogger("api.v1.banks")

router = APIRouter(prefix="/banks", tags=["Bank Accounts"])


def bank_to_out(b: BankDetails) -> dict:
    return BankOut(
        id=str(b.id),
        account_holder_name=b.account_holder_name,
        account_number=b.account_number,
        ifsc=b.ifsc,
        bank_name=b.bank_name,
        branch=b.branch,
        account_type=b.account_type,
        is_default=b.is_default,
        is_company_account=b.is_company_account,
        customer_id=str(b.customer_id) if b.customer_id else None,
    ).model_dump()


async def _get_bank_or_404(bank_id: uuid.UUID, user: User, db: AsyncSession) -> BankDetails:
    bank = await BankDetailsRepository(db).get_by_id(bank_id, owner_scope(user))
    if bank is None:
        raise NotFoundError("Bank account", bank_id)
    return bank


@router.get("", response_model=dict)
async def list_banks(
    company_only: bool | None = Query(None, description="true: own accounts, false: customer accounts"),
    customer_id: uuid.UUID | None = Query(None),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    banks = await BankDetailsRepository(db).list(owner_scope(user), company_only, customer_id)
    return ok(data=[bank_to_out(b) for b in banks])


@router.get("/{bank_id}", response_model=dict)
async def get_bank(
    bank_id: uuid.UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return ok(data=bank_to_out(await _get_bank_or_404(bank_id, user, db)))


@router.post("", response_model=dict, status_code=201)
async def create_bank(
    body: BankCreate,
    user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    repo = BankDetailsRepository(db)
    if body.customer_id and await CustomerRepository(db).get_by_id(body.customer_id, user.id) is None:
        raise NotFoundError("Customer", body.customer_id)
    if body.is_default:
        await repo.clear_default(user.id, body.is_company_account)
    bank = await repo.create(created_by=user.id, **body.model_dump())

    log_billing_action(
        "create_bank",
        user_id=user.id,
        entity="bank_details",
        entity_id=bank.id,
        details={"bank_name": bank.bank_name, "is_default": bank.is_default},
    )
    return ok(data=bank_to_out(bank), message="Bank account added")


@router.put("/{bank_id}", response_model=dict)
async def update_bank(
    bank_id: uuid.UUID,
    body: BankUpdate,
    user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    repo = BankDetailsRepository(db)
    bank = await _get_bank_or_404(bank_id, user, db)
    fields = {k: v for k, v in body.model_dump(exclude_unset=True).items() if v is not None or k == "branch"}
    if fields.get("is_default"):
        await repo.clear_default(bank.created_by, bank.is_company_account)
    bank = await repo.update(bank, fields)

    log_billing_action(
        "update_bank",
        user_id=user.id,
        entity="bank_details",
        entity_id=bank.id,
        details={"fields": sorted(fields)},
    )
    return ok(data=bank_to_out(bank), message="Bank account updated")


@router.delete("/{bank_id}", response_model=dict)
async def delete_bank(
    bank_id: uuid.UUID,
    user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    bank = await _get_bank_or_404(bank_id, user, db)
    await BankDetailsRepository(db).delete(bank)
    log_billing_action("delete_bank", user_id=user.id, entity="bank_details", entity_id=bank_id)
    return ok(message="Bank account deleted")
