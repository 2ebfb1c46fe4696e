# app/api/v1/routes/customers.py
"""Customer master data: CRUD and search."""

from __future__ import annotations

import logging
import uuid

from fastapi import APIRouter, Depends, Query
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.db import get_db
from app.core.errors import ConflictError, NotFoundError
from app.infrastructure.audit import log_billing_action
from app.infrastructure.db.models import Customer, User
from app.infrastructure.db.repositories.master_data_repository import CustomerRepository

from app.api.v1.deps import get_current_user, owner_scope, require_admin
from app.api.v1.envelope import ok, paginated
from app.api.v1.schemas.customers import CustomerCreate, CustomerOut, CustomerUpdate

logger = logging.getLogger("api.v1.customers")

router = APIRouter(prefix="/customers", tags=["Customers"])


def customer_to_out(c: Customer) -> dict:
    return CustomerOut(
        id=str(c.id),
        name=c.name,
        company_name=c.company_name,
        email=c.email,
        phone=c.phone,
        gstin=c.gstin,
        street=c.street,
        city=c.city,
        state=c.state,
        pincode=c.pincode,
        country=c.country,
        created_at=c.created_at,
    ).model_dump()


async def _get_customer_or_404(customer_id: uuid.UUID, user: User, db: AsyncSession) -> Customer:
    customer = await CustomerRepository(db).get_by_id(customer_id, owner_scope(user))
    if customer is None:
        raise NotFoundError("Customer", customer_id)
    return customer


@router.get("", response_model=dict)
async def list_customers(
    q: str = Query("", description="Search by name, company or GSTIN"),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    customers = await CustomerRepository(db).list(owner_scope(user), q.strip() or None)
    page = customers[offset : offset + limit]
    return paginated(
        items=[customer_to_out(c) for c in page],
        total=len(customers),
        limit=limit,
        offset=offset,
    )


@router.get("/{customer_id}", response_model=dict)
async def get_customer(
    customer_id: uuid.UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    customer = await _get_customer_or_404(customer_id, user, db)
    return ok(data=customer_to_out(customer))


@router.post("", response_model=dict, status_code=201)
async def create_customer(
    body: CustomerCreate,
    user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    fields = body.model_dump()
    fields["name"] = fields["name"].strip()
    customer = await CustomerRepository(db).create(created_by=user.id, **fields)

    log_billing_action(
        "create_customer",
        user_id=user.id,
        entity="customer",
        entity_id=customer.id,
        details={"name": customer.name},
    )
    return ok(data=customer_to_out(customer), message="Customer created")


@router.put("/{customer_id}", response_model=dict)
async def update_customer(
    customer_id: uuid.UUID,
    body: CustomerUpdate,
    user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Update customer details. Existing invoices keep their stored tax split."""
    customer = await _get_customer_or_404(customer_id, user, db)
    fields = body.model_dump(exclude_unset=True)
    if fields.get("name") is None:
        fields.pop("name", None)
    customer = await CustomerRepository(db).update(customer, fields)

    log_billing_action(
        "update_customer",
        user_id=user.id,
        entity="customer",
        entity_id=customer.id,
        details={"fields": sorted(fields)},
    )
    return ok(data=customer_to_out(customer), message="Customer updated")


@router.delete("/{customer_id}", response_model=dict)
async def delete_customer(
    customer_id: uuid.UUID,
    user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    customer = await _get_customer_or_404(customer_id, user, db)
    try:
        await CustomerRepository(db).delete(customer)
    except IntegrityError as exc:
        await db.rollback()
        raise ConflictError(
            "Customer has invoices and cannot be deleted",
            errors=[{"entity": "Customer", "id": str(customer_id)}],
        ) from exc

    log_billing_action("delete_customer", user_id=user.id, entity="customer", entity_id=customer_id)
    return ok(message="Customer deleted")
