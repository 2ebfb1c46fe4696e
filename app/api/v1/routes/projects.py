# app/api/v1/routes/projects.py
"""Project master data: CRUD, optionally linked to a customer."""

from __future__ import annotations

import logging
import uuid

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.db import get_db
from app.core.errors import NotFoundError
from app.infrastructure.audit import log_billing_action
from app.infrastructure.db.models import Project, User
from app.infrastructure.db.repositories.master_data_repository import (
    CustomerRepository,
    ProjectRepository,
)

from app.api.v1.deps import get_current_user, owner_scope, require_admin
from app.api.v1.envelope import ok
from app.api.v1.schemas.customers import ProjectCreate, ProjectOut, ProjectUpdate

logger = logging.getLogger("api.v1.projects")

router = APIRouter(prefix="/projects", tags=["Projects"])


def project_to_out(p: Project) -> dict:
    return ProjectOut(
        id=str(p.id),
        name=p.name,
        description=p.description,
        customer_id=str(p.customer_id) if p.customer_id else None,
        status=p.status,
        created_at=p.created_at,
    ).model_dump()


async def _get_project_or_404(project_id: uuid.UUID, user: User, db: AsyncSession) -> Project:
    project = await ProjectRepository(db).get_by_id(project_id, owner_scope(user))
    if project is None:
        raise NotFoundError("Project", project_id)
    return project


async def _check_customer(customer_id: uuid.UUID | None, user: User, db: AsyncSession) -> None:
    if customer_id and await CustomerRepository(db).get_by_id(customer_id, owner_scope(user)) is None:
        raise NotFoundError("Customer", customer_id)


@router.get("", response_model=dict)
async def list_projects(
    customer_id: uuid.UUID | None = Query(None),
    status: str | None = Query(None, description="active | completed | on-hold"),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    projects = await ProjectRepository(db).list(owner_scope(user), customer_id, status)
    return ok(data=[project_to_out(p) for p in projects])


@router.get("/{project_id}", response_model=dict)
async def get_project(
    project_id: uuid.UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return ok(data=project_to_out(await _get_project_or_404(project_id, user, db)))


@router.post("", response_model=dict, status_code=201)
async def create_project(
    body: ProjectCreate,
    user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    await _check_customer(body.customer_id, user, db)
    project = await ProjectRepository(db).create(created_by=user.id, **body.model_dump())

    log_billing_action(
        "create_project",
        user_id=user.id,
        entity="project",
        entity_id=project.id,
        details={"name": project.name},
    )
    return ok(data=project_to_out(project), message="Project created")


@router.put("/{project_id}", response_model=dict)
async def update_project(
    project_id: uuid.UUID,
    body: ProjectUpdate,
    user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    project = await _get_project_or_404(project_id, user, db)
    fields = body.model_dump(exclude_unset=True)
    for key in ("name", "status"):
        if fields.get(key) is None:
            fields.pop(key, None)
    await _check_customer(fields.get("customer_id"), user, db)
    project = await ProjectRepository(db).update(project, fields)

    log_billing_action(
        "update_project",
        user_id=user.id,
        entity="project",
        entity_id=project.id,
        details={"fields": sorted(fields)},
    )
    return ok(data=project_to_out(project), message="Project updated")


@router.delete("/{project_id}", response_model=dict)
async def delete_project(
    project_id: uuid.UUID,
    user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Delete a project; its invoices stay and lose the project link."""
    project = await _get_project_or_404(project_id, user, db)
    await ProjectRepository(db).delete(project)
    log_billing_action("delete_project", user_id=user.id, entity="project", entity_id=project_id)
    return ok(message="Project deleted")
