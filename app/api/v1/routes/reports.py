# app/api/v1/routes/reports.py
"""Read-only reports: dashboard, GST summary (JSON / CSV), per customer and per project."""

from __future__ import annotations

import logging
import uuid
from datetime import date

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.db import get_db
from app.core.errors import ValidationError
from app.domain.services import report_service
from app.domain.services.gst_report_export import build_gst_report_csv, build_gst_report_xlsx
from app.infrastructure.db.models import User
from app.infrastructure.db.repositories.master_data_repository import CustomerRepository

from app.api.v1.deps import get_current_user, owner_scope
from app.api.v1.envelope import ok
from app.api.v1.routes.customers import customer_to_out
from app.api.v1.routes.invoices import invoice_to_detail
from app.api.v1.routes.payments import payment_to_out
from app.api.v1.routes.projects import project_to_out

logger = logging.getLogger("api.v1.reports")

router = APIRouter(prefix="/reports", tags=["Reports"])


def _check_range(start: date | None, end: date | None) -> None:
    if start and end and start > end:
        raise ValidationError(
            "start_date must not be after end_date",
            errors=[{"field": "start_date", "value": start.isoformat()}],
        )


@router.get("/dashboard", response_model=dict)
async def dashboard(
    start_date: date | None = Query(None),
    end_date: date | None = Query(None),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Billed, GST, paid and outstanding totals with status / type breakdowns."""
    _check_range(start_date, end_date)
    summary = await report_service.dashboard(db, owner_scope(user), start_date, end_date)
    return ok(data=summary.to_dict())


@router.get("/gst", response_model=dict)
async def gst_report(
    start_date: date | None = Query(None),
    end_date: date | None = Query(None),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    _check_range(start_date, end_date)
    summary, invoices = await report_service.gst_report(db, owner_scope(user), start_date, end_date)
    return ok(
        data={
            "summary": summary.to_dict(),
            "invoices": [invoice_to_detail(inv) for inv in invoices],
        }
    )


@router.get("/gst/export")
async def gst_report_export(
    start_date: date | None = Query(None),
    end_date: date | None = Query(None),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Download the GST report as CSV."""
    _check_range(start_date, end_date)
    _, invoices = await report_service.gst_report(db, owner_scope(user), start_date, end_date)
    customers = await CustomerRepository(db).get_many(inv.customer_id for inv in invoices)
    content = build_gst_report_csv(invoices, customers)

    label = f"{start_date or 'all'}_{end_date or 'all'}"
    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="gst_report_{label}.csv"'},
    )


@router.get("/gst/export/excel")
async def gst_report_export_excel(
    start_date: date | None = Query(None),
    end_date: date | None = Query(None),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Download the GST report as an Excel workbook."""
    _check_range(start_date, end_date)
    _, invoices = await report_service.gst_report(db, owner_scope(user), start_date, end_date)
    customers = await CustomerRepository(db).get_many(inv.customer_id for inv in invoices)
    content = build_gst_report_xlsx(invoices, customers)

    label = f"{start_date or 'all'}_{end_date or 'all'}"
    return Response(
        content=content,
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        headers={"Content-Disposition": f'attachment; filename="gst_report_{label}.xlsx"'},
    )


@router.get("/customer/{customer_id}", response_model=dict)
async def customer_report(
    customer_id: uuid.UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    report = await report_service.customer_report(db, customer_id, owner_scope(user))
    return ok(
        data={
            "customer": customer_to_out(report["customer"]),
            "invoices": [invoice_to_detail(inv) for inv in report["invoices"]],
            "payments": [payment_to_out(p) for p in report["payments"]],
            "summary": report["summary"],
        }
    )


@router.get("/project/{project_id}", response_model=dict)
async def project_report(
    project_id: uuid.UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    report = await report_service.project_report(db, project_id, owner_scope(user))
    return ok(
        data={
            "project": project_to_out(report["project"]),
            "invoices": [invoice_to_detail(inv) for inv in report["invoices"]],
            "payments": [payment_to_out(p) for p in report["payments"]],
            "summary": report["summary"],
        }
    )
