# app/api/v1/__init__.py
"""
Versioned API v1: aggregates all sub-routers under ``/api/v1``.

Usage in ``main.py``::

    from app.api.v1 import v1_router
    app.include_router(v1_router)
"""

from fastapi import APIRouter

from app.api.v1.routes.auth import router as auth_router
from app.api.v1.routes.customers import router as customers_router
from app.api.v1.routes.projects import router as projects_router
from app.api.v1.routes.banks import router as banks_router
from app.api.v1.routes.invoices import router as invoices_router
from app.api.v1.routes.payments import router as payments_router
from app.api.v1.routes.reports import router as reports_router

v1_router = APIRouter(prefix="/api/v1")

v1_router.include_router(auth_router)

# Master data
v1_router.include_router(customers_router)
v1_router.include_router(projects_router)
v1_router.include_router(banks_router)

# Billing
v1_router.include_router(invoices_router)
v1_router.include_router(payments_router)
v1_router.include_router(reports_router)

__all__ = ["v1_router"]
