# app/core/errors.py
"""
Error kinds raised by the billing core.

Routes do not catch these individually: ``app.main`` registers one handler
for :class:`BillingError` that maps ``http_status`` onto the v1 error envelope.
"""

from __future__ import annotations

from typing import Any


class BillingError(Exception):
    """Base class for billing-domain failures."""

    http_status = 500

    def __init__(self, message: str, errors: list[dict[str, Any]] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.errors = errors or []


class ValidationError(BillingError):
    """Malformed or missing invoice / line-item / payment fields."""

    http_status = 400


class NotFoundError(BillingError):
    """A referenced customer, project, invoice, payment or bank account is absent."""

    http_status = 404

    def __init__(self, entity: str, entity_id: Any) -> None:
        super().__init__(f"{entity} not found")
        self.entity = entity
        self.entity_id = entity_id
        self.errors = [{"entity": entity, "id": str(entity_id)}]


class ConflictError(BillingError):
    """Unique-constraint violation (duplicate invoice number). Safe to retry."""

    http_status = 409


class ComputationFallback(BillingError):
    """
    A computation took its degraded path (e.g. timestamp-based invoice number).

    Never raised to callers: it is logged and counted so the fallback stays
    visible without failing the request.
    """

    http_status = 200
