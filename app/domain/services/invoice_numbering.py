# app/domain/services/invoice_numbering.py
"""
Year-scoped invoice numbers: ``INV-2025-0001``, ``INV-2025-0002``, ...

The sequence comes from the per-year counter in ``invoice_sequences``,
claimed inside the invoice-creation transaction. If the claim fails, a
timestamp-based number (``INV-2025-483920``) is used instead so invoice
creation is never blocked; that path is logged and counted.
"""

from __future__ import annotations

import logging
import time
from datetime import date, datetime

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.config.settings import settings
from app.core.errors import ComputationFallback
from app.infrastructure.db.repositories.invoice_sequence_repository import (
    InvoiceSequenceRepository,
)

logger = logging.getLogger("invoice_numbering")

_fallback_count = 0


def assign_invoice_number(invoice_date: date, count_in_year: int, prefix: str | None = None) -> str:
    """Number for the ``count_in_year + 1``-th invoice dated in ``invoice_date.year``."""
    prefix = prefix or settings.INVOICE_NUMBER_PREFIX
    return f"{prefix}-{invoice_date.year}-{count_in_year + 1:04d}"


def fallback_invoice_number(now: datetime | None = None, prefix: str | None = None) -> str:
    """Current year plus the last 6 digits of the millisecond timestamp."""
    prefix = prefix or settings.INVOICE_NUMBER_PREFIX
    now = now or datetime.now()
    millis = str(int(now.timestamp() * 1000))
    return f"{prefix}-{now.year}-{millis[-6:]}"


def numbering_fallback_count() -> int:
    """How many invoice numbers were issued through the fallback path in this process."""
    return _fallback_count


def _record_fallback(invoice_date: date, exc: Exception, number: str) -> None:
    global _fallback_count
    _fallback_count += 1
    fallback = ComputationFallback(
        f"invoice sequence unavailable for {invoice_date.year}: {exc}"
    )
    logger.warning(
        "Invoice numbering fallback used: number=%s reason=%s total_fallbacks=%s",
        number,
        fallback,
        _fallback_count,
    )


async def next_invoice_number(db: AsyncSession, invoice_date: date) -> str:
    """
    Claim the next number for ``invoice_date``'s year.

    Runs in a SAVEPOINT of the caller's transaction: on success the counter
    increment commits together with the invoice row; on failure only the
    savepoint is rolled back and the fallback number is returned.
    """
    started = time.monotonic()
    try:
        async with db.begin_nested():
            previous = await InvoiceSequenceRepository(db).claim(invoice_date.year)
    except SQLAlchemyError as exc:
        number = fallback_invoice_number()
        _record_fallback(invoice_date, exc, number)
        return number

    number = assign_invoice_number(invoice_date, previous)
    logger.debug(
        "Assigned invoice number %s in %.1fms",
        number,
        (time.monotonic() - started) * 1000,
    )
    return number
