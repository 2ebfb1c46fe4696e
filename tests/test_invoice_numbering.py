"""Tests for year-scoped invoice numbering and its timestamp fallback."""

import re
from datetime import date, datetime
from unittest.mock import AsyncMock, MagicMock, patch

from sqlalchemy.exc import OperationalError

from app.domain.services import invoice_numbering
from app.domain.services.invoice_numbering import (
    assign_invoice_number,
    fallback_invoice_number,
    next_invoice_number,
    numbering_fallback_count,
)
from app.infrastructure.db.models import InvoiceSequence
from app.infrastructure.db.repositories.invoice_sequence_repository import (
    InvoiceSequenceRepository,
)


class TestAssignInvoiceNumber:

    def test_first_of_year(self):
        assert assign_invoice_number(date(2025, 1, 1), 0) == "INV-2025-0001"

    def test_sequence_is_zero_padded(self):
        assert assign_invoice_number(date(2025, 7, 4), 41) == "INV-2025-0042"

    def test_grows_past_four_digits(self):
        assert assign_invoice_number(date(2025, 12, 31), 9999) == "INV-2025-10000"

    def test_year_comes_from_invoice_date(self):
        assert assign_invoice_number(date(2024, 12, 31), 0).startswith("INV-2024-")

    def test_custom_prefix(self):
        assert assign_invoice_number(date(2025, 1, 1), 2, prefix="ACME") == "ACME-2025-0003"


class TestFallbackInvoiceNumber:

    def test_shape(self):
        number = fallback_invoice_number(now=datetime(2025, 6, 15, 12, 0, 0))
        assert re.fullmatch(r"INV-2025-\d{6}", number)

    def test_does_not_look_like_a_sequence_number(self):
        number = fallback_invoice_number(now=datetime(2025, 6, 15, 12, 0, 0, 123000))
        assert len(number.rsplit("-", 1)[1]) == 6


def _db_with_savepoint():
    db = MagicMock()
    # MagicMock supports ``async with``; __aexit__ returns False so errors propagate
    db.begin_nested.return_value = MagicMock()
    return db


def test_next_invoice_number_uses_counter(event_loop):
    db = _db_with_savepoint()

    with patch.object(invoice_numbering, "InvoiceSequenceRepository") as MockRepo:
        MockRepo.return_value.claim = AsyncMock(return_value=4)
        number = event_loop.run_until_complete(next_invoice_number(db, date(2025, 3, 9)))

    assert number == "INV-2025-0005"
    MockRepo.return_value.claim.assert_awaited_once_with(2025)
    db.begin_nested.assert_called_once()


def test_next_invoice_number_falls_back_on_db_error(event_loop, caplog):
    db = _db_with_savepoint()
    before = numbering_fallback_count()

    with patch.object(invoice_numbering, "InvoiceSequenceRepository") as MockRepo:
        MockRepo.return_value.claim = AsyncMock(
            side_effect=OperationalError("SELECT ... FOR UPDATE", {}, Exception("lock timeout"))
        )
        with caplog.at_level("WARNING", logger="invoice_numbering"):
            number = event_loop.run_until_complete(next_invoice_number(db, date(2025, 3, 9)))

    assert re.fullmatch(r"INV-\d{4}-\d{6}", number)
    assert numbering_fallback_count() == before + 1
    assert "fallback" in caplog.text


# ---------------------------------------------------------------------------
# Counter repository
# ---------------------------------------------------------------------------

def _result(scalar_one_or_none=None, scalar=None):
    result = MagicMock()
    result.scalar_one_or_none.return_value = scalar_one_or_none
    result.scalar.return_value = scalar
    return result


def test_claim_seeds_new_year_from_existing_invoices(event_loop):
    db = MagicMock()
    db.execute = AsyncMock(side_effect=[_result(scalar_one_or_none=None), _result(scalar=3)])
    db.flush = AsyncMock()

    previous = event_loop.run_until_complete(InvoiceSequenceRepository(db).claim(2026))

    assert previous == 3
    seq = db.add.call_args[0][0]
    assert seq.year == 2026
    assert seq.last_value == 4
    db.flush.assert_awaited_once()


def test_claim_increments_existing_counter(event_loop):
    seq = InvoiceSequence(year=2025, last_value=7)
    db = MagicMock()
    db.execute = AsyncMock(return_value=_result(scalar_one_or_none=seq))
    db.flush = AsyncMock()

    repo = InvoiceSequenceRepository(db)
    first = event_loop.run_until_complete(repo.claim(2025))
    second = event_loop.run_until_complete(repo.claim(2025))

    assert (first, second) == (7, 8)
    assert seq.last_value == 9
    db.add.assert_not_called()
