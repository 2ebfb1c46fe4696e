"""Tests for the GST split (CGST + SGST vs IGST) and money rounding."""

from decimal import Decimal

import pytest

from app.domain.models.billing import InvoiceType
from app.domain.services.gst_calculator import (
    compute_tax,
    effective_rate,
    is_gst_applicable,
    is_inter_state,
    round_money,
)


class TestRoundMoney:

    def test_half_up(self):
        assert round_money(Decimal("2.345")) == Decimal("2.35")
        assert round_money(Decimal("2.344")) == Decimal("2.34")

    def test_accepts_floats_and_none(self):
        assert round_money(0.1 + 0.2) == Decimal("0.30")
        assert round_money(None) == Decimal("0.00")


class TestInterState:

    def test_same_state_is_intra(self):
        assert is_inter_state("Karnataka", "Karnataka") is False

    def test_different_state_is_inter(self):
        assert is_inter_state("Maharashtra", "Karnataka") is True

    def test_comparison_is_case_sensitive(self):
        assert is_inter_state("karnataka", "Karnataka") is True

    def test_both_missing_counts_as_same(self):
        assert is_inter_state(None, "") is False


class TestComputeTax:

    def test_intra_state_splits_evenly(self):
        tax = compute_tax(Decimal("1000"), Decimal("18"), "Karnataka", "Karnataka")
        assert tax.cgst == Decimal("90.00")
        assert tax.sgst == Decimal("90.00")
        assert tax.igst == Decimal("0.00")
        assert tax.total == Decimal("1180.00")

    def test_inter_state_is_igst(self):
        tax = compute_tax(Decimal("1000"), Decimal("18"), "Maharashtra", "Karnataka")
        assert tax.cgst == Decimal("0.00")
        assert tax.sgst == Decimal("0.00")
        assert tax.igst == Decimal("180.00")
        assert tax.total == Decimal("1180.00")

    def test_zero_rate(self):
        tax = compute_tax(Decimal("500"), Decimal("0"), "Goa", "Goa")
        assert tax.cgst == tax.sgst == tax.igst == Decimal("0.00")
        assert tax.total == Decimal("500.00")

    def test_total_rounded_from_unrounded_gst(self):
        # 0.10 @ 5% -> gst 0.005; halves round to 0.00, total rounds to 0.11
        tax = compute_tax(Decimal("0.10"), Decimal("5"), "Goa", "Goa")
        assert tax.cgst == Decimal("0.00")
        assert tax.sgst == Decimal("0.00")
        assert tax.total == Decimal("0.11")

    def test_fractional_halves(self):
        tax = compute_tax(Decimal("100.05"), Decimal("5"), "Goa", "Goa")
        assert tax.cgst == Decimal("2.50")
        assert tax.sgst == Decimal("2.50")
        assert tax.total == Decimal("105.05")

    @pytest.mark.parametrize("rate", ["5", "12", "18", "28"])
    def test_cgst_equals_sgst(self, rate):
        tax = compute_tax(Decimal("12345.67"), Decimal(rate), "Kerala", "Kerala")
        assert tax.cgst == tax.sgst


class TestEffectiveRate:

    def test_tax_invoice_keeps_rate(self):
        assert effective_rate(InvoiceType.TAX_INVOICE, Decimal("18")) == Decimal("18")

    @pytest.mark.parametrize("invoice_type", ["proforma", "non-tax-invoice"])
    def test_non_tax_types_forced_to_zero(self, invoice_type):
        assert effective_rate(invoice_type, Decimal("18")) == Decimal("0")
        assert is_gst_applicable(invoice_type, Decimal("18")) is False

    def test_tax_invoice_without_rate_not_applicable(self):
        assert is_gst_applicable("tax-invoice", None) is False
        assert is_gst_applicable("tax-invoice", Decimal("0")) is False

    def test_unknown_type_rejected(self):
        with pytest.raises(ValueError):
            effective_rate("credit-note", Decimal("18"))
