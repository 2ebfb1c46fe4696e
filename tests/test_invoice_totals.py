"""Tests for line-item validation and invoice total derivation."""

from decimal import Decimal

import pytest

from app.core.errors import ValidationError
from app.domain.services.invoice_totals import build_invoice_totals, normalize_line_items


class TestNormalizeLineItems:

    def test_amount_defaults_to_quantity_times_rate(self, sample_line_items):
        items = normalize_line_items(sample_line_items)
        assert [i.amount for i in items] == [Decimal("600.00"), Decimal("400.00")]

    def test_supplied_amount_is_kept(self):
        items = normalize_line_items(
            [{"description": "Retainer", "quantity": 2, "rate": 500, "amount": 900}]
        )
        assert items[0].amount == Decimal("900.00")

    @pytest.mark.parametrize("quantity", [None, "", "abc"])
    def test_absent_or_garbage_quantity_defaults_to_one(self, quantity):
        items = normalize_line_items([{"description": "Audit", "quantity": quantity, "rate": "250"}])
        assert items[0].quantity == Decimal("1")
        assert items[0].amount == Decimal("250.00")

    @pytest.mark.parametrize("quantity", [0, -3, "-0.5"])
    def test_non_positive_quantity_rejected(self, quantity):
        with pytest.raises(ValidationError) as exc_info:
            normalize_line_items([{"description": "Audit", "quantity": quantity, "rate": "250"}])
        assert exc_info.value.errors == [
            {"field": "items[0].quantity", "message": "Item quantity must be positive"}
        ]

    @pytest.mark.parametrize(
        "item, field",
        [
            ({"description": "x", "rate": "1e30"}, "items[0].rate"),
            ({"description": "x", "rate": "10", "amount": "1e30"}, "items[0].amount"),
            ({"description": "x", "rate": "10", "quantity": "1e30"}, "items[0].quantity"),
            ({"description": "x", "rate": "100000", "quantity": "100000"}, "items[0].amount"),
        ],
    )
    def test_oversized_numbers_rejected(self, item, field):
        with pytest.raises(ValidationError) as exc_info:
            normalize_line_items([item])
        assert [e["field"] for e in exc_info.value.errors] == [field]

    def test_subtotal_must_fit(self):
        big = {"description": "Plant", "rate": "6000000000"}
        with pytest.raises(ValidationError) as exc_info:
            normalize_line_items([big, dict(big)])
        assert exc_info.value.errors[0]["field"] == "items"

    def test_numeric_strings_accepted(self):
        items = normalize_line_items([{"description": "Audit", "quantity": "1.5", "rate": "99.99"}])
        assert items[0].amount == Decimal("149.99")

    def test_empty_items_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            normalize_line_items([])
        assert exc_info.value.errors[0]["field"] == "items"

    def test_every_problem_reported(self):
        with pytest.raises(ValidationError) as exc_info:
            normalize_line_items(
                [
                    {"description": "", "rate": "x"},
                    {"description": "Ok", "rate": 10},
                    {"description": "Refund", "rate": -5},
                    {"description": "Odd", "rate": 5, "amount": "lots"},
                ]
            )
        fields = [e["field"] for e in exc_info.value.errors]
        assert fields == [
            "items[0].description",
            "items[0].rate",
            "items[2].rate",
            "items[3].amount",
        ]

    def test_non_object_item_rejected(self):
        with pytest.raises(ValidationError):
            normalize_line_items(["just a string"])


class TestBuildInvoiceTotals:

    def test_intra_state_tax_invoice(self, sample_line_items):
        totals = build_invoice_totals(
            sample_line_items, "tax-invoice", Decimal("18"), "Karnataka", "Karnataka"
        )
        assert totals.subtotal == Decimal("1000.00")
        assert totals.gst_applicable is True
        assert totals.cgst == Decimal("90.00")
        assert totals.sgst == Decimal("90.00")
        assert totals.igst == Decimal("0.00")
        assert totals.total_amount == Decimal("1180.00")
        assert totals.total_gst == Decimal("180.00")

    def test_inter_state_tax_invoice(self, sample_line_items):
        totals = build_invoice_totals(
            sample_line_items, "tax-invoice", Decimal("18"), "Maharashtra", "Karnataka"
        )
        assert totals.igst == Decimal("180.00")
        assert totals.cgst == Decimal("0.00")
        assert totals.total_amount == Decimal("1180.00")

    def test_proforma_never_taxed(self, sample_line_items):
        totals = build_invoice_totals(sample_line_items, "proforma", Decimal("18"), "Goa", "Goa")
        assert totals.gst_applicable is False
        assert totals.gst_rate == Decimal("0")
        assert totals.cgst == totals.sgst == totals.igst == Decimal("0")
        assert totals.total_amount == totals.subtotal == Decimal("1000.00")

    def test_tax_invoice_at_zero_rate(self, sample_line_items):
        totals = build_invoice_totals(sample_line_items, "tax-invoice", Decimal("0"))
        assert totals.gst_applicable is False
        assert totals.total_amount == Decimal("1000.00")

    def test_deterministic(self, sample_line_items):
        a = build_invoice_totals(sample_line_items, "tax-invoice", Decimal("12"), "Goa", "Kerala")
        b = build_invoice_totals(sample_line_items, "tax-invoice", Decimal("12"), "Goa", "Kerala")
        assert a == b

    def test_huge_rate_is_a_validation_error(self):
        with pytest.raises(ValidationError):
            build_invoice_totals([{"description": "x", "rate": "1e30"}], "tax-invoice", 18, "KA", "KA")

    def test_total_with_gst_must_fit(self):
        items = [{"description": "Turbine", "rate": "9000000000"}]
        with pytest.raises(ValidationError) as exc_info:
            build_invoice_totals(items, "tax-invoice", Decimal("18"), "KA", "MH")
        assert exc_info.value.errors[0]["field"] == "items"
        assert build_invoice_totals(items, "proforma").total_amount == Decimal("9000000000.00")
