"""Unit tests for the DocumentTotals domain service."""

from decimal import Decimal

import pytest

from recon.domain.exceptions import ErrorKind, InvalidAdjustmentError
from recon.domain.model.totals import Adjustments, PricedLineItem
from recon.domain.model.value_objects import round_money
from recon.domain.service.document_totals import DocumentTotals


@pytest.fixture
def totals():
    return DocumentTotals()


def D(value: str) -> Decimal:
    return Decimal(value)


class TestComputeScenarios:

    def test_scenario_b(self, totals):
        items = [PricedLineItem.of(2, "25.00"), PricedLineItem.of(1, "9.99")]
        adjustments = Adjustments.of(discount_amount="5.00", tax_rate=10, shipping_amount="7.50")

        result = totals.compute(items, adjustments)

        assert result.subtotal == D("59.99")
        assert result.taxable_base == D("54.99")
        assert result.tax_amount == D("5.50")
        assert result.grand_total == D("67.99")

    def test_scenario_c_negative_discount(self, totals):
        with pytest.raises(InvalidAdjustmentError, match="discount_amount") as info:
            totals.compute([PricedLineItem.of(1, "10")], Adjustments.of(discount_amount=-1))
        assert info.value.field == "discount_amount"
        assert info.value.kind is ErrorKind.INVALID_ADJUSTMENT

    def test_purchase_order_without_discount(self, totals):
        # Purchase orders carry tax and shipping but no discount
        items = [PricedLineItem.of(4, "12.50")]
        result = totals.compute(items, Adjustments.of(tax_rate=10, shipping_amount=15))
        assert result.subtotal == D("50.00")
        assert result.tax_amount == D("5.00")
        assert result.grand_total == D("70.00")


class TestComputeRules:

    def test_no_adjustments(self, totals):
        result = totals.compute([PricedLineItem.of(3, "1.10")])
        assert result.subtotal == D("3.30")
        assert result.tax_amount == D("0.00")
        assert result.grand_total == D("3.30")

    def test_empty_items(self, totals):
        result = totals.compute([], Adjustments.of(tax_rate=10, shipping_amount="4.99"))
        assert result.subtotal == D("0.00")
        assert result.tax_amount == D("0.00")
        assert result.grand_total == D("4.99")
        assert result.lines == ()

    def test_discount_applied_before_tax(self, totals):
        result = totals.compute(
            [PricedLineItem.of(1, "100")], Adjustments.of(discount_amount=20, tax_rate=10)
        )
        assert result.tax_amount == D("8.00")
        assert result.grand_total == D("88.00")

    def test_discount_larger_than_subtotal_taxes_nothing(self, totals):
        result = totals.compute(
            [PricedLineItem.of(1, "10")],
            Adjustments.of(discount_amount=15, tax_rate=10, shipping_amount=2),
        )
        assert result.taxable_base == D("0.00")
        assert result.tax_amount == D("0.00")
        assert result.grand_total == D("-3.00")

    def test_subtotal_rounded_half_up(self, totals):
        result = totals.compute([PricedLineItem.of(3, "0.335")])
        assert result.subtotal == D("1.01")  # 1.005

    def test_line_breakdown_preserves_order(self, totals):
        items = [
            PricedLineItem.of(1, "9.99", "B"),
            PricedLineItem.of(2, "25.00", "A"),
        ]
        result = totals.compute(items)
        assert [line.product_id for line in result.lines] == ["B", "A"]
        assert [line.line_total for line in result.lines] == [D("9.99"), D("50.00")]

    def test_order_does_not_change_sum(self, totals):
        items = [PricedLineItem.of(2, "25.00"), PricedLineItem.of(1, "9.99")]
        adjustments = Adjustments.of(tax_rate=7)
        forward = totals.compute(items, adjustments)
        backward = totals.compute(list(reversed(items)), adjustments)
        assert forward.grand_total == backward.grand_total

    def test_zero_quantity_contributes_nothing(self, totals):
        result = totals.compute([PricedLineItem.of(0, "99"), PricedLineItem.of(1, "1")])
        assert result.subtotal == D("1.00")

    def test_fractional_tax_rate(self, totals):
        result = totals.compute([PricedLineItem.of(1, "200")], Adjustments.of(tax_rate="7.25"))
        assert result.tax_amount == D("14.50")


class TestComputeInvariants:

    @pytest.mark.parametrize(
        "items, discount, rate, shipping",
        [
            ([(2, "25.00"), (1, "9.99")], "5.00", "10", "7.50"),
            ([(7, "0.333")], "0.10", "18", "0"),
            ([(1, "19.995")], "0", "12.5", "3.333"),
            ([(3, "4.10"), (5, "2.02")], "30", "5", "1.25"),
            ([(1000, "0.01")], "0.005", "0", "0"),
        ],
    )
    def test_reported_figures_reconcile(self, totals, items, discount, rate, shipping):
        adjustments = Adjustments.of(discount, rate, shipping)
        result = totals.compute([PricedLineItem.of(q, p) for q, p in items], adjustments)

        d = adjustments.discount_amount
        expected_tax = round_money(
            max(D("0"), result.subtotal - d) * adjustments.tax_rate / 100
        )
        assert result.tax_amount == expected_tax
        assert result.grand_total == round_money(
            result.subtotal - d + result.tax_amount + adjustments.shipping_amount
        )

    def test_compute_is_pure(self, totals):
        items = [PricedLineItem.of(2, "25.00")]
        adjustments = Adjustments.of(tax_rate=10)
        assert totals.compute(items, adjustments) == totals.compute(items, adjustments)


class TestComputeValidation:

    @pytest.mark.parametrize(
        "field, kwargs",
        [
            ("discount_amount", {"discount_amount": "-0.01"}),
            ("tax_rate", {"tax_rate": -10}),
            ("shipping_amount", {"shipping_amount": "-5"}),
        ],
    )
    def test_negative_adjustment(self, totals, field, kwargs):
        with pytest.raises(InvalidAdjustmentError, match="cannot be negative") as info:
            totals.compute([PricedLineItem.of(1, "1")], Adjustments.of(**kwargs))
        assert info.value.field == field

    def test_negative_unit_price(self, totals):
        with pytest.raises(InvalidAdjustmentError, match="unit_price") as info:
            totals.compute([PricedLineItem.of(1, "-2")])
        assert info.value.field == "unit_price"

    def test_negative_quantity(self, totals):
        with pytest.raises(InvalidAdjustmentError, match="Line 2: quantity"):
            totals.compute([PricedLineItem.of(1, "2"), PricedLineItem.of(-1, "2")])

    def test_fractional_quantity(self, totals):
        with pytest.raises(InvalidAdjustmentError, match="must be an integer"):
            totals.compute([PricedLineItem(1.5, D("2"))])

    def test_unparseable_price(self):
        with pytest.raises(InvalidAdjustmentError, match="Invalid unit_price"):
            PricedLineItem.of(1, "abc")
