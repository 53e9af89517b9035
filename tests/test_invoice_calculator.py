from __future__ import annotations

from decimal import Decimal

import pytest

from contentdesk.services.invoices import InvoiceInputError, compute_totals, line_amount


def test_worked_example_totals():
    totals = compute_totals([(2, 50), (1, 30)], tax_rate=10, discount_rate=5)

    assert totals.amounts == (Decimal("100.00"), Decimal("30.00"))
    assert totals.subtotal == Decimal("130.00")
    assert totals.tax_amount == Decimal("13.00")
    assert totals.discount_amount == Decimal("6.50")
    assert totals.total == Decimal("136.50")


def test_line_amount_rounds_half_up_to_cents():
    assert line_amount("1.005", 1) == Decimal("1.01")
    assert line_amount("0.333", 3) == Decimal("1.00")
    assert line_amount("1.5", "19.99") == Decimal("29.99")


def test_tax_and_discount_round_half_up():
    totals = compute_totals([("0.10", 1)], tax_rate=5, discount_rate=5)

    assert totals.tax_amount == Decimal("0.01")
    assert totals.discount_amount == Decimal("0.01")
    assert totals.total == Decimal("0.10")


def test_total_identity_holds_after_rounding():
    totals = compute_totals([("3", "33.33"), ("0.5", "12.345")], tax_rate="7.25", discount_rate="12.5")

    assert totals.total == totals.subtotal + totals.tax_amount - totals.discount_amount


def test_no_lines_prices_to_zero():
    totals = compute_totals([], tax_rate=20, discount_rate=0)

    assert totals.subtotal == Decimal("0.00")
    assert totals.total == Decimal("0.00")


@pytest.mark.parametrize("quantity,rate", [(-1, 10), (1, -0.01)])
def test_negative_lines_are_rejected(quantity, rate):
    with pytest.raises(InvoiceInputError):
        compute_totals([(quantity, rate)])


@pytest.mark.parametrize("field", ["tax_rate", "discount_rate"])
@pytest.mark.parametrize("value", [-1, "100.01"])
def test_rates_outside_percentage_range_are_rejected(field, value):
    with pytest.raises(InvoiceInputError):
        compute_totals([(1, 10)], **{field: value})


def test_full_discount_and_tax_bounds_are_allowed():
    totals = compute_totals([(1, 40)], tax_rate=100, discount_rate=100)

    assert totals.tax_amount == Decimal("40.00")
    assert totals.discount_amount == Decimal("40.00")
    assert totals.total == Decimal("40.00")
