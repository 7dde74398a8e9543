from __future__ import annotations

from decimal import Decimal

from billing_hooks.business.billing.totals import compute_invoice_totals


def test_totals_from_single_tax_rate() -> None:
    totals = compute_invoice_totals([Decimal("10.00")], Decimal("20"), Decimal("0"), Decimal("0"))

    assert totals.subtotal == Decimal("10.00")
    assert totals.tax == Decimal("2.00")
    assert totals.tax2 == Decimal("0")
    assert totals.total == Decimal("12.00")


def test_subtotal_rounds_half_up_to_cents_before_tax() -> None:
    totals = compute_invoice_totals([Decimal("0.125"), Decimal("1.000")], Decimal("10"), Decimal("0"), Decimal("0"))

    assert totals.subtotal == Decimal("1.13")
    assert str(totals.subtotal) == "1.13"
    assert totals.tax == Decimal("0.113")


def test_second_tax_and_credit_are_applied() -> None:
    totals = compute_invoice_totals(
        [Decimal("40.00"), Decimal("60.00")],
        Decimal("10"),
        Decimal("5"),
        Decimal("15.50"),
    )

    assert totals.subtotal == Decimal("100.00")
    assert totals.tax == Decimal("10.00")
    assert totals.tax2 == Decimal("5.00")
    assert totals.total == Decimal("99.50")


def test_no_items_yields_zero_totals_less_credit() -> None:
    totals = compute_invoice_totals([], Decimal("20"), Decimal("0"), Decimal("5"))

    assert totals.subtotal == Decimal("0.00")
    assert totals.tax == Decimal("0")
    assert totals.total == Decimal("-5.00")


def test_accepts_plain_numbers_and_strings() -> None:
    totals = compute_invoice_totals([5, "7.50"], 0, "0", 0)

    assert totals.subtotal == Decimal("12.50")
    assert totals.total == Decimal("12.50")


def test_recomputation_is_idempotent() -> None:
    amounts = [Decimal("19.99"), Decimal("0.01"), Decimal("3.335")]

    first = compute_invoice_totals(amounts, Decimal("17.5"), Decimal("2"), Decimal("1"))
    second = compute_invoice_totals(amounts, Decimal("17.5"), Decimal("2"), Decimal("1"))

    assert first == second
