from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

CENTS = Decimal("0.01")
HUNDRED = Decimal("100")


@dataclass(frozen=True, slots=True)
class InvoiceTotals:
    subtotal: Decimal
    tax: Decimal
    tax2: Decimal
    total: Decimal


def compute_invoice_totals(
    amounts: Iterable[Decimal | int | str],
    taxrate: Decimal | int | str,
    taxrate2: Decimal | int | str,
    credit: Decimal | int | str,
) -> InvoiceTotals:
    """Totals for an invoice holding items with the given amounts.

    The subtotal is rounded half-up to cents before taxes are applied, so both
    tax components are computed from the rounded figure. Credit already applied
    to the invoice reduces the grand total.
    """
    subtotal = sum((Decimal(amount) for amount in amounts), start=Decimal("0")).quantize(CENTS, rounding=ROUND_HALF_UP)
    tax = subtotal * Decimal(taxrate) / HUNDRED
    tax2 = subtotal * Decimal(taxrate2) / HUNDRED
    total = subtotal + tax + tax2 - Decimal(credit)
    return InvoiceTotals(subtotal=subtotal, tax=tax, tax2=tax2, total=total)
