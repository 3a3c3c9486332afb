from __future__ import annotations

from decimal import Decimal
from typing import Iterable, Tuple

from chocoblitz.constants import TAX_RATE


def calc_tax(subtotal: Decimal, rate: Decimal = TAX_RATE) -> Decimal:
    return subtotal * rate


def calc_totals(lines: Iterable[Tuple[Decimal, int]], rate: Decimal = TAX_RATE) -> Tuple[Decimal, Decimal, Decimal]:
    """(price, quantity) pairs -> (subtotal, tax, total), unrounded."""
    subtotal = sum((price * qty for price, qty in lines), Decimal("0"))
    tax = calc_tax(subtotal, rate)
    return subtotal, tax, subtotal + tax
