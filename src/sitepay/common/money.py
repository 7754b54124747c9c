from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Iterable

CENTS = Decimal("0.01")
ZERO = Decimal("0.00")


def to_money(value: Any) -> Decimal:
    """Quantize to two fractional digits (half-up), the DECIMAL(_,2) scale."""

    if value is None:
        return ZERO
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(CENTS, rounding=ROUND_HALF_UP)


def sum_money(values: Iterable[Any]) -> Decimal:
    total = ZERO
    for v in values:
        total += to_money(v)
    return to_money(total)


def format_money(value: Any) -> str:
    return f"{to_money(value):.2f}"
