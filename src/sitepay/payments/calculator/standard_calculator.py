from __future__ import annotations

from decimal import Decimal

from ...common.money import to_money
from ..model import NewPaymentLine
from .base import LineTotalCalculator


class StandardLineTotalCalculator(LineTotalCalculator):
    """Standard rule: days_worked x allowance_per_day, rounded half-up to cents."""

    def line_total(self, line: NewPaymentLine) -> Decimal:
        return to_money(Decimal(int(line.days_worked)) * to_money(line.allowance_per_day))
