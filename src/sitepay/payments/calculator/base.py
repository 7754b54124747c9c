from __future__ import annotations

from abc import ABC, abstractmethod
from decimal import Decimal

from ..model import NewPaymentLine


class LineTotalCalculator(ABC):
    """Calculator interface (Strategy Pattern for payment lines)."""

    @abstractmethod
    def line_total(self, line: NewPaymentLine) -> Decimal:
        raise NotImplementedError
