from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional


@dataclass(frozen=True)
class Worker:
    """Domain entity: a worker owned by one project-owner account.

    Read-only here; the worker lifecycle is managed outside this package.
    """

    worker_id: int
    user_id: int
    fullname: str
    position: str
    salary: Optional[Decimal] = None
    card_id: Optional[str] = None
    is_active: bool = True
