from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Optional, Sequence

from ..core.enums import PaymentStatus


@dataclass(frozen=True)
class PaymentRequest:
    """Domain entity: a batched claim for disbursement on one project.

    ``payment_request_id`` is the internal key; ``request_id`` is the
    caller-supplied identifier used everywhere outside the database.
    ``total_amount`` is fixed at creation. ``decided_by``/``decided_at``
    record the last approve *or* reject actor.
    """

    payment_request_id: int
    uuid: str
    request_id: str
    user_id: int
    project_id: int
    request_date: date
    total_amount: Decimal
    status: PaymentStatus
    version: int = 1
    notes: Optional[str] = None
    decided_by: Optional[int] = None
    decided_at: Optional[datetime] = None
    rejection_reason: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass(frozen=True)
class NewPaymentLine:
    worker_id: int
    days_worked: int
    allowance_per_day: Decimal


@dataclass(frozen=True)
class PaymentRequestLine:
    line_id: int
    payment_request_id: int
    worker_id: int
    days_worked: int
    allowance_per_day: Decimal
    line_total: Decimal
    worker_name: Optional[str] = None
    position: Optional[str] = None


@dataclass(frozen=True)
class PaymentRequestDetail:
    request: PaymentRequest
    lines: Sequence[PaymentRequestLine]


@dataclass(frozen=True)
class PaymentListRow:
    """Read-model for listings: the request plus display names."""

    request: PaymentRequest
    project_name: str
    requester_name: str
    decider_name: Optional[str] = None


@dataclass(frozen=True)
class PaymentFilters:
    user_id: Optional[int] = None
    project_id: Optional[int] = None
    status: Optional[PaymentStatus] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None


@dataclass(frozen=True)
class StatusTotal:
    count: int = 0
    amount: Decimal = Decimal("0.00")


@dataclass(frozen=True)
class ProcessResult:
    processed: Sequence[PaymentRequest] = field(default_factory=list)
    count: int = 0
    total_amount: Decimal = Decimal("0.00")
