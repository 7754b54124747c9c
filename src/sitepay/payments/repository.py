from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Mapping, Optional, Protocol, Sequence

from ..core.enums import PaymentStatus
from .model import (
    NewPaymentLine,
    PaymentFilters,
    PaymentListRow,
    PaymentRequest,
    PaymentRequestLine,
    StatusTotal,
)


class PaymentRepository(Protocol):
    def get_by_request_id(self, request_id: str) -> Optional[PaymentRequest]:
        raise NotImplementedError

    def get_lines(self, payment_request_id: int) -> Sequence[PaymentRequestLine]:
        """Lines joined with worker name and position."""

        raise NotImplementedError

    def create_with_lines(
        self,
        *,
        uuid: str,
        request_id: str,
        user_id: int,
        project_id: int,
        request_date: date,
        total_amount: Decimal,
        notes: Optional[str],
        lines: Sequence[tuple[NewPaymentLine, Decimal]],
    ) -> int:
        """Insert the request (Pending, version 1) and every line atomically.

        ``lines`` pairs each input line with its precomputed total. Raises
        ConflictError if ``request_id`` is taken.
        """

        raise NotImplementedError

    def transition(
        self,
        *,
        payment_request_id: int,
        from_status: PaymentStatus,
        expected_version: int,
        to_status: PaymentStatus,
        decided_by: Optional[int] = None,
        rejection_reason: Optional[str] = None,
    ) -> bool:
        """Conditional status flip; bumps version and, when ``decided_by`` is
        given, stamps decided_by/decided_at. False when the row no longer
        matches (status, version)."""

        raise NotImplementedError

    def mark_processed(self, requests: Sequence[PaymentRequest]) -> None:
        """Flip every Approved request to Processed in one transaction.

        Raises ConflictError (retryable) and rolls back when any row changed
        since it was read.
        """

        raise NotImplementedError

    def delete_pending(self, *, payment_request_id: int, expected_version: int) -> bool:
        raise NotImplementedError

    def list_rows(self, filters: PaymentFilters, *, limit: int, offset: int) -> Sequence[PaymentListRow]:
        """Newest first."""

        raise NotImplementedError

    def count(self, filters: PaymentFilters) -> int:
        raise NotImplementedError

    # Aggregates (statistics)
    def status_totals(self, filters: PaymentFilters) -> Mapping[PaymentStatus, StatusTotal]:
        raise NotImplementedError
