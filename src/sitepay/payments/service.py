from __future__ import annotations

import logging
import uuid as uuid_lib
from datetime import date
from typing import Iterable, Optional, Sequence

from ..common.money import sum_money, to_money
from ..common.pagination import Page, Pagination
from ..common.validators import require_max_length, require_non_empty, require_positive_decimal, require_positive_int
from ..core.constants import MAX_REQUEST_ID_LENGTH
from ..core.enums import PaymentStatus
from ..core.exceptions import ConflictError, DomainError, ForbiddenError, InvalidStateError, NotFoundError, ValidationError
from ..projects.repository import ProjectRepository
from ..workers.repository import WorkerRepository
from .calculator.base import LineTotalCalculator
from .calculator.standard_calculator import StandardLineTotalCalculator
from .model import (
    NewPaymentLine,
    PaymentFilters,
    PaymentListRow,
    PaymentRequest,
    PaymentRequestDetail,
    ProcessResult,
)
from .repository import PaymentRepository

logger = logging.getLogger(__name__)


class PaymentRequestService:
    """Payment request state machine.

    Pending -> Approved -> Processed, and Pending -> Rejected. Every
    transition is a version-conditioned write, so of two concurrent callers
    observing the same Pending row only the first commit wins.
    """

    def __init__(
        self,
        payments: PaymentRepository,
        workers: WorkerRepository,
        projects: ProjectRepository,
        *,
        calculator: Optional[LineTotalCalculator] = None,
    ):
        self._payments = payments
        self._workers = workers
        self._projects = projects
        self._calculator = calculator or StandardLineTotalCalculator()

    @staticmethod
    def _clean_line(line: NewPaymentLine, index: int) -> NewPaymentLine:
        label = f"Line {index + 1}"
        allowance = require_positive_decimal(line.allowance_per_day, f"{label} allowancePerDay")
        if to_money(allowance) != allowance:
            raise ValidationError(f"{label} allowancePerDay must have at most two decimal places")
        return NewPaymentLine(
            worker_id=require_positive_int(line.worker_id, f"{label} workerId"),
            days_worked=require_positive_int(line.days_worked, f"{label} daysWorked"),
            allowance_per_day=to_money(allowance),
        )

    def create_request(
        self,
        *,
        user_id: int,
        request_id: str,
        project_id: int,
        request_date: date,
        lines: Iterable[NewPaymentLine],
        notes: Optional[str] = None,
    ) -> PaymentRequestDetail:
        request_id = require_non_empty(request_id, "requestId")
        require_max_length(request_id, "requestId", MAX_REQUEST_ID_LENGTH)

        cleaned = [self._clean_line(line, i) for i, line in enumerate(lines or [])]
        if not cleaned:
            raise ValidationError("A payment request needs at least one worker line")

        if not self._projects.get_owned(int(project_id), int(user_id)):
            raise NotFoundError("Project not found or access denied")

        if self._payments.get_by_request_id(request_id):
            raise ConflictError("Payment request with this ID already exists")

        for line in cleaned:
            if not self._workers.get_owned(line.worker_id, int(user_id)):
                raise NotFoundError(f"Worker with ID {line.worker_id} not found or access denied")

        priced = [(line, self._calculator.line_total(line)) for line in cleaned]
        total_amount = sum_money(total for _, total in priced)

        payment_request_id = self._payments.create_with_lines(
            uuid=str(uuid_lib.uuid4()),
            request_id=request_id,
            user_id=int(user_id),
            project_id=int(project_id),
            request_date=request_date,
            total_amount=total_amount,
            notes=(notes or "").strip() or None,
            lines=priced,
        )

        logger.info(
            "payment_request_created",
            extra={
                "payment_request_id": payment_request_id,
                "request_id": request_id,
                "user_id": int(user_id),
                "project_id": int(project_id),
                "total_amount": str(total_amount),
                "workers_count": len(priced),
            },
        )
        req = self._require(request_id)
        return PaymentRequestDetail(request=req, lines=list(self._payments.get_lines(req.payment_request_id)))

    def _require(self, request_id: str) -> PaymentRequest:
        req = self._payments.get_by_request_id(str(request_id))
        if not req:
            raise NotFoundError("Payment request not found")
        return req

    def _stale_write(self, request_id: str, expected: PaymentStatus, action: str) -> DomainError:
        """Work out why a conditional write matched no row."""

        current = self._payments.get_by_request_id(str(request_id))
        if not current:
            return NotFoundError("Payment request not found")
        if current.status != expected:
            return InvalidStateError(f"Only {expected.value.lower()} payment requests can be {action}")
        return ConflictError(f"Payment request {request_id} was modified concurrently; retry", retryable=True)

    def _decide(
        self,
        *,
        user_id: int,
        request_id: str,
        to_status: PaymentStatus,
        action: str,
        rejection_reason: Optional[str] = None,
    ) -> PaymentRequest:
        req = self._require(request_id)
        if req.status != PaymentStatus.PENDING:
            raise InvalidStateError(f"Only pending payment requests can be {action}")

        ok = self._payments.transition(
            payment_request_id=req.payment_request_id,
            from_status=PaymentStatus.PENDING,
            expected_version=req.version,
            to_status=to_status,
            decided_by=int(user_id),
            rejection_reason=rejection_reason,
        )
        if not ok:
            raise self._stale_write(req.request_id, PaymentStatus.PENDING, action)
        return self._require(req.request_id)

    def approve(self, *, user_id: int, request_id: str) -> PaymentRequest:
        updated = self._decide(user_id=user_id, request_id=request_id, to_status=PaymentStatus.APPROVED, action="approved")

        logger.info(
            "payment_request_approved",
            extra={
                "payment_request_id": updated.payment_request_id,
                "request_id": updated.request_id,
                "approved_by": int(user_id),
                "total_amount": str(updated.total_amount),
            },
        )
        return updated

    def reject(self, *, user_id: int, request_id: str, reason: str) -> PaymentRequest:
        reason = require_non_empty(reason, "Rejection reason")
        updated = self._decide(
            user_id=user_id,
            request_id=request_id,
            to_status=PaymentStatus.REJECTED,
            action="rejected",
            rejection_reason=reason,
        )

        logger.info(
            "payment_request_rejected",
            extra={
                "payment_request_id": updated.payment_request_id,
                "request_id": updated.request_id,
                "rejected_by": int(user_id),
                "reason": reason,
                "total_amount": str(updated.total_amount),
            },
        )
        return updated

    def process_batch(self, *, user_id: int, request_ids: Sequence[str]) -> ProcessResult:
        """Mark a batch of Approved requests as Processed, all or nothing.

        Every id is validated before anything is written: a missing id fails
        with NotFound, then a foreign one with Forbidden, then a non-Approved
        one with InvalidState.
        """

        if not request_ids or isinstance(request_ids, (str, bytes)):
            raise ValidationError("Payment request IDs array is required and cannot be empty")
        ids = [require_non_empty(rid, "Payment request ID") for rid in request_ids]
        if len(set(ids)) != len(ids):
            raise ValidationError("Payment request IDs must not repeat")

        loaded = [(rid, self._payments.get_by_request_id(rid)) for rid in ids]

        missing = [rid for rid, req in loaded if req is None]
        if missing:
            raise NotFoundError(f"Payment request with ID {missing[0]} not found")

        requests = [req for _, req in loaded]
        foreign = [req for req in requests if req.user_id != int(user_id)]
        if foreign:
            raise ForbiddenError(f"Access denied for payment request {foreign[0].request_id}")

        not_approved = [req for req in requests if req.status != PaymentStatus.APPROVED]
        if not_approved:
            raise InvalidStateError(f"Payment request {not_approved[0].request_id} is not approved")

        self._payments.mark_processed(requests)

        processed = [self._require(req.request_id) for req in requests]
        total_amount = sum_money(req.total_amount for req in processed)

        logger.info(
            "payments_processed",
            extra={
                "user_id": int(user_id),
                "payment_count": len(processed),
                "total_amount": str(total_amount),
                "request_ids": ids,
            },
        )
        return ProcessResult(processed=processed, count=len(processed), total_amount=total_amount)

    def delete(self, *, user_id: int, request_id: str) -> None:
        """Remove a Pending request and its lines. Corrections are delete-then-recreate."""

        req = self._payments.get_by_request_id(str(request_id))
        if not req or req.user_id != int(user_id):
            raise NotFoundError("Payment request not found or access denied")
        if req.status != PaymentStatus.PENDING:
            raise InvalidStateError("Only pending payment requests can be deleted")

        ok = self._payments.delete_pending(payment_request_id=req.payment_request_id, expected_version=req.version)
        if not ok:
            raise self._stale_write(req.request_id, PaymentStatus.PENDING, "deleted")

        logger.info(
            "payment_request_deleted",
            extra={
                "payment_request_id": req.payment_request_id,
                "request_id": req.request_id,
                "user_id": int(user_id),
            },
        )

    def get_with_lines(self, *, request_id: str, user_id: int) -> PaymentRequestDetail:
        req = self._payments.get_by_request_id(str(request_id))
        if not req or req.user_id != int(user_id):
            raise NotFoundError("Payment request not found or access denied")
        return PaymentRequestDetail(request=req, lines=list(self._payments.get_lines(req.payment_request_id)))

    def list(self, filters: PaymentFilters, pagination: Pagination) -> Page[PaymentListRow]:
        if filters.start_date and filters.end_date and filters.end_date < filters.start_date:
            raise ValidationError("endDate must be on or after startDate")

        rows = self._payments.list_rows(filters, limit=pagination.limit, offset=pagination.offset)
        total = self._payments.count(filters)
        return Page(items=list(rows), pagination=pagination, total_count=total)

    def list_approved(
        self,
        *,
        user_id: int,
        pagination: Pagination,
        project_id: Optional[int] = None,
    ) -> Page[PaymentListRow]:
        """Approved requests: the ones ready for process_batch."""

        return self.list(
            PaymentFilters(user_id=int(user_id), project_id=project_id, status=PaymentStatus.APPROVED),
            pagination,
        )
