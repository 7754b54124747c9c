from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional, Sequence

from ..attendance.model import AttendanceFilters, AttendanceRow
from ..attendance.repository import AttendanceRepository
from ..common.money import sum_money
from ..common.pagination import Pagination
from ..core.constants import WORKER_SUMMARY_RECENT_LIMIT
from ..core.enums import AttendanceStatus, PaymentStatus
from ..core.exceptions import NotFoundError, ValidationError
from ..payments.model import PaymentFilters
from ..payments.repository import PaymentRepository
from ..workers.model import Worker
from ..workers.repository import WorkerRepository

_TWO_PLACES = Decimal("0.01")


def _round2(value: Decimal) -> Decimal:
    return value.quantize(_TWO_PLACES, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class AttendanceStats:
    total_records: int
    present_count: int
    absent_count: int
    late_count: int
    half_day_count: int
    attendance_rate: Decimal
    average_rating: Decimal

    def to_dict(self) -> dict:
        return {
            "totalRecords": self.total_records,
            "presentCount": self.present_count,
            "absentCount": self.absent_count,
            "lateCount": self.late_count,
            "halfDayCount": self.half_day_count,
            "attendanceRate": float(self.attendance_rate),
            "averageRating": float(self.average_rating),
        }


@dataclass(frozen=True)
class PaymentStats:
    total_requests: int
    pending_requests: int
    approved_requests: int
    rejected_requests: int
    processed_requests: int
    total_approved_amount: Decimal

    def to_dict(self) -> dict:
        return {
            "totalRequests": self.total_requests,
            "pendingRequests": self.pending_requests,
            "approvedRequests": self.approved_requests,
            "rejectedRequests": self.rejected_requests,
            "processedRequests": self.processed_requests,
            "totalApprovedAmount": f"{self.total_approved_amount:.2f}",
        }


@dataclass(frozen=True)
class WorkerAttendanceSummary:
    worker: Worker
    stats: AttendanceStats
    recent_records: Sequence[AttendanceRow]


def attendance_rate(present: int, late: int, total: int) -> Decimal:
    """(Present + Late) / total x 100, two decimals; 0 for an empty set."""

    if total <= 0:
        return _round2(Decimal(0))
    return _round2(Decimal(present + late) * Decimal(100) / Decimal(total))


class StatisticsService:
    """Read-only aggregates over the attendance and payment ledgers.

    Filters are the same ones the listings take, so a figure here always
    agrees with the matching list call.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        payments: PaymentRepository,
        workers: WorkerRepository,
    ):
        self._attendance = attendance
        self._payments = payments
        self._workers = workers

    @staticmethod
    def _check_range(start, end) -> None:
        if start and end and end < start:
            raise ValidationError("endDate must be on or after startDate")

    def attendance_stats(self, filters: AttendanceFilters) -> AttendanceStats:
        self._check_range(filters.start_date, filters.end_date)

        counts = self._attendance.status_counts(filters)
        present = int(counts.get(AttendanceStatus.PRESENT, 0))
        absent = int(counts.get(AttendanceStatus.ABSENT, 0))
        late = int(counts.get(AttendanceStatus.LATE, 0))
        half_day = int(counts.get(AttendanceStatus.HALF_DAY, 0))
        total = present + absent + late + half_day

        avg = self._attendance.average_rating(filters)

        return AttendanceStats(
            total_records=total,
            present_count=present,
            absent_count=absent,
            late_count=late,
            half_day_count=half_day,
            attendance_rate=attendance_rate(present, late, total),
            average_rating=_round2(avg) if avg is not None else _round2(Decimal(0)),
        )

    def payment_stats(self, filters: PaymentFilters) -> PaymentStats:
        self._check_range(filters.start_date, filters.end_date)

        totals = self._payments.status_totals(filters)

        def count(status: PaymentStatus) -> int:
            t = totals.get(status)
            return int(t.count) if t else 0

        committed = sum_money(
            totals[s].amount for s in (PaymentStatus.APPROVED, PaymentStatus.PROCESSED) if s in totals
        )

        return PaymentStats(
            total_requests=sum(count(s) for s in PaymentStatus),
            pending_requests=count(PaymentStatus.PENDING),
            approved_requests=count(PaymentStatus.APPROVED),
            rejected_requests=count(PaymentStatus.REJECTED),
            processed_requests=count(PaymentStatus.PROCESSED),
            total_approved_amount=committed,
        )

    def worker_attendance_summary(
        self,
        *,
        user_id: int,
        worker_id: int,
        project_id: Optional[int] = None,
        start_date=None,
        end_date=None,
    ) -> WorkerAttendanceSummary:
        worker = self._workers.get_owned(int(worker_id), int(user_id))
        if not worker:
            raise NotFoundError("Worker not found or access denied")

        filters = AttendanceFilters(
            user_id=int(user_id),
            worker_id=int(worker_id),
            project_id=project_id,
            start_date=start_date,
            end_date=end_date,
        )
        stats = self.attendance_stats(filters)
        page = Pagination(page=1, limit=WORKER_SUMMARY_RECENT_LIMIT)
        recent = self._attendance.list_rows(filters, limit=page.limit, offset=page.offset)
        return WorkerAttendanceSummary(worker=worker, stats=stats, recent_records=list(recent))
