from __future__ import annotations

from datetime import date, time
from decimal import Decimal
from typing import Any, Mapping, Optional, Protocol, Sequence

from ..core.enums import AttendanceStatus
from .model import AttendanceFilters, AttendanceRecord, AttendanceRow

# Storage columns an owner may amend after creation.
UPDATABLE_COLUMNS = frozenset({"status", "check_in", "check_out", "rating", "comments"})


class AttendanceRepository(Protocol):
    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def get_for_tuple(self, *, worker_id: int, project_id: int, work_date: date) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def create(
        self,
        *,
        user_id: int,
        worker_id: int,
        project_id: int,
        work_date: date,
        status: AttendanceStatus,
        check_in: Optional[time] = None,
        check_out: Optional[time] = None,
    ) -> int:
        """Insert a record; raises ConflictError if the tuple already exists."""

        raise NotImplementedError

    def upsert_rating(
        self,
        *,
        user_id: int,
        worker_id: int,
        project_id: int,
        work_date: date,
        status: AttendanceStatus,
        rating: int,
        comments: Optional[str] = None,
    ) -> int:
        """Create or amend the tuple's record in one statement; returns its id.

        check_in/check_out of an existing record are left as they are.
        """

        raise NotImplementedError

    def update_fields(self, attendance_id: int, changes: Mapping[str, Any]) -> bool:
        """``changes`` keys must be in UPDATABLE_COLUMNS."""

        raise NotImplementedError

    def delete(self, attendance_id: int) -> bool:
        raise NotImplementedError

    def list_rows(self, filters: AttendanceFilters, *, limit: int, offset: int) -> Sequence[AttendanceRow]:
        """Date DESC, then creation time DESC."""

        raise NotImplementedError

    def count(self, filters: AttendanceFilters) -> int:
        raise NotImplementedError

    # Aggregates (statistics)
    def status_counts(self, filters: AttendanceFilters) -> Mapping[AttendanceStatus, int]:
        raise NotImplementedError

    def average_rating(self, filters: AttendanceFilters) -> Optional[Decimal]:
        """AVG over non-null ratings; None when there are none."""

        raise NotImplementedError
