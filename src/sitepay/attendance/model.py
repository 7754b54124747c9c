from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Optional

from ..core.enums import AttendanceStatus


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one worker's attendance on one project for one day.

    ``user_id`` is the account that recorded it (the ownership scope), not the
    worker.
    """

    attendance_id: int
    user_id: int
    worker_id: int
    project_id: int
    work_date: date
    status: AttendanceStatus
    check_in: Optional[time] = None
    check_out: Optional[time] = None
    rating: Optional[int] = None
    comments: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass(frozen=True)
class AttendanceRow:
    """Read-model for listings: the record plus display names."""

    record: AttendanceRecord
    worker_name: str
    project_name: str
    supervisor_name: str


@dataclass(frozen=True)
class AttendanceFilters:
    user_id: Optional[int] = None
    worker_id: Optional[int] = None
    project_id: Optional[int] = None
    status: Optional[AttendanceStatus] = None
    work_date: Optional[date] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
