from __future__ import annotations

import logging
from datetime import date, time
from typing import Any, Mapping, Optional

from ..common.datetime_utils import parse_time_field
from ..common.pagination import Page, Pagination
from ..common.validators import require_max_length, require_rating
from ..core.constants import MAX_COMMENTS_LENGTH
from ..core.enums import AttendanceStatus
from ..core.exceptions import ConflictError, ForbiddenError, NotFoundError, ValidationError
from ..projects.repository import ProjectRepository
from ..workers.repository import WorkerRepository
from .model import AttendanceFilters, AttendanceRecord, AttendanceRow
from .repository import UPDATABLE_COLUMNS, AttendanceRepository

logger = logging.getLogger(__name__)


def parse_status(value: Any) -> AttendanceStatus:
    if isinstance(value, AttendanceStatus):
        return value
    try:
        return AttendanceStatus(str(value or "").strip())
    except ValueError:
        allowed = ", ".join(s.value for s in AttendanceStatus)
        raise ValidationError(f"Status must be one of: {allowed}")


def _check_times(check_in: Optional[time], check_out: Optional[time]) -> None:
    if check_in and check_out and check_out < check_in:
        raise ValidationError("Check-out time cannot be earlier than check-in time")


class AttendanceService:
    """Attendance ledger: one record per (worker, project, date)."""

    def __init__(
        self,
        attendance: AttendanceRepository,
        workers: WorkerRepository,
        projects: ProjectRepository,
    ):
        self._attendance = attendance
        self._workers = workers
        self._projects = projects

    def _require_owned_worker_and_project(self, *, user_id: int, worker_id: int, project_id: int) -> None:
        if not self._workers.get_owned(int(worker_id), int(user_id)):
            raise NotFoundError("Worker not found or access denied")
        if not self._projects.get_owned(int(project_id), int(user_id)):
            raise NotFoundError("Project not found or access denied")

    def record(
        self,
        *,
        user_id: int,
        worker_id: int,
        project_id: int,
        work_date: date,
        status: AttendanceStatus | str,
        check_in: Optional[time | str] = None,
        check_out: Optional[time | str] = None,
    ) -> AttendanceRecord:
        status = parse_status(status)
        check_in_t = parse_time_field(check_in, "checkIn")
        check_out_t = parse_time_field(check_out, "checkOut")
        _check_times(check_in_t, check_out_t)

        self._require_owned_worker_and_project(user_id=user_id, worker_id=worker_id, project_id=project_id)

        existing = self._attendance.get_for_tuple(worker_id=int(worker_id), project_id=int(project_id), work_date=work_date)
        if existing:
            raise ConflictError("Attendance record already exists for this worker on this date")

        # The unique index still raises ConflictError if a concurrent call wins the race.
        attendance_id = self._attendance.create(
            user_id=int(user_id),
            worker_id=int(worker_id),
            project_id=int(project_id),
            work_date=work_date,
            status=status,
            check_in=check_in_t,
            check_out=check_out_t,
        )

        logger.info(
            "attendance_created",
            extra={
                "attendance_id": attendance_id,
                "user_id": int(user_id),
                "worker_id": int(worker_id),
                "project_id": int(project_id),
                "work_date": work_date.isoformat(),
                "status": status.value,
            },
        )
        return self._reload(attendance_id)

    def mark_with_rating(
        self,
        *,
        user_id: int,
        worker_id: int,
        project_id: int,
        work_date: date,
        status: AttendanceStatus | str,
        rating: Any,
        comments: Optional[str] = None,
    ) -> AttendanceRecord:
        """Supervisor flow: rate a day after the fact.

        Amends the existing record for the tuple (status/rating/comments only)
        or creates one. Repeated calls converge on a single row.
        """

        status = parse_status(status)
        rating = require_rating(rating)
        comments = require_max_length(comments, "Comments", MAX_COMMENTS_LENGTH)

        self._require_owned_worker_and_project(user_id=user_id, worker_id=worker_id, project_id=project_id)

        attendance_id = self._attendance.upsert_rating(
            user_id=int(user_id),
            worker_id=int(worker_id),
            project_id=int(project_id),
            work_date=work_date,
            status=status,
            rating=rating,
            comments=comments,
        )

        logger.info(
            "attendance_marked_with_rating",
            extra={
                "attendance_id": attendance_id,
                "user_id": int(user_id),
                "worker_id": int(worker_id),
                "project_id": int(project_id),
                "work_date": work_date.isoformat(),
                "status": status.value,
                "rating": rating,
            },
        )
        return self._reload(attendance_id)

    def _load_for_owner(self, attendance_id: int, caller_id: int) -> AttendanceRecord:
        record = self._attendance.get_by_id(int(attendance_id))
        if not record:
            raise NotFoundError("Attendance record not found")
        if record.user_id != int(caller_id):
            raise ForbiddenError("Access denied. You can only modify your own attendance records.")
        return record

    def _clean_changes(self, record: AttendanceRecord, fields: Mapping[str, Any]) -> dict:
        unknown = set(fields) - UPDATABLE_COLUMNS
        if unknown:
            raise ValidationError(f"Fields cannot be updated: {', '.join(sorted(unknown))}")

        changes: dict[str, Any] = {}
        if "status" in fields:
            changes["status"] = parse_status(fields["status"])
        if "check_in" in fields:
            changes["check_in"] = parse_time_field(fields["check_in"], "checkIn")
        if "check_out" in fields:
            changes["check_out"] = parse_time_field(fields["check_out"], "checkOut")
        if "rating" in fields:
            changes["rating"] = None if fields["rating"] is None else require_rating(fields["rating"])
        if "comments" in fields:
            changes["comments"] = require_max_length(fields["comments"], "Comments", MAX_COMMENTS_LENGTH)

        _check_times(
            changes.get("check_in", record.check_in),
            changes.get("check_out", record.check_out),
        )
        return changes

    def update(self, attendance_id: int, fields: Mapping[str, Any], caller_id: int) -> AttendanceRecord:
        """Amend an owned record. ``fields`` uses storage column names."""

        record = self._load_for_owner(attendance_id, caller_id)
        changes = self._clean_changes(record, fields)
        if not changes:
            raise ValidationError("No updatable fields supplied")

        if not self._attendance.update_fields(record.attendance_id, changes):
            raise NotFoundError("Attendance record not found")

        logger.info(
            "attendance_updated",
            extra={
                "attendance_id": record.attendance_id,
                "user_id": int(caller_id),
                "updated_fields": sorted(changes),
            },
        )
        return self._reload(record.attendance_id)

    def delete(self, attendance_id: int, caller_id: int) -> None:
        record = self._load_for_owner(attendance_id, caller_id)
        if not self._attendance.delete(record.attendance_id):
            raise NotFoundError("Attendance record not found")

        logger.info("attendance_deleted", extra={"attendance_id": record.attendance_id, "user_id": int(caller_id)})

    def get(self, attendance_id: int, caller_id: int) -> AttendanceRecord:
        record = self._attendance.get_by_id(int(attendance_id))
        if not record or record.user_id != int(caller_id):
            raise NotFoundError("Attendance record not found or access denied")
        return record

    def query(self, filters: AttendanceFilters, pagination: Pagination) -> Page[AttendanceRow]:
        if filters.start_date and filters.end_date and filters.end_date < filters.start_date:
            raise ValidationError("endDate must be on or after startDate")

        rows = self._attendance.list_rows(filters, limit=pagination.limit, offset=pagination.offset)
        total = self._attendance.count(filters)
        return Page(items=list(rows), pagination=pagination, total_count=total)

    def _reload(self, attendance_id: int) -> AttendanceRecord:
        record = self._attendance.get_by_id(int(attendance_id))
        if not record:
            raise NotFoundError("Attendance record not found")
        return record
