from __future__ import annotations

from flask import Flask

from ..api import serializers as s
from ..api.identity import current_identity
from ..api.params import date_arg, enum_arg, int_arg, pagination_from_args
from ..common.datetime_utils import parse_date_field
from ..common.validators import require_positive_int
from ..container import Container
from ..core.enums import AttendanceStatus
from .model import AttendanceFilters

# camelCase request field -> attendance_records column
ATTENDANCE_UPDATE_FIELDS = {
    "checkIn": "check_in",
    "checkOut": "check_out",
    "status": "status",
    "rating": "rating",
    "comments": "comments",
}


def register(app: Flask, container: Container) -> None:
    def _filters(user_id: int, *, with_status: bool = True) -> AttendanceFilters:
        return AttendanceFilters(
            user_id=user_id,
            worker_id=int_arg("workerId"),
            project_id=int_arg("projectId"),
            status=enum_arg("status", AttendanceStatus) if with_status else None,
            work_date=date_arg("date") if with_status else None,
            start_date=date_arg("startDate"),
            end_date=date_arg("endDate"),
        )

    @app.route("/api/attendance", methods=["POST"], endpoint="attendance_record")
    def record_attendance():
        me = current_identity()
        data = s.json_body()

        record = container.attendance_service.record(
            user_id=me.id,
            worker_id=require_positive_int(data.get("workerId"), "workerId"),
            project_id=require_positive_int(data.get("projectId"), "projectId"),
            work_date=parse_date_field(data.get("date"), "date"),
            status=data.get("status"),
            check_in=data.get("checkIn"),
            check_out=data.get("checkOut"),
        )
        return s.ok(s.attendance_record(record), "Attendance recorded successfully", 201)

    @app.route("/api/attendance/mark-rating", methods=["POST"], endpoint="attendance_mark_rating")
    def mark_attendance_with_rating():
        me = current_identity()
        data = s.json_body()

        record = container.attendance_service.mark_with_rating(
            user_id=me.id,
            worker_id=require_positive_int(data.get("workerId"), "workerId"),
            project_id=require_positive_int(data.get("projectId"), "projectId"),
            work_date=parse_date_field(data.get("date"), "date"),
            status=data.get("status"),
            rating=data.get("rating"),
            comments=data.get("comments"),
        )
        return s.ok(s.attendance_record(record), "Attendance marked with rating successfully")

    @app.route("/api/attendance", methods=["GET"], endpoint="attendance_list")
    def list_attendance():
        me = current_identity()
        page = container.attendance_service.query(_filters(me.id), pagination_from_args())
        return s.ok(
            [s.attendance_row(r) for r in page.items],
            "Attendance records retrieved successfully",
            pagination=page.meta(),
        )

    @app.route("/api/attendance/stats", methods=["GET"], endpoint="attendance_stats")
    def attendance_stats():
        me = current_identity()
        stats = container.statistics_service.attendance_stats(_filters(me.id, with_status=False))
        return s.ok(stats.to_dict(), "Attendance statistics retrieved successfully")

    @app.route("/api/attendance/worker/<int:worker_id>/summary", methods=["GET"], endpoint="attendance_worker_summary")
    def worker_summary(worker_id: int):
        me = current_identity()
        summary = container.statistics_service.worker_attendance_summary(
            user_id=me.id,
            worker_id=worker_id,
            project_id=int_arg("projectId"),
            start_date=date_arg("startDate"),
            end_date=date_arg("endDate"),
        )
        return s.ok(s.worker_summary(summary), "Worker attendance summary retrieved successfully")

    @app.route("/api/attendance/<int:attendance_id>", methods=["GET"], endpoint="attendance_get")
    def get_attendance(attendance_id: int):
        me = current_identity()
        record = container.attendance_service.get(attendance_id, me.id)
        return s.ok(s.attendance_record(record), "Attendance record retrieved successfully")

    @app.route("/api/attendance/<int:attendance_id>", methods=["PUT"], endpoint="attendance_update")
    def update_attendance(attendance_id: int):
        me = current_identity()
        data = s.json_body()

        # Unknown keys are dropped here; the service only sees column names.
        fields = {column: data[key] for key, column in ATTENDANCE_UPDATE_FIELDS.items() if key in data}
        record = container.attendance_service.update(attendance_id, fields, me.id)
        return s.ok(s.attendance_record(record), "Attendance record updated successfully")

    @app.route("/api/attendance/<int:attendance_id>", methods=["DELETE"], endpoint="attendance_delete")
    def delete_attendance(attendance_id: int):
        me = current_identity()
        container.attendance_service.delete(attendance_id, me.id)
        return s.ok(None, "Attendance record deleted successfully")
