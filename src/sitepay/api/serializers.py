from __future__ import annotations

from datetime import date, datetime, time
from decimal import Decimal
from typing import Any, Optional

from flask import jsonify, request

from ..attendance.model import AttendanceRecord, AttendanceRow
from ..common.money import format_money
from ..core.exceptions import ValidationError
from ..payments.model import PaymentListRow, PaymentRequest, PaymentRequestDetail, PaymentRequestLine
from ..statistics.service import WorkerAttendanceSummary
from ..workers.model import Worker


def ok(data: Any = None, message: str = "OK", status: int = 200, **extra):
    body = {"success": True, "message": message, "data": data}
    body.update(extra)
    return jsonify(body), status


def json_body() -> dict:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def iso(value: Optional[date | datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


def hhmmss(value: Optional[time]) -> Optional[str]:
    return value.strftime("%H:%M:%S") if value is not None else None


def money(value: Optional[Decimal]) -> Optional[str]:
    return format_money(value) if value is not None else None


def attendance_record(r: AttendanceRecord) -> dict:
    return {
        "attendanceId": r.attendance_id,
        "userId": r.user_id,
        "workerId": r.worker_id,
        "projectId": r.project_id,
        "date": iso(r.work_date),
        "checkIn": hhmmss(r.check_in),
        "checkOut": hhmmss(r.check_out),
        "status": r.status.value,
        "rating": r.rating,
        "comments": r.comments,
        "createdAt": iso(r.created_at),
        "updatedAt": iso(r.updated_at),
    }


def attendance_row(row: AttendanceRow) -> dict:
    data = attendance_record(row.record)
    data.update(
        {
            "workerName": row.worker_name,
            "projectName": row.project_name,
            "supervisorName": row.supervisor_name,
        }
    )
    return data


def worker(w: Worker) -> dict:
    return {
        "workerId": w.worker_id,
        "fullname": w.fullname,
        "position": w.position,
        "cardId": w.card_id,
        "isActive": w.is_active,
    }


def worker_summary(s: WorkerAttendanceSummary) -> dict:
    return {
        "worker": worker(s.worker),
        "stats": s.stats.to_dict(),
        "recentRecords": [attendance_row(r) for r in s.recent_records],
    }


def payment_request(p: PaymentRequest) -> dict:
    # decidedBy/At doubles as approvedBy/At for older clients.
    return {
        "paymentRequestId": p.payment_request_id,
        "uuid": p.uuid,
        "requestId": p.request_id,
        "userId": p.user_id,
        "projectId": p.project_id,
        "requestDate": iso(p.request_date),
        "totalAmount": money(p.total_amount),
        "status": p.status.value,
        "version": p.version,
        "notes": p.notes,
        "decidedBy": p.decided_by,
        "decidedAt": iso(p.decided_at),
        "approvedBy": p.decided_by,
        "approvedAt": iso(p.decided_at),
        "rejectionReason": p.rejection_reason,
        "createdAt": iso(p.created_at),
        "updatedAt": iso(p.updated_at),
    }


def payment_line(line: PaymentRequestLine) -> dict:
    return {
        "lineId": line.line_id,
        "workerId": line.worker_id,
        "workerName": line.worker_name,
        "position": line.position,
        "daysWorked": line.days_worked,
        "allowancePerDay": money(line.allowance_per_day),
        "lineTotal": money(line.line_total),
    }


def payment_detail(d: PaymentRequestDetail) -> dict:
    data = payment_request(d.request)
    data["workers"] = [payment_line(line) for line in d.lines]
    data["workersCount"] = len(d.lines)
    return data


def payment_row(row: PaymentListRow) -> dict:
    data = payment_request(row.request)
    data.update(
        {
            "projectName": row.project_name,
            "requesterName": row.requester_name,
            "decidedByName": row.decider_name,
            "approvedByName": row.decider_name,
        }
    )
    return data
