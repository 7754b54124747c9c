from __future__ import annotations

from flask import Flask

from ..api import serializers as s
from ..api.identity import current_identity
from ..api.params import date_arg, enum_arg, int_arg, pagination_from_args
from ..common.datetime_utils import parse_date_field
from ..common.validators import require_positive_int
from ..container import Container
from ..core.enums import PaymentStatus
from ..core.exceptions import ValidationError
from .model import NewPaymentLine, PaymentFilters

# camelCase line field -> NewPaymentLine attribute
PAYMENT_LINE_FIELDS = {
    "workerId": "worker_id",
    "daysWorked": "days_worked",
    "allowancePerDay": "allowance_per_day",
}


def _lines_from_body(raw) -> list[NewPaymentLine]:
    if not isinstance(raw, list):
        raise ValidationError("workers must be a non-empty array")
    lines = []
    for i, item in enumerate(raw):
        if not isinstance(item, dict):
            raise ValidationError(f"Line {i + 1} must be an object")
        lines.append(NewPaymentLine(**{attr: item.get(key) for key, attr in PAYMENT_LINE_FIELDS.items()}))
    return lines


def register(app: Flask, container: Container) -> None:
    def _filters(user_id: int) -> PaymentFilters:
        return PaymentFilters(
            user_id=user_id,
            project_id=int_arg("projectId"),
            status=enum_arg("status", PaymentStatus),
            start_date=date_arg("startDate"),
            end_date=date_arg("endDate"),
        )

    @app.route("/api/payments/request", methods=["POST"], endpoint="payments_create")
    def create_payment_request():
        me = current_identity()
        data = s.json_body()

        detail = container.payment_service.create_request(
            user_id=me.id,
            request_id=data.get("requestId"),
            project_id=require_positive_int(data.get("projectId"), "projectId"),
            request_date=parse_date_field(data.get("requestDate"), "requestDate"),
            lines=_lines_from_body(data.get("workers")),
            notes=data.get("notes"),
        )
        return s.ok(s.payment_detail(detail), "Payment request created successfully", 201)

    @app.route("/api/payments/requests", methods=["GET"], endpoint="payments_list")
    def list_payment_requests():
        me = current_identity()
        page = container.payment_service.list(_filters(me.id), pagination_from_args())
        return s.ok(
            [s.payment_row(r) for r in page.items],
            "Payment requests retrieved successfully",
            pagination=page.meta(),
        )

    @app.route("/api/payments/requests/approved", methods=["GET"], endpoint="payments_list_approved")
    def list_approved_payments():
        me = current_identity()
        page = container.payment_service.list_approved(
            user_id=me.id,
            pagination=pagination_from_args(),
            project_id=int_arg("projectId"),
        )
        return s.ok(
            [s.payment_row(r) for r in page.items],
            "Approved payments retrieved successfully",
            pagination=page.meta(),
        )

    @app.route("/api/payments/requests/<request_id>", methods=["GET"], endpoint="payments_get")
    def get_payment_request(request_id: str):
        me = current_identity()
        detail = container.payment_service.get_with_lines(request_id=request_id, user_id=me.id)
        return s.ok(s.payment_detail(detail), "Payment request retrieved successfully")

    @app.route("/api/payments/requests/<request_id>", methods=["DELETE"], endpoint="payments_delete")
    def delete_payment_request(request_id: str):
        me = current_identity()
        container.payment_service.delete(user_id=me.id, request_id=request_id)
        return s.ok(None, "Payment request deleted successfully")

    @app.route("/api/payments/approve", methods=["POST"], endpoint="payments_approve")
    def approve_payment():
        me = current_identity()
        data = s.json_body()

        req = container.payment_service.approve(user_id=me.id, request_id=data.get("requestId"))
        return s.ok(s.payment_request(req), "Payment request approved successfully")

    @app.route("/api/payments/reject", methods=["POST"], endpoint="payments_reject")
    def reject_payment():
        me = current_identity()
        data = s.json_body()

        req = container.payment_service.reject(
            user_id=me.id,
            request_id=data.get("requestId"),
            reason=data.get("reason"),
        )
        body = s.payment_request(req)
        body.update(
            {
                "rejectedBy": req.decided_by,
                "rejectedAt": s.iso(req.decided_at),
            }
        )
        return s.ok(body, "Payment request rejected successfully")

    @app.route("/api/payments/process", methods=["POST"], endpoint="payments_process")
    def process_payments():
        me = current_identity()
        data = s.json_body()

        request_ids = data.get("requestIds")
        if not isinstance(request_ids, list):
            raise ValidationError("Payment request IDs array is required and cannot be empty")

        result = container.payment_service.process_batch(user_id=me.id, request_ids=request_ids)
        return s.ok(
            {
                "processedPayments": [s.payment_request(r) for r in result.processed],
                "processedCount": result.count,
                "totalAmount": s.money(result.total_amount),
            },
            f"{result.count} payment(s) processed successfully",
        )

    @app.route("/api/payments/stats", methods=["GET"], endpoint="payments_stats")
    def payment_stats():
        me = current_identity()
        filters = PaymentFilters(
            user_id=me.id,
            project_id=int_arg("projectId"),
            start_date=date_arg("startDate"),
            end_date=date_arg("endDate"),
        )
        stats = container.statistics_service.payment_stats(filters)
        return s.ok(stats.to_dict(), "Payment statistics retrieved successfully")
