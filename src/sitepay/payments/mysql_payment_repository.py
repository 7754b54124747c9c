from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Mapping, Optional, Sequence

from ..common.money import to_money
from ..core.enums import PaymentStatus
from ..core.exceptions import ConflictError
from ..database.gateway import Executor, Gateway
from ..database.mysql_base import build_where
from .model import (
    NewPaymentLine,
    PaymentFilters,
    PaymentListRow,
    PaymentRequest,
    PaymentRequestLine,
    StatusTotal,
)
from .repository import PaymentRepository

_COLUMNS = """
    pr.payment_request_id, pr.uuid, pr.request_id, pr.user_id, pr.project_id,
    pr.request_date, pr.total_amount, pr.status, pr.version, pr.notes,
    pr.decided_by, pr.decided_at, pr.rejection_reason, pr.created_at, pr.updated_at
"""


def _to_request(r: dict) -> PaymentRequest:
    return PaymentRequest(
        payment_request_id=int(r["payment_request_id"]),
        uuid=str(r["uuid"]),
        request_id=r["request_id"],
        user_id=int(r["user_id"]),
        project_id=int(r["project_id"]),
        request_date=r["request_date"],
        total_amount=to_money(r["total_amount"]),
        status=PaymentStatus(r["status"]),
        version=int(r["version"]),
        notes=r.get("notes"),
        decided_by=int(r["decided_by"]) if r.get("decided_by") is not None else None,
        decided_at=r.get("decided_at"),
        rejection_reason=r.get("rejection_reason"),
        created_at=r.get("created_at"),
        updated_at=r.get("updated_at"),
    )


def payment_filter_clause(filters: PaymentFilters) -> tuple[str, list[object]]:
    """WHERE clause shared by listing, counting and statistics."""

    clauses: list[str] = []
    params: list[object] = []

    if filters.user_id is not None:
        clauses.append("pr.user_id=%s")
        params.append(int(filters.user_id))
    if filters.project_id is not None:
        clauses.append("pr.project_id=%s")
        params.append(int(filters.project_id))
    if filters.status is not None:
        clauses.append("pr.status=%s")
        params.append(filters.status.value)
    if filters.start_date is not None:
        clauses.append("pr.request_date>=%s")
        params.append(filters.start_date)
    if filters.end_date is not None:
        clauses.append("pr.request_date<=%s")
        params.append(filters.end_date)

    return build_where(clauses), params


class MySQLPaymentRepository(PaymentRepository):
    def __init__(self, db: Gateway):
        self._db = db

    def get_by_request_id(self, request_id: str) -> Optional[PaymentRequest]:
        r = self._db.execute(
            f"SELECT {_COLUMNS} FROM payment_requests pr WHERE pr.request_id=%s",
            (str(request_id),),
        ).first()
        return _to_request(r) if r else None

    def get_lines(self, payment_request_id: int) -> Sequence[PaymentRequestLine]:
        rows = self._db.execute(
            """
            SELECT l.line_id, l.payment_request_id, l.worker_id, l.days_worked,
                   l.allowance_per_day, l.line_total,
                   w.fullname AS worker_name, w.position
            FROM payment_request_lines l
            JOIN workers w ON w.worker_id = l.worker_id
            WHERE l.payment_request_id=%s
            ORDER BY l.line_id ASC
            """,
            (int(payment_request_id),),
        ).rows
        return [
            PaymentRequestLine(
                line_id=int(r["line_id"]),
                payment_request_id=int(r["payment_request_id"]),
                worker_id=int(r["worker_id"]),
                days_worked=int(r["days_worked"]),
                allowance_per_day=to_money(r["allowance_per_day"]),
                line_total=to_money(r["line_total"]),
                worker_name=r.get("worker_name"),
                position=r.get("position"),
            )
            for r in rows
        ]

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
        def _insert(tx: Executor) -> int:
            result = tx.execute(
                """
                INSERT INTO payment_requests(
                    uuid, request_id, user_id, project_id, request_date, total_amount, notes, status, version
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,1)
                """,
                (
                    uuid,
                    request_id,
                    int(user_id),
                    int(project_id),
                    request_date,
                    to_money(total_amount),
                    notes,
                    PaymentStatus.PENDING.value,
                ),
            )
            payment_request_id = int(result.last_row_id or 0)

            for line, line_total in lines:
                tx.execute(
                    """
                    INSERT INTO payment_request_lines(
                        payment_request_id, worker_id, days_worked, allowance_per_day, line_total
                    )
                    VALUES(%s,%s,%s,%s,%s)
                    """,
                    (
                        payment_request_id,
                        int(line.worker_id),
                        int(line.days_worked),
                        to_money(line.allowance_per_day),
                        to_money(line_total),
                    ),
                )
            return payment_request_id

        return self._db.run_atomic(_insert)

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
        sets = ["status=%s", "version=version+1"]
        params: list[object] = [to_status.value]
        if decided_by is not None:
            sets.extend(["decided_by=%s", "decided_at=NOW()"])
            params.append(int(decided_by))
        if rejection_reason is not None:
            sets.append("rejection_reason=%s")
            params.append(rejection_reason)

        result = self._db.execute(
            f"""
            UPDATE payment_requests
            SET {", ".join(sets)}
            WHERE payment_request_id=%s AND status=%s AND version=%s
            """,
            tuple(params + [int(payment_request_id), from_status.value, int(expected_version)]),
        )
        return result.row_count > 0

    def mark_processed(self, requests: Sequence[PaymentRequest]) -> None:
        def _flip(tx: Executor) -> None:
            for req in requests:
                result = tx.execute(
                    """
                    UPDATE payment_requests
                    SET status=%s, version=version+1
                    WHERE payment_request_id=%s AND status=%s AND version=%s
                    """,
                    (
                        PaymentStatus.PROCESSED.value,
                        int(req.payment_request_id),
                        PaymentStatus.APPROVED.value,
                        int(req.version),
                    ),
                )
                if result.row_count == 0:
                    # Raising rolls back every flip already made in this batch.
                    raise ConflictError(
                        f"Payment request {req.request_id} was modified concurrently; retry the batch",
                        retryable=True,
                    )

        self._db.run_atomic(_flip)

    def delete_pending(self, *, payment_request_id: int, expected_version: int) -> bool:
        # Lines go with the request through ON DELETE CASCADE.
        result = self._db.execute(
            """
            DELETE FROM payment_requests
            WHERE payment_request_id=%s AND status=%s AND version=%s
            """,
            (int(payment_request_id), PaymentStatus.PENDING.value, int(expected_version)),
        )
        return result.row_count > 0

    def list_rows(self, filters: PaymentFilters, *, limit: int, offset: int) -> Sequence[PaymentListRow]:
        where, params = payment_filter_clause(filters)
        rows = self._db.execute(
            f"""
            SELECT {_COLUMNS},
                   p.name AS project_name,
                   u.full_name AS requester_name,
                   d.full_name AS decider_name
            FROM payment_requests pr
            JOIN projects p ON p.project_id = pr.project_id
            JOIN users u ON u.user_id = pr.user_id
            LEFT JOIN users d ON d.user_id = pr.decided_by
            WHERE {where}
            ORDER BY pr.created_at DESC, pr.payment_request_id DESC
            LIMIT %s OFFSET %s
            """,
            tuple(params + [int(limit), int(offset)]),
        ).rows
        return [
            PaymentListRow(
                request=_to_request(r),
                project_name=r["project_name"],
                requester_name=r["requester_name"],
                decider_name=r.get("decider_name"),
            )
            for r in rows
        ]

    def count(self, filters: PaymentFilters) -> int:
        where, params = payment_filter_clause(filters)
        r = self._db.execute(
            f"SELECT COUNT(*) AS n FROM payment_requests pr WHERE {where}",
            tuple(params),
        ).first()
        return int(r["n"]) if r else 0

    def status_totals(self, filters: PaymentFilters) -> Mapping[PaymentStatus, StatusTotal]:
        where, params = payment_filter_clause(filters)
        rows = self._db.execute(
            f"""
            SELECT pr.status, COUNT(*) AS n, COALESCE(SUM(pr.total_amount), 0) AS amount
            FROM payment_requests pr
            WHERE {where}
            GROUP BY pr.status
            """,
            tuple(params),
        ).rows
        totals = {s: StatusTotal() for s in PaymentStatus}
        for r in rows:
            totals[PaymentStatus(r["status"])] = StatusTotal(count=int(r["n"]), amount=to_money(r["amount"]))
        return totals
