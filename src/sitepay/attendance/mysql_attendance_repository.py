from __future__ import annotations

from datetime import date, time
from decimal import Decimal
from typing import Any, Mapping, Optional, Sequence

from ..core.enums import AttendanceStatus
from ..database.gateway import Executor, Gateway
from ..database.mysql_base import as_time_of_day, build_where
from .model import AttendanceFilters, AttendanceRecord, AttendanceRow
from .repository import UPDATABLE_COLUMNS, AttendanceRepository

_COLUMNS = """
    a.attendance_id, a.user_id, a.worker_id, a.project_id, a.work_date,
    a.check_in, a.check_out, a.status, a.rating, a.comments,
    a.created_at, a.updated_at
"""


def _to_record(r: dict) -> AttendanceRecord:
    return AttendanceRecord(
        attendance_id=int(r["attendance_id"]),
        user_id=int(r["user_id"]),
        worker_id=int(r["worker_id"]),
        project_id=int(r["project_id"]),
        work_date=r["work_date"],
        status=AttendanceStatus(r["status"]),
        check_in=as_time_of_day(r.get("check_in")),
        check_out=as_time_of_day(r.get("check_out")),
        rating=int(r["rating"]) if r.get("rating") is not None else None,
        comments=r.get("comments"),
        created_at=r.get("created_at"),
        updated_at=r.get("updated_at"),
    )


def _filter_clause(filters: AttendanceFilters) -> tuple[str, list[object]]:
    clauses: list[str] = []
    params: list[object] = []

    if filters.user_id is not None:
        clauses.append("a.user_id=%s")
        params.append(int(filters.user_id))
    if filters.worker_id is not None:
        clauses.append("a.worker_id=%s")
        params.append(int(filters.worker_id))
    if filters.project_id is not None:
        clauses.append("a.project_id=%s")
        params.append(int(filters.project_id))
    if filters.status is not None:
        clauses.append("a.status=%s")
        params.append(filters.status.value)
    if filters.work_date is not None:
        clauses.append("a.work_date=%s")
        params.append(filters.work_date)
    if filters.start_date is not None:
        clauses.append("a.work_date>=%s")
        params.append(filters.start_date)
    if filters.end_date is not None:
        clauses.append("a.work_date<=%s")
        params.append(filters.end_date)

    return build_where(clauses), params


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, db: Gateway):
        self._db = db

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        r = self._db.execute(
            f"SELECT {_COLUMNS} FROM attendance_records a WHERE a.attendance_id=%s",
            (int(attendance_id),),
        ).first()
        return _to_record(r) if r else None

    def get_for_tuple(self, *, worker_id: int, project_id: int, work_date: date) -> Optional[AttendanceRecord]:
        return self._get_for_tuple(self._db, worker_id=worker_id, project_id=project_id, work_date=work_date)

    @staticmethod
    def _get_for_tuple(db: Executor, *, worker_id: int, project_id: int, work_date: date) -> Optional[AttendanceRecord]:
        r = db.execute(
            f"""
            SELECT {_COLUMNS}
            FROM attendance_records a
            WHERE a.worker_id=%s AND a.project_id=%s AND a.work_date=%s
            """,
            (int(worker_id), int(project_id), work_date),
        ).first()
        return _to_record(r) if r else None

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
        result = self._db.execute(
            """
            INSERT INTO attendance_records(user_id, worker_id, project_id, work_date, check_in, check_out, status)
            VALUES(%s,%s,%s,%s,%s,%s,%s)
            """,
            (int(user_id), int(worker_id), int(project_id), work_date, check_in, check_out, status.value),
        )
        return int(result.last_row_id or 0)

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
        def _upsert(tx: Executor) -> int:
            result = tx.execute(
                """
                INSERT INTO attendance_records(user_id, worker_id, project_id, work_date, status, rating, comments)
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE status=VALUES(status), rating=VALUES(rating), comments=VALUES(comments)
                """,
                (int(user_id), int(worker_id), int(project_id), work_date, status.value, int(rating), comments),
            )
            # rowcount is 1 for a fresh insert; on update lastrowid is not the existing id.
            if result.row_count == 1 and result.last_row_id:
                return int(result.last_row_id)

            existing = self._get_for_tuple(tx, worker_id=worker_id, project_id=project_id, work_date=work_date)
            return existing.attendance_id if existing else 0

        return self._db.run_atomic(_upsert)

    def update_fields(self, attendance_id: int, changes: Mapping[str, Any]) -> bool:
        unknown = set(changes) - UPDATABLE_COLUMNS
        if unknown:
            raise ValueError(f"Columns not updatable: {sorted(unknown)}")
        if not changes:
            return False

        columns = sorted(changes)
        values = [changes[c].value if isinstance(changes[c], AttendanceStatus) else changes[c] for c in columns]
        set_clause = ", ".join(f"{c}=%s" for c in columns)

        def _update(tx: Executor) -> bool:
            # MySQL rowcount reports changed rows, so an identical value would read as 0;
            # lock and check the row exists instead.
            r = tx.execute(
                "SELECT attendance_id FROM attendance_records WHERE attendance_id=%s FOR UPDATE",
                (int(attendance_id),),
            ).first()
            if not r:
                return False
            tx.execute(
                f"UPDATE attendance_records SET {set_clause} WHERE attendance_id=%s",
                tuple(values + [int(attendance_id)]),
            )
            return True

        return self._db.run_atomic(_update)

    def delete(self, attendance_id: int) -> bool:
        result = self._db.execute(
            "DELETE FROM attendance_records WHERE attendance_id=%s",
            (int(attendance_id),),
        )
        return result.row_count > 0

    def list_rows(self, filters: AttendanceFilters, *, limit: int, offset: int) -> Sequence[AttendanceRow]:
        where, params = _filter_clause(filters)
        rows = self._db.execute(
            f"""
            SELECT {_COLUMNS},
                   w.fullname AS worker_name,
                   p.name AS project_name,
                   u.full_name AS supervisor_name
            FROM attendance_records a
            JOIN workers w ON w.worker_id = a.worker_id
            JOIN projects p ON p.project_id = a.project_id
            JOIN users u ON u.user_id = a.user_id
            WHERE {where}
            ORDER BY a.work_date DESC, a.created_at DESC, a.attendance_id DESC
            LIMIT %s OFFSET %s
            """,
            tuple(params + [int(limit), int(offset)]),
        ).rows
        return [
            AttendanceRow(
                record=_to_record(r),
                worker_name=r["worker_name"],
                project_name=r["project_name"],
                supervisor_name=r["supervisor_name"],
            )
            for r in rows
        ]

    def count(self, filters: AttendanceFilters) -> int:
        where, params = _filter_clause(filters)
        r = self._db.execute(
            f"SELECT COUNT(*) AS n FROM attendance_records a WHERE {where}",
            tuple(params),
        ).first()
        return int(r["n"]) if r else 0

    def status_counts(self, filters: AttendanceFilters) -> Mapping[AttendanceStatus, int]:
        where, params = _filter_clause(filters)
        rows = self._db.execute(
            f"""
            SELECT a.status, COUNT(*) AS n
            FROM attendance_records a
            WHERE {where}
            GROUP BY a.status
            """,
            tuple(params),
        ).rows
        counts = {s: 0 for s in AttendanceStatus}
        for r in rows:
            counts[AttendanceStatus(r["status"])] = int(r["n"])
        return counts

    def average_rating(self, filters: AttendanceFilters) -> Optional[Decimal]:
        where, params = _filter_clause(filters)
        r = self._db.execute(
            f"SELECT AVG(a.rating) AS avg_rating FROM attendance_records a WHERE {where} AND a.rating IS NOT NULL",
            tuple(params),
        ).first()
        if not r or r.get("avg_rating") is None:
            return None
        return Decimal(str(r["avg_rating"]))
