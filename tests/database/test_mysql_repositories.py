from __future__ import annotations

from datetime import date, timedelta
from decimal import Decimal

import pytest
from mysql.connector import errorcode
from mysql.connector.errors import IntegrityError

from sitepay.attendance.mysql_attendance_repository import MySQLAttendanceRepository
from sitepay.core.enums import AttendanceStatus, PaymentStatus, ProjectStatus
from sitepay.core.exceptions import ConflictError
from sitepay.database.gateway import MySQLGateway
from sitepay.payments.model import NewPaymentLine, PaymentRequest
from sitepay.payments.mysql_payment_repository import MySQLPaymentRepository
from sitepay.projects.mysql_project_repository import MySQLProjectRepository
from sitepay.workers.mysql_worker_repository import MySQLWorkerRepository
from tests.database.fake_mysql import FakeConnectionFactory

DAY = date(2026, 3, 2)

REQUEST_INSERT = "INSERT INTO payment_requests("
LINE_INSERT = "INSERT INTO payment_request_lines("


@pytest.fixture
def factory():
    return FakeConnectionFactory()


def _only_connection(factory):
    assert len(factory.connections) == 1
    return factory.connections[0]


def _lines():
    return [
        (NewPaymentLine(worker_id=1, days_worked=20, allowance_per_day=Decimal("150.00")), Decimal("3000.00")),
        (NewPaymentLine(worker_id=2, days_worked=18, allowance_per_day=Decimal("120")), Decimal("2160.00")),
    ]


def _create(repo):
    return repo.create_with_lines(
        uuid="0b8e6c1e-0000-4000-8000-000000000001",
        request_id="PAY-1",
        user_id=1,
        project_id=10,
        request_date=date(2026, 3, 31),
        total_amount=Decimal("5160"),
        notes=None,
        lines=_lines(),
    )


def _approved(payment_request_id, request_id, version=2):
    return PaymentRequest(
        payment_request_id=payment_request_id,
        uuid=f"uuid-{payment_request_id}",
        request_id=request_id,
        user_id=1,
        project_id=10,
        request_date=date(2026, 3, 31),
        total_amount=Decimal("100.00"),
        status=PaymentStatus.APPROVED,
        version=version,
    )


def _attendance_row(attendance_id):
    return {
        "attendance_id": attendance_id,
        "user_id": 1,
        "worker_id": 1,
        "project_id": 10,
        "work_date": DAY,
        "check_in": timedelta(hours=7, minutes=30),
        "check_out": None,
        "status": "Late",
        "rating": 5,
        "comments": None,
        "created_at": None,
        "updated_at": None,
    }


def test_create_with_lines_writes_header_and_lines_in_one_transaction(factory):
    factory.script(REQUEST_INSERT, rowcount=1, lastrowid=7)
    repo = MySQLPaymentRepository(MySQLGateway(factory))

    assert _create(repo) == 7

    conn = _only_connection(factory)
    assert conn.committed and not conn.rolled_back
    assert len(conn.statements) == 3
    header, first, second = conn.statements
    assert REQUEST_INSERT in header[0]
    assert header[1][1] == "PAY-1"
    assert header[1][-1] == PaymentStatus.PENDING.value
    assert LINE_INSERT in first[0] and LINE_INSERT in second[0]
    assert first[1] == (7, 1, 20, Decimal("150.00"), Decimal("3000.00"))
    assert second[1] == (7, 2, 18, Decimal("120.00"), Decimal("2160.00"))


@pytest.mark.parametrize(
    "error,expected",
    [
        (IntegrityError(msg="Cannot add or update a child row", errno=errorcode.ER_NO_REFERENCED_ROW_2), IntegrityError),
        (IntegrityError(msg="Duplicate entry '7-2'", errno=errorcode.ER_DUP_ENTRY), ConflictError),
    ],
)
def test_create_with_lines_rolls_back_when_a_line_fails(factory, error, expected):
    factory.script(REQUEST_INSERT, rowcount=1, lastrowid=7)
    factory.script(LINE_INSERT, rowcount=1, lastrowid=1)
    factory.script(LINE_INSERT, error=error)
    repo = MySQLPaymentRepository(MySQLGateway(factory))

    with pytest.raises(expected):
        _create(repo)

    conn = _only_connection(factory)
    assert len(conn.statements) == 3
    assert conn.rolled_back and not conn.committed
    assert conn.closed


def test_mark_processed_flips_every_request_in_one_transaction(factory):
    repo = MySQLPaymentRepository(MySQLGateway(factory))

    repo.mark_processed([_approved(1, "PAY-A"), _approved(2, "PAY-B", version=3)])

    conn = _only_connection(factory)
    assert conn.committed
    assert [params for _, params in conn.statements] == [
        ("Processed", 1, "Approved", 2),
        ("Processed", 2, "Approved", 3),
    ]
    assert all("version=version+1" in sql for sql, _ in conn.statements)


def test_mark_processed_rolls_back_batch_when_one_update_misses(factory):
    factory.script("UPDATE payment_requests", rowcount=1)
    factory.script("UPDATE payment_requests", rowcount=0)
    repo = MySQLPaymentRepository(MySQLGateway(factory))

    with pytest.raises(ConflictError) as excinfo:
        repo.mark_processed([_approved(1, "PAY-A"), _approved(2, "PAY-B"), _approved(3, "PAY-C")])

    assert excinfo.value.retryable is True
    assert "PAY-B" in excinfo.value.message
    conn = _only_connection(factory)
    # stops at the miss; PAY-C is never attempted
    assert len(conn.statements) == 2
    assert conn.rolled_back and not conn.committed


def test_transition_reports_a_missed_version(factory):
    factory.script("UPDATE payment_requests", rowcount=0)
    repo = MySQLPaymentRepository(MySQLGateway(factory))

    moved = repo.transition(
        payment_request_id=4,
        from_status=PaymentStatus.PENDING,
        expected_version=1,
        to_status=PaymentStatus.APPROVED,
        decided_by=1,
    )

    assert moved is False
    sql, params = _only_connection(factory).statements[0]
    assert "decided_at=NOW()" in sql
    assert params == ("Approved", 1, 4, "Pending", 1)


def test_upsert_rating_insert_returns_new_id(factory):
    factory.script("ON DUPLICATE KEY UPDATE", rowcount=1, lastrowid=55)
    repo = MySQLAttendanceRepository(MySQLGateway(factory))

    new_id = repo.upsert_rating(
        user_id=1, worker_id=1, project_id=10, work_date=DAY, status=AttendanceStatus.PRESENT, rating=4
    )

    assert new_id == 55
    conn = _only_connection(factory)
    assert len(conn.statements) == 1
    assert conn.statements[0][1] == (1, 1, 10, DAY, "Present", 4, None)
    assert conn.committed


# ODKU rowcount: 2 when the existing row changed, 0 when it already held these values
@pytest.mark.parametrize("rowcount", [2, 0])
def test_upsert_rating_on_existing_row_reads_back_its_id(factory, rowcount):
    factory.script("ON DUPLICATE KEY UPDATE", rowcount=rowcount, lastrowid=0)
    factory.script("a.worker_id=%s AND a.project_id=%s AND a.work_date=%s", rows=[_attendance_row(9)])
    repo = MySQLAttendanceRepository(MySQLGateway(factory))

    found = repo.upsert_rating(
        user_id=1, worker_id=1, project_id=10, work_date=DAY, status=AttendanceStatus.LATE, rating=5
    )

    assert found == 9
    conn = _only_connection(factory)
    assert len(conn.statements) == 2
    assert conn.statements[1][1] == (1, 10, DAY)
    assert conn.committed


def test_update_fields_locks_row_then_updates(factory):
    factory.script("FOR UPDATE", rows=[{"attendance_id": 5}])
    repo = MySQLAttendanceRepository(MySQLGateway(factory))

    changed = repo.update_fields(5, {"status": AttendanceStatus.HALF_DAY, "comments": "Left at noon"})

    assert changed is True
    conn = _only_connection(factory)
    lock, update = conn.statements
    assert lock == ("SELECT attendance_id FROM attendance_records WHERE attendance_id=%s FOR UPDATE", (5,))
    assert update == (
        "UPDATE attendance_records SET comments=%s, status=%s WHERE attendance_id=%s",
        ("Left at noon", "Half Day", 5),
    )
    assert conn.committed


def test_update_fields_identical_values_still_count_as_found(factory):
    factory.script("FOR UPDATE", rows=[{"attendance_id": 5}])
    factory.script("UPDATE attendance_records", rowcount=0)
    repo = MySQLAttendanceRepository(MySQLGateway(factory))

    assert repo.update_fields(5, {"rating": 4}) is True


def test_update_fields_missing_row_skips_update(factory):
    factory.script("FOR UPDATE", rows=[])
    repo = MySQLAttendanceRepository(MySQLGateway(factory))

    assert repo.update_fields(404, {"rating": 3}) is False
    assert len(_only_connection(factory).statements) == 1


def test_update_fields_rejects_unknown_columns_before_connecting(factory):
    repo = MySQLAttendanceRepository(MySQLGateway(factory))

    with pytest.raises(ValueError):
        repo.update_fields(5, {"user_id": 2})
    assert factory.connections == []


def test_worker_get_owned_scopes_by_owner(factory):
    factory.script(
        "FROM workers",
        rows=[
            {
                "worker_id": 1,
                "user_id": 1,
                "fullname": "Nguyen Van A",
                "position": "Mason",
                "salary": Decimal("9000000.00"),
                "card_id": None,
                "is_active": 1,
            }
        ],
    )
    factory.script("FROM workers", rows=[])
    repo = MySQLWorkerRepository(MySQLGateway(factory))

    worker = repo.get_owned(1, 1)
    assert worker.fullname == "Nguyen Van A"
    assert worker.is_active is True
    assert repo.get_owned(1, 2) is None

    assert [params for conn in factory.connections for _, params in conn.statements] == [(1, 1), (1, 2)]
    assert all("WHERE worker_id=%s AND user_id=%s" in sql for conn in factory.connections for sql, _ in conn.statements)


def test_project_get_owned_scopes_by_owner(factory):
    factory.script(
        "FROM projects",
        rows=[
            {
                "project_id": 10,
                "user_id": 1,
                "name": "Riverside Villa",
                "category": "Residential",
                "start_date": date(2026, 1, 5),
                "end_date": None,
                "status": "Active",
            }
        ],
    )
    factory.script("FROM projects", rows=[])
    repo = MySQLProjectRepository(MySQLGateway(factory))

    project = repo.get_owned(10, 1)
    assert project.name == "Riverside Villa"
    assert project.status == ProjectStatus.ACTIVE
    assert repo.get_owned(10, 2) is None

    sql, params = factory.connections[0].statements[0]
    assert "WHERE project_id=%s AND user_id=%s" in sql
    assert params == (10, 1)
    assert factory.connections[1].statements[0][1] == (10, 2)
