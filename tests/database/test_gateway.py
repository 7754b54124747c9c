from __future__ import annotations

from datetime import time, timedelta

import pytest

from sitepay.core.exceptions import ConflictError
from sitepay.database.bootstrap import iter_sql_statements
from sitepay.database.gateway import MySQLGateway
from sitepay.database.mysql_base import as_time_of_day, build_where
from tests.database.fake_mysql import FakeConnectionFactory


def test_execute_returns_rows_and_commits():
    factory = FakeConnectionFactory()
    result = MySQLGateway(factory).execute("SELECT 1 AS n")

    assert result.first() == {"n": 1}
    assert factory.connections[0].committed
    assert factory.connections[0].closed


def test_execute_reports_last_row_id():
    result = MySQLGateway(FakeConnectionFactory()).execute("INSERT INTO t VALUES(%s)", (1,))
    assert result.row_count == 1
    assert result.last_row_id == 42


def test_duplicate_key_becomes_conflict():
    factory = FakeConnectionFactory()
    with pytest.raises(ConflictError):
        MySQLGateway(factory).execute("INSERT dup")
    assert factory.connections[0].rolled_back
    assert not factory.connections[0].committed


def test_run_atomic_uses_one_connection_and_rolls_back_on_error():
    factory = FakeConnectionFactory()

    def work(tx):
        tx.execute("INSERT INTO a VALUES(1)")
        tx.execute("INSERT dup")

    with pytest.raises(ConflictError):
        MySQLGateway(factory).run_atomic(work)

    assert len(factory.connections) == 1
    conn = factory.connections[0]
    assert len(conn.statements) == 2
    assert conn.rolled_back and not conn.committed


def test_run_atomic_commits_once_on_success():
    factory = FakeConnectionFactory()
    out = MySQLGateway(factory).run_atomic(lambda tx: tx.execute("INSERT INTO a VALUES(1)").last_row_id)

    assert out == 42
    assert factory.connections[0].committed


def test_iter_sql_statements_respects_quotes():
    sql = "CREATE TABLE a (x INT);\nINSERT INTO a VALUES ('x;y');\n"
    assert list(iter_sql_statements(sql)) == ["CREATE TABLE a (x INT)", "INSERT INTO a VALUES ('x;y')"]


@pytest.mark.parametrize(
    "raw,expected",
    [
        (timedelta(hours=7, minutes=30), time(7, 30)),
        ("16:45:10", time(16, 45, 10)),
        ("08:05", time(8, 5)),
        (time(9, 0), time(9, 0)),
        (None, None),
    ],
)
def test_as_time_of_day(raw, expected):
    assert as_time_of_day(raw) == expected


def test_build_where_keeps_empty_filter_valid():
    assert build_where([]) == "1=1"
    assert build_where(["a=%s", "b=%s"]) == "1=1 AND a=%s AND b=%s"
