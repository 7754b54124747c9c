"""Persistence gateway.

The only code that touches connections. Repositories issue parameterized
statements through ``execute`` or group several statements with
``run_atomic``; a connection is never held across logical operations.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Protocol, Sequence, TypeVar

import mysql.connector
from mysql.connector import errorcode

from ..core.exceptions import ConflictError
from .connection import DatabaseConnection
from .mysql_base import db_cursor, fetch_rows

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class QueryResult:
    rows: List[Dict[str, Any]] = field(default_factory=list)
    row_count: int = 0
    last_row_id: Optional[int] = None

    def first(self) -> Optional[Dict[str, Any]]:
        return self.rows[0] if self.rows else None


class Executor(Protocol):
    def execute(self, statement: str, params: Sequence[Any] = ()) -> QueryResult:
        raise NotImplementedError


class Gateway(Executor, Protocol):
    def run_atomic(self, fn: Callable[[Executor], T]) -> T:
        raise NotImplementedError


def _run(cur, statement: str, params: Sequence[Any]) -> QueryResult:
    try:
        cur.execute(statement, tuple(params))
    except mysql.connector.IntegrityError as exc:
        if exc.errno == errorcode.ER_DUP_ENTRY:
            logger.info("unique_violation", extra={"detail": exc.msg})
            raise ConflictError("Duplicate entry. This record already exists.") from exc
        raise

    rows = fetch_rows(cur) if cur.with_rows else []
    return QueryResult(
        rows=rows,
        row_count=int(cur.rowcount if cur.rowcount is not None else 0),
        last_row_id=int(cur.lastrowid) if cur.lastrowid else None,
    )


class Transaction:
    """Executor bound to one open connection; commit/rollback is the gateway's job."""

    def __init__(self, cur):
        self._cur = cur

    def execute(self, statement: str, params: Sequence[Any] = ()) -> QueryResult:
        return _run(self._cur, statement, params)


class MySQLGateway(Gateway):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def execute(self, statement: str, params: Sequence[Any] = ()) -> QueryResult:
        with db_cursor(self._conn_factory) as (_, cur):
            return _run(cur, statement, params)

    def run_atomic(self, fn: Callable[[Executor], T]) -> T:
        """Run ``fn`` inside one transaction: all statements commit or none do."""

        # autocommit is off: every statement on this connection belongs to
        # the same transaction until db_cursor commits or rolls back.
        with db_cursor(self._conn_factory) as (_, cur):
            return fn(Transaction(cur))
