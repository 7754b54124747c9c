from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import time, timedelta
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple

from .connection import DatabaseConnection

logger = logging.getLogger(__name__)


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True) -> Iterator[Tuple[Any, Any]]:
    """One connection, one unit of work: commit on clean exit, roll back on error."""

    conn = conn_factory.connect()
    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except Exception:
        conn.rollback()
        logger.debug("transaction_rolled_back")
        raise
    finally:
        conn.close()


def fetch_rows(cur) -> List[Dict[str, Any]]:
    return list(cur.fetchall() or [])


def as_time_of_day(value: Any) -> Optional[time]:
    """TIME columns arrive as ``timedelta`` from mysql-connector (``time`` or text elsewhere)."""

    if value is None or isinstance(value, time):
        return value
    if isinstance(value, timedelta):
        seconds = int(value.total_seconds()) % 86400
        return time(seconds // 3600, (seconds % 3600) // 60, seconds % 60)
    if isinstance(value, str):
        h, m, *rest = (int(p) for p in value.strip().split(":"))
        return time(h, m, rest[0] if rest else 0)
    raise TypeError(f"Unsupported MySQL TIME value type: {type(value)!r}")


def build_where(clauses: Sequence[str]) -> str:
    """AND-join filter clauses; ``1=1`` keeps an empty filter valid."""

    return " AND ".join(["1=1", *clauses])
