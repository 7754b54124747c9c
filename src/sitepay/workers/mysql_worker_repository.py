from __future__ import annotations

from decimal import Decimal
from typing import Optional

from ..database.gateway import Gateway
from .model import Worker
from .repository import WorkerRepository

_COLUMNS = "worker_id, user_id, fullname, position, salary, card_id, is_active"


def _to_worker(r: dict) -> Worker:
    return Worker(
        worker_id=int(r["worker_id"]),
        user_id=int(r["user_id"]),
        fullname=r["fullname"],
        position=r["position"],
        salary=Decimal(r["salary"]) if r.get("salary") is not None else None,
        card_id=r.get("card_id"),
        is_active=bool(r.get("is_active", True)),
    )


class MySQLWorkerRepository(WorkerRepository):
    def __init__(self, db: Gateway):
        self._db = db

    def get_owned(self, worker_id: int, owner_id: int) -> Optional[Worker]:
        r = self._db.execute(
            f"SELECT {_COLUMNS} FROM workers WHERE worker_id=%s AND user_id=%s",
            (int(worker_id), int(owner_id)),
        ).first()
        return _to_worker(r) if r else None
