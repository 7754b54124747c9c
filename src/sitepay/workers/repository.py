from __future__ import annotations

from typing import Optional, Protocol

from .model import Worker


class WorkerRepository(Protocol):
    def get_owned(self, worker_id: int, owner_id: int) -> Optional[Worker]:
        """Return the worker only if it exists and belongs to ``owner_id``."""

        raise NotImplementedError
