from __future__ import annotations

from typing import Optional, Protocol

from .model import Project


class ProjectRepository(Protocol):
    def get_owned(self, project_id: int, owner_id: int) -> Optional[Project]:
        """Return the project only if it exists and belongs to ``owner_id``."""

        raise NotImplementedError
