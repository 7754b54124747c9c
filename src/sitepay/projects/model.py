from __future__ import annotations

from dataclasses import dataclass
from datetime import date

from ..core.enums import ProjectStatus


@dataclass(frozen=True)
class Project:
    """Domain entity: a project owned by one account. ``status`` is informational."""

    project_id: int
    user_id: int
    name: str
    category: str
    start_date: date
    end_date: date
    status: ProjectStatus = ProjectStatus.ACTIVE
