from __future__ import annotations

from typing import Optional

from ..core.enums import ProjectStatus
from ..database.gateway import Gateway
from .model import Project
from .repository import ProjectRepository

_COLUMNS = "project_id, user_id, name, category, start_date, end_date, status"


def _to_project(r: dict) -> Project:
    return Project(
        project_id=int(r["project_id"]),
        user_id=int(r["user_id"]),
        name=r["name"],
        category=r["category"],
        start_date=r["start_date"],
        end_date=r["end_date"],
        status=ProjectStatus(r["status"]),
    )


class MySQLProjectRepository(ProjectRepository):
    def __init__(self, db: Gateway):
        self._db = db

    def get_owned(self, project_id: int, owner_id: int) -> Optional[Project]:
        r = self._db.execute(
            f"SELECT {_COLUMNS} FROM projects WHERE project_id=%s AND user_id=%s",
            (int(project_id), int(owner_id)),
        ).first()
        return _to_project(r) if r else None
