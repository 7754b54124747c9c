from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Generic, Optional, Sequence, TypeVar

from ..core.constants import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from ..core.exceptions import ValidationError

T = TypeVar("T")


@dataclass(frozen=True)
class Pagination:
    page: int = 1
    limit: int = DEFAULT_PAGE_SIZE

    def __post_init__(self):
        if self.page < 1:
            raise ValidationError("page must be >= 1")
        if self.limit < 1:
            raise ValidationError("limit must be >= 1")

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    @classmethod
    def from_query(
        cls,
        page: Optional[Any],
        limit: Optional[Any],
        *,
        default_limit: int = DEFAULT_PAGE_SIZE,
        max_limit: int = MAX_PAGE_SIZE,
    ) -> "Pagination":
        try:
            p = int(page) if page not in (None, "") else 1
            n = int(limit) if limit not in (None, "") else int(default_limit)
        except (TypeError, ValueError):
            raise ValidationError("page and limit must be integers")
        return cls(page=p, limit=min(n, int(max_limit)))


@dataclass(frozen=True)
class Page(Generic[T]):
    items: Sequence[T]
    pagination: Pagination
    total_count: int

    @property
    def total_pages(self) -> int:
        return -(-self.total_count // self.pagination.limit)

    @property
    def has_next(self) -> bool:
        return self.pagination.page * self.pagination.limit < self.total_count

    @property
    def has_prev(self) -> bool:
        return self.pagination.page > 1

    def meta(self) -> dict:
        return {
            "currentPage": self.pagination.page,
            "totalPages": self.total_pages,
            "totalCount": self.total_count,
            "hasNext": self.has_next,
            "hasPrev": self.has_prev,
        }
