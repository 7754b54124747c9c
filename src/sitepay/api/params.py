from __future__ import annotations

from typing import Optional, Type, TypeVar

from flask import current_app, request

from ..common.datetime_utils import optional_date_field
from ..common.pagination import Pagination
from ..common.validators import optional_positive_int
from ..core.constants import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from ..core.exceptions import ValidationError

E = TypeVar("E")


def pagination_from_args() -> Pagination:
    return Pagination.from_query(
        request.args.get("page"),
        request.args.get("limit"),
        default_limit=int(current_app.config.get("DEFAULT_PAGE_SIZE", DEFAULT_PAGE_SIZE)),
        max_limit=int(current_app.config.get("MAX_PAGE_SIZE", MAX_PAGE_SIZE)),
    )


def int_arg(name: str) -> Optional[int]:
    return optional_positive_int(request.args.get(name), name)


def date_arg(name: str):
    return optional_date_field(request.args.get(name), name)


def enum_arg(name: str, enum_cls: Type[E]) -> Optional[E]:
    raw = (request.args.get(name) or "").strip()
    if not raw:
        return None
    try:
        return enum_cls(raw)
    except ValueError:
        allowed = ", ".join(m.value for m in enum_cls)
        raise ValidationError(f"{name} must be one of: {allowed}")
