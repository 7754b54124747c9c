from __future__ import annotations

from datetime import date, datetime, time
from typing import Optional

from ..core.exceptions import ValidationError


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def parse_date_field(value, field_name: str) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return parse_iso_date(str(value or "").strip())
    except ValueError:
        raise ValidationError(f"{field_name} must be a date (YYYY-MM-DD)")


def optional_date_field(value, field_name: str) -> Optional[date]:
    if value is None or value == "":
        return None
    return parse_date_field(value, field_name)


def parse_time_field(value, field_name: str) -> Optional[time]:
    """Accept HH:MM or HH:MM:SS; blank means "not recorded"."""

    if value is None:
        return None
    if isinstance(value, time):
        return value
    v = str(value).strip()
    if not v:
        return None
    for fmt in ("%H:%M:%S", "%H:%M"):
        try:
            return datetime.strptime(v, fmt).time()
        except ValueError:
            continue
    raise ValidationError(f"{field_name} must be a time (HH:MM)")
