from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from ..core.constants import MAX_RATING, MIN_RATING
from ..core.exceptions import ValidationError


def require_non_empty(value: Optional[str], field_name: str) -> str:
    if not value or not str(value).strip():
        raise ValidationError(f"{field_name} is required")
    return str(value).strip()


def require_max_length(value: Optional[str], field_name: str, max_len: int) -> Optional[str]:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError(f"{field_name} must be a string")
    if len(value) > max_len:
        raise ValidationError(f"{field_name} must be at most {max_len} characters")
    return value


def require_positive_int(value: Any, field_name: str) -> int:
    # bool is an int subclass; True must not pass as 1
    if isinstance(value, bool):
        raise ValidationError(f"{field_name} must be a positive integer")
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be a positive integer")
    if isinstance(value, float) and not value.is_integer():
        raise ValidationError(f"{field_name} must be a positive integer")
    if number <= 0:
        raise ValidationError(f"{field_name} must be a positive integer")
    return number


def optional_positive_int(value: Any, field_name: str) -> Optional[int]:
    if value is None or value == "":
        return None
    return require_positive_int(value, field_name)


def require_positive_decimal(value: Any, field_name: str) -> Decimal:
    if isinstance(value, bool) or value is None:
        raise ValidationError(f"{field_name} must be a positive number")
    try:
        # str() first so floats like 150.1 keep their printed value
        number = Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise ValidationError(f"{field_name} must be a positive number")
    if not number.is_finite() or number <= 0:
        raise ValidationError(f"{field_name} must be a positive number")
    return number


def require_rating(value: Any) -> int:
    if isinstance(value, bool):
        raise ValidationError(f"Rating must be an integer between {MIN_RATING} and {MAX_RATING}")
    try:
        rating = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"Rating must be an integer between {MIN_RATING} and {MAX_RATING}")
    if isinstance(value, float) and not value.is_integer():
        raise ValidationError(f"Rating must be an integer between {MIN_RATING} and {MAX_RATING}")
    if rating < MIN_RATING or rating > MAX_RATING:
        raise ValidationError(f"Rating must be an integer between {MIN_RATING} and {MAX_RATING}")
    return rating
