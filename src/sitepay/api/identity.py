from __future__ import annotations

from flask import session

from ..core.enums import Role
from ..core.exceptions import AuthenticationError
from ..core.identity import Identity


def current_identity() -> Identity:
    """Identity of the caller, from the session populated at login."""

    user_id = session.get("user_id")
    if user_id in (None, ""):
        raise AuthenticationError("Authentication required")
    try:
        uid = int(user_id)
    except (TypeError, ValueError):
        raise AuthenticationError("Authentication required")

    try:
        role = Role(session.get("role") or Role.USER.value)
    except ValueError:
        role = Role.USER
    return Identity(id=uid, role=role)
