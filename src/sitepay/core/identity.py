from __future__ import annotations

from dataclasses import dataclass

from .enums import Role


@dataclass(frozen=True)
class Identity:
    """Authenticated caller.

    ``id`` is the owning-account scope for every ownership check. Credentials
    are issued and verified elsewhere.
    """

    id: int
    role: Role = Role.USER
