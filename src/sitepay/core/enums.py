from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Account role carried by the identity context."""

    USER = "user"
    ADMIN = "admin"


class AttendanceStatus(str, Enum):
    """Attendance status as stored in the database."""

    PRESENT = "Present"
    ABSENT = "Absent"
    LATE = "Late"
    HALF_DAY = "Half Day"


class PaymentStatus(str, Enum):
    """Payment request workflow state.

    Legal transitions: PENDING -> APPROVED -> PROCESSED, PENDING -> REJECTED.
    """

    PENDING = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"
    PROCESSED = "Processed"


class ProjectStatus(str, Enum):
    ACTIVE = "Active"
    COMPLETED = "Completed"
    ON_HOLD = "On Hold"
    CANCELLED = "Cancelled"
