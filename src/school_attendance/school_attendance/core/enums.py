from __future__ import annotations

from enum import Enum


class StudentStatus(str, Enum):
    """Lifecycle status of an enrolled student."""

    ACTIVE = "active"
    INACTIVE = "inactive"


class AttendanceStatus(str, Enum):
    PRESENT = "present"


class MealStatus(str, Enum):
    SERVED = "served"


class SessionType(str, Enum):
    """Named time slots, in declaration order (first declared wins on overlap)."""

    MORNING = "morning"
    MEAL = "meal"
    AFTERNOON = "afternoon"
    NONE = "none"


class LedgerStatus(str, Enum):
    """Outcome of a ledger decision for one (student, time-bucket) key."""

    CREATED = "created"
    ALREADY_EXISTS = "already_exists"
    REJECTED = "rejected"
