from __future__ import annotations

import uuid
from typing import Callable, Iterable, Optional

from ..common.datetime_utils import utc_now_iso
from ..common.outcome import LedgerOutcome
from ..core.enums import MealStatus
from ..students.model import Student
from .model import MealRecord

STUDENT_NOT_FOUND_OR_INACTIVE = "Student not found or inactive"


def new_meal_id() -> str:
    return f"MEAL_{uuid.uuid4().hex}"


def meal_date(timestamp: str) -> str:
    return timestamp.split("T")[0]


def mark_meal(
    student: Optional[Student],
    timestamp: str,
    existing_records: Iterable[MealRecord],
    *,
    metadata: Optional[dict] = None,
    id_factory: Callable[[], str] = new_meal_id,
    clock: Callable[[], str] = utc_now_iso,
) -> LedgerOutcome[MealRecord]:
    """At most one meal per (student, calendar date), whatever the time of day.

    The active-student precondition is checked before the duplicate lookup.
    """
    if student is None or not student.is_active:
        return LedgerOutcome.rejected_because(STUDENT_NOT_FOUND_OR_INACTIVE)

    day = meal_date(timestamp)
    for record in existing_records:
        if record.student_id == student.student_id and record.date == day:
            return LedgerOutcome.existing(record)

    return LedgerOutcome.created_with(
        MealRecord(
            record_id=id_factory(),
            student_id=student.student_id,
            student_name=student.name,
            student_class=student.student_class,
            date=day,
            timestamp=timestamp,
            status=MealStatus.SERVED,
            created_at=clock(),
            metadata=dict(metadata or {}),
        )
    )
