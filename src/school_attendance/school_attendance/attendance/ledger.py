from __future__ import annotations

import uuid
from typing import Callable, Iterable

from ..common.datetime_utils import date_key, utc_now_iso
from ..common.outcome import LedgerOutcome
from ..core.enums import AttendanceStatus
from ..students.model import Student
from .model import AttendanceRecord


def new_attendance_id() -> str:
    return f"att_{uuid.uuid4().hex}"


def mark_attendance(
    student: Student,
    timestamp: str,
    session: str,
    existing_records: Iterable[AttendanceRecord],
    *,
    confidence: int,
    session_type: str,
    id_factory: Callable[[], str] = new_attendance_id,
    clock: Callable[[], str] = utc_now_iso,
) -> LedgerOutcome[AttendanceRecord]:
    """Decide whether a scan creates a record or hits an existing one.

    Keyed by (student_id, date, session); the session label is compared
    exactly. A repeat scan is a normal outcome, never an error.
    """
    day = date_key(timestamp)
    for record in existing_records:
        if record.student_id == student.student_id and record.date == day and record.session == session:
            return LedgerOutcome.existing(record)

    return LedgerOutcome.created_with(
        AttendanceRecord(
            record_id=id_factory(),
            student_id=student.student_id,
            student_name=student.name,
            student_class=student.student_class,
            timestamp=timestamp,
            date=day,
            session=session,
            session_type=session_type,
            status=AttendanceStatus.PRESENT,
            confidence=confidence,
            created_at=clock(),
        )
    )
