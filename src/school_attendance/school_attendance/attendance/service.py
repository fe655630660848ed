from __future__ import annotations

import logging
from collections import Counter
from dataclasses import replace
from typing import Callable, Optional

from ..common.datetime_utils import date_key, now_local, parse_iso_date, require_timestamp, round_half_up
from ..common.locks import KeyedLock
from ..common.validators import require_descriptor
from ..core.constants import DEFAULT_RECENT_LIMIT
from ..core.exceptions import PersistenceError, ValidationError
from ..recognition.matcher import find_best_match
from ..sessions.resolver import resolve_session
from ..settings.repository import SettingsRepository
from ..students.repository import StudentRepository
from .ledger import mark_attendance
from .model import AttendanceMarkResult
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


class AttendanceService:
    """Use case: recognize a face descriptor and mark attendance once per session."""

    def __init__(
        self,
        attendance: AttendanceRepository,
        students: StudentRepository,
        settings: SettingsRepository,
        *,
        locks: Optional[KeyedLock] = None,
        clock: Callable = now_local,
    ):
        self._attendance = attendance
        self._students = students
        self._settings = settings
        self._locks = locks or KeyedLock()
        self._clock = clock

    def current_session(self):
        return resolve_session(self._clock(), self._settings.get().slots)

    def mark(self, payload: dict, *, metadata: Optional[dict] = None) -> AttendanceMarkResult:
        if not isinstance(payload, dict):
            raise ValidationError("Request body must be a JSON object")
        if payload.get("faceDescriptor") is None or not payload.get("timestamp"):
            raise ValidationError("Face descriptor and timestamp required")

        probe = require_descriptor(payload.get("faceDescriptor"))
        timestamp = require_timestamp(payload.get("timestamp"))
        session_override = payload.get("session")
        type_override = payload.get("sessionType")
        if session_override is not None and not isinstance(session_override, str):
            raise ValidationError("session must be a string")
        if type_override is not None and not isinstance(type_override, str):
            raise ValidationError("sessionType must be a string")

        settings = self._settings.get()
        match = find_best_match(probe, self._students.list_all(), settings.recognition_threshold)
        if match is None:
            logger.info("Face not recognized (threshold=%.2f)", settings.recognition_threshold)
            return AttendanceMarkResult(recognized=False)

        slot = resolve_session(self._clock(), settings.slots)
        session_name = session_override or slot.name
        session_type = type_override or slot.type.value
        student = match.student
        day = date_key(timestamp)

        with self._locks.hold(("attendance", student.student_id, day, session_name)):
            existing = self._attendance.list_for_student_on_date(student.student_id, day)
            outcome = mark_attendance(
                student,
                timestamp,
                session_name,
                existing,
                confidence=match.confidence,
                session_type=session_type,
            )

            record = outcome.record
            created = outcome.created
            if created:
                if metadata:
                    record = replace(record, metadata=dict(metadata))
                if not self._attendance.insert_if_absent(record):
                    # Another writer took the key between our read and the insert.
                    stored = self._attendance.get_by_key(student.student_id, day, session_name)
                    if stored is None:
                        raise PersistenceError("Attendance insert conflicted but no record was found")
                    record, created = stored, False

        if created:
            logger.info(
                "Attendance marked - %s (%s) session=%r confidence=%d",
                student.name, student.student_id, session_name, match.confidence,
            )
        else:
            logger.info("Attendance already marked - %s (%s) session=%r", student.name, student.student_id, session_name)

        return AttendanceMarkResult(
            recognized=True,
            already_marked=not created,
            record=record,
            confidence=match.confidence,
            distance=match.distance,
        )

    def recent(self, limit: int = DEFAULT_RECENT_LIMIT) -> list[dict]:
        return [r.to_document() for r in self._attendance.list_recent(limit)]

    def stats(self, date: Optional[str] = None) -> dict:
        target = date or self._clock().date().isoformat()
        try:
            parse_iso_date(target)
        except ValueError:
            raise ValidationError("date must be YYYY-MM-DD") from None

        records = self._attendance.list_for_date(target)
        total_students = self._students.count_active()
        present = len({r.student_id for r in records})
        by_session = Counter(r.session for r in records)
        return {
            "date": target,
            "totalStudents": total_students,
            "presentToday": present,
            "absentToday": max(0, total_students - present),
            "attendanceRate": round_half_up(present / total_students * 100) if total_students else 0,
            "bySession": dict(by_session),
            "totalAttendanceAllTime": self._attendance.count_all(),
        }
