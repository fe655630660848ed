from __future__ import annotations

import logging
from typing import Callable, Optional

from ..common.datetime_utils import now_local, parse_iso_date, round_half_up
from ..common.locks import KeyedLock
from ..core.constants import DEFAULT_RECENT_LIMIT
from ..core.exceptions import PersistenceError, StudentNotFoundError, ValidationError
from ..students.repository import StudentRepository
from .ledger import mark_meal, meal_date
from .model import MealMarkResult
from .repository import MealRepository

logger = logging.getLogger(__name__)


class MealService:
    """Use case: record meal distribution, one meal per student per day."""

    def __init__(
        self,
        meals: MealRepository,
        students: StudentRepository,
        *,
        locks: Optional[KeyedLock] = None,
        clock: Callable = now_local,
    ):
        self._meals = meals
        self._students = students
        self._locks = locks or KeyedLock()
        self._clock = clock

    def mark(self, payload: dict, *, metadata: Optional[dict] = None) -> MealMarkResult:
        if not isinstance(payload, dict):
            raise ValidationError("Request body must be a JSON object")
        student_id = payload.get("studentId")
        timestamp = payload.get("timestamp")
        if not isinstance(student_id, str) or not student_id or not isinstance(timestamp, str) or not timestamp:
            raise ValidationError("Student ID and timestamp are required")

        day = meal_date(timestamp)
        try:
            parse_iso_date(day)
        except ValueError:
            raise ValidationError("timestamp must be an ISO-8601 timestamp") from None

        logger.info("Meal marking request: %s at %s", student_id, timestamp)
        student = self._students.get_by_student_id(student_id)

        with self._locks.hold(("meal", student_id, day)):
            existing = self._meals.list_for_student_on_date(student_id, day)
            outcome = mark_meal(student, timestamp, existing, metadata=metadata)
            if outcome.rejected:
                logger.warning("Meal rejected for %s: %s", student_id, outcome.reason)
                raise StudentNotFoundError(outcome.reason)

            record = outcome.record
            created = outcome.created
            if created and not self._meals.insert_if_absent(record):
                stored = self._meals.get_by_key(student_id, day)
                if stored is None:
                    raise PersistenceError("Meal insert conflicted but no record was found")
                record, created = stored, False

        if created:
            logger.info("Meal marked: %s (%s) - %s", student.name, student_id, day)
        else:
            logger.info("Meal already marked for %s on %s", student.name, day)

        return MealMarkResult(record=record, already_marked=not created, student_summary=student.summary())

    def stats(self, date: Optional[str] = None) -> dict:
        target = date or self._clock().date().isoformat()
        try:
            parse_iso_date(target)
        except ValueError:
            raise ValidationError("date must be YYYY-MM-DD") from None

        total_students = self._students.count_active()
        served = self._meals.count_for_date(target)
        return {
            "date": target,
            "totalStudents": total_students,
            "mealsServedToday": served,
            "mealsRemaining": max(0, total_students - served),
            "mealRate": round_half_up(served / total_students * 100) if total_students else 0,
            "totalMealsServedAllTime": self._meals.count_all(),
        }

    def recent(self, limit: int = DEFAULT_RECENT_LIMIT) -> list[dict]:
        return [
            {
                "id": m.record_id,
                "studentName": m.student_name,
                "studentId": m.student_id,
                "studentClass": m.student_class,
                "timestamp": m.timestamp,
                "date": m.date,
                "status": m.status.value,
            }
            for m in self._meals.list_recent(limit)
        ]
