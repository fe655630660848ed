from __future__ import annotations

from typing import Optional, Sequence

from ..attendance.model import AttendanceRecord
from ..attendance.repository import AttendanceRepository
from ..core.enums import StudentStatus
from ..meals.model import MealRecord
from ..meals.repository import MealRepository
from ..settings.model import Settings
from ..settings.repository import SettingsRepository
from ..students.model import Student
from ..students.repository import StudentRepository
from .json_store import JsonDocumentStore


def _bump(doc: dict, counter: str) -> None:
    stats = doc.setdefault("statistics", {})
    stats[counter] = int(stats.get(counter) or 0) + 1


class JsonStudentRepository(StudentRepository):
    def __init__(self, store: JsonDocumentStore):
        self._store = store

    def list_all(self) -> Sequence[Student]:
        return [Student.from_document(s) for s in self._store.read_all()["students"]]

    def get_by_student_id(self, student_id: str) -> Optional[Student]:
        found = None
        for s in self._store.read_all()["students"]:
            if s.get("studentId") != student_id:
                continue
            if s.get("status") == StudentStatus.ACTIVE.value:
                return Student.from_document(s)
            found = found or s
        return Student.from_document(found) if found else None

    def find_active_by_student_id_ci(self, student_id: str) -> Optional[Student]:
        wanted = student_id.lower()
        for s in self._store.read_all()["students"]:
            if str(s.get("studentId", "")).lower() == wanted and s.get("status") == StudentStatus.ACTIVE.value:
                return Student.from_document(s)
        return None

    def add(self, student: Student) -> None:
        with self._store.transaction() as doc:
            doc["students"].append(student.to_document())
            _bump(doc, "totalRegistrations")

    def count_active(self) -> int:
        return sum(1 for s in self._store.read_all()["students"] if s.get("status") == StudentStatus.ACTIVE.value)


class JsonAttendanceRepository(AttendanceRepository):
    def __init__(self, store: JsonDocumentStore):
        self._store = store

    def _records(self) -> list[AttendanceRecord]:
        return [AttendanceRecord.from_document(a) for a in self._store.read_all()["attendance"]]

    def list_for_student_on_date(self, student_id: str, date: str) -> Sequence[AttendanceRecord]:
        return [r for r in self._records() if r.student_id == student_id and r.date == date]

    def get_by_key(self, student_id: str, date: str, session: str) -> Optional[AttendanceRecord]:
        for r in self._records():
            if r.key == (student_id, date, session):
                return r
        return None

    def insert_if_absent(self, record: AttendanceRecord) -> bool:
        with self._store.locked():
            doc = self._store.read_all()
            for a in doc["attendance"]:
                if (a.get("studentId"), a.get("date"), a.get("session")) == record.key:
                    return False
            doc["attendance"].append(record.to_document())
            _bump(doc, "totalAttendanceMarked")
            self._store.save(doc)
        return True

    def list_for_date(self, date: str) -> Sequence[AttendanceRecord]:
        return [r for r in self._records() if r.date == date]

    def list_recent(self, limit: int) -> Sequence[AttendanceRecord]:
        records = sorted(self._records(), key=lambda r: r.timestamp, reverse=True)
        return records[: max(0, int(limit))]

    def count_all(self) -> int:
        return len(self._store.read_all()["attendance"])


class JsonMealRepository(MealRepository):
    def __init__(self, store: JsonDocumentStore):
        self._store = store

    def _records(self) -> list[MealRecord]:
        return [MealRecord.from_document(m) for m in self._store.read_all()["meals"]]

    def list_for_student_on_date(self, student_id: str, date: str) -> Sequence[MealRecord]:
        return [r for r in self._records() if r.key == (student_id, date)]

    def get_by_key(self, student_id: str, date: str) -> Optional[MealRecord]:
        for r in self._records():
            if r.key == (student_id, date):
                return r
        return None

    def insert_if_absent(self, record: MealRecord) -> bool:
        with self._store.locked():
            doc = self._store.read_all()
            for m in doc["meals"]:
                if (m.get("studentId"), m.get("date")) == record.key:
                    return False
            doc["meals"].append(record.to_document())
            _bump(doc, "totalMealsServed")
            self._store.save(doc)
        return True

    def count_for_date(self, date: str) -> int:
        return sum(1 for m in self._store.read_all()["meals"] if m.get("date") == date)

    def count_all(self) -> int:
        return len(self._store.read_all()["meals"])

    def list_recent(self, limit: int) -> Sequence[MealRecord]:
        records = sorted(self._records(), key=lambda r: r.timestamp, reverse=True)
        return records[: max(0, int(limit))]


class JsonSettingsRepository(SettingsRepository):
    def __init__(self, store: JsonDocumentStore):
        self._store = store

    def get(self) -> Settings:
        return Settings.from_document(self._store.read_all().get("settings"))
