from __future__ import annotations

import threading
from datetime import datetime

import pytest

from src.school_attendance.school_attendance.attendance.service import AttendanceService
from src.school_attendance.school_attendance.common.locks import KeyedLock
from src.school_attendance.school_attendance.core.exceptions import ValidationError
from src.school_attendance.school_attendance.settings.model import Settings
from src.school_attendance.school_attendance.storage.json_repositories import (
    JsonAttendanceRepository,
    JsonSettingsRepository,
    JsonStudentRepository,
)
from src.school_attendance.school_attendance.storage.json_store import JsonDocumentStore


class FakeStudentsRepo:
    def __init__(self, students):
        self._students = list(students)

    def list_all(self):
        return list(self._students)

    def count_active(self):
        return sum(1 for s in self._students if s.is_active)


class FakeAttendanceRepo:
    def __init__(self):
        self.records = []

    def list_for_student_on_date(self, student_id, date):
        return [r for r in self.records if r.student_id == student_id and r.date == date]

    def get_by_key(self, student_id, date, session):
        for r in self.records:
            if r.key == (student_id, date, session):
                return r
        return None

    def insert_if_absent(self, record):
        if self.get_by_key(*record.key):
            return False
        self.records.append(record)
        return True

    def list_for_date(self, date):
        return [r for r in self.records if r.date == date]

    def list_recent(self, limit):
        return sorted(self.records, key=lambda r: r.timestamp, reverse=True)[:limit]

    def count_all(self):
        return len(self.records)


class FakeSettingsRepo:
    def __init__(self, settings=None):
        self._settings = settings or Settings()

    def get(self):
        return self._settings


@pytest.fixture
def students(make_student):
    return FakeStudentsRepo(
        [
            make_student("STU001", value=0.0),
            make_student("STU002", name="Bob Tran", value=0.5),
            make_student("STU003", name="Chi Le", value=-0.5),
        ]
    )


@pytest.fixture
def service(students, fixed_now):
    return AttendanceService(FakeAttendanceRepo(), students, FakeSettingsRepo(), clock=lambda: fixed_now)


def _payload(descriptor, timestamp="2026-03-02T09:15:00.000Z", **extra):
    return {"faceDescriptor": descriptor, "timestamp": timestamp, **extra}


def test_mark_recognizes_and_uses_the_clock_session(service, make_descriptor):
    result = service.mark(_payload(make_descriptor(0.0)), metadata={"ip": "127.0.0.1"})

    assert result.recognized
    assert not result.already_marked
    assert result.confidence == 100
    assert result.record.session == "Morning Session"
    assert result.record.session_type == "morning"
    assert result.record.metadata == {"ip": "127.0.0.1"}

    body = result.to_response()
    assert body["success"] is True
    assert body["studentId"] == "STU001"
    assert body["message"] == "Attendance marked successfully"


def test_mark_is_idempotent_per_session(service, make_descriptor):
    first = service.mark(_payload(make_descriptor(0.0)))
    second = service.mark(_payload(make_descriptor(0.0), timestamp="2026-03-02T09:45:00.000Z"))

    assert second.already_marked
    assert second.record.record_id == first.record.record_id
    assert service.stats("2026-03-02")["totalAttendanceAllTime"] == 1


def test_explicit_session_overrides_the_clock(service, make_descriptor):
    result = service.mark(_payload(make_descriptor(0.5), session="Afternoon Session", sessionType="afternoon"))

    assert result.record.session == "Afternoon Session"
    assert result.record.session_type == "afternoon"


def test_unknown_face_is_not_recognized(service, make_descriptor):
    result = service.mark(_payload(make_descriptor(2.0)))

    assert not result.recognized
    assert result.to_response() == {
        "success": False,
        "recognized": False,
        "message": "Face not recognized",
        "confidence": 0,
    }


def test_clock_outside_slots_records_no_active_session(students, make_descriptor):
    service = AttendanceService(
        FakeAttendanceRepo(), students, FakeSettingsRepo(), clock=lambda: datetime(2026, 3, 2, 20, 0)
    )
    result = service.mark(_payload(make_descriptor(0.0)))
    assert result.record.session == "No Active Session"
    assert result.record.session_type == "none"


@pytest.mark.parametrize(
    "payload, message",
    [
        ({"timestamp": "2026-03-02T09:15:00.000Z"}, "Face descriptor and timestamp required"),
        ({"faceDescriptor": [0.0] * 128}, "Face descriptor and timestamp required"),
        ({"faceDescriptor": [0.0] * 127, "timestamp": "2026-03-02T09:15:00Z"}, "faceDescriptor must be an array of 128 numbers"),
        ({"faceDescriptor": [0.0] * 128, "timestamp": "yesterday"}, "timestamp must be an ISO-8601 timestamp"),
    ],
)
def test_mark_rejects_bad_input_before_matching(service, payload, message):
    with pytest.raises(ValidationError) as exc:
        service.mark(payload)
    assert str(exc.value) == message


def test_insert_conflict_reports_the_stored_record(students, fixed_now, make_descriptor):
    class LosingRaceRepo(FakeAttendanceRepo):
        # Reads see nothing, but another writer already holds the key.
        def list_for_student_on_date(self, student_id, date):
            return []

    repo = LosingRaceRepo()
    service = AttendanceService(repo, students, FakeSettingsRepo(), clock=lambda: fixed_now)
    winner = service.mark(_payload(make_descriptor(0.0))).record

    result = service.mark(_payload(make_descriptor(0.0)))

    assert result.already_marked
    assert result.record == winner
    assert len(repo.records) == 1


def test_stats_counts_distinct_students_and_sessions(service, make_descriptor):
    service.mark(_payload(make_descriptor(0.0)))
    service.mark(_payload(make_descriptor(0.0), session="Afternoon Session"))
    service.mark(_payload(make_descriptor(0.5)))

    stats = service.stats("2026-03-02")

    assert stats["totalStudents"] == 3
    assert stats["presentToday"] == 2
    assert stats["absentToday"] == 1
    assert stats["attendanceRate"] == 67
    assert stats["bySession"] == {"Morning Session": 2, "Afternoon Session": 1}


def test_stats_rejects_bad_date(service):
    with pytest.raises(ValidationError):
        service.stats("02/03/2026")


def test_concurrent_scans_over_json_store_create_one_record(tmp_path, make_student, make_descriptor, fixed_now):
    store = JsonDocumentStore(tmp_path / "db.json")
    store.initialize()
    JsonStudentRepository(store).add(make_student("STU001", value=0.0))

    # Separate lock tables: only the store-level check can stop the duplicate.
    services = [
        AttendanceService(
            JsonAttendanceRepository(store),
            JsonStudentRepository(store),
            JsonSettingsRepository(store),
            locks=KeyedLock(),
            clock=lambda: fixed_now,
        )
        for _ in range(8)
    ]
    barrier = threading.Barrier(len(services))
    results = []
    results_lock = threading.Lock()

    def scan(svc):
        barrier.wait()
        res = svc.mark(_payload(make_descriptor(0.0)))
        with results_lock:
            results.append(res)

    threads = [threading.Thread(target=scan, args=(svc,)) for svc in services]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(results) == len(services)
    assert sum(1 for r in results if not r.already_marked) == 1
    doc = store.read_all()
    assert len(doc["attendance"]) == 1
    assert doc["statistics"]["totalAttendanceMarked"] == 1
