from __future__ import annotations

from datetime import datetime

import pytest

from src.school_attendance.school_attendance.core.constants import DESCRIPTOR_LENGTH
from src.school_attendance.school_attendance.core.enums import StudentStatus
from src.school_attendance.school_attendance.students.model import Student


@pytest.fixture
def fixed_now():
    # Monday morning, inside the default "Morning Session"
    return datetime(2026, 3, 2, 9, 15, 0)


@pytest.fixture
def make_descriptor():
    def _make(value: float = 0.0, *, bump_first: float = 0.0) -> list[float]:
        desc = [float(value)] * DESCRIPTOR_LENGTH
        desc[0] += bump_first
        return desc

    return _make


@pytest.fixture
def make_student(make_descriptor):
    def _make(
        student_id: str = "STU001",
        *,
        name: str = "Alice Nguyen",
        value: float = 0.0,
        descriptors=None,
        status: StudentStatus = StudentStatus.ACTIVE,
        student_class: str = "5",
    ) -> Student:
        if descriptors is None:
            descriptors = [make_descriptor(value)]
        return Student(
            record_id=f"stu_{student_id.lower()}",
            student_id=student_id,
            name=name,
            student_class=student_class,
            parent_name="Parent Name",
            descriptors=tuple(tuple(d) for d in descriptors),
            status=status,
            face_confidence=0.9,
            registered_at="2026-03-01T08:00:00.000Z",
            created_at="2026-03-01T08:00:00.000Z",
            updated_at="2026-03-01T08:00:00.000Z",
        )

    return _make


@pytest.fixture
def app(tmp_path, monkeypatch, fixed_now):
    from src.school_attendance.school_attendance.main import create_app

    monkeypatch.setenv("APP_ENV", "testing")
    return create_app(
        {
            "DB_PATH": str(tmp_path / "database.json"),
            "LOG_DIR": None,
            "ENABLE_FACE_EXTRACTION": False,
        },
        clock=lambda: fixed_now,
    )


@pytest.fixture
def client(app):
    return app.test_client()
