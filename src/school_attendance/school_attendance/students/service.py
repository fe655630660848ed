from __future__ import annotations

import logging
import uuid
from typing import Any, Optional

from ..common.datetime_utils import utc_now_iso
from ..common.locks import KeyedLock
from ..common.validators import is_descriptor, is_number, matches
from ..core.constants import (
    ALLOWED_CLASSES,
    DESCRIPTOR_LENGTH,
    MIN_NAME_LENGTH,
    STUDENT_ID_PATTERN,
)
from ..core.enums import StudentStatus
from ..core.exceptions import DuplicateStudentError, StudentNotFoundError, ValidationError
from .model import Student
from .repository import StudentRepository

logger = logging.getLogger(__name__)


def validate_registration(data: Any) -> list[str]:
    """Collect every registration problem instead of stopping at the first one."""
    if not isinstance(data, dict):
        return ["Request body must be a JSON object."]

    errors: list[str] = []
    name = data.get("name")
    student_id = data.get("studentId")
    student_class = data.get("class")
    parent_name = data.get("parentName")
    face_data = data.get("faceData")

    if not isinstance(name, str) or len(name.strip()) < MIN_NAME_LENGTH:
        errors.append(f"Name must be at least {MIN_NAME_LENGTH} characters.")
    if not isinstance(student_id, str) or not matches(STUDENT_ID_PATTERN, student_id.strip()):
        errors.append("Student ID must be 3-10 alphanumeric.")
    if student_class is None or isinstance(student_class, bool) or str(student_class) not in ALLOWED_CLASSES:
        errors.append("Class must be between 1 and 10.")
    if not isinstance(parent_name, str) or len(parent_name.strip()) < MIN_NAME_LENGTH:
        errors.append(f"Parent/Guardian name must be at least {MIN_NAME_LENGTH} characters.")

    descriptors = face_data.get("descriptors") if isinstance(face_data, dict) else None
    if not isinstance(descriptors, list) or not descriptors:
        errors.append("Face descriptors are required.")
    else:
        for i, descriptor in enumerate(descriptors):
            if not is_descriptor(descriptor):
                errors.append(f"Descriptor {i + 1} must be an array of {DESCRIPTOR_LENGTH} numbers.")
                break

    return errors


class StudentService:
    """Use case: enroll students and look them up."""

    def __init__(self, students: StudentRepository, *, locks: Optional[KeyedLock] = None):
        self._students = students
        self._locks = locks or KeyedLock()

    def exists(self, student_id: str) -> bool:
        if not isinstance(student_id, str) or not student_id.strip():
            raise ValidationError("Student ID is required.")
        return self._students.find_active_by_student_id_ci(student_id.strip()) is not None

    def register(self, data: dict, *, metadata: Optional[dict] = None) -> Student:
        errors = validate_registration(data)
        if errors:
            raise ValidationError("Validation failed", errors=errors)

        student_id = data["studentId"].strip()
        face_data = data["faceData"]
        confidence = face_data.get("confidence")

        with self._locks.hold(("student", student_id.lower())):
            if self._students.find_active_by_student_id_ci(student_id):
                raise DuplicateStudentError("Student ID already exists.")

            now = utc_now_iso()
            student = Student(
                record_id=f"stu_{uuid.uuid4().hex[:16]}",
                student_id=student_id,
                name=data["name"].strip(),
                student_class=str(data["class"]),
                parent_name=data["parentName"].strip(),
                descriptors=tuple(tuple(float(v) for v in d) for d in face_data["descriptors"]),
                status=StudentStatus.ACTIVE,
                face_confidence=float(confidence) if is_number(confidence) else 0.0,
                registered_at=now,
                created_at=now,
                updated_at=now,
                metadata=dict(metadata or {}),
            )
            self._students.add(student)

        logger.info("Registered new student: %s (%s)", student.name, student.student_id)
        return student

    def get(self, student_id: str) -> Student:
        student = self._students.get_by_student_id(student_id)
        if not student:
            raise StudentNotFoundError(f"Student {student_id} not found")
        return student

    def list_students(self) -> list[dict]:
        return [
            {
                "id": s.record_id,
                "name": s.name,
                "studentId": s.student_id,
                "class": s.student_class,
                "parentName": s.parent_name,
                "status": s.status.value,
                "imageCount": len(s.descriptors),
                "registrationTimestamp": s.registered_at,
            }
            for s in self._students.list_all()
        ]
