from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, Optional

from ..common.validators import is_descriptor, is_number
from ..core.enums import StudentStatus

logger = logging.getLogger(__name__)


def parse_status(raw: Any) -> StudentStatus:
    """Stored status; a missing one is active, an unknown one (e.g. "graduated") is inactive."""
    if not raw:
        return StudentStatus.ACTIVE
    try:
        return StudentStatus(raw)
    except ValueError:
        return StudentStatus.INACTIVE


def parse_descriptors(raw: Optional[Iterable[Any]], student_id: str) -> tuple[tuple[float, ...], ...]:
    """Keep the well-formed stored descriptors, drop the rest with a warning."""
    kept = []
    for d in raw or []:
        if is_descriptor(d):
            kept.append(tuple(float(v) for v in d))
        else:
            logger.warning("Dropping malformed face descriptor of student %s", student_id)
    return tuple(kept)


@dataclass(frozen=True)
class Student:
    """Domain entity: an enrolled student with reference face descriptors.

    Note: Plain data object (no storage access). Descriptors are kept in
    registration order, which the matcher relies on for tie-breaking.
    """

    record_id: str
    student_id: str
    name: str
    student_class: str
    parent_name: str
    descriptors: tuple[tuple[float, ...], ...]
    status: StudentStatus = StudentStatus.ACTIVE
    face_confidence: float = 0.0
    registered_at: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    metadata: dict[str, Any] = field(default_factory=dict, compare=False)

    @property
    def is_active(self) -> bool:
        return self.status == StudentStatus.ACTIVE

    def summary(self) -> dict:
        return {"name": self.name, "studentId": self.student_id, "class": self.student_class}

    def to_document(self) -> dict:
        return {
            "id": self.record_id,
            "name": self.name,
            "studentId": self.student_id,
            "class": self.student_class,
            "parentName": self.parent_name,
            "faceData": {
                "descriptors": [list(d) for d in self.descriptors],
                "confidence": self.face_confidence,
                "imageCount": len(self.descriptors),
                "registrationTimestamp": self.registered_at,
            },
            "status": self.status.value,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
            "metadata": dict(self.metadata),
        }

    @classmethod
    def from_document(cls, doc: dict) -> "Student":
        face_data = doc.get("faceData") or {}
        student_id = str(doc["studentId"])
        confidence = face_data.get("confidence")
        return cls(
            record_id=str(doc.get("id") or ""),
            student_id=student_id,
            name=doc.get("name") or "",
            student_class=str(doc.get("class") or ""),
            parent_name=doc.get("parentName") or "",
            descriptors=parse_descriptors(face_data.get("descriptors"), student_id),
            status=parse_status(doc.get("status")),
            face_confidence=float(confidence) if is_number(confidence) else 0.0,
            registered_at=face_data.get("registrationTimestamp"),
            created_at=doc.get("createdAt"),
            updated_at=doc.get("updatedAt"),
            metadata=dict(doc.get("metadata") or {}),
        )
