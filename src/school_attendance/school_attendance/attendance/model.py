from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

from ..core.enums import AttendanceStatus


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one attendance mark for a (student, date, session) key."""

    record_id: str
    student_id: str
    student_name: str
    student_class: str
    timestamp: str
    date: str
    session: str
    session_type: str
    status: AttendanceStatus
    confidence: int
    created_at: str
    metadata: dict[str, Any] = field(default_factory=dict, compare=False)

    @property
    def key(self) -> tuple[str, str, str]:
        return (self.student_id, self.date, self.session)

    def to_document(self) -> dict:
        doc = {
            "id": self.record_id,
            "studentId": self.student_id,
            "studentName": self.student_name,
            "studentClass": self.student_class,
            "timestamp": self.timestamp,
            "date": self.date,
            "session": self.session,
            "sessionType": self.session_type,
            "status": self.status.value,
            "confidence": self.confidence,
            "createdAt": self.created_at,
        }
        if self.metadata:
            doc["metadata"] = dict(self.metadata)
        return doc

    @classmethod
    def from_document(cls, doc: dict) -> "AttendanceRecord":
        return cls(
            record_id=str(doc["id"]),
            student_id=str(doc["studentId"]),
            student_name=doc.get("studentName") or "",
            student_class=str(doc.get("studentClass") or ""),
            timestamp=doc.get("timestamp") or "",
            date=doc["date"],
            session=doc["session"],
            session_type=doc.get("sessionType") or "",
            status=AttendanceStatus(doc.get("status") or AttendanceStatus.PRESENT.value),
            confidence=int(doc.get("confidence") or 0),
            created_at=doc.get("createdAt") or "",
            metadata=dict(doc.get("metadata") or {}),
        )


@dataclass(frozen=True)
class AttendanceMarkResult:
    """What the attendance endpoint reports back for one scan."""

    recognized: bool
    already_marked: bool = False
    record: Optional[AttendanceRecord] = None
    confidence: int = 0
    distance: Optional[float] = None

    def to_response(self) -> dict:
        if not self.recognized or self.record is None:
            return {
                "success": False,
                "recognized": False,
                "message": "Face not recognized",
                "confidence": 0,
            }
        return {
            "success": True,
            "recognized": True,
            "alreadyMarked": self.already_marked,
            "message": "Attendance already marked" if self.already_marked else "Attendance marked successfully",
            "studentName": self.record.student_name,
            "studentId": self.record.student_id,
            "session": self.record.session,
            "timestamp": self.record.timestamp,
            "confidence": self.confidence,
        }
