from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

from ..core.enums import MealStatus


@dataclass(frozen=True)
class MealRecord:
    """Domain entity: one meal served to a student on a calendar date."""

    record_id: str
    student_id: str
    student_name: str
    student_class: str
    date: str
    timestamp: str
    status: MealStatus
    created_at: str
    metadata: dict[str, Any] = field(default_factory=dict, compare=False)

    @property
    def key(self) -> tuple[str, str]:
        return (self.student_id, self.date)

    def to_document(self) -> dict:
        return {
            "id": self.record_id,
            "studentId": self.student_id,
            "studentName": self.student_name,
            "studentClass": self.student_class,
            "date": self.date,
            "timestamp": self.timestamp,
            "status": self.status.value,
            "createdAt": self.created_at,
            "metadata": dict(self.metadata),
        }

    @classmethod
    def from_document(cls, doc: dict) -> "MealRecord":
        return cls(
            record_id=str(doc["id"]),
            student_id=str(doc["studentId"]),
            student_name=doc.get("studentName") or "",
            student_class=str(doc.get("studentClass") or ""),
            date=doc["date"],
            timestamp=doc.get("timestamp") or "",
            status=MealStatus(doc.get("status") or MealStatus.SERVED.value),
            created_at=doc.get("createdAt") or "",
            metadata=dict(doc.get("metadata") or {}),
        )


@dataclass(frozen=True)
class MealMarkResult:
    record: MealRecord
    already_marked: bool
    student_summary: dict

    def to_response(self) -> dict:
        name = self.student_summary.get("name")
        return {
            "success": True,
            "alreadyMarked": self.already_marked,
            "message": f"Meal already marked for {name} today" if self.already_marked else f"Nutritious meal served to {name}!",
            "mealRecord": self.record.to_document(),
            "student": dict(self.student_summary),
        }
