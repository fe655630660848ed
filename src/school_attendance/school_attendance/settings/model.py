from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import time
from typing import Any, Optional

from ..common.datetime_utils import parse_hhmm
from ..common.validators import is_number
from ..core.constants import (
    DEFAULT_ACADEMIC_YEAR,
    DEFAULT_RECOGNITION_THRESHOLD,
    DEFAULT_SCHOOL_NAME,
)
from ..sessions.model import DEFAULT_SLOTS, SlotBoundaries, TimeSlot

logger = logging.getLogger(__name__)

# (slot attribute, start key, end key) as stored in the settings document.
_SLOT_KEYS = (
    ("morning", "morningSessionStart", "morningSessionEnd"),
    ("meal", "mealTimeStart", "mealTimeEnd"),
    ("afternoon", "afternoonSessionStart", "afternoonSessionEnd"),
)


def _time_or_default(raw: Any, default: time, key: str) -> time:
    if not raw:
        return default
    try:
        return parse_hhmm(str(raw))
    except ValueError:
        logger.warning("Setting %s must be HH:MM, got %r; using %s", key, raw, default.strftime("%H:%M"))
        return default


@dataclass(frozen=True)
class Settings:
    """Process-wide recognition settings, passed explicitly into every call."""

    recognition_threshold: float = DEFAULT_RECOGNITION_THRESHOLD
    slots: SlotBoundaries = DEFAULT_SLOTS
    school_name: str = DEFAULT_SCHOOL_NAME
    academic_year: str = DEFAULT_ACADEMIC_YEAR

    @classmethod
    def from_document(cls, doc: Optional[dict]) -> "Settings":
        doc = doc or {}

        threshold = doc.get("recognitionThreshold")
        # A missing, zero or non-numeric threshold falls back to the default.
        if not is_number(threshold) or float(threshold) <= 0:
            threshold = DEFAULT_RECOGNITION_THRESHOLD

        slots = {}
        for attr, start_key, end_key in _SLOT_KEYS:
            default: TimeSlot = getattr(DEFAULT_SLOTS, attr)
            slots[attr] = TimeSlot(
                type=default.type,
                name=default.name,
                start=_time_or_default(doc.get(start_key), default.start, start_key),
                end=_time_or_default(doc.get(end_key), default.end, end_key),
            )

        return cls(
            recognition_threshold=float(threshold),
            slots=SlotBoundaries(**slots),
            school_name=doc.get("schoolName") or DEFAULT_SCHOOL_NAME,
            academic_year=doc.get("academicYear") or DEFAULT_ACADEMIC_YEAR,
        )

    def to_document(self) -> dict:
        doc: dict[str, Any] = {
            "schoolName": self.school_name,
            "academicYear": self.academic_year,
            "recognitionThreshold": self.recognition_threshold,
        }
        for attr, start_key, end_key in _SLOT_KEYS:
            slot: TimeSlot = getattr(self.slots, attr)
            doc[start_key] = slot.start.strftime("%H:%M")
            doc[end_key] = slot.end.strftime("%H:%M")
        return doc
