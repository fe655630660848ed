from __future__ import annotations

from dataclasses import dataclass
from datetime import time

from ..core.enums import SessionType


@dataclass(frozen=True)
class TimeSlot:
    """A named wall-clock window, inclusive on both ends."""

    type: SessionType
    name: str
    start: time
    end: time

    def contains(self, moment: time) -> bool:
        return self.start <= moment <= self.end


@dataclass(frozen=True)
class SlotBoundaries:
    """Configured slots in declaration order: morning, meal, afternoon."""

    morning: TimeSlot
    meal: TimeSlot
    afternoon: TimeSlot

    def ordered(self) -> tuple[TimeSlot, ...]:
        return (self.morning, self.meal, self.afternoon)


@dataclass(frozen=True)
class ActiveSession:
    type: SessionType
    name: str
    active: bool

    def to_dict(self) -> dict:
        return {"type": self.type.value, "name": self.name, "active": self.active}


DEFAULT_SLOTS = SlotBoundaries(
    morning=TimeSlot(SessionType.MORNING, "Morning Session", time(8, 0), time(12, 0)),
    meal=TimeSlot(SessionType.MEAL, "Mid-Day Meal", time(12, 0), time(13, 0)),
    afternoon=TimeSlot(SessionType.AFTERNOON, "Afternoon Session", time(13, 0), time(17, 0)),
)
