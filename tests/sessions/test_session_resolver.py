from __future__ import annotations

from datetime import datetime, time

import pytest

from src.school_attendance.school_attendance.core.enums import SessionType
from src.school_attendance.school_attendance.sessions.model import SlotBoundaries, TimeSlot
from src.school_attendance.school_attendance.sessions.resolver import NO_SESSION, resolve_session


@pytest.mark.parametrize(
    "hh, mm, expected",
    [
        (8, 0, SessionType.MORNING),
        (11, 59, SessionType.MORNING),
        (12, 0, SessionType.MORNING),
        (12, 30, SessionType.MEAL),
        (13, 0, SessionType.MEAL),
        (13, 1, SessionType.AFTERNOON),
        (17, 0, SessionType.AFTERNOON),
        (23, 0, SessionType.NONE),
        (7, 59, SessionType.NONE),
    ],
)
def test_default_slots_partition_the_day(hh, mm, expected):
    assert resolve_session(time(hh, mm)).type == expected


def test_seconds_are_truncated_to_the_minute():
    session = resolve_session(datetime(2026, 3, 2, 17, 0, 59))
    assert session.type == SessionType.AFTERNOON
    assert session.name == "Afternoon Session"
    assert session.active is True


def test_no_active_session_outside_all_slots():
    session = resolve_session(time(17, 1))
    assert session == NO_SESSION
    assert session.to_dict() == {"type": "none", "name": "No Active Session", "active": False}


def test_custom_boundaries_are_honored():
    slots = SlotBoundaries(
        morning=TimeSlot(SessionType.MORNING, "Morning Session", time(7, 30), time(11, 30)),
        meal=TimeSlot(SessionType.MEAL, "Mid-Day Meal", time(11, 30), time(12, 15)),
        afternoon=TimeSlot(SessionType.AFTERNOON, "Afternoon Session", time(12, 15), time(16, 0)),
    )
    assert resolve_session(time(7, 45), slots).type == SessionType.MORNING
    assert resolve_session(time(12, 0), slots).type == SessionType.MEAL
    assert resolve_session(time(16, 30), slots).type == SessionType.NONE
