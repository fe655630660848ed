from __future__ import annotations

from datetime import datetime, time
from typing import Union

from ..core.constants import NO_SESSION_NAME
from ..core.enums import SessionType
from .model import ActiveSession, DEFAULT_SLOTS, SlotBoundaries

NO_SESSION = ActiveSession(type=SessionType.NONE, name=NO_SESSION_NAME, active=False)


def resolve_session(now: Union[datetime, time], boundaries: SlotBoundaries = DEFAULT_SLOTS) -> ActiveSession:
    """Map a wall-clock moment to the first declared slot containing it.

    ``now`` is compared at minute resolution (``HH:MM``), so 12:00:45 still
    counts as 12:00. Boundaries are inclusive; on overlap the earlier declared
    slot wins (13:00 is "meal" with the default slots, not "afternoon").
    """
    moment = now.time() if isinstance(now, datetime) else now
    moment = moment.replace(second=0, microsecond=0, tzinfo=None)

    for slot in boundaries.ordered():
        if slot.contains(moment):
            return ActiveSession(type=slot.type, name=slot.name, active=True)
    return NO_SESSION
