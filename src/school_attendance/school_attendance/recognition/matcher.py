from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Optional, Sequence

from ..common.datetime_utils import round_half_up
from ..students.model import Student
from .distance import UNBOUNDED, euclidean_distance

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MatchResult:
    student: Student
    distance: float
    confidence: int


def confidence_from_distance(distance: float) -> int:
    """Convenience score shown to users; not part of the matching decision."""
    return max(0, round_half_up((1 - distance) * 100))


def find_best_match(
    probe: Sequence[float],
    candidates: Iterable[Student],
    threshold: float,
) -> Optional[MatchResult]:
    """Return the closest active student strictly under ``threshold``.

    Every reference descriptor of every active student is compared. A pair only
    replaces the current best when strictly closer, so ties keep the first one
    seen in ``candidates`` order.
    """
    best_student: Optional[Student] = None
    best_distance = UNBOUNDED
    compared = 0

    for student in candidates:
        if not student.is_active or not student.descriptors:
            continue
        for descriptor in student.descriptors:
            compared += 1
            dist = euclidean_distance(probe, descriptor)
            if dist < threshold and dist < best_distance:
                best_distance = dist
                best_student = student

    if best_student is None:
        logger.debug("No match under threshold %.3f (%d descriptors compared)", threshold, compared)
        return None

    return MatchResult(
        student=best_student,
        distance=best_distance,
        confidence=confidence_from_distance(best_distance),
    )
