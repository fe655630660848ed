from __future__ import annotations

import math
from typing import Optional, Sequence

import numpy as np

from ..core.constants import DESCRIPTOR_LENGTH

# Larger than any real threshold; never selected as a match.
UNBOUNDED = math.inf


def euclidean_distance(a: Optional[Sequence[float]], b: Optional[Sequence[float]]) -> float:
    """Euclidean distance between two face descriptors.

    Total: a missing input, a length other than DESCRIPTOR_LENGTH or a
    non-numeric component yields UNBOUNDED instead of raising.
    """
    if a is None or b is None:
        return UNBOUNDED
    try:
        va = np.asarray(a, dtype=np.float64)
        vb = np.asarray(b, dtype=np.float64)
    except (TypeError, ValueError):
        return UNBOUNDED
    if va.shape != (DESCRIPTOR_LENGTH,) or vb.shape != (DESCRIPTOR_LENGTH,):
        return UNBOUNDED

    dist = float(np.sqrt(np.sum((va - vb) ** 2)))
    return dist if math.isfinite(dist) else UNBOUNDED
