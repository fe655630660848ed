from __future__ import annotations

import math
import re
from numbers import Real
from typing import Any

from ..core.constants import DESCRIPTOR_LENGTH
from ..core.exceptions import ValidationError


def matches(pattern: str, value: Any) -> bool:
    return isinstance(value, str) and re.match(pattern, value) is not None


def is_number(value: Any) -> bool:
    # bool is an int subclass, but true/false is never a descriptor component.
    if isinstance(value, bool) or not isinstance(value, Real):
        return False
    return math.isfinite(float(value))


def is_descriptor(value: Any) -> bool:
    """True for a list/tuple of exactly DESCRIPTOR_LENGTH finite numbers."""
    if not isinstance(value, (list, tuple)) or len(value) != DESCRIPTOR_LENGTH:
        return False
    return all(is_number(v) for v in value)


def require_descriptor(value: Any, field_name: str = "faceDescriptor") -> list[float]:
    if value is None:
        raise ValidationError(f"{field_name} is required")
    if not is_descriptor(value):
        raise ValidationError(f"{field_name} must be an array of {DESCRIPTOR_LENGTH} numbers")
    return [float(v) for v in value]
