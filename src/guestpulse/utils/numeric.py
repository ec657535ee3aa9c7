"""Numeric helpers shared by normalization and statistics."""

import math
from typing import Any, Optional


def round_half_up(value: float, digits: int = 0) -> float:
    """Round with halves going up, e.g. 4.5 -> 5 and 4.45 -> 4.5 at one digit."""
    scale = 10 ** digits
    return math.floor(value * scale + 0.5) / scale


def clamp(value, lo, hi):
    """Clamp value to range [lo, hi]."""
    return max(lo, min(hi, value))


def as_number(value: Any) -> Optional[float]:
    """Coerce an upstream value to float, or None when it is not numeric."""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number
