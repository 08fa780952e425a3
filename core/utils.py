"""General numeric utilities."""

from __future__ import annotations

import math
from typing import Any


def round_half_up(value: float, digits: int = 0) -> float:
    """Round ``value`` to ``digits`` decimals with halves going toward +inf.

    ``round`` resolves exact halves to even; reference figures round
    ``0.125`` to ``0.13`` and ``-0.125`` to ``-0.12``.
    """

    if not math.isfinite(value):
        return value
    factor = 10**digits
    return math.floor(value * factor + 0.5) / factor


def round2(value: float) -> float:
    """Round ``value`` to two decimals, passing infinities through."""

    return round_half_up(value, 2)


def round4(value: float) -> float:
    return round_half_up(value, 4)


def to_float(value: Any, default: float = 0.0) -> float:
    """Coerce ``value`` into a finite float or return ``default``."""
    if value is None:
        return default
    try:
        num = float(value)
    except (TypeError, ValueError):
        return default
    if not math.isfinite(num):
        return default
    return num
