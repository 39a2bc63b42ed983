"""
Shared scoring utilities.

Small numeric helpers used by every scorer:
- `clamp`: keep values within a range for stable UI/output
- `round_half_up`: integer scores that round .5 upwards (not banker's rounding)
"""

from __future__ import annotations

import math


def clamp(x: float, low: float, high: float) -> float:
    """Clamp a number into the [low, high] range."""
    return max(float(low), min(float(high), float(x)))


def round_half_up(x: float) -> int:
    return int(math.floor(float(x) + 0.5))


def bucket_of(score: int, width: int) -> int:
    """Score bucket index, e.g. 87 -> 8 for width 10."""
    return int(score) // max(1, int(width))
