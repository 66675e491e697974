"""
Shared numeric helpers for analyzers and scoring.
"""

import math


def clamp(value: float, lower: float = 0.0, upper: float = 100.0) -> float:
    """Bound value to [lower, upper]."""
    return max(lower, min(upper, value))


def round_half_up(value: float) -> int:
    """Round to the nearest integer with .5 going up (not banker's rounding)."""
    return int(math.floor(value + 0.5))


def safe_ratio(numerator: float, denominator: float, default: float = 0.0) -> float:
    """Divide, returning default when the denominator is not positive."""
    if denominator <= 0:
        return default
    return numerator / denominator
