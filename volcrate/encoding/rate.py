from __future__ import annotations

import math

from ..errors import NonIntegerRateError, UsageError

MIN_RATE = 1
MAX_RATE = 32


def validate_requested_rate(rate: float) -> float:
    """Requested bits per value must lie in [MIN_RATE, MAX_RATE]."""
    value = float(rate)
    if not math.isfinite(value) or not MIN_RATE <= value <= MAX_RATE:
        raise UsageError(f"Compression rate must be in [{MIN_RATE}, {MAX_RATE}], got {rate}")
    return value


def validate_achieved_rate(requested: float, achieved: float) -> int:
    """
    Accept the codec's configured rate only if it is a whole number of bits
    per value; return it as an int.
    """
    achieved = float(achieved)
    if not math.isfinite(achieved) or math.floor(achieved) != achieved:
        raise NonIntegerRateError(requested, achieved)
    return int(achieved)


__all__ = ["MIN_RATE", "MAX_RATE", "validate_requested_rate", "validate_achieved_rate"]
