"""Rounding helpers for currency figures."""

import math


def round_half_up(value: float) -> int:
    """
    Round to the nearest whole unit, halves toward positive infinity.

    Python's round() uses banker's rounding (round(2.5) == 2); reported
    totals must round 2.5 up to 3.
    """
    return int(math.floor(value + 0.5))


def round_to(value: float, places: int = 1) -> float:
    """Round half-up to a number of decimal places."""
    factor = 10 ** places
    return math.floor(value * factor + 0.5) / factor
