"""
Rate Normalization

Upstream records store the same rate as "10.26" or "0.1026". Every consumer
passes raw rates through normalize_rate before use and never assumes
pre-normalized input.
"""

from typing import Optional


def normalize_rate(rate: Optional[float]) -> float:
    """
    Canonicalize a rate to a fraction.

    None normalizes to 0. Values above 1 are whole percentages.
    """
    if rate is None:
        return 0.0
    if rate > 1:
        return rate / 100
    return float(rate)


def effective_net_rate(
    gross: Optional[float],
    commission: Optional[float] = None,
    stored_net: Optional[float] = None,
) -> float:
    """
    Net annual rate of a commission-bearing instrument.

    When a commission is present the net is recomputed from gross and
    commission every time. A stored net figure may be stale, so it is only
    used when no commission field exists.
    """
    if commission is not None:
        return normalize_rate(gross) - normalize_rate(commission)
    if stored_net is not None:
        return normalize_rate(stored_net)
    return normalize_rate(gross)


def monthly_compound_rate(annual: Optional[float]) -> float:
    """Monthly rate equivalent to an annual rate: (1 + r) ** (1/12) - 1."""
    return (1 + normalize_rate(annual)) ** (1 / 12) - 1


def monthly_simple_rate(annual: Optional[float]) -> float:
    """Flat monthly rate used for debt interest: r / 12."""
    return normalize_rate(annual) / 12
