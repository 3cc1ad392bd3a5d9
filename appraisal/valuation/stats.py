"""
Statistical helpers for the Valuation Engine.

Small, deterministic implementations over plain sequences of floats.
"""

import math
from typing import Sequence


def median(values: Sequence[float]) -> float:
    """
    Median of a sequence.

    Odd count: middle element. Even count: mean of the two middle elements.
    Returns 0.0 for an empty sequence.
    """
    if not values:
        return 0.0

    ordered = sorted(values)
    n = len(ordered)

    if n % 2 == 1:
        return float(ordered[n // 2])

    mid = n // 2
    return (ordered[mid - 1] + ordered[mid]) / 2


def median_absolute_deviation(values: Sequence[float]) -> float:
    """Median of absolute deviations from the median."""
    if not values:
        return 0.0

    centre = median(values)
    return median([abs(v - centre) for v in values])


def weighted_mean(values: Sequence[float], weights: Sequence[float]) -> float:
    """Weighted arithmetic mean. Weights need not sum to 1."""
    total = sum(weights)
    if total <= 0:
        raise ValueError("weights must have a positive sum")
    return sum(v * w for v, w in zip(values, weights)) / total


def weighted_std(values: Sequence[float], weights: Sequence[float]) -> float:
    """Weighted population standard deviation around the weighted mean."""
    total = sum(weights)
    if total <= 0:
        raise ValueError("weights must have a positive sum")

    centre = weighted_mean(values, weights)
    variance = sum(w * (v - centre) ** 2 for v, w in zip(values, weights)) / total
    return math.sqrt(variance)
