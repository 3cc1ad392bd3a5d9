"""
Market indicators derived from surviving comparables.
"""

from typing import Optional, Sequence

from .models import AdjustedComparable, AggregateRange, MarketSummary
from .stats import median


def price_per_sqm(survivors: Sequence[AdjustedComparable]) -> Optional[float]:
    """
    Median sale price per m2 of floor area.

    Only comparables with a positive floor area contribute. Returns None
    when none do.
    """
    rates = [
        s.sale_price / s.comparable.floor_area
        for s in survivors
        if s.comparable.floor_area and s.comparable.floor_area > 0
    ]
    if not rates:
        return None
    return median(rates)


def summarise_market(
    survivors: Sequence[AdjustedComparable],
    aggregate: AggregateRange,
) -> MarketSummary:
    """Build the market summary shown alongside a valuation."""
    return MarketSummary(
        comparable_count=len(survivors),
        median_adjusted_price=median([s.adjusted_price for s in survivors]),
        weighted_mean_price=aggregate.weighted_mean,
        price_per_sqm=price_per_sqm(survivors),
    )
