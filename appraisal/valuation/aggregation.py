"""
Weighted Aggregator for the Valuation Engine

Combines surviving adjusted prices into a valuation range:

    weight_i  = similarity_i / sum(similarity)
    mean      = sum(weight_i * adjusted_i)
    std       = sqrt(sum(weight_i * (adjusted_i - mean)^2))
    half      = max(range_k * std, min_band_fraction * mean)
    low, high = round(max(0, mean - half)), round(mean + half)

The minimum band keeps the range meaningful when comparables agree
almost exactly. Adjusted prices are floored above zero, so a weighted mean
that is not positive means the survivors were built wrongly and is raised
rather than reported as a 0-0 range.
"""

import logging
from typing import Sequence

from .config import DEFAULT_ENGINE_CONFIG, EngineConfig
from .errors import DegenerateAggregationError
from .models import AdjustedComparable, AggregateRange
from .stats import weighted_mean, weighted_std


logger = logging.getLogger(__name__)


def normalised_weights(survivors: Sequence[AdjustedComparable]) -> list[float]:
    """
    Similarity weights that sum to 1.

    Raises:
        DegenerateAggregationError: If there are no survivors or every
            similarity is zero
    """
    if not survivors:
        raise DegenerateAggregationError("No comparables to aggregate")

    total = sum(s.similarity_score for s in survivors)
    if total <= 0:
        raise DegenerateAggregationError(
            "Total similarity weight is zero",
            details=tuple(s.id for s in survivors),
        )

    return [s.similarity_score / total for s in survivors]


class WeightedAggregator:
    """Builds the valuation range from surviving comparables."""

    def __init__(self, config: EngineConfig = DEFAULT_ENGINE_CONFIG):
        self._config = config.aggregation

    def aggregate(self, survivors: Sequence[AdjustedComparable]) -> AggregateRange:
        """
        Aggregate survivors into a low/high range.

        Args:
            survivors: Comparables remaining after outlier screening

        Returns:
            AggregateRange with integer bounds, low <= high

        Raises:
            DegenerateAggregationError: If the weights cannot be normalised
                or the weighted mean is not positive
        """
        weights = normalised_weights(survivors)
        prices = [s.adjusted_price for s in survivors]

        mean = weighted_mean(prices, weights)
        if mean <= 0:
            raise DegenerateAggregationError(
                f"Weighted mean {mean:.2f} is not positive",
                details=tuple(s.id for s in survivors),
            )
        std = weighted_std(prices, weights)

        half_width = max(
            self._config.range_k * std,
            self._config.min_band_fraction * mean,
        )

        low = int(round(max(0.0, mean - half_width)))
        high = int(round(mean + half_width))

        logger.debug(
            "Aggregated %d comparables: mean=%.2f std=%.2f range=%d-%d",
            len(survivors),
            mean,
            std,
            low,
            high,
        )

        return AggregateRange(
            low=low,
            high=high,
            weighted_mean=mean,
            weighted_std=std,
            weights=tuple((s.id, w) for s, w in zip(survivors, weights)),
        )
