"""
Outlier Detector for the Valuation Engine

Robust screening of adjusted prices using the median absolute deviation:

    sigma     = max(1.4826 * MAD, mad_floor_fraction * |median|)
    threshold = mad_multiplier * sigma
    outlier   = |adjusted price - median| > threshold

Comparable sets are small, so a single bad sale would distort a mean and
standard deviation test; median and MAD are unaffected by it.

Quality rule: screening never reduces the set below the minimum sample.
When it would, nothing is removed and the screening is reported as not
applied.
"""

import logging
from typing import Sequence

from .config import DEFAULT_ENGINE_CONFIG, MAD_NORMAL_CONSISTENCY, EngineConfig
from .models import AdjustedComparable, OutlierScreening, RemovedComparable
from .stats import median, median_absolute_deviation


logger = logging.getLogger(__name__)


class OutlierDetector:
    """Partitions adjusted comparables into survivors and removed."""

    def __init__(self, config: EngineConfig = DEFAULT_ENGINE_CONFIG):
        self._config = config.outliers

    def filter(self, adjusted: Sequence[AdjustedComparable]) -> OutlierScreening:
        """
        Screen adjusted comparables for outliers.

        Tolerates any count, including zero.

        Args:
            adjusted: Priced, adjusted comparables

        Returns:
            OutlierScreening with survivors, removed and the screening flag
        """
        comps = tuple(adjusted)
        if not comps:
            return OutlierScreening(survivors=())

        prices = [c.adjusted_price for c in comps]
        centre = median(prices)
        mad = median_absolute_deviation(prices)
        threshold = self.threshold_for(centre, mad)

        survivors: list[AdjustedComparable] = []
        removed: list[RemovedComparable] = []

        for comp in comps:
            deviation = abs(comp.adjusted_price - centre)
            if deviation > threshold:
                removed.append(
                    RemovedComparable(
                        comparable=comp,
                        reason=(
                            f"adjusted price {comp.adjusted_price:,.0f} deviates"
                            f" {deviation:,.0f} from median {centre:,.0f}"
                            f" (threshold {threshold:,.0f}, MAD {mad:,.0f})"
                        ),
                        deviation=deviation,
                    )
                )
            else:
                survivors.append(comp)

        if removed and len(survivors) < self._config.min_survivors:
            logger.warning(
                "Outlier screening suppressed: removing %d of %d would leave"
                " fewer than %d comparables",
                len(removed),
                len(comps),
                self._config.min_survivors,
            )
            return OutlierScreening(
                survivors=comps,
                removed=(),
                screened=False,
                median=centre,
                mad=mad,
                threshold=threshold,
            )

        for item in removed:
            logger.info("Removed outlier comparable %s: %s", item.id, item.reason)

        return OutlierScreening(
            survivors=tuple(survivors),
            removed=tuple(removed),
            screened=True,
            median=centre,
            mad=mad,
            threshold=threshold,
        )

    def threshold_for(self, centre: float, mad: float) -> float:
        """Maximum allowed absolute deviation from the median."""
        sigma = max(
            MAD_NORMAL_CONSISTENCY * mad,
            self._config.mad_floor_fraction * abs(centre),
        )
        return self._config.mad_multiplier * sigma
