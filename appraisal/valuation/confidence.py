"""
Confidence Scorer for the Valuation Engine

Confidence starts from a base determined by how many comparables survived
screening, then is scaled by multiplicative factors:

- Dispersion: coefficient of variation of the weighted prices
- Similarity: average similarity of the survivors
- Outliers: proportion of priced comparables removed
- Screening: fixed penalty when removals were suppressed
- Adjustments: proportion of adjustment terms skipped for missing data
- Recency: age of the survivors' sales at the valuation date

Each factor is in (0, 1], so no factor can raise confidence above the
count base.
"""

from datetime import date
from typing import Optional, Sequence

from .config import DEFAULT_ENGINE_CONFIG, MIN_USABLE_COMPARABLES, EngineConfig
from .models import (
    ADJUSTABLE_ATTRIBUTES,
    AdjustedComparable,
    AggregateRange,
    ConfidenceBreakdown,
)


class ConfidenceScorer:
    """Scores valuation confidence 0-100."""

    def __init__(self, config: EngineConfig = DEFAULT_ENGINE_CONFIG):
        self._config = config.confidence

    def score(
        self,
        survivors: Sequence[AdjustedComparable],
        removed_count: int,
        screening_applied: bool,
        aggregate: AggregateRange,
        valuation_date: Optional[date] = None,
    ) -> ConfidenceBreakdown:
        """
        Compute the confidence breakdown.

        Args:
            survivors: Comparables used in the aggregate
            removed_count: Number removed by outlier screening
            screening_applied: False when removals were suppressed
            aggregate: The weighted range built from survivors
            valuation_date: Date sale ages are measured from. Recency is
                not scored when None.

        Returns:
            ConfidenceBreakdown; ``score`` is an int in [0, 100]
        """
        count = len(survivors)

        count_base = self.count_base(count)
        dispersion = self._dispersion_factor(aggregate)
        similarity = self._similarity_factor(survivors)
        outliers = self._outlier_factor(count, removed_count)
        screening = 1.0 if screening_applied else self._config.not_screened_factor
        adjustments = self._adjustment_factor(survivors)
        recency = self._recency_factor(survivors, valuation_date)

        raw = (
            count_base * dispersion * similarity * outliers * screening
            * adjustments * recency
        )
        score = int(round(max(0.0, min(100.0, raw))))

        return ConfidenceBreakdown(
            score=score,
            count_base=count_base,
            dispersion_factor=dispersion,
            similarity_factor=similarity,
            outlier_factor=outliers,
            screening_factor=screening,
            adjustment_factor=adjustments,
            recency_factor=recency,
        )

    def count_base(self, count: int) -> float:
        """Base score from the number of survivors."""
        cfg = self._config
        if count <= 0:
            return 0.0
        if count < MIN_USABLE_COMPARABLES:
            return cfg.base_at_minimum * count / MIN_USABLE_COMPARABLES
        if count >= cfg.saturation_count:
            return 100.0

        span = cfg.saturation_count - MIN_USABLE_COMPARABLES
        step = (100.0 - cfg.base_at_minimum) / span
        return cfg.base_at_minimum + step * (count - MIN_USABLE_COMPARABLES)

    def _dispersion_factor(self, aggregate: AggregateRange) -> float:
        cfg = self._config
        if aggregate.weighted_mean <= 0 or cfg.max_cv <= 0:
            return 1.0 - cfg.dispersion_weight
        cv = aggregate.weighted_std / aggregate.weighted_mean
        return 1.0 - min(1.0, cv / cfg.max_cv) * cfg.dispersion_weight

    def _similarity_factor(self, survivors: Sequence[AdjustedComparable]) -> float:
        floor = self._config.similarity_floor
        if not survivors:
            return floor
        average = sum(s.similarity_score for s in survivors) / len(survivors)
        return floor + (1.0 - floor) * average / 100.0

    def _outlier_factor(self, survivor_count: int, removed_count: int) -> float:
        total = survivor_count + removed_count
        if total <= 0:
            return 1.0
        return 1.0 - (removed_count / total) * self._config.outlier_weight

    def _adjustment_factor(self, survivors: Sequence[AdjustedComparable]) -> float:
        terms = len(survivors) * len(ADJUSTABLE_ATTRIBUTES)
        if terms == 0:
            return 1.0
        skipped = sum(s.skipped_count for s in survivors)
        return 1.0 - (skipped / terms) * self._config.skipped_adjustment_weight

    def recency_score(self, sale_date: Optional[date], valuation_date: date) -> float:
        """
        Recency credit for one sale, 1.0 on the valuation date falling
        linearly to 0.0 at ``stale_after_days``.

        Undated sales earn ``undated_recency``. Sales dated after the
        valuation date count as current.
        """
        cfg = self._config
        if sale_date is None:
            return cfg.undated_recency
        if cfg.stale_after_days <= 0:
            return 0.0
        age_days = (valuation_date - sale_date).days
        return max(0.0, min(1.0, 1.0 - age_days / cfg.stale_after_days))

    def _recency_factor(
        self,
        survivors: Sequence[AdjustedComparable],
        valuation_date: Optional[date],
    ) -> float:
        if valuation_date is None or not survivors:
            return 1.0
        scores = [self.recency_score(s.comparable.sale_date, valuation_date) for s in survivors]
        average = sum(scores) / len(scores)
        return 1.0 - (1.0 - average) * self._config.recency_weight
