"""
Tests for the Confidence Scorer

Verifies:
- Count base rises with the number of survivors
- Dispersion, similarity, removals, suppressed screening and skipped
  adjustments each lower confidence
- Stale and undated sales lower confidence through the recency factor
- Score is always an integer in [0, 100]
- Confidence level bands
"""

from dataclasses import replace
from datetime import date

import pytest

from appraisal.valuation import (
    AdjustedComparable,
    AdjustmentSkipped,
    AggregateRange,
    ConfidenceLevel,
    ConfidenceScorer,
    SkipReason,
    WeightedAggregator,
)


@pytest.fixture
def scorer():
    return ConfidenceScorer()


@pytest.fixture
def survivors(create_comp):
    """Factory for survivors with given similarities and skipped counts."""
    def _survivors(similarities, prices=None, skipped: int = 0):
        prices = prices or [800_000] * len(similarities)
        skipped_entries = tuple(
            AdjustmentSkipped(attribute=attr, reason=SkipReason.MISSING_ON_BOTH)
            for attr in ("land_size", "year_built", "bedrooms", "bathrooms", "floor_area")[:skipped]
        )
        return [
            AdjustedComparable(
                comparable=create_comp(f"C{i}", sale_price=price),
                similarity_score=sim,
                adjusted_price=price,
                adjustments=skipped_entries,
            )
            for i, (sim, price) in enumerate(zip(similarities, prices))
        ]
    return _survivors


def score_for(scorer, comps, removed=0, screened=True):
    aggregate = WeightedAggregator().aggregate(comps)
    return scorer.score(comps, removed, screened, aggregate)


# =============================================================================
# Test: Count Base
# =============================================================================

class TestCountBase:
    """Base score from the number of survivors."""

    @pytest.mark.parametrize("count,expected", [
        (0, 0.0),
        (2, 50.0),
        (3, 75.0),
        (4, 75.0 + 25.0 / 3),
        (6, 100.0),
        (10, 100.0),
    ])
    def test_count_base(self, scorer, count, expected):
        assert scorer.count_base(count) == pytest.approx(expected)

    def test_more_comparables_more_confidence(self, scorer, survivors):
        three = score_for(scorer, survivors([100] * 3))
        six = score_for(scorer, survivors([100] * 6))

        assert six.score > three.score


# =============================================================================
# Test: Factors
# =============================================================================

class TestFactors:
    """Each factor can only lower confidence."""

    def test_perfect_inputs_reach_count_base(self, scorer, survivors):
        result = score_for(scorer, survivors([100] * 6))
        assert result.score == 100

    def test_dispersion_lowers_confidence(self, scorer, survivors):
        tight = score_for(scorer, survivors([100] * 3, [800_000, 805_000, 810_000]))
        wide = score_for(scorer, survivors([100] * 3, [600_000, 800_000, 1_000_000]))

        assert wide.score < tight.score
        assert wide.dispersion_factor < tight.dispersion_factor

    def test_low_similarity_lowers_confidence(self, scorer, survivors):
        high = score_for(scorer, survivors([100, 100, 100]))
        low = score_for(scorer, survivors([50, 50, 50]))

        assert low.similarity_factor == pytest.approx(0.75)
        assert low.score < high.score

    def test_removed_outliers_lower_confidence(self, scorer, survivors):
        comps = survivors([100] * 3)
        clean = score_for(scorer, comps)
        with_removed = score_for(scorer, comps, removed=1)

        assert with_removed.outlier_factor == pytest.approx(1 - 0.25 * 0.5)
        assert with_removed.score < clean.score

    def test_suppressed_screening_lowers_confidence(self, scorer, survivors):
        comps = survivors([100] * 3)
        result = score_for(scorer, comps, screened=False)

        assert result.screening_factor == 0.85
        assert result.score == round(75 * 0.85)

    def test_skipped_adjustments_lower_confidence(self, scorer, survivors):
        full = score_for(scorer, survivors([100] * 3))
        sparse = score_for(scorer, survivors([100] * 3, skipped=2))

        assert sparse.adjustment_factor == pytest.approx(0.96)
        assert sparse.score < full.score


# =============================================================================
# Test: Recency
# =============================================================================

VALUATION_DATE = date(2024, 6, 1)


class TestRecency:
    """Sale age measured from the valuation date."""

    @pytest.mark.parametrize("sale_date,expected", [
        (date(2024, 6, 1), 1.0),
        (date(2024, 3, 20), 0.8),
        (date(2023, 6, 2), 0.0),
        (date(2020, 1, 1), 0.0),
        (date(2024, 7, 1), 1.0),
        (None, 0.5),
    ])
    def test_recency_score(self, scorer, sale_date, expected):
        assert scorer.recency_score(sale_date, VALUATION_DATE) == pytest.approx(expected)

    def test_stale_sales_lower_confidence(self, scorer, survivors):
        comps = survivors([100] * 3)
        aggregate = WeightedAggregator().aggregate(comps)
        stale = [
            replace(c, comparable=replace(c.comparable, sale_date=date(2021, 1, 1)))
            for c in comps
        ]

        undated = scorer.score(comps, 0, True, aggregate, valuation_date=VALUATION_DATE)
        old = scorer.score(stale, 0, True, aggregate, valuation_date=VALUATION_DATE)

        assert old.score < undated.score
        assert old.recency_factor == pytest.approx(0.8)
        assert undated.recency_factor == pytest.approx(0.9)

    def test_no_valuation_date_no_recency(self, scorer, survivors):
        comps = survivors([100] * 3)
        result = score_for(scorer, comps)

        assert result.recency_factor == 1.0
        assert result.to_dict()["recency_factor"] == 1.0


# =============================================================================
# Test: Bounds and Levels
# =============================================================================

class TestBoundsAndLevels:
    """Integer score in range, with a level label."""

    def test_score_is_bounded_integer(self, scorer, survivors):
        result = score_for(scorer, survivors([1, 2, 3], [100_000, 900_000, 5_000_000]), removed=5)

        assert isinstance(result.score, int)
        assert 0 <= result.score <= 100

    def test_zero_mean_aggregate_handled(self, scorer, survivors):
        comps = survivors([100] * 3)
        aggregate = AggregateRange(low=0, high=0, weighted_mean=0.0, weighted_std=0.0)
        result = scorer.score(comps, 0, True, aggregate)

        assert 0 <= result.score <= 100

    @pytest.mark.parametrize("score,level", [
        (100, ConfidenceLevel.VERY_HIGH),
        (85, ConfidenceLevel.VERY_HIGH),
        (84, ConfidenceLevel.HIGH),
        (70, ConfidenceLevel.HIGH),
        (69, ConfidenceLevel.MODERATE),
        (50, ConfidenceLevel.MODERATE),
        (49, ConfidenceLevel.LOW),
        (0, ConfidenceLevel.LOW),
    ])
    def test_confidence_level_bands(self, score, level):
        assert ConfidenceLevel.from_score(score) == level

    def test_breakdown_serialises_level(self, scorer, survivors):
        data = score_for(scorer, survivors([100] * 6)).to_dict()

        assert data["score"] == 100
        assert data["level"] == "Very High"
