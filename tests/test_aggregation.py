"""
Tests for the Weighted Aggregator

Verifies:
- Similarity-weighted mean and standard deviation
- Minimum band keeps the range from collapsing to a point
- Weight is monotonic in similarity
- Degenerate input, including a non-positive mean, raises instead of
  producing a number
"""

import pytest

from appraisal.valuation import (
    AdjustedComparable,
    DegenerateAggregationError,
    WeightedAggregator,
    normalised_weights,
)


@pytest.fixture
def aggregator():
    return WeightedAggregator()


@pytest.fixture
def adjusted(create_comp):
    def _adjusted(comp_id: str, price: float, similarity: float) -> AdjustedComparable:
        return AdjustedComparable(
            comparable=create_comp(comp_id, sale_price=price),
            similarity_score=similarity,
            adjusted_price=price,
        )
    return _adjusted


# =============================================================================
# Test: Weights
# =============================================================================

class TestWeights:
    """Normalised similarity weights."""

    def test_weights_sum_to_one(self, adjusted):
        weights = normalised_weights([
            adjusted("A", 800_000, 100),
            adjusted("B", 818_000, 98.33),
            adjusted("C", 824_500, 67.5),
        ])

        assert sum(weights) == pytest.approx(1.0)

    def test_zero_similarity_has_zero_weight(self, adjusted):
        weights = normalised_weights([
            adjusted("A", 800_000, 100),
            adjusted("B", 818_000, 0),
        ])

        assert weights == [1.0, 0.0]

    @pytest.mark.parametrize("similarity", [10.0, 40.0, 70.0, 95.0])
    def test_weight_monotonic_in_similarity(self, adjusted, similarity):
        """Raising one comparable's similarity never lowers its weight."""
        others = [adjusted("B", 818_000, 80), adjusted("C", 824_500, 60)]

        lower = normalised_weights([adjusted("A", 800_000, similarity)] + others)[0]
        higher = normalised_weights([adjusted("A", 800_000, similarity + 5)] + others)[0]

        assert higher >= lower

    def test_higher_similarity_pulls_mean_toward_comparable(self, aggregator, adjusted):
        others = [adjusted("B", 900_000, 80), adjusted("C", 910_000, 80)]

        weak = aggregator.aggregate([adjusted("A", 700_000, 20)] + others)
        strong = aggregator.aggregate([adjusted("A", 700_000, 90)] + others)

        assert strong.weighted_mean < weak.weighted_mean


# =============================================================================
# Test: Range
# =============================================================================

class TestRange:
    """Range construction."""

    def test_scenario_weighted_mean(self, aggregator, adjusted):
        result = aggregator.aggregate([
            adjusted("A", 800_000, 100),
            adjusted("B", 818_000, 98.33),
            adjusted("C", 824_500, 67.5),
        ])

        assert 805_000 <= result.weighted_mean <= 815_000
        assert result.low <= result.weighted_mean <= result.high

    def test_minimum_band_when_prices_agree(self, aggregator, adjusted):
        result = aggregator.aggregate([
            adjusted("A", 800_000, 90),
            adjusted("B", 800_000, 90),
            adjusted("C", 800_000, 90),
        ])

        assert result.weighted_std == 0
        assert result.low == 780_000
        assert result.high == 820_000

    def test_band_follows_std_when_dispersed(self, aggregator, adjusted):
        result = aggregator.aggregate([
            adjusted("A", 600_000, 90),
            adjusted("B", 800_000, 90),
            adjusted("C", 1_000_000, 90),
        ])

        half = (result.high - result.low) / 2
        assert half == pytest.approx(result.weighted_std, abs=1)

    def test_bounds_are_integers(self, aggregator, adjusted):
        result = aggregator.aggregate([
            adjusted("A", 800_000.4, 90),
            adjusted("B", 818_000.7, 80),
            adjusted("C", 824_500.2, 70),
        ])

        assert isinstance(result.low, int)
        assert isinstance(result.high, int)

    def test_low_clamped_at_zero(self, aggregator, adjusted):
        result = aggregator.aggregate([
            adjusted("A", 1_000, 90),
            adjusted("B", 1_000, 90),
            adjusted("C", 200_000, 90),
        ])

        assert result.low == 0
        assert result.high > result.weighted_mean

    def test_weights_recorded_per_comparable(self, aggregator, adjusted):
        result = aggregator.aggregate([
            adjusted("A", 800_000, 50),
            adjusted("B", 810_000, 50),
            adjusted("C", 820_000, 100),
        ])

        assert result.weight_for("C") == pytest.approx(0.5)
        assert result.weight_for("missing") == 0.0


# =============================================================================
# Test: Degenerate Input
# =============================================================================

class TestDegenerate:
    """Nothing to weight is a defect, not a result."""

    def test_empty_survivors_raise(self, aggregator):
        with pytest.raises(DegenerateAggregationError):
            aggregator.aggregate([])

    def test_all_zero_similarity_raises(self, aggregator, adjusted):
        with pytest.raises(DegenerateAggregationError):
            aggregator.aggregate([
                adjusted("A", 800_000, 0),
                adjusted("B", 810_000, 0),
                adjusted("C", 820_000, 0),
            ])

    def test_non_positive_mean_raises(self, aggregator, adjusted):
        """A 0-0 range is never reported as a result."""
        with pytest.raises(DegenerateAggregationError):
            aggregator.aggregate([
                adjusted("A", -137_500, 90),
                adjusted("B", -137_500, 90),
                adjusted("C", -137_500, 90),
            ])
