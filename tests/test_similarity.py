"""
Tests for the Similarity Scorer

Verifies:
- Identical properties score 100
- Property type mismatch and distance beyond the radius score 0
- Bedrooms and bathrooms weigh more than year built
- Missing data neither penalises nor rewards
- Caller-supplied similarity is ignored
"""

from dataclasses import replace

import pytest

from appraisal.valuation import (
    DEFAULT_ENGINE_CONFIG,
    IneligibilityReason,
    PropertyType,
    SimilarityScorer,
)


@pytest.fixture
def scorer():
    return SimilarityScorer()


# =============================================================================
# Test: Basic Scoring
# =============================================================================

class TestBasicScoring:
    """Scores for straightforward comparables."""

    def test_identical_property_scores_100(self, scorer, subject, create_comp):
        assert scorer.score(subject, create_comp("A")) == 100.0

    def test_scenario_scores(self, scorer, subject, scenario_comps):
        """B differs only in floor area, C by a bedroom, a bathroom and 30 m2."""
        a, b, c = scenario_comps

        assert scorer.score(subject, a) == 100.0
        assert scorer.score(subject, b) == pytest.approx(98.33)
        assert scorer.score(subject, c) == pytest.approx(67.5)

    def test_score_rounded_to_two_decimals(self, scorer, subject, create_comp):
        score = scorer.score(subject, create_comp("A", floor_area=151))
        assert score == round(score, 2)

    def test_penalty_capped_at_category_weight(self, scorer, subject, create_comp):
        """Ten extra bedrooms cost no more than the bedroom weight."""
        far = scorer.score(subject, create_comp("A", bedrooms=13))
        near = scorer.score(subject, create_comp("A", bedrooms=5))

        assert far == near == 100.0 - DEFAULT_ENGINE_CONFIG.similarity.bedrooms_weight

    def test_score_always_within_bounds(self, scorer, subject, create_comp):
        comp = create_comp(
            "A",
            bedrooms=9,
            bathrooms=7,
            floor_area=900,
            land_size=5000,
            year_built=1850,
            distance_km=4.9,
        )
        subject_with_extras = replace(subject, land_size=400, year_built=2010)
        score = scorer.score(subject_with_extras, comp)

        assert 0.0 <= score <= 100.0


# =============================================================================
# Test: Exclusions
# =============================================================================

class TestExclusions:
    """Comparables forced to zero similarity."""

    def test_property_type_mismatch_scores_zero(self, scorer, subject, create_comp):
        comp = create_comp("A", property_type=PropertyType.APARTMENT)

        assert scorer.score(subject, comp) == 0.0
        assert scorer.exclusion_reason(subject, comp) == IneligibilityReason.PROPERTY_TYPE_MISMATCH

    def test_beyond_radius_scores_zero(self, scorer, subject, create_comp):
        comp = create_comp("A", distance_km=5.1)

        assert scorer.score(subject, comp) == 0.0
        assert scorer.exclusion_reason(subject, comp) == IneligibilityReason.OUTSIDE_RADIUS

    def test_at_radius_is_not_excluded(self, scorer, subject, create_comp):
        comp = create_comp("A", distance_km=5.0)

        assert scorer.exclusion_reason(subject, comp) is None
        assert scorer.score(subject, comp) == 100.0 - DEFAULT_ENGINE_CONFIG.similarity.distance_weight

    def test_radius_follows_config(self, subject, create_comp):
        scorer = SimilarityScorer(
            DEFAULT_ENGINE_CONFIG.with_overrides(similarity__max_radius_km=10.0)
        )
        assert scorer.score(subject, create_comp("A", distance_km=7.5)) > 0


# =============================================================================
# Test: Attribute Weighting
# =============================================================================

class TestAttributeWeighting:
    """Relative importance of attributes."""

    def test_bedrooms_weigh_more_than_year_built(self, scorer, create_comp, subject):
        base = replace(subject, year_built=2000)

        # One bedroom versus a ten-year gap
        bedroom_off = scorer.score(base, create_comp("A", bedrooms=4, year_built=2000))
        year_off = scorer.score(base, create_comp("A", year_built=2010))
        assert bedroom_off < year_off

    def test_bathrooms_weigh_more_than_year_built(self, scorer, create_comp, subject):
        base = replace(subject, year_built=2000)

        bathroom_off = scorer.score(base, create_comp("A", bathrooms=3, year_built=2000))
        year_off = scorer.score(base, create_comp("A", year_built=2010))

        assert bathroom_off < year_off

    def test_closer_comparable_scores_higher(self, scorer, subject, create_comp):
        near = scorer.score(subject, create_comp("A", distance_km=0.5))
        far = scorer.score(subject, create_comp("A", distance_km=3.0))

        assert near > far

    def test_floor_area_difference_is_relative_to_subject(self, scorer, subject, create_comp):
        penalties = scorer.breakdown(subject, create_comp("A", floor_area=180))
        expected = 20.0 * (30 / 150) / 0.4

        assert penalties["floor_area"] == pytest.approx(expected)

    def test_zero_subject_area_uses_comparable_as_base(self, scorer, subject, create_comp):
        zero_subject = replace(subject, floor_area=0)
        penalties = scorer.breakdown(zero_subject, create_comp("A", floor_area=100))

        assert penalties["floor_area"] == DEFAULT_ENGINE_CONFIG.similarity.floor_area_weight


# =============================================================================
# Test: Missing Data Policy
# =============================================================================

class TestMissingData:
    """Missing attributes contribute no penalty and no bonus."""

    def test_missing_on_comparable_not_penalised(self, scorer, subject, create_comp):
        comp = create_comp("A", bedrooms=None, bathrooms=None, floor_area=None)
        assert scorer.score(subject, comp) == 100.0

    def test_missing_on_subject_not_penalised(self, scorer, subject, create_comp):
        bare = replace(subject, bedrooms=None)
        assert scorer.breakdown(bare, create_comp("A", bedrooms=7))["bedrooms"] == 0.0

    def test_missing_data_does_not_raise_score_above_known(self, scorer, subject, create_comp):
        """Known differences still cost the same when other fields are missing."""
        full = create_comp("A", bedrooms=4)
        sparse = create_comp("A", bedrooms=4, bathrooms=None, floor_area=None)

        assert scorer.score(subject, sparse) == scorer.score(subject, full)

    def test_unknown_distance_not_penalised(self, scorer, subject, create_comp):
        assert scorer.breakdown(subject, create_comp("A"))["distance"] == 0.0


# =============================================================================
# Test: Supplied Similarity Ignored
# =============================================================================

class TestSuppliedSimilarity:
    """Similarity is always recomputed."""

    def test_annotate_ignores_supplied_score(self, scorer, subject, create_comp):
        comp = create_comp("A", bedrooms=1, similarity_score=99.0)
        scored = scorer.annotate(subject, comp)

        assert scored.similarity_score == scorer.score(subject, comp)
        assert scored.similarity_score != 99.0
