"""
Similarity Scorer for the Valuation Engine

Scores each candidate comparable 0-100 against the subject:
- Property type (exact match, otherwise 0)
- Bedrooms, bathrooms, year built (absolute difference)
- Land size, floor area (difference relative to the subject)
- Distance (linear decay, 0 beyond the maximum radius)

Missing data policy: when an attribute is missing on either side that
category contributes no penalty and no bonus. Missing data therefore never
lowers a score, and it never raises one above what the known attributes
allow.
"""

from typing import Optional

from .config import DEFAULT_ENGINE_CONFIG, EngineConfig
from .models import (
    ComparableProperty,
    IneligibilityReason,
    PropertyDetails,
    ScoredComparable,
)


MAX_SIMILARITY = 100.0
MIN_SIMILARITY = 0.0


class SimilarityScorer:
    """
    Computes similarity between a subject and a comparable.

    Never raises; incompatible inputs score 0.
    """

    def __init__(self, config: EngineConfig = DEFAULT_ENGINE_CONFIG):
        self._config = config.similarity

    def score(self, subject: PropertyDetails, comparable: ComparableProperty) -> float:
        """
        Similarity score in [0, 100], rounded to 2 decimals.

        Args:
            subject: The property being valued
            comparable: Candidate comparable sale

        Returns:
            Similarity score (0 for type mismatch or beyond the radius)
        """
        if self.exclusion_reason(subject, comparable) is not None:
            return MIN_SIMILARITY

        penalty = sum(self.breakdown(subject, comparable).values())
        score = max(MIN_SIMILARITY, min(MAX_SIMILARITY, MAX_SIMILARITY - penalty))
        return round(score, 2)

    def annotate(
        self,
        subject: PropertyDetails,
        comparable: ComparableProperty,
    ) -> ScoredComparable:
        """Attach a freshly computed similarity, ignoring any supplied value."""
        return ScoredComparable(
            comparable=comparable,
            similarity_score=self.score(subject, comparable),
        )

    def exclusion_reason(
        self,
        subject: PropertyDetails,
        comparable: ComparableProperty,
    ) -> Optional[IneligibilityReason]:
        """Reason the comparable is forced to zero similarity, if any."""
        if comparable.property_type != subject.property_type:
            return IneligibilityReason.PROPERTY_TYPE_MISMATCH

        distance = comparable.distance_km
        if distance is not None and distance > self._config.max_radius_km:
            return IneligibilityReason.OUTSIDE_RADIUS

        return None

    def breakdown(
        self,
        subject: PropertyDetails,
        comparable: ComparableProperty,
    ) -> dict[str, float]:
        """
        Penalty points per category.

        Categories with missing data on either side are reported as 0.
        """
        cfg = self._config

        return {
            "bedrooms": self._penalty(
                self._absolute_diff(subject.bedrooms, comparable.bedrooms),
                cfg.bedrooms_weight,
                cfg.bedrooms_tolerance,
            ),
            "bathrooms": self._penalty(
                self._absolute_diff(subject.bathrooms, comparable.bathrooms),
                cfg.bathrooms_weight,
                cfg.bathrooms_tolerance,
            ),
            "land_size": self._penalty(
                self._relative_diff(subject.land_size, comparable.land_size),
                cfg.land_size_weight,
                cfg.land_size_tolerance,
            ),
            "floor_area": self._penalty(
                self._relative_diff(subject.floor_area, comparable.floor_area),
                cfg.floor_area_weight,
                cfg.floor_area_tolerance,
            ),
            "year_built": self._penalty(
                self._absolute_diff(subject.year_built, comparable.year_built),
                cfg.year_built_weight,
                cfg.year_built_tolerance,
            ),
            "distance": self._distance_penalty(comparable.distance_km),
        }

    def _distance_penalty(self, distance_km: Optional[float]) -> float:
        if distance_km is None:
            return 0.0
        cfg = self._config
        if cfg.max_radius_km <= 0:
            return 0.0
        return cfg.distance_weight * min(1.0, max(0.0, distance_km) / cfg.max_radius_km)

    @staticmethod
    def _penalty(diff: Optional[float], weight: float, tolerance: float) -> float:
        if diff is None:
            return 0.0
        if tolerance <= 0:
            return weight if diff > 0 else 0.0
        return weight * min(1.0, diff / tolerance)

    @staticmethod
    def _absolute_diff(
        subject_value: Optional[float],
        comparable_value: Optional[float],
    ) -> Optional[float]:
        if subject_value is None or comparable_value is None:
            return None
        return abs(subject_value - comparable_value)

    @staticmethod
    def _relative_diff(
        subject_value: Optional[float],
        comparable_value: Optional[float],
    ) -> Optional[float]:
        if subject_value is None or comparable_value is None:
            return None
        base = subject_value if subject_value > 0 else comparable_value
        if base <= 0:
            return 0.0
        return abs(subject_value - comparable_value) / base
