"""
Engine Configuration for the Valuation Engine

Every constant the algorithm uses lives here as a named field with a
documented default. A parameter set is identified by ``EngineConfig.version``
so that regression tests and stored valuations can reference the exact
rates that produced a number.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field, replace
from typing import Any, Final


# =============================================================================
# Invariants (not tunable)
# =============================================================================

# Minimum number of priced comparables a valuation may be built from
MIN_USABLE_COMPARABLES: Final[int] = 3

# Scales MAD to a standard deviation estimate for normally distributed data
MAD_NORMAL_CONSISTENCY: Final[float] = 1.4826

DEFAULT_CONFIG_VERSION: Final[str] = "2024.1"


# =============================================================================
# Component Configuration
# =============================================================================


@dataclass(frozen=True)
class SimilarityConfig:
    """
    Similarity penalties (points deducted from 100).

    Each attribute deducts ``weight * min(1, |difference| / tolerance)``.
    Bedrooms, bathrooms and year built compare absolute differences; land
    size and floor area compare differences relative to the subject.
    """

    bedrooms_weight: float = 25.0
    bedrooms_tolerance: float = 2.0  # rooms

    bathrooms_weight: float = 20.0
    bathrooms_tolerance: float = 2.0  # rooms

    floor_area_weight: float = 20.0
    floor_area_tolerance: float = 0.4  # relative difference

    land_size_weight: float = 10.0
    land_size_tolerance: float = 0.5  # relative difference

    year_built_weight: float = 10.0
    year_built_tolerance: float = 30.0  # years

    distance_weight: float = 10.0
    max_radius_km: float = 5.0  # beyond this, similarity is 0


@dataclass(frozen=True)
class AdjustmentRates:
    """
    Per-unit dollar adjustment rates.

    Adjustment = (subject value - comparable value) * rate.
    """

    bedroom: float = 15_000.0  # per bedroom
    bathroom: float = 7_500.0  # per bathroom
    floor_area: float = 400.0  # per m2 of floor area
    land_size: float = 50.0  # per m2 of land
    year_built: float = 1_000.0  # per year of age difference

    # Adjusted price never falls below this share of the sale price
    min_price_fraction: float = 0.25

    def rate_for(self, attribute: str) -> float:
        """Look up the rate for an attribute name."""
        return {
            "bedrooms": self.bedroom,
            "bathrooms": self.bathroom,
            "floor_area": self.floor_area,
            "land_size": self.land_size,
            "year_built": self.year_built,
        }[attribute]


@dataclass(frozen=True)
class OutlierConfig:
    """Median absolute deviation screening."""

    mad_multiplier: float = 3.0
    # Lower bound on the robust sigma as a fraction of the median, so a MAD
    # of zero still screens gross outliers
    mad_floor_fraction: float = 0.02
    min_survivors: int = MIN_USABLE_COMPARABLES


@dataclass(frozen=True)
class AggregationConfig:
    """Range construction around the similarity-weighted mean."""

    range_k: float = 1.0  # half-width in weighted standard deviations
    min_band_fraction: float = 0.025  # minimum half-width as fraction of mean


@dataclass(frozen=True)
class ConfidenceConfig:
    """Confidence score weighting."""

    base_at_minimum: float = 75.0  # score with exactly MIN_USABLE_COMPARABLES
    saturation_count: int = 6  # survivors at which the count base reaches 100

    max_cv: float = 0.25  # coefficient of variation treated as fully dispersed
    dispersion_weight: float = 0.5

    similarity_floor: float = 0.5  # factor when average similarity is 0

    outlier_weight: float = 0.5  # penalty per unit of removed proportion
    not_screened_factor: float = 0.85

    skipped_adjustment_weight: float = 0.1

    # Recency of sale dates, measured against the valuation date
    recency_weight: float = 0.2
    stale_after_days: int = 365  # a sale this old earns no recency credit
    undated_recency: float = 0.5  # credit for a sale with no date


# =============================================================================
# Engine Configuration
# =============================================================================


@dataclass(frozen=True)
class EngineConfig:
    """
    Complete, versioned parameter set for the valuation engine.

    Instances are immutable and safe to share between threads.
    """

    version: str = DEFAULT_CONFIG_VERSION
    similarity: SimilarityConfig = field(default_factory=SimilarityConfig)
    adjustments: AdjustmentRates = field(default_factory=AdjustmentRates)
    outliers: OutlierConfig = field(default_factory=OutlierConfig)
    aggregation: AggregationConfig = field(default_factory=AggregationConfig)
    confidence: ConfidenceConfig = field(default_factory=ConfidenceConfig)

    def with_overrides(self, **sections: Any) -> "EngineConfig":
        """
        Return a copy with selected fields replaced.

        Keys are either top-level fields (``version``) or
        ``<section>__<field>`` pairs, e.g. ``outliers__mad_multiplier=2.5``.
        """
        top_level: dict[str, Any] = {}
        nested: dict[str, dict[str, Any]] = {}

        for key, value in sections.items():
            if "__" in key:
                section, name = key.split("__", 1)
                nested.setdefault(section, {})[name] = value
            else:
                top_level[key] = value

        for section, values in nested.items():
            current = getattr(self, section)
            top_level[section] = replace(current, **values)

        return replace(self, **top_level)

    def to_dict(self) -> dict[str, Any]:
        """Flatten the parameter set for audit output."""
        return asdict(self)


DEFAULT_ENGINE_CONFIG: Final[EngineConfig] = EngineConfig()
