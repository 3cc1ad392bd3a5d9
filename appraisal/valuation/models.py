"""
Data models for the Valuation Engine

Request-scoped value objects for the subject property, candidate comparable
sales, the itemised adjustment audit trail and the valuation result.
All models are immutable; every pipeline stage returns new objects.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any, Optional, Union

from utils.formatting import format_currency, format_percent

from .errors import ValuationErrorCode


# =============================================================================
# Enums
# =============================================================================


class PropertyType(Enum):
    """
    Property type classification.

    Exact match only - a comparable of a different type scores zero
    similarity and never contributes to a valuation.
    """
    HOUSE = "house"
    APARTMENT = "apartment"
    TOWNHOUSE = "townhouse"
    LAND = "land"
    COMMERCIAL = "commercial"
    OTHER = "other"

    @classmethod
    def from_string(cls, value: str) -> Optional["PropertyType"]:
        """Convert string to PropertyType, case-insensitive."""
        normalised = value.lower().strip()
        for member in cls:
            if member.value == normalised:
                return member
        return None


class ConfidenceLevel(Enum):
    """
    Confidence band for a valuation.

    Very High: >= 85
    High: 70-84
    Moderate: 50-69
    Low: < 50
    """
    VERY_HIGH = "Very High"
    HIGH = "High"
    MODERATE = "Moderate"
    LOW = "Low"

    @classmethod
    def from_score(cls, score: int) -> "ConfidenceLevel":
        if score >= 85:
            return cls.VERY_HIGH
        if score >= 70:
            return cls.HIGH
        if score >= 50:
            return cls.MODERATE
        return cls.LOW


class SkipReason(Enum):
    """Why an adjustment term was not applied."""
    MISSING_ON_SUBJECT = "missing_on_subject"
    MISSING_ON_COMPARABLE = "missing_on_comparable"
    MISSING_ON_BOTH = "missing_on_both"


class IneligibilityReason(Enum):
    """Why a comparable was dropped before outlier screening."""
    MISSING_SALE_PRICE = "missing_sale_price"
    NON_POSITIVE_SALE_PRICE = "non_positive_sale_price"
    PROPERTY_TYPE_MISMATCH = "property_type_mismatch"
    OUTSIDE_RADIUS = "outside_radius"
    ZERO_SIMILARITY = "zero_similarity"


# Adjustable attributes in audit order
ADJUSTABLE_ATTRIBUTES: tuple[str, ...] = (
    "bedrooms",
    "bathrooms",
    "land_size",
    "floor_area",
    "year_built",
)


# =============================================================================
# Input Models
# =============================================================================


@dataclass(frozen=True)
class PropertyDetails:
    """
    The subject property being valued.

    Attribute fields are optional; a missing attribute is never treated as
    equal to the comparable's value.
    """
    address: str
    suburb: str
    city: str
    property_type: PropertyType

    bedrooms: Optional[int] = None
    bathrooms: Optional[float] = None
    land_size: Optional[float] = None  # m2
    floor_area: Optional[float] = None  # m2
    year_built: Optional[int] = None

    postcode: Optional[str] = None

    @property
    def full_address(self) -> str:
        """Construct full address string."""
        parts = [p for p in (self.address, self.suburb, self.city, self.postcode) if p]
        return ", ".join(parts)


@dataclass(frozen=True)
class ComparableProperty:
    """
    A candidate comparable sale.

    ``similarity_score`` is accepted for interface compatibility with
    upstream data sources but is never read by the engine; similarity is
    always recomputed against the subject.
    """
    id: str
    address: str
    suburb: str
    city: str
    property_type: PropertyType

    bedrooms: Optional[int] = None
    bathrooms: Optional[float] = None
    land_size: Optional[float] = None
    floor_area: Optional[float] = None
    year_built: Optional[int] = None

    sale_date: Optional[date] = None
    sale_price: Optional[float] = None
    similarity_score: Optional[float] = None
    distance_km: Optional[float] = None

    @property
    def has_usable_price(self) -> bool:
        """Whether the sale price can anchor an adjusted price."""
        return self.sale_price is not None and self.sale_price > 0


@dataclass(frozen=True)
class ValuationRequest:
    """Aggregate input: subject plus candidate comparables."""
    appraisal_id: str
    subject: PropertyDetails
    comparables: tuple[ComparableProperty, ...] = ()

    @property
    def usable_comparable_count(self) -> int:
        """Number of comparables with a positive sale price."""
        return sum(1 for c in self.comparables if c.has_usable_price)


# =============================================================================
# Pipeline Models
# =============================================================================


@dataclass(frozen=True)
class ScoredComparable:
    """A comparable annotated with its engine-computed similarity."""
    comparable: ComparableProperty
    similarity_score: float

    @property
    def id(self) -> str:
        return self.comparable.id


@dataclass(frozen=True)
class AdjustmentApplied:
    """A single itemised price adjustment."""
    attribute: str
    subject_value: float
    comparable_value: float
    difference: float
    rate: float
    delta: float

    kind: str = field(default="applied", init=False)

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind,
            "attribute": self.attribute,
            "subject_value": self.subject_value,
            "comparable_value": self.comparable_value,
            "difference": self.difference,
            "rate": self.rate,
            "delta": self.delta,
        }


@dataclass(frozen=True)
class AdjustmentSkipped:
    """An adjustment term omitted because data was missing."""
    attribute: str
    reason: SkipReason

    kind: str = field(default="skipped", init=False)

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind,
            "attribute": self.attribute,
            "reason": self.reason.value,
        }


AdjustmentEntry = Union[AdjustmentApplied, AdjustmentSkipped]


@dataclass(frozen=True)
class AdjustedComparable:
    """
    A priced comparable with its adjusted price and audit trail.

    adjusted_price = sale_price + sum(applied deltas), floored at a share of
    the sale price. ``price_floored`` records when the floor was used.
    """
    comparable: ComparableProperty
    similarity_score: float
    adjusted_price: float
    adjustments: tuple[AdjustmentEntry, ...] = ()
    price_floored: bool = False

    @property
    def id(self) -> str:
        return self.comparable.id

    @property
    def sale_price(self) -> float:
        return float(self.comparable.sale_price or 0)

    @property
    def applied(self) -> tuple[AdjustmentApplied, ...]:
        return tuple(a for a in self.adjustments if isinstance(a, AdjustmentApplied))

    @property
    def skipped(self) -> tuple[AdjustmentSkipped, ...]:
        return tuple(a for a in self.adjustments if isinstance(a, AdjustmentSkipped))

    @property
    def skipped_count(self) -> int:
        return len(self.skipped)

    @property
    def total_adjustment(self) -> float:
        return sum(a.delta for a in self.applied)

    @property
    def adjustment_factor(self) -> float:
        """Adjusted price as a multiple of the sale price."""
        if self.sale_price <= 0:
            return 1.0
        return self.adjusted_price / self.sale_price


@dataclass(frozen=True)
class IneligibleComparable:
    """A comparable passed through unadjusted and dropped."""
    comparable: ComparableProperty
    reason: IneligibilityReason
    similarity_score: float = 0.0

    @property
    def id(self) -> str:
        return self.comparable.id


@dataclass(frozen=True)
class RemovedComparable:
    """An adjusted comparable excluded by outlier screening."""
    comparable: AdjustedComparable
    reason: str
    deviation: float

    @property
    def id(self) -> str:
        return self.comparable.id


@dataclass(frozen=True)
class OutlierScreening:
    """
    Outcome of outlier screening.

    screened is False when removals were suppressed because they would have
    left fewer than the minimum number of comparables.
    """
    survivors: tuple[AdjustedComparable, ...]
    removed: tuple[RemovedComparable, ...] = ()
    screened: bool = True
    median: float = 0.0
    mad: float = 0.0
    threshold: float = 0.0

    @property
    def removed_count(self) -> int:
        return len(self.removed)


@dataclass(frozen=True)
class AggregateRange:
    """Similarity-weighted range over surviving comparables."""
    low: int
    high: int
    weighted_mean: float
    weighted_std: float
    weights: tuple[tuple[str, float], ...] = ()

    def weight_for(self, comparable_id: str) -> float:
        for cid, weight in self.weights:
            if cid == comparable_id:
                return weight
        return 0.0


@dataclass(frozen=True)
class ConfidenceBreakdown:
    """Confidence score with each contributing factor."""
    score: int
    count_base: float
    dispersion_factor: float
    similarity_factor: float
    outlier_factor: float
    screening_factor: float
    adjustment_factor: float
    recency_factor: float = 1.0

    @property
    def level(self) -> ConfidenceLevel:
        return ConfidenceLevel.from_score(self.score)

    def to_dict(self) -> dict[str, Any]:
        return {
            "score": self.score,
            "level": self.level.value,
            "count_base": round(self.count_base, 2),
            "dispersion_factor": round(self.dispersion_factor, 4),
            "similarity_factor": round(self.similarity_factor, 4),
            "outlier_factor": round(self.outlier_factor, 4),
            "screening_factor": round(self.screening_factor, 4),
            "adjustment_factor": round(self.adjustment_factor, 4),
            "recency_factor": round(self.recency_factor, 4),
        }


@dataclass(frozen=True)
class MarketSummary:
    """Market indicators derived from the surviving comparables."""
    comparable_count: int
    median_adjusted_price: float
    weighted_mean_price: float
    price_per_sqm: Optional[float] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "comparable_count": self.comparable_count,
            "median_adjusted_price": round(self.median_adjusted_price),
            "weighted_mean_price": round(self.weighted_mean_price),
            "price_per_sqm": (
                round(self.price_per_sqm, 2) if self.price_per_sqm is not None else None
            ),
        }


# =============================================================================
# Output Models
# =============================================================================


@dataclass(frozen=True)
class ValuationResult:
    """
    Final valuation output.

    Created once per successful run, never partially populated.
    """
    valuation_low: int
    valuation_high: int
    valuation_confidence: int

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON output."""
        return {
            "valuation_low": self.valuation_low,
            "valuation_high": self.valuation_high,
            "valuation_confidence": self.valuation_confidence,
        }


@dataclass(frozen=True)
class ValuationReport:
    """
    Audit trail for a valuation.

    Carries everything an appraiser needs to trace how the range and the
    confidence were derived.
    """
    appraisal_id: str
    config_version: str
    aggregate: AggregateRange
    screening: OutlierScreening
    confidence: ConfidenceBreakdown
    market: MarketSummary
    ineligible: tuple[IneligibleComparable, ...] = ()

    @property
    def survivors(self) -> tuple[AdjustedComparable, ...]:
        return self.screening.survivors

    @property
    def valuation_estimate(self) -> int:
        return int(round(self.aggregate.weighted_mean))

    def comparable_rows(self) -> list[dict[str, Any]]:
        """One row per priced comparable, survivors first, then removed."""
        rows = []
        for comp in self.screening.survivors:
            rows.append(self._row(comp, is_outlier=False))
        for removed in self.screening.removed:
            rows.append(self._row(removed.comparable, is_outlier=True, reason=removed.reason))
        return rows

    def _row(
        self,
        comp: AdjustedComparable,
        is_outlier: bool,
        reason: Optional[str] = None,
    ) -> dict[str, Any]:
        return {
            "id": comp.id,
            "address": comp.comparable.address,
            "sale_price": comp.sale_price,
            "similarity_score": comp.similarity_score,
            "adjusted_price": round(comp.adjusted_price),
            "price_floored": comp.price_floored,
            "adjustment_factor": round(comp.adjustment_factor, 4),
            "weight": round(self.aggregate.weight_for(comp.id), 4),
            "is_outlier": is_outlier,
            "outlier_reason": reason,
            "adjustments": [a.to_dict() for a in comp.adjustments],
        }

    def audit_lines(self) -> list[str]:
        """Human-readable trace of every adjustment and exclusion."""
        lines = [
            f"Parameter set {self.config_version}",
            f"Weighted mean {format_currency(self.valuation_estimate)}"
            f" (std {format_currency(int(round(self.aggregate.weighted_std)))})",
        ]
        for comp in self.screening.survivors:
            lines.append(
                f"{comp.comparable.address}: sold {format_currency(int(comp.sale_price))},"
                f" adjusted {format_currency(int(round(comp.adjusted_price)))},"
                f" similarity {comp.similarity_score:.2f},"
                f" weight {format_percent(self.aggregate.weight_for(comp.id))}"
            )
            if comp.price_floored:
                lines.append("  adjusted price floored at a share of the sale price")
            for entry in comp.adjustments:
                if isinstance(entry, AdjustmentApplied):
                    sign = "+" if entry.delta >= 0 else "-"
                    lines.append(
                        f"  {entry.attribute}: {entry.difference:+g} x"
                        f" {format_currency(int(entry.rate))} = {sign}"
                        f"{format_currency(int(round(abs(entry.delta))))}"
                    )
                else:
                    lines.append(f"  {entry.attribute}: skipped ({entry.reason.value})")
        for removed in self.screening.removed:
            lines.append(f"Removed {removed.comparable.comparable.address}: {removed.reason}")
        if not self.screening.screened:
            lines.append("Outlier screening suppressed to preserve minimum sample")
        for item in self.ineligible:
            lines.append(f"Ineligible {item.comparable.address}: {item.reason.value}")
        lines.append(
            f"Confidence {self.confidence.score} ({self.confidence.level.value})"
        )
        return lines

    def to_dict(self) -> dict[str, Any]:
        return {
            "appraisal_id": self.appraisal_id,
            "config_version": self.config_version,
            "valuation_estimate": self.valuation_estimate,
            "weighted_std": round(self.aggregate.weighted_std, 2),
            "outlier_screening_applied": self.screening.screened,
            "outlier_median": round(self.screening.median, 2),
            "outlier_mad": round(self.screening.mad, 2),
            "outlier_threshold": round(self.screening.threshold, 2),
            "comparables": self.comparable_rows(),
            "ineligible": [
                {"id": i.id, "reason": i.reason.value, "similarity_score": i.similarity_score}
                for i in self.ineligible
            ],
            "confidence": self.confidence.to_dict(),
            "market": self.market.to_dict(),
        }


# =============================================================================
# Outcome Types
# =============================================================================


@dataclass(frozen=True)
class ValuationSuccess:
    """Returned when a valuation completes."""
    result: ValuationResult
    report: ValuationReport


@dataclass(frozen=True)
class ValuationFailure:
    """Returned when a valuation cannot be produced from the input."""
    reason: str
    error_code: ValuationErrorCode
    details: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": self.reason,
            "error_code": self.error_code.value,
            "details": list(self.details),
        }


# Type alias for ValuationEngine.valuate return value
ValuationOutcome = Union[ValuationSuccess, ValuationFailure]
