"""
Valuation Engine

Rule-based comparable sales valuation: similarity scoring, itemised price
adjustments, MAD outlier screening, similarity-weighted aggregation and a
confidence score. Every step is deterministic and recorded in the report.
"""

from .config import (
    AdjustmentRates,
    AggregationConfig,
    ConfidenceConfig,
    DEFAULT_ENGINE_CONFIG,
    EngineConfig,
    MIN_USABLE_COMPARABLES,
    OutlierConfig,
    SimilarityConfig,
)
from .errors import (
    DegenerateAggregationError,
    InsufficientComparablesError,
    InvalidInputError,
    ValuationError,
    ValuationErrorCode,
)
from .models import (
    AdjustedComparable,
    AdjustmentApplied,
    AdjustmentSkipped,
    AggregateRange,
    ComparableProperty,
    ConfidenceBreakdown,
    ConfidenceLevel,
    IneligibilityReason,
    IneligibleComparable,
    MarketSummary,
    OutlierScreening,
    PropertyDetails,
    PropertyType,
    RemovedComparable,
    ScoredComparable,
    SkipReason,
    ValuationFailure,
    ValuationOutcome,
    ValuationReport,
    ValuationRequest,
    ValuationResult,
    ValuationSuccess,
)
from .similarity import SimilarityScorer
from .adjustments import AdjustmentEngine
from .outliers import OutlierDetector
from .aggregation import WeightedAggregator, normalised_weights
from .confidence import ConfidenceScorer
from .market import summarise_market
from .validation import EligibilityReport, check_eligibility, validate_request
from .engine import ValuationEngine, valuate

__all__ = [
    # Configuration
    "AdjustmentRates",
    "AggregationConfig",
    "ConfidenceConfig",
    "DEFAULT_ENGINE_CONFIG",
    "EngineConfig",
    "MIN_USABLE_COMPARABLES",
    "OutlierConfig",
    "SimilarityConfig",
    # Errors
    "DegenerateAggregationError",
    "InsufficientComparablesError",
    "InvalidInputError",
    "ValuationError",
    "ValuationErrorCode",
    # Models
    "AdjustedComparable",
    "AdjustmentApplied",
    "AdjustmentSkipped",
    "AggregateRange",
    "ComparableProperty",
    "ConfidenceBreakdown",
    "ConfidenceLevel",
    "IneligibilityReason",
    "IneligibleComparable",
    "MarketSummary",
    "OutlierScreening",
    "PropertyDetails",
    "PropertyType",
    "RemovedComparable",
    "ScoredComparable",
    "SkipReason",
    "ValuationFailure",
    "ValuationOutcome",
    "ValuationReport",
    "ValuationRequest",
    "ValuationResult",
    "ValuationSuccess",
    # Pipeline
    "SimilarityScorer",
    "AdjustmentEngine",
    "OutlierDetector",
    "WeightedAggregator",
    "normalised_weights",
    "ConfidenceScorer",
    "summarise_market",
    "EligibilityReport",
    "check_eligibility",
    "validate_request",
    "ValuationEngine",
    "valuate",
]

__version__ = "0.1.0"
