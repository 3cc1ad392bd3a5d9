"""
Appraisal - Property Valuation Core

This package provides:
1. Valuation Engine (comparable sales range and confidence)
2. Comparable sources (where candidate sales come from)
3. Valuation service (status tracking and result storage around a run)
"""

from .valuation import (
    ComparableProperty,
    PropertyDetails,
    PropertyType,
    ValuationEngine,
    ValuationRequest,
    ValuationResult,
)
from .sources import ComparableSource, InMemoryComparableSource
from .service import (
    AppraisalStatus,
    InMemoryValuationStore,
    ValuationService,
    ValuationStore,
)

__all__ = [
    # Valuation Engine
    "ComparableProperty",
    "PropertyDetails",
    "PropertyType",
    "ValuationEngine",
    "ValuationRequest",
    "ValuationResult",
    # Sources
    "ComparableSource",
    "InMemoryComparableSource",
    # Service
    "AppraisalStatus",
    "InMemoryValuationStore",
    "ValuationService",
    "ValuationStore",
]
