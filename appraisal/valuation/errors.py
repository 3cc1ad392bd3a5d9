"""
Valuation error taxonomy.

InvalidInputError and InsufficientComparablesError are expected outcomes and
are reported to callers as a ValuationFailure. DegenerateAggregationError
signals a defect and is allowed to propagate.
"""

from __future__ import annotations

from enum import Enum
from typing import Iterable


class ValuationErrorCode(Enum):
    """Machine-readable failure codes."""

    INVALID_INPUT = "INVALID_INPUT"
    INSUFFICIENT_COMPARABLES = "INSUFFICIENT_COMPARABLES"
    DEGENERATE_AGGREGATION = "DEGENERATE_AGGREGATION"


class ValuationError(Exception):
    """Base class for valuation failures."""

    error_code: ValuationErrorCode

    def __init__(self, message: str, details: Iterable[str] = ()) -> None:
        super().__init__(message)
        self.message = message
        self.details: tuple[str, ...] = tuple(details)


class InvalidInputError(ValuationError):
    """Malformed subject or comparable data. Not retryable."""

    error_code = ValuationErrorCode.INVALID_INPUT


class InsufficientComparablesError(ValuationError):
    """Fewer than the minimum number of usable comparables."""

    error_code = ValuationErrorCode.INSUFFICIENT_COMPARABLES

    def __init__(
        self,
        message: str,
        usable_count: int,
        required: int,
        details: Iterable[str] = (),
    ) -> None:
        super().__init__(message, details)
        self.usable_count = usable_count
        self.required = required


class DegenerateAggregationError(ValuationError):
    """Aggregation had nothing to weight. Indicates a defect upstream."""

    error_code = ValuationErrorCode.DEGENERATE_AGGREGATION
