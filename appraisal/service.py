"""
Valuation Service - Status Tracking Around a Valuation Run

Wraps the engine with the appraisal lifecycle:

    awaiting_valuation -> valuation_complete
                       -> error

The service fetches comparables from a ComparableSource, runs the engine
and records the outcome in a ValuationStore. The engine stays pure; all
IO happens here.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from appraisal.sources import ComparableSource
from appraisal.valuation.engine import ValuationEngine
from appraisal.valuation.models import (
    PropertyDetails,
    ValuationFailure,
    ValuationOutcome,
    ValuationRequest,
    ValuationResult,
)


logger = logging.getLogger(__name__)


class AppraisalStatus(Enum):
    """Lifecycle status of an appraisal's valuation."""
    AWAITING_VALUATION = "awaiting_valuation"
    VALUATION_COMPLETE = "valuation_complete"
    ERROR = "error"


@dataclass(frozen=True)
class StatusChange:
    """One recorded status transition."""
    status: AppraisalStatus
    reason: str
    metadata: dict[str, Any] = field(default_factory=dict)


# =============================================================================
# Store
# =============================================================================


class ValuationStore(ABC):
    """Persistence for appraisal status and valuation results."""

    @abstractmethod
    def update_status(
        self,
        appraisal_id: str,
        status: AppraisalStatus,
        reason: str,
        metadata: Optional[dict[str, Any]] = None,
    ) -> None:
        """Record a status transition."""
        pass

    @abstractmethod
    def save_result(self, appraisal_id: str, result: ValuationResult) -> None:
        """Store the valuation range and confidence."""
        pass


class InMemoryValuationStore(ValuationStore):
    """
    In-memory store for development and tests.

    Keeps the full status history per appraisal.
    """

    def __init__(self):
        self._history: dict[str, list[StatusChange]] = {}
        self._results: dict[str, ValuationResult] = {}

    def update_status(
        self,
        appraisal_id: str,
        status: AppraisalStatus,
        reason: str,
        metadata: Optional[dict[str, Any]] = None,
    ) -> None:
        self._history.setdefault(appraisal_id, []).append(
            StatusChange(status=status, reason=reason, metadata=dict(metadata or {}))
        )

    def save_result(self, appraisal_id: str, result: ValuationResult) -> None:
        self._results[appraisal_id] = result

    def status(self, appraisal_id: str) -> Optional[AppraisalStatus]:
        """Current status, or None if never recorded."""
        history = self._history.get(appraisal_id)
        return history[-1].status if history else None

    def history(self, appraisal_id: str) -> list[StatusChange]:
        return list(self._history.get(appraisal_id, []))

    def result(self, appraisal_id: str) -> Optional[ValuationResult]:
        return self._results.get(appraisal_id)


# =============================================================================
# Service
# =============================================================================


class ValuationService:
    """Runs valuations for stored appraisals."""

    def __init__(
        self,
        source: ComparableSource,
        store: ValuationStore,
        engine: Optional[ValuationEngine] = None,
    ):
        self._source = source
        self._store = store
        self._engine = engine or ValuationEngine()

    def valuate_appraisal(
        self,
        appraisal_id: str,
        subject: PropertyDetails,
        radius_km: Optional[float] = None,
    ) -> ValuationOutcome:
        """
        Value an appraisal and record the outcome.

        Args:
            appraisal_id: Appraisal being valued
            subject: The appraisal's property details
            radius_km: Comparable search radius (default: engine max radius)

        Returns:
            The engine outcome. Failures are also recorded as status "error".
        """
        radius = radius_km if radius_km is not None else self._engine.config.similarity.max_radius_km

        self._store.update_status(
            appraisal_id,
            AppraisalStatus.AWAITING_VALUATION,
            "Valuation processing started",
        )

        try:
            comparables = self._source.fetch_comparables(subject, radius)
            outcome = self._engine.valuate(
                ValuationRequest(
                    appraisal_id=appraisal_id,
                    subject=subject,
                    comparables=tuple(comparables),
                )
            )
        except Exception as exc:
            logger.exception("Valuation %s raised", appraisal_id)
            self._store.update_status(
                appraisal_id,
                AppraisalStatus.ERROR,
                "Valuation failed",
                {"error": str(exc)},
            )
            raise

        if isinstance(outcome, ValuationFailure):
            self._store.update_status(
                appraisal_id,
                AppraisalStatus.ERROR,
                outcome.reason,
                {"error_code": outcome.error_code.value, "details": list(outcome.details)},
            )
            return outcome

        self._store.save_result(appraisal_id, outcome.result)
        self._store.update_status(
            appraisal_id,
            AppraisalStatus.VALUATION_COMPLETE,
            "Valuation completed successfully",
            outcome.result.to_dict(),
        )
        logger.info("Appraisal %s valued from %d candidates", appraisal_id, len(comparables))
        return outcome
