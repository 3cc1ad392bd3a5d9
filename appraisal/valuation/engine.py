"""
Valuation Orchestrator

Runs the full pipeline for one request:

1. VALIDATE - Reject malformed subject or comparables
2. COUNT - Require the minimum number of priced comparables
3. SCORE - Recompute similarity for every comparable
4. ADJUST - Adjust priced comparables, drop ineligible ones
5. SCREEN - Remove outliers by median absolute deviation
6. AGGREGATE - Similarity-weighted range
7. CONFIDENCE - Score the result
8. ASSEMBLE - ValuationResult plus audit report

The engine is pure: no IO, no clock reads, no shared mutable state. The
reference year and valuation date are passed in by the caller. The
same request and configuration always produce the same result.
"""

import logging
from datetime import date
from typing import Optional, Union

from .adjustments import AdjustmentEngine
from .aggregation import WeightedAggregator
from .confidence import ConfidenceScorer
from .config import DEFAULT_ENGINE_CONFIG, MIN_USABLE_COMPARABLES, EngineConfig
from .errors import InsufficientComparablesError, InvalidInputError
from .market import summarise_market
from .models import (
    AdjustedComparable,
    IneligibilityReason,
    IneligibleComparable,
    ValuationFailure,
    ValuationOutcome,
    ValuationReport,
    ValuationRequest,
    ValuationResult,
    ValuationSuccess,
)
from .outliers import OutlierDetector
from .similarity import SimilarityScorer
from .validation import validate_request


logger = logging.getLogger(__name__)


class ValuationEngine:
    """
    Complete valuation pipeline for a subject and its comparables.

    Holds only an immutable configuration; a single instance can serve
    concurrent requests.
    """

    def __init__(
        self,
        config: EngineConfig = DEFAULT_ENGINE_CONFIG,
        reference_year: Optional[int] = None,
        valuation_date: Optional[date] = None,
    ):
        """
        Initialize valuation engine.

        Args:
            config: Parameter set for every stage
            reference_year: Latest acceptable year built. Not enforced when
                None; the HTTP boundary supplies the current year.
            valuation_date: Date sale recency is measured from. Recency
                does not affect confidence when None.
        """
        self._config = config
        self._reference_year = reference_year
        self._valuation_date = valuation_date

        self._scorer = SimilarityScorer(config)
        self._adjuster = AdjustmentEngine(config)
        self._detector = OutlierDetector(config)
        self._aggregator = WeightedAggregator(config)
        self._confidence = ConfidenceScorer(config)

    @property
    def config(self) -> EngineConfig:
        return self._config

    def valuate(self, request: ValuationRequest) -> ValuationOutcome:
        """
        Produce a valuation range and confidence for the request.

        Invalid input and insufficient comparables are returned as a
        ValuationFailure. DegenerateAggregationError is not caught.

        Args:
            request: Subject plus candidate comparables

        Returns:
            ValuationSuccess or ValuationFailure
        """
        try:
            return self.valuate_or_raise(request)
        except (InvalidInputError, InsufficientComparablesError) as exc:
            logger.warning(
                "Valuation %s failed: %s (%s)",
                request.appraisal_id,
                exc.message,
                exc.error_code.value,
            )
            return ValuationFailure(
                reason=exc.message,
                error_code=exc.error_code,
                details=exc.details,
            )

    def valuate_or_raise(self, request: ValuationRequest) -> ValuationSuccess:
        """
        As valuate(), but raises the typed error instead of returning it.

        Raises:
            InvalidInputError: Malformed subject or comparables
            InsufficientComparablesError: Fewer than the minimum usable
            DegenerateAggregationError: Nothing to weight (defect)
        """
        validate_request(request, self._reference_year)

        usable = request.usable_comparable_count
        if usable < MIN_USABLE_COMPARABLES:
            raise InsufficientComparablesError(
                f"At least {MIN_USABLE_COMPARABLES} comparable properties with a"
                f" sale price are required ({usable} provided)",
                usable_count=usable,
                required=MIN_USABLE_COMPARABLES,
            )

        adjusted, ineligible = self._score_and_adjust(request)
        logger.debug(
            "Valuation %s: %d adjusted, %d ineligible",
            request.appraisal_id,
            len(adjusted),
            len(ineligible),
        )

        if len(adjusted) < MIN_USABLE_COMPARABLES:
            raise InsufficientComparablesError(
                f"At least {MIN_USABLE_COMPARABLES} eligible comparable properties"
                f" are required ({len(adjusted)} eligible)",
                usable_count=len(adjusted),
                required=MIN_USABLE_COMPARABLES,
                details=tuple(f"{i.id}: {i.reason.value}" for i in ineligible),
            )

        screening = self._detector.filter(adjusted)
        survivors = screening.survivors

        aggregate = self._aggregator.aggregate(survivors)
        confidence = self._confidence.score(
            survivors,
            removed_count=screening.removed_count,
            screening_applied=screening.screened,
            aggregate=aggregate,
            valuation_date=self._valuation_date,
        )

        result = ValuationResult(
            valuation_low=aggregate.low,
            valuation_high=aggregate.high,
            valuation_confidence=confidence.score,
        )
        report = ValuationReport(
            appraisal_id=request.appraisal_id,
            config_version=self._config.version,
            aggregate=aggregate,
            screening=screening,
            confidence=confidence,
            market=summarise_market(survivors, aggregate),
            ineligible=tuple(ineligible),
        )

        logger.info(
            "Valuation %s complete: %d-%d confidence %d from %d comparables"
            " (%d removed)",
            request.appraisal_id,
            result.valuation_low,
            result.valuation_high,
            result.valuation_confidence,
            len(survivors),
            screening.removed_count,
        )
        return ValuationSuccess(result=result, report=report)

    def _score_and_adjust(
        self,
        request: ValuationRequest,
    ) -> tuple[list[AdjustedComparable], list[IneligibleComparable]]:
        """Score every comparable, then adjust those that can contribute."""
        subject = request.subject
        adjusted: list[AdjustedComparable] = []
        ineligible: list[IneligibleComparable] = []

        for comparable in request.comparables:
            scored = self._scorer.annotate(subject, comparable)

            outcome: Union[AdjustedComparable, IneligibleComparable]
            outcome = self._adjuster.adjust(subject, scored)
            if isinstance(outcome, IneligibleComparable):
                ineligible.append(outcome)
                continue

            exclusion = self._scorer.exclusion_reason(subject, comparable)
            if exclusion is None and scored.similarity_score <= 0:
                exclusion = IneligibilityReason.ZERO_SIMILARITY
            if exclusion is not None:
                ineligible.append(
                    IneligibleComparable(
                        comparable=comparable,
                        reason=exclusion,
                        similarity_score=scored.similarity_score,
                    )
                )
                continue

            adjusted.append(outcome)

        return adjusted, ineligible


def valuate(
    request: ValuationRequest,
    config: EngineConfig = DEFAULT_ENGINE_CONFIG,
) -> ValuationOutcome:
    """Convenience wrapper: valuate with a one-off engine."""
    return ValuationEngine(config).valuate(request)
