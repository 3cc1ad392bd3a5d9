"""
Adjustment Engine for the Valuation Engine

Converts attribute differences between subject and comparable into dollar
adjustments to the comparable's sale price:

    delta = (subject value - comparable value) * rate

A subject with one more bedroom than the comparable adjusts the
comparable's price upward by one bedroom rate. Rates are fixed, named
constants (see AdjustmentRates) so each delta can be traced to its rate.

The adjusted price is floored at ``min_price_fraction`` of the sale price,
so a comparable far larger than the subject cannot turn negative.
"""

import logging
from typing import Optional, Union

from .config import DEFAULT_ENGINE_CONFIG, EngineConfig
from .models import (
    ADJUSTABLE_ATTRIBUTES,
    AdjustedComparable,
    AdjustmentApplied,
    AdjustmentEntry,
    AdjustmentSkipped,
    IneligibilityReason,
    IneligibleComparable,
    PropertyDetails,
    ScoredComparable,
    SkipReason,
)


logger = logging.getLogger(__name__)


class AdjustmentEngine:
    """
    Produces an AdjustedComparable with an itemised audit trail.

    Comparables without a positive sale price are not adjusted; they are
    returned as IneligibleComparable for the orchestrator to drop.
    """

    def __init__(self, config: EngineConfig = DEFAULT_ENGINE_CONFIG):
        self._rates = config.adjustments

    def adjust(
        self,
        subject: PropertyDetails,
        scored: ScoredComparable,
    ) -> Union[AdjustedComparable, IneligibleComparable]:
        """
        Adjust a comparable's sale price towards the subject.

        Args:
            subject: The property being valued
            scored: Comparable with its computed similarity

        Returns:
            AdjustedComparable, or IneligibleComparable if unpriced
        """
        comparable = scored.comparable

        if comparable.sale_price is None:
            return IneligibleComparable(
                comparable=comparable,
                reason=IneligibilityReason.MISSING_SALE_PRICE,
                similarity_score=scored.similarity_score,
            )
        if comparable.sale_price <= 0:
            return IneligibleComparable(
                comparable=comparable,
                reason=IneligibilityReason.NON_POSITIVE_SALE_PRICE,
                similarity_score=scored.similarity_score,
            )

        entries: list[AdjustmentEntry] = []
        for attribute in ADJUSTABLE_ATTRIBUTES:
            entries.append(
                self._adjust_attribute(
                    attribute,
                    getattr(subject, attribute),
                    getattr(comparable, attribute),
                )
            )

        total = sum(e.delta for e in entries if isinstance(e, AdjustmentApplied))
        raw_price = float(comparable.sale_price) + total
        floor = self._rates.min_price_fraction * float(comparable.sale_price)

        adjusted = AdjustedComparable(
            comparable=comparable,
            similarity_score=scored.similarity_score,
            adjusted_price=max(raw_price, floor),
            adjustments=tuple(entries),
            price_floored=raw_price < floor,
        )
        if adjusted.price_floored:
            logger.warning(
                "Comparable %s adjusted to %.2f, floored at %.2f",
                comparable.id,
                raw_price,
                floor,
            )

        logger.debug(
            "Adjusted comparable %s: %.2f -> %.2f (%d skipped)",
            comparable.id,
            comparable.sale_price,
            adjusted.adjusted_price,
            adjusted.skipped_count,
        )
        return adjusted

    def _adjust_attribute(
        self,
        attribute: str,
        subject_value: Optional[float],
        comparable_value: Optional[float],
    ) -> AdjustmentEntry:
        """Build the audit entry for one attribute."""
        if subject_value is None and comparable_value is None:
            return AdjustmentSkipped(attribute=attribute, reason=SkipReason.MISSING_ON_BOTH)
        if subject_value is None:
            return AdjustmentSkipped(attribute=attribute, reason=SkipReason.MISSING_ON_SUBJECT)
        if comparable_value is None:
            return AdjustmentSkipped(attribute=attribute, reason=SkipReason.MISSING_ON_COMPARABLE)

        rate = self._rates.rate_for(attribute)
        difference = subject_value - comparable_value

        return AdjustmentApplied(
            attribute=attribute,
            subject_value=subject_value,
            comparable_value=comparable_value,
            difference=difference,
            rate=rate,
            delta=difference * rate,
        )
