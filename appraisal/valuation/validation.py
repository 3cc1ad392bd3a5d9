"""
Valuation Input Validation

Shape checks on the subject property and candidate comparables, plus the
eligibility check used before a valuation is requested.

Validation never repairs data: a bad field is reported, not defaulted.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Optional

from .config import MIN_USABLE_COMPARABLES
from .errors import InvalidInputError
from .models import ComparableProperty, PropertyDetails, PropertyType, ValuationRequest


MIN_ADDRESS_LENGTH = 5
MIN_YEAR_BUILT = 1800


# =============================================================================
# Field Checks
# =============================================================================


def _check_non_negative(
    errors: list[str],
    prefix: str,
    name: str,
    value: Optional[float],
) -> None:
    if value is None:
        return
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        errors.append(f"{prefix}{name} must be a number: {value!r}")
    elif math.isnan(value) or math.isinf(value):
        errors.append(f"{prefix}{name} must be finite")
    elif value < 0:
        errors.append(f"{prefix}{name} must not be negative: {value}")


def _check_attributes(
    errors: list[str],
    prefix: str,
    item: Any,
    reference_year: Optional[int],
) -> None:
    if not isinstance(item.property_type, PropertyType):
        errors.append(f"{prefix}property_type is invalid: {item.property_type!r}")

    if item.bedrooms is not None and (
        isinstance(item.bedrooms, bool) or not isinstance(item.bedrooms, int)
    ):
        errors.append(f"{prefix}bedrooms must be a whole number: {item.bedrooms!r}")
    else:
        _check_non_negative(errors, prefix, "bedrooms", item.bedrooms)

    _check_non_negative(errors, prefix, "bathrooms", item.bathrooms)
    _check_non_negative(errors, prefix, "land_size", item.land_size)
    _check_non_negative(errors, prefix, "floor_area", item.floor_area)

    year = item.year_built
    if year is not None:
        if isinstance(year, bool) or not isinstance(year, int):
            errors.append(f"{prefix}year_built must be a whole number: {year!r}")
        elif year < MIN_YEAR_BUILT:
            errors.append(f"{prefix}year_built must be {MIN_YEAR_BUILT} or later: {year}")
        elif reference_year is not None and year > reference_year:
            errors.append(f"{prefix}year_built cannot be in the future: {year}")


def property_details_errors(
    subject: PropertyDetails,
    reference_year: Optional[int] = None,
) -> list[str]:
    """
    Collect validation errors for the subject property.

    Args:
        subject: Subject property
        reference_year: Latest acceptable year built, if enforced

    Returns:
        List of error messages (empty when valid)
    """
    errors: list[str] = []

    if not subject.address or len(subject.address.strip()) < MIN_ADDRESS_LENGTH:
        errors.append(
            f"address is required and must be at least {MIN_ADDRESS_LENGTH} characters"
        )
    if not subject.suburb or not subject.suburb.strip():
        errors.append("suburb is required")
    if not subject.city or not subject.city.strip():
        errors.append("city is required")

    _check_attributes(errors, "", subject, reference_year)
    return errors


def comparable_errors(
    comparable: ComparableProperty,
    reference_year: Optional[int] = None,
) -> list[str]:
    """Collect validation errors for a single comparable."""
    errors: list[str] = []
    prefix = f"comparable {comparable.id or '<missing id>'}: "

    if not comparable.id or not str(comparable.id).strip():
        errors.append(f"{prefix}id is required")
    if not comparable.address or not comparable.address.strip():
        errors.append(f"{prefix}address is required")
    if not comparable.suburb or not comparable.suburb.strip():
        errors.append(f"{prefix}suburb is required")
    if not comparable.city or not comparable.city.strip():
        errors.append(f"{prefix}city is required")

    _check_attributes(errors, prefix, comparable, reference_year)
    _check_non_negative(errors, prefix, "sale_price", comparable.sale_price)
    _check_non_negative(errors, prefix, "distance_km", comparable.distance_km)

    return errors


def validate_property_details(
    subject: PropertyDetails,
    reference_year: Optional[int] = None,
) -> None:
    """
    Raises:
        InvalidInputError: If the subject is malformed
    """
    errors = property_details_errors(subject, reference_year)
    if errors:
        raise InvalidInputError("Invalid property details", details=errors)


def validate_request(
    request: ValuationRequest,
    reference_year: Optional[int] = None,
) -> None:
    """
    Validate a complete valuation request.

    Checks the subject, every comparable, and that comparable ids are
    unique. Does not check the comparable count; that is reported
    separately as insufficient comparables.

    Raises:
        InvalidInputError: With every problem found listed in ``details``
    """
    errors: list[str] = []

    if not request.appraisal_id or not str(request.appraisal_id).strip():
        errors.append("appraisal_id is required")

    errors.extend(property_details_errors(request.subject, reference_year))

    seen: set[str] = set()
    for comparable in request.comparables:
        errors.extend(comparable_errors(comparable, reference_year))
        if comparable.id in seen:
            errors.append(f"comparable {comparable.id}: duplicate id")
        seen.add(comparable.id)

    if errors:
        raise InvalidInputError("Invalid valuation request", details=errors)


# =============================================================================
# Eligibility
# =============================================================================


@dataclass(frozen=True)
class EligibilityReport:
    """Whether a request can be valued, and if not, why not."""
    eligible: bool
    reasons: tuple[str, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict[str, Any]:
        return {"eligible": self.eligible, "reasons": list(self.reasons)}


def check_eligibility(
    request: ValuationRequest,
    reference_year: Optional[int] = None,
) -> EligibilityReport:
    """
    Check whether a request has what a valuation needs.

    Reports missing subject details and too few priced comparables
    without running the valuation.
    """
    reasons: list[str] = []
    subject = request.subject

    if not subject.address or not subject.address.strip():
        reasons.append("Property address is missing")
    if not subject.suburb or not subject.suburb.strip():
        reasons.append("Property suburb is missing")
    if not subject.city or not subject.city.strip():
        reasons.append("Property city is missing")
    if not isinstance(subject.property_type, PropertyType):
        reasons.append("Property type is missing")

    # Field-level problems only once the required details are present
    if not reasons:
        reasons.extend(property_details_errors(subject, reference_year))

    usable = request.usable_comparable_count
    if usable < MIN_USABLE_COMPARABLES:
        reasons.append(
            f"Not enough comparable properties ({usable}/{MIN_USABLE_COMPARABLES} minimum)"
        )

    return EligibilityReport(eligible=not reasons, reasons=tuple(reasons))
