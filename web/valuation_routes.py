"""
Valuation Routes - Web API for Property Valuations

JSON API over the valuation engine. Request bodies use camelCase keys;
snake_case is accepted too.

Status codes:
- 200: valuation produced
- 400: not enough usable comparables
- 422: malformed input
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Any, List, Optional
from uuid import UUID

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from appraisal.valuation import (
    ComparableProperty,
    PropertyDetails,
    PropertyType,
    ValuationEngine,
    ValuationErrorCode,
    ValuationFailure,
    ValuationRequest,
    check_eligibility,
)
from appraisal.valuation.models import ValuationSuccess


logger = logging.getLogger(__name__)


# =============================================================================
# Router Setup
# =============================================================================

router = APIRouter(prefix="/api/valuations", tags=["valuation"])

FAILURE_STATUS_CODES = {
    ValuationErrorCode.INVALID_INPUT: 422,
    ValuationErrorCode.INSUFFICIENT_COMPARABLES: 400,
}


# =============================================================================
# Request Models
# =============================================================================


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def _parse_property_type(value: str) -> PropertyType:
    property_type = PropertyType.from_string(value)
    if property_type is None:
        allowed = ", ".join(pt.value for pt in PropertyType)
        raise ValueError(f"Unknown property type '{value}' (expected one of: {allowed})")
    return property_type


class PropertyAttributesInput(CamelModel):
    """Attributes shared by the subject and its comparables."""
    property_type: str = Field(min_length=1)
    bedrooms: Optional[int] = Field(default=None, ge=0)
    bathrooms: Optional[float] = Field(default=None, ge=0)
    land_size: Optional[float] = Field(default=None, ge=0)
    floor_area: Optional[float] = Field(default=None, ge=0)
    year_built: Optional[int] = Field(default=None, ge=1800)

    @field_validator("property_type")
    @classmethod
    def known_property_type(cls, value: str) -> str:
        _parse_property_type(value)
        return value

    @field_validator("year_built")
    @classmethod
    def year_not_in_future(cls, value: Optional[int]) -> Optional[int]:
        if value is not None and value > date.today().year:
            raise ValueError("Year cannot be in the future")
        return value


class PropertyDetailsInput(PropertyAttributesInput):
    """Subject property details."""
    address: str = Field(min_length=5)
    suburb: str = Field(min_length=1)
    city: str = Field(min_length=1)
    postcode: Optional[str] = None

    def to_domain(self) -> PropertyDetails:
        return PropertyDetails(
            address=self.address,
            suburb=self.suburb,
            city=self.city,
            property_type=_parse_property_type(self.property_type),
            bedrooms=self.bedrooms,
            bathrooms=self.bathrooms,
            land_size=self.land_size,
            floor_area=self.floor_area,
            year_built=self.year_built,
            postcode=self.postcode,
        )


class ComparablePropertyInput(PropertyAttributesInput):
    """A candidate comparable sale."""
    id: UUID
    address: str = Field(min_length=1)
    suburb: str = Field(min_length=1)
    city: str = Field(min_length=1)
    sale_date: Optional[date] = None
    sale_price: Optional[float] = Field(default=None, ge=0)
    similarity_score: Optional[float] = Field(default=None, ge=0, le=100)
    distance_km: Optional[float] = Field(default=None, ge=0)

    def to_domain(self) -> ComparableProperty:
        return ComparableProperty(
            id=str(self.id),
            address=self.address,
            suburb=self.suburb,
            city=self.city,
            property_type=_parse_property_type(self.property_type),
            bedrooms=self.bedrooms,
            bathrooms=self.bathrooms,
            land_size=self.land_size,
            floor_area=self.floor_area,
            year_built=self.year_built,
            sale_date=self.sale_date,
            sale_price=self.sale_price,
            similarity_score=self.similarity_score,
            distance_km=self.distance_km,
        )


class ValuationRequestInput(CamelModel):
    """Request body for a valuation."""
    appraisal_id: UUID
    property_details: PropertyDetailsInput
    comparable_properties: List[ComparablePropertyInput] = []

    def to_domain(self) -> ValuationRequest:
        return ValuationRequest(
            appraisal_id=str(self.appraisal_id),
            subject=self.property_details.to_domain(),
            comparables=tuple(c.to_domain() for c in self.comparable_properties),
        )


# =============================================================================
# Response Helpers
# =============================================================================


def camelize(value: Any) -> Any:
    """Recursively convert dict keys from snake_case to camelCase."""
    if isinstance(value, dict):
        return {to_camel(k): camelize(v) for k, v in value.items()}
    if isinstance(value, list):
        return [camelize(v) for v in value]
    return value


def success_payload(outcome: ValuationSuccess) -> dict[str, Any]:
    """Response data for a completed valuation."""
    result = outcome.result
    report = outcome.report
    return {
        "valuationLow": result.valuation_low,
        "valuationHigh": result.valuation_high,
        "valuationConfidence": result.valuation_confidence,
        "confidenceLevel": report.confidence.level.value,
        "valuationEstimate": report.valuation_estimate,
        "weightedStd": round(report.aggregate.weighted_std, 2),
        "configVersion": report.config_version,
        "outlierScreeningApplied": report.screening.screened,
        "adjustedComparables": camelize(report.comparable_rows()),
        "ineligibleComparables": camelize(report.to_dict()["ineligible"]),
        "marketSummary": camelize(report.market.to_dict()),
        "confidenceBreakdown": camelize(report.confidence.to_dict()),
    }


def failure_response(failure: ValuationFailure) -> JSONResponse:
    return JSONResponse(
        status_code=FAILURE_STATUS_CODES.get(failure.error_code, 400),
        content={"success": False, **failure.to_dict()},
    )


def _engine_for(request: Request) -> ValuationEngine:
    # Year bound and recency follow the calendar, not process start
    today = date.today()
    return ValuationEngine(
        request.app.state.engine_config,
        reference_year=today.year,
        valuation_date=today,
    )


# =============================================================================
# Endpoints
# =============================================================================


@router.post("")
def create_valuation(body: ValuationRequestInput, request: Request):
    """
    Value a subject property from its comparable sales.

    Returns:
        - success: true with the range, confidence and audit detail
        - success: false with error_code on failure
    """
    outcome = _engine_for(request).valuate(body.to_domain())

    if isinstance(outcome, ValuationFailure):
        return failure_response(outcome)

    return JSONResponse({"success": True, "data": success_payload(outcome)})


@router.post("/eligibility")
def valuation_eligibility(body: ValuationRequestInput):
    """Check whether the request has what a valuation needs."""
    report = check_eligibility(body.to_domain(), reference_year=date.today().year)
    if not report.eligible:
        logger.info(
            "Appraisal %s not eligible: %s",
            body.appraisal_id,
            "; ".join(report.reasons),
        )
    return report.to_dict()
