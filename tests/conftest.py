"""
Shared fixtures for the valuation engine tests.
"""

import sys
from pathlib import Path

import pytest

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from appraisal.valuation import (
    ComparableProperty,
    PropertyDetails,
    PropertyType,
    ValuationRequest,
)


@pytest.fixture
def subject():
    """Standard subject: 3 bed, 2 bath, 150 m2 house."""
    return PropertyDetails(
        address="12 Kauri Road",
        suburb="Ponsonby",
        city="Auckland",
        property_type=PropertyType.HOUSE,
        bedrooms=3,
        bathrooms=2,
        floor_area=150,
    )


@pytest.fixture
def create_comp():
    """Factory fixture for creating comparable sales."""
    def _create(
        comp_id: str,
        sale_price=800_000,
        bedrooms=3,
        bathrooms=2,
        floor_area=150,
        land_size=None,
        year_built=None,
        property_type: PropertyType = PropertyType.HOUSE,
        distance_km=None,
        similarity_score=None,
    ) -> ComparableProperty:
        return ComparableProperty(
            id=comp_id,
            address=f"{comp_id} Test Street",
            suburb="Ponsonby",
            city="Auckland",
            property_type=property_type,
            bedrooms=bedrooms,
            bathrooms=bathrooms,
            floor_area=floor_area,
            land_size=land_size,
            year_built=year_built,
            sale_price=sale_price,
            distance_km=distance_km,
            similarity_score=similarity_score,
        )
    return _create


@pytest.fixture
def scenario_comps(create_comp):
    """Three comparables A, B and C around the standard subject."""
    return [
        create_comp("A", sale_price=800_000, bedrooms=3, bathrooms=2, floor_area=150),
        create_comp("B", sale_price=820_000, bedrooms=3, bathrooms=2, floor_area=155),
        create_comp("C", sale_price=790_000, bedrooms=2, bathrooms=1, floor_area=120),
    ]


@pytest.fixture
def create_request(subject):
    """Factory fixture for valuation requests against the standard subject."""
    def _create(comparables, appraisal_id: str = "appraisal-1", subject_override=None):
        return ValuationRequest(
            appraisal_id=appraisal_id,
            subject=subject_override or subject,
            comparables=tuple(comparables),
        )
    return _create
