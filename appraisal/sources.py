"""
Comparable sources.

Where candidate comparable sales come from. The engine itself never fetches
data; the service asks a source for candidates and passes them in.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Iterable, Optional

from appraisal.valuation.models import ComparableProperty, PropertyDetails


class ComparableSource(ABC):
    """Abstract base class for comparable sale providers."""

    @abstractmethod
    def fetch_comparables(
        self,
        subject: PropertyDetails,
        radius_km: float,
    ) -> list[ComparableProperty]:
        """
        Fetch candidate comparables for a subject property.

        Args:
            subject: The property being valued
            radius_km: Search radius around the subject

        Returns:
            Candidate comparables. Similarity is recomputed by the engine,
            so any score a provider supplies is informational only.
        """
        pass


class InMemoryComparableSource(ComparableSource):
    """
    Comparable source backed by a fixed list.

    Used for development and tests. Candidates with an unknown distance are
    returned; those beyond the radius are not.
    """

    def __init__(self, comparables: Optional[Iterable[ComparableProperty]] = None):
        self._comparables: list[ComparableProperty] = list(comparables or [])

    def add(self, comparable: ComparableProperty) -> None:
        """Register another candidate sale."""
        self._comparables.append(comparable)

    def fetch_comparables(
        self,
        subject: PropertyDetails,
        radius_km: float,
    ) -> list[ComparableProperty]:
        return [
            c for c in self._comparables
            if c.distance_km is None or c.distance_km <= radius_km
        ]

    def __len__(self) -> int:
        return len(self._comparables)
