"""Core data models shared by the lead pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, FrozenSet, Mapping, Optional, Tuple


@dataclass(frozen=True)
class Coordinate:
    lat: float
    lng: float

    def as_param(self) -> str:
        return f"{self.lat},{self.lng}"


@dataclass(frozen=True)
class DiscoveredPlace:
    """Minimal nearby-search hit; only lives until its details are fetched."""

    place_id: str
    name: Optional[str] = None
    vicinity: Optional[str] = None
    raw: Dict[str, Any] = field(default_factory=dict, repr=False, compare=False)


@dataclass(frozen=True)
class PlaceRecord:
    """Full Place Details snapshot for one business."""

    place_id: str
    name: Optional[str] = None
    address: Optional[str] = None
    phone: Optional[str] = None
    website: Optional[str] = None
    opening_hours: Optional[Tuple[str, ...]] = None
    photo_count: int = 0
    rating: Optional[float] = None
    review_count: Optional[int] = None
    categories: Tuple[str, ...] = ()
    business_status: Optional[str] = None
    raw: Dict[str, Any] = field(default_factory=dict, repr=False, compare=False)


@dataclass(frozen=True)
class QualityAssessment:
    score: float
    feedback: Optional[Tuple[str, ...]] = None
    consulting_message: Optional[str] = None


@dataclass(frozen=True)
class AddressCompleteness:
    street: bool
    number: bool
    neighborhood: bool
    city: bool
    state: bool
    postal_code: bool


@dataclass(frozen=True)
class AddressFormatting:
    capitalization: str
    punctuation: str
    abbreviations: str


@dataclass(frozen=True)
class AddressAccuracy:
    likely_real: bool
    confidence: str


@dataclass(frozen=True)
class AddressAssessment:
    score: float
    completeness: AddressCompleteness
    formatting: AddressFormatting
    accuracy: AddressAccuracy
    overall_quality: str
    recommendations: Tuple[str, ...] = ()


@dataclass(frozen=True)
class EnrichedLead:
    record: PlaceRecord
    quality: Optional[QualityAssessment] = None
    address: Optional[AddressAssessment] = None
    suggested_services: FrozenSet[str] = frozenset()
    errors: Mapping[str, str] = field(default_factory=dict)

    @property
    def score(self) -> Optional[float]:
        return self.quality.score if self.quality is not None else None


@dataclass(frozen=True)
class ServiceSuggestionRule:
    name: str
    predicate: Callable[[EnrichedLead], bool] = field(repr=False)


@dataclass(frozen=True)
class FetchFailure:
    """A place whose details could not be fetched; kept for the run summary."""

    place_id: str
    message: str
