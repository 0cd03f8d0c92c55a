"""Location value objects produced by geocoding and device lookups."""

from __future__ import annotations

from dataclasses import dataclass

from truckfinder.domain.value_objects.coordinates import Coordinates
from truckfinder.domain.value_objects.enums import GeolocationErrorKind


@dataclass(frozen=True)
class ResolvedLocation:
    address: str
    coordinates: Coordinates


@dataclass(frozen=True)
class SuggestionCandidate:
    """One address suggestion, in provider relevance order."""

    address: str
    coordinates: Coordinates

    def to_resolved(self) -> ResolvedLocation:
        return ResolvedLocation(address=self.address, coordinates=self.coordinates)


@dataclass(frozen=True)
class SearchQuery:
    text: str
    generation: int


@dataclass(frozen=True)
class PositionRequestOptions:
    """Options for a device position request.

    The defaults accept a cached device fix up to 5 minutes old.
    """

    high_accuracy: bool = True
    timeout_ms: int = 10_000
    max_cache_age_ms: int = 300_000

    def __post_init__(self) -> None:
        if self.timeout_ms < 0 or self.max_cache_age_ms < 0:
            raise ValueError("timeout_ms and max_cache_age_ms must be non-negative")


@dataclass(frozen=True)
class GeolocationOk:
    coordinates: Coordinates

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class GeolocationErr:
    reason: GeolocationErrorKind

    @property
    def ok(self) -> bool:
        return False


GeolocationOutcome = GeolocationOk | GeolocationErr
