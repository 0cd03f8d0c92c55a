"""LocationService — the location operations the rest of the app calls.

Composes geocoding, device geolocation, address suggestions and proximity
ranking behind one object.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable

from truckfinder.application.ports.device_location_port import DeviceLocationPort
from truckfinder.application.ports.geocoder_port import GeocoderPort
from truckfinder.application.ports.truck_catalog_port import TruckCatalogPort
from truckfinder.application.use_cases.geolocation import GeolocationProvider
from truckfinder.application.use_cases.suggestion_session import SuggestionSession
from truckfinder.config import settings
from truckfinder.domain.entities.truck import Truck, TruckWithDistance
from truckfinder.domain.policies.proximity import filter_and_sort
from truckfinder.domain.value_objects.coordinates import Coordinates
from truckfinder.domain.value_objects.location import (
    PositionRequestOptions,
    ResolvedLocation,
    SuggestionCandidate,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NearbySearch:
    """Result of a nearby-trucks search."""

    reference: Coordinates
    radius_km: float
    trucks: list[TruckWithDistance]
    expanded: bool  # True when the fallback radius was used


class LocationService:
    def __init__(
        self,
        geocoder: GeocoderPort,
        truck_catalog: TruckCatalogPort,
        default_radius_km: float | None = None,
        fallback_radius_km: float | None = None,
        default_location: ResolvedLocation | None = None,
    ):
        self._geocoder = geocoder
        self._catalog = truck_catalog
        self._default_radius_km = (
            settings.default_radius_km if default_radius_km is None else default_radius_km
        )
        self._fallback_radius_km = (
            settings.fallback_radius_km if fallback_radius_km is None else fallback_radius_km
        )
        self._default_location = default_location or ResolvedLocation(
            address=settings.default_address,
            coordinates=Coordinates(
                latitude=settings.default_latitude,
                longitude=settings.default_longitude,
            ),
        )

    @property
    def geocoder(self) -> GeocoderPort:
        return self._geocoder

    def default_location(self) -> ResolvedLocation:
        """Reference point used when the device location cannot be obtained."""
        return self._default_location

    async def resolve_address(self, text: str) -> ResolvedLocation:
        """Raises AddressNotFound, NetworkError or RateLimited."""
        return await self._geocoder.forward_geocode(text)

    async def reverse_geocode(self, coordinates: Coordinates) -> str:
        return await self._geocoder.reverse_geocode(coordinates)

    async def search(self, query: str, limit: int | None = None) -> list[SuggestionCandidate]:
        """One-shot candidate search, without debouncing."""
        return await self._geocoder.search_candidates(
            query, settings.suggestion_limit if limit is None else limit
        )

    def open_suggestions(self, **overrides) -> SuggestionSession:
        """A new suggestion session for one search box."""
        return SuggestionSession(self._geocoder, **overrides)

    async def use_current_location(
        self,
        device: DeviceLocationPort,
        options: PositionRequestOptions | None = None,
    ) -> ResolvedLocation:
        """Raises GeolocationFailure."""
        provider = GeolocationProvider(device, self._geocoder)
        return await provider.get_current_location_with_address(options)

    def nearby(
        self,
        trucks: Iterable[Truck],
        reference: Coordinates,
        radius_km: float,
    ) -> list[TruckWithDistance]:
        return filter_and_sort(trucks, reference, radius_km)

    async def find_nearby_trucks(
        self,
        reference: Coordinates,
        radius_km: float | None = None,
        expand: bool = True,
    ) -> NearbySearch:
        """Fetch trucks around reference and rank them locally.

        When nothing is within the radius and expand is set, widens once to
        the fallback radius.

        Raises:
            TruckCatalogError: if the truck backend fails.
        """
        radius = self._default_radius_km if radius_km is None else radius_km
        ranked = self.nearby(await self._catalog.get_nearby(reference, radius), reference, radius)

        if ranked or not expand or self._fallback_radius_km <= radius:
            return NearbySearch(reference=reference, radius_km=radius, trucks=ranked, expanded=False)

        logger.info(
            "No trucks within %.1f km of (%f, %f), widening to %.1f km",
            radius, reference.latitude, reference.longitude, self._fallback_radius_km,
        )
        wider = self._fallback_radius_km
        ranked = self.nearby(await self._catalog.get_nearby(reference, wider), reference, wider)
        return NearbySearch(reference=reference, radius_km=wider, trucks=ranked, expanded=True)
