"""Pytest configuration and shared fixtures."""

from __future__ import annotations

import asyncio

import pytest

from truckfinder.application.ports.geocoder_port import GeocoderPort
from truckfinder.application.ports.truck_catalog_port import TruckCatalogPort
from truckfinder.domain.entities.truck import Truck
from truckfinder.domain.errors import AddressNotFound
from truckfinder.domain.value_objects.coordinates import Coordinates
from truckfinder.domain.value_objects.location import ResolvedLocation, SuggestionCandidate

KIIT = Coordinates(latitude=20.3538, longitude=85.8169)

KM_PER_DEGREE_LAT = 6371.0 * 3.141592653589793 / 180


def north_of(origin: Coordinates, km: float) -> Coordinates:
    """A point exactly km due north of origin on the haversine sphere."""
    return Coordinates(latitude=origin.latitude + km / KM_PER_DEGREE_LAT, longitude=origin.longitude)


def make_truck(truck_id: str, location: Coordinates | None) -> Truck:
    return Truck(id=truck_id, name=f"Truck {truck_id}", coordinates=location, data={"_id": truck_id})


# ─── In-memory fakes ────────────────────────────────────────────────


class FakeGeocoder(GeocoderPort):
    """Records calls; search results can be held back per query with hold()."""

    name = "fake"

    def __init__(self, known: dict[str, ResolvedLocation] | None = None):
        self.known = known or {}
        self.search_calls: list[str] = []
        self.forward_calls: list[str] = []
        self.reverse_calls: list[Coordinates] = []
        self.search_error: Exception | None = None
        self.results: dict[str, list[SuggestionCandidate]] = {}
        self._gates: dict[str, asyncio.Event] = {}

    def hold(self, query: str) -> asyncio.Event:
        gate = asyncio.Event()
        self._gates[query] = gate
        return gate

    async def forward_geocode(self, address):
        self.forward_calls.append(address)
        if address.strip() in self.known:
            return self.known[address.strip()]
        raise AddressNotFound(address)

    async def reverse_geocode(self, coordinates):
        self.reverse_calls.append(coordinates)
        return f"Near {coordinates.format_fallback()}"

    async def search_candidates(self, query, limit):
        self.search_calls.append(query)
        gate = self._gates.get(query)
        if gate is not None:
            await gate.wait()
        if self.search_error is not None:
            raise self.search_error
        default = [
            SuggestionCandidate(address=f"{query} {i}", coordinates=north_of(KIIT, i))
            for i in range(1, 8)
        ]
        return self.results.get(query, default)[:limit]


class FakeTruckCatalog(TruckCatalogPort):
    def __init__(self, trucks: list[Truck], error: Exception | None = None):
        self._trucks = trucks
        self._error = error
        self.calls: list[tuple[Coordinates, float]] = []

    async def get_nearby(self, reference, radius_km):
        self.calls.append((reference, radius_km))
        if self._error is not None:
            raise self._error
        return list(self._trucks)


@pytest.fixture
def geocoder():
    return FakeGeocoder()


@pytest.fixture
def kiit():
    return KIIT
