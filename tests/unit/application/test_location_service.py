"""Tests for LocationService with in-memory fakes."""

from __future__ import annotations

import pytest

from conftest import KIIT, FakeTruckCatalog, make_truck, north_of
from truckfinder.adapters.device.fixed_location import FixedDeviceLocation
from truckfinder.application.use_cases.location_service import LocationService
from truckfinder.application.use_cases.suggestion_session import SuggestionSession
from truckfinder.domain.errors import AddressNotFound, GeolocationFailure, TruckCatalogError
from truckfinder.domain.value_objects.coordinates import Coordinates
from truckfinder.domain.value_objects.enums import GeolocationErrorKind
from truckfinder.domain.value_objects.location import ResolvedLocation


def _service(geocoder, trucks=(), error=None, **kwargs):
    catalog = FakeTruckCatalog(list(trucks), error=error)
    kwargs.setdefault("default_radius_km", 10)
    kwargs.setdefault("fallback_radius_km", 25)
    return LocationService(geocoder, catalog, **kwargs), catalog


# ─── Nearby trucks ──────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_find_nearby_ranks_within_default_radius(geocoder):
    trucks = [
        make_truck("b", north_of(KIIT, 6)),
        make_truck("a", north_of(KIIT, 1)),
        make_truck("far", north_of(KIIT, 40)),
    ]
    service, catalog = _service(geocoder, trucks)

    result = await service.find_nearby_trucks(KIIT)

    assert [t.truck.id for t in result.trucks] == ["a", "b"]
    assert result.radius_km == 10
    assert result.expanded is False
    assert catalog.calls == [(KIIT, 10)]


@pytest.mark.asyncio
async def test_find_nearby_widens_once_when_empty(geocoder):
    service, catalog = _service(geocoder, [make_truck("x", north_of(KIIT, 18))])

    result = await service.find_nearby_trucks(KIIT)

    assert result.expanded is True
    assert result.radius_km == 25
    assert [t.truck.id for t in result.trucks] == ["x"]
    assert [radius for _, radius in catalog.calls] == [10, 25]


@pytest.mark.asyncio
async def test_find_nearby_without_expand(geocoder):
    service, catalog = _service(geocoder, [make_truck("x", north_of(KIIT, 18))])
    result = await service.find_nearby_trucks(KIIT, expand=False)
    assert result.trucks == []
    assert len(catalog.calls) == 1


@pytest.mark.asyncio
async def test_find_nearby_does_not_shrink_large_radius(geocoder):
    service, catalog = _service(geocoder, [])
    result = await service.find_nearby_trucks(KIIT, radius_km=50)
    assert result.expanded is False
    assert result.radius_km == 50
    assert len(catalog.calls) == 1


@pytest.mark.asyncio
async def test_find_nearby_propagates_catalog_error(geocoder):
    service, _ = _service(geocoder, error=TruckCatalogError("backend down"))
    with pytest.raises(TruckCatalogError):
        await service.find_nearby_trucks(KIIT)


def test_nearby_is_pure_ranking(geocoder):
    service, catalog = _service(geocoder)
    trucks = [make_truck("b", north_of(KIIT, 3)), make_truck("a", north_of(KIIT, 2))]
    assert [t.truck.id for t in service.nearby(trucks, KIIT, 5)] == ["a", "b"]
    assert catalog.calls == []


# ─── Address operations ─────────────────────────────────────────────


@pytest.mark.asyncio
async def test_resolve_address_delegates(geocoder):
    target = ResolvedLocation(address="Patia", coordinates=Coordinates(latitude=20.35, longitude=85.82))
    geocoder.known["patia"] = target
    service, _ = _service(geocoder)
    assert await service.resolve_address("patia") == target


@pytest.mark.asyncio
async def test_resolve_unknown_address_raises(geocoder):
    service, _ = _service(geocoder)
    with pytest.raises(AddressNotFound):
        await service.resolve_address("nowhere at all")


@pytest.mark.asyncio
async def test_search_respects_limit(geocoder):
    service, _ = _service(geocoder)
    assert len(await service.search("pizza", limit=2)) == 2


def test_open_suggestions_returns_fresh_sessions(geocoder):
    service, _ = _service(geocoder)
    first = service.open_suggestions(debounce_ms=10)
    second = service.open_suggestions()
    assert isinstance(first, SuggestionSession)
    assert first is not second


def test_default_location_is_kiit_campus(geocoder):
    service, _ = _service(geocoder)
    location = service.default_location()
    assert location.coordinates == Coordinates(latitude=20.3538431, longitude=85.8169059)
    assert "KIIT" in location.address


# ─── Current location ───────────────────────────────────────────────


@pytest.mark.asyncio
async def test_use_current_location(geocoder):
    service, _ = _service(geocoder)
    location = await service.use_current_location(FixedDeviceLocation(KIIT))
    assert location.coordinates == KIIT
    assert location.address.startswith("Near ")


@pytest.mark.asyncio
async def test_use_current_location_unsupported(geocoder):
    service, _ = _service(geocoder)
    with pytest.raises(GeolocationFailure) as exc_info:
        await service.use_current_location(FixedDeviceLocation())
    assert exc_info.value.kind is GeolocationErrorKind.UNSUPPORTED
