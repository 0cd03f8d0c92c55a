"""Location endpoints — geocode, reverse geocode, one-shot search, device fix."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field

from truckfinder.adapters.device.fixed_location import FixedDeviceLocation
from truckfinder.application.use_cases.location_service import LocationService
from truckfinder.domain.errors import GeocodingError, GeolocationFailure
from truckfinder.domain.value_objects.coordinates import Coordinates
from truckfinder.infrastructure.api.dependencies import get_location_service
from truckfinder.infrastructure.api.serializers import (
    geocoding_http_error,
    serialize_coordinates,
    serialize_location,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/location", tags=["location"])


class DeviceFix(BaseModel):
    """What the browser's location API produced for the client."""

    supported: bool = True
    latitude: float | None = Field(default=None, ge=-90, le=90)
    longitude: float | None = Field(default=None, ge=-180, le=180)
    error_code: int | None = Field(default=None, ge=1, le=3)


@router.get("/geocode")
async def geocode(
    address: str = Query(..., min_length=1),
    service: LocationService = Depends(get_location_service),
):
    """Resolve a free-text address to its best match."""
    try:
        location = await service.resolve_address(address)
    except GeocodingError as e:
        raise geocoding_http_error(e)
    return serialize_location(location)


@router.get("/reverse")
async def reverse_geocode(
    lat: float = Query(..., ge=-90, le=90),
    lng: float = Query(..., ge=-180, le=180),
    service: LocationService = Depends(get_location_service),
):
    """Display address for coordinates; falls back to a coordinate string."""
    coordinates = Coordinates(latitude=lat, longitude=lng)
    address = await service.reverse_geocode(coordinates)
    return {"address": address, "coordinates": serialize_coordinates(coordinates)}


@router.get("/search")
async def search_addresses(
    q: str = Query(""),
    limit: int = Query(5, ge=1, le=20),
    service: LocationService = Depends(get_location_service),
):
    """Address candidates for a partial query (no debouncing)."""
    try:
        candidates = await service.search(q, limit)
    except GeocodingError as e:
        raise geocoding_http_error(e)
    return {
        "query": q,
        "total": len(candidates),
        "candidates": [serialize_location(c) for c in candidates],
    }


@router.get("/default")
async def default_location(service: LocationService = Depends(get_location_service)):
    """Reference point used when the device location is unavailable."""
    return serialize_location(service.default_location())


@router.post("/current")
async def current_location(
    fix: DeviceFix,
    service: LocationService = Depends(get_location_service),
):
    """Resolve a device fix reported by the client into an address."""
    if not fix.supported:
        device = FixedDeviceLocation()
    elif fix.error_code is not None:
        device = FixedDeviceLocation(error_code=fix.error_code)
    elif fix.latitude is None or fix.longitude is None:
        raise HTTPException(status_code=422, detail="latitude and longitude are required")
    else:
        device = FixedDeviceLocation(Coordinates(latitude=fix.latitude, longitude=fix.longitude))

    try:
        location = await service.use_current_location(device)
    except GeolocationFailure as e:
        raise HTTPException(
            status_code=422,
            detail={"kind": e.kind.value, "message": e.kind.hint},
        )
    return serialize_location(location)
