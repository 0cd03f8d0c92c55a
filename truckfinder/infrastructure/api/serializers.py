"""Response shaping for location values — plain dicts, JSON-ready."""

from __future__ import annotations

from typing import Any

from fastapi import HTTPException

from truckfinder.domain.entities.truck import TruckWithDistance
from truckfinder.domain.errors import AddressNotFound, GeocodingError, RateLimited
from truckfinder.domain.policies.proximity import format_distance
from truckfinder.domain.value_objects.coordinates import Coordinates
from truckfinder.domain.value_objects.location import ResolvedLocation, SuggestionCandidate


def serialize_coordinates(c: Coordinates) -> dict[str, float]:
    return {"latitude": c.latitude, "longitude": c.longitude}


def serialize_location(location: ResolvedLocation | SuggestionCandidate) -> dict[str, Any]:
    return {
        "address": location.address,
        "coordinates": serialize_coordinates(location.coordinates),
    }


def serialize_truck(item: TruckWithDistance) -> dict[str, Any]:
    """The backend record, plus derived distance fields."""
    return {
        **item.truck.data,
        "id": item.truck.id,
        "name": item.truck.name,
        "distance_km": item.distance_km,
        "distance": format_distance(item.distance_km),
        "within_radius": item.within_radius,
    }


def serialize_geocoding_error(e: GeocodingError) -> dict[str, str]:
    return {"kind": e.kind, "message": str(e)}


def geocoding_http_error(e: GeocodingError) -> HTTPException:
    """Map a geocoding failure to an HTTP error the UI can branch on."""
    if isinstance(e, AddressNotFound):
        status = 404
    elif isinstance(e, RateLimited):
        status = 429
    else:
        status = 502
    return HTTPException(status_code=status, detail=serialize_geocoding_error(e))
