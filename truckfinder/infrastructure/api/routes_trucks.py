"""Truck proximity endpoint — nearby trucks ranked by distance."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query

from truckfinder.application.use_cases.location_service import LocationService
from truckfinder.domain.errors import TruckCatalogError
from truckfinder.domain.value_objects.coordinates import Coordinates
from truckfinder.infrastructure.api.dependencies import get_location_service
from truckfinder.infrastructure.api.serializers import serialize_coordinates, serialize_truck

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/trucks", tags=["trucks"])


@router.get("/nearby")
async def nearby_trucks(
    lat: float = Query(..., ge=-90, le=90),
    lng: float = Query(..., ge=-180, le=180),
    radius_km: float | None = Query(None, ge=0),
    expand: bool = True,
    service: LocationService = Depends(get_location_service),
):
    """Trucks within radius_km of (lat, lng), nearest first."""
    reference = Coordinates(latitude=lat, longitude=lng)
    try:
        result = await service.find_nearby_trucks(reference, radius_km, expand=expand)
    except TruckCatalogError as e:
        logger.warning("Nearby truck lookup failed: %s", e)
        raise HTTPException(status_code=502, detail=str(e))

    return {
        "reference": serialize_coordinates(result.reference),
        "radius_km": result.radius_km,
        "expanded": result.expanded,
        "total": len(result.trucks),
        "trucks": [serialize_truck(t) for t in result.trucks],
    }
