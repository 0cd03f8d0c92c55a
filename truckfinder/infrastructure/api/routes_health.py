"""Health check endpoint."""

from fastapi import APIRouter, Depends

from truckfinder.application.ports.geocoder_port import GeocoderPort
from truckfinder.infrastructure.api.dependencies import get_geocoder

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check(geocoder: GeocoderPort = Depends(get_geocoder)):
    """Report service liveness and the configured geocoding provider."""
    return {
        "status": "ok",
        "geocoder": geocoder.name,
        "service": "truckfinder location service",
    }
