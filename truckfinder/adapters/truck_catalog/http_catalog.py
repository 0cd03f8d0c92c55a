"""HTTP truck catalog — implements TruckCatalogPort against the REST backend."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from truckfinder.application.ports.truck_catalog_port import TruckCatalogPort
from truckfinder.config import settings
from truckfinder.domain.entities.truck import Truck
from truckfinder.domain.errors import TruckCatalogError
from truckfinder.domain.value_objects.coordinates import Coordinates

logger = logging.getLogger(__name__)


class HttpTruckCatalog(TruckCatalogPort):
    """Reads ``GET /trucks/nearby`` from the marketplace backend.

    The backend wraps payloads as ``{"success", "message", "data": {"trucks": [...]}}``.
    """

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._base_url = (base_url or settings.truck_api_url).rstrip("/")
        self._timeout = timeout if timeout is not None else settings.truck_api_timeout_seconds
        self._transport = transport

    async def get_nearby(self, reference: Coordinates, radius_km: float) -> list[Truck]:
        params = {
            "lat": reference.latitude,
            "lng": reference.longitude,
            "maxDistance": radius_km,
        }
        try:
            async with httpx.AsyncClient(transport=self._transport, timeout=self._timeout) as client:
                response = await client.get(f"{self._base_url}/trucks/nearby", params=params)
        except httpx.HTTPError as e:
            raise TruckCatalogError(f"Truck backend unreachable: {e}") from e

        try:
            payload = response.json()
        except ValueError as e:
            raise TruckCatalogError(f"Truck backend returned invalid JSON (HTTP {response.status_code})") from e

        if not isinstance(payload, dict):
            raise TruckCatalogError("Truck backend returned an unexpected payload")
        if response.is_error or not payload.get("success", False):
            message = payload.get("message")
            raise TruckCatalogError(message or f"Failed to fetch nearby trucks (HTTP {response.status_code})")

        records = self._extract_records(payload)
        trucks = [Truck.from_record(r) for r in records if isinstance(r, dict)]
        logger.info(
            "Truck backend returned %d trucks within %.1f km of (%f, %f)",
            len(trucks), radius_km, reference.latitude, reference.longitude,
        )
        return trucks

    @staticmethod
    def _extract_records(payload: dict[str, Any]) -> list[Any]:
        data = payload.get("data") or {}
        records = data.get("trucks") if isinstance(data, dict) else None
        if not isinstance(records, list):
            raise TruckCatalogError("Truck backend response has no trucks list")
        return records
