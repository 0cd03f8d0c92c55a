"""Google Maps geocoder adapter — implements GeocoderPort."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from truckfinder.application.ports.geocoder_port import GeocoderPort
from truckfinder.config import settings
from truckfinder.domain.errors import AddressNotFound, GeocodingError, NetworkError, RateLimited
from truckfinder.domain.value_objects.coordinates import Coordinates
from truckfinder.domain.value_objects.location import ResolvedLocation, SuggestionCandidate

logger = logging.getLogger(__name__)

GOOGLE_GEOCODE_URL = "https://maps.googleapis.com/maps/api/geocode/json"

_RATE_LIMIT_STATUSES = {"OVER_QUERY_LIMIT", "OVER_DAILY_LIMIT"}


class GoogleMapsAdapter(GeocoderPort):
    """Google Maps implementation of GeocoderPort."""

    name = "google"

    def __init__(
        self,
        api_key: str | None = None,
        timeout: float | None = None,
        language: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._api_key = api_key or settings.google_maps_api_key
        self._timeout = timeout if timeout is not None else settings.geocoder_timeout_seconds
        self._language = settings.geocoder_language if language is None else language
        self._transport = transport

    async def forward_geocode(self, address: str) -> ResolvedLocation:
        query = address.strip()
        if not query:
            raise AddressNotFound(address)

        candidates = await self._geocode({"address": query})
        if not candidates:
            logger.warning("Google Maps could not resolve '%s'", query)
            raise AddressNotFound(query)

        best = candidates[0]
        logger.info(
            "Google Maps resolved '%s' → (%f, %f)",
            query, best.coordinates.latitude, best.coordinates.longitude,
        )
        return best.to_resolved()

    async def reverse_geocode(self, coordinates: Coordinates) -> str:
        try:
            candidates = await self._geocode(
                {"latlng": f"{coordinates.latitude},{coordinates.longitude}"}
            )
        except GeocodingError as e:
            logger.warning("Google Maps reverse lookup failed for %s: %s", coordinates.format_fallback(), e)
            return coordinates.format_fallback()
        except Exception:
            logger.exception("Google Maps reverse lookup error for %s", coordinates.format_fallback())
            return coordinates.format_fallback()

        if not candidates:
            return coordinates.format_fallback()
        return candidates[0].address

    async def search_candidates(self, query: str, limit: int) -> list[SuggestionCandidate]:
        query = query.strip()
        if len(query) < settings.suggestion_min_length or limit <= 0:
            return []
        candidates = await self._geocode({"address": query})
        return candidates[:limit]

    async def _geocode(self, params: dict[str, Any]) -> list[SuggestionCandidate]:
        """Call the Geocoding API; ZERO_RESULTS is an empty list, not an error."""
        if not self._api_key:
            raise NetworkError("Google Maps API key is not set")

        query = {**params, "key": self._api_key}
        if self._language:
            query["language"] = self._language

        try:
            async with httpx.AsyncClient(transport=self._transport, timeout=self._timeout) as client:
                response = await client.get(GOOGLE_GEOCODE_URL, params=query)
        except httpx.TimeoutException as e:
            raise NetworkError("Google Maps request timed out") from e
        except httpx.HTTPError as e:
            raise NetworkError(f"Google Maps request failed: {e}") from e

        if response.status_code == httpx.codes.TOO_MANY_REQUESTS:
            raise RateLimited("Google Maps rate limit exceeded")
        if response.is_error:
            raise NetworkError(f"Google Maps returned HTTP {response.status_code}")

        try:
            data = response.json()
        except ValueError as e:
            raise NetworkError("Google Maps returned invalid JSON") from e

        if not isinstance(data, dict):
            raise NetworkError(f"Unexpected Google Maps payload: {type(data).__name__}")

        status = data.get("status")
        if status == "ZERO_RESULTS":
            return []
        if status in _RATE_LIMIT_STATUSES:
            raise RateLimited(f"Google Maps status {status}")
        if status != "OK":
            raise NetworkError(f"Google Maps status {status}: {data.get('error_message', '')}".strip())

        candidates = []
        results = data.get("results") or []
        if not isinstance(results, list):
            raise NetworkError(f"Unexpected Google Maps results: {type(results).__name__}")

        for result in results:
            if not isinstance(result, dict):
                continue
            geometry = result.get("geometry")
            location = (geometry.get("location") if isinstance(geometry, dict) else None) or {}
            if not isinstance(location, dict):
                continue
            try:
                coordinates = Coordinates.parse(location.get("lat"), location.get("lng"))
            except ValueError:
                continue
            address = result.get("formatted_address") or coordinates.format_fallback()
            candidates.append(SuggestionCandidate(address=address, coordinates=coordinates))
        return candidates
