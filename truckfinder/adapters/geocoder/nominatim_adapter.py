"""Nominatim geocoder adapter — implements GeocoderPort."""

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


class NominatimAdapter(GeocoderPort):
    """OpenStreetMap Nominatim implementation of GeocoderPort.

    Stateless: every call opens its own client, nothing is cached.
    """

    name = "nominatim"

    def __init__(
        self,
        base_url: str | None = None,
        user_agent: str | None = None,
        timeout: float | None = None,
        country_codes: str | None = None,
        language: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._base_url = (base_url or settings.nominatim_url).rstrip("/")
        self._user_agent = user_agent or settings.geocoder_user_agent
        self._timeout = timeout if timeout is not None else settings.geocoder_timeout_seconds
        self._country_codes = settings.geocoder_country_codes if country_codes is None else country_codes
        self._language = settings.geocoder_language if language is None else language
        self._transport = transport

    async def forward_geocode(self, address: str) -> ResolvedLocation:
        query = address.strip()
        if not query:
            raise AddressNotFound(address)

        candidates = await self._search(query, limit=1)
        if not candidates:
            logger.info("Nominatim returned no results for '%s'", query)
            raise AddressNotFound(query)

        best = candidates[0]
        logger.info(
            "Nominatim resolved '%s' → (%f, %f)",
            query, best.coordinates.latitude, best.coordinates.longitude,
        )
        return best.to_resolved()

    async def reverse_geocode(self, coordinates: Coordinates) -> str:
        params = {
            "format": "json",
            "lat": coordinates.latitude,
            "lon": coordinates.longitude,
            "zoom": 18,
            "addressdetails": 1,
        }
        try:
            data = await self._get_json("/reverse", params)
        except GeocodingError as e:
            logger.warning("Nominatim reverse lookup failed for %s: %s", coordinates.format_fallback(), e)
            return coordinates.format_fallback()
        except Exception:
            logger.exception("Nominatim reverse lookup error for %s", coordinates.format_fallback())
            return coordinates.format_fallback()

        display_name = data.get("display_name") if isinstance(data, dict) else None
        if not display_name:
            logger.info("Nominatim has no address for %s", coordinates.format_fallback())
            return coordinates.format_fallback()
        return str(display_name)

    async def search_candidates(self, query: str, limit: int) -> list[SuggestionCandidate]:
        query = query.strip()
        if len(query) < settings.suggestion_min_length or limit <= 0:
            return []
        candidates = await self._search(query, limit=limit)
        logger.debug("Nominatim search '%s' → %d candidates", query, len(candidates))
        return candidates[:limit]

    async def _search(self, query: str, limit: int) -> list[SuggestionCandidate]:
        params: dict[str, Any] = {
            "q": query,
            "format": "json",
            "limit": limit,
            "addressdetails": 1,
        }
        if self._country_codes:
            params["countrycodes"] = self._country_codes

        data = await self._get_json("/search", params)
        if not isinstance(data, list):
            raise NetworkError(f"Unexpected Nominatim search payload: {type(data).__name__}")
        return self._parse_candidates(data)

    async def _get_json(self, path: str, params: dict[str, Any]) -> Any:
        """GET a Nominatim endpoint and decode JSON, mapping failures to GeocodingError."""
        headers = {"User-Agent": self._user_agent}
        if self._language:
            headers["Accept-Language"] = self._language

        try:
            async with httpx.AsyncClient(transport=self._transport, timeout=self._timeout) as client:
                response = await client.get(f"{self._base_url}{path}", params=params, headers=headers)
        except httpx.TimeoutException as e:
            raise NetworkError(f"Nominatim request timed out: {path}") from e
        except httpx.HTTPError as e:
            raise NetworkError(f"Nominatim request failed: {e}") from e

        if response.status_code == httpx.codes.TOO_MANY_REQUESTS:
            raise RateLimited("Nominatim rate limit exceeded")
        if response.is_error:
            raise NetworkError(f"Nominatim returned HTTP {response.status_code}")

        try:
            return response.json()
        except ValueError as e:
            raise NetworkError("Nominatim returned invalid JSON") from e

    @staticmethod
    def _parse_candidates(results: list[Any]) -> list[SuggestionCandidate]:
        """Normalize Nominatim results, skipping entries without usable coordinates."""
        candidates = []
        for item in results:
            if not isinstance(item, dict):
                continue
            try:
                coordinates = Coordinates.parse(item.get("lat"), item.get("lon"))
            except ValueError:
                logger.debug("Skipping Nominatim result without coordinates: %r", item.get("display_name"))
                continue
            address = item.get("display_name") or coordinates.format_fallback()
            candidates.append(SuggestionCandidate(address=str(address), coordinates=coordinates))
        return candidates
