"""Typed failures raised across the location subsystem.

Each family is closed: callers handle geocoding failures by catching
``GeocodingError`` and branching on the subclass (or its ``kind``), never by
matching message text.
"""

from __future__ import annotations

from truckfinder.domain.value_objects.enums import GeolocationErrorKind


class GeocodingError(Exception):
    kind = "geocoding_error"


class AddressNotFound(GeocodingError):
    kind = "address_not_found"

    def __init__(self, address: str):
        super().__init__(f"No location found for '{address}'")
        self.address = address


class NetworkError(GeocodingError):
    kind = "network_error"


class RateLimited(GeocodingError):
    kind = "rate_limited"


class PositionError(Exception):
    """Raised by device adapters with a W3C geolocation error code."""

    PERMISSION_DENIED = 1
    POSITION_UNAVAILABLE = 2
    TIMEOUT = 3

    def __init__(self, code: int, message: str = ""):
        super().__init__(message or f"Position error code {code}")
        self.code = code


class GeolocationFailure(Exception):
    def __init__(self, kind: GeolocationErrorKind):
        super().__init__(kind.hint)
        self.kind = kind


class TruckCatalogError(Exception):
    """The truck backend could not be reached or returned an unusable payload."""
