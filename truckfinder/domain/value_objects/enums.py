"""Domain enums — pure Python, no external dependencies."""

from enum import Enum


class GeolocationErrorKind(str, Enum):
    PERMISSION_DENIED = "permission_denied"
    POSITION_UNAVAILABLE = "position_unavailable"
    TIMEOUT = "timeout"
    UNSUPPORTED = "unsupported"

    @property
    def hint(self) -> str:
        """Recovery guidance shown to the user for this failure."""
        return _GEOLOCATION_HINTS[self]

    @classmethod
    def from_platform_code(cls, code: int) -> "GeolocationErrorKind":
        """Map a W3C GeolocationPositionError code (1, 2, 3)."""
        if code == 1:
            return cls.PERMISSION_DENIED
        if code == 3:
            return cls.TIMEOUT
        # 2, and anything a browser invents beyond the standard codes
        return cls.POSITION_UNAVAILABLE


_GEOLOCATION_HINTS = {
    GeolocationErrorKind.PERMISSION_DENIED: (
        "Location access denied. Please enable location permissions in your browser settings."
    ),
    GeolocationErrorKind.POSITION_UNAVAILABLE: (
        "Location information unavailable. Please check your device settings."
    ),
    GeolocationErrorKind.TIMEOUT: "Location request timed out. Please try again.",
    GeolocationErrorKind.UNSUPPORTED: (
        "Geolocation is not supported by this browser. Please search for an address instead."
    ),
}


class SuggestionState(str, Enum):
    IDLE = "idle"
    DEBOUNCING = "debouncing"
    FETCHING = "fetching"


class FetchOutcome(str, Enum):
    RESOLVED = "resolved"
    SUPERSEDED = "superseded"
