"""Coordinates value object — immutable, range-checked (lat, lon) pair."""

import math
from dataclasses import dataclass

EARTH_RADIUS_KM = 6371.0


@dataclass(frozen=True)
class Coordinates:
    latitude: float
    longitude: float

    def __post_init__(self) -> None:
        if not -90.0 <= self.latitude <= 90.0:
            raise ValueError(f"Latitude out of range [-90, 90]: {self.latitude}")
        if not -180.0 <= self.longitude <= 180.0:
            raise ValueError(f"Longitude out of range [-180, 180]: {self.longitude}")

    def haversine_km(self, other: "Coordinates") -> float:
        """Calculate distance in km between two points using the Haversine formula."""
        lat1 = math.radians(self.latitude)
        lat2 = math.radians(other.latitude)
        dlat = math.radians(other.latitude - self.latitude)
        dlon = math.radians(other.longitude - self.longitude)

        a = (
            math.sin(dlat / 2) ** 2
            + math.cos(lat1) * math.cos(lat2) * math.sin(dlon / 2) ** 2
        )
        c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

        return EARTH_RADIUS_KM * c

    def format_fallback(self) -> str:
        """Display string used when no address is known for these coordinates."""
        return f"{self.latitude:.6f}, {self.longitude:.6f}"

    @classmethod
    def parse(cls, latitude, longitude) -> "Coordinates":
        """Build from provider fields, which may be strings or numbers.

        Raises ValueError for missing, non-numeric or out-of-range values.
        """
        try:
            lat = float(latitude)
            lon = float(longitude)
        except (TypeError, ValueError) as e:
            raise ValueError(f"Unparseable coordinates: {latitude!r}, {longitude!r}") from e
        if math.isnan(lat) or math.isnan(lon):
            raise ValueError(f"Unparseable coordinates: {latitude!r}, {longitude!r}")
        return cls(latitude=lat, longitude=lon)
