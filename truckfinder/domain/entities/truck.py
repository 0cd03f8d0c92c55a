"""Truck entity — a food truck record as served by the REST backend."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from truckfinder.domain.value_objects.coordinates import Coordinates


@dataclass
class Truck:
    id: str | None
    name: str
    coordinates: Coordinates | None = None
    data: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> "Truck":
        """Build from a backend record shaped like
        ``{"_id", "name", "location": {"address", "coordinates": {"latitude", "longitude"}}}``.

        Records with missing or invalid coordinates keep ``coordinates=None``.
        """
        location = record.get("location")
        if not isinstance(location, dict):
            location = {}
        raw = location.get("coordinates") or {}
        coordinates = None
        if isinstance(raw, dict):
            try:
                coordinates = Coordinates.parse(raw.get("latitude"), raw.get("longitude"))
            except ValueError:
                coordinates = None

        truck_id = record.get("_id", record.get("id"))
        return cls(
            id=str(truck_id) if truck_id is not None else None,
            name=str(record.get("name") or ""),
            coordinates=coordinates,
            data=record,
        )

    def has_location(self) -> bool:
        return self.coordinates is not None


@dataclass(frozen=True)
class TruckWithDistance:
    """A truck annotated against one reference point. Never persisted."""

    truck: Truck
    distance_km: float
    within_radius: bool
    exact_distance_km: float
