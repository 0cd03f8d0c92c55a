"""Proximity policy — distance computation and radius filtering of trucks.

Pure functions: no I/O, no state.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable

from truckfinder.domain.entities.truck import Truck, TruckWithDistance
from truckfinder.domain.value_objects.coordinates import Coordinates

# Rough km per degree of latitude, as used by the backend's nearby query
KM_PER_DEGREE = 111.0


@dataclass(frozen=True)
class BoundingBox:
    min_latitude: float
    max_latitude: float
    min_longitude: float
    max_longitude: float

    def contains(self, point: Coordinates) -> bool:
        return (
            self.min_latitude <= point.latitude <= self.max_latitude
            and self.min_longitude <= point.longitude <= self.max_longitude
        )


def distance_km(a: Coordinates, b: Coordinates) -> float:
    """Great-circle distance in km, rounded to 2 decimals for display."""
    return round(a.haversine_km(b), 2)


def annotate_distances(
    trucks: Iterable[Truck],
    reference: Coordinates,
    radius_km: float,
) -> list[TruckWithDistance]:
    """Attach distance and radius membership to every truck that has a location.

    Input order is preserved. Trucks without coordinates are skipped.

    Raises:
        ValueError: if radius_km is negative.
    """
    if radius_km < 0:
        raise ValueError(f"Radius must be non-negative, got {radius_km}")

    annotated = []
    for truck in trucks:
        if not truck.coordinates:
            continue
        exact = reference.haversine_km(truck.coordinates)
        rounded = round(exact, 2)
        annotated.append(
            TruckWithDistance(
                truck=truck,
                distance_km=rounded,
                within_radius=rounded <= radius_km,
                exact_distance_km=exact,
            )
        )
    return annotated


def filter_and_sort(
    trucks: Iterable[Truck],
    reference: Coordinates,
    radius_km: float,
) -> list[TruckWithDistance]:
    """Trucks within radius_km of reference, nearest first.

    Membership uses the displayed (rounded) distance so that what the user
    sees agrees with the radius filter; ordering uses full precision.
    Equal distances keep their input order.
    """
    annotated = annotate_distances(trucks, reference, radius_km)
    within = [t for t in annotated if t.within_radius]
    return sorted(within, key=lambda t: t.exact_distance_km)


def bounding_box(center: Coordinates, radius_km: float) -> BoundingBox:
    """Degree box around center that covers radius_km, clamped to valid ranges.

    Used as a coarse prefilter only; exact membership is decided by
    filter_and_sort. The box does not wrap across the antimeridian.
    """
    if radius_km < 0:
        raise ValueError(f"Radius must be non-negative, got {radius_km}")

    dlat = radius_km / KM_PER_DEGREE
    cos_lat = math.cos(math.radians(center.latitude))
    if cos_lat < 1e-9 or center.latitude + dlat >= 90.0 or center.latitude - dlat <= -90.0:
        # Box reaches a pole: every longitude qualifies
        dlon = 180.0
    else:
        dlon = min(180.0, radius_km / (KM_PER_DEGREE * cos_lat))

    return BoundingBox(
        min_latitude=max(-90.0, center.latitude - dlat),
        max_latitude=min(90.0, center.latitude + dlat),
        min_longitude=max(-180.0, center.longitude - dlon),
        max_longitude=min(180.0, center.longitude + dlon),
    )


def format_distance(km: float) -> str:
    """Human display: metres under 1 km, otherwise km with one decimal."""
    if km < 1:
        return f"{round(km * 1000)}m"
    return f"{km:.1f}km"
