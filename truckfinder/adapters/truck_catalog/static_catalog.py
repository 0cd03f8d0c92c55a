"""Static truck catalog — serves trucks from a JSON export of the backend.

Useful for local development and demos when the REST backend is not
running. The file holds either a list of truck records or the backend's
``{"data": {"trucks": [...]}}`` envelope.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from truckfinder.application.ports.truck_catalog_port import TruckCatalogPort
from truckfinder.domain.entities.truck import Truck
from truckfinder.domain.errors import TruckCatalogError
from truckfinder.domain.policies.proximity import bounding_box
from truckfinder.domain.value_objects.coordinates import Coordinates

logger = logging.getLogger(__name__)


def load_trucks(file_path: Path) -> list[Truck]:
    """Read truck records from a JSON file.

    Raises:
        TruckCatalogError: if the file is missing or malformed.
    """
    try:
        with open(file_path, encoding="utf-8") as f:
            payload = json.load(f)
    except (OSError, ValueError) as e:
        raise TruckCatalogError(f"Cannot read truck data from {file_path}: {e}") from e

    if isinstance(payload, dict):
        data = payload.get("data")
        payload = data.get("trucks") if isinstance(data, dict) else None
    if not isinstance(payload, list):
        raise TruckCatalogError(f"Truck data in {file_path} is not a list of trucks")

    trucks = [Truck.from_record(r) for r in payload if isinstance(r, dict)]
    skipped = sum(1 for t in trucks if not t.has_location())
    logger.info("Loaded %d trucks from %s (%d without location)", len(trucks), file_path, skipped)
    return trucks


class StaticTruckCatalog(TruckCatalogPort):
    def __init__(self, trucks: list[Truck]):
        self._trucks = list(trucks)

    @classmethod
    def from_file(cls, file_path: Path) -> "StaticTruckCatalog":
        return cls(load_trucks(file_path))

    async def get_nearby(self, reference: Coordinates, radius_km: float) -> list[Truck]:
        box = bounding_box(reference, radius_km)
        return [t for t in self._trucks if t.coordinates and box.contains(t.coordinates)]
