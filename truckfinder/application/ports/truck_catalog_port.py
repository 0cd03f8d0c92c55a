"""Port interface for the truck listing backend."""

from abc import ABC, abstractmethod

from truckfinder.domain.entities.truck import Truck
from truckfinder.domain.value_objects.coordinates import Coordinates


class TruckCatalogPort(ABC):
    @abstractmethod
    async def get_nearby(self, reference: Coordinates, radius_km: float) -> list[Truck]:
        """Return candidate trucks around reference.

        The result may include trucks outside the radius; callers rank and
        filter locally. Raises TruckCatalogError.
        """
        ...
