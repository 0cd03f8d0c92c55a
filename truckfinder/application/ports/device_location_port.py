"""Port interface for the device's permission-gated location API."""

from abc import ABC, abstractmethod

from truckfinder.domain.value_objects.coordinates import Coordinates
from truckfinder.domain.value_objects.location import PositionRequestOptions


class DeviceLocationPort(ABC):
    @abstractmethod
    def is_supported(self) -> bool:
        """Whether the device has any location capability at all."""
        ...

    @abstractmethod
    async def request_position(self, options: PositionRequestOptions) -> Coordinates:
        """Request the current position.

        Raises PositionError with code 1 (denied), 2 (unavailable) or 3 (timeout).
        """
        ...
