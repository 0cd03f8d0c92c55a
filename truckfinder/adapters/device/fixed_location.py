"""Fixed device location — a static position source for kiosks, scripts and tests."""

from __future__ import annotations

from truckfinder.application.ports.device_location_port import DeviceLocationPort
from truckfinder.domain.errors import PositionError
from truckfinder.domain.value_objects.coordinates import Coordinates
from truckfinder.domain.value_objects.location import PositionRequestOptions


class FixedDeviceLocation(DeviceLocationPort):
    """Always answers with the same position, or the same error code.

    Constructed without coordinates and without an error code, it behaves as
    a device with no location capability.
    """

    def __init__(self, coordinates: Coordinates | None = None, error_code: int | None = None):
        self._coordinates = coordinates
        self._error_code = error_code
        self.requests: list[PositionRequestOptions] = []

    def is_supported(self) -> bool:
        return self._coordinates is not None or self._error_code is not None

    async def request_position(self, options: PositionRequestOptions) -> Coordinates:
        self.requests.append(options)
        if self._error_code is not None:
            raise PositionError(self._error_code)
        if self._coordinates is None:
            raise PositionError(PositionError.POSITION_UNAVAILABLE)
        return self._coordinates
