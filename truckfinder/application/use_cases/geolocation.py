"""GeolocationProvider — resolve the device position, optionally with an address."""

from __future__ import annotations

import logging

from truckfinder.application.ports.device_location_port import DeviceLocationPort
from truckfinder.application.ports.geocoder_port import GeocoderPort
from truckfinder.domain.errors import GeolocationFailure, PositionError
from truckfinder.domain.value_objects.enums import GeolocationErrorKind
from truckfinder.domain.value_objects.location import (
    GeolocationErr,
    GeolocationOk,
    GeolocationOutcome,
    PositionRequestOptions,
    ResolvedLocation,
)

logger = logging.getLogger(__name__)


class GeolocationProvider:
    def __init__(self, device: DeviceLocationPort, geocoder: GeocoderPort):
        self._device = device
        self._geocoder = geocoder

    async def get_current_location(
        self, options: PositionRequestOptions | None = None,
    ) -> GeolocationOutcome:
        """Request the device position.

        Unsupported devices fail immediately without a permission prompt;
        platform failures map to PERMISSION_DENIED, POSITION_UNAVAILABLE
        or TIMEOUT.
        """
        if not self._device.is_supported():
            logger.info("Device has no location capability")
            return GeolocationErr(GeolocationErrorKind.UNSUPPORTED)

        options = options or PositionRequestOptions()
        try:
            coordinates = await self._device.request_position(options)
        except PositionError as e:
            kind = GeolocationErrorKind.from_platform_code(e.code)
            logger.info("Device position request failed: %s (code %d)", kind.value, e.code)
            return GeolocationErr(kind)

        return GeolocationOk(coordinates)

    async def get_current_location_with_address(
        self, options: PositionRequestOptions | None = None,
    ) -> ResolvedLocation:
        """Device position plus a display address.

        Raises:
            GeolocationFailure: for the four geolocation failure kinds only;
                reverse geocoding falls back to a coordinate string.
        """
        outcome = await self.get_current_location(options)
        if isinstance(outcome, GeolocationErr):
            raise GeolocationFailure(outcome.reason)

        address = await self._geocoder.reverse_geocode(outcome.coordinates)
        return ResolvedLocation(address=address, coordinates=outcome.coordinates)
