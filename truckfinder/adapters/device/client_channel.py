"""Client position channel — implements DeviceLocationPort over a message link.

The device's location API lives in the browser. The server sends a
``position_request`` message carrying the request options and waits for the
client to answer with ``position`` or ``position_error``. One channel per
connection; it holds only that connection's last fix.
"""

from __future__ import annotations

import asyncio
import logging
import time
import uuid
from typing import Any, Awaitable, Callable

from truckfinder.application.ports.device_location_port import DeviceLocationPort
from truckfinder.domain.errors import PositionError
from truckfinder.domain.value_objects.coordinates import Coordinates
from truckfinder.domain.value_objects.location import PositionRequestOptions

logger = logging.getLogger(__name__)

SendMessage = Callable[[dict[str, Any]], Awaitable[None]]


class ClientPositionChannel(DeviceLocationPort):
    def __init__(
        self,
        send: SendMessage,
        supported: bool = False,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._send = send
        self._supported = supported
        self._clock = clock
        self._pending: dict[str, asyncio.Future[Coordinates]] = {}
        self._last_fix: tuple[Coordinates, float] | None = None

    def set_supported(self, supported: bool) -> None:
        self._supported = supported

    def is_supported(self) -> bool:
        return self._supported

    async def request_position(self, options: PositionRequestOptions) -> Coordinates:
        cached = self._cached_fix(options.max_cache_age_ms)
        if cached is not None:
            logger.debug("Answering position request from cached fix")
            return cached

        request_id = uuid.uuid4().hex
        future: asyncio.Future[Coordinates] = asyncio.get_running_loop().create_future()
        self._pending[request_id] = future
        try:
            try:
                await self._send({
                    "type": "position_request",
                    "request_id": request_id,
                    "high_accuracy": options.high_accuracy,
                    "timeout_ms": options.timeout_ms,
                    "max_cache_age_ms": options.max_cache_age_ms,
                })
            except Exception as e:
                logger.warning("Could not send position request to client: %s", e)
                raise PositionError(PositionError.POSITION_UNAVAILABLE, "Client is not reachable") from e

            try:
                return await asyncio.wait_for(future, timeout=options.timeout_ms / 1000)
            except asyncio.TimeoutError:
                raise PositionError(PositionError.TIMEOUT, "Location request timed out") from None
        finally:
            self._pending.pop(request_id, None)

    def deliver_position(self, latitude: Any, longitude: Any, request_id: str | None = None) -> None:
        """Record a fix reported by the client and answer the matching request.

        A fix without request_id answers every pending request. Invalid
        coordinates are reported as an unavailable position.
        """
        try:
            coordinates = Coordinates.parse(latitude, longitude)
        except ValueError:
            logger.warning("Client reported invalid position: %r, %r", latitude, longitude)
            self.deliver_error(PositionError.POSITION_UNAVAILABLE, request_id)
            return

        self._last_fix = (coordinates, self._clock())
        for future in self._matching(request_id):
            future.set_result(coordinates)

    def deliver_error(self, code: int, request_id: str | None = None) -> None:
        """Fail the matching request with the platform error code reported by the client."""
        for future in self._matching(request_id):
            future.set_exception(PositionError(code))

    def close(self) -> None:
        """Fail every outstanding request, e.g. when the connection drops."""
        for future in self._matching(None):
            future.set_exception(PositionError(PositionError.POSITION_UNAVAILABLE, "Client disconnected"))
        self._pending.clear()

    def _matching(self, request_id: str | None) -> list[asyncio.Future[Coordinates]]:
        if request_id is None:
            futures = list(self._pending.values())
        else:
            future = self._pending.get(request_id)
            if future is None:
                logger.debug("Ignoring reply for unknown position request %s", request_id)
            futures = [future] if future is not None else []
        return [f for f in futures if not f.done()]

    def _cached_fix(self, max_cache_age_ms: int) -> Coordinates | None:
        if self._last_fix is None or max_cache_age_ms <= 0:
            return None
        coordinates, received_at = self._last_fix
        age_ms = (self._clock() - received_at) * 1000
        return coordinates if age_ms <= max_cache_age_ms else None
