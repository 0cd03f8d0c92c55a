"""
WebSocket channel for one location search box.

/location/ws - live address suggestions and device location

Each connection owns one SuggestionSession and one ClientPositionChannel;
nothing is shared between connections.

Client → server:
    hello           {"geolocation": bool}        device capability
    input           {"text": str}                keystroke
    focus / blur                                  input focus changes
    select          {"index": int}               pick a suggestion
    submit                                        Enter key
    clear                                         clear the box
    locate          {"high_accuracy", "timeout_ms", "max_cache_age_ms"}
    position        {"request_id", "latitude", "longitude"}
    position_error  {"request_id", "code"}       W3C code 1/2/3
    ping

Server → client:
    connected, suggestions, selected, resolved, geocode_error,
    position_request, location, location_error, pong, error
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect

from truckfinder.adapters.device.client_channel import ClientPositionChannel
from truckfinder.application.use_cases.location_service import LocationService
from truckfinder.domain.errors import GeocodingError, GeolocationFailure
from truckfinder.domain.value_objects.location import PositionRequestOptions, SuggestionCandidate
from truckfinder.infrastructure.api.dependencies import get_location_service
from truckfinder.infrastructure.api.serializers import (
    serialize_geocoding_error,
    serialize_location,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["location"])


class LocationConnection:
    """Per-connection state. All outgoing messages go through one outbox."""

    def __init__(self, websocket: WebSocket, service: LocationService):
        self._ws = websocket
        self._service = service
        self._outbox: asyncio.Queue[dict[str, Any]] = asyncio.Queue()
        self._tasks: set[asyncio.Task] = set()
        self.session = service.open_suggestions()
        self.position = ClientPositionChannel(send=self._outbox.put)
        self._unsubscribe = self.session.subscribe(self._on_suggestions)

    async def run(self) -> None:
        await self._ws.send_json({
            "type": "connected",
            "geocoder": self._service.geocoder.name,
        })

        send_task = asyncio.create_task(self._send_loop())
        receive_task = asyncio.create_task(self._receive_loop())
        try:
            done, pending = await asyncio.wait(
                [send_task, receive_task],
                return_when=asyncio.FIRST_COMPLETED,
            )
            for task in pending:
                task.cancel()
                try:
                    await task
                except asyncio.CancelledError:
                    pass
            for task in done:
                try:
                    task.result()
                except Exception:
                    logger.exception("Location channel loop failed")
        finally:
            await self.close()

    async def close(self) -> None:
        self._unsubscribe()
        self.position.close()
        await self.session.aclose()
        for task in list(self._tasks):
            task.cancel()
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)

    # ─── Loops ──────────────────────────────────────────────────────

    async def _send_loop(self) -> None:
        while True:
            message = await self._outbox.get()
            await self._ws.send_json(message)

    async def _receive_loop(self) -> None:
        try:
            while True:
                data = await self._ws.receive_text()
                try:
                    message = json.loads(data)
                except json.JSONDecodeError as e:
                    logger.warning("Invalid JSON received: %s", e)
                    self._emit({"type": "error", "message": "Invalid JSON"})
                    continue
                if not isinstance(message, dict):
                    self._emit({"type": "error", "message": "Expected a JSON object"})
                    continue
                self.handle(message)
        except WebSocketDisconnect:
            logger.debug("Location channel disconnected")

    # ─── Message handling ───────────────────────────────────────────

    def handle(self, message: dict[str, Any]) -> None:
        msg_type = message.get("type")

        if msg_type == "input":
            self.session.on_input(str(message.get("text") or ""))
        elif msg_type == "focus":
            self.session.on_focus()
        elif msg_type == "blur":
            self.session.on_blur()
        elif msg_type == "select":
            self._select(message.get("index"))
        elif msg_type == "submit":
            self._spawn(self._submit())
        elif msg_type == "clear":
            self.session.clear()
        elif msg_type == "hello":
            self.position.set_supported(bool(message.get("geolocation")))
        elif msg_type == "locate":
            self._locate(message)
        elif msg_type == "position":
            self.position.deliver_position(
                message.get("latitude"), message.get("longitude"), message.get("request_id"),
            )
        elif msg_type == "position_error":
            self._position_error(message)
        elif msg_type == "ping":
            self._emit({"type": "pong"})
        else:
            self._emit({"type": "error", "message": f"Unknown message type: {msg_type!r}"})

    def _select(self, index: Any) -> None:
        try:
            location = self.session.select_at(int(index))
        except (TypeError, ValueError, IndexError):
            self._emit({"type": "error", "message": f"No suggestion at index {index!r}"})
            return
        self._emit({"type": "selected", "location": serialize_location(location)})

    async def _submit(self) -> None:
        try:
            location = await self.session.submit()
        except GeocodingError as e:
            self._emit({"type": "geocode_error", **serialize_geocoding_error(e)})
            return
        self._emit({"type": "resolved", "location": serialize_location(location)})

    def _locate(self, message: dict[str, Any]) -> None:
        defaults = PositionRequestOptions()
        try:
            options = PositionRequestOptions(
                high_accuracy=bool(message.get("high_accuracy", defaults.high_accuracy)),
                timeout_ms=int(message.get("timeout_ms", defaults.timeout_ms)),
                max_cache_age_ms=int(message.get("max_cache_age_ms", defaults.max_cache_age_ms)),
            )
        except (TypeError, ValueError) as e:
            self._emit({"type": "error", "message": f"Invalid locate options: {e}"})
            return
        self._spawn(self._use_current_location(options))

    async def _use_current_location(self, options: PositionRequestOptions) -> None:
        try:
            location = await self._service.use_current_location(self.position, options)
        except GeolocationFailure as e:
            self._emit({"type": "location_error", "kind": e.kind.value, "message": e.kind.hint})
            return
        self._emit({"type": "location", "location": serialize_location(location)})

    def _position_error(self, message: dict[str, Any]) -> None:
        try:
            code = int(message.get("code"))
        except (TypeError, ValueError):
            self._emit({"type": "error", "message": "position_error requires an integer code"})
            return
        self.position.deliver_error(code, message.get("request_id"))

    def _on_suggestions(self, candidates: list[SuggestionCandidate]) -> None:
        self._emit({
            "type": "suggestions",
            "generation": self.session.generation,
            "query": self.session.text,
            "candidates": [serialize_location(c) for c in candidates],
        })

    def _emit(self, message: dict[str, Any]) -> None:
        self._outbox.put_nowait(message)

    def _spawn(self, coro) -> None:
        task = asyncio.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)


@router.websocket("/location/ws")
async def location_channel(
    websocket: WebSocket,
    service: LocationService = Depends(get_location_service),
):
    """Suggestion and device-location channel for one search box."""
    await websocket.accept()
    connection = LocationConnection(websocket, service)
    await connection.run()
