"""Tests for ClientPositionChannel — the server side of browser geolocation."""

from __future__ import annotations

import asyncio

import pytest

from truckfinder.adapters.device.client_channel import ClientPositionChannel
from truckfinder.domain.errors import PositionError
from truckfinder.domain.value_objects.coordinates import Coordinates
from truckfinder.domain.value_objects.location import PositionRequestOptions

FRESH = PositionRequestOptions(timeout_ms=1000, max_cache_age_ms=0)


class Outbox:
    def __init__(self, fail: bool = False):
        self.messages: list[dict] = []
        self._fail = fail

    async def __call__(self, message):
        if self._fail:
            raise ConnectionError("socket closed")
        self.messages.append(message)


async def _wait_for_request(outbox: Outbox) -> dict:
    for _ in range(100):
        if outbox.messages:
            return outbox.messages[-1]
        await asyncio.sleep(0.001)
    raise AssertionError("no position_request was sent")


def test_support_flag():
    channel = ClientPositionChannel(Outbox())
    assert not channel.is_supported()
    channel.set_supported(True)
    assert channel.is_supported()


@pytest.mark.asyncio
async def test_request_answered_by_matching_position():
    outbox = Outbox()
    channel = ClientPositionChannel(outbox, supported=True)

    task = asyncio.create_task(channel.request_position(FRESH))
    message = await _wait_for_request(outbox)
    assert message["type"] == "position_request"
    assert message["timeout_ms"] == 1000
    assert message["high_accuracy"] is True

    channel.deliver_position(20.3538, 85.8169, message["request_id"])
    assert await task == Coordinates(latitude=20.3538, longitude=85.8169)


@pytest.mark.asyncio
async def test_position_without_request_id_answers_all_pending():
    outbox = Outbox()
    channel = ClientPositionChannel(outbox, supported=True)

    first = asyncio.create_task(channel.request_position(FRESH))
    second = asyncio.create_task(channel.request_position(FRESH))
    await asyncio.sleep(0.01)
    channel.deliver_position("20.35", "85.81")

    assert await first == await second == Coordinates(latitude=20.35, longitude=85.81)


@pytest.mark.asyncio
@pytest.mark.parametrize("code", [1, 2, 3])
async def test_client_error_code_is_raised(code):
    outbox = Outbox()
    channel = ClientPositionChannel(outbox, supported=True)

    task = asyncio.create_task(channel.request_position(FRESH))
    message = await _wait_for_request(outbox)
    channel.deliver_error(code, message["request_id"])

    with pytest.raises(PositionError) as exc_info:
        await task
    assert exc_info.value.code == code


@pytest.mark.asyncio
async def test_invalid_position_is_unavailable():
    outbox = Outbox()
    channel = ClientPositionChannel(outbox, supported=True)

    task = asyncio.create_task(channel.request_position(FRESH))
    message = await _wait_for_request(outbox)
    channel.deliver_position(200, 85.8, message["request_id"])

    with pytest.raises(PositionError) as exc_info:
        await task
    assert exc_info.value.code == PositionError.POSITION_UNAVAILABLE


@pytest.mark.asyncio
async def test_no_answer_times_out():
    channel = ClientPositionChannel(Outbox(), supported=True)
    options = PositionRequestOptions(timeout_ms=20, max_cache_age_ms=0)
    with pytest.raises(PositionError) as exc_info:
        await channel.request_position(options)
    assert exc_info.value.code == PositionError.TIMEOUT


@pytest.mark.asyncio
async def test_send_failure_is_unavailable():
    channel = ClientPositionChannel(Outbox(fail=True), supported=True)
    with pytest.raises(PositionError) as exc_info:
        await channel.request_position(FRESH)
    assert exc_info.value.code == PositionError.POSITION_UNAVAILABLE


@pytest.mark.asyncio
async def test_recent_fix_served_from_cache():
    now = [1000.0]
    outbox = Outbox()
    channel = ClientPositionChannel(outbox, supported=True, clock=lambda: now[0])
    channel.deliver_position(20.35, 85.81)

    now[0] += 60
    options = PositionRequestOptions(max_cache_age_ms=300_000)
    assert await channel.request_position(options) == Coordinates(latitude=20.35, longitude=85.81)
    assert outbox.messages == []


@pytest.mark.asyncio
async def test_stale_fix_triggers_new_request():
    now = [1000.0]
    outbox = Outbox()
    channel = ClientPositionChannel(outbox, supported=True, clock=lambda: now[0])
    channel.deliver_position(20.35, 85.81)

    now[0] += 600
    options = PositionRequestOptions(timeout_ms=20, max_cache_age_ms=300_000)
    with pytest.raises(PositionError):
        await channel.request_position(options)
    assert outbox.messages[0]["type"] == "position_request"


@pytest.mark.asyncio
async def test_close_fails_pending_requests():
    outbox = Outbox()
    channel = ClientPositionChannel(outbox, supported=True)
    task = asyncio.create_task(channel.request_position(FRESH))
    await _wait_for_request(outbox)

    channel.close()

    with pytest.raises(PositionError) as exc_info:
        await task
    assert exc_info.value.code == PositionError.POSITION_UNAVAILABLE


def test_reply_for_unknown_request_is_ignored():
    channel = ClientPositionChannel(Outbox(), supported=True)
    channel.deliver_error(1, "no-such-request")
    channel.deliver_position(20.35, 85.81, "no-such-request")
