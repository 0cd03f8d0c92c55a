"""SuggestionSession — debounced, generation-checked address suggestions.

One session per search box. Every input change bumps ``generation``; a
lookup result is published only if the generation it was started with is
still current when it arrives. Results can arrive out of order; stale ones
are dropped without touching session state.

States: IDLE → DEBOUNCING → FETCHING → IDLE.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Callable

from truckfinder.application.ports.geocoder_port import GeocoderPort
from truckfinder.config import settings
from truckfinder.domain.errors import AddressNotFound, GeocodingError
from truckfinder.domain.value_objects.enums import FetchOutcome, SuggestionState
from truckfinder.domain.value_objects.location import (
    ResolvedLocation,
    SearchQuery,
    SuggestionCandidate,
)

logger = logging.getLogger(__name__)

Subscriber = Callable[[list[SuggestionCandidate]], None]


class SuggestionSession:
    def __init__(
        self,
        geocoder: GeocoderPort,
        debounce_ms: int | None = None,
        min_query_length: int | None = None,
        limit: int | None = None,
        focus_grace_ms: int | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._geocoder = geocoder
        self._debounce_s = _or_default(debounce_ms, settings.suggestion_debounce_ms) / 1000
        self._min_length = _or_default(min_query_length, settings.suggestion_min_length)
        self._limit = _or_default(limit, settings.suggestion_limit)
        self._focus_grace_s = _or_default(focus_grace_ms, settings.suggestion_focus_grace_ms) / 1000
        self._clock = clock

        self._generation = 0
        self._text = ""
        self._state = SuggestionState.IDLE
        self._timer: asyncio.TimerHandle | None = None
        self._fetches: set[asyncio.Task[FetchOutcome]] = set()

        self._candidates: list[SuggestionCandidate] = []
        self._candidates_generation = 0
        self._focused = True
        self._blurred_at: float | None = None
        self._subscribers: list[Subscriber] = []

    # ─── Read-only view ─────────────────────────────────────────────

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def state(self) -> SuggestionState:
        return self._state

    @property
    def text(self) -> str:
        return self._text

    @property
    def candidates(self) -> list[SuggestionCandidate]:
        """Candidates for the current generation, or [] if none are known yet."""
        if self._candidates_generation != self._generation:
            return []
        return list(self._candidates)

    @property
    def in_flight(self) -> int:
        return len(self._fetches)

    # ─── Subscription ───────────────────────────────────────────────

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register a callback for published candidate lists. Returns an unsubscribe function."""
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    # ─── Input events ───────────────────────────────────────────────

    def on_input(self, text: str) -> None:
        """Handle an input change. Must be called from the event loop thread."""
        self._generation += 1
        self._text = text
        self._cancel_timer()
        self._focused = True
        self._blurred_at = None
        self._state = SuggestionState.DEBOUNCING

        if len(text.strip()) < self._min_length:
            # Short queries resolve synchronously to nothing, no timer, no network
            self._set_candidates([])
            self._state = SuggestionState.IDLE
            self._publish([])
            return

        query = SearchQuery(text=text, generation=self._generation)
        loop = asyncio.get_running_loop()
        self._timer = loop.call_later(self._debounce_s, self._on_timer, query)

    def on_blur(self) -> None:
        """Input lost focus: hide the list, keep any lookup in flight."""
        self._focused = False
        self._blurred_at = self._clock()

    def on_focus(self) -> None:
        """Input regained focus: re-show current candidates if the blur was short."""
        blurred_at = self._blurred_at
        self._focused = True
        self._blurred_at = None
        if blurred_at is None:
            return
        if self._clock() - blurred_at > self._focus_grace_s:
            return
        current = self.candidates
        if current:
            self._publish(current)

    def select(self, candidate: SuggestionCandidate) -> ResolvedLocation:
        """Take a candidate as the answer. No further lookups are made."""
        self._reset(candidate.address)
        return candidate.to_resolved()

    def select_at(self, index: int) -> ResolvedLocation:
        """Select by position in the current candidate list.

        Raises:
            IndexError: if there is no candidate at index.
        """
        current = self.candidates
        if not 0 <= index < len(current):
            raise IndexError(f"No suggestion at position {index}")
        return self.select(current[index])

    async def submit(self) -> ResolvedLocation:
        """Confirm the current input (Enter key).

        Picks the first current candidate when there is one, otherwise
        geocodes the typed text.

        Raises:
            GeocodingError: AddressNotFound, NetworkError or RateLimited.
        """
        current = self.candidates
        if current:
            return self.select(current[0])

        text = self._text.strip()
        if len(text) < self._min_length:
            raise AddressNotFound(text)

        self._cancel_timer()
        self._generation += 1
        self._state = SuggestionState.IDLE
        generation = self._generation
        resolved = await self._geocoder.forward_geocode(text)
        if generation == self._generation:
            self._reset(resolved.address)
        return resolved

    def clear(self) -> None:
        self._reset("")

    async def aclose(self) -> None:
        """Cancel the pending timer and any lookup still in flight."""
        self._cancel_timer()
        self._subscribers.clear()
        tasks = list(self._fetches)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

    # ─── Internals ──────────────────────────────────────────────────

    def _on_timer(self, query: SearchQuery) -> None:
        self._timer = None
        self._state = SuggestionState.FETCHING
        task = asyncio.get_running_loop().create_task(self._fetch(query))
        self._fetches.add(task)
        task.add_done_callback(self._fetches.discard)

    async def _fetch(self, query: SearchQuery) -> FetchOutcome:
        try:
            candidates = await self._geocoder.search_candidates(query.text, self._limit)
        except GeocodingError as e:
            logger.warning("Suggestion lookup failed for '%s': %s", query.text, e)
            candidates = []
        except Exception:
            logger.exception("Unexpected error looking up suggestions for '%s'", query.text)
            candidates = []

        if query.generation != self._generation:
            logger.debug(
                "Dropping suggestions for '%s' (generation %d, current %d)",
                query.text, query.generation, self._generation,
            )
            return FetchOutcome.SUPERSEDED

        self._set_candidates(candidates)
        self._state = SuggestionState.IDLE
        if self._focused:
            self._publish(candidates)
        return FetchOutcome.RESOLVED

    def _reset(self, text: str) -> None:
        self._cancel_timer()
        self._generation += 1
        self._text = text
        self._state = SuggestionState.IDLE
        self._set_candidates([])
        self._publish([])

    def _set_candidates(self, candidates: list[SuggestionCandidate]) -> None:
        self._candidates = list(candidates)
        self._candidates_generation = self._generation

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _publish(self, candidates: list[SuggestionCandidate]) -> None:
        for callback in list(self._subscribers):
            try:
                callback(list(candidates))
            except Exception:
                logger.exception("Suggestion subscriber failed")


def _or_default(value: int | None, default: int) -> int:
    return default if value is None else value
