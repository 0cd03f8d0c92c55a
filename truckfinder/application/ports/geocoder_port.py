"""Port interface for geocoding between addresses and coordinates."""

from abc import ABC, abstractmethod

from truckfinder.domain.value_objects.coordinates import Coordinates
from truckfinder.domain.value_objects.location import ResolvedLocation, SuggestionCandidate


class GeocoderPort(ABC):
    name = "geocoder"

    @abstractmethod
    async def forward_geocode(self, address: str) -> ResolvedLocation:
        """Resolve an address to its best single match.

        Raises AddressNotFound, NetworkError or RateLimited.
        """
        ...

    @abstractmethod
    async def reverse_geocode(self, coordinates: Coordinates) -> str:
        """Return a display address for coordinates.

        Never raises: falls back to ``coordinates.format_fallback()``.
        """
        ...

    @abstractmethod
    async def search_candidates(self, query: str, limit: int) -> list[SuggestionCandidate]:
        """Return up to ``limit`` matches for a partial query, in provider order.

        Queries shorter than ``settings.suggestion_min_length`` return [] without a network call.
        No results is [], transport failures raise NetworkError / RateLimited.
        """
        ...
