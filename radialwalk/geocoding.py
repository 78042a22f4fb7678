"""Place names and search via the Nominatim HTTP API."""

from typing import Optional

import requests

from .config import CONFIG
from .errors import GeocodingError
from .logger import Logger
from .models import Coordinate, Place
from .pacing import RateLimiter


def fallback_place_name(position: Coordinate) -> str:
    return f"Location {position.lat:.4f}, {position.lon:.4f}"


class PlaceResolver:
    """Reverse geocoding for flags and forward search for markers"""

    def __init__(self, base_url: Optional[str] = None, timeout: Optional[float] = None,
                 session: Optional[requests.Session] = None,
                 logger: Optional[Logger] = None,
                 rate_limiter: Optional[RateLimiter] = None,
                 zoom: Optional[int] = None):
        self.base_url = (base_url or CONFIG["nominatim_url"]).rstrip("/")
        self.timeout = CONFIG["request_timeout"] if timeout is None else timeout
        self.zoom = CONFIG["reverse_zoom"] if zoom is None else zoom
        self.session = session or requests.Session()
        # Nominatim rejects requests without an identifying User-Agent
        self.session.headers.update({"User-Agent": CONFIG["user_agent"]})
        self.logger = logger or Logger()
        self.rate_limiter = rate_limiter

    def _get(self, path: str, params: dict):
        if self.rate_limiter:
            self.rate_limiter.acquire()
        response = self.session.get(f"{self.base_url}/{path}", params=params, timeout=self.timeout)
        response.raise_for_status()
        return response.json()

    def resolve_place_name(self, position: Coordinate) -> str:
        """Human-readable name for a coordinate. Never raises."""
        params = {"format": "json", "lat": position.lat, "lon": position.lon, "zoom": self.zoom}
        try:
            data = self._get("reverse", params)
        except (requests.RequestException, ValueError) as e:
            self.logger.log("Reverse geocoding failed", {"position": position.to_dict(), "error": str(e)})
            return fallback_place_name(position)
        except Exception as e:
            # Anything else from the transport still yields a name
            self.logger.log("Reverse geocoding error", {"position": position.to_dict(), "error": repr(e)})
            return fallback_place_name(position)

        name = data.get("display_name") if isinstance(data, dict) else None
        if not name or not str(name).strip():
            self.logger.log("No place name returned", {"position": position.to_dict()})
            return fallback_place_name(position)
        return str(name)

    def search(self, query: str) -> Optional[Place]:
        """Best match for a free-text query, or None if nothing matched.

        Raises GeocodingError if the service could not be reached.
        """
        query = (query or "").strip()
        if not query:
            return None

        params = {"format": "json", "q": query, "limit": 1}
        try:
            data = self._get("search", params)
        except (requests.RequestException, ValueError) as e:
            self.logger.log("Search failed", {"query": query, "error": str(e)})
            raise GeocodingError(f"Search for {query!r} failed: {e}") from e

        if not isinstance(data, list) or not data:
            self.logger.log("Search returned no results", {"query": query})
            return None

        first = data[0]
        try:
            position = Coordinate(float(first["lat"]), float(first["lon"]))
        except (KeyError, TypeError, ValueError) as e:
            self.logger.log("Search result malformed", {"query": query, "error": str(e)})
            return None

        name = first.get("display_name") or query
        return Place(position=position, display_name=name)
