"""Walking routes via the OSRM HTTP API."""

from typing import Optional

import requests

from .config import CONFIG
from .errors import InvalidCoordinate
from .logger import Logger
from .models import Coordinate, RouteResult
from .pacing import RateLimiter


class RouteResolver:
    """Resolve an (origin, destination) pair to a walking route"""

    PROFILE = "foot"

    def __init__(self, base_url: Optional[str] = None, timeout: Optional[float] = None,
                 session: Optional[requests.Session] = None,
                 logger: Optional[Logger] = None,
                 rate_limiter: Optional[RateLimiter] = None):
        self.base_url = (base_url or CONFIG["osrm_url"]).rstrip("/")
        self.timeout = CONFIG["request_timeout"] if timeout is None else timeout
        self.session = session or requests.Session()
        self.session.headers.update({"User-Agent": CONFIG["user_agent"]})
        self.logger = logger or Logger()
        self.rate_limiter = rate_limiter

    def route_url(self, start: Coordinate, end: Coordinate) -> str:
        # OSRM takes lon,lat order
        return (f"{self.base_url}/route/v1/{self.PROFILE}/"
                f"{start.lon},{start.lat};{end.lon},{end.lat}")

    def find_walking_route(self, start: Coordinate, end: Coordinate) -> Optional[RouteResult]:
        """Fetch the first walking route from start to end.

        Returns None on any failure: network errors, HTTP errors, malformed
        bodies, a non-"Ok" service code or an empty route list. One attempt
        only.
        """
        url = self.route_url(start, end)
        params = {"overview": "full", "geometries": "geojson"}

        if self.rate_limiter:
            self.rate_limiter.acquire()

        try:
            response = self.session.get(url, params=params, timeout=self.timeout)
            response.raise_for_status()
            data = response.json()
        except requests.RequestException as e:
            self.logger.log("Route request failed", {"url": url, "error": str(e)})
            return None
        except ValueError as e:
            self.logger.log("Route response was not JSON", {"url": url, "error": str(e)})
            return None

        return self.parse_response(data)

    def parse_response(self, data) -> Optional[RouteResult]:
        """Convert an OSRM route response to a RouteResult"""
        if not isinstance(data, dict):
            self.logger.log("Unexpected route response", {"type": type(data).__name__})
            return None

        code = data.get("code")
        routes = data.get("routes") or []
        if code != "Ok" or not routes:
            self.logger.log("No route found", {"code": code, "message": data.get("message")})
            return None

        route = routes[0]
        try:
            raw_coords = route["geometry"]["coordinates"]
            polyline = tuple(Coordinate(lat, lon) for lon, lat in raw_coords)
            distance_km = float(route["distance"]) / 1000
        except (KeyError, TypeError, ValueError) as e:
            # InvalidCoordinate is a ValueError
            kind = "invalid coordinate" if isinstance(e, InvalidCoordinate) else "malformed route"
            self.logger.log("Route response rejected", {"reason": kind, "error": str(e)})
            return None

        if len(polyline) < 2 or distance_km <= 0:
            self.logger.log("Route response rejected", {
                "reason": "degenerate route",
                "points": len(polyline),
                "distance_km": distance_km,
            })
            return None

        return RouteResult(polyline=polyline, distance_km=distance_km)
