"""radialwalk - find walkable points about 5 km away in every cardinal direction."""

from .config import CONFIG
from .errors import RadialWalkError, InvalidCoordinate, GeocodingError, DiscoveryInProgress
from .models import Coordinate, Direction, RouteResult, Flag, Marker, Place, RouteLine
from .logger import Logger
from .geo import haversine_distance, distance_km, offset_target, offset_targets
from .pacing import Pacer, RateLimiter
from .routing import RouteResolver
from .geocoding import PlaceResolver, fallback_place_name
from .discovery import RadialDiscoveryEngine, DiscoveryJob
from .session import MapSession
from .__main__ import main

__all__ = [
    "CONFIG",
    "RadialWalkError",
    "InvalidCoordinate",
    "GeocodingError",
    "DiscoveryInProgress",
    "Coordinate",
    "Direction",
    "RouteResult",
    "Flag",
    "Marker",
    "Place",
    "RouteLine",
    "Logger",
    "haversine_distance",
    "distance_km",
    "offset_target",
    "offset_targets",
    "Pacer",
    "RateLimiter",
    "RouteResolver",
    "PlaceResolver",
    "fallback_place_name",
    "RadialDiscoveryEngine",
    "DiscoveryJob",
    "MapSession",
    "main",
]
