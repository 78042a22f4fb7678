"""Geographic utility functions."""

import math

from .config import CONFIG
from .models import Coordinate, Direction


def haversine_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Calculate distance between two points in kilometers using Haversine formula"""
    R = CONFIG["earth_radius_km"]

    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    delta_phi = math.radians(lat2 - lat1)
    delta_lambda = math.radians(lon2 - lon1)

    a = (math.sin(delta_phi / 2) ** 2 +
         math.cos(phi1) * math.cos(phi2) * math.sin(delta_lambda / 2) ** 2)
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    return R * c


def distance_km(a: Coordinate, b: Coordinate) -> float:
    """Great-circle distance between two coordinates in kilometers"""
    return haversine_distance(a.lat, a.lon, b.lat, b.lon)


def _wrap_longitude(lon: float) -> float:
    if -180.0 <= lon <= 180.0:
        return lon
    return (lon + 180.0) % 360.0 - 180.0


def offset_target(origin: Coordinate, direction: Direction, target_km: float) -> Coordinate:
    """Approximate the point target_km away from origin along a cardinal direction.

    Uses a flat-earth degrees-per-km approximation. East/West offsets are
    divided by cos(latitude) to account for converging meridians. The result
    is only a seed for the routing service; the real walking distance comes
    back with the route.
    """
    offset = target_km / CONFIG["km_per_degree"]

    if direction in (Direction.NORTH, Direction.SOUTH):
        sign = 1 if direction is Direction.NORTH else -1
        lat = max(-90.0, min(90.0, origin.lat + sign * offset))
        return Coordinate(lat, origin.lon)

    sign = 1 if direction is Direction.EAST else -1
    cos_lat = math.cos(math.radians(origin.lat))
    # cos(90deg) is ~6e-17, not zero; cap so the pole still gives a finite target
    lon_offset = min(offset / cos_lat, 180.0) if cos_lat > 0 else 180.0
    return Coordinate(origin.lat, _wrap_longitude(origin.lon + sign * lon_offset))


def offset_targets(origin: Coordinate, target_km: float) -> dict[Direction, Coordinate]:
    """Seed targets for every cardinal direction, in discovery order"""
    return {direction: offset_target(origin, direction, target_km) for direction in Direction}
