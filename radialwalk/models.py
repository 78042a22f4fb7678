"""Data classes for radialwalk."""

import itertools
import math
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from .config import CONFIG
from .errors import InvalidCoordinate


@dataclass(frozen=True)
class Coordinate:
    lat: float
    lon: float

    def __post_init__(self):
        try:
            lat = float(self.lat)
            lon = float(self.lon)
        except (TypeError, ValueError):
            raise InvalidCoordinate(f"Coordinate values must be numbers: ({self.lat!r}, {self.lon!r})")
        if not (math.isfinite(lat) and math.isfinite(lon)):
            raise InvalidCoordinate(f"Coordinate values must be finite: ({lat}, {lon})")
        if not -90.0 <= lat <= 90.0:
            raise InvalidCoordinate(f"Latitude {lat} outside [-90, 90]")
        if not -180.0 <= lon <= 180.0:
            raise InvalidCoordinate(f"Longitude {lon} outside [-180, 180]")
        object.__setattr__(self, "lat", lat)
        object.__setattr__(self, "lon", lon)

    def label(self) -> str:
        return f"{self.lat:.4f}, {self.lon:.4f}"

    def as_list(self) -> list[float]:
        return [self.lat, self.lon]

    def to_dict(self) -> dict:
        return {"lat": self.lat, "lon": self.lon}

    @classmethod
    def from_dict(cls, d: dict) -> "Coordinate":
        return cls(d["lat"], d["lon"])


class Direction(Enum):
    """Cardinal directions, in the order discovery visits them"""
    NORTH = "north"
    SOUTH = "south"
    EAST = "east"
    WEST = "west"

    @property
    def label(self) -> str:
        return self.value.capitalize()


_id_seq = itertools.count(1)  # shared by every generated id


def _epoch_ms() -> int:
    return int(time.time() * 1000)


@dataclass(frozen=True)
class RouteResult:
    """A walking route returned by the routing service"""
    polyline: tuple[Coordinate, ...]  # origin -> destination
    distance_km: float

    @property
    def endpoint(self) -> Coordinate:
        return self.polyline[-1]

    def to_dict(self) -> dict:
        return {
            "coordinates": [c.as_list() for c in self.polyline],
            "distance_km": self.distance_km,
        }


@dataclass(frozen=True)
class Flag:
    """An accepted destination roughly one target distance away on foot"""
    id: str
    position: Coordinate
    place_name: str
    direction: Direction
    distance_km: float  # rounded to 2 decimals

    @classmethod
    def create(cls, position: Coordinate, place_name: str, direction: Direction,
               distance_km: float) -> "Flag":
        return cls(
            id=f"flag-{_epoch_ms()}-{next(_id_seq)}-{direction.value}",
            position=position,
            place_name=place_name,
            direction=direction,
            distance_km=round(distance_km, 2),
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "position": self.position.as_list(),
            "name": self.place_name,
            "direction": self.direction.value,
            "direction_label": self.direction.label,
            "distance_km": self.distance_km,
        }


@dataclass(frozen=True)
class RouteLine:
    """Drawable form of a RouteResult"""
    id: str
    coordinates: tuple[Coordinate, ...]
    color: str = field(default_factory=lambda: CONFIG["route_color"])

    @classmethod
    def from_route(cls, route: RouteResult, direction: Direction,
                   color: Optional[str] = None) -> "RouteLine":
        return cls(
            id=f"route-{_epoch_ms()}-{next(_id_seq)}-{direction.value}",
            coordinates=route.polyline,
            color=color or CONFIG["route_color"],
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "coordinates": [c.as_list() for c in self.coordinates],
            "color": self.color,
        }


@dataclass(frozen=True)
class Marker:
    """A user-placed origin point"""
    id: str
    position: Coordinate
    name: str

    @classmethod
    def at(cls, position: Coordinate, name: Optional[str] = None) -> "Marker":
        return cls(
            id=f"marker-{_epoch_ms()}-{next(_id_seq)}",
            position=position,
            name=name or f"Marker {position.label()}",
        )

    def to_dict(self) -> dict:
        return {"id": self.id, "position": self.position.as_list(), "name": self.name}


@dataclass(frozen=True)
class Place:
    """Forward search result"""
    position: Coordinate
    display_name: str
