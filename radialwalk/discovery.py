"""Radial walking-distance discovery.

For an origin, each cardinal direction gets a seed target one target
distance away. The routing service turns the seed into a real walking
route; routes whose length falls inside the acceptance band become flags,
named by reverse geocoding their endpoint. Directions run one after another
with a fixed pause between them so the public services are not hammered.
"""

import threading
from typing import Callable, Iterator, Optional

from .config import CONFIG
from .geo import offset_target
from .geocoding import PlaceResolver, fallback_place_name
from .logger import Logger
from .models import Coordinate, Direction, Flag, RouteResult
from .pacing import Pacer
from .routing import RouteResolver

Discovery = tuple[Flag, RouteResult]
ResultCallback = Callable[[Flag, RouteResult], None]


class RadialDiscoveryEngine:
    """Finds flags roughly target_km away on foot in each cardinal direction"""

    def __init__(self, routes: Optional[RouteResolver] = None,
                 places: Optional[PlaceResolver] = None,
                 pacer: Optional[Pacer] = None,
                 logger: Optional[Logger] = None,
                 target_km: Optional[float] = None,
                 min_km: Optional[float] = None,
                 max_km: Optional[float] = None,
                 pacing_delay: Optional[float] = None):
        self.logger = logger or Logger()
        self.routes = routes or RouteResolver(logger=self.logger)
        self.places = places or PlaceResolver(logger=self.logger)
        self.pacer = pacer or Pacer(pacing_delay)
        self.target_km = CONFIG["target_km"] if target_km is None else target_km
        self.min_km = CONFIG["min_km"] if min_km is None else min_km
        self.max_km = CONFIG["max_km"] if max_km is None else max_km
        if self.target_km <= 0:
            raise ValueError("target_km must be positive")
        if self.min_km > self.max_km:
            raise ValueError(f"Empty acceptance band [{self.min_km}, {self.max_km}]")

    def accepts(self, route: RouteResult) -> bool:
        return self.min_km <= route.distance_km <= self.max_km

    def _place_name(self, position: Coordinate) -> str:
        try:
            return self.places.resolve_place_name(position)
        except Exception as e:
            self.logger.log("Place resolver raised", {"position": position.to_dict(), "error": repr(e)})
            return fallback_place_name(position)

    def _resolve_direction(self, origin: Coordinate, direction: Direction) -> Optional[Discovery]:
        target = offset_target(origin, direction, self.target_km)
        route = self.routes.find_walking_route(origin, target)

        if route is None:
            self.logger.log("No route", {"direction": direction.value})
            return None

        if not self.accepts(route):
            self.logger.log("Route rejected", {
                "direction": direction.value,
                "distance_km": round(route.distance_km, 2),
                "band": [self.min_km, self.max_km],
            })
            return None

        place_name = self._place_name(route.endpoint)
        flag = Flag.create(route.endpoint, place_name, direction, route.distance_km)
        self.logger.log("Flag placed", {
            "direction": direction.value,
            "distance_km": flag.distance_km,
            "name": place_name,
        })
        return flag, route

    def iter_discover(self, origin: Coordinate,
                      cancel: Optional[threading.Event] = None) -> Iterator[Discovery]:
        """Yield (flag, route) pairs as directions are accepted.

        Directions are always visited North, South, East, West. The pacer
        pauses after every direction, the last one included, whatever its
        outcome. Setting cancel stops before the next direction.
        """
        self.logger.log("Discovery started", {"origin": origin.to_dict(), "target_km": self.target_km})
        accepted = 0

        for direction in Direction:
            if cancel is not None and cancel.is_set():
                self.logger.log("Discovery cancelled", {"before": direction.value})
                return

            found = self._resolve_direction(origin, direction)
            if found is not None:
                accepted += 1
                yield found

            if not self.pacer.pause(cancel):
                self.logger.log("Discovery cancelled", {"after": direction.value})
                return

        self.logger.log("Discovery finished", {"flags": accepted})

    def discover(self, origin: Coordinate, on_result: Optional[ResultCallback] = None,
                 cancel: Optional[threading.Event] = None) -> list[Discovery]:
        """Run discovery to completion and return the accepted pairs in order"""
        results = []
        for flag, route in self.iter_discover(origin, cancel=cancel):
            results.append((flag, route))
            if on_result:
                on_result(flag, route)
        return results

    def discover_async(self, origin: Coordinate, on_result: Optional[ResultCallback] = None,
                       on_done: Optional[Callable[["DiscoveryJob"], None]] = None) -> "DiscoveryJob":
        """Start discovery on a background thread"""
        job = DiscoveryJob(self, origin, on_result=on_result, on_done=on_done)
        job.start()
        return job


class DiscoveryJob:
    """A discovery running on a daemon thread"""

    def __init__(self, engine: RadialDiscoveryEngine, origin: Coordinate,
                 on_result: Optional[ResultCallback] = None,
                 on_done: Optional[Callable[["DiscoveryJob"], None]] = None):
        self.engine = engine
        self.origin = origin
        self.on_result = on_result
        self.on_done = on_done
        self.results: list[Discovery] = []
        self.error: Optional[BaseException] = None
        self._cancel = threading.Event()
        self._finished = threading.Event()
        self._thread = threading.Thread(target=self._run, daemon=True)

    def start(self):
        self._thread.start()

    def _run(self):
        try:
            self.engine.discover(self.origin, on_result=self._collect, cancel=self._cancel)
        except Exception as e:
            self.error = e
            self.engine.logger.log("Discovery failed", {"error": repr(e)})
        finally:
            try:
                if self.on_done:
                    self.on_done(self)
            finally:
                # join() returns only once on_done has run
                self._finished.set()

    def _collect(self, flag: Flag, route: RouteResult):
        self.results.append((flag, route))
        if self.on_result:
            self.on_result(flag, route)

    def cancel(self):
        self._cancel.set()

    @property
    def cancelled(self) -> bool:
        return self._cancel.is_set()

    @property
    def done(self) -> bool:
        return self._finished.is_set()

    def join(self, timeout: Optional[float] = None) -> bool:
        """Wait for the job. Returns True if it finished."""
        return self._finished.wait(timeout)
