"""Map session state: markers, flags and routes."""

import threading
from typing import Callable, Optional

from .config import CONFIG
from .discovery import DiscoveryJob, RadialDiscoveryEngine
from .errors import DiscoveryInProgress
from .geocoding import PlaceResolver
from .logger import Logger
from .models import Coordinate, Flag, Marker, RouteLine, RouteResult

Listener = Callable[[str, dict], None]


class MapSession:
    """Owns everything shown on the map and drives discovery from user actions.

    Only one discovery runs at a time. Placing a marker while one is in
    progress raises DiscoveryInProgress, the same way the UI disables input
    while routes load.
    """

    def __init__(self, engine: Optional[RadialDiscoveryEngine] = None,
                 places: Optional[PlaceResolver] = None,
                 logger: Optional[Logger] = None,
                 listener: Optional[Listener] = None):
        self.logger = logger or Logger()
        self.engine = engine or RadialDiscoveryEngine(logger=self.logger)
        self.places = places or self.engine.places
        self.listener = listener

        self.markers: list[Marker] = []
        self.flags: list[Flag] = []
        self.routes: list[RouteLine] = []
        self.center: Coordinate = Coordinate(*CONFIG["default_center"])
        self.zoom: int = CONFIG["default_zoom"]

        self._lock = threading.RLock()
        self._job: Optional[DiscoveryJob] = None
        self._loading = False
        self._generation = 0  # bumped by clear_all

    @property
    def loading(self) -> bool:
        return self._loading

    def _emit(self, event: str, data: dict):
        if self.listener:
            self.listener(event, data)

    def _set_loading(self, value: bool):
        self._loading = value
        self._emit("loading", {"value": value})

    def _begin_discovery(self):
        with self._lock:
            if self._loading:
                raise DiscoveryInProgress("Still finding routes for the previous marker")
            self._set_loading(True)

    def _add_result(self, flag: Flag, route: RouteResult, generation: int):
        line = RouteLine.from_route(route, flag.direction)
        with self._lock:
            if generation != self._generation:
                # Map was cleared while this direction was in flight
                return
            self.flags.append(flag)
            self.routes.append(line)
        self._emit("flag", {"flag": flag.to_dict(), "route": line.to_dict()})

    def _finish(self, job: Optional[DiscoveryJob] = None):
        with self._lock:
            if job is None or self._job is job:
                self._job = None
            self._set_loading(False)
        self._emit("state", self.snapshot())

    def add_marker(self, position: Coordinate, name: Optional[str] = None,
                   background: bool = True) -> tuple[Marker, Optional[DiscoveryJob]]:
        """Place a marker and discover flags around it.

        With background=True discovery runs on a worker thread and the job is
        returned; otherwise this blocks until all four directions are done.
        """
        self._begin_discovery()
        marker = Marker.at(position, name)
        with self._lock:
            self.markers.append(marker)
            generation = self._generation
        self.logger.log("Marker added", marker.to_dict())
        self._emit("state", self.snapshot())

        def on_result(flag: Flag, route: RouteResult):
            self._add_result(flag, route, generation)

        if not background:
            try:
                self.engine.discover(position, on_result=on_result)
            finally:
                self._finish()
            return marker, None

        job = DiscoveryJob(self.engine, position, on_result=on_result, on_done=self._finish)
        with self._lock:
            self._job = job
        try:
            job.start()
        except RuntimeError:
            self._finish(job)
            raise
        return marker, job

    def search(self, query: str, background: bool = True) -> Optional[Marker]:
        """Geocode a query and place a marker on the best match.

        Returns None when nothing matched. GeocodingError propagates when the
        search service is unreachable.
        """
        if self._loading:
            raise DiscoveryInProgress("Still finding routes for the previous marker")
        place = self.places.search(query)
        if place is None:
            self.logger.log("Search found nothing", {"query": query})
            return None
        self.center = place.position
        self.zoom = CONFIG["search_zoom"]
        marker, _ = self.add_marker(place.position, place.display_name, background=background)
        return marker

    def delete_marker(self, marker_id: str) -> bool:
        """Remove a marker. Flags found for it stay on the map."""
        with self._lock:
            before = len(self.markers)
            self.markers = [m for m in self.markers if m.id != marker_id]
            removed = len(self.markers) != before
        if removed:
            self.logger.log("Marker deleted", {"id": marker_id})
            self._emit("state", self.snapshot())
        return removed

    def clear_all(self):
        """Remove every marker, flag and route, cancelling any running discovery"""
        with self._lock:
            job = self._job
            self.markers = []
            self.flags = []
            self.routes = []
            self._generation += 1
        if job is not None:
            job.cancel()
        self.logger.log("Cleared all markers")
        self._emit("state", self.snapshot())

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until the running discovery (if any) finishes"""
        job = self._job
        if job is None:
            return True
        return job.join(timeout)

    def snapshot(self) -> dict:
        with self._lock:
            return {
                "markers": [m.to_dict() for m in self.markers],
                "flags": [f.to_dict() for f in self.flags],
                "routes": [r.to_dict() for r in self.routes],
                "loading": self._loading,
                "center": self.center.as_list(),
                "zoom": self.zoom,
            }
