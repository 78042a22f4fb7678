import threading
from unittest.mock import MagicMock

import pytest
import requests

from radialwalk.logger import Logger
from radialwalk.models import Coordinate, RouteResult
from radialwalk.pacing import Pacer


SEOUL = Coordinate(37.5665, 126.9780)


def make_route(origin: Coordinate, target: Coordinate, distance_km: float) -> RouteResult:
    midpoint = Coordinate((origin.lat + target.lat) / 2, (origin.lon + target.lon) / 2)
    return RouteResult(polyline=(origin, midpoint, target), distance_km=distance_km)


class StubRoutes:
    """Route resolver that answers from a list, one entry per call.

    An entry is a distance in km, None for "no route", or an exception to raise.
    """

    def __init__(self, answers):
        self.answers = list(answers)
        self.calls = []

    def find_walking_route(self, start, end):
        self.calls.append((start, end))
        answer = self.answers.pop(0)
        if answer is None:
            return None
        if isinstance(answer, BaseException):
            raise answer
        return make_route(start, end, answer)


class StubPlaces:
    def __init__(self, fail_for=()):
        self.calls = []
        self.fail_for = set(fail_for)

    def resolve_place_name(self, position):
        self.calls.append(position)
        if len(self.calls) in self.fail_for:
            raise RuntimeError("geocoder down")
        return f"Place {len(self.calls)}"

    def search(self, query):
        return None


class RecordingPacer(Pacer):
    def __init__(self):
        super().__init__(delay=1.0, sleep=lambda seconds: None)
        self.pauses = 0

    def pause(self, cancel=None):
        self.pauses += 1
        return super().pause(cancel)


@pytest.fixture
def logger():
    return Logger(echo=False)


@pytest.fixture
def pacer():
    return RecordingPacer()


@pytest.fixture
def stub_routes():
    return StubRoutes


@pytest.fixture
def stub_places():
    return StubPlaces


@pytest.fixture
def http_session():
    """requests.Session stand-in; set .get.return_value or .get.side_effect"""
    session = MagicMock()
    session.headers = {}
    return session


def json_response(payload, status=200):
    response = MagicMock()
    response.status_code = status
    response.json.return_value = payload
    if status >= 400:
        response.raise_for_status.side_effect = requests.HTTPError(f"{status} error")
    else:
        response.raise_for_status.return_value = None
    return response


@pytest.fixture
def respond():
    return json_response


@pytest.fixture
def seoul():
    return SEOUL


@pytest.fixture
def event():
    return threading.Event()
