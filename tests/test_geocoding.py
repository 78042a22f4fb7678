import re

import pytest
import requests

from radialwalk.errors import GeocodingError
from radialwalk.geocoding import PlaceResolver, fallback_place_name
from radialwalk.models import Coordinate


POSITION = Coordinate(37.61123456, 126.98123456)
FALLBACK = re.compile(r"^Location -?\d+\.\d{4}, -?\d+\.\d{4}$")


@pytest.fixture
def resolver(http_session, logger):
    return PlaceResolver(base_url="https://nominatim.test", session=http_session, logger=logger)


def test_reverse_returns_display_name(resolver, http_session, respond):
    http_session.get.return_value = respond({"display_name": "Bukhansan, Jongno-gu, Seoul"})

    assert resolver.resolve_place_name(POSITION) == "Bukhansan, Jongno-gu, Seoul"

    args, kwargs = http_session.get.call_args
    assert args[0] == "https://nominatim.test/reverse"
    assert kwargs["params"] == {"format": "json", "lat": POSITION.lat, "lon": POSITION.lon, "zoom": 16}
    assert kwargs["timeout"] == 10


def test_fallback_format():
    assert fallback_place_name(POSITION) == "Location 37.6112, 126.9812"
    assert fallback_place_name(Coordinate(-1.5, -70.25)) == "Location -1.5000, -70.2500"


@pytest.mark.parametrize("failure", [
    requests.ConnectionError("down"),
    requests.Timeout("slow"),
    RuntimeError("adapter exploded"),
])
def test_reverse_failure_returns_fallback(resolver, http_session, failure):
    http_session.get.side_effect = failure
    name = resolver.resolve_place_name(POSITION)
    assert FALLBACK.match(name)
    assert name == "Location 37.6112, 126.9812"


@pytest.mark.parametrize("payload", [
    {"error": "Unable to geocode"},
    {"display_name": ""},
    {"display_name": "   "},
    [],
])
def test_reverse_without_name_returns_fallback(resolver, http_session, respond, payload):
    http_session.get.return_value = respond(payload)
    assert resolver.resolve_place_name(POSITION) == "Location 37.6112, 126.9812"


def test_reverse_http_error_returns_fallback(resolver, http_session, respond):
    http_session.get.return_value = respond({}, status=503)
    assert resolver.resolve_place_name(POSITION) == "Location 37.6112, 126.9812"


def test_search_returns_first_match(resolver, http_session, respond):
    http_session.get.return_value = respond([
        {"lat": "37.5663", "lon": "126.9779", "display_name": "Seoul City Hall"},
        {"lat": "35.0", "lon": "129.0", "display_name": "Somewhere else"},
    ])

    place = resolver.search("  seoul city hall ")

    assert place.position == Coordinate(37.5663, 126.9779)
    assert place.display_name == "Seoul City Hall"
    args, kwargs = http_session.get.call_args
    assert args[0] == "https://nominatim.test/search"
    assert kwargs["params"] == {"format": "json", "q": "seoul city hall", "limit": 1}


def test_search_without_results_returns_none(resolver, http_session, respond):
    http_session.get.return_value = respond([])
    assert resolver.search("nowhere at all") is None


@pytest.mark.parametrize("query", ["", "   ", None])
def test_blank_search_makes_no_request(resolver, http_session, query):
    assert resolver.search(query) is None
    http_session.get.assert_not_called()


def test_search_transport_failure_raises(resolver, http_session):
    http_session.get.side_effect = requests.ConnectionError("down")
    with pytest.raises(GeocodingError):
        resolver.search("seoul")


def test_search_with_malformed_result_returns_none(resolver, http_session, respond):
    http_session.get.return_value = respond([{"display_name": "No coordinates"}])
    assert resolver.search("seoul") is None


def test_search_falls_back_to_query_for_name(resolver, http_session, respond):
    http_session.get.return_value = respond([{"lat": "1", "lon": "2"}])
    assert resolver.search("cafe").display_name == "cafe"
