import math

import pytest

from radialwalk.geo import distance_km, haversine_distance, offset_target, offset_targets
from radialwalk.models import Coordinate, Direction


POINTS = [
    Coordinate(37.5665, 126.9780),
    Coordinate(0.0, 0.0),
    Coordinate(-33.8688, 151.2093),
    Coordinate(51.5074, -0.1278),
    Coordinate(64.1466, -21.9426),
]


@pytest.mark.parametrize("point", POINTS)
def test_distance_to_self_is_zero(point):
    assert distance_km(point, point) == pytest.approx(0.0, abs=1e-9)


def test_distance_is_symmetric():
    for a in POINTS:
        for b in POINTS:
            assert distance_km(a, b) == pytest.approx(distance_km(b, a), rel=1e-12)


def test_distance_positive_for_distinct_points():
    assert distance_km(POINTS[0], POINTS[1]) > 0


def test_known_distance_london_paris():
    london = Coordinate(51.5074, -0.1278)
    paris = Coordinate(48.8566, 2.3522)
    assert distance_km(london, paris) == pytest.approx(343.5, abs=2.0)


def test_one_degree_of_latitude_is_about_111_km():
    assert haversine_distance(0, 0, 1, 0) == pytest.approx(111.19, abs=0.05)


def test_distance_grows_along_a_bearing():
    origin = Coordinate(37.5665, 126.9780)
    previous = 0.0
    for step in range(1, 20):
        d = distance_km(origin, Coordinate(origin.lat + step * 0.01, origin.lon + step * 0.01))
        assert d > previous
        previous = d


@pytest.mark.parametrize("origin", POINTS)
def test_north_offset_moves_latitude_only(origin):
    target = offset_target(origin, Direction.NORTH, 5.0)
    assert target.lat - origin.lat == pytest.approx(5 / 111)
    assert target.lon == origin.lon


@pytest.mark.parametrize("origin", POINTS)
def test_south_offset_mirrors_north(origin):
    target = offset_target(origin, Direction.SOUTH, 5.0)
    assert origin.lat - target.lat == pytest.approx(5 / 111)
    assert target.lon == origin.lon


@pytest.mark.parametrize("origin", POINTS)
def test_east_west_offsets_are_opposite(origin):
    east = offset_target(origin, Direction.EAST, 5.0)
    west = offset_target(origin, Direction.WEST, 5.0)
    assert east.lat == origin.lat
    assert west.lat == origin.lat
    assert east.lon - origin.lon > 0
    assert east.lon - origin.lon == pytest.approx(origin.lon - west.lon)


def test_east_offset_is_corrected_for_latitude():
    origin = Coordinate(60.0, 10.0)
    east = offset_target(origin, Direction.EAST, 5.0)
    assert east.lon - origin.lon == pytest.approx((5 / 111) / math.cos(math.radians(60.0)))


def test_longitude_delta_grows_towards_the_poles():
    deltas = []
    for lat in (0.0, 30.0, 60.0, 80.0, 89.0):
        origin = Coordinate(lat, 0.0)
        deltas.append(offset_target(origin, Direction.EAST, 5.0).lon)
    assert deltas == sorted(deltas)
    assert len(set(deltas)) == len(deltas)


def test_southern_latitudes_grow_the_same_way():
    north = offset_target(Coordinate(70.0, 0.0), Direction.WEST, 5.0)
    south = offset_target(Coordinate(-70.0, 0.0), Direction.WEST, 5.0)
    assert north.lon == pytest.approx(south.lon)


def test_offset_wraps_across_the_antimeridian():
    origin = Coordinate(0.0, 179.99)
    east = offset_target(origin, Direction.EAST, 5.0)
    assert -180.0 <= east.lon <= 180.0
    assert east.lon < 0


def test_offset_at_the_pole_stays_valid():
    north = offset_target(Coordinate(90.0, 0.0), Direction.NORTH, 5.0)
    east = offset_target(Coordinate(90.0, 0.0), Direction.EAST, 5.0)
    assert north.lat == 90.0
    assert -180.0 <= east.lon <= 180.0


def test_offset_targets_follow_direction_order():
    targets = offset_targets(Coordinate(37.5665, 126.9780), 5.0)
    assert list(targets) == [Direction.NORTH, Direction.SOUTH, Direction.EAST, Direction.WEST]
