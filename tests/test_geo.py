"""
Geospatial Calculator Tests
===========================
"""

import pytest

from routetrack.Services.geo import (
    EARTH_RADIUS_M,
    Coordinate,
    distance_meters,
    initial_bearing_degrees,
)

SF = Coordinate(37.7749, -122.4194)
SF_NORTH = Coordinate(37.7849, -122.4194)


class TestDistance:

    def test_identical_points_is_zero(self):
        assert distance_meters(SF, SF) == 0.0

    def test_hundredth_degree_of_latitude(self):
        """0.01 degrees of latitude is about 1112 m on a 6371 km sphere."""
        assert distance_meters(SF, SF_NORTH) == pytest.approx(1111.95, abs=0.5)

    def test_symmetric(self):
        a = Coordinate(10.9878, -74.7889)
        b = Coordinate(11.0041, -74.8070)
        assert distance_meters(a, b) == pytest.approx(distance_meters(b, a))

    def test_one_degree_on_equator(self):
        d = distance_meters(Coordinate(0.0, 0.0), Coordinate(0.0, 1.0))
        assert d == pytest.approx(111194.9, rel=1e-4)

    def test_antipodal_points_half_circumference(self):
        d = distance_meters(Coordinate(0.0, 0.0), Coordinate(0.0, 180.0))
        assert d == pytest.approx(3.141592653589793 * EARTH_RADIUS_M, rel=1e-9)

    def test_accepts_objects_with_lat_lon(self):
        class Point:
            latitude = 37.7749
            longitude = -122.4194

        assert distance_meters(Point(), SF_NORTH) == pytest.approx(distance_meters(SF, SF_NORTH))


class TestBearing:

    def test_identical_points_is_zero(self):
        assert initial_bearing_degrees(SF, SF) == 0.0

    def test_due_south(self):
        assert initial_bearing_degrees(SF_NORTH, SF) == pytest.approx(180.0, abs=1e-6)

    def test_due_north(self):
        assert initial_bearing_degrees(SF, SF_NORTH) == pytest.approx(0.0, abs=1e-6)

    def test_due_east_and_west(self):
        origin = Coordinate(0.0, 0.0)
        assert initial_bearing_degrees(origin, Coordinate(0.0, 1.0)) == pytest.approx(90.0)
        assert initial_bearing_degrees(origin, Coordinate(0.0, -1.0)) == pytest.approx(270.0)

    @pytest.mark.parametrize("target", [
        Coordinate(-45.0, -170.0),
        Coordinate(89.9, 179.9),
        Coordinate(-0.0001, -0.0001),
        Coordinate(12.0, -3.5),
    ])
    def test_range_is_half_open(self, target):
        bearing = initial_bearing_degrees(Coordinate(1.0, 2.0), target)
        assert 0.0 <= bearing < 360.0
