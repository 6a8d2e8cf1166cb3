# routetrack/Services/geo.py
"""
Geospatial Calculator
=====================
Pure functions on a spherical Earth (mean radius 6,371 km).

- distance_meters(): great-circle distance (haversine)
- initial_bearing_degrees(): forward azimuth normalized to [0, 360)

Both accept a Coordinate or any object exposing ``latitude`` and
``longitude`` (Ping rows, RawReport, Coordinates schema). Inputs are
assumed to be validated coordinates; neither function raises.
"""

from math import radians, degrees, sin, cos, sqrt, atan2
from typing import NamedTuple


EARTH_RADIUS_M = 6371000.0


class Coordinate(NamedTuple):
    latitude: float
    longitude: float


def distance_meters(a, b) -> float:
    """
    Great-circle distance between two points, in meters.

    Fórmula:
        h = sin²(Δlat/2) + cos(lat1) * cos(lat2) * sin²(Δlon/2)
        d = 2R * atan2(√h, √(1−h))

    Examples:
        >>> round(distance_meters(Coordinate(37.7749, -122.4194), Coordinate(37.7849, -122.4194)))
        1112
        >>> distance_meters(Coordinate(10.5, -74.8), Coordinate(10.5, -74.8))
        0.0
    """
    lat1 = radians(a.latitude)
    lat2 = radians(b.latitude)
    delta_lat = radians(b.latitude - a.latitude)
    delta_lon = radians(b.longitude - a.longitude)

    h = sin(delta_lat / 2) ** 2 + cos(lat1) * cos(lat2) * sin(delta_lon / 2) ** 2
    # rounding can push h a hair above 1 for antipodal points
    h = min(1.0, h)
    c = 2 * atan2(sqrt(h), sqrt(1 - h))
    return EARTH_RADIUS_M * c


def initial_bearing_degrees(frm, to) -> float:
    """
    Initial bearing (forward azimuth) from ``frm`` toward ``to``.

    Returns:
        float: Degrees clockwise from true north in [0, 360). 0.0 when both
        points are the same.
    """
    if frm.latitude == to.latitude and frm.longitude == to.longitude:
        return 0.0

    lat1 = radians(frm.latitude)
    lat2 = radians(to.latitude)
    delta_lon = radians(to.longitude - frm.longitude)

    y = sin(delta_lon) * cos(lat2)
    x = cos(lat1) * sin(lat2) - sin(lat1) * cos(lat2) * cos(delta_lon)

    bearing = (degrees(atan2(y, x)) + 360.0) % 360.0
    return 0.0 if bearing >= 360.0 else bearing
