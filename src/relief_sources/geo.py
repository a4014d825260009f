"""Coordinate helpers: validation, great-circle distance, degree rounding."""

import math

from relief_sources.data import Coordinates

EARTH_RADIUS_MI = 3958.8
METERS_PER_MILE = 1609.344


def is_valid_coordinate(lat: float | None, lng: float | None) -> bool:
    """Whether ``lat``/``lng`` form a finite point on the globe."""
    if lat is None or lng is None:
        return False
    if not (math.isfinite(lat) and math.isfinite(lng)):
        return False
    return -90.0 <= lat <= 90.0 and -180.0 <= lng <= 180.0


def haversine_miles(a: Coordinates, b: Coordinates) -> float:
    """Great-circle distance between two points, in statute miles."""
    lat1, lat2 = math.radians(a.lat), math.radians(b.lat)
    dlat = lat2 - lat1
    dlng = math.radians(b.lng - a.lng)
    h = math.sin(dlat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(dlng / 2) ** 2
    return 2 * EARTH_RADIUS_MI * math.asin(min(1.0, math.sqrt(h)))


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves toward positive infinity.

    Unlike ``round`` this does not use banker's rounding, so ``0.5 -> 1``
    and ``-0.5 -> 0``.
    """
    return math.floor(value + 0.5)


def miles_to_meters(miles: float) -> float:
    return miles * METERS_PER_MILE
