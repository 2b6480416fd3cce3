"""
CitizenWatch - Geospatial Utilities
Region gate, grid bucketing and distance calculations.
"""

import math
from typing import List, Tuple
from dataclasses import dataclass

from citizenwatch.core.constants import INDIA_BBOX, GRID_PRECISION

# Earth's radius in kilometers
EARTH_RADIUS_KM = 6371.0


@dataclass
class Point:
    """Geographic point with latitude and longitude."""
    latitude: float
    longitude: float


@dataclass(frozen=True)
class BoundingBox:
    """Geographic bounding box."""
    west: float   # min longitude
    south: float  # min latitude
    east: float   # max longitude
    north: float  # max latitude

    def contains(self, point: Point) -> bool:
        """Check if a point is within the bounding box (edges included)."""
        return (
            self.west <= point.longitude <= self.east and
            self.south <= point.latitude <= self.north
        )


ALLOWED_REGION = BoundingBox(*INDIA_BBOX)


def is_within_region(
    lat: float,
    lng: float,
    region: BoundingBox = ALLOWED_REGION
) -> bool:
    """
    Classify a coordinate pair as inside/outside the allowed region.

    Total over all inputs: NaN or infinite coordinates are outside.
    """
    try:
        lat = float(lat)
        lng = float(lng)
    except (TypeError, ValueError):
        return False
    if not (math.isfinite(lat) and math.isfinite(lng)):
        return False
    return region.contains(Point(latitude=lat, longitude=lng))


def is_valid_coordinate(lat: float, lng: float) -> bool:
    """Finite and within the WGS84 range."""
    return (
        math.isfinite(lat) and math.isfinite(lng) and
        -90 <= lat <= 90 and -180 <= lng <= 180
    )


def round_half_up(value: float, precision: int = GRID_PRECISION) -> float:
    """Round half up to `precision` decimals (same tie rule as JavaScript Math.round)."""
    factor = 10 ** precision
    return math.floor(value * factor + 0.5) / factor


def grid_key(lat: float, lng: float, precision: int = GRID_PRECISION) -> Tuple[float, float]:
    """Grid cell a coordinate falls in (~110 m cells at 3 decimals)."""
    return (round_half_up(lat, precision), round_half_up(lng, precision))


def haversine_distance(
    lat1: float, lon1: float,
    lat2: float, lon2: float
) -> float:
    """
    Calculate the great-circle distance between two points on Earth.

    Args:
        lat1, lon1: First point coordinates in decimal degrees
        lat2, lon2: Second point coordinates in decimal degrees

    Returns:
        Distance in kilometers
    """
    lat1_rad = math.radians(lat1)
    lat2_rad = math.radians(lat2)
    delta_lat = math.radians(lat2 - lat1)
    delta_lon = math.radians(lon2 - lon1)

    a = (
        math.sin(delta_lat / 2) ** 2 +
        math.cos(lat1_rad) * math.cos(lat2_rad) * math.sin(delta_lon / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    return EARTH_RADIUS_KM * c


def haversine_distance_m(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance in meters."""
    return haversine_distance(lat1, lon1, lat2, lon2) * 1000.0


def calculate_centroid(
    points: List[Tuple[float, float]]
) -> Tuple[float, float]:
    """
    Calculate the centroid (center of mass) of a set of points.

    Args:
        points: List of (latitude, longitude) tuples

    Returns:
        Tuple of (latitude, longitude) of the centroid
    """
    if not points:
        return (0.0, 0.0)

    lat_sum = sum(p[0] for p in points)
    lon_sum = sum(p[1] for p in points)
    n = len(points)

    return (lat_sum / n, lon_sum / n)
