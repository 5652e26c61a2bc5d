"""
Radius Demographics - Market Metrics
Competitive saturation from a facility count, and point-in-radius counting

Facility lookups happen outside this project; these helpers only classify
counts and distances that callers already have.
"""

import math
from typing import Iterable, Tuple

EARTH_RADIUS_MILES = 3959.0

# (max count inclusive, saturation, opportunity)
SATURATION_BANDS = [
    (0, "None", "Very High"),
    (5, "Low", "High"),
    (15, "Moderate", "Moderate"),
    (25, "Moderate-High", "Low-Moderate"),
]


def classify_market_saturation(count: int) -> Tuple[str, str]:
    """
    Classify market saturation and opportunity from a competitor count.

    Args:
        count: Number of competing facilities in the trade area

    Returns:
        (saturation, opportunity)
    """
    for max_count, saturation, opportunity in SATURATION_BANDS:
        if count <= max_count:
            return saturation, opportunity
    return "High", "Low"


def haversine_miles(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance in miles"""
    d_lat = math.radians(lat2 - lat1)
    d_lon = math.radians(lon2 - lon1)
    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lon / 2) ** 2
    )
    return EARTH_RADIUS_MILES * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def count_points_in_radius(
    points: Iterable[Tuple[float, float]], lat: float, lon: float, radius_miles: float
) -> int:
    """
    Count (lat, lon) points within a radius of the center, boundary inclusive.
    """
    return sum(1 for p_lat, p_lon in points if haversine_miles(lat, lon, p_lat, p_lon) <= radius_miles)
