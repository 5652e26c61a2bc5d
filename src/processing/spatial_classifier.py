"""
Radius Demographics - Spatial Classifier
Assigns block groups to concentric radius rings around a center point

One pass over the index: each block group is repaired with a zero-width
buffer and tested against the MAX radius circle only. Block groups that
miss the max circle are never tested against the smaller circles.

Circles are planar approximations in lon/lat degrees (69 miles per degree
of latitude, scaled by cos(latitude) for longitude), adequate for
city-scale radii.
"""

import math
import re
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Tuple

from shapely import affinity
from shapely.geometry import Point, Polygon

from config.settings import get_settings
from src.processing.area_units import AreaUnitIndex
from src.processing.diagnostics import DataNotLoadedError, Diagnostics, SkipReason
from src.utils.logging import get_logger

logger = get_logger(__name__)
settings = get_settings()

MILES_PER_DEGREE_LAT = 69.0
CIRCLE_QUAD_SEGMENTS = 16  # 64 vertices per circle
LEADING_INTEGER = re.compile(r"\s*([+-]?\d+)")


@dataclass
class RadiusClassification:
    """Membership of block groups per radius plus their union"""
    radii: List[int]
    by_radius: Dict[int, List[str]] = field(default_factory=dict)
    all_geoids: List[str] = field(default_factory=list)

    def by_label(self) -> Dict[str, List[str]]:
        return {radius_label(r): list(self.by_radius.get(r, [])) for r in self.radii}


def radius_label(radius: int) -> str:
    """Output key for a radius, e.g. 3 -> '3mile'"""
    return f"{radius}mile"


def _parse_radius(value) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, str):
        match = LEADING_INTEGER.match(value)
        return int(match.group(1)) if match else None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    return int(number)


def normalize_radii(radii: Optional[Iterable]) -> List[int]:
    """
    Clean a user-supplied radius list.

    Numbers are truncated toward zero. Strings are read like JavaScript's
    parseInt: the leading integer counts and the rest is ignored, so "3mi"
    gives 3 and "1e3" gives 1. Unparseable, non-finite and non-positive
    values are dropped; duplicates removed; sorted ascending.

    Args:
        radii: Raw radius values (miles)

    Returns:
        Sorted unique positive radii, or the default radii if none remain
    """
    clean = set()
    for value in radii or []:
        radius = _parse_radius(value)
        if radius is not None and radius > 0:
            clean.add(radius)

    if not clean:
        return sorted(set(settings.DEFAULT_RADII))

    return sorted(clean)


def build_radius_circle(lat: float, lon: float, radius_miles: float) -> Polygon:
    """
    Build a planar circle polygon around a point.

    Args:
        lat: Center latitude
        lon: Center longitude
        radius_miles: Radius in miles

    Returns:
        Polygon in lon/lat coordinates
    """
    lat_degrees = radius_miles / MILES_PER_DEGREE_LAT
    cos_lat = max(math.cos(math.radians(lat)), 1e-6)
    lon_degrees = radius_miles / (MILES_PER_DEGREE_LAT * cos_lat)

    unit_circle = Point(lon, lat).buffer(1.0, quad_segs=CIRCLE_QUAD_SEGMENTS)
    return affinity.scale(unit_circle, xfact=lon_degrees, yfact=lat_degrees, origin=(lon, lat))


def classify_units_by_radius(
    index: Optional[AreaUnitIndex],
    lat: float,
    lon: float,
    radii: Optional[Iterable] = None,
    diagnostics: Optional[Diagnostics] = None,
) -> RadiusClassification:
    """
    Classify block groups into each radius with a single pass gated on the max radius.

    Args:
        index: Area unit index (None if not loaded)
        lat: Center latitude
        lon: Center longitude
        radii: Radii in miles (normalized before use)
        diagnostics: Event sink for skipped block groups

    Returns:
        RadiusClassification with per-radius GEOID lists and the union

    Raises:
        DataNotLoadedError: If the area unit index is not loaded
    """
    if index is None:
        raise DataNotLoadedError("Block group data not loaded")

    if diagnostics is None:
        diagnostics = Diagnostics()

    sorted_radii = normalize_radii(radii)
    max_radius = sorted_radii[-1]
    smaller_radii = sorted_radii[:-1]

    circles = {r: build_radius_circle(lat, lon, r) for r in sorted_radii}
    max_circle = circles[max_radius]

    result = RadiusClassification(radii=sorted_radii, by_radius={r: [] for r in sorted_radii})
    seen = set()

    for unit in index:
        if not unit.geoid:
            diagnostics.record(SkipReason.MISSING_IDENTIFIER, None, "feature has no GEOID")
            continue
        if unit.geometry is None:
            diagnostics.record(SkipReason.MISSING_GEOMETRY, unit.geoid, "feature has no geometry")
            continue
        if unit.geoid in seen:
            continue

        try:
            clean_geometry = unit.geometry.buffer(0)

            # Gate: must intersect the max circle
            if not clean_geometry.intersects(max_circle):
                continue

            inner = [r for r in smaller_radii if clean_geometry.intersects(circles[r])]
        except Exception as e:
            logger.warning(f"Skipping block group {unit.geoid}: geometry evaluation failed ({e})")
            diagnostics.record(SkipReason.GEOMETRY_ERROR, unit.geoid, str(e))
            continue

        seen.add(unit.geoid)
        result.all_geoids.append(unit.geoid)
        for r in inner:
            result.by_radius[r].append(unit.geoid)
        result.by_radius[max_radius].append(unit.geoid)

    logger.info(
        f"Found {len(result.all_geoids)} unique block groups within {max_radius} miles: "
        + ", ".join(f"{r}mi={len(result.by_radius[r])}" for r in sorted_radii)
    )

    return result


def find_nesting_violations(classification: RadiusClassification) -> List[Tuple[int, int, str]]:
    """
    List members of a smaller radius that are missing from a larger radius.

    Concentric circles should always nest; this reports counterexamples
    instead of assuming it.

    Returns:
        List of (smaller_radius, larger_radius, geoid)
    """
    violations = []
    radii = classification.radii
    for i, small in enumerate(radii):
        small_members = classification.by_radius.get(small, [])
        for large in radii[i + 1:]:
            large_members = set(classification.by_radius.get(large, []))
            for geoid in small_members:
                if geoid not in large_members:
                    violations.append((small, large, geoid))
    return violations
