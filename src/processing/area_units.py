"""
Radius Demographics - Area Unit Index
Immutable collection of block group identifiers and their geometries
"""

from dataclasses import dataclass
from typing import Any, Iterable, Iterator, Mapping, Optional, Tuple

import geopandas as gpd
import pandas as pd
from shapely.geometry import shape
from shapely.geometry.base import BaseGeometry

from src.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class AreaUnit:
    """One block group: 12-digit GEOID plus polygon/multipolygon in EPSG:4326"""
    geoid: Optional[str]
    geometry: Optional[BaseGeometry]


class AreaUnitIndex:
    """
    Read-only, ordered index of area units.

    Built once per process by the host and shared by reference across
    report calls. Units with a missing GEOID or geometry are kept so the
    classifier can report them through diagnostics.
    """

    def __init__(self, units: Iterable[AreaUnit]):
        self._units: Tuple[AreaUnit, ...] = tuple(units)

    def __iter__(self) -> Iterator[AreaUnit]:
        return iter(self._units)

    def __len__(self) -> int:
        return len(self._units)

    @property
    def units(self) -> Tuple[AreaUnit, ...]:
        return self._units

    @classmethod
    def from_features(cls, features: Iterable[Mapping[str, Any]]) -> "AreaUnitIndex":
        """
        Build an index from GeoJSON-like feature mappings.

        Args:
            features: Iterable of {"properties": {"GEOID": ...}, "geometry": {...}}

        Returns:
            AreaUnitIndex in feature order
        """
        units = []
        for feature in features:
            properties = feature.get("properties") or {}
            geoid = properties.get("GEOID")
            raw_geometry = feature.get("geometry")

            geometry = None
            if raw_geometry and raw_geometry.get("coordinates"):
                try:
                    geometry = shape(raw_geometry)
                except Exception as e:
                    # Left as None; the classifier reports it as missing geometry
                    logger.warning(f"Could not parse geometry for GEOID {geoid}: {e}")

            units.append(AreaUnit(geoid=str(geoid) if geoid else None, geometry=geometry))

        logger.info(f"Built area unit index with {len(units)} block groups")
        return cls(units)

    @classmethod
    def from_geodataframe(
        cls, gdf: gpd.GeoDataFrame, id_column: str = "GEOID"
    ) -> "AreaUnitIndex":
        """
        Build an index from a GeoDataFrame.

        Args:
            gdf: Block group polygons
            id_column: Column holding the GEOID

        Returns:
            AreaUnitIndex in row order
        """
        if gdf.crs is not None and gdf.crs != "EPSG:4326":
            gdf = gdf.to_crs("EPSG:4326")

        units = []
        for geoid, geometry in zip(gdf[id_column], gdf.geometry):
            geoid_str = None if pd.isna(geoid) else str(geoid)
            units.append(
                AreaUnit(
                    geoid=geoid_str,
                    geometry=None if geometry is None or geometry.is_empty else geometry,
                )
            )

        logger.info(f"Built area unit index with {len(units)} block groups")
        return cls(units)
