"""
Radius Demographics - Block Group Geometry Loader
Reads block group polygons (GeoJSON) into an AreaUnitIndex

Source: Census TIGER/Line block groups, exported as GeoJSON with
properties.GEOID (12 digits)
"""

from pathlib import Path
from typing import Optional

import geopandas as gpd

from config.settings import get_settings
from src.processing.area_units import AreaUnitIndex
from src.utils.logging import get_logger

logger = get_logger(__name__)
settings = get_settings()

GEOJSON_SUFFIXES = (".json", ".geojson")


def _resolve_geojson_path(path: Path) -> Optional[Path]:
    if path.exists():
        return path

    # Exports ship as either .json or .geojson
    for suffix in GEOJSON_SUFFIXES:
        candidate = path.with_suffix(suffix)
        if candidate != path and candidate.exists():
            logger.info(f"Block group file not found at {path}; using {candidate}")
            return candidate

    return None


def load_block_group_index(path: Optional[str] = None, id_column: str = "GEOID") -> AreaUnitIndex:
    """
    Load block group polygons into an area unit index.

    Args:
        path: GeoJSON path (defaults to BLOCK_GROUP_GEOJSON_PATH)
        id_column: Property holding the block group GEOID

    Returns:
        AreaUnitIndex in file order

    Raises:
        FileNotFoundError: If neither the path nor its .json/.geojson twin exists
    """
    raw_path = path or settings.BLOCK_GROUP_GEOJSON_PATH
    if not raw_path:
        raise FileNotFoundError("BLOCK_GROUP_GEOJSON_PATH is not configured")

    source_path = _resolve_geojson_path(Path(raw_path))
    if source_path is None:
        raise FileNotFoundError(f"Block group GeoJSON not found: {raw_path}")

    logger.info(f"Loading block group geometries from {source_path}")
    gdf = gpd.read_file(source_path)

    if id_column not in gdf.columns:
        raise ValueError(f"Block group file {source_path} has no '{id_column}' property")

    return AreaUnitIndex.from_geodataframe(gdf, id_column=id_column)
