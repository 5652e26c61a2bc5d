"""
Radius Demographics - ACS Table Loaders
Reads the block group demographic and ACS rate CSVs into raw row maps

Both tables carry either a GEOID column or the Census API component columns
(state, county, tract, block group). Cells are read as text; numeric
coercion happens in the record processor.
"""

from pathlib import Path
from typing import Any, Dict, Optional

import pandas as pd

from config.settings import get_settings
from src.utils.logging import get_logger

logger = get_logger(__name__)
settings = get_settings()

GEOID_COMPONENTS = [("state", 2), ("county", 3), ("tract", 6), ("block group", 1)]
MIN_GEOID_LENGTH = 11


def build_geoid_column(df: pd.DataFrame) -> pd.Series:
    """
    Derive a block group GEOID for every row.

    A GEOID column wins when populated (non-digits stripped). Otherwise the
    GEOID is state(2) + county(3) + tract(6, decimal point removed) + block
    group(1), each zero-padded. Rows missing a component get an empty GEOID.

    Args:
        df: Raw table with string cells

    Returns:
        Series of GEOID strings aligned with df
    """
    geoid = pd.Series("", index=df.index, dtype=object)

    if "GEOID" in df.columns:
        geoid = df["GEOID"].fillna("").astype(str).str.replace(r"[^0-9]", "", regex=True)

    if all(column in df.columns for column, _ in GEOID_COMPONENTS):
        parts = {}
        complete = pd.Series(True, index=df.index)
        for column, width in GEOID_COMPONENTS:
            values = df[column].fillna("").astype(str).str.strip()
            if column == "tract":
                values = values.str.replace(".", "", regex=False)
            complete &= values != ""
            parts[column] = values.str.zfill(width)

        built = parts["state"] + parts["county"] + parts["tract"] + parts["block group"]
        use_built = (geoid == "") & complete
        geoid = geoid.where(~use_built, built)

    return geoid


def _load_table_rows(path: Path, table_name: str) -> Dict[str, Dict[str, Any]]:
    logger.info(f"Loading {table_name} from {path}")
    df = pd.read_csv(path, dtype=str, keep_default_na=False, low_memory=False)
    df.columns = [str(c).strip() for c in df.columns]

    df["GEOID"] = build_geoid_column(df)

    invalid = df["GEOID"].str.len() < MIN_GEOID_LENGTH
    if invalid.any():
        logger.warning(f"{table_name}: skipping {int(invalid.sum())} rows without a valid GEOID")
        df = df[~invalid]

    duplicated = df["GEOID"].duplicated(keep="first")
    if duplicated.any():
        logger.warning(f"{table_name}: dropping {int(duplicated.sum())} duplicate GEOID rows")
        df = df[~duplicated]

    rows = {record["GEOID"]: record for record in df.to_dict(orient="records")}
    logger.info(f"{table_name}: loaded {len(rows)} block groups")
    return rows


def load_demographic_rows(path: Optional[str] = None) -> Dict[str, Dict[str, Any]]:
    """
    Load the primary demographic table keyed by GEOID.

    Args:
        path: CSV path (defaults to DEMOGRAPHICS_CSV_PATH)

    Returns:
        Dict of GEOID -> raw row

    Raises:
        FileNotFoundError: If the file does not exist
    """
    source = Path(path or settings.DEMOGRAPHICS_CSV_PATH or "")
    if not source.is_file():
        raise FileNotFoundError(f"Demographic table not found: {source}")
    return _load_table_rows(source, "demographic table")


def load_rate_rows(path: Optional[str] = None) -> Dict[str, Dict[str, Any]]:
    """
    Load the ACS percentage rate table keyed by GEOID.

    Args:
        path: CSV path (defaults to ACS_RATES_CSV_PATH)

    Returns:
        Dict of GEOID -> raw row

    Raises:
        FileNotFoundError: If the file does not exist
    """
    source = Path(path or settings.ACS_RATES_CSV_PATH or "")
    if not source.is_file():
        raise FileNotFoundError(f"ACS rate table not found: {source}")
    return _load_table_rows(source, "ACS rate table")
