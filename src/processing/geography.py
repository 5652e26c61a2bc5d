"""
Radius Demographics - Geography Resolver
Derives state/county labels from block group GEOIDs

GEOID layout (12 digits): state(2) + county(3) + tract(6) + block group(1)
"""

from dataclasses import dataclass
from typing import Iterable, Mapping, Optional

from config.settings import COUNTY_NAMES, STATE_NAMES
from src.processing.records import CanonicalRecord

UNKNOWN_STATE = "Unknown State"
UNKNOWN_COUNTY = "Unknown County"


@dataclass(frozen=True)
class GeographyLabels:
    state_code: str
    county_code: str
    state_name: str
    county_name: str


@dataclass(frozen=True)
class AreaIncome:
    """Mean of block group median incomes across a report's union of block groups"""
    median_income: int
    block_groups: int
    state_code: Optional[str]
    county_fips: Optional[str]


def resolve_geography(geoid: str) -> GeographyLabels:
    """
    Map the leading segments of a GEOID to state and county names.

    Unknown codes resolve to explicit sentinels rather than failing.

    Args:
        geoid: Block group (or longer) GEOID

    Returns:
        GeographyLabels
    """
    geoid = geoid or ""
    state_code = geoid[0:2]
    county_code = geoid[2:5]

    state_name = STATE_NAMES.get(state_code, UNKNOWN_STATE)
    county_name = COUNTY_NAMES.get(state_code, {}).get(county_code, UNKNOWN_COUNTY)

    return GeographyLabels(
        state_code=state_code,
        county_code=county_code,
        state_name=state_name,
        county_name=county_name,
    )


def calculate_area_income(
    geoids: Iterable[str], records: Mapping[str, CanonicalRecord]
) -> AreaIncome:
    """
    Average block group median incomes across the report area.

    Used as the local county/state comparison figure; block groups without a
    record or with a non-positive median income are skipped.
    """
    total = 0.0
    count = 0
    state_code = None
    county_fips = None

    for geoid in geoids:
        record = records.get(geoid)
        if record is None:
            continue

        if len(geoid) >= 5 and state_code is None:
            state_code = geoid[:2]
            county_fips = geoid[:5]

        if record.median_income > 0:
            total += record.median_income
            count += 1

    return AreaIncome(
        median_income=round(total / count) if count else 0,
        block_groups=count,
        state_code=state_code,
        county_fips=county_fips,
    )
