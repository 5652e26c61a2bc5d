"""
Radius Demographics - Record Store and Record Processor
Converts raw ACS block group rows into canonical typed records

Primary table (one wide row per GEOID):
- Current-year ACS estimates, suffixed _curr (B01003_001E_curr, ...)
- Age cohorts at the current and prior snapshot (age_0_17_curr/_prior, ...)
- Pre-computed growth columns (change_pop, CAGR_pop, pop_proj, ...)

Secondary table (ACS percentage rates per GEOID):
- Five local rates plus five national benchmarks replicated on every row

Census null sentinels (-666666666), blanks and null-like tokens coerce to 0.
"""

import math
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from config.settings import CENSUS_NULL_SENTINEL
from src.processing.diagnostics import Diagnostics, SkipReason
from src.utils.logging import get_logger

logger = get_logger(__name__)

NULL_TOKENS = {"", "null", "none", "nan", "n/a", CENSUS_NULL_SENTINEL}


@dataclass(frozen=True)
class IncomeBracket:
    """Household income bucket assembled from disjoint B19001 columns"""
    key: str
    label: str
    source_columns: Tuple[str, ...]


# B19001: household income in the past 12 months
INCOME_BRACKETS: List[IncomeBracket] = [
    IncomeBracket(
        key="under_25k",
        label="Under $25,000",
        source_columns=("B19001_002E_curr", "B19001_003E_curr", "B19001_004E_curr", "B19001_005E_curr"),
    ),
    IncomeBracket(
        key="25k_50k",
        label="$25,000 - $49,999",
        source_columns=("B19001_006E_curr", "B19001_007E_curr", "B19001_008E_curr", "B19001_009E_curr"),
    ),
    IncomeBracket(
        key="50k_75k",
        label="$50,000 - $74,999",
        source_columns=("B19001_010E_curr", "B19001_011E_curr", "B19001_012E_curr"),
    ),
    IncomeBracket(
        key="75k_100k",
        label="$75,000 - $99,999",
        source_columns=("B19001_013E_curr",),
    ),
    IncomeBracket(
        key="100k_150k",
        label="$100,000 - $149,999",
        source_columns=("B19001_014E_curr", "B19001_015E_curr"),
    ),
    IncomeBracket(
        key="150k_plus",
        label="$150,000+",
        source_columns=("B19001_016E_curr", "B19001_017E_curr"),
    ),
]

# Age cohort key -> display label; columns are age_{key}_curr / age_{key}_prior
AGE_COHORTS: Dict[str, str] = {
    "0_17": "Ages 0-17",
    "18_34": "Ages 18-34",
    "35_54": "Ages 35-54",
    "55_64": "Ages 55-64",
    "65plus": "Ages 65+",
}

# Growth metric key -> column suffix used by change_*, CAGR_* and *_proj
GROWTH_METRICS: Dict[str, str] = {
    "population": "pop",
    "households": "hh",
    "families": "fam",
    "median_income": "med_inc",
    "per_capita_income": "per_capita",
}

CORE_COLUMNS: Dict[str, str] = {
    "population": "B01003_001E_curr",
    "households": "B11001_001E_curr",
    "families": "B11001_002E_curr",
    "median_income": "B19013_001E_curr",
    "per_capita_income": "B19301_001E_curr",
    "housing_units": "B25001_001E_curr",
    "median_home_value": "B25077_001E_curr",
    "median_rent": "B25064_001E_curr",
    "homeownership_rate": "homeownership_rate",
}


@dataclass(frozen=True)
class RateField:
    """One ACS percentage rate and its replicated national benchmark column"""
    key: str
    label: str
    column: str
    national_column: str


RATE_FIELDS: List[RateField] = [
    RateField(
        key="labor_force",
        label="Labor Force Participation Rate",
        column="labor_force_participation_rate",
        national_column="natl_labor_force_participation_rate",
    ),
    RateField(
        key="unemployment",
        label="Unemployment Rate",
        column="unemployment_rate",
        national_column="natl_unemployment_rate",
    ),
    RateField(
        key="bachelors",
        label="Bachelor's Degree or Higher",
        column="bachelors_or_higher_rate",
        national_column="natl_bachelors_or_higher_rate",
    ),
    RateField(
        key="high_school",
        label="High School Graduate or Higher",
        column="high_school_or_higher_rate",
        national_column="natl_high_school_or_higher_rate",
    ),
    RateField(
        key="management",
        label="Professional/Management Occupations",
        column="professional_mgmt_occ_rate",
        national_column="natl_professional_mgmt_occ_rate",
    ),
]


@dataclass(frozen=True)
class GrowthMetrics:
    """Pre-computed growth columns for one metric of one block group"""
    change: float = 0.0
    cagr: float = 0.0
    projected: float = 0.0


@dataclass(frozen=True)
class CanonicalRecord:
    """Normalized per-block-group record; every field is a finite number"""
    geoid: str
    population: float = 0.0
    households: float = 0.0
    families: float = 0.0
    median_income: float = 0.0
    per_capita_income: float = 0.0
    age_current: Dict[str, float] = field(default_factory=dict)
    age_prior: Dict[str, float] = field(default_factory=dict)
    income_brackets: Dict[str, float] = field(default_factory=dict)
    housing_units: float = 0.0
    median_home_value: float = 0.0
    median_rent: float = 0.0
    homeownership_rate: float = 0.0
    growth: Dict[str, GrowthMetrics] = field(default_factory=dict)


@dataclass(frozen=True)
class RateRecord:
    """Decoded ACS rate row: local rates and national benchmarks by rate key"""
    geoid: str
    rates: Dict[str, float] = field(default_factory=dict)
    national: Dict[str, float] = field(default_factory=dict)


def coerce_number(value: Any) -> float:
    """
    Coerce a raw cell to a finite float.

    Args:
        value: Raw value (str, number, None)

    Returns:
        Parsed number, or 0.0 for Census null sentinels, blanks,
        null-like tokens, unparseable text and non-finite numbers
    """
    if value is None or isinstance(value, bool):
        return 0.0

    if isinstance(value, (int, float)):
        number = float(value)
    else:
        text = str(value).strip().strip('"').strip()
        if text.lower() in NULL_TOKENS:
            return 0.0
        try:
            number = float(text)
        except ValueError:
            return 0.0

    if not math.isfinite(number) or number == float(CENSUS_NULL_SENTINEL):
        return 0.0

    return number


def process_demographic_row(geoid: str, row: Mapping[str, Any]) -> CanonicalRecord:
    """
    Convert one raw primary-table row into a CanonicalRecord.

    Args:
        geoid: Block group GEOID
        row: Column name -> raw value

    Returns:
        CanonicalRecord with absent columns set to 0
    """
    def num(column: str) -> float:
        return coerce_number(row.get(column))

    income_brackets = {
        bracket.label: sum(num(col) for col in bracket.source_columns)
        for bracket in INCOME_BRACKETS
    }

    growth = {
        metric: GrowthMetrics(
            change=num(f"change_{suffix}"),
            cagr=num(f"CAGR_{suffix}"),
            projected=num(f"{suffix}_proj"),
        )
        for metric, suffix in GROWTH_METRICS.items()
    }

    return CanonicalRecord(
        geoid=geoid,
        population=num(CORE_COLUMNS["population"]),
        households=num(CORE_COLUMNS["households"]),
        families=num(CORE_COLUMNS["families"]),
        median_income=num(CORE_COLUMNS["median_income"]),
        per_capita_income=num(CORE_COLUMNS["per_capita_income"]),
        age_current={key: num(f"age_{key}_curr") for key in AGE_COHORTS},
        age_prior={key: num(f"age_{key}_prior") for key in AGE_COHORTS},
        income_brackets=income_brackets,
        housing_units=num(CORE_COLUMNS["housing_units"]),
        median_home_value=num(CORE_COLUMNS["median_home_value"]),
        median_rent=num(CORE_COLUMNS["median_rent"]),
        homeownership_rate=num(CORE_COLUMNS["homeownership_rate"]),
        growth=growth,
    )


def process_rate_row(geoid: str, row: Mapping[str, Any]) -> RateRecord:
    """Convert one raw ACS rate row into a RateRecord"""
    return RateRecord(
        geoid=geoid,
        rates={f.key: coerce_number(row.get(f.column)) for f in RATE_FIELDS},
        national={f.key: coerce_number(row.get(f.national_column)) for f in RATE_FIELDS},
    )


class DemographicRecordStore:
    """
    Read-only canonical records for the two tables.

    Every raw row is decoded once, when the store is built; report calls
    only look records up.
    """

    def __init__(
        self,
        demographic_rows: Optional[Mapping[str, Mapping[str, Any]]],
        rate_rows: Optional[Mapping[str, Mapping[str, Any]]] = None,
    ):
        self._records: Dict[str, CanonicalRecord] = {
            geoid: process_demographic_row(geoid, row)
            for geoid, row in (demographic_rows or {}).items()
        }
        self._rate_records: Dict[str, RateRecord] = {
            geoid: process_rate_row(geoid, row) for geoid, row in (rate_rows or {}).items()
        }
        logger.info(
            f"Decoded {len(self._records)} demographic records and {len(self._rate_records)} rate records"
        )

    @property
    def has_demographics(self) -> bool:
        return bool(self._records)

    @property
    def rate_records(self) -> Mapping[str, RateRecord]:
        return self._rate_records

    def build_record_map(
        self, geoids: Iterable[str], diagnostics: Optional[Diagnostics] = None
    ) -> Dict[str, CanonicalRecord]:
        """
        Collect canonical records for a set of GEOIDs.

        GEOIDs missing from the demographic table are excluded and recorded
        as lookup misses; GEOIDs missing from a loaded rate table are
        recorded as rate lookup misses.

        Args:
            geoids: Union of block groups for one report
            diagnostics: Event sink for the current call

        Returns:
            Dict of GEOID -> CanonicalRecord
        """
        records: Dict[str, CanonicalRecord] = {}
        requested = 0

        for geoid in geoids:
            requested += 1
            record = self._records.get(geoid)
            if record is None:
                if diagnostics is not None:
                    diagnostics.record(SkipReason.LOOKUP_MISS, geoid, "not in demographic table")
                continue

            records[geoid] = record

            if self._rate_records and geoid not in self._rate_records and diagnostics is not None:
                diagnostics.record(SkipReason.RATE_LOOKUP_MISS, geoid, "not in ACS rate table")

        logger.info(f"Demographic records matched: {len(records)}/{requested} block groups found")
        return records
