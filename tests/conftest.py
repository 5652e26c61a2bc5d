"""
Pytest configuration and shared fixtures for Radius Demographics tests.

Block groups are small squares placed a known number of miles from a
Dallas center point, so radius membership is unambiguous.
"""

import math
from typing import Any, Dict

import pytest
from shapely.geometry import box

from src.processing.area_units import AreaUnit, AreaUnitIndex
from src.processing.engine import DemographicContext
from src.processing.records import DemographicRecordStore

CENTER_LAT = 32.78
CENTER_LON = -96.80

# Dallas County block groups
GEOID_CENTER = "481130001001"  # At the center: 1, 3 and 5 miles
GEOID_NORTH_2MI = "481130001002"  # 2 miles north: 3 and 5 miles
GEOID_EAST_4MI = "481130001003"  # 4 miles east: 5 miles only
GEOID_NORTH_10MI = "481130001004"  # 10 miles north: outside every radius

AGE_SPLIT = {"0_17": 0.2, "18_34": 0.25, "35_54": 0.3, "55_64": 0.15, "65plus": 0.1}


def square_at(north_miles: float, east_miles: float, half_size_miles: float = 0.2,
              lat: float = CENTER_LAT, lon: float = CENTER_LON):
    """Square polygon offset from a center point, sized in miles."""
    miles_per_deg_lon = 69.0 * math.cos(math.radians(lat))
    cy = lat + north_miles / 69.0
    cx = lon + east_miles / miles_per_deg_lon
    dy = half_size_miles / 69.0
    dx = half_size_miles / miles_per_deg_lon
    return box(cx - dx, cy - dy, cx + dx, cy + dy)


def make_demographic_row(
    population: int = 1000,
    median_income: int = 50000,
    per_capita_income: int = 30000,
    median_home_value: int = 200000,
    median_rent: int = 1200,
    **overrides: Any,
) -> Dict[str, str]:
    """Raw primary-table row with string cells, as the CSV loader produces."""
    row = {
        "B01003_001E_curr": str(population),
        "B11001_001E_curr": str(round(population * 0.4)),
        "B11001_002E_curr": str(round(population * 0.25)),
        "B19013_001E_curr": str(median_income),
        "B19301_001E_curr": str(per_capita_income),
        "B25001_001E_curr": str(round(population * 0.42)),
        "B25077_001E_curr": str(median_home_value),
        "B25064_001E_curr": str(median_rent),
        "homeownership_rate": "55.0",
        "change_pop": str(round(population * 0.05)),
        "CAGR_pop": "0.01",
        "pop_proj": str(round(population * 1.05)),
        "change_hh": "20",
        "CAGR_hh": "0.01",
        "hh_proj": str(round(population * 0.4) + 20),
        "change_fam": "10",
        "CAGR_fam": "0.008",
        "fam_proj": str(round(population * 0.25) + 10),
        "change_med_inc": "2000",
        "CAGR_med_inc": "0.02",
        "med_inc_proj": str(median_income + 2000),
        "change_per_capita": "1000",
        "CAGR_per_capita": "0.015",
        "per_capita_proj": str(per_capita_income + 1000),
    }
    for key, share in AGE_SPLIT.items():
        row[f"age_{key}_curr"] = str(round(population * share))
        row[f"age_{key}_prior"] = str(round(population * share * 0.9))
    for i in range(2, 18):
        row[f"B19001_{i:03d}E_curr"] = "10"

    row.update({key: str(value) for key, value in overrides.items()})
    return row


def make_rate_row(
    labor_force: float = 60.0,
    unemployment: float = 4.0,
    bachelors: float = 30.0,
    high_school: float = 85.0,
    management: float = 35.0,
    national: bool = True,
) -> Dict[str, str]:
    """Raw ACS rate row; national columns replicate the same values on every row."""
    row = {
        "labor_force_participation_rate": str(labor_force),
        "unemployment_rate": str(unemployment),
        "bachelors_or_higher_rate": str(bachelors),
        "high_school_or_higher_rate": str(high_school),
        "professional_mgmt_occ_rate": str(management),
    }
    if national:
        row.update({
            "natl_labor_force_participation_rate": "63.44",
            "natl_unemployment_rate": "3.66",
            "natl_bachelors_or_higher_rate": "34.3",
            "natl_high_school_or_higher_rate": "89.1",
            "natl_professional_mgmt_occ_rate": "41.8",
        })
    return row


@pytest.fixture
def center() -> tuple:
    """Return the (lat, lon) report center."""
    return CENTER_LAT, CENTER_LON


@pytest.fixture
def area_index() -> AreaUnitIndex:
    """Four block groups at known distances from the center."""
    return AreaUnitIndex([
        AreaUnit(GEOID_CENTER, square_at(0, 0)),
        AreaUnit(GEOID_NORTH_2MI, square_at(2, 0)),
        AreaUnit(GEOID_EAST_4MI, square_at(0, 4)),
        AreaUnit(GEOID_NORTH_10MI, square_at(10, 0)),
    ])


@pytest.fixture
def demographic_rows() -> Dict[str, Dict[str, str]]:
    """Primary-table rows for the three block groups inside 5 miles."""
    return {
        GEOID_CENTER: make_demographic_row(1000, median_income=50000, per_capita_income=30000),
        GEOID_NORTH_2MI: make_demographic_row(2000, median_income=70000, per_capita_income=40000),
        GEOID_EAST_4MI: make_demographic_row(
            3000, per_capita_income=20000, B19013_001E_curr="-666666666"
        ),
    }


@pytest.fixture
def rate_rows() -> Dict[str, Dict[str, str]]:
    """ACS rate rows for the three block groups inside 5 miles."""
    return {
        GEOID_CENTER: make_rate_row(labor_force=60.0, unemployment=5.0),
        GEOID_NORTH_2MI: make_rate_row(labor_force=70.0, unemployment=2.0),
        GEOID_EAST_4MI: make_rate_row(labor_force=65.0, unemployment=0.0),
    }


@pytest.fixture
def record_store(demographic_rows, rate_rows) -> DemographicRecordStore:
    return DemographicRecordStore(demographic_rows, rate_rows)


@pytest.fixture
def report_context(area_index, record_store) -> DemographicContext:
    """Fully loaded context around the Dallas center."""
    return DemographicContext(area_units=area_index, record_store=record_store)
