"""
Radius Demographics - Application Settings
Manages environment variables and configuration using Pydantic
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache
from typing import List, Optional
import os


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Data files (optional; engine reports DataNotLoaded when the block group
    file is missing and falls back to estimates when the tables are missing):
        - BLOCK_GROUP_GEOJSON_PATH
        - DEMOGRAPHICS_CSV_PATH
        - ACS_RATES_CSV_PATH
    """

    # Application
    ENVIRONMENT: str = "production"
    LOG_LEVEL: str = "INFO"
    DEBUG: bool = False

    # API settings
    API_TITLE: str = "Radius Demographics API"
    API_VERSION: str = "1.0.0"
    API_DESCRIPTION: str = "Multi-radius block group demographic aggregation"
    CORS_ALLOW_ORIGINS: str = ""

    # Data files
    BLOCK_GROUP_GEOJSON_PATH: Optional[str] = "data/bgZTCA_TX.json"
    DEMOGRAPHICS_CSV_PATH: Optional[str] = "data/texas_blockgroup_demographics_2022.csv"
    ACS_RATES_CSV_PATH: Optional[str] = "data/ACS_pct_values_by_blockgroup.csv"

    # Radius defaults (miles)
    DEFAULT_RADII: List[int] = [1, 3, 5]

    # Age cohort projection
    COHORT_HISTORY_YEARS: int = 5  # Span between prior and current ACS snapshots
    COHORT_PROJECTION_YEARS: int = 5
    COHORT_TREND_DEADBAND: float = 0.1  # Percentage points

    # Estimation fallback
    ESTIMATE_DENSITY_PER_MILE: int = 15000

    # File storage
    LOG_DIR: str = "logs"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True
    )

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        # Create directories if they don't exist
        if self.LOG_DIR:
            os.makedirs(self.LOG_DIR, exist_ok=True)


@lru_cache()
def get_settings() -> Settings:
    """
    Returns cached settings instance.
    Uses lru_cache to avoid re-reading .env on every call.
    """
    return Settings()


# Sentinel written by the Census API for suppressed/unavailable estimates
CENSUS_NULL_SENTINEL = "-666666666"

# State FIPS codes for geography labels
STATE_NAMES = {
    "48": "Texas",
}

# County FIPS codes (3-digit, within state) for geography labels
COUNTY_NAMES = {
    "48": {
        "029": "Bexar County",
        "085": "Collin County",
        "113": "Dallas County",
        "121": "Denton County",
        "201": "Harris County",
        "439": "Tarrant County",
    },
}

# Fallback values when no block group in a radius reports a positive value
FALLBACK_MEDIAN_INCOME = 65000
FALLBACK_PER_CAPITA_INCOME = 38000
FALLBACK_MEDIAN_HOME_VALUE = 285000
FALLBACK_MEDIAN_RENT = 1450

# National ACS benchmarks used when the rate table carries none
NATIONAL_BENCHMARK_DEFAULTS = {
    "labor_force": 63.4,
    "unemployment": 3.7,
    "bachelors": 33.7,
    "high_school": 88.5,
    "management": 38.2,
}
