"""
Radius Demographics - Estimation Fallback
Deterministic stand-in summary for radii with no matching block groups

Population is a fixed density per mile of radius; every other field is a
fixed proportional breakdown of that population. No randomness.
"""

from config.settings import (
    FALLBACK_MEDIAN_HOME_VALUE,
    FALLBACK_MEDIAN_INCOME,
    FALLBACK_MEDIAN_RENT,
    FALLBACK_PER_CAPITA_INCOME,
    get_settings,
)
from src.processing.radius_aggregation import GrowthSummary, RadiusSummary
from src.processing.records import AGE_COHORTS, INCOME_BRACKETS, RATE_FIELDS
from src.processing.spatial_classifier import radius_label

settings = get_settings()

HOUSEHOLD_RATIO = 0.35
FAMILY_RATIO = 0.23
HOUSING_UNIT_RATIO = 0.38

AGE_SHARES = {
    "0_17": 0.157,
    "18_34": 0.241,
    "35_54": 0.272,
    "55_64": 0.189,
    "65plus": 0.143,
}

# Share of households per income bracket, in INCOME_BRACKETS order
INCOME_SHARES = [0.128, 0.207, 0.221, 0.171, 0.154, 0.118]

# (local, usa) pairs by rate key
EMPLOYMENT_ESTIMATES = {
    "labor_force": (63.5, 63.4),
    "unemployment": (3.8, 3.7),
    "bachelors": (32.1, 32.6),
    "high_school": (88.9, 88.5),
    "management": (38.2, 37.5),
}

NEAR_TERM_GROWTH = 1.02  # 2026 estimate
FIVE_YEAR_GROWTH = 1.08  # 2031 estimate


def estimate_radius_summary(radius: int) -> RadiusSummary:
    """
    Build an estimated summary from the radius alone.

    Args:
        radius: Radius in miles

    Returns:
        RadiusSummary flagged as estimated
    """
    base_population = settings.ESTIMATE_DENSITY_PER_MILE * radius
    households = round(base_population * HOUSEHOLD_RATIO)
    families = round(base_population * FAMILY_RATIO)
    household_base = base_population * HOUSEHOLD_RATIO

    population = round(base_population)

    growth = {
        "population": GrowthSummary(current=population, projected=population),
        "households": GrowthSummary(current=households, projected=households),
        "families": GrowthSummary(current=families, projected=families),
        "median_income": GrowthSummary(
            current=FALLBACK_MEDIAN_INCOME, projected=FALLBACK_MEDIAN_INCOME
        ),
        "per_capita_income": GrowthSummary(
            current=FALLBACK_PER_CAPITA_INCOME, projected=FALLBACK_PER_CAPITA_INCOME
        ),
    }

    return RadiusSummary(
        radius=radius,
        label=radius_label(radius),
        population=population,
        households=households,
        families=families,
        median_income=FALLBACK_MEDIAN_INCOME,
        per_capita_income=FALLBACK_PER_CAPITA_INCOME,
        age_cohorts={key: round(base_population * AGE_SHARES[key]) for key in AGE_COHORTS},
        age_cohorts_prior={key: 0 for key in AGE_COHORTS},
        income_brackets={
            bracket.label: round(household_base * share)
            for bracket, share in zip(INCOME_BRACKETS, INCOME_SHARES)
        },
        employment={
            f.label: {
                "local": EMPLOYMENT_ESTIMATES[f.key][0],
                "usa": EMPLOYMENT_ESTIMATES[f.key][1],
            }
            for f in RATE_FIELDS
        },
        housing_units=round(base_population * HOUSING_UNIT_RATIO),
        median_home_value=FALLBACK_MEDIAN_HOME_VALUE,
        median_rent=FALLBACK_MEDIAN_RENT,
        growth=growth,
        population_2026=round(base_population * NEAR_TERM_GROWTH),
        population_2031=round(base_population * FIVE_YEAR_GROWTH),
        estimated=True,
    )
