"""
Radius Demographics - Radius Aggregation
Aggregates canonical block group records into one summary per radius

Field-class policies:
- Extensive (population, households, families, housing units, income
  brackets, age cohorts, growth deltas): summed
- Intensive medians (median income, per-capita income, home value, rent):
  mean over block groups with a positive value, else a fallback constant
- ACS rates (labor force, unemployment, education, management share):
  population-weighted mean, rounded to 0.1, else the national benchmark
- Growth rates (CAGR_*): simple mean over block groups with a non-zero value
- Projections: population/households/families = current sum + summed change;
  income projections = mean of positive block group projections

Block groups without a canonical record are excluded from every numerator
and denominator. No division is left unguarded.
"""

from dataclasses import dataclass, field, replace
from typing import Dict, Iterable, List, Mapping, Optional

from config.settings import (
    FALLBACK_MEDIAN_HOME_VALUE,
    FALLBACK_MEDIAN_INCOME,
    FALLBACK_MEDIAN_RENT,
    FALLBACK_PER_CAPITA_INCOME,
    NATIONAL_BENCHMARK_DEFAULTS,
    get_settings,
)
from src.processing.diagnostics import Diagnostics, SkipReason
from src.processing.records import (
    AGE_COHORTS,
    GROWTH_METRICS,
    INCOME_BRACKETS,
    RATE_FIELDS,
    CanonicalRecord,
    RateRecord,
)
from src.utils.logging import get_logger

logger = get_logger(__name__)
settings = get_settings()


@dataclass(frozen=True)
class GrowthSummary:
    """Aggregated growth signals for one metric"""
    current: float = 0.0
    change: float = 0.0
    cagr: float = 0.0
    projected: float = 0.0
    percent_change: float = 0.0


@dataclass(frozen=True)
class CohortShift:
    """Five-year projection of one age cohort's share of the population"""
    cohort: str
    label: str
    current: float
    prior: float
    cagr: float
    projected: int
    share_current: float
    share_projected: float
    share_change: float
    trend: str  # 'positive', 'negative' or 'neutral'


@dataclass(frozen=True)
class RadiusSummary:
    """Aggregated demographics for every block group intersecting one radius"""
    radius: int
    label: str
    population: float = 0.0
    households: float = 0.0
    families: float = 0.0
    median_income: int = FALLBACK_MEDIAN_INCOME
    per_capita_income: int = FALLBACK_PER_CAPITA_INCOME
    age_cohorts: Dict[str, float] = field(default_factory=dict)
    age_cohorts_prior: Dict[str, float] = field(default_factory=dict)
    income_brackets: Dict[str, float] = field(default_factory=dict)
    employment: Dict[str, Dict[str, float]] = field(default_factory=dict)
    housing_units: float = 0.0
    median_home_value: int = FALLBACK_MEDIAN_HOME_VALUE
    median_rent: int = FALLBACK_MEDIAN_RENT
    growth: Dict[str, GrowthSummary] = field(default_factory=dict)
    cohort_shifts: Optional[List[CohortShift]] = None
    population_2026: Optional[int] = None
    population_2031: Optional[int] = None
    state_median_income: Optional[int] = None
    county_name: Optional[str] = None
    state_name: Optional[str] = None
    member_count: int = 0
    matched_count: int = 0
    estimated: bool = False

    @property
    def median_income_change_pct(self) -> float:
        growth = self.growth.get("median_income")
        return growth.percent_change if growth else 0.0


@dataclass
class _WeightedRate:
    rate_sum: float = 0.0
    weight_sum: float = 0.0

    def add(self, rate: float, weight: float) -> None:
        self.rate_sum += rate * weight
        self.weight_sum += weight

    def mean(self, fallback: float) -> float:
        if self.weight_sum <= 0:
            return fallback
        return round(self.rate_sum / self.weight_sum, 1)


@dataclass
class _PositiveMean:
    total: float = 0.0
    count: int = 0

    def add(self, value: float) -> None:
        if value > 0:
            self.total += value
            self.count += 1

    def mean(self) -> float:
        return self.total / self.count if self.count else 0.0


@dataclass
class _NonZeroMean:
    total: float = 0.0
    count: int = 0

    def add(self, value: float) -> None:
        if value != 0:
            self.total += value
            self.count += 1

    def mean(self) -> float:
        return self.total / self.count if self.count else 0.0


@dataclass
class _RadiusAccumulator:
    """Fold state for one radius; created fresh for every aggregate_radius call"""
    population: float = 0.0
    households: float = 0.0
    families: float = 0.0
    housing_units: float = 0.0
    age_current: Dict[str, float] = field(default_factory=lambda: {k: 0.0 for k in AGE_COHORTS})
    age_prior: Dict[str, float] = field(default_factory=lambda: {k: 0.0 for k in AGE_COHORTS})
    income_brackets: Dict[str, float] = field(
        default_factory=lambda: {b.label: 0.0 for b in INCOME_BRACKETS}
    )
    median_income: _PositiveMean = field(default_factory=_PositiveMean)
    per_capita_income: _PositiveMean = field(default_factory=_PositiveMean)
    median_home_value: _PositiveMean = field(default_factory=_PositiveMean)
    median_rent: _PositiveMean = field(default_factory=_PositiveMean)
    growth_change: Dict[str, float] = field(default_factory=lambda: {k: 0.0 for k in GROWTH_METRICS})
    growth_cagr: Dict[str, _NonZeroMean] = field(
        default_factory=lambda: {k: _NonZeroMean() for k in GROWTH_METRICS}
    )
    growth_projected: Dict[str, _PositiveMean] = field(
        default_factory=lambda: {k: _PositiveMean() for k in GROWTH_METRICS}
    )
    rates: Dict[str, _WeightedRate] = field(
        default_factory=lambda: {f.key: _WeightedRate() for f in RATE_FIELDS}
    )
    matched: int = 0

    def add(self, record: CanonicalRecord, rate: Optional[RateRecord]) -> None:
        self.matched += 1
        self.population += record.population
        self.households += record.households
        self.families += record.families
        self.housing_units += record.housing_units

        for key in AGE_COHORTS:
            self.age_current[key] += record.age_current.get(key, 0.0)
            self.age_prior[key] += record.age_prior.get(key, 0.0)

        for label in self.income_brackets:
            self.income_brackets[label] += record.income_brackets.get(label, 0.0)

        self.median_income.add(record.median_income)
        self.per_capita_income.add(record.per_capita_income)
        self.median_home_value.add(record.median_home_value)
        self.median_rent.add(record.median_rent)

        for metric, growth in record.growth.items():
            self.growth_change[metric] += growth.change
            self.growth_cagr[metric].add(growth.cagr)
            self.growth_projected[metric].add(growth.projected)

        if rate is not None:
            # Block group population is the weight; zero-population rows weigh 1
            weight = record.population if record.population > 0 else 1.0
            for f in RATE_FIELDS:
                value = rate.rates.get(f.key, 0.0)
                if value > 0:
                    self.rates[f.key].add(value, weight)


def _percent_change(current: float, projected: float) -> float:
    if current <= 0:
        return 0.0
    return (projected - current) / current * 100


def resolve_national_benchmarks(
    geoids: Iterable[str],
    rates: Mapping[str, RateRecord],
    diagnostics: Optional[Diagnostics] = None,
) -> Dict[str, float]:
    """
    Read national benchmarks from the ACS rate table.

    The natl_* columns are identical on every row, so the first block group
    (in the given order) with a positive national labor force value supplies
    all five. Captured values take precedence over the defaults.

    Args:
        geoids: Block groups to scan, in classification order
        rates: Decoded rate records
        diagnostics: Event sink; records a fallback when nothing is captured

    Returns:
        Dict of rate key -> benchmark (rounded to 0.1)
    """
    for geoid in geoids:
        record = rates.get(geoid)
        if record is None or record.national.get("labor_force", 0.0) <= 0:
            continue

        benchmarks = {}
        for f in RATE_FIELDS:
            value = record.national.get(f.key, 0.0)
            benchmarks[f.key] = round(value, 1) if value > 0 else NATIONAL_BENCHMARK_DEFAULTS[f.key]
        logger.info(f"National benchmarks loaded from ACS rate table (GEOID {geoid})")
        return benchmarks

    logger.info("National benchmarks not in ACS rate table; using defaults")
    if diagnostics is not None:
        diagnostics.record(SkipReason.BENCHMARK_FALLBACK, None, "no national values captured")
    return dict(NATIONAL_BENCHMARK_DEFAULTS)


def aggregate_radius(
    radius: int,
    label: str,
    geoids: Iterable[str],
    records: Mapping[str, CanonicalRecord],
    rates: Optional[Mapping[str, RateRecord]] = None,
    benchmarks: Optional[Mapping[str, float]] = None,
) -> RadiusSummary:
    """
    Aggregate one radius from the shared canonical record map.

    Args:
        radius: Radius in miles
        label: Output key (e.g. '3mile')
        geoids: Block groups intersecting this radius
        records: Canonical records for the report's union of block groups
        rates: Decoded ACS rate records (optional)
        benchmarks: National benchmarks by rate key (defaults if None)

    Returns:
        RadiusSummary
    """
    rates = rates or {}
    benchmarks = dict(benchmarks or NATIONAL_BENCHMARK_DEFAULTS)

    acc = _RadiusAccumulator()
    member_count = 0
    for geoid in geoids:
        member_count += 1
        record = records.get(geoid)
        if record is None:
            continue
        acc.add(record, rates.get(geoid))

    employment = {
        f.label: {
            "local": acc.rates[f.key].mean(benchmarks[f.key]),
            "usa": benchmarks[f.key],
        }
        for f in RATE_FIELDS
    }

    extensive_current = {
        "population": acc.population,
        "households": acc.households,
        "families": acc.families,
    }
    intensive_current = {
        "median_income": acc.median_income.mean(),
        "per_capita_income": acc.per_capita_income.mean(),
    }

    growth = {}
    for metric in GROWTH_METRICS:
        change = acc.growth_change[metric]
        if metric in extensive_current:
            current = extensive_current[metric]
            projected = float(round(current + change))
        else:
            current = float(round(intensive_current[metric]))
            projected = float(round(acc.growth_projected[metric].mean()))
        growth[metric] = GrowthSummary(
            current=current,
            change=change,
            cagr=acc.growth_cagr[metric].mean(),
            projected=projected,
            percent_change=_percent_change(current, projected),
        )

    def mean_or(accumulator: _PositiveMean, fallback: int) -> int:
        return round(accumulator.mean()) if accumulator.count else fallback

    return RadiusSummary(
        radius=radius,
        label=label,
        population=acc.population,
        households=acc.households,
        families=acc.families,
        median_income=mean_or(acc.median_income, FALLBACK_MEDIAN_INCOME),
        per_capita_income=mean_or(acc.per_capita_income, FALLBACK_PER_CAPITA_INCOME),
        age_cohorts=dict(acc.age_current),
        age_cohorts_prior=dict(acc.age_prior),
        income_brackets=dict(acc.income_brackets),
        employment=employment,
        housing_units=acc.housing_units,
        median_home_value=mean_or(acc.median_home_value, FALLBACK_MEDIAN_HOME_VALUE),
        median_rent=mean_or(acc.median_rent, FALLBACK_MEDIAN_RENT),
        growth=growth,
        member_count=member_count,
        matched_count=acc.matched,
    )


def cohort_cagr(current: float, prior: float, years: int) -> float:
    """Compound annual growth between two snapshots; 0 if either endpoint is non-positive"""
    if current <= 0 or prior <= 0 or years <= 0:
        return 0.0
    return (current / prior) ** (1 / years) - 1


def classify_trend(change: float, deadband: float) -> str:
    if change > deadband:
        return "positive"
    if change < -deadband:
        return "negative"
    return "neutral"


def project_age_cohorts(
    current: Mapping[str, float],
    prior: Mapping[str, float],
    history_years: Optional[int] = None,
    horizon_years: Optional[int] = None,
    deadband: Optional[float] = None,
) -> List[CohortShift]:
    """
    Project each age cohort forward on its own historical CAGR.

    Shares are recomputed against the total of the five cohorts before and
    after projection; the point change is bucketed with a dead-band.

    Args:
        current: Cohort key -> current count
        prior: Cohort key -> prior snapshot count
        history_years: Years between the prior and current snapshots
        horizon_years: Years to project forward
        deadband: Percentage-point band treated as neutral

    Returns:
        One CohortShift per cohort, in AGE_COHORTS order
    """
    history_years = history_years or settings.COHORT_HISTORY_YEARS
    horizon_years = horizon_years or settings.COHORT_PROJECTION_YEARS
    deadband = settings.COHORT_TREND_DEADBAND if deadband is None else deadband

    cagrs = {}
    projected = {}
    for key in AGE_COHORTS:
        cur = current.get(key, 0.0)
        cagrs[key] = cohort_cagr(cur, prior.get(key, 0.0), history_years)
        projected[key] = round(cur * (1 + cagrs[key]) ** horizon_years)

    total_current = sum(current.get(key, 0.0) for key in AGE_COHORTS)
    total_projected = sum(projected.values())

    shifts = []
    for key, label in AGE_COHORTS.items():
        share_current = current.get(key, 0.0) / total_current * 100 if total_current > 0 else 0.0
        share_projected = projected[key] / total_projected * 100 if total_projected > 0 else 0.0
        change = share_projected - share_current
        shifts.append(
            CohortShift(
                cohort=key,
                label=label,
                current=current.get(key, 0.0),
                prior=prior.get(key, 0.0),
                cagr=cagrs[key],
                projected=projected[key],
                share_current=share_current,
                share_projected=share_projected,
                share_change=change,
                trend=classify_trend(change, deadband),
            )
        )

    return shifts


def with_cohort_shifts(summary: RadiusSummary) -> RadiusSummary:
    """Return a copy of the summary carrying its age cohort projection"""
    shifts = project_age_cohorts(summary.age_cohorts, summary.age_cohorts_prior)
    logger.info(
        f"Age cohort shifts ({summary.label}): "
        + ", ".join(f"{s.cohort}={s.share_change:+.2f} pts" for s in shifts)
    )
    return replace(summary, cohort_shifts=shifts)
