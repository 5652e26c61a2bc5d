"""
Radius Demographics - Multi-Radius Report Engine
Classifies block groups once on the max radius, then aggregates each radius

Flow:
1. Normalize radii (sorted, unique, default [1, 3, 5])
2. Classify block groups per radius in one pass (max-radius gate)
3. Build canonical records once for the union of block groups
4. Aggregate each radius against the shared record map
5. Substitute estimates for radii with no block groups
6. Attach the age cohort projection to the largest radius

The engine performs no I/O. Datasets arrive through a DemographicContext
built once by the host application.
"""

from dataclasses import asdict, dataclass, field, replace
from typing import Any, Dict, Iterable, List, Optional

from src.processing.area_units import AreaUnitIndex
from src.processing.diagnostics import DataNotLoadedError, Diagnostics, SkipReason
from src.processing.estimation import estimate_radius_summary
from src.processing.geography import (
    AreaIncome,
    GeographyLabels,
    calculate_area_income,
    resolve_geography,
)
from src.processing.radius_aggregation import (
    RadiusSummary,
    aggregate_radius,
    resolve_national_benchmarks,
    with_cohort_shifts,
)
from src.processing.records import DemographicRecordStore
from src.processing.spatial_classifier import (
    RadiusClassification,
    classify_units_by_radius,
    find_nesting_violations,
    normalize_radii,
    radius_label,
)
from src.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class DemographicContext:
    """
    Datasets shared by every report call.

    Either field may be None when the host could not load it: a missing
    area index is a hard failure, a missing record store yields estimates.
    """
    area_units: Optional[AreaUnitIndex] = None
    record_store: Optional[DemographicRecordStore] = None


@dataclass
class RadiusReport:
    """One report: a summary per radius label plus geography and diagnostics"""
    center: Dict[str, float]
    radii: List[int]
    summaries: Dict[str, RadiusSummary]
    classification: RadiusClassification
    geography: Optional[GeographyLabels] = None
    area_income: Optional[AreaIncome] = None
    diagnostics: Diagnostics = field(default_factory=Diagnostics)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "center": dict(self.center),
            "radii": list(self.radii),
            "summaries": {label: asdict(summary) for label, summary in self.summaries.items()},
            "block_groups": self.classification.by_label(),
            "geography": asdict(self.geography) if self.geography else None,
            "area_income": asdict(self.area_income) if self.area_income else None,
            "diagnostics": self.diagnostics.to_dict(),
        }


def _estimated_summaries(radii: List[int]) -> Dict[str, RadiusSummary]:
    return {radius_label(r): estimate_radius_summary(r) for r in radii}


def generate_radius_report(
    context: DemographicContext,
    lat: float,
    lon: float,
    radii: Optional[Iterable] = None,
) -> RadiusReport:
    """
    Build demographic summaries for concentric radii around a point.

    Args:
        context: Loaded datasets
        lat: Center latitude
        lon: Center longitude
        radii: Radii in miles (normalized; default [1, 3, 5])

    Returns:
        RadiusReport keyed by radius label ('1mile', '3mile', ...)

    Raises:
        DataNotLoadedError: If the block group index is not loaded
    """
    diagnostics = Diagnostics()
    sorted_radii = normalize_radii(radii)
    center = {"lat": lat, "lon": lon}

    logger.info(f"Generating radius report at ({lat}, {lon}) for radii {sorted_radii}")

    if context.area_units is None:
        raise DataNotLoadedError("Block group data not loaded")

    classification = classify_units_by_radius(
        context.area_units, lat, lon, sorted_radii, diagnostics
    )

    for small, large, geoid in find_nesting_violations(classification):
        logger.warning(f"Block group {geoid} is in {small}mi but not {large}mi")
        diagnostics.record(SkipReason.NESTING_VIOLATION, geoid, f"{small}mi not within {large}mi")

    store = context.record_store
    if not classification.all_geoids:
        logger.warning("No block groups found in max radius; using estimated data for all radii")
        for r in sorted_radii:
            diagnostics.record(SkipReason.EMPTY_RADIUS, None, radius_label(r))
        summaries = _estimated_summaries(sorted_radii)
    elif store is None or not store.has_demographics:
        logger.warning("Demographic table unavailable; using estimated data for all radii")
        diagnostics.record(SkipReason.TABLE_UNAVAILABLE, None, "demographic table")
        summaries = _estimated_summaries(sorted_radii)
    else:
        summaries = None

    if summaries is not None:
        largest = radius_label(sorted_radii[-1])
        summaries[largest] = with_cohort_shifts(summaries[largest])
        return RadiusReport(
            center=center,
            radii=sorted_radii,
            summaries=summaries,
            classification=classification,
            diagnostics=diagnostics,
        )

    # Canonical records are built once and shared by every radius
    records = store.build_record_map(classification.all_geoids, diagnostics)
    benchmarks = resolve_national_benchmarks(
        classification.all_geoids, store.rate_records, diagnostics
    )

    geography = resolve_geography(classification.all_geoids[0])
    area_income = calculate_area_income(classification.all_geoids, records)

    summaries = {}
    for r in sorted_radii:
        label = radius_label(r)
        geoids = classification.by_radius.get(r, [])
        if not geoids:
            logger.warning(f"No block groups within {r} miles; using estimated data")
            diagnostics.record(SkipReason.EMPTY_RADIUS, None, label)
            summaries[label] = estimate_radius_summary(r)
            continue

        summary = aggregate_radius(r, label, geoids, records, store.rate_records, benchmarks)
        summaries[label] = replace(
            summary,
            state_median_income=area_income.median_income,
            county_name=geography.county_name,
            state_name=geography.state_name,
        )

    largest = radius_label(sorted_radii[-1])
    summaries[largest] = with_cohort_shifts(summaries[largest])

    logger.info(
        f"Radius report complete: {len(summaries)} radii, "
        f"{len(records)}/{len(classification.all_geoids)} block groups with data, "
        f"diagnostics={diagnostics.counts()}"
    )

    return RadiusReport(
        center=center,
        radii=sorted_radii,
        summaries=summaries,
        classification=classification,
        geography=geography,
        area_income=area_income,
        diagnostics=diagnostics,
    )
