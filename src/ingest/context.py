"""
Radius Demographics - Report Context Loader
Loads the block group index and ACS tables once for the host process
"""

from typing import Optional

from src.ingest.block_groups import load_block_group_index
from src.ingest.demographic_tables import load_demographic_rows, load_rate_rows
from src.processing.engine import DemographicContext
from src.processing.records import DemographicRecordStore
from src.utils.logging import get_logger

logger = get_logger(__name__)


def load_report_context(
    block_group_path: Optional[str] = None,
    demographics_path: Optional[str] = None,
    rates_path: Optional[str] = None,
) -> DemographicContext:
    """
    Load every dataset a report needs, tolerating missing files.

    A missing block group file leaves area_units unset (reports then raise
    DataNotLoadedError); a missing demographic table leaves the record store
    unset (reports fall back to estimates); a missing rate table only
    disables local rates and captured national benchmarks.

    Args:
        block_group_path: Block group GeoJSON (defaults to settings)
        demographics_path: Demographic CSV (defaults to settings)
        rates_path: ACS rate CSV (defaults to settings)

    Returns:
        DemographicContext
    """
    area_units = None
    try:
        area_units = load_block_group_index(block_group_path)
    except (FileNotFoundError, ValueError) as e:
        logger.error(f"Block group data not loaded: {e}")

    demographic_rows = None
    try:
        demographic_rows = load_demographic_rows(demographics_path)
    except FileNotFoundError as e:
        logger.warning(f"Demographic table not loaded; reports will use estimates: {e}")

    rate_rows = None
    try:
        rate_rows = load_rate_rows(rates_path)
    except FileNotFoundError as e:
        logger.warning(f"ACS rate table not loaded; using national defaults: {e}")

    record_store = None
    if demographic_rows is not None:
        record_store = DemographicRecordStore(demographic_rows, rate_rows)

    logger.info(
        f"Report context ready: block_groups={len(area_units) if area_units is not None else 0}, "
        f"demographics={len(demographic_rows or {})}, rates={len(rate_rows or {})}"
    )
    return DemographicContext(area_units=area_units, record_store=record_store)
