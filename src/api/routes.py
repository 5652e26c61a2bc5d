"""
Radius Demographics - API Routes
Endpoints for multi-radius reports and market saturation
"""

from functools import lru_cache
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from config.settings import get_settings
from src.ingest.context import load_report_context
from src.processing.diagnostics import DataNotLoadedError
from src.processing.engine import DemographicContext, generate_radius_report
from src.processing.market_metrics import classify_market_saturation, count_points_in_radius
from src.processing.spatial_classifier import normalize_radii
from src.utils.logging import get_logger

router = APIRouter()
settings = get_settings()
logger = get_logger(__name__)


# Request / response models
class RadiusReportRequest(BaseModel):
    """Center point and radii (miles) for a report"""

    lat: float = Field(..., ge=-90, le=90)
    lon: float = Field(..., ge=-180, le=180)
    radii: Optional[List[float]] = None


class FacilityPoint(BaseModel):
    lat: float
    lon: float


class MarketSaturationRequest(BaseModel):
    """Competing facilities around a center point"""

    lat: float = Field(..., ge=-90, le=90)
    lon: float = Field(..., ge=-180, le=180)
    radius: float = Field(..., gt=0)
    facilities: List[FacilityPoint] = []


class MarketSaturationResponse(BaseModel):
    radius: float
    facility_count: int
    saturation: str
    opportunity: str


class RadiiResponse(BaseModel):
    default_radii: List[int]


@lru_cache()
def get_report_context() -> DemographicContext:
    """
    Load datasets once per process.

    Cached so every request shares the same read-only context.
    """
    return load_report_context()


@router.post("/reports/radius")
def create_radius_report(
    request: RadiusReportRequest,
    context: DemographicContext = Depends(get_report_context),
) -> Dict[str, Any]:
    """
    Build demographic summaries for concentric radii around a point

    Returns:
        Report with one summary per radius label ('1mile', '3mile', ...),
        geography labels and diagnostics
    """
    try:
        report = generate_radius_report(context, request.lat, request.lon, request.radii)
        return report.to_dict()

    except DataNotLoadedError as e:
        logger.error(f"Radius report unavailable: {e}")
        raise HTTPException(status_code=503, detail=str(e))
    except Exception as e:
        logger.error(f"Failed to generate radius report: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error")


@router.post("/market/saturation", response_model=MarketSaturationResponse)
async def get_market_saturation(request: MarketSaturationRequest) -> MarketSaturationResponse:
    """
    Classify competitive saturation from facility locations
    """
    count = count_points_in_radius(
        [(f.lat, f.lon) for f in request.facilities], request.lat, request.lon, request.radius
    )
    saturation, opportunity = classify_market_saturation(count)
    return MarketSaturationResponse(
        radius=request.radius,
        facility_count=count,
        saturation=saturation,
        opportunity=opportunity,
    )


@router.get("/metadata/radii", response_model=RadiiResponse)
async def get_default_radii() -> RadiiResponse:
    """Default radii used when a request omits them"""
    return RadiiResponse(default_radii=normalize_radii(None))
