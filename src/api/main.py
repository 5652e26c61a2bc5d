"""
Radius Demographics - FastAPI Application
Read-only API for multi-radius demographic reports
"""

from fastapi import Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from config.settings import get_settings
from src.api.routes import get_report_context, router
from src.processing.engine import DemographicContext
from src.utils.logging import setup_logging

settings = get_settings()
logger = setup_logging("api")


def _parse_cors_allow_origins(raw: str) -> list[str]:
    origins = [origin.strip() for origin in (raw or "").split(",") if origin.strip()]
    return origins or ["http://localhost:3000", "http://127.0.0.1:3000"]


# Initialize FastAPI app
app = FastAPI(
    title=settings.API_TITLE,
    version=settings.API_VERSION,
    description=settings.API_DESCRIPTION,
    docs_url="/docs" if settings.DEBUG else None,  # Disable in production
    redoc_url="/redoc" if settings.DEBUG else None,
)

# CORS configuration
app.add_middleware(
    CORSMiddleware,
    allow_origins=_parse_cors_allow_origins(settings.CORS_ALLOW_ORIGINS),
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
)

# Include routes
app.include_router(router, prefix="/api/v1")


@app.on_event("startup")
async def startup_event():
    """Run on application startup"""
    logger.info(f"Starting {settings.API_TITLE} v{settings.API_VERSION}")
    logger.info(f"Environment: {settings.ENVIRONMENT}")


@app.on_event("shutdown")
async def shutdown_event():
    """Run on application shutdown"""
    logger.info("Shutting down API")


@app.get("/")
async def root():
    """
    Root endpoint - API information
    """
    return {
        "name": settings.API_TITLE,
        "version": settings.API_VERSION,
        "description": settings.API_DESCRIPTION,
        "docs": "/docs" if settings.DEBUG else "disabled in production",
        "endpoints": {
            "health": "/health",
            "radius_report": "/api/v1/reports/radius",
            "market_saturation": "/api/v1/market/saturation",
            "default_radii": "/api/v1/metadata/radii",
        },
    }


@app.get("/health")
async def health_check(context: DemographicContext = Depends(get_report_context)):
    """
    Health check endpoint for monitoring
    """
    try:
        block_groups_loaded = context.area_units is not None
        demographics_loaded = (
            context.record_store is not None and context.record_store.has_demographics
        )
        rates_loaded = context.record_store is not None and bool(context.record_store.rate_records)

        if not block_groups_loaded:
            status = "unhealthy"
        elif demographics_loaded:
            status = "healthy"
        else:
            status = "degraded"

        return {
            "status": status,
            "block_groups": len(context.area_units) if block_groups_loaded else 0,
            "demographic_table": "loaded" if demographics_loaded else "missing",
            "acs_rate_table": "loaded" if rates_loaded else "missing",
            "environment": settings.ENVIRONMENT,
        }

    except Exception as e:
        logger.error(f"Health check failed: {e}")
        raise HTTPException(status_code=503, detail=f"Service unhealthy: {str(e)}")


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "src.api.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower(),
    )
