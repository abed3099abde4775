"""Health check endpoint — reports version and ingestion pipeline counters."""

from fastapi import APIRouter, Depends

from ingestor.application.schemas.ingest import HealthResponse, PipelineStatsResponse
from ingestor.application.services.ingestion_pipeline import IngestionPipeline
from ingestor.config import Settings
from ingestor.infrastructure.dependencies import get_app_settings, get_pipeline

router = APIRouter(tags=["Health"])


@router.get("/health", response_model=HealthResponse)
async def health_check(
    settings: Settings = Depends(get_app_settings),
    pipeline: IngestionPipeline = Depends(get_pipeline),
) -> HealthResponse:
    """Returns the current application health status."""
    stats = pipeline.stats
    return HealthResponse(
        status="healthy" if stats.running else "degraded",
        version=settings.app_version,
        environment=settings.app_env,
        pipeline=PipelineStatsResponse(**stats.to_dict()),
    )
