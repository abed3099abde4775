"""FastAPI dependency injection — hands request handlers the objects built in the lifespan."""

from fastapi import Request

from ingestor.application.services.ingestion_pipeline import IngestionPipeline
from ingestor.config import Settings


def get_app_settings(request: Request) -> Settings:
    """Provides the Settings the running application was built with."""
    return request.app.state.settings


def get_pipeline(request: Request) -> IngestionPipeline:
    """Provides the IngestionPipeline owned by the running application."""
    return request.app.state.pipeline
