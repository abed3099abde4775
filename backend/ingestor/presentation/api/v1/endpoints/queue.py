"""Queue endpoint — accepts documents and hands them to the ingestion pipeline."""

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from ingestor.application.schemas.ingest import QueueRequest, QueueResponse
from ingestor.application.services.ingestion_pipeline import IngestionPipeline
from ingestor.domain.exceptions import QueueClosedError, QueueFullError
from ingestor.infrastructure.dependencies import get_pipeline

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Queue"])


@router.post("/queue", response_model=QueueResponse, status_code=status.HTTP_202_ACCEPTED)
async def queue(
    request: QueueRequest,
    pipeline: IngestionPipeline = Depends(get_pipeline),
) -> QueueResponse:
    """Enqueue a document. Processing happens in the background."""
    try:
        await pipeline.submit(request.to_item())
    except QueueFullError as exc:
        logger.warning("Couldn't queue input %s: %s", request.uuid, exc)
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=str(exc),
        ) from exc
    except QueueClosedError as exc:
        logger.error("Couldn't queue input %s: %s", request.uuid, exc)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Ingestion pipeline is not running",
        ) from exc

    return QueueResponse(uuid=request.uuid)
