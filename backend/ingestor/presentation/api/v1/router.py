"""V1 API router — aggregates all v1 endpoint routers."""

from fastapi import APIRouter

from ingestor.presentation.api.v1.endpoints.health import router as health_router
from ingestor.presentation.api.v1.endpoints.queue import router as queue_router

router = APIRouter(prefix="/v1")
router.include_router(health_router)
router.include_router(queue_router)
