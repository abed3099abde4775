from .ingest import HealthResponse, PipelineStatsResponse, QueueRequest, QueueResponse

__all__ = [
    "HealthResponse",
    "PipelineStatsResponse",
    "QueueRequest",
    "QueueResponse",
]
