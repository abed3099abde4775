"""Pydantic schemas for the ingestion queue and health API."""

from uuid import UUID

from pydantic import BaseModel, Field

from ingestor.domain.entities import IngestItem


# ── Queue Schemas ────────────────────────────────────────────────────


class QueueRequest(BaseModel):
    """Request body for submitting one document for ingestion."""

    uuid: UUID
    text: str
    title: str | None = Field(default=None, max_length=1024)

    def to_item(self) -> IngestItem:
        return IngestItem(uuid=self.uuid, text=self.text, title=self.title)


class QueueResponse(BaseModel):
    """Acknowledgement that a document was accepted into the queue."""

    status: str = "queued"
    uuid: UUID


# ── Health Schemas ───────────────────────────────────────────────────


class PipelineStatsResponse(BaseModel):
    """Counters of the ingestion pipeline."""

    submitted: int
    rejected: int
    processed: int
    failed: int
    points_written: int
    queue_depth: int
    queue_capacity: int
    running: bool


class HealthResponse(BaseModel):
    """Service health, version, and pipeline counters."""

    status: str
    version: str
    environment: str
    pipeline: PipelineStatsResponse
