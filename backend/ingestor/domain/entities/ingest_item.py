"""Domain entities for submitted documents and their trip through the pipeline."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from uuid import UUID


@dataclass(frozen=True)
class IngestItem:
    """One submitted document. Immutable once enqueued."""

    uuid: UUID
    text: str
    title: str | None = None


class ItemStage(str, Enum):
    """Lifecycle stages of an item inside the ingestion pipeline."""

    QUEUED = "queued"
    CHUNKING = "chunking"
    EMBEDDING = "embedding"
    UPSERTING = "upserting"
    DONE = "done"


@dataclass
class IngestJob:
    """Tracks a single IngestItem from enqueue to DONE.

    Every path ends in DONE; ``error`` tells a failed run from a successful one.
    """

    item: IngestItem
    stage: ItemStage = ItemStage.QUEUED
    chunk_count: int = 0
    points_written: int = 0
    attempts: int = 0
    error: str | None = None
    enqueued_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    started_at: datetime | None = None
    completed_at: datetime | None = None

    def advance(self, stage: ItemStage) -> None:
        """Move to the next stage."""
        if self.started_at is None:
            self.started_at = datetime.now(timezone.utc)
        self.stage = stage

    def mark_done(self, points_written: int) -> None:
        """Transition to DONE after a successful upsert."""
        self.points_written = points_written
        self.stage = ItemStage.DONE
        self.completed_at = datetime.now(timezone.utc)

    def mark_failed(self, error: str) -> None:
        """Transition straight to DONE, recording why nothing was written."""
        self.error = error
        self.points_written = 0
        self.stage = ItemStage.DONE
        self.completed_at = datetime.now(timezone.utc)

    @property
    def queued_seconds(self) -> float:
        """Time spent waiting in the queue before processing began."""
        started = self.started_at or self.completed_at
        if started is None:
            return 0.0
        return (started - self.enqueued_at).total_seconds()

    @property
    def processing_seconds(self) -> float:
        if self.started_at is None or self.completed_at is None:
            return 0.0
        return (self.completed_at - self.started_at).total_seconds()

    @property
    def failed(self) -> bool:
        return self.error is not None
