"""Ingestion Pipeline — asyncio queue with a single consumer task.

Every submitted item travels QUEUED → CHUNKING → EMBEDDING → UPSERTING → DONE.
Submissions from any number of request handlers are funnelled into one
consumer, so items are processed strictly in submission order.
"""

import asyncio
import logging
from dataclasses import asdict, dataclass
from typing import Any, Awaitable, Callable, Literal

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from ingestor.application.interfaces.vector_sink import VectorSink
from ingestor.application.services.embedding_service import EmbeddingService
from ingestor.domain.entities import (
    EmbeddedChunk,
    IngestItem,
    IngestJob,
    ItemStage,
    PayloadValue,
    VectorPoint,
)
from ingestor.domain.exceptions import (
    ProviderResponseError,
    ProviderUnavailableError,
    QueueClosedError,
    QueueFullError,
    SinkWriteError,
)
from ingestor.infrastructure.logging.colored_logger import PipelineLogger, PipelineStage

logger = logging.getLogger(__name__)
plog = PipelineLogger("IngestionPipeline")

FullQueuePolicy = Literal["reject", "block"]
FailurePolicy = Literal["drop", "retry"]

# Transient failures worth another attempt; a malformed provider answer is not one
_RETRYABLE_ERRORS = (ProviderUnavailableError, SinkWriteError)
_MAX_RETRY_WAIT_SECONDS = 30.0


@dataclass
class PipelineStats:
    """Snapshot of pipeline counters for health reporting."""

    submitted: int = 0
    rejected: int = 0
    processed: int = 0
    failed: int = 0
    points_written: int = 0
    queue_depth: int = 0
    queue_capacity: int = 0
    running: bool = False

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


class IngestionPipeline:
    """Owns the ingestion queue and the single background consumer.

    Runs as an asyncio.Task inside FastAPI's lifespan. Failures of one item
    are logged and the item is dropped (or retried a bounded number of times
    under ``failure_policy="retry"``); the consumer always moves on to the
    next item.
    """

    def __init__(
        self,
        embedding_service: EmbeddingService,
        vector_sink: VectorSink,
        collection: str,
        *,
        max_queue_size: int = 1000,
        full_policy: FullQueuePolicy = "reject",
        put_timeout: float = 5.0,
        failure_policy: FailurePolicy = "drop",
        max_attempts: int = 3,
        retry_backoff: float = 1.0,
    ) -> None:
        if full_policy not in ("reject", "block"):
            raise ValueError(f"Unknown full-queue policy: {full_policy}")
        if failure_policy not in ("drop", "retry"):
            raise ValueError(f"Unknown failure policy: {failure_policy}")

        self._embedding_service = embedding_service
        self._sink = vector_sink
        self._collection = collection
        self._max_queue_size = max_queue_size
        self._full_policy = full_policy
        self._put_timeout = put_timeout
        self._failure_policy = failure_policy
        self._max_attempts = max_attempts
        self._retry_backoff = retry_backoff

        self._queue: asyncio.Queue[IngestJob] = asyncio.Queue(maxsize=max_queue_size)
        self._task: asyncio.Task | None = None
        self._closed = False
        self._stats = PipelineStats(queue_capacity=max_queue_size)

    # ── Lifecycle ────────────────────────────────────────────────────

    async def start(self) -> None:
        """Start the consumer loop. Must be called at most once."""
        if self._task is not None:
            raise RuntimeError("IngestionPipeline has already been started")
        self._task = asyncio.create_task(self._consume(), name="ingestion-consumer")
        self._task.add_done_callback(self._on_consumer_exit)
        plog.step_start(
            PipelineStage.PIPELINE,
            "Ingestion consumer started",
            collection=self._collection,
            queue=self._max_queue_size or "unbounded",
            policy=f"{self._full_policy}/{self._failure_policy}",
        )

    async def stop(self) -> None:
        """Stop accepting items and cancel the consumer."""
        self._closed = True
        if self._task and not self._task.done():
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
        pending = self._discard_pending()
        if pending:
            logger.warning("IngestionPipeline stopped with %d unprocessed items", pending)
        plog.step_complete(PipelineStage.PIPELINE, "Ingestion consumer stopped")
        stats = self.stats
        plog.stats(
            processed=stats.processed,
            failed=stats.failed,
            points=stats.points_written,
            rejected=stats.rejected,
        )

    async def join(self) -> None:
        """Wait until every item submitted so far has reached DONE.

        Items still queued when the pipeline is stopped are discarded, so a
        join after stop returns instead of waiting on them.
        """
        await self._queue.join()

    def _discard_pending(self) -> int:
        """Empty the queue, marking every dropped job as handled for join()."""
        discarded = 0
        while True:
            try:
                self._queue.get_nowait()
            except asyncio.QueueEmpty:
                return discarded
            self._queue.task_done()
            discarded += 1

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def stats(self) -> PipelineStats:
        self._stats.queue_depth = self._queue.qsize()
        self._stats.running = self.running
        return self._stats

    def _on_consumer_exit(self, task: asyncio.Task) -> None:
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.critical(
                "Ingestion consumer terminated unexpectedly — no further items will be processed",
                exc_info=exc,
            )

    # ── Intake ───────────────────────────────────────────────────────

    async def submit(self, item: IngestItem) -> IngestJob:
        """Enqueue *item* for asynchronous processing and return immediately.

        Raises:
            QueueClosedError: The pipeline was stopped or its consumer died.
            QueueFullError: The bounded queue has no room (after waiting up to
                ``put_timeout`` under the ``block`` policy).
        """
        if self._closed or (self._task is not None and self._task.done()):
            raise QueueClosedError("Ingestion consumer is not running")

        job = IngestJob(item=item)
        if self._full_policy == "block":
            try:
                await asyncio.wait_for(self._queue.put(job), timeout=self._put_timeout)
            except asyncio.TimeoutError:
                self._stats.rejected += 1
                raise QueueFullError(self._max_queue_size) from None
        else:
            try:
                self._queue.put_nowait(job)
            except asyncio.QueueFull:
                self._stats.rejected += 1
                raise QueueFullError(self._max_queue_size) from None

        self._stats.submitted += 1
        plog.step_start(PipelineStage.QUEUE, f"Queued {item.uuid}", depth=self._queue.qsize())
        return job

    # ── Consumer ─────────────────────────────────────────────────────

    async def _consume(self) -> None:
        """Main loop — drains the queue one item at a time."""
        while True:
            job = await self._queue.get()
            try:
                await self._process(job)
            except Exception as e:
                logger.exception("Unexpected failure while ingesting %s", job.item.uuid)
                job.mark_failed(f"{type(e).__name__}: {e}")
            finally:
                # Cancellation mid-item leaves it short of DONE; it is not counted
                if job.stage is ItemStage.DONE:
                    self._record(job)
                self._queue.task_done()

    async def _process(self, job: IngestJob) -> None:
        """Run one item through chunking, embedding and upserting."""
        item = job.item

        if not item.text.strip():
            plog.detail(f"No embeddable text for {item.uuid}")
            job.mark_done(0)
            return

        job.advance(ItemStage.CHUNKING)
        with plog.timed_step(PipelineStage.CHUNKING, f"Chunking {item.uuid}", chars=len(item.text)):
            chunks = self._embedding_service.chunk_item(item)
        job.chunk_count = len(chunks)

        job.advance(ItemStage.EMBEDDING)
        try:
            with plog.timed_step(PipelineStage.EMBEDDING, f"Embedding {len(chunks)} chunks"):
                embedded = await self._attempt(job, self._embedding_service.embed_chunks, chunks)
        except (ProviderUnavailableError, ProviderResponseError) as e:
            job.mark_failed(str(e))
            return

        points = self._build_points(item, embedded)

        job.advance(ItemStage.UPSERTING)
        try:
            with plog.timed_step(PipelineStage.UPSERT, f"Upserting {len(points)} points", collection=self._collection):
                await self._attempt(job, self._sink.upsert, self._collection, points)
        except SinkWriteError as e:
            job.mark_failed(str(e))
            return

        job.mark_done(len(points))

    async def _attempt(self, job: IngestJob, func: Callable[..., Awaitable[Any]], *args: Any) -> Any:
        """Call *func* once, or with bounded retries under the retry policy."""
        if self._failure_policy == "drop":
            job.attempts += 1
            return await func(*args)

        result = None
        async for attempt in AsyncRetrying(
            retry=retry_if_exception_type(_RETRYABLE_ERRORS),
            stop=stop_after_attempt(self._max_attempts),
            wait=wait_exponential(multiplier=self._retry_backoff, max=_MAX_RETRY_WAIT_SECONDS),
            before_sleep=self._log_retry,
            reraise=True,
        ):
            with attempt:
                job.attempts += 1
                result = await func(*args)
        return result

    def _log_retry(self, retry_state: RetryCallState) -> None:
        error = retry_state.outcome.exception() if retry_state.outcome else None
        logger.warning(
            "Attempt %d/%d failed (%s) — retrying",
            retry_state.attempt_number,
            self._max_attempts,
            error,
        )

    @staticmethod
    def _build_points(item: IngestItem, embedded: list[EmbeddedChunk]) -> list[VectorPoint]:
        """One point per chunk, in chunk order, each with a fresh UUID4 id."""
        points: list[VectorPoint] = []
        for entry in embedded:
            payload: dict[str, PayloadValue] = {
                "uuid": str(item.uuid),
                "text": entry.text,
                "chunk_index": entry.chunk.index,
            }
            if item.title:
                payload["title"] = item.title
            points.append(VectorPoint(vector=entry.vector, payload=payload))
        return points

    def _record(self, job: IngestJob) -> None:
        """Fold a finished job into the counters and log its outcome."""
        self._stats.processed += 1
        if job.failed:
            self._stats.failed += 1
            plog.step_error(
                PipelineStage.ERROR,
                f"Dropped {job.item.uuid} — nothing written",
            )
            plog.detail(job.error or "unknown error", attempts=job.attempts)
            return

        self._stats.points_written += job.points_written
        plog.step_complete(
            PipelineStage.COMPLETE,
            f"Inserted {job.points_written} embeddings for {job.item.uuid}",
            chunks=job.chunk_count,
            waited=f"{job.queued_seconds:.2f}s",
            took=f"{job.processing_seconds:.2f}s",
        )
