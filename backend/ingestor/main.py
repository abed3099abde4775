"""FastAPI application factory."""

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI

from ingestor.application.interfaces.tokenizer import TextTokenizer
from ingestor.application.services import EmbeddingService, IngestionPipeline, TokenChunker
from ingestor.config import Settings, get_settings
from ingestor.domain.entities import CollectionSpec
from ingestor.infrastructure.logging.log_config import setup_logging
from ingestor.infrastructure.ollama import OllamaEmbeddingProvider
from ingestor.infrastructure.qdrant import QdrantVectorSink
from ingestor.infrastructure.tokenizer import HuggingFaceTokenizer
from ingestor.presentation.api.router import router as api_router

logger = logging.getLogger(__name__)


async def _build_pipeline(
    settings: Settings,
    http_client: httpx.AsyncClient,
    tokenizer: TextTokenizer | None,
) -> IngestionPipeline:
    """Wire tokenizer → chunker → Ollama → Qdrant into an IngestionPipeline.

    Provisions the target collection before returning, so the first upsert
    always finds it.
    """
    if tokenizer is None:
        # from_pretrained may hit the network; keep the event loop free
        tokenizer = await asyncio.to_thread(
            HuggingFaceTokenizer.from_pretrained, settings.tokenizer_model
        )

    chunker = TokenChunker(
        tokenizer,
        chunk_size=settings.chunk_size,
        overlap=settings.chunk_overlap,
    )
    embedding_provider = OllamaEmbeddingProvider(
        base_url=settings.ollama_address,
        model=settings.embedding_model,
        model_dimensions=settings.embedding_dimensions,
        timeout=settings.http_timeout_seconds,
        http_client=http_client,
    )
    vector_sink = QdrantVectorSink(
        base_url=settings.qdrant_address,
        api_key=settings.qdrant_api_key,
        timeout=settings.http_timeout_seconds,
        http_client=http_client,
    )

    await vector_sink.ensure_collection(
        CollectionSpec(
            name=settings.qdrant_collection,
            dimension=settings.embedding_dimensions,
        )
    )

    embedding_service = EmbeddingService(
        embedding_provider=embedding_provider,
        chunker=chunker,
        concurrency=settings.embedding_concurrency,
    )
    return IngestionPipeline(
        embedding_service=embedding_service,
        vector_sink=vector_sink,
        collection=settings.qdrant_collection,
        max_queue_size=settings.queue_max_size,
        full_policy=settings.queue_full_policy,
        put_timeout=settings.queue_put_timeout_seconds,
        failure_policy=settings.failure_policy,
        max_attempts=settings.max_attempts,
        retry_backoff=settings.retry_backoff_seconds,
    )


def create_app(
    settings: Settings | None = None,
    *,
    tokenizer: TextTokenizer | None = None,
    http_client: httpx.AsyncClient | None = None,
) -> FastAPI:
    """Factory function that builds and configures the FastAPI application.

    ``tokenizer`` and ``http_client`` default to the pretrained tokenizer and
    a fresh httpx client with the configured timeout.
    """
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        """Application lifespan — provision the collection, run the consumer."""
        setup_logging(settings)
        logger.info("Loaded config: %s", settings.describe())

        client = http_client or httpx.AsyncClient(timeout=settings.http_timeout_seconds)
        pipeline: IngestionPipeline | None = None
        try:
            pipeline = await _build_pipeline(settings, client, tokenizer)
            await pipeline.start()
            app.state.pipeline = pipeline

            yield
        finally:
            if pipeline is not None:
                await pipeline.stop()
            if http_client is None:
                await client.aclose()

    app = FastAPI(
        title=settings.app_title,
        version=settings.app_version,
        lifespan=lifespan,
    )
    app.state.settings = settings

    # Mount API routes
    app.include_router(api_router)

    return app
