"""Embedding service — chunks text and turns every chunk into a vector.

This is an application service that coordinates:
1. Splitting item text into token windows via the TokenChunker
2. Generating one embedding per window via the EmbeddingProvider
"""

import asyncio
import logging
import time
from uuid import UUID

from ingestor.application.interfaces.embedding_provider import EmbeddingProvider
from ingestor.application.services.chunker import TokenChunker
from ingestor.domain.entities import Chunk, EmbeddedChunk, IngestItem

logger = logging.getLogger(__name__)


class EmbeddingService:
    """Application service for chunking and embedding text.

    Each chunk costs one provider call. With ``concurrency=1`` the calls run
    strictly one after another; higher values overlap up to that many calls.
    The result list always follows chunk order.
    """

    def __init__(
        self,
        embedding_provider: EmbeddingProvider,
        chunker: TokenChunker,
        *,
        concurrency: int = 1,
    ):
        if concurrency < 1:
            raise ValueError(f"concurrency must be >= 1, got {concurrency}")
        self._embedding_provider = embedding_provider
        self._chunker = chunker
        self._concurrency = concurrency

    def chunk_text(self, text: str, source_uuid: UUID | None = None) -> list[Chunk]:
        """Split *text* into ordered Chunk entities."""
        return [
            Chunk(index=i, text=part, source_uuid=source_uuid)
            for i, part in enumerate(self._chunker.chunk(text))
        ]

    def chunk_item(self, item: IngestItem) -> list[Chunk]:
        return self.chunk_text(item.text, source_uuid=item.uuid)

    async def embed_chunks(self, chunks: list[Chunk]) -> list[EmbeddedChunk]:
        """Embed every chunk, preserving order. Provider errors propagate."""
        if not chunks:
            return []

        start = time.monotonic()

        if self._concurrency == 1:
            vectors = [await self._embedding_provider.embed(c.text) for c in chunks]
        else:
            semaphore = asyncio.Semaphore(self._concurrency)

            async def _embed(chunk: Chunk) -> list[float]:
                async with semaphore:
                    return await self._embedding_provider.embed(chunk.text)

            # gather keeps argument order regardless of completion order
            vectors = await asyncio.gather(*(_embed(c) for c in chunks))

        duration_ms = int((time.monotonic() - start) * 1000)
        logger.info(
            "Embedded %d chunks in %dms (concurrency=%d)",
            len(chunks),
            duration_ms,
            self._concurrency,
        )
        return [
            EmbeddedChunk(chunk=chunk, vector=vector)
            for chunk, vector in zip(chunks, vectors, strict=True)
        ]

    async def embed_text(self, text: str) -> list[EmbeddedChunk]:
        """Chunk *text* and embed each chunk — one provider call per chunk."""
        return await self.embed_chunks(self.chunk_text(text))
