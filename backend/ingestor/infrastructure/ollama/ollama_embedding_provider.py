"""Ollama-based embedding provider — calls the /api/embeddings endpoint.

One request per text: ``{"model": ..., "prompt": ...}`` in, ``{"embedding": [...]}`` out.
Default model: mxbai-embed-large (1024 dimensions).
"""

import logging
from typing import Any

import httpx

from ingestor.application.interfaces.embedding_provider import EmbeddingProvider
from ingestor.domain.exceptions import ProviderResponseError, ProviderUnavailableError

logger = logging.getLogger(__name__)

_PROVIDER = "ollama"


class OllamaEmbeddingProvider(EmbeddingProvider):
    """Infrastructure adapter — generates embeddings via the Ollama HTTP API."""

    def __init__(
        self,
        base_url: str = "http://localhost:11434",
        model: str = "mxbai-embed-large",
        model_dimensions: int = 1024,
        timeout: float = 30.0,
        http_client: httpx.AsyncClient | None = None,
    ):
        self._base_url = base_url.rstrip("/")
        self._model = model
        self._dimensions = model_dimensions
        self._timeout = timeout
        self._http_client = http_client

    @property
    def dimensions(self) -> int:
        return self._dimensions

    async def _get_client(self) -> httpx.AsyncClient:
        if self._http_client is not None:
            return self._http_client
        return httpx.AsyncClient(timeout=self._timeout)

    async def embed(self, text: str) -> list[float]:
        """Generate the embedding for one chunk of text."""
        url = f"{self._base_url}/api/embeddings"
        payload: dict[str, Any] = {"model": self._model, "prompt": text}

        client = await self._get_client()
        should_close = self._http_client is None

        try:
            try:
                response = await client.post(url, json=payload)
            except httpx.HTTPError as exc:
                logger.error("Embedding request to %s failed: %s", url, exc)
                raise ProviderUnavailableError(
                    _PROVIDER, f"{type(exc).__name__}: {exc}"
                ) from exc

            if not response.is_success:
                error_text = response.text[:500]
                logger.error(
                    "Embedding API error %d: %s", response.status_code, error_text
                )
                raise ProviderUnavailableError(
                    _PROVIDER, error_text, status_code=response.status_code
                )

            embedding = self._parse_embedding(response)
            logger.debug(
                "Generated embedding (model=%s, dims=%d, chars=%d)",
                self._model,
                len(embedding),
                len(text),
            )
            return embedding

        finally:
            if should_close:
                await client.aclose()

    def _parse_embedding(self, response: httpx.Response) -> list[float]:
        """Extract ``embedding`` from the response body or raise ProviderResponseError."""
        body = response.text
        try:
            data = response.json()
        except ValueError as exc:
            raise ProviderResponseError(_PROVIDER, "response is not valid JSON", body) from exc

        embedding = data.get("embedding") if isinstance(data, dict) else None
        if not isinstance(embedding, list):
            raise ProviderResponseError(_PROVIDER, "response has no 'embedding' list", body)

        if len(embedding) != self._dimensions:
            raise ProviderResponseError(
                _PROVIDER,
                f"expected {self._dimensions} dimensions, got {len(embedding)}",
                body,
            )

        if not all(
            isinstance(value, (int, float)) and not isinstance(value, bool)
            for value in embedding
        ):
            raise ProviderResponseError(_PROVIDER, "embedding contains non-numeric values", body)

        return [float(value) for value in embedding]
