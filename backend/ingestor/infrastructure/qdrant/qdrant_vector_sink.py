"""Qdrant vector sink — writes points through the Qdrant REST API.

Uses the same httpx client pattern as the Ollama embedding provider.
Endpoints:
    GET  /collections/{name}/exists
    PUT  /collections/{name}
    PUT  /collections/{name}/points?wait=true
"""

import logging
from urllib.parse import quote

import httpx

from ingestor.application.interfaces.vector_sink import VectorSink
from ingestor.domain.entities import CollectionSpec, VectorPoint
from ingestor.domain.exceptions import SinkWriteError

logger = logging.getLogger(__name__)


def _collection_path(name: str, suffix: str = "") -> str:
    """URL path for *name*, quoted so the name can never add path segments."""
    return f"/collections/{quote(name, safe='')}{suffix}"


class QdrantVectorSink(VectorSink):
    """Infrastructure adapter — persists vectors into a Qdrant collection."""

    def __init__(
        self,
        base_url: str = "http://localhost:6333",
        api_key: str = "",
        timeout: float = 30.0,
        http_client: httpx.AsyncClient | None = None,
    ):
        self._base_url = base_url.rstrip("/")
        self._api_key = api_key
        self._timeout = timeout
        self._http_client = http_client

    def _get_headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self._api_key:
            headers["api-key"] = self._api_key
        return headers

    async def _get_client(self) -> httpx.AsyncClient:
        if self._http_client is not None:
            return self._http_client
        return httpx.AsyncClient(timeout=self._timeout)

    async def _request(
        self,
        method: str,
        path: str,
        collection: str,
        *,
        json: dict | None = None,
        params: dict | None = None,
    ) -> httpx.Response:
        """Send one request, mapping transport and status failures to SinkWriteError."""
        client = await self._get_client()
        should_close = self._http_client is None
        url = f"{self._base_url}{path}"

        try:
            try:
                response = await client.request(
                    method, url, headers=self._get_headers(), json=json, params=params
                )
            except httpx.HTTPError as exc:
                logger.error("Qdrant %s %s failed: %s", method, path, exc)
                raise SinkWriteError(collection, f"{type(exc).__name__}: {exc}") from exc

            if not response.is_success:
                error_text = response.text[:500]
                logger.error(
                    "Qdrant API error %d on %s %s: %s",
                    response.status_code,
                    method,
                    path,
                    error_text,
                )
                raise SinkWriteError(
                    collection, error_text, status_code=response.status_code
                )
            return response

        finally:
            if should_close:
                await client.aclose()

    async def collection_exists(self, name: str) -> bool:
        response = await self._request("GET", _collection_path(name, "/exists"), name)
        try:
            return bool(response.json()["result"]["exists"])
        except (ValueError, KeyError, TypeError) as exc:
            raise SinkWriteError(
                name, f"unexpected exists response: {response.text[:200]}"
            ) from exc

    async def ensure_collection(self, spec: CollectionSpec) -> bool:
        """Create the collection when missing. Returns True if it was created."""
        if await self.collection_exists(spec.name):
            logger.debug("Collection '%s' already exists", spec.name)
            return False

        await self._request(
            "PUT",
            _collection_path(spec.name),
            spec.name,
            json={"vectors": {"size": spec.dimension, "distance": spec.distance}},
        )
        logger.info(
            "Created collection '%s' (dimension=%d, distance=%s)",
            spec.name,
            spec.dimension,
            spec.distance,
        )
        return True

    async def upsert(self, collection: str, points: list[VectorPoint]) -> None:
        """Upsert all *points* in one request and wait for Qdrant to apply them."""
        if not points:
            return

        await self._request(
            "PUT",
            _collection_path(collection, "/points"),
            collection,
            json={"points": [point.to_wire() for point in points]},
            params={"wait": "true"},
        )
        logger.debug("Upserted %d points into '%s'", len(points), collection)
