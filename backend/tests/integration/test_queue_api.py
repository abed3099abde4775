"""End-to-end tests: HTTP intake → pipeline → (mocked) Ollama and Qdrant."""

import asyncio
import json
import uuid

import httpx
import pytest
from httpx import ASGITransport, AsyncClient

from conftest import build_word_tokenizer, words
from ingestor.config import load_settings
from ingestor.domain.entities import IngestItem
from ingestor.domain.exceptions import QueueClosedError, QueueFullError
from ingestor.infrastructure.dependencies import get_pipeline
from ingestor.main import create_app

pytestmark = pytest.mark.integration


class FakeBackends:
    """Answers both the Ollama and the Qdrant REST calls made by the app."""

    def __init__(self, collection_exists: bool = False):
        self.collection_exists = collection_exists
        self.embedding_prompts: list[str] = []
        self.created_collections: list[dict] = []
        self.upserts: list[dict] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        if request.url.host == "ollama.test" and path == "/api/embeddings":
            self.embedding_prompts.append(json.loads(request.content)["prompt"])
            return httpx.Response(200, json={"embedding": [0.01] * 1024})
        if path == "/collections/videos/exists":
            return httpx.Response(200, json={"result": {"exists": self.collection_exists}})
        if request.method == "PUT" and path == "/collections/videos":
            self.created_collections.append(json.loads(request.content))
            self.collection_exists = True
            return httpx.Response(200, json={"result": True})
        if request.method == "PUT" and path == "/collections/videos/points":
            self.upserts.append(json.loads(request.content))
            return httpx.Response(200, json={"result": {"status": "completed"}})
        return httpx.Response(404)


def _app(backends: FakeBackends, **overrides):
    settings = load_settings(
        address="127.0.0.1:8080",
        ollama_address="http://ollama.test:11434",
        qdrant_address="http://qdrant.test:6333",
        qdrant_collection="videos",
        **overrides,
    )
    return create_app(
        settings,
        tokenizer=build_word_tokenizer(),
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(backends.handler)),
    )


@pytest.mark.asyncio
async def test_queue_short_text_end_to_end():
    backends = FakeBackends()
    app = _app(backends)

    async with app.router.lifespan_context(app):
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            response = await client.post(
                "/api/v1/queue",
                json={"uuid": "11111111-1111-1111-1111-111111111111", "text": "a short sentence"},
            )
        await asyncio.wait_for(app.state.pipeline.join(), timeout=5)

    assert response.status_code == 202
    assert response.json() == {"status": "queued", "uuid": "11111111-1111-1111-1111-111111111111"}
    assert backends.created_collections == [{"vectors": {"size": 1024, "distance": "Cosine"}}]
    assert len(backends.upserts) == 1
    points = backends.upserts[0]["points"]
    assert len(points) == 1
    assert points[0]["payload"]["uuid"] == "11111111-1111-1111-1111-111111111111"
    assert points[0]["payload"]["text"] == "a short sentence"
    assert len(points[0]["vector"]) == 1024


@pytest.mark.asyncio
async def test_queue_long_text_embeds_each_chunk():
    backends = FakeBackends(collection_exists=True)
    app = _app(backends)

    async with app.router.lifespan_context(app):
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            response = await client.post(
                "/api/v1/queue",
                json={"uuid": "22222222-2222-2222-2222-222222222222", "text": words(600), "title": "Talk"},
            )
        await asyncio.wait_for(app.state.pipeline.join(), timeout=5)

    assert response.status_code == 202
    assert backends.created_collections == []
    assert len(backends.embedding_prompts) == 2
    points = backends.upserts[0]["points"]
    assert [p["payload"]["title"] for p in points] == ["Talk", "Talk"]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "body",
    [
        {"text": "missing uuid"},
        {"uuid": "not-a-uuid", "text": "hello"},
        {"uuid": "11111111-1111-1111-1111-111111111111"},
    ],
)
async def test_queue_rejects_invalid_payloads(body):
    backends = FakeBackends()
    app = _app(backends)

    async with app.router.lifespan_context(app):
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            response = await client.post("/api/v1/queue", json=body)

    assert response.status_code == 422
    assert backends.embedding_prompts == []


class RefusingPipeline:
    """Stand-in pipeline whose submit always fails with the given error."""

    def __init__(self, error: Exception):
        self._error = error

    async def submit(self, item):
        raise self._error


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("error", "expected_status"),
    [
        (QueueFullError(1000), 503),
        (QueueClosedError("consumer stopped"), 500),
    ],
)
async def test_queue_maps_pipeline_errors_to_status_codes(error, expected_status):
    app = _app(FakeBackends())
    app.dependency_overrides[get_pipeline] = lambda: RefusingPipeline(error)

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        response = await client.post(
            "/api/v1/queue",
            json={"uuid": "11111111-1111-1111-1111-111111111111", "text": "hello"},
        )

    assert response.status_code == expected_status


@pytest.mark.asyncio
async def test_health_reports_pipeline_counters():
    backends = FakeBackends()
    app = _app(backends)

    async with app.router.lifespan_context(app):
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            response = await client.get("/api/v1/health")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["pipeline"]["running"] is True
    assert data["pipeline"]["queue_capacity"] == 1000
    assert "version" in data
    assert "environment" in data


@pytest.mark.asyncio
async def test_health_is_degraded_once_consumer_stops():
    app = _app(FakeBackends())

    async with app.router.lifespan_context(app):
        await app.state.pipeline.stop()
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            response = await client.get("/api/v1/health")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "degraded"
    assert data["pipeline"]["running"] is False


@pytest.mark.asyncio
async def test_lifespan_stops_consumer_when_app_exits_with_error():
    app = _app(FakeBackends())

    with pytest.raises(RuntimeError, match="server crashed"):
        async with app.router.lifespan_context(app):
            pipeline = app.state.pipeline
            assert pipeline.running is True
            raise RuntimeError("server crashed")

    assert pipeline.running is False
    with pytest.raises(QueueClosedError):
        await pipeline.submit(IngestItem(uuid=uuid.uuid4(), text="late"))
