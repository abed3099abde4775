"""Unit tests for the OllamaEmbeddingProvider."""

import json

import httpx
import pytest

from ingestor.domain.exceptions import ProviderResponseError, ProviderUnavailableError
from ingestor.infrastructure.ollama import OllamaEmbeddingProvider


# ── Helpers ──


def _make_mock_transport(
    status_code: int = 200,
    json_body: object | None = None,
    raw_body: bytes | None = None,
    requests: list[httpx.Request] | None = None,
) -> httpx.MockTransport:
    """Create a mock transport that returns a fixed response and records requests."""

    def handler(request: httpx.Request) -> httpx.Response:
        if requests is not None:
            requests.append(request)
        if raw_body is not None:
            return httpx.Response(status_code, content=raw_body)
        return httpx.Response(status_code, json=json_body)

    return httpx.MockTransport(handler)


def _provider(transport: httpx.MockTransport, dimensions: int = 1024) -> OllamaEmbeddingProvider:
    return OllamaEmbeddingProvider(
        base_url="http://ollama.test:11434/",
        model="mxbai-embed-large",
        model_dimensions=dimensions,
        http_client=httpx.AsyncClient(transport=transport),
    )


# ── Tests ──


@pytest.mark.asyncio
async def test_embed_posts_model_and_prompt():
    """The request hits /api/embeddings with a JSON model/prompt body."""
    requests: list[httpx.Request] = []
    transport = _make_mock_transport(json_body={"embedding": [0.5] * 1024}, requests=requests)
    provider = _provider(transport)

    await provider.embed('He said "hi"\nthen left')

    assert len(requests) == 1
    request = requests[0]
    assert request.method == "POST"
    assert str(request.url) == "http://ollama.test:11434/api/embeddings"
    assert json.loads(request.content) == {
        "model": "mxbai-embed-large",
        "prompt": 'He said "hi"\nthen left',
    }


@pytest.mark.asyncio
async def test_embed_returns_vector_of_expected_length():
    transport = _make_mock_transport(json_body={"embedding": [1, 0.25] * 512})
    provider = _provider(transport)

    vector = await provider.embed("hello")

    assert len(vector) == 1024
    assert all(isinstance(v, float) for v in vector)
    assert vector[:2] == [1.0, 0.25]


@pytest.mark.asyncio
async def test_invalid_json_raises_response_error_with_body():
    transport = _make_mock_transport(raw_body=b"<html>oops</html>")
    provider = _provider(transport)

    with pytest.raises(ProviderResponseError) as exc_info:
        await provider.embed("hello")

    assert exc_info.value.body == "<html>oops</html>"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "json_body",
    [
        {"error": "model not found"},
        {"embedding": "not-a-list"},
        {"embedding": [0.1] * 768},
        {"embedding": ["x"] * 1024},
        [0.1] * 1024,
    ],
)
async def test_unexpected_shape_raises_response_error(json_body):
    transport = _make_mock_transport(json_body=json_body)
    provider = _provider(transport)

    with pytest.raises(ProviderResponseError) as exc_info:
        await provider.embed("hello")

    assert exc_info.value.provider == "ollama"
    assert exc_info.value.body


@pytest.mark.asyncio
async def test_non_2xx_status_raises_unavailable_error():
    transport = _make_mock_transport(status_code=503, json_body={"error": "loading model"})
    provider = _provider(transport)

    with pytest.raises(ProviderUnavailableError) as exc_info:
        await provider.embed("hello")

    assert exc_info.value.status_code == 503
    assert "loading model" in exc_info.value.message


@pytest.mark.asyncio
async def test_connection_failure_raises_unavailable_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    provider = _provider(httpx.MockTransport(handler))

    with pytest.raises(ProviderUnavailableError) as exc_info:
        await provider.embed("hello")

    assert exc_info.value.status_code is None


@pytest.mark.asyncio
async def test_identical_text_is_not_cached():
    requests: list[httpx.Request] = []
    transport = _make_mock_transport(json_body={"embedding": [0.0] * 1024}, requests=requests)
    provider = _provider(transport)

    await provider.embed("same")
    await provider.embed("same")

    assert len(requests) == 2


def test_dimensions_property():
    provider = OllamaEmbeddingProvider(model_dimensions=1024)
    assert provider.dimensions == 1024
