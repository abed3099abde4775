"""Unit tests for application settings configuration."""

from pathlib import Path

import pytest

from ingestor.config import Settings, load_settings
from ingestor.domain.exceptions import ConfigurationError

REQUIRED = {
    "address": "0.0.0.0:8080",
    "ollama_address": "http://localhost:11434",
    "qdrant_address": "http://localhost:6333",
    "qdrant_collection": "videos",
}


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for name in ("ADDRESS", "OLLAMA_ADDRESS", "QDRANT_ADDRESS", "QDRANT_COLLECTION", "QDRANT_API_KEY"):
        monkeypatch.delenv(name, raising=False)


def test_settings_uses_backend_env_file_independent_of_cwd():
    """Settings should always include backend/.env as an env source."""
    env_files = Settings.model_config.get("env_file")
    assert env_files is not None

    normalized = {str(Path(item)) for item in env_files}
    expected_backend_env = str(Path(__file__).resolve().parents[2] / ".env")

    assert expected_backend_env in normalized
    assert str(Path(".env")) in normalized


def test_settings_read_from_environment(monkeypatch):
    monkeypatch.setenv("ADDRESS", "127.0.0.1:9000")
    monkeypatch.setenv("OLLAMA_ADDRESS", "http://ollama:11434/")
    monkeypatch.setenv("QDRANT_ADDRESS", "http://qdrant:6333")
    monkeypatch.setenv("QDRANT_COLLECTION", "transcripts")

    settings = load_settings()

    assert settings.bind_host == "127.0.0.1"
    assert settings.bind_port == 9000
    assert settings.ollama_address == "http://ollama:11434"
    assert settings.qdrant_collection == "transcripts"
    assert (settings.chunk_size, settings.chunk_overlap) == (512, 56)
    assert settings.embedding_dimensions == 1024


def test_missing_required_setting_is_a_configuration_error():
    with pytest.raises(ConfigurationError):
        load_settings(ollama_address="http://localhost:11434")


@pytest.mark.parametrize(
    "overrides",
    [
        {"chunk_size": 512, "chunk_overlap": 512},
        {"chunk_size": 100, "chunk_overlap": 200},
        {"address": "no-port"},
        {"address": "host:99999"},
        {"ollama_address": "localhost:11434"},
        {"queue_full_policy": "drop-oldest"},
        {"failure_policy": "dead-letter"},
        {"qdrant_collection": ""},
    ],
)
def test_malformed_settings_are_configuration_errors(overrides):
    with pytest.raises(ConfigurationError):
        load_settings(**{**REQUIRED, **overrides})


def test_describe_masks_api_key():
    settings = load_settings(**REQUIRED, qdrant_api_key="secret")

    assert settings.describe()["qdrant_api_key"] == "***"
