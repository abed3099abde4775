import logging
from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, ValidationError, field_validator, model_validator
from pydantic_settings import BaseSettings

from ingestor.domain.exceptions import ConfigurationError

_config_logger = logging.getLogger(__name__)

_BACKEND_DIR = Path(__file__).resolve().parents[1]
_ENV_FILES = (
    _BACKEND_DIR / ".env",
    ".env",
)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    app_title: str = "Embedding Ingestor"
    app_version: str = "0.1.0"
    app_env: str = "development"

    # Required: the service cannot start without them
    address: str = Field(description="host:port the HTTP intake binds to")
    ollama_address: str = Field(description="Base URL of the Ollama server")
    qdrant_address: str = Field(description="Base URL of the Qdrant REST API")
    qdrant_collection: str = Field(min_length=1)
    qdrant_api_key: str = ""

    # Embedding
    embedding_model: str = "mxbai-embed-large"
    tokenizer_model: str = "mixedbread-ai/mxbai-embed-large-v1"
    embedding_dimensions: int = Field(default=1024, gt=0)
    embedding_concurrency: int = Field(default=1, ge=1)
    http_timeout_seconds: float = Field(default=30.0, gt=0)

    # Chunking (in tokens)
    chunk_size: int = Field(default=512, gt=0)
    chunk_overlap: int = Field(default=56, ge=0)

    # Queue (0 means unbounded)
    queue_max_size: int = Field(default=1000, ge=0)
    queue_full_policy: Literal["reject", "block"] = "reject"
    queue_put_timeout_seconds: float = Field(default=5.0, gt=0)

    # Failure handling
    failure_policy: Literal["drop", "retry"] = "drop"
    max_attempts: int = Field(default=3, ge=1)
    retry_backoff_seconds: float = Field(default=1.0, ge=0)

    # Logging: per-category log levels (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    log_level: str = "INFO"                  # Root / app-wide
    log_level_http: str = "WARNING"          # httpx / httpcore
    log_level_uvicorn: str = "INFO"          # uvicorn.access / uvicorn.error
    log_level_pipeline: str = "INFO"         # IngestionPipeline stages
    log_level_providers: str = "INFO"        # Ollama / Qdrant adapters

    model_config = {
        "env_file": _ENV_FILES,
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    @field_validator("ollama_address", "qdrant_address")
    @classmethod
    def _check_url(cls, value: str) -> str:
        if not value.startswith(("http://", "https://")):
            raise ValueError(f"expected an http(s) URL, got '{value}'")
        return value.rstrip("/")

    @field_validator("address")
    @classmethod
    def _check_address(cls, value: str) -> str:
        host, sep, port = value.rpartition(":")
        if not sep or not host or not port.isdigit() or not 0 < int(port) < 65536:
            raise ValueError(f"expected 'host:port', got '{value}'")
        return value

    @model_validator(mode="after")
    def _check_overlap(self) -> "Settings":
        # The window start would never advance otherwise
        if self.chunk_overlap >= self.chunk_size:
            raise ValueError(
                f"chunk_overlap ({self.chunk_overlap}) must be smaller than "
                f"chunk_size ({self.chunk_size})"
            )
        return self

    @property
    def bind_host(self) -> str:
        return self.address.rpartition(":")[0]

    @property
    def bind_port(self) -> int:
        return int(self.address.rpartition(":")[2])

    def describe(self) -> dict[str, object]:
        """Settings as a dict suitable for logging, with secrets masked."""
        data = self.model_dump()
        if data.get("qdrant_api_key"):
            data["qdrant_api_key"] = "***"
        return data


def load_settings(**overrides: object) -> Settings:
    """Build Settings, turning validation failures into ConfigurationError."""
    try:
        return Settings(**overrides)
    except ValidationError as exc:
        _config_logger.error("Invalid configuration: %s", exc)
        raise ConfigurationError(str(exc)) from exc


@lru_cache
def get_settings() -> Settings:
    """Cached settings instance — reads .env once."""
    return load_settings()
