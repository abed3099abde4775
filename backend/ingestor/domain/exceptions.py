"""Domain-specific exceptions — framework-independent."""


class IngestorError(Exception):
    """Base class for every error raised by the ingestion service."""


class ConfigurationError(IngestorError):
    """Raised when settings are missing or invalid. Fatal at startup."""


class ProviderUnavailableError(IngestorError):
    """Raised when the embedding provider cannot be reached or answers non-2xx.

    Covers timeouts, refused connections and error status codes.
    """

    def __init__(self, provider: str, message: str, status_code: int | None = None):
        self.provider = provider
        self.status_code = status_code
        self.message = message
        prefix = f"[{provider}] {status_code}" if status_code is not None else f"[{provider}]"
        super().__init__(f"{prefix}: {message}")


class ProviderResponseError(IngestorError):
    """Raised when the embedding provider answers with an unexpected body.

    The raw response body is kept for diagnostics.
    """

    def __init__(self, provider: str, message: str, body: str):
        self.provider = provider
        self.message = message
        self.body = body
        super().__init__(f"[{provider}] {message} — body: {body[:500]!r}")


class SinkWriteError(IngestorError):
    """Raised when the vector store rejects or fails a collection or upsert call."""

    def __init__(self, collection: str, message: str, status_code: int | None = None):
        self.collection = collection
        self.status_code = status_code
        self.message = message
        super().__init__(f"Vector store write to '{collection}' failed: {message}")


class QueueClosedError(IngestorError):
    """Raised when submitting to a pipeline whose consumer has terminated."""


class QueueFullError(IngestorError):
    """Raised when the bounded ingestion queue cannot accept another item."""

    def __init__(self, max_size: int):
        self.max_size = max_size
        super().__init__(f"Ingestion queue is full ({max_size} items)")
