"""Token chunker — splits text into overlapping windows of tokenizer tokens."""

import logging

from ingestor.application.interfaces.tokenizer import TextTokenizer
from ingestor.domain.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

# ── Chunking constants ──────────────────────────────────────────────
DEFAULT_CHUNK_SIZE = 512  # tokens
DEFAULT_CHUNK_OVERLAP = 56  # tokens shared by consecutive windows


class TokenChunker:
    """Sliding-window chunker over a sub-word token sequence.

    A text of ``N <= chunk_size`` tokens comes back untouched as a single
    chunk. Longer texts are cut into windows of ``chunk_size`` tokens whose
    starts advance by ``chunk_size - overlap``; the last window may be
    shorter and is never padded. Windows are decoded back to text, which
    may normalise whitespace compared to the input.
    """

    def __init__(
        self,
        tokenizer: TextTokenizer,
        *,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        overlap: int = DEFAULT_CHUNK_OVERLAP,
    ):
        if chunk_size <= 0:
            raise ConfigurationError(f"chunk_size must be positive, got {chunk_size}")
        if overlap < 0 or overlap >= chunk_size:
            raise ConfigurationError(
                f"overlap must be in [0, chunk_size), got overlap={overlap} chunk_size={chunk_size}"
            )
        self._tokenizer = tokenizer
        self._chunk_size = chunk_size
        self._overlap = overlap

    @property
    def step(self) -> int:
        return self._chunk_size - self._overlap

    def count_tokens(self, text: str) -> int:
        return len(self._tokenizer.encode(text))

    def chunk(self, text: str) -> list[str]:
        """Split *text* into token windows, or return it whole if it already fits."""
        ids = self._tokenizer.encode(text)
        total = len(ids)

        if total <= self._chunk_size:
            return [text]

        chunks: list[str] = []
        start = 0
        while True:
            end = min(start + self._chunk_size, total)
            chunks.append(self._tokenizer.decode(ids[start:end]))
            # A window reaching the end already holds every remaining token
            if end >= total:
                break
            start += self.step

        logger.debug(
            "Chunked %d tokens into %d windows (size=%d, overlap=%d)",
            total,
            len(chunks),
            self._chunk_size,
            self._overlap,
        )
        return chunks
