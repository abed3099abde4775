"""HuggingFace ``tokenizers`` adapter — implements the TextTokenizer interface.

Default model: mixedbread-ai/mxbai-embed-large-v1, the tokenizer matching
Ollama's ``mxbai-embed-large`` embedding model.
"""

import logging

from tokenizers import Tokenizer

from ingestor.application.interfaces.tokenizer import TextTokenizer
from ingestor.domain.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_TOKENIZER_MODEL = "mixedbread-ai/mxbai-embed-large-v1"


class HuggingFaceTokenizer(TextTokenizer):
    """Infrastructure adapter around a ``tokenizers.Tokenizer`` instance."""

    def __init__(self, tokenizer: Tokenizer):
        self._tokenizer = tokenizer

    @classmethod
    def from_pretrained(cls, model_name: str = DEFAULT_TOKENIZER_MODEL) -> "HuggingFaceTokenizer":
        """Download (or load from the local HF cache) a pretrained tokenizer."""
        try:
            tokenizer = Tokenizer.from_pretrained(model_name)
        except Exception as exc:
            raise ConfigurationError(
                f"Could not load tokenizer '{model_name}': {exc}"
            ) from exc
        logger.info("Loaded tokenizer %s", model_name)
        return cls(tokenizer)

    def encode(self, text: str) -> list[int]:
        return self._tokenizer.encode(text, add_special_tokens=False).ids

    def decode(self, ids: list[int]) -> str:
        return self._tokenizer.decode(ids, skip_special_tokens=True)
