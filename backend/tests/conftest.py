"""Shared pytest configuration and fixtures."""

import pytest
from tokenizers import Tokenizer
from tokenizers.models import WordLevel
from tokenizers.pre_tokenizers import Whitespace

from ingestor.infrastructure.tokenizer import HuggingFaceTokenizer

VOCAB_SIZE = 3000


def build_word_tokenizer(vocab_size: int = VOCAB_SIZE) -> HuggingFaceTokenizer:
    """Offline word-level tokenizer: ``w0 … w{n}`` map to one token each."""
    vocab = {"[UNK]": 0}
    vocab.update({f"w{i}": i + 1 for i in range(vocab_size)})
    tokenizer = Tokenizer(WordLevel(vocab=vocab, unk_token="[UNK]"))
    tokenizer.pre_tokenizer = Whitespace()
    return HuggingFaceTokenizer(tokenizer)


def words(count: int, start: int = 0) -> str:
    """Text that tokenizes to exactly *count* tokens with the word tokenizer."""
    return " ".join(f"w{i}" for i in range(start, start + count))


@pytest.fixture
def word_tokenizer() -> HuggingFaceTokenizer:
    return build_word_tokenizer()


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers."""
    config.addinivalue_line("markers", "integration: tests that exercise the assembled application")
