"""Tokenizer infrastructure package."""

from .huggingface_tokenizer import DEFAULT_TOKENIZER_MODEL, HuggingFaceTokenizer

__all__ = ["DEFAULT_TOKENIZER_MODEL", "HuggingFaceTokenizer"]
