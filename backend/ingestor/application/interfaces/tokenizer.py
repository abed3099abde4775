"""Abstract interface (port) for sub-word tokenization."""

from abc import ABC, abstractmethod


class TextTokenizer(ABC):
    """Port for turning text into token ids and back."""

    @abstractmethod
    def encode(self, text: str) -> list[int]:
        """Return the token ids of *text*, without special tokens."""
        ...

    @abstractmethod
    def decode(self, ids: list[int]) -> str:
        """Render a token id span back to text."""
        ...
