"""Abstract interface (port) for embedding generation."""

from abc import ABC, abstractmethod


class EmbeddingProvider(ABC):
    """Port for generating text embeddings — implemented in the infrastructure layer."""

    @abstractmethod
    async def embed(self, text: str) -> list[float]:
        """Generate the embedding vector for a single text.

        Args:
            text: The chunk text to embed.

        Returns:
            A vector of exactly ``dimensions`` floats.

        Raises:
            ProviderUnavailableError: The provider could not be reached or
                answered with a non-2xx status.
            ProviderResponseError: The response could not be parsed into a
                vector of the expected shape.
        """
        ...

    @property
    @abstractmethod
    def dimensions(self) -> int:
        """Return the dimensionality of the embedding vectors produced by this provider."""
        ...
