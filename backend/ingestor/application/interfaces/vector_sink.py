"""Abstract interface (port) for vector persistence."""

from abc import ABC, abstractmethod

from ingestor.domain.entities import CollectionSpec, VectorPoint


class VectorSink(ABC):
    """Port for writing vectors into a vector-search store."""

    @abstractmethod
    async def ensure_collection(self, spec: CollectionSpec) -> bool:
        """Create the collection if it does not exist yet.

        Idempotent. Returns True when the collection was created by this call.
        """
        ...

    @abstractmethod
    async def upsert(self, collection: str, points: list[VectorPoint]) -> None:
        """Write a batch of points in a single request.

        Raises:
            SinkWriteError: On any transport or store-side failure.
        """
        ...
