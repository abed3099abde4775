"""Domain entities for chunks, their embeddings and the points persisted from them."""

from dataclasses import dataclass, field
from typing import Union
from uuid import UUID, uuid4

PayloadValue = Union[str, int, float, bool]


@dataclass(frozen=True)
class Chunk:
    """A contiguous token span of a source text, rendered back to text."""

    index: int
    text: str
    source_uuid: UUID | None = None
    source_field: str = "text"


@dataclass(frozen=True)
class EmbeddedChunk:
    """A chunk paired with the vector the provider produced for it."""

    chunk: Chunk
    vector: list[float]

    @property
    def text(self) -> str:
        return self.chunk.text


@dataclass
class VectorPoint:
    """The unit written to the vector store: id, vector and a flat payload."""

    vector: list[float]
    payload: dict[str, PayloadValue] = field(default_factory=dict)
    id: str = field(default_factory=lambda: str(uuid4()))

    def to_wire(self) -> dict:
        return {"id": self.id, "vector": self.vector, "payload": self.payload}


@dataclass(frozen=True)
class CollectionSpec:
    """A vector-store collection: fixed dimension and distance, never altered."""

    name: str
    dimension: int = 1024
    distance: str = "Cosine"
