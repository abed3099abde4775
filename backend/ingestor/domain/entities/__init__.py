from .ingest_item import IngestItem, IngestJob, ItemStage
from .chunk import Chunk, CollectionSpec, EmbeddedChunk, PayloadValue, VectorPoint

__all__ = [
    "IngestItem",
    "IngestJob",
    "ItemStage",
    "Chunk",
    "CollectionSpec",
    "EmbeddedChunk",
    "PayloadValue",
    "VectorPoint",
]
