from .chunker import TokenChunker
from .embedding_service import EmbeddingService
from .ingestion_pipeline import IngestionPipeline, PipelineStats

__all__ = [
    "TokenChunker",
    "EmbeddingService",
    "IngestionPipeline",
    "PipelineStats",
]
