from .embedding_provider import EmbeddingProvider
from .tokenizer import TextTokenizer
from .vector_sink import VectorSink

__all__ = [
    "EmbeddingProvider",
    "TextTokenizer",
    "VectorSink",
]
