"""Qdrant infrastructure package."""

from .qdrant_vector_sink import QdrantVectorSink

__all__ = ["QdrantVectorSink"]
