"""Embedding ingestor — chunk text, embed it with Ollama, store vectors in Qdrant."""

__version__ = "0.1.0"
