"""Embedding provider implementations.

Embeddings convert text into vectors that capture semantic meaning; the
vector store uses them for both indexing propositions and searching.

Three implementations of IEmbeddingProvider (auto-selection order):
    1. OpenAIEmbeddingProvider      — text-embedding-3-small (1536 dims).
    2. HuggingFaceEmbeddingProvider — HF Inference feature extraction.
    3. NomicEmbeddingProvider       — nomic-embed-text via Ollama (768 dims).
"""

from outline_rag.providers.embedding.huggingface_embedding_provider import (
    HuggingFaceEmbeddingProvider,
)
from outline_rag.providers.embedding.nomic_embedding_provider import NomicEmbeddingProvider
from outline_rag.providers.embedding.openai_embedding_provider import OpenAIEmbeddingProvider

__all__ = [
    "HuggingFaceEmbeddingProvider",
    "NomicEmbeddingProvider",
    "OpenAIEmbeddingProvider",
]
