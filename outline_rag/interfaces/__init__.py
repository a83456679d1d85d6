"""Public interface definitions for every external collaborator.

Business logic (chunking, ingestion, the RAG workflow) depends only on
these abstract base classes.  Concrete adapters live in
``outline_rag/providers/`` and are constructed once per process in
``outline_rag/main.py``, then injected.  Tests inject fakes instead.

CONCRETE PROVIDER MAP:
    Interface                  →  Concrete implementations
    ─────────────────────────────────────────────────────────────────────
    ILLMProvider               →  OpenAILLMProvider, AnthropicLLMProvider,
                                  OllamaLLMProvider
    IEmbeddingProvider         →  OpenAIEmbeddingProvider,
                                  HuggingFaceEmbeddingProvider,
                                  NomicEmbeddingProvider
    IVectorStoreProvider       →  ChromaDBProvider
    IDocumentSource            →  OutlineDocumentSource
"""

from outline_rag.interfaces.document_source import IDocumentSource
from outline_rag.interfaces.embedding_provider import IEmbeddingProvider
from outline_rag.interfaces.llm_provider import ILLMProvider
from outline_rag.interfaces.vector_store_provider import IVectorStoreProvider

__all__ = [
    "IDocumentSource",
    "IEmbeddingProvider",
    "ILLMProvider",
    "IVectorStoreProvider",
]
