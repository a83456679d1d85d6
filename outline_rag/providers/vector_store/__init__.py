"""Vector store providers -- ChromaDBProvider is the only implementation."""

from outline_rag.providers.vector_store.chromadb_provider import ChromaDBProvider

__all__ = ["ChromaDBProvider"]
