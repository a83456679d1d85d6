"""Abstract base class for the vector store holding stored propositions.

The store owns one collection of rows ``(vector, content, metadata)``.
Every row's metadata carries ``source_document_id``; the ingestion
existence check depends on it.  Writes are keyed by deterministic row ids
derived from the proposition itself, so repeating an upsert is harmless.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from outline_rag.models.rag import CorpusStats, Proposition, StoredChunk


# Concrete implementation: ChromaDBProvider (outline_rag/providers/vector_store/)
class IVectorStoreProvider(ABC):
    """Contract for the retrievable proposition collection."""

    @abstractmethod
    async def upsert(self, propositions: list[Proposition]) -> int:
        """Embed and write propositions as one batch.

        Parameters
        ----------
        propositions:
            Propositions to store.  An empty list is a no-op.

        Returns
        -------
        int
            Number of rows written.

        Raises
        ------
        outline_rag.utils.errors.RAGError
            If embedding or the write fails.
        """

    @abstractmethod
    async def exists_by_source_id(self, source_document_id: str) -> bool:
        """Return ``True`` if any stored row belongs to the given document."""

    @abstractmethod
    async def similarity_search(self, query: str, k: int = 4) -> list[StoredChunk]:
        """Return the *k* rows most similar to *query*, most similar first.

        Raises
        ------
        outline_rag.utils.errors.RAGError
            If the store cannot be queried.
        """

    @abstractmethod
    async def delete_by_source(self, source_document_id: str) -> int:
        """Delete every row belonging to a document; return how many were removed."""

    @abstractmethod
    async def get_source_ids(self) -> set[str]:
        """Return the set of distinct ``source_document_id`` values stored."""

    @abstractmethod
    async def get_stats(self) -> CorpusStats:
        """Return aggregate counts for the collection."""

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a human-readable identifier, e.g. ``"chromadb"``."""

    @abstractmethod
    def is_available(self) -> bool:
        """Return ``True`` if the store is reachable."""
