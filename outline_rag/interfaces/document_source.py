"""Abstract base class for the knowledge-base document source.

The ingestion service pages through documents and resolves parent
documents and collections by id through this contract only.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from outline_rag.models.documents import Collection, DocumentPage, RawDocument


# Concrete implementation: OutlineDocumentSource (outline_rag/providers/outline/)
class IDocumentSource(ABC):
    """Contract for reading documents from a knowledge base."""

    @abstractmethod
    async def list_documents(self, page: int, page_size: int) -> DocumentPage:
        """Fetch one zero-indexed page of documents, most recently updated first.

        Returns
        -------
        DocumentPage
            The page's documents and the source's reported total count.

        Raises
        ------
        outline_rag.utils.errors.DocumentSourceError
            If the request fails.
        """

    @abstractmethod
    async def get_document(self, document_id: str) -> RawDocument:
        """Fetch a single document by id."""

    @abstractmethod
    async def get_collection(self, collection_id: str) -> Collection:
        """Fetch a single collection by id."""

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a human-readable identifier, e.g. ``"outline"``."""
