"""Abstract base class for text-embedding providers.

Embeddings are produced on two paths: the vector store embeds propositions
when they are upserted, and embeds the user's question at query time.
Both must use the same provider, or the vectors are not comparable.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


# Concrete implementations:
#   OpenAIEmbeddingProvider      — text-embedding-3-small (requires API key)
#   HuggingFaceEmbeddingProvider — HF Inference feature-extraction endpoint
#   NomicEmbeddingProvider       — nomic-embed-text via Ollama (local)
# Located in: outline_rag/providers/embedding/
class IEmbeddingProvider(ABC):
    """Contract for the embedding capability (text -> vector)."""

    @abstractmethod
    async def embed(self, texts: list[str]) -> list[list[float]]:
        """Generate embedding vectors for a batch of texts.

        Parameters
        ----------
        texts:
            Text strings to embed.  Implementations batch internally if the
            underlying API has a per-call limit.

        Returns
        -------
        list[list[float]]
            Vectors corresponding positionally to *texts*.

        Raises
        ------
        outline_rag.utils.errors.RAGError
            If the embedding API call fails.
        """

    @abstractmethod
    async def embed_single(self, text: str) -> list[float]:
        """Generate an embedding vector for one text (e.g. a query)."""

    @abstractmethod
    def get_dimension(self) -> int:
        """Return the dimensionality of the vectors this provider produces."""

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a human-readable identifier, e.g. ``"nomic-embed-text"``."""

    @abstractmethod
    def is_available(self) -> bool:
        """Return ``True`` if the provider is configured."""
