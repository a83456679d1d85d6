"""Hugging Face Inference embedding provider adapter.

Calls the hosted ``feature-extraction`` pipeline over plain HTTP with
httpx; no ``huggingface_hub`` or PyTorch install is needed.  The default
model is a multilingual sentence-transformer because the stored
propositions are Spanish while questions may arrive in any language.
"""

from __future__ import annotations

import httpx
import structlog

from outline_rag.config.settings import Settings
from outline_rag.interfaces.embedding_provider import IEmbeddingProvider
from outline_rag.utils.errors import RAGError

logger = structlog.get_logger(logger_name=__name__)

_HF_BATCH_LIMIT = 64

_MODEL_DIMENSIONS: dict[str, int] = {
    "sentence-transformers/paraphrase-multilingual-MiniLM-L12-v2": 384,
    "sentence-transformers/all-MiniLM-L6-v2": 384,
    "sentence-transformers/all-mpnet-base-v2": 768,
    "BAAI/bge-base-en-v1.5": 768,
    "BAAI/bge-m3": 1024,
}


class HuggingFaceEmbeddingProvider(IEmbeddingProvider):
    """Embedding provider backed by the Hugging Face Inference API."""

    def __init__(
        self,
        settings: Settings,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._api_key = settings.huggingface_api_key
        self._model = settings.huggingface_embedding_model
        self._url = (
            f"{settings.huggingface_inference_url.rstrip('/')}/{self._model}"
            "/pipeline/feature-extraction"
        )
        self._http = http_client or httpx.AsyncClient(timeout=settings.llm_timeout_seconds)
        self._dimension = _MODEL_DIMENSIONS.get(self._model, 768)

    async def embed(self, texts: list[str]) -> list[list[float]]:
        """Generate embedding vectors, splitting into batches of 64."""
        if not texts:
            return []

        headers = {"Authorization": f"Bearer {self._api_key}"}
        all_embeddings: list[list[float]] = []
        for start in range(0, len(texts), _HF_BATCH_LIMIT):
            batch = texts[start : start + _HF_BATCH_LIMIT]
            try:
                response = await self._http.post(
                    self._url,
                    json={"inputs": batch, "options": {"wait_for_model": True}},
                    headers=headers,
                )
                response.raise_for_status()
            except httpx.HTTPError as exc:
                raise RAGError(
                    message=f"Hugging Face embedding request failed: {exc}",
                    provider_name=self.get_provider_name(),
                ) from exc

            vectors = response.json()
            if not isinstance(vectors, list) or len(vectors) != len(batch):
                raise RAGError(
                    message=(
                        f"Hugging Face returned {type(vectors).__name__} "
                        f"for a batch of {len(batch)} inputs"
                    ),
                    provider_name=self.get_provider_name(),
                )
            all_embeddings.extend([float(v) for v in vector] for vector in vectors)
            logger.info("huggingface_embedding_batch", model=self._model, batch_size=len(batch))

        return all_embeddings

    async def embed_single(self, text: str) -> list[float]:
        result = await self.embed([text])
        return result[0]

    def get_dimension(self) -> int:
        return self._dimension

    def get_provider_name(self) -> str:
        return "huggingface_embedding"

    def is_available(self) -> bool:
        return bool(self._api_key)
