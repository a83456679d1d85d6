"""Shared pytest fixtures for the outline-rag test suite."""

from __future__ import annotations

import hashlib
import logging
import math
import re
from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest
import structlog

from outline_rag.interfaces.document_source import IDocumentSource
from outline_rag.interfaces.embedding_provider import IEmbeddingProvider
from outline_rag.interfaces.llm_provider import ILLMProvider
from outline_rag.interfaces.vector_store_provider import IVectorStoreProvider
from outline_rag.models.documents import Collection, DocumentPage, RawDocument
from outline_rag.models.rag import CorpusStats, Proposition, StoredChunk
from outline_rag.providers.vector_store.chromadb_provider import proposition_row_id
from outline_rag.utils.errors import DocumentSourceError

# ---------------------------------------------------------------------------
# Deterministic embeddings
# ---------------------------------------------------------------------------

_EMBEDDING_DIM = 256
_WORD = re.compile(r"\w+", re.UNICODE)


def _keyword_vector(text: str, dim: int = _EMBEDDING_DIM) -> list[float]:
    """Bag-of-words vector: every lower-cased word adds 1 to a hashed bucket.

    Texts sharing words point in similar directions, so cosine ranking
    behaves like a (very crude) semantic search.  Deterministic; never
    produces NaN.  Text without words maps to a fixed unit vector.
    """
    values = [0.0] * dim
    for word in _WORD.findall(text.lower()):
        bucket = int.from_bytes(hashlib.sha256(word.encode("utf-8")).digest()[:4], "big") % dim
        values[bucket] += 1.0
    magnitude = math.sqrt(sum(v * v for v in values))
    if magnitude == 0.0:
        values[0] = 1.0
        return values
    return [v / magnitude for v in values]


def _cosine(a: list[float], b: list[float]) -> float:
    return sum(x * y for x, y in zip(a, b, strict=True))


class KeywordEmbeddingProvider(IEmbeddingProvider):
    """In-memory deterministic embedding provider for tests."""

    def __init__(self) -> None:
        self.embed_calls: list[list[str]] = []

    async def embed(self, texts: list[str]) -> list[list[float]]:
        self.embed_calls.append(list(texts))
        return [_keyword_vector(t) for t in texts]

    async def embed_single(self, text: str) -> list[float]:
        return _keyword_vector(text)

    def get_dimension(self) -> int:
        return _EMBEDDING_DIM

    def get_provider_name(self) -> str:
        return "keyword-embedding"

    def is_available(self) -> bool:
        return True


# ---------------------------------------------------------------------------
# In-memory vector store
# ---------------------------------------------------------------------------


class InMemoryVectorStore(IVectorStoreProvider):
    """Dict-backed vector store with the same row identity as ChromaDB.

    Rows are keyed by :func:`proposition_row_id`, so re-upserting the same
    proposition overwrites it.  Public counters let tests assert how the
    store was used.
    """

    def __init__(self, embedding_provider: IEmbeddingProvider | None = None) -> None:
        self._embedding = embedding_provider or KeywordEmbeddingProvider()
        self.rows: dict[str, tuple[Proposition, list[float]]] = {}
        self.upsert_calls = 0
        self.fail_upsert_for: set[str] = set()

    async def upsert(self, propositions: list[Proposition]) -> int:
        self.upsert_calls += 1
        if not propositions:
            return 0
        if propositions[0].source_document_id in self.fail_upsert_for:
            raise RuntimeError("store unavailable")
        vectors = await self._embedding.embed([p.content for p in propositions])
        for proposition, vector in zip(propositions, vectors, strict=True):
            self.rows[proposition_row_id(proposition)] = (proposition, vector)
        return len(propositions)

    async def exists_by_source_id(self, source_document_id: str) -> bool:
        return any(p.source_document_id == source_document_id for p, _ in self.rows.values())

    async def similarity_search(self, query: str, k: int = 4) -> list[StoredChunk]:
        query_vector = await self._embedding.embed_single(query)
        scored = [
            StoredChunk(
                chunk_id=row_id,
                proposition=proposition,
                similarity_score=max(0.0, _cosine(query_vector, vector)),
            )
            for row_id, (proposition, vector) in self.rows.items()
        ]
        scored.sort(key=lambda c: c.similarity_score, reverse=True)
        return scored[:k]

    async def delete_by_source(self, source_document_id: str) -> int:
        doomed = [
            row_id
            for row_id, (p, _) in self.rows.items()
            if p.source_document_id == source_document_id
        ]
        for row_id in doomed:
            del self.rows[row_id]
        return len(doomed)

    async def get_source_ids(self) -> set[str]:
        return {p.source_document_id for p, _ in self.rows.values()}

    async def get_stats(self) -> CorpusStats:
        propositions = [p for p, _ in self.rows.values()]
        return CorpusStats(
            total_chunks=len(propositions),
            total_documents=len({p.source_document_id for p in propositions}),
            total_collections=len({p.collection_id for p in propositions if p.collection_id}),
        )

    def get_provider_name(self) -> str:
        return "in-memory"

    def is_available(self) -> bool:
        return True

    def contents_for(self, source_document_id: str) -> list[str]:
        rows = sorted(
            (p for p, _ in self.rows.values() if p.source_document_id == source_document_id),
            key=lambda p: p.position,
        )
        return [p.content for p in rows]


# ---------------------------------------------------------------------------
# Scripted document source
# ---------------------------------------------------------------------------


class ScriptedDocumentSource(IDocumentSource):
    """Serves a fixed list of documents page by page.

    ``reported_total`` overrides the total announced on every page, which
    lets tests simulate a source that grows or shrinks mid-run.
    """

    def __init__(
        self,
        documents: list[RawDocument],
        parents: dict[str, RawDocument] | None = None,
        collections: dict[str, Collection] | None = None,
        reported_total: int | None = None,
        failing_pages: set[int] | None = None,
    ) -> None:
        self._documents = documents
        self._parents = parents or {}
        self._collections = collections or {}
        self._reported_total = reported_total
        self._failing_pages = failing_pages or set()
        self.list_calls: list[tuple[int, int]] = []
        self.get_document_calls: list[str] = []
        self.get_collection_calls: list[str] = []

    async def list_documents(self, page: int, page_size: int) -> DocumentPage:
        self.list_calls.append((page, page_size))
        if page in self._failing_pages:
            raise DocumentSourceError(message=f"page {page} unavailable", provider_name="scripted")
        start = page * page_size
        total = self._reported_total if self._reported_total is not None else len(self._documents)
        return DocumentPage(
            documents=self._documents[start : start + page_size],
            total_count=total,
        )

    async def get_document(self, document_id: str) -> RawDocument:
        self.get_document_calls.append(document_id)
        return self._parents[document_id]

    async def get_collection(self, collection_id: str) -> Collection:
        self.get_collection_calls.append(collection_id)
        return self._collections[collection_id]

    def get_provider_name(self) -> str:
        return "scripted"


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def fenced_json(body: str) -> str:
    """Wrap *body* in a ```json fenced block the way chunking models answer."""
    return f"Here are the propositions:\n```json\n{body}\n```\n"


def make_document(
    doc_id: str = "doc-1",
    title: str = "Auth",
    text: str = "# API Authentication\nOur API uses JWT tokens.",
    **overrides,
) -> RawDocument:
    fields = {
        "id": doc_id,
        "title": title,
        "text": text,
        "url": f"/doc/{doc_id}",
        "created_at": datetime(2024, 1, 10, 9, 0, tzinfo=timezone.utc),
        "updated_at": datetime(2024, 3, 1, 12, 30, tzinfo=timezone.utc),
    }
    fields.update(overrides)
    return RawDocument(**fields)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def embedding_provider() -> KeywordEmbeddingProvider:
    return KeywordEmbeddingProvider()


@pytest.fixture
def vector_store(embedding_provider: KeywordEmbeddingProvider) -> InMemoryVectorStore:
    return InMemoryVectorStore(embedding_provider)


@pytest.fixture
def mock_llm_provider() -> ILLMProvider:
    """Mock ILLMProvider with a configurable ``complete``.

    Default ``complete()`` returns an empty fenced array.  Override with
    ``mock_llm_provider.complete.return_value = "..."`` or ``side_effect``.
    """
    mock = MagicMock(spec=ILLMProvider)
    mock.get_provider_name.return_value = "mock-llm"
    mock.is_available.return_value = True
    mock.complete = AsyncMock(return_value=fenced_json("[]"))
    return mock


@pytest.fixture(autouse=True)
def _isolated_logging(monkeypatch):
    """Keep logging configuration from leaking between tests.

    ``configure_logging`` points structlog and the root logger at a stream
    (often pytest's captured stdout/stderr, closed after the test).  Module
    level loggers would otherwise cache that stream on first use, so caching
    is switched off here and the configuration is reset afterwards.
    """
    real_configure = structlog.configure

    def configure_without_cache(**kwargs):
        kwargs["cache_logger_on_first_use"] = False
        real_configure(**kwargs)

    monkeypatch.setattr(structlog, "configure", configure_without_cache)
    yield
    structlog.reset_defaults()
    root = logging.getLogger()
    for handler in list(root.handlers):
        if isinstance(handler.formatter, structlog.stdlib.ProcessorFormatter):
            root.removeHandler(handler)
