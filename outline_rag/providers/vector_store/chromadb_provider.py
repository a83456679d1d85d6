"""ChromaDB vector store provider adapter.

Wraps ``chromadb.PersistentClient`` to implement :class:`IVectorStoreProvider`.
One collection (``CHROMADB_COLLECTION``, default ``outline_docs``) holds
every stored proposition as a row of ``(vector, content, metadata)``, using
cosine distance for similarity search.

Row ids are content-derived (see :func:`proposition_row_id`), so upserting
the same proposition twice overwrites the row instead of duplicating it.
"""

from __future__ import annotations

import hashlib
import os
from typing import Any

# Disable ChromaDB telemetry before the import so it never phones home.
os.environ["ANONYMIZED_TELEMETRY"] = "False"

import posthog

posthog.disabled = True

import chromadb
import structlog

from outline_rag.interfaces.embedding_provider import IEmbeddingProvider
from outline_rag.interfaces.vector_store_provider import IVectorStoreProvider
from outline_rag.models.rag import CorpusStats, Proposition, StoredChunk
from outline_rag.utils.errors import RAGError

logger = structlog.get_logger(logger_name=__name__)

# Page size for metadata scans; stays under SQLite's bind-parameter limit.
_SCAN_PAGE_SIZE = 5000

# Metadata keys whose values are ISO-8601 timestamps.
_TIMESTAMP_KEYS = ("created_at", "updated_at", "published_at", "deleted_at")


def proposition_row_id(proposition: Proposition) -> str:
    """Return the deterministic row id for a proposition.

    Derived from the source document id, the proposition's position and its
    content, so retrying a write for the same document is idempotent.
    """
    key = f"{proposition.source_document_id}:{proposition.position}:{proposition.content}"
    return hashlib.sha256(key.encode("utf-8")).hexdigest()[:32]


class _NoopEmbeddingFunction(chromadb.EmbeddingFunction[list[str]]):
    """Embedding function that stops ChromaDB from loading its default model.

    Vectors always come from the injected :class:`IEmbeddingProvider`, so
    ChromaDB's built-in ONNX model would only waste memory.
    """

    def __call__(self, input: list[str]) -> list[list[float]]:
        raise NotImplementedError(
            "outline-rag passes pre-computed embeddings; "
            "ChromaDB's built-in embedding should never be called."
        )

    def name(self) -> str:
        return "noop_precomputed"


class ChromaDBProvider(IVectorStoreProvider):
    """Vector store provider backed by ChromaDB with local persistence.

    The injected :class:`IEmbeddingProvider` embeds propositions on
    :meth:`upsert` and the query text on :meth:`similarity_search`.
    """

    def __init__(
        self,
        embedding_provider: IEmbeddingProvider,
        persist_directory: str = "./data/chromadb",
        collection_name: str = "outline_docs",
    ) -> None:
        self._embedding_provider = embedding_provider
        self._collection_name = collection_name
        self._client = chromadb.PersistentClient(
            path=persist_directory,
            settings=chromadb.config.Settings(anonymized_telemetry=False),
        )
        self._collection = self._client.get_or_create_collection(
            name=collection_name,
            metadata={"hnsw:space": "cosine"},
            embedding_function=_NoopEmbeddingFunction(),
        )

    # ------------------------------------------------------------------
    # IVectorStoreProvider implementation
    # ------------------------------------------------------------------

    async def upsert(self, propositions: list[Proposition]) -> int:
        """Embed the propositions and write them in a single upsert call."""
        if not propositions:
            return 0

        embeddings = await self._embedding_provider.embed([p.content for p in propositions])
        if len(embeddings) != len(propositions):
            raise RAGError(
                message=(
                    f"Embedding count mismatch: {len(embeddings)} vectors "
                    f"for {len(propositions)} propositions"
                ),
                provider_name=self.get_provider_name(),
            )

        try:
            self._collection.upsert(
                ids=[proposition_row_id(p) for p in propositions],
                embeddings=embeddings,
                documents=[p.content for p in propositions],
                metadatas=[self._proposition_to_metadata(p) for p in propositions],
            )
        except Exception as exc:
            raise RAGError(
                message=f"ChromaDB upsert failed: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        logger.info(
            "chromadb_upsert",
            source_document_id=propositions[0].source_document_id,
            count=len(propositions),
        )
        return len(propositions)

    async def exists_by_source_id(self, source_document_id: str) -> bool:
        """Return ``True`` if at least one row carries this ``source_document_id``."""
        try:
            found = self._collection.get(
                where={"source_document_id": source_document_id},
                limit=1,
                include=[],
            )
        except Exception as exc:
            raise RAGError(
                message=f"ChromaDB existence check failed: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc
        return bool(found["ids"])

    async def similarity_search(self, query: str, k: int = 4) -> list[StoredChunk]:
        """Return the *k* nearest rows to *query*, most similar first."""
        try:
            if self._collection.count() == 0:
                return []

            query_embedding = await self._embedding_provider.embed_single(query)
            results = self._collection.query(
                query_embeddings=[query_embedding],
                n_results=k,
                include=["documents", "metadatas", "distances"],
            )
        except RAGError:
            raise
        except Exception as exc:
            raise RAGError(
                message=f"ChromaDB query failed: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        if not results["ids"] or not results["ids"][0]:
            return []

        ids = results["ids"][0]
        documents = results["documents"][0] if results["documents"] else [""] * len(ids)
        metadatas = results["metadatas"][0] if results["metadatas"] else [{}] * len(ids)
        distances = results["distances"][0] if results["distances"] else [1.0] * len(ids)

        # ChromaDB returns rows ordered by ascending distance; that order
        # is the relevance ranking handed to the generate step.
        chunks = [
            StoredChunk(
                chunk_id=row_id,
                proposition=self._metadata_to_proposition(meta or {}, text or ""),
                similarity_score=max(0.0, min(1.0, 1.0 - distance)),
            )
            for row_id, text, meta, distance in zip(
                ids, documents, metadatas, distances, strict=True
            )
        ]

        logger.info(
            "chromadb_query",
            query_length=len(query),
            k=k,
            results_count=len(chunks),
            top_score=chunks[0].similarity_score if chunks else 0.0,
        )
        return chunks

    async def delete_by_source(self, source_document_id: str) -> int:
        """Delete every row for a document so the next ingestion re-processes it."""
        where = {"source_document_id": source_document_id}
        try:
            existing = self._collection.get(where=where, include=[])
            count = len(existing["ids"]) if existing["ids"] else 0
            if count > 0:
                self._collection.delete(where=where)
        except Exception as exc:
            raise RAGError(
                message=f"ChromaDB delete_by_source failed: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        logger.info(
            "chromadb_delete_by_source",
            source_document_id=source_document_id,
            deleted_count=count,
        )
        return count

    async def get_source_ids(self) -> set[str]:
        """Return distinct source document ids, scanning metadata page by page."""
        return {
            sid
            for meta in self._scan_metadata()
            if (sid := meta.get("source_document_id"))
        }

    async def get_stats(self) -> CorpusStats:
        document_ids: set[str] = set()
        collection_ids: set[str] = set()
        total = 0
        for meta in self._scan_metadata():
            total += 1
            if sid := meta.get("source_document_id"):
                document_ids.add(sid)
            if cid := meta.get("collection_id"):
                collection_ids.add(cid)

        return CorpusStats(
            total_chunks=total,
            total_documents=len(document_ids),
            total_collections=len(collection_ids),
        )

    def get_provider_name(self) -> str:
        return "chromadb"

    def is_available(self) -> bool:
        """Return ``True`` if the ChromaDB collection is accessible."""
        try:
            self._collection.count()
            return True
        except Exception:  # noqa: BLE001
            return False

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _scan_metadata(self) -> list[dict[str, Any]]:
        try:
            rows: list[dict[str, Any]] = []
            offset = 0
            while True:
                page = self._collection.get(
                    include=["metadatas"], limit=_SCAN_PAGE_SIZE, offset=offset
                )
                metadatas = page["metadatas"] or []
                rows.extend(m for m in metadatas if m)
                if len(metadatas) < _SCAN_PAGE_SIZE:
                    return rows
                offset += _SCAN_PAGE_SIZE
        except Exception as exc:
            raise RAGError(
                message=f"ChromaDB metadata scan failed: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

    @staticmethod
    def _proposition_to_metadata(proposition: Proposition) -> dict[str, str | int]:
        """Convert a Proposition to a ChromaDB-compatible metadata dict.

        ChromaDB metadata values must be scalars and may not be ``None``:
        tags are comma-joined, timestamps become ISO strings, and absent
        optional values are left out.
        """
        meta: dict[str, str | int] = {
            "source_document_id": proposition.source_document_id,
            "source_document_title": proposition.source_document_title,
            "source_document_url": proposition.source_document_url,
            "position": proposition.position,
            "parent_document_title": proposition.parent_document_title,
            "collection_name": proposition.collection_name,
            "tags": ",".join(proposition.tags),
        }
        if proposition.parent_document_id is not None:
            meta["parent_document_id"] = proposition.parent_document_id
        if proposition.collection_id is not None:
            meta["collection_id"] = proposition.collection_id
        for key in _TIMESTAMP_KEYS:
            value = getattr(proposition, key)
            if value is not None:
                meta[key] = value.isoformat()
        return meta

    @staticmethod
    def _metadata_to_proposition(meta: dict[str, Any], content: str) -> Proposition:
        """Reverse :meth:`_proposition_to_metadata`."""
        return Proposition(
            content=content,
            source_document_id=meta.get("source_document_id", ""),
            source_document_title=meta.get("source_document_title", ""),
            source_document_url=meta.get("source_document_url", ""),
            position=int(meta.get("position", 0)),
            parent_document_id=meta.get("parent_document_id"),
            parent_document_title=meta.get("parent_document_title", ""),
            collection_id=meta.get("collection_id"),
            collection_name=meta.get("collection_name", ""),
            tags=ChromaDBProvider._split_tags(meta.get("tags", "")),
            **{key: meta.get(key) for key in _TIMESTAMP_KEYS},
        )

    @staticmethod
    def _split_tags(value: str | Any) -> list[str]:
        """Split a comma-separated tag string back into a list."""
        if not value or not isinstance(value, str):
            return []
        return [tag.strip() for tag in value.split(",") if tag.strip()]
