"""Unit tests for the ChromaDB vector store provider.

Runs against a real ``PersistentClient`` in ``tmp_path`` with the
deterministic keyword embedding from conftest, and covers upsert
idempotence, existence checks, similarity ranking, delete_by_source,
stats, and the static metadata helpers.
"""

from __future__ import annotations

from datetime import datetime, timezone
from unittest.mock import AsyncMock

import pytest

from outline_rag.models.rag import Proposition
from outline_rag.providers.vector_store.chromadb_provider import (
    ChromaDBProvider,
    proposition_row_id,
)
from outline_rag.utils.errors import RAGError
from tests.conftest import KeywordEmbeddingProvider


def _proposition(
    content: str = "La API utiliza tokens JWT",
    source_document_id: str = "doc-1",
    position: int = 0,
    **overrides,
) -> Proposition:
    fields = {
        "content": content,
        "source_document_id": source_document_id,
        "source_document_title": "Auth",
        "source_document_url": "/doc/auth",
        "position": position,
        "parent_document_id": "doc-api",
        "parent_document_title": "API",
        "collection_id": "col-eng",
        "collection_name": "Engineering",
        "created_at": datetime(2024, 1, 10, 9, 0, tzinfo=timezone.utc),
        "updated_at": datetime(2024, 3, 1, 12, 30, tzinfo=timezone.utc),
        "tags": ["security", "api"],
    }
    fields.update(overrides)
    return Proposition(**fields)


@pytest.fixture()
def embedding_provider() -> KeywordEmbeddingProvider:
    return KeywordEmbeddingProvider()


@pytest.fixture()
def provider(embedding_provider, tmp_path) -> ChromaDBProvider:
    return ChromaDBProvider(
        embedding_provider=embedding_provider,
        persist_directory=str(tmp_path / "chroma"),
        collection_name="test_collection",
    )


class TestChromaDBProvider:
    def test_get_provider_name(self, provider) -> None:
        assert provider.get_provider_name() == "chromadb"

    def test_is_available(self, provider) -> None:
        assert provider.is_available() is True

    @pytest.mark.asyncio
    async def test_upsert_empty_list(self, provider, embedding_provider) -> None:
        assert await provider.upsert([]) == 0
        assert embedding_provider.embed_calls == []

    @pytest.mark.asyncio
    async def test_upsert_embeds_batch_once(self, provider, embedding_provider) -> None:
        propositions = [_proposition(f"proposición {i}", position=i) for i in range(3)]
        assert await provider.upsert(propositions) == 3
        assert len(embedding_provider.embed_calls) == 1
        assert (await provider.get_stats()).total_chunks == 3

    @pytest.mark.asyncio
    async def test_upsert_is_idempotent(self, provider) -> None:
        propositions = [_proposition("uno", position=0), _proposition("dos", position=1)]
        await provider.upsert(propositions)
        await provider.upsert(propositions)
        assert (await provider.get_stats()).total_chunks == 2

    @pytest.mark.asyncio
    async def test_exists_by_source_id(self, provider) -> None:
        assert await provider.exists_by_source_id("doc-1") is False
        await provider.upsert([_proposition()])
        assert await provider.exists_by_source_id("doc-1") is True
        assert await provider.exists_by_source_id("doc-2") is False

    @pytest.mark.asyncio
    async def test_similarity_search_empty_store(self, provider) -> None:
        assert await provider.similarity_search("anything") == []

    @pytest.mark.asyncio
    async def test_similarity_search_ranks_most_similar_first(self, provider) -> None:
        await provider.upsert(
            [
                _proposition("La API utiliza tokens JWT para autenticación", position=0),
                _proposition("El despliegue se hace los martes", position=1),
                _proposition("Los tokens JWT expiran en una hora", position=2),
            ]
        )

        results = await provider.similarity_search("tokens JWT autenticación API", k=2)

        assert len(results) == 2
        assert results[0].content == "La API utiliza tokens JWT para autenticación"
        assert results[0].similarity_score >= results[1].similarity_score
        assert all(0.0 <= r.similarity_score <= 1.0 for r in results)

    @pytest.mark.asyncio
    async def test_similarity_search_k_larger_than_store(self, provider) -> None:
        await provider.upsert([_proposition()])
        results = await provider.similarity_search("tokens", k=10)
        assert len(results) == 1

    @pytest.mark.asyncio
    async def test_metadata_round_trips(self, provider) -> None:
        original = _proposition()
        await provider.upsert([original])

        [chunk] = await provider.similarity_search(original.content, k=1)

        assert chunk.chunk_id == proposition_row_id(original)
        assert chunk.proposition == original

    @pytest.mark.asyncio
    async def test_delete_by_source(self, provider) -> None:
        await provider.upsert(
            [
                _proposition("a", source_document_id="doc-1", position=0),
                _proposition("b", source_document_id="doc-1", position=1),
                _proposition("c", source_document_id="doc-2", position=0),
            ]
        )
        assert await provider.delete_by_source("doc-1") == 2
        assert await provider.exists_by_source_id("doc-1") is False
        assert await provider.get_source_ids() == {"doc-2"}

    @pytest.mark.asyncio
    async def test_delete_by_source_missing(self, provider) -> None:
        assert await provider.delete_by_source("nope") == 0

    @pytest.mark.asyncio
    async def test_get_stats(self, provider) -> None:
        await provider.upsert(
            [
                _proposition("a", source_document_id="doc-1"),
                _proposition("b", source_document_id="doc-2"),
                _proposition("c", source_document_id="doc-3", collection_id="col-ops"),
            ]
        )
        stats = await provider.get_stats()
        assert stats.total_chunks == 3
        assert stats.total_documents == 3
        assert stats.total_collections == 2

    @pytest.mark.asyncio
    async def test_embedding_count_mismatch_raises(self, provider, embedding_provider) -> None:
        embedding_provider.embed = AsyncMock(return_value=[])
        with pytest.raises(RAGError, match="mismatch"):
            await provider.upsert([_proposition()])

    @pytest.mark.asyncio
    async def test_persistence_across_instances(self, embedding_provider, tmp_path) -> None:
        path = str(tmp_path / "persist")
        first = ChromaDBProvider(
            embedding_provider, persist_directory=path, collection_name="persisted"
        )
        await first.upsert([_proposition()])

        second = ChromaDBProvider(
            embedding_provider, persist_directory=path, collection_name="persisted"
        )
        assert await second.exists_by_source_id("doc-1") is True


class TestRowIdentity:
    def test_same_proposition_same_id(self) -> None:
        assert proposition_row_id(_proposition()) == proposition_row_id(_proposition())

    def test_id_depends_on_document_position_and_content(self) -> None:
        base = proposition_row_id(_proposition())
        assert proposition_row_id(_proposition(source_document_id="doc-2")) != base
        assert proposition_row_id(_proposition(position=1)) != base
        assert proposition_row_id(_proposition(content="otra cosa")) != base

    def test_id_ignores_other_metadata(self) -> None:
        assert proposition_row_id(_proposition(collection_name="Renamed")) == proposition_row_id(
            _proposition()
        )


class TestStaticHelpers:
    def test_metadata_drops_none_and_joins_tags(self) -> None:
        meta = ChromaDBProvider._proposition_to_metadata(
            _proposition(parent_document_id=None, collection_id=None, created_at=None)
        )
        assert "parent_document_id" not in meta
        assert "collection_id" not in meta
        assert "created_at" not in meta
        assert meta["updated_at"] == "2024-03-01T12:30:00+00:00"
        assert meta["tags"] == "security,api"
        assert all(value is not None for value in meta.values())

    def test_metadata_to_proposition(self) -> None:
        meta = ChromaDBProvider._proposition_to_metadata(_proposition())
        restored = ChromaDBProvider._metadata_to_proposition(meta, "La API utiliza tokens JWT")
        assert restored == _proposition()

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("a, b ,c", ["a", "b", "c"]),
            ("", []),
            (None, []),
            (",,", []),
        ],
    )
    def test_split_tags(self, value, expected) -> None:
        assert ChromaDBProvider._split_tags(value) == expected
