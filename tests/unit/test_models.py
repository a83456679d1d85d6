"""Unit tests for the domain models."""

from __future__ import annotations

import pydantic
import pytest

from outline_rag.models.documents import DocumentPage, EnrichedDocument
from outline_rag.models.rag import (
    DocumentOutcome,
    IngestionReport,
    Proposition,
    StoredChunk,
)
from outline_rag.models.workflow import QueryState, WorkflowNode
from tests.conftest import make_document


class TestDocuments:
    def test_from_raw_copies_every_field(self) -> None:
        raw = make_document(parent_document_id="p", collection_id="c", tags=["a"])
        enriched = EnrichedDocument.from_raw(
            raw, parent_document_title="Parent", collection_name="Col"
        )
        assert enriched.model_dump(exclude={"parent_document_title", "collection_name"}) == (
            raw.model_dump()
        )
        assert enriched.parent_document_title == "Parent"
        assert enriched.collection_name == "Col"

    def test_missing_ancestry_is_empty_string(self) -> None:
        enriched = EnrichedDocument.from_raw(make_document())
        assert enriched.parent_document_title == ""
        assert enriched.collection_name == ""

    def test_documents_are_frozen(self) -> None:
        with pytest.raises(pydantic.ValidationError):
            make_document().title = "changed"  # type: ignore[misc]

    def test_page_total_cannot_be_negative(self) -> None:
        with pytest.raises(pydantic.ValidationError):
            DocumentPage(total_count=-1)


class TestProposition:
    def test_source_document_id_required(self) -> None:
        with pytest.raises(pydantic.ValidationError):
            Proposition(content="x", source_document_id="")

    def test_stored_chunk_content(self) -> None:
        chunk = StoredChunk(
            chunk_id="row",
            proposition=Proposition(content="hola", source_document_id="d"),
            similarity_score=0.5,
        )
        assert chunk.content == "hola"


class TestWorkflowModels:
    def test_state_updates_by_copy(self) -> None:
        state = QueryState(question="q")
        updated = state.model_copy(update={"answer": "a"})
        assert state.answer == ""
        assert updated.answer == "a"
        assert updated.question == "q"

    def test_node_values(self) -> None:
        assert [n.value for n in WorkflowNode] == ["__start__", "retrieve", "generate", "__end__"]


def test_report_defaults() -> None:
    report = IngestionReport()
    assert report.failed_document_ids == []
    assert DocumentOutcome("SKIPPED_EXISTING") is DocumentOutcome.SKIPPED_EXISTING
