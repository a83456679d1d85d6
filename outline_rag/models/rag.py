"""Retrieval data models: propositions, stored chunks and ingestion reports.

A *proposition* is the atomic retrievable unit: one self-contained
sentence decomposed from a knowledge-base document by the agentic chunker,
stamped with that document's metadata.  Once embedded and written to the
vector store it becomes a *stored chunk*.

All models are frozen.  Propositions are created only by the chunker and
never modified; stored chunks are read-only on the retrieval path.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


# ---------------------------------------------------------------------------
# Proposition — the atomic retrievable unit.
# ---------------------------------------------------------------------------
class Proposition(BaseModel):
    """A single self-contained statement extracted from one source document.

    ``source_document_id`` is required: a proposition never exists without
    a back-reference to the document it came from.  It is a lookup key
    only, used by the ingestion existence check.
    """

    model_config = ConfigDict(frozen=True)

    content: str = Field(description="One self-contained sentence.")
    source_document_id: str = Field(min_length=1, description="Id of the source document.")
    source_document_title: str = Field(default="", description="Title of the source document.")
    source_document_url: str = Field(default="", description="Path or URL of the source document.")
    position: int = Field(
        default=0, ge=0, description="Order of this proposition within its document."
    )
    parent_document_id: str | None = None
    parent_document_title: str = ""
    collection_id: str | None = None
    collection_name: str = ""
    created_at: datetime | None = None
    updated_at: datetime | None = None
    published_at: datetime | None = None
    deleted_at: datetime | None = None
    tags: list[str] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# StoredChunk — a proposition as it comes back from the vector store.
# ---------------------------------------------------------------------------
class StoredChunk(BaseModel):
    """A persisted proposition returned by a similarity search.

    ``chunk_id`` is the store's row identity.  ``similarity_score`` is the
    cosine similarity of the row to the query (1.0 = identical direction).
    """

    model_config = ConfigDict(frozen=True)

    chunk_id: str = Field(description="Row identity in the vector store.")
    proposition: Proposition
    similarity_score: float = Field(default=0.0, description="Cosine similarity to the query.")

    @property
    def content(self) -> str:
        return self.proposition.content


# ---------------------------------------------------------------------------
# Ingestion reporting
# ---------------------------------------------------------------------------
class DocumentOutcome(str, Enum):  # noqa: UP042
    """What happened to one document during an ingestion run."""

    LOADED = "LOADED"                      # propositions produced and stored
    SKIPPED_EXISTING = "SKIPPED_EXISTING"  # already in the store, untouched
    EMPTY = "EMPTY"                        # chunker produced zero propositions
    FAILED = "FAILED"                      # exception caught at the task boundary


class DocumentResult(BaseModel):
    """Outcome of processing a single document."""

    model_config = ConfigDict(frozen=True)

    document_id: str
    title: str = ""
    outcome: DocumentOutcome
    propositions_stored: int = Field(default=0, ge=0)
    error: str | None = None


class IngestionReport(BaseModel):
    """Summary of one ``IngestionService.ingest()`` run, printed by the CLI."""

    model_config = ConfigDict(frozen=True)

    total_documents: int = Field(
        default=0, ge=0, description="Total reported by the source on the first page."
    )
    pages_fetched: int = Field(default=0, ge=0)
    documents_seen: int = Field(default=0, ge=0)
    loaded: int = Field(default=0, ge=0)
    skipped_existing: int = Field(default=0, ge=0)
    empty: int = Field(default=0, ge=0)
    failed: int = Field(default=0, ge=0)
    propositions_stored: int = Field(default=0, ge=0)
    elapsed_seconds: float = Field(default=0.0, ge=0.0)
    failed_document_ids: list[str] = Field(default_factory=list)


class CorpusStats(BaseModel):
    """Aggregate statistics for the vector-store corpus."""

    model_config = ConfigDict(frozen=True)

    total_chunks: int = Field(default=0, ge=0, description="Stored propositions.")
    total_documents: int = Field(default=0, ge=0, description="Distinct source documents.")
    total_collections: int = Field(default=0, ge=0, description="Distinct collections.")
