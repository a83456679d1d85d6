"""Document-source models: what the knowledge base hands to ingestion.

``RawDocument`` is exactly what the Outline API returned for one document;
``EnrichedDocument`` adds the names of its parent document and collection,
resolved once per ingestion pass.  Both are frozen: a document fetched in a
run is never modified afterwards, and each concurrent per-document task
owns its own ``EnrichedDocument``.

Parent and collection names are snapshots.  If the source renames a
collection after ingestion, stored propositions keep the old name until
the document is re-ingested.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


# ---------------------------------------------------------------------------
# RawDocument — one knowledge-base document as fetched from the source.
# ---------------------------------------------------------------------------
class RawDocument(BaseModel):
    """A knowledge-base document as returned by the document source."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(description="Stable, unique identifier assigned by the source system.")
    title: str = Field(default="", description="Document title.")
    text: str = Field(default="", description="Markdown body; may be empty.")
    url: str = Field(default="", description="Path or URL of the document in the source UI.")
    parent_document_id: str | None = Field(
        default=None, description="Identifier of the parent document, if nested."
    )
    collection_id: str | None = Field(
        default=None, description="Identifier of the collection holding the document."
    )
    created_at: datetime | None = None
    updated_at: datetime | None = None
    published_at: datetime | None = None
    deleted_at: datetime | None = None
    tags: list[str] = Field(default_factory=list, description="Optional free-form tags.")


# ---------------------------------------------------------------------------
# EnrichedDocument — RawDocument plus resolved ancestry names.
# ---------------------------------------------------------------------------
class EnrichedDocument(RawDocument):
    """A RawDocument with its parent title and collection name resolved.

    Missing ancestry is represented by empty strings, never ``None``, so
    every proposition built from it carries string values for both fields.
    """

    parent_document_title: str = Field(
        default="", description="Title of the parent document; empty if there is none."
    )
    collection_name: str = Field(
        default="", description="Name of the owning collection; empty if there is none."
    )

    @classmethod
    def from_raw(
        cls,
        raw: RawDocument,
        parent_document_title: str = "",
        collection_name: str = "",
    ) -> EnrichedDocument:
        return cls(
            **raw.model_dump(),
            parent_document_title=parent_document_title,
            collection_name=collection_name,
        )


class Collection(BaseModel):
    """A document collection in the knowledge base."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str = ""
    url: str = ""


class DocumentPage(BaseModel):
    """One page of a paginated document listing.

    ``total_count`` is the source's reported total across *all* pages; the
    ingestion service reads it from the first page only.
    """

    model_config = ConfigDict(frozen=True)

    documents: list[RawDocument] = Field(default_factory=list)
    total_count: int = Field(default=0, ge=0)
