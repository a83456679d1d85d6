"""outline-rag domain models -- re-exports all public model classes.

Submodules:
    - documents.py -- documents, collections and pages from the source
    - rag.py       -- propositions, stored chunks, ingestion reports
    - workflow.py  -- RAG workflow state and stream updates
"""

from __future__ import annotations

from outline_rag.models.documents import (
    Collection,
    DocumentPage,
    EnrichedDocument,
    RawDocument,
)
from outline_rag.models.rag import (
    CorpusStats,
    DocumentOutcome,
    DocumentResult,
    IngestionReport,
    Proposition,
    StoredChunk,
)
from outline_rag.models.workflow import QueryState, WorkflowNode, WorkflowUpdate

__all__ = [
    "Collection",
    "CorpusStats",
    "DocumentOutcome",
    "DocumentPage",
    "DocumentResult",
    "EnrichedDocument",
    "IngestionReport",
    "Proposition",
    "QueryState",
    "RawDocument",
    "StoredChunk",
    "WorkflowNode",
    "WorkflowUpdate",
]
