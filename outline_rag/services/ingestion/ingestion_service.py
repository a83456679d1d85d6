"""Batch ingestion of a knowledge base into the vector store.

Pipeline per document: **exists? -> enrich -> chunk -> embed + store**.

:class:`IngestionService` pages through the document source with a fixed
page size.  Pages are processed one after another; documents within a
page are processed concurrently through a bounded worker pool.  Each
document is handled by an independent task:

    1. Existence check -- if the store already holds any row for the
       document id, the document is skipped entirely.  This is what makes
       re-running ingestion cheap and convergent.
    2. Enrichment -- parent document title and collection name are fetched
       (only when the respective id is set).
    3. AgenticChunker -- decomposes the document into propositions.
    4. Vector store -- embeds and upserts the propositions as one batch.

A failure in one document (including running past its deadline) is caught
at the task boundary and logged with the document's ancestry; sibling
documents and later pages are unaffected.

The existence check and the write are not atomic.  Two ingestion runs
started at the same time against the same store can both load a document.
"""

from __future__ import annotations

import asyncio
import math
import time
from typing import TYPE_CHECKING

import structlog

from outline_rag.models.documents import EnrichedDocument, RawDocument
from outline_rag.models.rag import DocumentOutcome, DocumentResult, IngestionReport
from outline_rag.services.chunking.validator import document_label
from outline_rag.utils.concurrency import throttled_gather

if TYPE_CHECKING:
    from outline_rag.interfaces.document_source import IDocumentSource
    from outline_rag.interfaces.vector_store_provider import IVectorStoreProvider
    from outline_rag.services.chunking.agentic_chunker import AgenticChunker

logger = structlog.get_logger(logger_name=__name__)


class IngestionService:
    """Loads every document of the source into the vector store once.

    Parameters
    ----------
    document_source:
        Paginated source of knowledge-base documents.
    vector_store:
        Destination store; also answers the existence check.
    chunker:
        Turns an enriched document into propositions.
    page_size:
        Documents requested per page.
    max_concurrency:
        Upper bound on documents processed at the same time.
    document_timeout:
        Overall deadline in seconds for one document's pipeline.
    """

    def __init__(
        self,
        document_source: IDocumentSource,
        vector_store: IVectorStoreProvider,
        chunker: AgenticChunker,
        page_size: int = 100,
        max_concurrency: int = 5,
        document_timeout: float = 300.0,
    ) -> None:
        if page_size < 1:
            raise ValueError(f"page_size must be positive, got {page_size}")
        self._source = document_source
        self._store = vector_store
        self._chunker = chunker
        self._page_size = page_size
        self._max_concurrency = max(1, max_concurrency)
        self._document_timeout = document_timeout
        self._processed = 0
        self._total = 0

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def ingest(self) -> IngestionReport:
        """Run one full ingestion pass and return its summary.

        The total document count is taken from the first page and not
        re-checked; if the source grows during the run, documents beyond
        that total are picked up by the next run.

        Raises
        ------
        outline_rag.utils.errors.DocumentSourceError
            If a page of the listing cannot be fetched.
        """
        start = time.monotonic()
        self._processed = 0

        first_page = await self._source.list_documents(page=0, page_size=self._page_size)
        self._total = first_page.total_count
        total_pages = max(1, math.ceil(self._total / self._page_size))
        logger.info(
            "ingestion_started",
            total_documents=self._total,
            total_pages=total_pages,
            page_size=self._page_size,
        )

        results = await self._process_page(first_page.documents, page=0)
        pages_fetched = 1

        for page in range(1, total_pages):
            response = await self._source.list_documents(page=page, page_size=self._page_size)
            pages_fetched += 1
            results.extend(await self._process_page(response.documents, page=page))

        report = self._summarize(results, pages_fetched, time.monotonic() - start)
        logger.info(
            "ingestion_finished",
            pages_fetched=report.pages_fetched,
            documents_seen=report.documents_seen,
            loaded=report.loaded,
            skipped_existing=report.skipped_existing,
            empty=report.empty,
            failed=report.failed,
            propositions_stored=report.propositions_stored,
            elapsed_s=round(report.elapsed_seconds, 2),
        )
        return report

    # ------------------------------------------------------------------
    # Per-page / per-document processing
    # ------------------------------------------------------------------

    async def _process_page(self, documents: list[RawDocument], page: int) -> list[DocumentResult]:
        logger.info("ingestion_page_fetched", page=page, documents=len(documents))
        if not documents:
            return []

        # A fresh semaphore per page; pages never overlap.
        semaphore = asyncio.Semaphore(self._max_concurrency)
        outcomes = await throttled_gather(
            [self._process_document_safely(doc) for doc in documents],
            semaphore=semaphore,
        )

        results: list[DocumentResult] = []
        for document, outcome in zip(documents, outcomes, strict=True):
            if isinstance(outcome, BaseException):
                results.append(self._failed(document, outcome))
            else:
                results.append(outcome)
        return results

    async def _process_document_safely(self, document: RawDocument) -> DocumentResult:
        """Task boundary: every exception becomes a FAILED result."""
        try:
            result = await asyncio.wait_for(
                self._process_document(document), timeout=self._document_timeout
            )
        except asyncio.TimeoutError as exc:
            logger.error(
                "document_timed_out",
                document_id=document.id,
                title=document.title,
                timeout_s=self._document_timeout,
            )
            result = self._failed(document, exc)
        except Exception as exc:  # noqa: BLE001
            logger.error(
                "document_ingestion_failed",
                document_id=document.id,
                title=document.title,
                parent_document_id=document.parent_document_id,
                collection_id=document.collection_id,
                error=str(exc),
                error_type=type(exc).__name__,
            )
            result = self._failed(document, exc)

        self._processed += 1
        logger.info(
            "document_processed",
            document_id=document.id,
            title=document.title,
            outcome=result.outcome.value,
            progress=f"{self._processed}/{self._total}",
        )
        return result

    async def _process_document(self, document: RawDocument) -> DocumentResult:
        if await self._store.exists_by_source_id(document.id):
            return DocumentResult(
                document_id=document.id,
                title=document.title,
                outcome=DocumentOutcome.SKIPPED_EXISTING,
            )

        enriched = await self._enrich(document)
        propositions = await self._chunker.chunk(enriched)
        if not propositions:
            return DocumentResult(
                document_id=document.id,
                title=document.title,
                outcome=DocumentOutcome.EMPTY,
            )

        stored = await self._store.upsert(propositions)
        logger.info(
            "document_loaded",
            document=document_label(enriched),
            propositions=stored,
        )
        return DocumentResult(
            document_id=document.id,
            title=document.title,
            outcome=DocumentOutcome.LOADED,
            propositions_stored=stored,
        )

    async def _enrich(self, document: RawDocument) -> EnrichedDocument:
        """Resolve parent title and collection name; empty strings when absent."""
        parent_title = ""
        if document.parent_document_id:
            parent = await self._source.get_document(document.parent_document_id)
            parent_title = parent.title

        collection_name = ""
        if document.collection_id:
            collection = await self._source.get_collection(document.collection_id)
            collection_name = collection.name

        return EnrichedDocument.from_raw(
            document,
            parent_document_title=parent_title,
            collection_name=collection_name,
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _failed(document: RawDocument, exc: BaseException) -> DocumentResult:
        return DocumentResult(
            document_id=document.id,
            title=document.title,
            outcome=DocumentOutcome.FAILED,
            error=str(exc) or type(exc).__name__,
        )

    def _summarize(
        self, results: list[DocumentResult], pages_fetched: int, elapsed: float
    ) -> IngestionReport:
        counts = {outcome: 0 for outcome in DocumentOutcome}
        for result in results:
            counts[result.outcome] += 1

        return IngestionReport(
            total_documents=self._total,
            pages_fetched=pages_fetched,
            documents_seen=len(results),
            loaded=counts[DocumentOutcome.LOADED],
            skipped_existing=counts[DocumentOutcome.SKIPPED_EXISTING],
            empty=counts[DocumentOutcome.EMPTY],
            failed=counts[DocumentOutcome.FAILED],
            propositions_stored=sum(r.propositions_stored for r in results),
            elapsed_seconds=elapsed,
            failed_document_ids=[
                r.document_id for r in results if r.outcome is DocumentOutcome.FAILED
            ],
        )
