"""Model-driven decomposition of a document into propositions.

Rule-based splitting cannot resolve pronouns across sentences or turn a
table or an image reference into a standalone statement, so the document
is handed to a generation model with instructions to do exactly that.
The price is non-determinism and fragile output parsing, which is why
:meth:`AgenticChunker.chunk` never raises: every failure is logged and
degrades to "no propositions for this document" (or, when configured, to
the markdown fallback splitter).

Flow for one document:

1. :class:`DocumentValidator` gate (empty / oversized documents stop here)
2. Render the chunker prompt with the serialized document
3. Call the generation model
4. Drop any reasoning section, then extract the fenced JSON array
5. Stamp every extracted string with the document's metadata
"""

from __future__ import annotations

import structlog

from outline_rag.interfaces.llm_provider import ILLMProvider
from outline_rag.models.documents import EnrichedDocument
from outline_rag.models.rag import Proposition
from outline_rag.services.chunking.extractor import Failed, extract, strip_reasoning
from outline_rag.services.chunking.fallback_splitter import MarkdownSplitter
from outline_rag.services.chunking.prompts import (
    CHUNKER_SYSTEM_PROMPT,
    render_chunker_user_prompt,
)
from outline_rag.services.chunking.validator import DocumentValidator, document_label

logger = structlog.get_logger(logger_name=__name__)


def build_propositions(document: EnrichedDocument, contents: list[str]) -> list[Proposition]:
    """Map extracted strings onto Propositions carrying *document*'s metadata."""
    return [
        Proposition(
            content=content,
            position=position,
            source_document_id=document.id,
            source_document_title=document.title,
            source_document_url=document.url,
            parent_document_id=document.parent_document_id,
            parent_document_title=document.parent_document_title,
            collection_id=document.collection_id,
            collection_name=document.collection_name,
            created_at=document.created_at,
            updated_at=document.updated_at,
            published_at=document.published_at,
            deleted_at=document.deleted_at,
            tags=list(document.tags),
        )
        for position, content in enumerate(contents)
    ]


class AgenticChunker:
    """Decomposes enriched documents into metadata-bearing propositions.

    Parameters
    ----------
    llm:
        Generation model used for decomposition.
    validator:
        Gate applied before any model call.
    temperature:
        Sampling temperature for the decomposition call.
    max_tokens:
        Response budget; reasoning models spend part of it thinking.
    fallback_splitter:
        Optional splitter used when the model path fails.  ``None`` keeps
        the fail-soft "zero propositions" behaviour.
    """

    def __init__(
        self,
        llm: ILLMProvider,
        validator: DocumentValidator,
        temperature: float = 0.0,
        max_tokens: int = 8000,
        fallback_splitter: MarkdownSplitter | None = None,
    ) -> None:
        self._llm = llm
        self._validator = validator
        self._temperature = temperature
        self._max_tokens = max_tokens
        self._fallback = fallback_splitter

    async def chunk(self, document: EnrichedDocument) -> list[Proposition]:
        """Return the document's propositions; never raises."""
        if not self._validator.is_valid_for_chunking(document):
            return []

        label = document_label(document)
        try:
            response = await self._llm.complete(
                system_prompt=CHUNKER_SYSTEM_PROMPT,
                user_prompt=render_chunker_user_prompt(document),
                temperature=self._temperature,
                max_tokens=self._max_tokens,
            )
            result = extract(strip_reasoning(response), context_label=label)
            if isinstance(result, Failed):
                return self._fall_back(document, label, result.reason)

            propositions = build_propositions(document, result.items)
        except Exception as exc:  # noqa: BLE001
            logger.error(
                "chunking_failed",
                document_id=document.id,
                document=label,
                error=str(exc),
                error_type=type(exc).__name__,
            )
            return self._fall_back(document, label, str(exc))

        logger.info(
            "document_chunked",
            document_id=document.id,
            document=label,
            propositions=len(propositions),
        )
        return propositions

    def _fall_back(
        self, document: EnrichedDocument, label: str, reason: str
    ) -> list[Proposition]:
        if self._fallback is None:
            return []

        try:
            passages = self._fallback.split(document.text)
            propositions = build_propositions(document, passages)
        except Exception as exc:  # noqa: BLE001
            logger.error("fallback_chunking_failed", document=label, error=str(exc))
            return []

        logger.info(
            "fallback_chunking_used",
            document_id=document.id,
            document=label,
            reason=reason,
            propositions=len(propositions),
        )
        return propositions
