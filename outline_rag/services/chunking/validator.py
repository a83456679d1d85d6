"""Gate deciding whether a document is worth sending to the chunker.

A document is rejected when its text is missing, consists only of
newlines, is blank after trimming, or exceeds the configured size ceiling.
Rejection is informational, not an error: the reason is logged and the
document contributes no propositions.
"""

from __future__ import annotations

import re

import structlog

from outline_rag.models.documents import RawDocument

logger = structlog.get_logger(logger_name=__name__)

_ONLY_NEWLINES = re.compile(r"^\n+$")


def document_label(document: RawDocument) -> str:
    """Return ``"Parent > Title"`` (or just the title) for log messages."""
    parent = getattr(document, "parent_document_title", "")
    return f"{parent} > {document.title}" if parent else document.title


class DocumentValidator:
    """Decides whether a document's text can be chunked.

    Parameters
    ----------
    max_doc_size:
        Maximum text length in characters.  ``None`` disables the ceiling.
    """

    def __init__(self, max_doc_size: int | None = None) -> None:
        self._max_doc_size = max_doc_size

    def rejection_reason(self, document: RawDocument) -> str | None:
        """Return a human-readable skip reason, or ``None`` if the document is valid."""
        text = document.text
        label = document_label(document)

        if not text or _ONLY_NEWLINES.match(text) or not text.strip():
            return f"{label} is empty. It will be skipped."
        if self._max_doc_size is not None and len(text) > self._max_doc_size:
            return (
                f"{label} is {len(text)} characters, over the "
                f"{self._max_doc_size}-character limit. It will be skipped."
            )
        return None

    def is_valid_for_chunking(self, document: RawDocument) -> bool:
        reason = self.rejection_reason(document)
        if reason is None:
            return True
        logger.info("document_skipped", document_id=document.id, reason=reason)
        return False
