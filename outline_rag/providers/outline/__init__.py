"""Outline knowledge-base document source."""

from outline_rag.providers.outline.outline_provider import OutlineDocumentSource

__all__ = ["OutlineDocumentSource"]
