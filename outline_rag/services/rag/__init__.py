"""Retrieval-augmented question answering."""

from outline_rag.services.rag.workflow import RAGWorkflow

__all__ = ["RAGWorkflow"]
