"""Document chunking pipeline: validation, model decomposition, output parsing."""

from outline_rag.services.chunking.agentic_chunker import AgenticChunker, build_propositions
from outline_rag.services.chunking.extractor import (
    ExtractionResult,
    Failed,
    Parsed,
    extract,
    extract_propositions,
    parse_structured_output,
    strip_reasoning,
)
from outline_rag.services.chunking.fallback_splitter import MarkdownSplitter
from outline_rag.services.chunking.validator import DocumentValidator

__all__ = [
    "AgenticChunker",
    "DocumentValidator",
    "ExtractionResult",
    "Failed",
    "MarkdownSplitter",
    "Parsed",
    "build_propositions",
    "extract",
    "extract_propositions",
    "parse_structured_output",
    "strip_reasoning",
]
