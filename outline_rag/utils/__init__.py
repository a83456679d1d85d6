"""Utility modules for outline-rag.

- **errors** -- Exception hierarchy rooted at OutlineRAGError.
- **concurrency** -- Semaphore-bounded ``gather`` used for the ingestion
  worker pool.
- **logging** -- structlog setup with a dual-renderer pattern: coloured
  console output in development, structured JSON in production.
"""

from outline_rag.utils.concurrency import throttled_gather
from outline_rag.utils.errors import (
    ConfigurationError,
    DocumentSourceError,
    LLMError,
    OutlineRAGError,
    RAGError,
    RateLimitError,
    WorkflowError,
)
from outline_rag.utils.logging import configure_logging, get_logger

__all__ = [
    "ConfigurationError",
    "DocumentSourceError",
    "LLMError",
    "OutlineRAGError",
    "RAGError",
    "RateLimitError",
    "WorkflowError",
    "configure_logging",
    "get_logger",
    "throttled_gather",
]
