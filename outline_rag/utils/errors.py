"""Custom exception hierarchy for outline-rag.

All application exceptions inherit from :class:`OutlineRAGError`, which
carries an optional ``provider_name`` so error handlers can identify which
external service (e.g. "openai", "outline", "chromadb") caused the failure.

The hierarchy follows the places a failure can originate:

    OutlineRAGError  (base -- catch-all for any outline-rag error)
    +-- ConfigurationError       (startup / missing config)
    +-- LLMError                 (any generation-model call failure)
    +-- RAGError                 (embedding or vector-store failure)
    +-- DocumentSourceError      (Outline API failure)
    |   +-- RateLimitError       (HTTP 429 after retries are exhausted)
    +-- WorkflowError            (invalid workflow input or graph state)

Document-scoped problems during ingestion (empty documents, unparseable
model output) are *not* raised; they are logged and the document simply
contributes zero propositions.  Everything in this module is for failures
that must reach the caller.
"""


class OutlineRAGError(Exception):
    """Base exception for all outline-rag errors.

    Every subclass carries a human-readable ``message`` and an optional
    ``provider_name``.  ``__str__`` prefixes the provider name in brackets
    for log scanning, e.g. ``[groq] Rate limit exceeded``.
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        provider_name: str | None = None,
    ) -> None:
        self._message = message
        self._provider_name = provider_name
        super().__init__(self._message)

    @property
    def message(self) -> str:
        return self._message

    @property
    def provider_name(self) -> str | None:
        return self._provider_name

    def __str__(self) -> str:
        if self._provider_name:
            return f"[{self._provider_name}] {self._message}"
        return self._message


# ---------------------------------------------------------------------------
# Startup errors
# ---------------------------------------------------------------------------

class ConfigurationError(OutlineRAGError):
    """Raised when configuration is invalid or missing at startup."""

    def __init__(
        self,
        message: str = "Invalid or missing configuration",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# Model / store errors
# ---------------------------------------------------------------------------

class LLMError(OutlineRAGError):
    """Raised when a generation-model API call fails or returns nothing usable."""

    def __init__(
        self,
        message: str = "LLM API call failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class RAGError(OutlineRAGError):
    """Raised when an embedding call or a vector-store operation fails."""

    def __init__(
        self,
        message: str = "RAG operation failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# Document source errors
# ---------------------------------------------------------------------------

class DocumentSourceError(OutlineRAGError):
    """Raised when the document source (Outline API) cannot be read."""

    def __init__(
        self,
        message: str = "Document source request failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class RateLimitError(DocumentSourceError):
    """Raised when the document source keeps answering HTTP 429.

    Only raised after the client's own bounded retries are exhausted.
    """

    def __init__(
        self,
        message: str = "Rate limit exceeded",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# Workflow errors
# ---------------------------------------------------------------------------

class WorkflowError(OutlineRAGError):
    """Raised when a RAG workflow run is given invalid input or reaches a bad state."""

    def __init__(
        self,
        message: str = "RAG workflow failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)
