"""Composition root: builds every provider and service from Settings.

Model clients, the vector store and the document source are constructed
once per process here and injected into the services; nothing else in the
package reads Settings.  Both the CLI and the MCP server
call these factories.

Missing configuration fails fast with :class:`ConfigurationError` before
any work is accepted.
"""

from __future__ import annotations

import httpx
import structlog

from outline_rag.config.settings import Settings
from outline_rag.interfaces.embedding_provider import IEmbeddingProvider
from outline_rag.interfaces.llm_provider import ILLMProvider
from outline_rag.interfaces.vector_store_provider import IVectorStoreProvider
from outline_rag.providers.embedding.huggingface_embedding_provider import (
    HuggingFaceEmbeddingProvider,
)
from outline_rag.providers.embedding.nomic_embedding_provider import NomicEmbeddingProvider
from outline_rag.providers.embedding.openai_embedding_provider import OpenAIEmbeddingProvider
from outline_rag.providers.llm.anthropic_provider import AnthropicLLMProvider
from outline_rag.providers.llm.ollama_provider import OllamaLLMProvider
from outline_rag.providers.llm.openai_provider import OpenAILLMProvider
from outline_rag.providers.outline.outline_provider import OutlineDocumentSource
from outline_rag.providers.vector_store.chromadb_provider import ChromaDBProvider
from outline_rag.services.chunking.agentic_chunker import AgenticChunker
from outline_rag.services.chunking.fallback_splitter import MarkdownSplitter
from outline_rag.services.chunking.validator import DocumentValidator
from outline_rag.services.ingestion.ingestion_service import IngestionService
from outline_rag.services.rag.workflow import RAGWorkflow
from outline_rag.utils.errors import ConfigurationError

logger = structlog.get_logger(logger_name=__name__)

_LLM_PROVIDERS = {
    "openai": OpenAILLMProvider,
    "anthropic": AnthropicLLMProvider,
    "ollama": OllamaLLMProvider,
}


# ---------------------------------------------------------------------------
# Model providers
# ---------------------------------------------------------------------------

def build_llm_provider(app_settings: Settings) -> ILLMProvider:
    """Return the configured generation provider.

    ``LLM_PROVIDER`` selects one explicitly; otherwise the first configured
    of openai, anthropic, ollama is used.
    """
    name = app_settings.llm_provider.strip().lower()
    if not name:
        available = app_settings.get_available_llm_providers()
        if not available:
            raise ConfigurationError(
                message=(
                    "No generation provider configured: set OPENAI_API_KEY "
                    "(optionally with OPENAI_BASE_URL), ANTHROPIC_API_KEY, "
                    "or OLLAMA_TEXT_MODEL"
                )
            )
        name = available[0]

    provider_cls = _LLM_PROVIDERS.get(name)
    if provider_cls is None:
        raise ConfigurationError(message=f"Unknown LLM_PROVIDER '{name}'")

    provider = provider_cls(settings=app_settings)
    if not provider.is_available():
        raise ConfigurationError(
            message=f"LLM provider '{name}' is selected but not configured",
            provider_name=provider.get_provider_name(),
        )
    logger.info("llm_provider_selected", provider=provider.get_provider_name())
    return provider


def build_embedding_provider(
    app_settings: Settings,
    http_client: httpx.AsyncClient | None = None,
) -> IEmbeddingProvider:
    """Return the configured embedding provider.

    ``EMBEDDING_PROVIDER`` selects one explicitly; otherwise the first
    available of openai, huggingface, ollama is used.
    """
    name = app_settings.embedding_provider.strip().lower()
    candidates = [name] if name else app_settings.get_available_embedding_providers()

    for candidate in candidates:
        provider: IEmbeddingProvider
        if candidate == "openai":
            provider = OpenAIEmbeddingProvider(settings=app_settings)
        elif candidate == "huggingface":
            provider = HuggingFaceEmbeddingProvider(
                settings=app_settings, http_client=http_client
            )
        elif candidate in ("ollama", "nomic"):
            provider = NomicEmbeddingProvider(settings=app_settings)
        else:
            raise ConfigurationError(message=f"Unknown EMBEDDING_PROVIDER '{candidate}'")

        if provider.is_available():
            logger.info("embedding_provider_selected", provider=provider.get_provider_name())
            return provider

    raise ConfigurationError(
        message=(
            "No embedding provider available: set OPENAI_API_KEY, "
            "HUGGINGFACE_API_KEY, or run Ollama at OLLAMA_BASE_URL"
        )
    )


# ---------------------------------------------------------------------------
# Stores and sources
# ---------------------------------------------------------------------------

def build_vector_store(
    app_settings: Settings,
    embedding_provider: IEmbeddingProvider,
) -> IVectorStoreProvider:
    return ChromaDBProvider(
        embedding_provider=embedding_provider,
        persist_directory=app_settings.chromadb_persist_dir,
        collection_name=app_settings.chromadb_collection,
    )


def build_document_source(
    app_settings: Settings,
    http_client: httpx.AsyncClient,
) -> OutlineDocumentSource:
    if not app_settings.outline_url or not app_settings.outline_api_key:
        raise ConfigurationError(
            message="OUTLINE_URL and OUTLINE_API_KEY must both be set",
            provider_name="outline",
        )
    return OutlineDocumentSource(
        http_client=http_client,
        base_url=app_settings.outline_url,
        api_key=app_settings.outline_api_key,
        collection_id=app_settings.outline_collection_id,
        max_retries=app_settings.outline_max_retries,
    )


def build_http_client(app_settings: Settings) -> httpx.AsyncClient:
    return httpx.AsyncClient(timeout=app_settings.outline_request_timeout_seconds)


# ---------------------------------------------------------------------------
# Services
# ---------------------------------------------------------------------------

def build_chunker(app_settings: Settings, llm: ILLMProvider) -> AgenticChunker:
    fallback = (
        MarkdownSplitter(max_chars=app_settings.chunker_fallback_max_chars)
        if app_settings.chunker_fallback_enabled
        else None
    )
    return AgenticChunker(
        llm=llm,
        validator=DocumentValidator(max_doc_size=app_settings.max_doc_size),
        temperature=app_settings.chunker_temperature,
        fallback_splitter=fallback,
    )


def build_ingestion_service(
    app_settings: Settings,
    http_client: httpx.AsyncClient,
) -> IngestionService:
    """Wire source -> chunker -> store for one ingestion run."""
    document_source = build_document_source(app_settings, http_client)
    llm = build_llm_provider(app_settings)
    embedding_provider = build_embedding_provider(app_settings, http_client=http_client)
    return IngestionService(
        document_source=document_source,
        vector_store=build_vector_store(app_settings, embedding_provider),
        chunker=build_chunker(app_settings, llm),
        page_size=app_settings.ingestion_page_size,
        max_concurrency=app_settings.ingestion_max_concurrency,
        document_timeout=app_settings.document_timeout_seconds,
    )


def build_rag_workflow(
    app_settings: Settings,
    http_client: httpx.AsyncClient | None = None,
) -> RAGWorkflow:
    embedding_provider = build_embedding_provider(app_settings, http_client=http_client)
    return RAGWorkflow(
        vector_store=build_vector_store(app_settings, embedding_provider),
        llm=build_llm_provider(app_settings),
        top_k=app_settings.rag_top_k,
        temperature=app_settings.rag_temperature,
    )
