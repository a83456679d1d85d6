"""Application settings loaded from environment variables via pydantic-settings.

Settings come from two sources, in priority order:

  1. **Environment variables**, e.g. ``OUTLINE_API_KEY=ol_api_...``
  2. **.env file** in the working directory (local development)

Field ``outline_api_key`` maps to env var ``OUTLINE_API_KEY``; defaults are
used when neither source defines a value.  Empty strings mean "not
configured" -- the provider factories in ``outline_rag.main`` skip
providers whose credentials are empty.
"""

from pydantic import ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from outline_rag.utils.errors import ConfigurationError


class Settings(BaseSettings):
    """outline-rag application settings.

    Environment variables override defaults. Loaded from .env file when present.
    """

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    # === Generation providers ===
    # "" = auto: first configured of openai, anthropic, ollama.
    llm_provider: str = ""
    openai_api_key: str = ""
    openai_base_url: str = ""  # OpenAI-compatible endpoint, e.g. https://api.groq.com/openai/v1
    openai_text_model: str = ""
    anthropic_api_key: str = ""
    anthropic_text_model: str = ""
    ollama_base_url: str = "http://localhost:11434"
    ollama_text_model: str = ""
    llm_timeout_seconds: float = 120.0

    # === Embedding providers ===
    # "" = auto: first configured of openai, huggingface, ollama.
    embedding_provider: str = ""
    openai_embedding_model: str = ""
    huggingface_api_key: str = ""
    huggingface_embedding_model: str = "sentence-transformers/paraphrase-multilingual-MiniLM-L12-v2"
    huggingface_inference_url: str = "https://router.huggingface.co/hf-inference/models"
    ollama_embedding_model: str = ""

    # === Outline document source ===
    outline_url: str = ""
    outline_api_key: str = ""
    outline_collection_id: str = ""  # optional: ingest a single collection
    outline_request_timeout_seconds: float = 30.0
    outline_max_retries: int = 3

    # === Vector store ===
    chromadb_persist_dir: str = "./data/chromadb"
    chromadb_collection: str = "outline_docs"

    # === Chunking ===
    max_doc_size: int | None = None  # unset = no ceiling
    chunker_temperature: float = 0.0
    chunker_fallback_enabled: bool = False
    chunker_fallback_max_chars: int = 800

    # === Ingestion ===
    ingestion_page_size: int = 100
    ingestion_max_concurrency: int = 5
    document_timeout_seconds: float = 300.0

    # === Retrieval / generation ===
    rag_top_k: int = 4
    rag_temperature: float = 0.0

    # === App config ===
    app_env: str = "development"
    log_level: str = "INFO"

    @field_validator("max_doc_size", mode="before")
    @classmethod
    def _blank_means_no_ceiling(cls, value: object) -> object:
        """Treat ``MAX_DOC_SIZE=`` (present but empty) like an unset variable."""
        if isinstance(value, str) and not value.strip():
            return None
        return value

    def get_available_llm_providers(self) -> list[str]:
        """Return the generation providers that have the configuration they need."""
        providers: list[str] = []
        if self.openai_api_key:
            providers.append("openai")
        if self.anthropic_api_key:
            providers.append("anthropic")
        if self.ollama_base_url and self.ollama_text_model:
            providers.append("ollama")
        return providers

    def get_available_embedding_providers(self) -> list[str]:
        """Return the embedding providers that have the configuration they need."""
        providers: list[str] = []
        # A custom base URL usually means a generation-only endpoint (Groq).
        if self.openai_api_key and not self.openai_base_url:
            providers.append("openai")
        if self.huggingface_api_key:
            providers.append("huggingface")
        if self.ollama_base_url:
            providers.append("ollama")
        return providers


def load_settings() -> Settings:
    """Build Settings from the environment, reporting bad values as ConfigurationError."""
    try:
        return Settings()
    except ValidationError as exc:
        fields = ", ".join(
            str(error["loc"][0]).upper() for error in exc.errors() if error["loc"]
        )
        raise ConfigurationError(message=f"Invalid settings: {fields or exc}") from exc
