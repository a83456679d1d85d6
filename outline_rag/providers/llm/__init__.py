"""LLM provider adapters.

Three concrete implementations of ILLMProvider:
    - OpenAILLMProvider    — OpenAI, or any OpenAI-compatible API (Groq)
    - AnthropicLLMProvider — Claude via the Messages API
    - OllamaLLMProvider    — local models via an Ollama server

``outline_rag.main.build_llm_provider`` picks one from the settings.
"""

from outline_rag.providers.llm.anthropic_provider import AnthropicLLMProvider
from outline_rag.providers.llm.ollama_provider import OllamaLLMProvider
from outline_rag.providers.llm.openai_provider import OpenAILLMProvider

__all__ = ["OpenAILLMProvider", "AnthropicLLMProvider", "OllamaLLMProvider"]
