"""Abstract base class for text-generation providers.

Both the agentic chunker and the RAG ``generate`` node talk to a model
only through this contract, so Groq (OpenAI-compatible), Anthropic and a
local Ollama server are interchangeable.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


# Concrete implementations: OpenAILLMProvider, AnthropicLLMProvider, OllamaLLMProvider
# Located in: outline_rag/providers/llm/
class ILLMProvider(ABC):
    """Contract for the text-generation capability (prompt -> text)."""

    @abstractmethod
    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: float = 0.0,
        max_tokens: int = 4000,
    ) -> str:
        """Generate a text completion from the model.

        Parameters
        ----------
        system_prompt:
            The instruction message that sets the model's behaviour.
        user_prompt:
            The message carrying the actual data or question.
        temperature:
            Sampling temperature (0.0 = deterministic).
        max_tokens:
            Upper bound on the number of tokens in the response.

        Returns
        -------
        str
            The model's raw text response.  Reasoning models may prefix it
            with a section closed by ``</think>``; callers strip it.

        Raises
        ------
        outline_rag.utils.errors.LLMError
            If the API call fails or returns an empty response.
        """

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a human-readable identifier, e.g. ``"openai-compatible"``."""

    @abstractmethod
    def is_available(self) -> bool:
        """Return ``True`` if the provider is configured.

        Implementations check that credentials are present without making an
        inference call.
        """
