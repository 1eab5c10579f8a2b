"""Base LLM Provider Protocol - Abstract interface for LLM backends.

The content generator talks to models only through this protocol, so tests
and alternative backends can stand in for Ollama.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable

from docblocks.config import TIMEOUTS


@dataclass
class ProviderHealth:
    """Health status of an LLM provider.

    Attributes:
        reachable: Whether the provider is accessible.
        model_count: Number of available models.
        error: Error message if not reachable.
        current_model: Currently selected model name.
    """

    reachable: bool
    model_count: int = 0
    error: str | None = None
    current_model: str | None = None


@dataclass
class ModelInfo:
    """Information about an available model.

    Attributes:
        name: Model identifier (e.g., "llama3.2:3b").
        size_gb: Model size in gigabytes.
        context_length: Maximum context window size.
        capabilities: List of capabilities (e.g., ["tools", "vision"]).
        description: Human-readable description.
    """

    name: str
    size_gb: float | None = None
    context_length: int | None = None
    capabilities: list[str] = field(default_factory=list)
    description: str | None = None


@runtime_checkable
class LLMProvider(Protocol):
    """Abstract interface for LLM providers.

    Example:
        provider = OllamaProvider()
        raw = provider.chat_json(
            system="Reply with JSON.",
            user="{...}",
            temperature=0.7,
        )
    """

    @property
    def provider_type(self) -> str:
        """Provider identifier (e.g., "ollama")."""
        ...

    def chat_text(
        self,
        *,
        system: str,
        user: str,
        timeout_seconds: float = TIMEOUTS.LLM_DEFAULT,
        temperature: float | None = None,
    ) -> str:
        """Generate a plain text response.

        Raises:
            LLMError: On any failure (network, parsing, etc.).
        """
        ...

    def chat_json(
        self,
        *,
        system: str,
        user: str,
        timeout_seconds: float = TIMEOUTS.LLM_DEFAULT,
        temperature: float | None = None,
    ) -> str:
        """Generate a JSON-formatted response.

        Returns the raw JSON string; the caller parses it.

        Raises:
            LLMError: On any failure.
        """
        ...

    def list_models(self) -> list[ModelInfo]:
        """List available models."""
        ...

    def check_health(self) -> ProviderHealth:
        """Check provider health and connectivity."""
        ...
