"""LLM Providers - Pluggable backend support for content generation.

Usage:
    from docblocks.providers import get_provider

    provider = get_provider()
    raw = provider.chat_json(system="Reply with JSON.", user="{}")
"""

from __future__ import annotations

from docblocks.providers.base import LLMProvider, ModelInfo, ProviderHealth
from docblocks.providers.ollama import OllamaProvider, extract_json, parse_json_object


def get_provider(*, url: str | None = None, model: str | None = None) -> LLMProvider:
    """Get the configured provider (Ollama, local-first)."""
    return OllamaProvider(url=url, model=model)


__all__ = [
    "LLMProvider",
    "ModelInfo",
    "OllamaProvider",
    "ProviderHealth",
    "extract_json",
    "get_provider",
    "parse_json_object",
]
