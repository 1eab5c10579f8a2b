"""Ollama Provider - Local LLM inference via Ollama.

Implements the LLMProvider protocol over Ollama's HTTP API with:
- Retry with exponential backoff for transient failures
- JSON extraction for models that wrap JSON in markdown fences
- Model auto-selection when none is configured
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any

import httpx
import tenacity

from docblocks.config import RETRY, TIMEOUTS
from docblocks.errors import LLMConnectionError, LLMError, LLMTimeoutError
from docblocks.settings import settings

from .base import ModelInfo, ProviderHealth

logger = logging.getLogger(__name__)


# =============================================================================
# Retry Configuration
# =============================================================================


def _is_retryable(exc: BaseException) -> bool:
    """Check if an exception should trigger a retry."""
    return isinstance(exc, (httpx.TimeoutException, httpx.ConnectError))


_retry_transient = tenacity.retry(
    stop=tenacity.stop_after_attempt(RETRY.MAX_ATTEMPTS),
    wait=tenacity.wait_exponential(multiplier=1, min=RETRY.WAIT_MIN_SECONDS, max=RETRY.WAIT_MAX_SECONDS),
    retry=tenacity.retry_if_exception(_is_retryable),
    before_sleep=lambda rs: logger.debug(
        "Retrying Ollama request (attempt %d)", rs.attempt_number + 1
    ),
    reraise=True,
)


# =============================================================================
# Ollama Provider
# =============================================================================


class OllamaProvider:
    """LLM Provider implementation for Ollama.

    Example:
        provider = OllamaProvider(url="http://localhost:11434", model="llama3.2:3b")
        response = provider.chat_json(system="Reply with JSON.", user="{}")
    """

    def __init__(
        self,
        *,
        url: str | None = None,
        model: str | None = None,
    ) -> None:
        """Initialize Ollama provider.

        Args:
            url: Ollama server URL. Defaults to settings.ollama_url.
            model: Model to use. Defaults to settings.ollama_model or the
                first suitable installed model.
        """
        self._url = (url or settings.ollama_url).rstrip("/")
        self._model = model or settings.ollama_model

    @property
    def provider_type(self) -> str:
        """Provider identifier."""
        return "ollama"

    def chat_text(
        self,
        *,
        system: str,
        user: str,
        timeout_seconds: float = TIMEOUTS.LLM_DEFAULT,
        temperature: float | None = None,
    ) -> str:
        """Generate plain text response."""
        payload = self._build_payload(system=system, user=user, temperature=temperature)
        return self._call_chat(payload, timeout_seconds)

    def chat_json(
        self,
        *,
        system: str,
        user: str,
        timeout_seconds: float = TIMEOUTS.LLM_DEFAULT,
        temperature: float | None = None,
    ) -> str:
        """Generate JSON-formatted response.

        Handles models that wrap JSON in markdown code blocks.
        """
        payload = self._build_payload(system=system, user=user, temperature=temperature)
        payload["format"] = "json"
        return extract_json(self._call_chat(payload, timeout_seconds))

    def list_models(self) -> list[ModelInfo]:
        """List available Ollama models."""
        try:
            with httpx.Client(timeout=TIMEOUTS.LLM_LIST_MODELS) as client:
                res = client.get(f"{self._url}/api/tags")
                res.raise_for_status()
                data = res.json()
        except Exception as e:
            logger.warning("Failed to list Ollama models: %s", e)
            return []

        models = []
        for m in data.get("models", []):
            if not (isinstance(m, dict) and isinstance(m.get("name"), str)):
                continue
            details = m.get("details") or {}
            size_bytes = m.get("size", 0)
            size_gb = size_bytes / (1024**3) if size_bytes else None
            models.append(
                ModelInfo(
                    name=m["name"],
                    size_gb=round(size_gb, 1) if size_gb else None,
                    context_length=details.get("context_length"),
                    description=details.get("family"),
                )
            )
        return models

    def check_health(self) -> ProviderHealth:
        """Check Ollama server health."""
        try:
            with httpx.Client(timeout=TIMEOUTS.LLM_HEALTH_CHECK) as client:
                res = client.get(f"{self._url}/api/tags")
                res.raise_for_status()
                models = res.json().get("models", [])
        except Exception as e:
            return ProviderHealth(reachable=False, error=str(e))

        return ProviderHealth(
            reachable=True,
            model_count=len(models),
            current_model=self._model,
        )

    # -------------------------------------------------------------------------
    # Private Methods
    # -------------------------------------------------------------------------

    def _build_payload(
        self,
        *,
        system: str,
        user: str,
        temperature: float | None,
    ) -> dict[str, Any]:
        """Build the chat request payload."""
        options: dict[str, Any] = {}
        if temperature is not None:
            options["temperature"] = float(temperature)

        return {
            "model": self._model or self._get_default_model(),
            "stream": False,
            "options": options,
            "messages": [
                {"role": "system", "content": system},
                {"role": "user", "content": user},
            ],
        }

    def _call_chat(self, payload: dict[str, Any], timeout_seconds: float) -> str:
        """Send the request, translating transport failures once retries run out."""
        try:
            return self._post_chat(payload, timeout_seconds)
        except httpx.ConnectError as e:
            raise LLMConnectionError(
                f"Cannot connect to Ollama at {self._url}",
                provider=self.provider_type,
                url=self._url,
                suggestion="Is 'ollama serve' running?",
            ) from e
        except httpx.TimeoutException as e:
            raise LLMTimeoutError(
                f"Ollama request timed out after {timeout_seconds}s",
                provider=self.provider_type,
                timeout_seconds=timeout_seconds,
            ) from e

    @_retry_transient
    def _post_chat(self, payload: dict[str, Any], timeout_seconds: float) -> str:
        """Send chat request to Ollama with automatic retry."""
        url = f"{self._url}/api/chat"
        try:
            with httpx.Client(timeout=timeout_seconds) as client:
                res = client.post(url, json=payload)
                res.raise_for_status()
                data = res.json()

        except (httpx.ConnectError, httpx.TimeoutException):
            raise

        except httpx.HTTPStatusError as e:
            model = payload.get("model", "unknown")
            if e.response.status_code == 404:
                raise LLMError(
                    f"Model '{model}' not found. Run 'ollama pull {model}' to download it.",
                    provider=self.provider_type,
                    model=model,
                ) from e
            raise LLMError(f"Ollama HTTP error: {e}", provider=self.provider_type, model=model) from e

        except Exception as e:
            raise LLMError(f"Ollama request failed: {e}", provider=self.provider_type) from e

        message = data.get("message") if isinstance(data, dict) else None
        if not isinstance(message, dict):
            raise LLMError("Unexpected Ollama response: missing message", provider=self.provider_type)

        content = message.get("content")
        if not isinstance(content, str):
            raise LLMError("Unexpected Ollama response: missing content", provider=self.provider_type)

        return content.strip()

    def _get_default_model(self) -> str:
        """Pick the first installed model, preferring ones that follow JSON well."""
        models = self.list_models()
        if models:
            preferred_patterns = ["mistral", "llama3", "qwen", "gemma", "phi"]
            names = [m.name for m in models]
            for pattern in preferred_patterns:
                for name in names:
                    if pattern in name.lower():
                        logger.info("Auto-selected model: %s (preferred pattern: %s)", name, pattern)
                        self._model = name
                        return name
            logger.info("Auto-selected first available model: %s", names[0])
            self._model = names[0]
            return names[0]

        raise LLMError(
            "No Ollama model configured. Set DOCBLOCKS_OLLAMA_MODEL or pull a model.",
            provider=self.provider_type,
        )


def extract_json(response: str) -> str:
    """Extract JSON from a response that might be wrapped in markdown."""
    stripped = response.strip()
    if stripped.startswith("{") or stripped.startswith("["):
        return stripped

    # ```json ... ```
    json_block = re.search(r"```(?:json)?\s*\n?([\s\S]*?)\n?```", response)
    if json_block:
        return json_block.group(1).strip()

    json_match = re.search(r"(\{[\s\S]*\}|\[[\s\S]*\])", response)
    if json_match:
        return json_match.group(1).strip()

    return response


def parse_json_object(raw: str) -> dict[str, Any] | None:
    """Decode ``raw`` as a JSON object, or None if it is not one."""
    try:
        data = json.loads(extract_json(raw))
    except json.JSONDecodeError:
        return None
    return data if isinstance(data, dict) else None

