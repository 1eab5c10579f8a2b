"""Centralized configuration constants for docblocks.

This module provides a single source of truth for:
- Timeouts (LLM calls, health checks)
- Retry budgets for transient provider failures
- Content generation tuning
- Input size limits for the text editor buffer

Constants can be overridden via environment variables where noted.
"""

from __future__ import annotations

import os
from dataclasses import dataclass


def _env_int(name: str, default: int, min_val: int | None = None) -> int:
    """Get integer from environment with optional minimum enforcement."""
    val = int(os.environ.get(name, str(default)))
    if min_val is not None and val < min_val:
        return min_val
    return val


# =============================================================================
# Timeouts
# =============================================================================


@dataclass(frozen=True)
class Timeouts:
    """Timeouts in seconds for outbound calls."""

    LLM_DEFAULT: float = 60.0
    LLM_HEALTH_CHECK: float = 2.0
    LLM_LIST_MODELS: float = 5.0


TIMEOUTS = Timeouts()


# =============================================================================
# Retries
# =============================================================================


@dataclass(frozen=True)
class RetryPolicy:
    """Retry budget for transient network failures."""

    MAX_ATTEMPTS: int = _env_int("DOCBLOCKS_LLM_MAX_ATTEMPTS", 3, min_val=1)
    WAIT_MIN_SECONDS: float = 1.0
    WAIT_MAX_SECONDS: float = 4.0


RETRY = RetryPolicy()


# =============================================================================
# Content Generation
# =============================================================================


@dataclass(frozen=True)
class GenerationConfig:
    """Sampling parameters for the content-generation collaborator."""

    TEMPERATURE: float = 0.7


GENERATION = GenerationConfig()


# =============================================================================
# Limits
# =============================================================================


@dataclass(frozen=True)
class Limits:
    """Size limits applied at the CLI boundary."""

    MAX_TEXT_BYTES: int = _env_int("DOCBLOCKS_MAX_TEXT_BYTES", 5_000_000, min_val=1024)
    MAX_IMAGE_BYTES: int = _env_int("DOCBLOCKS_MAX_IMAGE_BYTES", 20_000_000, min_val=1024)


LIMITS = Limits()
