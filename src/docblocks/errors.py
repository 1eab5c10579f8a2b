"""docblocks Error Hierarchy.

Provides a structured error hierarchy for all domain operations:
- DocBlocksError: Base exception for all application errors
- ValidationError: Input validation failures
- DuplicateBlockIdentifier: Append-mode merge found a colliding block id
- NotFoundError: Missing document or block
- StorageError: Persistence and object storage failures
- LLMError: Content generation provider failures
- ConfigurationError: Configuration/setup issues

Each error type includes:
- Descriptive message
- Recoverable flag for retry logic
- Structured context for CLI and API responses

Usage:
    from docblocks.errors import DuplicateBlockIdentifier

    if block.id in existing_ids:
        raise DuplicateBlockIdentifier(block.id)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

logger = logging.getLogger(__name__)


# =============================================================================
# Error Base Class
# =============================================================================


class DocBlocksError(Exception):
    """Base exception for all docblocks application errors.

    Attributes:
        message: Human-readable error description
        recoverable: Whether the operation can be retried
        context: Additional context for debugging
    """

    def __init__(
        self,
        message: str,
        *,
        recoverable: bool = False,
        context: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.recoverable = recoverable
        self.context = context or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert to structured dictionary for CLI/API responses."""
        return {
            "type": type(self).__name__.lower().replace("error", ""),
            "message": self.message,
            "recoverable": self.recoverable,
            **{k: v for k, v in self.context.items() if v is not None},
        }


# =============================================================================
# Validation Errors
# =============================================================================


class ValidationError(DocBlocksError):
    """Input validation failed.

    Example:
        raise ValidationError("Document name is required", field="name")
    """

    def __init__(
        self,
        message: str,
        *,
        field: str | None = None,
        value: Any = None,
        constraint: str | None = None,
        **kwargs: Any,
    ) -> None:
        context = kwargs.pop("context", {})
        if field:
            context["field"] = field
        if constraint:
            context["constraint"] = constraint
        if value is not None:
            context["value"] = _truncate(str(value), 100)
        super().__init__(message, recoverable=False, context=context)
        self.field = field
        self.constraint = constraint


class DuplicateBlockIdentifier(ValidationError):
    """A candidate block reuses an identifier already in use.

    Raised by append-mode merges when a candidate collides with a block of
    the target document or with an earlier candidate of the same batch. The
    whole batch is rejected.
    """

    def __init__(self, block_id: str, *, within_batch: bool = False) -> None:
        where = "earlier in the same batch" if within_batch else "in the document"
        super().__init__(
            f"Duplicate block identifier {block_id!r}: already present {where}",
            field="id",
            constraint="unique_block_id",
            context={"block_id": block_id, "within_batch": within_batch},
        )
        self.block_id = block_id
        self.within_batch = within_batch


class NotFoundError(DocBlocksError):
    """Resource not found."""

    def __init__(
        self,
        message: str,
        *,
        resource_type: str | None = None,
        resource_id: str | None = None,
    ) -> None:
        super().__init__(
            message,
            recoverable=False,
            context={"resource_type": resource_type, "resource_id": resource_id},
        )
        self.resource_type = resource_type
        self.resource_id = resource_id


# =============================================================================
# Storage Errors
# =============================================================================


class StorageError(DocBlocksError):
    """Errors in the persistence or object storage layer."""

    def __init__(
        self,
        message: str,
        *,
        operation: str | None = None,
        path: str | None = None,
        **kwargs: Any,
    ) -> None:
        context = kwargs.pop("context", {})
        if operation:
            context["operation"] = operation
        if path:
            context["path"] = _truncate(path, 200)
        super().__init__(message, recoverable=False, context=context, **kwargs)


# =============================================================================
# LLM Errors
# =============================================================================


class LLMError(DocBlocksError):
    """LLM operation failed.

    Base class for all content-generation provider errors.
    """

    def __init__(
        self,
        message: str,
        *,
        provider: str | None = None,
        model: str | None = None,
        recoverable: bool = False,
        **kwargs: Any,
    ) -> None:
        context = kwargs.pop("context", {})
        if provider:
            context["provider"] = provider
        if model:
            context["model"] = model
        super().__init__(message, recoverable=recoverable, context=context)
        self.provider = provider
        self.model = model


class LLMConnectionError(LLMError):
    """Cannot connect to LLM provider."""

    def __init__(
        self,
        message: str,
        *,
        provider: str | None = None,
        url: str | None = None,
        suggestion: str | None = None,
    ) -> None:
        super().__init__(
            message,
            provider=provider,
            recoverable=True,
            context={"url": url, "suggestion": suggestion},
        )


class LLMTimeoutError(LLMError):
    """LLM request timed out."""

    def __init__(
        self,
        message: str,
        *,
        provider: str | None = None,
        timeout_seconds: float | None = None,
    ) -> None:
        super().__init__(
            message,
            provider=provider,
            recoverable=True,
            context={"timeout_seconds": timeout_seconds},
        )


class ContentGenerationError(LLMError):
    """The provider answered, but not with a usable payload."""

    def __init__(
        self,
        message: str,
        *,
        stage: str | None = None,
        response_preview: str | None = None,
    ) -> None:
        super().__init__(
            message,
            recoverable=True,
            context={
                "stage": stage,
                "response_preview": _truncate(response_preview, 200),
            },
        )
        self.stage = stage


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigurationError(DocBlocksError):
    """Configuration or setup issue."""

    def __init__(
        self,
        message: str,
        *,
        setting: str | None = None,
        expected: str | None = None,
        suggestion: str | None = None,
    ) -> None:
        super().__init__(
            message,
            recoverable=False,
            context={
                "setting": setting,
                "expected": expected,
                "suggestion": suggestion,
            },
        )


# =============================================================================
# Helpers
# =============================================================================


def _truncate(value: str | None, max_len: int) -> str | None:
    """Truncate a string value for safe logging."""
    if value is None:
        return None
    if len(value) <= max_len:
        return value
    return value[:max_len] + "..."


# =============================================================================
# Error Response Helpers
# =============================================================================


@dataclass
class ErrorResponse:
    """Structured error response for the CLI and API layers."""

    error_type: str
    message: str
    recoverable: bool = False
    details: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result = {
            "error": {
                "type": self.error_type,
                "message": self.message,
                "recoverable": self.recoverable,
            }
        }
        if self.details:
            result["error"]["details"] = self.details
        return result


def error_response(exc: Exception) -> ErrorResponse:
    """Convert an exception to a structured error response."""
    if isinstance(exc, DocBlocksError):
        return ErrorResponse(
            error_type=type(exc).__name__.lower().replace("error", ""),
            message=exc.message,
            recoverable=exc.recoverable,
            details={k: v for k, v in exc.context.items() if v is not None},
        )

    return ErrorResponse(
        error_type="internal",
        message=str(exc) if str(exc) else "An unexpected error occurred",
        recoverable=False,
    )


# =============================================================================
# Error Code Mapping
# =============================================================================


# Map domain errors to stable codes (also used as CLI exit statuses)
ERROR_CODES: dict[type[DocBlocksError], int] = {
    ValidationError: 10,
    DuplicateBlockIdentifier: 11,
    NotFoundError: 12,
    StorageError: 20,
    LLMError: 30,
    LLMConnectionError: 31,
    LLMTimeoutError: 32,
    ContentGenerationError: 33,
    ConfigurationError: 40,
}


def get_error_code(exc: DocBlocksError) -> int:
    """Get the stable code for a domain error."""
    if type(exc) in ERROR_CODES:
        return ERROR_CODES[type(exc)]
    for error_type, code in ERROR_CODES.items():
        if isinstance(exc, error_type):
            return code
    return 1
