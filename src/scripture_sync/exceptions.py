"""Centralized exception hierarchy for scripture-sync.

Exception Hierarchy:
    ScriptureSyncError (base)
     ConfigurationError - Configuration loading/validation errors
        BookNotFoundError - Requested book has no active record
     StoreError - Corpus store errors
        StoreConnectionError - Store unreachable (fatal, before any cell runs)
        StoreReadError - A read failed mid-run (per-cell)
        StoreWriteError - A single write failed (per-cell, not retried)
     SourceError - Remote text source errors
        TransientFetchError - Network/timeout/malformed response (retried)
        SourceConfigurationError - Provider endpoint unusable (fatal)

Fatal errors (configuration, store connection, source configuration) abort a
run before cell processing begins. Everything else is downgraded to a per-cell
error entry in the run summary.

Usage Examples:
    try:
        summary = engine.reconcile()
    except ScriptureSyncError as e:
        logger.error("run_failed", **e.to_dict())
"""

from typing import Any


class ScriptureSyncError(Exception):
    """Base exception for all scripture-sync errors.

    Attributes:
        message: Human-readable error message
        suggestion: Optional suggestion for resolving the error
        error_code: Structured error code for machine-readable handling
        context: Additional context for debugging (e.g., book, chapter)
    """

    def __init__(
        self,
        message: str,
        suggestion: str | None = None,
        error_code: str | None = None,
        context: dict[str, Any] | None = None,
    ):
        self.message = message
        self.suggestion = suggestion
        self.error_code = error_code
        self.context = context or {}
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format the error message with error code and suggestion if available."""
        parts = []
        if self.error_code:
            parts.append(f"[{self.error_code}] {self.message}")
        else:
            parts.append(self.message)
        if self.suggestion:
            parts.append(f"\nSuggestion: {self.suggestion}")
        return "".join(parts)

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for structured logging."""
        return {
            "message": self.message,
            "error_code": self.error_code,
            "suggestion": self.suggestion,
            "context": self.context,
            "type": type(self).__name__,
        }


# Configuration Errors


class ConfigurationError(ScriptureSyncError):
    """Configuration loading or validation errors.

    Raised when:
    - Config file is malformed
    - Configuration values fail validation
    - An unknown translation code is requested
    """


class BookNotFoundError(ConfigurationError):
    """A book requested by name has no active record in the store."""


# Store Errors


class StoreError(ScriptureSyncError):
    """Corpus store errors."""


class StoreConnectionError(StoreError):
    """The corpus store cannot be reached.

    Raised by the store's ping before any cell is processed.
    """


class StoreReadError(StoreError):
    """A query against the corpus store failed after the connection check.

    Recorded as a per-cell error when raised while a cell is being processed.
    """


class StoreWriteError(StoreError):
    """A single insert or update failed.

    Recorded as a per-cell error. Not retried: repeated write failures usually
    mean a structural problem such as a duplicate-key conflict.
    """


# Source Errors


class SourceError(ScriptureSyncError):
    """Remote text source errors."""


class TransientFetchError(SourceError):
    """Network error, timeout, non-2xx status, or malformed/empty body.

    Retried with linear backoff inside the source adapter and never
    propagated past it.
    """


class SourceConfigurationError(SourceError):
    """The provider endpoint cannot be resolved (fatal)."""


__all__ = [
    "BookNotFoundError",
    "ConfigurationError",
    "ScriptureSyncError",
    "SourceConfigurationError",
    "SourceError",
    "StoreConnectionError",
    "StoreError",
    "StoreReadError",
    "StoreWriteError",
    "TransientFetchError",
]
