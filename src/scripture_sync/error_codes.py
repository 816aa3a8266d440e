"""Structured error codes for machine-readable error handling.

Error codes follow the format: {DOMAIN}-{CATEGORY}-{NUMBER}

Error Domains:
    SRC - Remote text source errors (fetch, provider configuration)
    STO - Corpus store errors (connection, reads, writes)
    CFG - Configuration errors
    RUN - Run control (interruption)

Usage:
    from scripture_sync.error_codes import ErrorCode

    logger.error(
        "fetch_failed",
        error_code=ErrorCode.SRC_FETCH_FAILED.value,
        book="Romans",
        chapter=4,
    )
"""

from enum import Enum


class ErrorCode(str, Enum):
    """Structured error codes for machine-readable handling.

    All error codes inherit from str for JSON serialization compatibility.
    """

    # =========================================================================
    # Source Errors (SRC-xxx-xxx)
    # =========================================================================
    SRC_FETCH_FAILED = "SRC-FETCH-001"
    """Fetch failed after exhausting retries (network, timeout, malformed body)."""

    SRC_CONFIG_INVALID = "SRC-CONFIG-001"
    """Provider endpoint cannot be resolved."""

    # =========================================================================
    # Store Errors (STO-xxx-xxx)
    # =========================================================================
    STO_CONN_FAILED = "STO-CONN-001"
    """Corpus store is unreachable."""

    STO_READ_FAILED = "STO-READ-001"
    """A read against the corpus store failed mid-run."""

    STO_WRITE_FAILED = "STO-WRITE-001"
    """A write against the corpus store failed (e.g. duplicate key)."""

    # =========================================================================
    # Configuration Errors (CFG-xxx-xxx)
    # =========================================================================
    CFG_INVALID = "CFG-INVALID-001"
    """Configuration failed validation."""

    CFG_UNKNOWN_TRANSLATION = "CFG-TRANSLATION-001"
    """Requested translation code is not in the catalog."""

    CFG_BOOK_NOT_FOUND = "CFG-BOOK-001"
    """Requested book has no active record in the store."""

    # =========================================================================
    # Run Control (RUN-xxx-xxx)
    # =========================================================================
    RUN_INTERRUPTED = "RUN-INTERRUPT-001"
    """Run was interrupted before the cell was processed."""


__all__ = ["ErrorCode"]
