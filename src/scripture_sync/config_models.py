"""Config sub-models for retry and rate limiting."""

from __future__ import annotations

from pydantic import BaseModel, Field


class RetryConfig(BaseModel):
    """Retry policy for outbound fetches.

    Backoff is linear: the wait before retry ``k`` is ``base_delay * k``.
    """

    max_attempts: int = Field(default=3, ge=1)
    base_delay: float = Field(default=2.0, ge=0.0)


class RateLimitConfig(BaseModel):
    """Minimum spacing between outbound fetches, shared by every caller."""

    interval: float = Field(default=0.3, ge=0.0)


__all__ = [
    "RateLimitConfig",
    "RetryConfig",
]
