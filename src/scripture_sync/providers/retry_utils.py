"""Shared retry classification for HTTP text providers."""

import httpx

# HTTP status codes that should be retried
HTTP_STATUS_RETRYABLE = {408, 425, 429, 500, 502, 503, 504}

# Status codes that mean "this reference or translation does not exist";
# asking again will not change the answer
HTTP_STATUS_NOT_FOUND = {404}


def is_retryable_status(status_code: int) -> bool:
    """Check if HTTP status code should be retried.

    Args:
        status_code: HTTP status code

    Returns:
        True if status code is retryable (timeouts, 429, 5xx)
    """
    return status_code in HTTP_STATUS_RETRYABLE or status_code >= 500


def is_not_found_status(status_code: int) -> bool:
    return status_code in HTTP_STATUS_NOT_FOUND


def describe_http_error(error: httpx.HTTPError) -> str:
    """Short human-readable reason for a failed request."""
    if isinstance(error, httpx.TimeoutException):
        return f"timeout: {type(error).__name__}"
    if isinstance(error, httpx.HTTPStatusError):
        return f"HTTP {error.response.status_code}"
    if isinstance(error, httpx.ConnectError):
        return f"connection error: {error}"
    return f"{type(error).__name__}: {error}"


__all__ = [
    "HTTP_STATUS_NOT_FOUND",
    "HTTP_STATUS_RETRYABLE",
    "describe_http_error",
    "is_not_found_status",
    "is_retryable_status",
]
