"""HTTP source adapter for bible-api.com style verse providers."""

from __future__ import annotations

import time
from collections.abc import Callable
from types import TracebackType
from typing import Any, TypeVar

import httpx

from scripture_sync.config_models import RetryConfig
from scripture_sync.domain.entities.verse import FetchedVerse
from scripture_sync.domain.interfaces.text_source import FetchResult, ITextSource
from scripture_sync.error_codes import ErrorCode
from scripture_sync.exceptions import (
    SourceConfigurationError,
    SourceError,
    TransientFetchError,
)
from scripture_sync.providers.retry_utils import (
    describe_http_error,
    is_not_found_status,
    is_retryable_status,
)
from scripture_sync.utils.logging import get_logger
from scripture_sync.utils.resilience import (
    FixedIntervalRateLimiter,
    create_linear_retrying,
)

logger = get_logger(__name__)

T = TypeVar("T")


class BibleApiSource(ITextSource):
    """Fetch verse text from a bible-api.com compatible endpoint.

    References are addressed as ``{book}+{chapter}`` or
    ``{book}+{chapter}:{verse}`` with the translation passed as a lower-case
    ``translation`` query parameter. Every network call passes through the
    shared rate limiter. Transient failures are retried with linear backoff;
    once retries are exhausted a ``FetchResult`` failure is returned instead
    of raising.
    """

    def __init__(
        self,
        base_url: str,
        rate_limiter: FixedIntervalRateLimiter,
        retry_config: RetryConfig | None = None,
        timeout: float = 15.0,
        user_agent: str = "Jevah-Bible-App/1.0",
        client: httpx.Client | None = None,
        sleep: Callable[[float], None] | None = None,
    ):
        """
        Initialize source.

        Args:
            base_url: Provider base URL
            rate_limiter: Limiter shared by every caller in the run
            retry_config: Attempt cap and linear backoff unit
            timeout: Request timeout in seconds
            user_agent: User-Agent header sent with each request
            client: Optional preconfigured httpx client
            sleep: Backoff sleep function (for testing)
        """
        if not base_url.startswith(("http://", "https://")):
            msg = f"Cannot resolve provider endpoint: {base_url!r}"
            raise SourceConfigurationError(
                msg,
                suggestion="Set source_base_url to an http(s) URL",
                error_code=ErrorCode.SRC_CONFIG_INVALID.value,
            )

        self.base_url = base_url.rstrip("/")
        self.rate_limiter = rate_limiter
        self.retry_config = retry_config or RetryConfig()
        self._sleep = sleep or time.sleep
        self._owns_client = client is None
        self.session = client or httpx.Client(
            timeout=timeout,
            headers={"User-Agent": user_agent, "Accept": "application/json"},
            limits=httpx.Limits(max_keepalive_connections=5, max_connections=10),
            follow_redirects=True,
        )
        logger.debug(
            "bible_api_source_initialized",
            base_url=self.base_url,
            timeout=timeout,
            max_attempts=self.retry_config.max_attempts,
        )

    def __enter__(self) -> BibleApiSource:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()

    def close(self) -> None:
        if self._owns_client:
            self.session.close()

    def fetch_chapter(
        self, book_name: str, chapter_number: int, translation: str
    ) -> FetchResult[list[FetchedVerse]]:
        reference = f"{book_name}+{chapter_number}"
        return self._fetch(reference, translation, self._parse_chapter)

    def fetch_verse(
        self,
        book_name: str,
        chapter_number: int,
        verse_number: int,
        translation: str,
    ) -> FetchResult[str]:
        reference = f"{book_name}+{chapter_number}:{verse_number}"
        return self._fetch(reference, translation, self._parse_verse)

    def _fetch(
        self,
        reference: str,
        translation: str,
        parse: Callable[[Any], T],
    ) -> FetchResult[T]:
        attempts = 0
        retrying = create_linear_retrying(
            max_attempts=self.retry_config.max_attempts,
            base_delay=self.retry_config.base_delay,
            retry_exceptions=(TransientFetchError,),
            sleep=self._sleep,
        )
        try:
            for attempt in retrying:
                with attempt:
                    attempts += 1
                    payload = self._request(reference, translation)
                    value = parse(payload)
            if attempts > 1:
                logger.info(
                    "fetch_succeeded_after_retry",
                    reference=reference,
                    translation=translation,
                    attempts=attempts,
                )
            return FetchResult.success(value, attempts=attempts)
        except SourceError as e:
            logger.warning(
                "fetch_failed",
                reference=reference,
                translation=translation,
                attempts=attempts,
                error=e.message,
                error_code=ErrorCode.SRC_FETCH_FAILED.value,
            )
            return FetchResult.failure(e.message, attempts=attempts)

    def _request(self, reference: str, translation: str) -> Any:
        self.rate_limiter.throttle()
        url = f"{self.base_url}/{reference}"
        logger.debug("fetch_request", reference=reference, translation=translation)

        try:
            response = self.session.get(
                url, params={"translation": translation.lower()}
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            reason = describe_http_error(e)
            if is_retryable_status(status):
                raise TransientFetchError(reason) from e
            if is_not_found_status(status):
                reason = f"{reason}: reference or translation not available"
            raise SourceError(reason) from e
        except httpx.HTTPError as e:
            raise TransientFetchError(describe_http_error(e)) from e

        try:
            return response.json()
        except ValueError as e:
            msg = f"Invalid JSON response: {e}"
            raise TransientFetchError(msg) from e

    @staticmethod
    def _parse_chapter(payload: Any) -> list[FetchedVerse]:
        entries = payload.get("verses") if isinstance(payload, dict) else None
        if not isinstance(entries, list):
            msg = "Malformed response: no verses array"
            raise TransientFetchError(msg)

        verses: dict[int, FetchedVerse] = {}
        for entry in entries:
            if not isinstance(entry, dict):
                continue
            number = entry.get("verse", entry.get("verseNumber"))
            text = entry.get("text", entry.get("content"))
            if not isinstance(number, int) or number < 1:
                continue
            if not isinstance(text, str) or not text.strip():
                continue
            verses.setdefault(number, FetchedVerse(number, text.strip()))

        if not verses:
            msg = "No verses found in response"
            raise TransientFetchError(msg)
        return [verses[n] for n in sorted(verses)]

    @staticmethod
    def _parse_verse(payload: Any) -> str:
        text = None
        if isinstance(payload, dict):
            text = payload.get("text")
            if not (isinstance(text, str) and text.strip()):
                entries = payload.get("verses")
                if isinstance(entries, list) and entries and isinstance(entries[0], dict):
                    text = entries[0].get("text")
        if not isinstance(text, str) or not text.strip():
            msg = "No verse text in response"
            raise TransientFetchError(msg)
        return text.strip()


__all__ = ["BibleApiSource"]
