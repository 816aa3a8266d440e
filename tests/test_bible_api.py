"""Tests for the bible-api.com source adapter."""

import httpx
import pytest
import respx

from scripture_sync.config_models import RetryConfig
from scripture_sync.exceptions import SourceConfigurationError
from scripture_sync.providers.bible_api import BibleApiSource
from scripture_sync.utils.resilience import FixedIntervalRateLimiter

BASE_URL = "https://bible-api.com"

CHAPTER_PAYLOAD = {
    "reference": "John 3",
    "verses": [
        {"book_name": "John", "chapter": 3, "verse": 1, "text": "Now there was a man of the Pharisees named Nicodemus.\n"},
        {"book_name": "John", "chapter": 3, "verse": 2, "text": "He came to Jesus by night.\n"},
        {"book_name": "John", "chapter": 3, "verse": 3, "text": "Jesus answered him.\n"},
    ],
    "translation_id": "web",
}


@pytest.fixture
def sleeps():
    return []


@pytest.fixture
def limiter():
    return FixedIntervalRateLimiter(interval=0.0)


@pytest.fixture
def source(limiter, sleeps):
    src = BibleApiSource(
        BASE_URL,
        rate_limiter=limiter,
        retry_config=RetryConfig(max_attempts=3, base_delay=2.0),
        sleep=sleeps.append,
    )
    yield src
    src.close()


class TestFetchChapter:
    """Chapter fetches and response validation."""

    @respx.mock
    def test_parses_verses_and_lowercases_translation(self, source):
        route = respx.get(f"{BASE_URL}/John+3", params={"translation": "web"}).mock(
            return_value=httpx.Response(200, json=CHAPTER_PAYLOAD)
        )

        result = source.fetch_chapter("John", 3, "WEB")

        assert result.ok
        assert result.attempts == 1
        assert [v.verse_number for v in result.value] == [1, 2, 3]
        assert result.value[1].text == "He came to Jesus by night."
        assert route.call_count == 1
        request = route.calls.last.request
        assert request.headers["User-Agent"] == "Jevah-Bible-App/1.0"

    @respx.mock
    def test_drops_entries_without_text_and_duplicates(self, source):
        payload = {
            "verses": [
                {"verse": 2, "text": "second"},
                {"verse": 1, "text": "first"},
                {"verse": 2, "text": "second again"},
                {"verse": 3, "text": "   "},
                {"verse": "4", "text": "not an int"},
            ]
        }
        respx.get(f"{BASE_URL}/John+3").mock(return_value=httpx.Response(200, json=payload))

        result = source.fetch_chapter("John", 3, "WEB")

        assert [(v.verse_number, v.text) for v in result.value] == [
            (1, "first"),
            (2, "second"),
        ]

    @respx.mock
    def test_fails_twice_then_succeeds_on_third_attempt(self, source, limiter, sleeps):
        route = respx.get(f"{BASE_URL}/John+3").mock(
            side_effect=[
                httpx.Response(503),
                httpx.ConnectError("connection refused"),
                httpx.Response(200, json=CHAPTER_PAYLOAD),
            ]
        )

        result = source.fetch_chapter("John", 3, "WEB")

        assert result.ok
        assert result.attempts == 3
        assert route.call_count == 3
        # Linear backoff: base_delay x attempt number
        assert sleeps == [2.0, 4.0]
        # Every attempt passes through the rate limiter
        assert limiter.calls == 3

    @respx.mock
    def test_exhausted_retries_return_failure_without_raising(self, source):
        route = respx.get(f"{BASE_URL}/John+3").mock(return_value=httpx.Response(500))

        result = source.fetch_chapter("John", 3, "WEB")

        assert not result.ok
        assert result.value is None
        assert "HTTP 500" in result.reason
        assert result.attempts == 3
        assert route.call_count == 3

    @respx.mock
    def test_empty_verse_list_is_retried_as_failure(self, source):
        route = respx.get(f"{BASE_URL}/John+3").mock(
            return_value=httpx.Response(200, json={"verses": []})
        )

        result = source.fetch_chapter("John", 3, "WEB")

        assert not result.ok
        assert route.call_count == 3

    @respx.mock
    def test_malformed_body_is_retried(self, source):
        route = respx.get(f"{BASE_URL}/John+3").mock(
            side_effect=[
                httpx.Response(200, text="<html>busy</html>"),
                httpx.Response(200, json=CHAPTER_PAYLOAD),
            ]
        )

        result = source.fetch_chapter("John", 3, "WEB")

        assert result.ok
        assert result.attempts == 2
        assert route.call_count == 2

    @respx.mock
    def test_not_found_is_not_retried(self, source, sleeps):
        route = respx.get(f"{BASE_URL}/John+3").mock(return_value=httpx.Response(404))

        result = source.fetch_chapter("John", 3, "NIV")

        assert not result.ok
        assert "not available" in result.reason
        assert route.call_count == 1
        assert sleeps == []

    @respx.mock
    def test_attempt_cap_of_one_issues_single_call(self, limiter, sleeps):
        route = respx.get(f"{BASE_URL}/John+3").mock(return_value=httpx.Response(502))
        with BibleApiSource(
            BASE_URL,
            rate_limiter=limiter,
            retry_config=RetryConfig(max_attempts=1, base_delay=2.0),
            sleep=sleeps.append,
        ) as single:
            result = single.fetch_chapter("John", 3, "WEB")

        assert not result.ok
        assert route.call_count == 1
        assert sleeps == []


class TestFetchVerse:
    """Single-verse fetches."""

    @respx.mock
    def test_reads_top_level_text(self, source):
        route = respx.get(f"{BASE_URL}/John+3:16", params={"translation": "kjv"}).mock(
            return_value=httpx.Response(
                200, json={"text": "For God so loved the world...\n", "verses": []}
            )
        )

        result = source.fetch_verse("John", 3, 16, "KJV")

        assert result.ok
        assert result.value == "For God so loved the world..."
        assert route.called

    @respx.mock
    def test_falls_back_to_first_verse_entry(self, source):
        respx.get(f"{BASE_URL}/John+3:16").mock(
            return_value=httpx.Response(
                200, json={"verses": [{"verse": 16, "text": "For God so loved"}]}
            )
        )

        result = source.fetch_verse("John", 3, 16, "ASV")

        assert result.value == "For God so loved"

    @respx.mock
    def test_missing_text_is_failure(self, source):
        respx.get(f"{BASE_URL}/John+3:16").mock(
            return_value=httpx.Response(200, json={"text": ""})
        )

        result = source.fetch_verse("John", 3, 16, "DARBY")

        assert not result.ok
        assert result.reason == "No verse text in response"


def test_rejects_non_http_endpoint(limiter):
    with pytest.raises(SourceConfigurationError):
        BibleApiSource("ftp://bible-api.com", rate_limiter=limiter)
