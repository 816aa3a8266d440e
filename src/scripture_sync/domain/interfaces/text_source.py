"""Interface for the remote verse text provider."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Generic, TypeVar

from ..entities.verse import FetchedVerse

T = TypeVar("T")


@dataclass(frozen=True)
class FetchResult(Generic[T]):
    """Outcome of a fetch: a value, or a typed "fetch failed" with its reason.

    Callers treat a failure as "no data available for this reference" and move
    on; the source adapter never raises past its boundary.
    """

    value: T | None = None
    reason: str | None = None
    attempts: int = 0

    @property
    def ok(self) -> bool:
        return self.reason is None and self.value is not None

    @classmethod
    def success(cls, value: T, attempts: int = 1) -> FetchResult[T]:
        return cls(value=value, attempts=attempts)

    @classmethod
    def failure(cls, reason: str, attempts: int = 0) -> FetchResult[T]:
        return cls(reason=reason, attempts=attempts)


class ITextSource(ABC):
    """Remote provider treated as ground truth for verse text."""

    @abstractmethod
    def fetch_chapter(
        self, book_name: str, chapter_number: int, translation: str
    ) -> FetchResult[list[FetchedVerse]]:
        """Fetch every verse of a chapter.

        A successful result carries at least one verse with non-empty text.
        """

    @abstractmethod
    def fetch_verse(
        self,
        book_name: str,
        chapter_number: int,
        verse_number: int,
        translation: str,
    ) -> FetchResult[str]:
        """Fetch the text of a single verse."""
