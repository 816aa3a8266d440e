"""Domain entities for verses and verse addressing."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, order=True)
class VerseAddress:
    """A (book, chapter, verse) address, independent of translation."""

    book_name: str
    chapter_number: int
    verse_number: int

    def __str__(self) -> str:
        return f"{self.book_name} {self.chapter_number}:{self.verse_number}"

    def in_translation(self, translation: str) -> VerseKey:
        return VerseKey(
            self.book_name, self.chapter_number, self.verse_number, translation
        )


@dataclass(frozen=True, order=True)
class VerseKey:
    """Composite identity of a verse record.

    Unique among active verses: (bookName, chapterNumber, verseNumber, translation).
    """

    book_name: str
    chapter_number: int
    verse_number: int
    translation: str

    @property
    def address(self) -> VerseAddress:
        return VerseAddress(self.book_name, self.chapter_number, self.verse_number)

    def __str__(self) -> str:
        return f"{self.address} ({self.translation})"


@dataclass(frozen=True)
class Verse:
    """A persisted verse record in one translation.

    ``book_id`` is a denormalized back-reference to the owning book, copied at
    creation time from the chapter (or base verse) it was derived from.
    Stored text may be blank or a placeholder in legacy records; callers judge
    it with ``has_usable_text`` rather than trusting its presence.
    """

    book_id: str
    book_name: str
    chapter_number: int
    verse_number: int
    text: str
    translation: str
    is_active: bool = True
    id: str | None = None

    def __post_init__(self) -> None:
        """Validate entity invariants."""
        if self.verse_number < 1:
            raise ValueError("Verse numbers are 1-based")
        if not self.translation:
            raise ValueError("Verse translation code cannot be empty")

    @property
    def key(self) -> VerseKey:
        return VerseKey(
            self.book_name, self.chapter_number, self.verse_number, self.translation
        )

    @property
    def address(self) -> VerseAddress:
        return VerseAddress(self.book_name, self.chapter_number, self.verse_number)


@dataclass(frozen=True)
class FetchedVerse:
    """A verse as returned by the remote source."""

    verse_number: int
    text: str


def has_usable_text(text: str | None, min_length: int) -> bool:
    """Return True when text is long enough to count as real content.

    Short or placeholder text is indistinguishable from "not yet fetched", so
    anything whose stripped length is at or below ``min_length`` is treated as
    absent, both when judging existing records and when accepting fetched text.
    """
    if text is None:
        return False
    return len(text.strip()) > min_length
