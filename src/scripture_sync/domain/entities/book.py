"""Domain entities for books and chapters."""

from __future__ import annotations

from dataclasses import dataclass, replace


@dataclass(frozen=True)
class Book:
    """A canonical book, seeded once and only ever soft-deactivated."""

    id: str
    name: str
    order: int
    chapters: int
    is_active: bool = True

    def __post_init__(self) -> None:
        """Validate entity invariants."""
        if not self.name:
            raise ValueError("Book name cannot be empty")
        if self.chapters < 1:
            raise ValueError(f"Book {self.name} must declare at least one chapter")


@dataclass(frozen=True)
class Chapter:
    """A chapter owned by a book.

    ``verses`` is the declared verse count. It is a cached projection that the
    reconciler corrects when the remote source reports a different size.
    """

    id: str
    book_id: str
    book_name: str
    chapter_number: int
    verses: int
    is_active: bool = True

    def __post_init__(self) -> None:
        """Validate entity invariants."""
        if self.chapter_number < 1:
            raise ValueError("Chapter numbers are 1-based")
        if self.verses < 0:
            raise ValueError("Declared verse count cannot be negative")

    def with_verse_count(self, verses: int) -> Chapter:
        """Return a copy carrying a corrected verse count."""
        return replace(self, verses=verses)

    @property
    def label(self) -> str:
        return f"{self.book_name} {self.chapter_number}"
