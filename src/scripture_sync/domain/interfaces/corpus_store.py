"""Interface for corpus persistence operations."""

from abc import ABC, abstractmethod
from collections.abc import Iterable

from ..entities.book import Book, Chapter
from ..entities.verse import Verse, VerseKey


class ICorpusStore(ABC):
    """Interface for the persisted book/chapter/verse corpus.

    Every read filters on ``is_active = true``: soft-deleted records never
    take part in reconciliation or completeness computations. Reads raise
    ``StoreReadError`` and writes raise ``StoreWriteError`` on failure.
    """

    @abstractmethod
    def ping(self) -> None:
        """Verify the store is reachable.

        Raises:
            StoreConnectionError: If the store cannot be reached
        """

    @abstractmethod
    def find_books(self, names: Iterable[str] | None = None) -> list[Book]:
        """Return active books in canonical order, optionally limited to names."""

    @abstractmethod
    def find_book(self, name: str) -> Book | None:
        """Return the active book with this name, if any."""

    @abstractmethod
    def find_chapters(self, book_id: str) -> list[Chapter]:
        """Return the active chapters of a book ordered by chapter number."""

    @abstractmethod
    def find_chapter(self, book_id: str, chapter_number: int) -> Chapter | None:
        """Return one active chapter, if any."""

    @abstractmethod
    def find_verses(
        self, book_name: str, chapter_number: int, translation: str
    ) -> list[Verse]:
        """Return active verses for a chapter in one translation, by verse number."""

    @abstractmethod
    def find_verse(self, key: VerseKey) -> Verse | None:
        """Return the active verse with this composite key, if any."""

    @abstractmethod
    def count_verses(
        self,
        translation: str | None = None,
        book_name: str | None = None,
        chapter_number: int | None = None,
    ) -> int:
        """Count active verses matching the given filter."""

    @abstractmethod
    def count_verses_by_translation(self) -> dict[str, int]:
        """Count active verses grouped by translation code."""

    @abstractmethod
    def insert_verse(self, verse: Verse) -> Verse:
        """Insert a new verse and return it with its assigned id."""

    @abstractmethod
    def update_verse_text(self, verse_id: str, text: str) -> None:
        """Replace the text of an existing verse."""

    @abstractmethod
    def upsert_verse(self, verse: Verse) -> bool:
        """Insert or update keyed on the composite verse key.

        Returns:
            True if a new record was inserted, False if an existing one was updated
        """

    @abstractmethod
    def update_chapter_verse_count(self, chapter_id: str, verses: int) -> None:
        """Overwrite a chapter's declared verse count."""
