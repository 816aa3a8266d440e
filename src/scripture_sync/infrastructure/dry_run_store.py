"""Store wrapper that reads through and records writes without applying them."""

from collections.abc import Iterable
from dataclasses import dataclass, replace
from typing import Any

from scripture_sync.domain.entities.book import Book, Chapter
from scripture_sync.domain.entities.verse import Verse, VerseKey
from scripture_sync.domain.interfaces.corpus_store import ICorpusStore
from scripture_sync.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class RecordedWrite:
    operation: str
    target: str
    payload: dict[str, Any]


class DryRunCorpusStore(ICorpusStore):
    """Delegate reads to a real store; record writes instead of performing them."""

    def __init__(self, inner: ICorpusStore):
        self.inner = inner
        self.writes: list[RecordedWrite] = []

    def _record(self, operation: str, target: str, **payload: Any) -> None:
        self.writes.append(RecordedWrite(operation, target, payload))
        logger.debug("dry_run_write", operation=operation, target=target)

    def ping(self) -> None:
        self.inner.ping()

    def find_books(self, names: Iterable[str] | None = None) -> list[Book]:
        return self.inner.find_books(names)

    def find_book(self, name: str) -> Book | None:
        return self.inner.find_book(name)

    def find_chapters(self, book_id: str) -> list[Chapter]:
        return self.inner.find_chapters(book_id)

    def find_chapter(self, book_id: str, chapter_number: int) -> Chapter | None:
        return self.inner.find_chapter(book_id, chapter_number)

    def find_verses(
        self, book_name: str, chapter_number: int, translation: str
    ) -> list[Verse]:
        return self.inner.find_verses(book_name, chapter_number, translation)

    def find_verse(self, key: VerseKey) -> Verse | None:
        return self.inner.find_verse(key)

    def count_verses(
        self,
        translation: str | None = None,
        book_name: str | None = None,
        chapter_number: int | None = None,
    ) -> int:
        return self.inner.count_verses(translation, book_name, chapter_number)

    def count_verses_by_translation(self) -> dict[str, int]:
        return self.inner.count_verses_by_translation()

    def insert_verse(self, verse: Verse) -> Verse:
        self._record("insert_verse", str(verse.key), text=verse.text)
        return replace(verse, id=f"dry-run-{len(self.writes)}")

    def update_verse_text(self, verse_id: str, text: str) -> None:
        self._record("update_verse_text", verse_id, text=text)

    def upsert_verse(self, verse: Verse) -> bool:
        self._record("upsert_verse", str(verse.key), text=verse.text)
        return self.inner.find_verse(verse.key) is None

    def update_chapter_verse_count(self, chapter_id: str, verses: int) -> None:
        self._record("update_chapter_verse_count", chapter_id, verses=verses)


__all__ = ["DryRunCorpusStore", "RecordedWrite"]
