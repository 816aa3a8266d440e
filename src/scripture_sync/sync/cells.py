"""Work units for reconciliation and overlay runs."""

from collections.abc import Sequence
from dataclasses import dataclass

from scripture_sync.domain.entities.book import Book, Chapter
from scripture_sync.domain.interfaces.corpus_store import ICorpusStore
from scripture_sync.error_codes import ErrorCode
from scripture_sync.exceptions import BookNotFoundError, StoreError
from scripture_sync.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class ChapterCell:
    """A (book, chapter) pair, optionally bound to one overlay translation."""

    book: Book
    chapter: Chapter
    translation: str

    @property
    def label(self) -> str:
        return f"{self.chapter.label} [{self.translation}]"


def plan_chapters(
    store: ICorpusStore,
    books: Sequence[Book],
    start_book: str | None = None,
    start_chapter: int | None = None,
) -> list[tuple[Book, Chapter]]:
    """List active (book, chapter) pairs in canonical order.

    ``start_book``/``start_chapter`` resume a long run part way through: books
    before ``start_book`` are dropped, and chapters of ``start_book`` before
    ``start_chapter`` are dropped.
    """
    ordered = sorted(books, key=lambda book: book.order)
    if start_book is not None:
        names = [book.name for book in ordered]
        if start_book not in names:
            msg = f"Start book not found among selected books: {start_book}"
            raise BookNotFoundError(
                msg,
                suggestion="Check the spelling; book names match the seeded corpus (e.g. 'Song of Solomon')",
                error_code=ErrorCode.CFG_BOOK_NOT_FOUND.value,
            )
        ordered = ordered[names.index(start_book) :]

    pairs: list[tuple[Book, Chapter]] = []
    for book in ordered:
        for chapter in store.find_chapters(book.id):
            if (
                start_chapter is not None
                and book.name == start_book
                and chapter.chapter_number < start_chapter
            ):
                continue
            pairs.append((book, chapter))
    return pairs


def chapter_cells(
    pairs: Sequence[tuple[Book, Chapter]], translation: str
) -> list[ChapterCell]:
    return [ChapterCell(book, chapter, translation) for book, chapter in pairs]



def final_verse_count(store: ICorpusStore, translation: str) -> int | None:
    """Active verse count after a pass, or None when the store cannot answer."""
    try:
        return store.count_verses(translation=translation)
    except StoreError as e:
        logger.warning("final_count_unavailable", translation=translation, error=e.message)
        return None


__all__ = ["ChapterCell", "chapter_cells", "final_verse_count", "plan_chapters"]
