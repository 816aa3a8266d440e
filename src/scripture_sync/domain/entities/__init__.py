"""Domain entities package."""

from .book import Book, Chapter
from .verse import FetchedVerse, Verse, VerseAddress, VerseKey, has_usable_text

__all__ = [
    "Book",
    "Chapter",
    "FetchedVerse",
    "Verse",
    "VerseAddress",
    "VerseKey",
    "has_usable_text",
]
