"""Domain layer for scripture corpus reconciliation.

Entities describe the book/chapter/verse corpus; interfaces describe the two
external collaborators, the corpus store and the remote text source.
"""

from .entities import (
    Book,
    Chapter,
    FetchedVerse,
    Verse,
    VerseAddress,
    VerseKey,
    has_usable_text,
)
from .interfaces import FetchResult, ICorpusStore, ITextSource

__all__ = [
    # Entities
    "Book",
    "Chapter",
    "FetchedVerse",
    # Interfaces
    "FetchResult",
    "ICorpusStore",
    "ITextSource",
    "Verse",
    "VerseAddress",
    "VerseKey",
    "has_usable_text",
]
