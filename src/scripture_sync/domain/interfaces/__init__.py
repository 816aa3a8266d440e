"""Domain interfaces package."""

from .corpus_store import ICorpusStore
from .text_source import FetchResult, ITextSource

__all__ = [
    "FetchResult",
    "ICorpusStore",
    "ITextSource",
]
