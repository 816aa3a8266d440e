"""Remote verse text providers."""

from .bible_api import BibleApiSource

__all__ = ["BibleApiSource"]
