"""Test fixtures package."""

from .memory_corpus_store import MemoryCorpusStore
from .scripted_text_source import ScriptedTextSource

__all__ = [
    "MemoryCorpusStore",
    "ScriptedTextSource",
]
