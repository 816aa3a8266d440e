"""Infrastructure layer package."""

from .dry_run_store import DryRunCorpusStore
from .mongo_corpus_store import MongoCorpusStore

__all__ = [
    "DryRunCorpusStore",
    "MongoCorpusStore",
]
