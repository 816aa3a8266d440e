"""Pytest configuration and fixtures for the test suite."""

import pytest

from scripture_sync.cli_commands.shared import reset_cli_state
from scripture_sync.config import Config, reset_config
from scripture_sync.domain.entities.book import Book
from scripture_sync.sync.progress import RunControl
from tests.fixtures import MemoryCorpusStore, ScriptedTextSource


@pytest.fixture(autouse=True)
def _isolate_config(monkeypatch, tmp_path):
    """Keep tests independent of the developer's environment and config files."""
    for var in ("MONGODB_URI", "SCRIPTURE_SYNC_CONFIG", "BASE_TRANSLATION"):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(tmp_path)
    reset_config()
    reset_cli_state()
    yield
    reset_config()
    reset_cli_state()


@pytest.fixture
def memory_store():
    """Provide an empty in-memory corpus store."""
    return MemoryCorpusStore()


@pytest.fixture
def scripted_source():
    """Provide a scripted text source with no data."""
    return ScriptedTextSource()


@pytest.fixture
def run_control():
    return RunControl()


@pytest.fixture
def test_config(tmp_path):
    """Provide a validated config that never touches the network."""
    return Config(
        mongodb_uri="mongodb://localhost:27017/scripture-test",
        log_dir=tmp_path / "logs",
        max_workers=1,
    ).validate_config()


@pytest.fixture
def jude(memory_store) -> Book:
    """Seed a one-chapter book (25 declared verses) with verses 1-20 stored."""
    book = memory_store.add_book("Jude", order=65, chapter_sizes=[25])
    memory_store.add_verses(book, 1, range(1, 21))
    return book


@pytest.fixture
def five_chapter_book(memory_store, scripted_source) -> Book:
    """Seed a 5-chapter book with no stored verses and a source serving all of it."""
    sizes = [10, 29, 24, 21, 21]
    book = memory_store.add_book("1 John", order=62, chapter_sizes=sizes)
    for number, size in enumerate(sizes, start=1):
        scripted_source.set_chapter("1 John", number, size)
    return book
