"""Tests for the MongoDB store's document mapping and error translation."""

from unittest.mock import MagicMock

import pytest
from bson import ObjectId
from pymongo.errors import (
    AutoReconnect,
    DuplicateKeyError,
    ExecutionTimeout,
    ServerSelectionTimeoutError,
)

from scripture_sync.domain.entities.verse import Verse, VerseKey, has_usable_text
from scripture_sync.error_codes import ErrorCode
from scripture_sync.exceptions import (
    StoreConnectionError,
    StoreError,
    StoreReadError,
    StoreWriteError,
)
from scripture_sync.infrastructure.dry_run_store import DryRunCorpusStore
from scripture_sync.infrastructure.mongo_corpus_store import MongoCorpusStore

BOOK_ID = ObjectId()


@pytest.fixture
def collections():
    return {
        "biblebooks": MagicMock(name="biblebooks"),
        "biblechapters": MagicMock(name="biblechapters"),
        "bibleverses": MagicMock(name="bibleverses"),
    }


@pytest.fixture
def client(collections):
    client = MagicMock(name="client")
    db = client.get_default_database.return_value
    db.name = "jevah-app"
    db.__getitem__.side_effect = collections.__getitem__
    return client


@pytest.fixture
def store(client):
    return MongoCorpusStore("mongodb://localhost:27017/jevah-app", client=client)


def _verse(text="Grace to you"):
    return Verse(
        id=None,
        book_id=str(BOOK_ID),
        book_name="Jude",
        chapter_number=1,
        verse_number=2,
        text=text,
        translation="KJV",
    )


class TestReads:
    def test_find_verses_maps_camel_case_documents(self, store, collections):
        collections["bibleverses"].find.return_value.sort.return_value = [
            {
                "_id": ObjectId(),
                "bookId": BOOK_ID,
                "bookName": "Jude",
                "chapterNumber": 1,
                "verseNumber": 1,
                "text": None,
                "translation": "WEB",
                "isActive": True,
            }
        ]

        verses = store.find_verses("Jude", 1, "WEB")

        query = collections["bibleverses"].find.call_args.args[0]
        assert query == {
            "bookName": "Jude",
            "chapterNumber": 1,
            "translation": "WEB",
            "isActive": True,
        }
        assert verses[0].book_id == str(BOOK_ID)
        assert verses[0].text == ""
        assert not has_usable_text(verses[0].text, 5)

    def test_find_chapters_queries_by_object_id(self, store, collections):
        collections["biblechapters"].find.return_value.sort.return_value = []

        store.find_chapters(str(BOOK_ID))

        query = collections["biblechapters"].find.call_args.args[0]
        assert query["bookId"] == BOOK_ID

    def test_counts_by_translation(self, store, collections):
        collections["bibleverses"].aggregate.return_value = [
            {"_id": "WEB", "count": 31102},
            {"_id": "KJV", "count": 31100},
        ]

        assert store.count_verses_by_translation() == {"WEB": 31102, "KJV": 31100}

    def test_find_verses_errors_are_translated(self, store, collections):
        collections["bibleverses"].find.side_effect = AutoReconnect("connection reset")

        with pytest.raises(StoreReadError) as exc_info:
            store.find_verses("Jude", 1, "WEB")

        assert isinstance(exc_info.value, StoreError)
        assert exc_info.value.error_code == ErrorCode.STO_READ_FAILED.value
        assert exc_info.value.context == {
            "book": "Jude",
            "chapter": 1,
            "translation": "WEB",
        }

    def test_errors_raised_while_iterating_cursor_are_translated(
        self, store, collections
    ):
        cursor = collections["bibleverses"].find.return_value.sort.return_value
        cursor.__iter__.side_effect = AutoReconnect("cursor killed")

        with pytest.raises(StoreReadError):
            store.find_verses("Jude", 1, "WEB")

    def test_count_errors_are_translated(self, store, collections):
        collections["bibleverses"].count_documents.side_effect = ExecutionTimeout("slow")

        with pytest.raises(StoreReadError):
            store.count_verses(translation="KJV")


class TestWrites:
    def test_upsert_reports_insert(self, store, collections):
        collections["bibleverses"].update_one.return_value.upserted_id = ObjectId()

        assert store.upsert_verse(_verse()) is True

        filter_, update = collections["bibleverses"].update_one.call_args.args
        assert filter_ == {
            "bookName": "Jude",
            "chapterNumber": 1,
            "verseNumber": 2,
            "translation": "KJV",
            "isActive": True,
        }
        assert update["$set"]["text"] == "Grace to you"
        assert update["$setOnInsert"]["bookId"] == BOOK_ID
        assert collections["bibleverses"].update_one.call_args.kwargs["upsert"] is True

    def test_upsert_reports_update(self, store, collections):
        collections["bibleverses"].update_one.return_value.upserted_id = None

        assert store.upsert_verse(_verse()) is False

    def test_insert_returns_stored_id(self, store, collections):
        inserted = ObjectId()
        collections["bibleverses"].insert_one.return_value.inserted_id = inserted

        stored = store.insert_verse(_verse())

        assert stored.id == str(inserted)
        doc = collections["bibleverses"].insert_one.call_args.args[0]
        assert doc["verseNumber"] == 2
        assert doc["createdAt"] == doc["updatedAt"]

    def test_write_errors_are_translated(self, store, collections):
        collections["bibleverses"].insert_one.side_effect = DuplicateKeyError("dup")

        with pytest.raises(StoreWriteError) as exc_info:
            store.insert_verse(_verse())

        assert exc_info.value.error_code == ErrorCode.STO_WRITE_FAILED.value


class TestConnection:
    def test_ping_failure(self, store, client):
        client.admin.command.side_effect = ServerSelectionTimeoutError("no servers")

        with pytest.raises(StoreConnectionError) as exc_info:
            store.ping()

        assert exc_info.value.error_code == ErrorCode.STO_CONN_FAILED.value

    def test_injected_client_is_not_closed(self, store, client):
        store.close()

        client.close.assert_not_called()


class TestDryRunStore:
    def test_reads_pass_through_and_writes_are_recorded(self, memory_store, jude):
        dry = DryRunCorpusStore(memory_store)
        existing = memory_store.find_verses("Jude", 1, "WEB")[0]

        assert dry.count_verses("WEB") == 20
        assert dry.upsert_verse(_verse()) is True
        dry.update_verse_text(existing.id, "changed")
        dry.update_chapter_verse_count(memory_store.chapter(jude, 1).id, 25)

        assert memory_store.writes == 0
        assert [w.operation for w in dry.writes] == [
            "upsert_verse",
            "update_verse_text",
            "update_chapter_verse_count",
        ]
        assert dry.find_verse(VerseKey("Jude", 1, 2, "KJV")) is None
