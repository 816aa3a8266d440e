"""MongoDB-backed corpus store.

Reads and writes the ``biblebooks``, ``biblechapters`` and ``bibleverses``
collections using the camelCase document layout the web service already
persists (``bookId``, ``bookName``, ``chapterNumber``, ``verseNumber``,
``isActive``, ...). Document ids cross the store boundary as strings.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from datetime import datetime, timezone
from types import TracebackType
from typing import Any

from bson import ObjectId
from bson.errors import InvalidId
from pymongo import ASCENDING, MongoClient
from pymongo.collection import Collection
from pymongo.errors import ConfigurationError as PyMongoConfigurationError
from pymongo.errors import PyMongoError

from scripture_sync.domain.entities.book import Book, Chapter
from scripture_sync.domain.entities.verse import Verse, VerseKey
from scripture_sync.domain.interfaces.corpus_store import ICorpusStore
from scripture_sync.error_codes import ErrorCode
from scripture_sync.exceptions import (
    StoreConnectionError,
    StoreReadError,
    StoreWriteError,
)
from scripture_sync.utils.logging import get_logger

logger = get_logger(__name__)

BOOKS_COLLECTION = "biblebooks"
CHAPTERS_COLLECTION = "biblechapters"
VERSES_COLLECTION = "bibleverses"


def _object_id(value: str) -> ObjectId | str:
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        return value


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _book_from_doc(doc: dict[str, Any]) -> Book:
    return Book(
        id=str(doc["_id"]),
        name=doc["name"],
        order=int(doc.get("order", 0)),
        chapters=int(doc["chapters"]),
        is_active=bool(doc.get("isActive", True)),
    )


def _chapter_from_doc(doc: dict[str, Any]) -> Chapter:
    return Chapter(
        id=str(doc["_id"]),
        book_id=str(doc["bookId"]),
        book_name=doc["bookName"],
        chapter_number=int(doc["chapterNumber"]),
        verses=int(doc.get("verses", 0)),
        is_active=bool(doc.get("isActive", True)),
    )


def _verse_from_doc(doc: dict[str, Any]) -> Verse:
    return Verse(
        id=str(doc["_id"]),
        book_id=str(doc["bookId"]),
        book_name=doc["bookName"],
        chapter_number=int(doc["chapterNumber"]),
        verse_number=int(doc["verseNumber"]),
        text=doc.get("text") or "",
        translation=doc["translation"],
        is_active=bool(doc.get("isActive", True)),
    )


def _key_filter(key: VerseKey) -> dict[str, Any]:
    return {
        "bookName": key.book_name,
        "chapterNumber": key.chapter_number,
        "verseNumber": key.verse_number,
        "translation": key.translation,
        "isActive": True,
    }


class MongoCorpusStore(ICorpusStore):
    """Corpus store over a MongoDB database.

    Usage:
        with MongoCorpusStore(uri) as store:
            store.ping()
            books = store.find_books()
    """

    def __init__(
        self,
        uri: str,
        database: str | None = None,
        server_selection_timeout_ms: int = 5000,
        client: MongoClient | None = None,
    ):
        """Create the client; no network traffic happens until ``ping()``.

        Args:
            uri: MongoDB connection string
            database: Database name (defaults to the one in the URI)
            server_selection_timeout_ms: How long to wait for a reachable server
            client: Optional preconfigured client
        """
        self._owns_client = client is None
        try:
            self._client = client or MongoClient(
                uri, serverSelectionTimeoutMS=server_selection_timeout_ms
            )
            self._db = (
                self._client.get_database(database)
                if database
                else self._client.get_default_database()
            )
        except PyMongoConfigurationError as e:
            msg = f"Cannot resolve MongoDB database from {uri!r}: {e}"
            raise StoreConnectionError(
                msg,
                suggestion="Include a database name in MONGODB_URI or set mongodb_database",
                error_code=ErrorCode.STO_CONN_FAILED.value,
            ) from e

        self.books: Collection = self._db[BOOKS_COLLECTION]
        self.chapters: Collection = self._db[CHAPTERS_COLLECTION]
        self.verses: Collection = self._db[VERSES_COLLECTION]

    def __enter__(self) -> MongoCorpusStore:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def ping(self) -> None:
        try:
            self._client.admin.command("ping")
        except PyMongoError as e:
            msg = f"MongoDB is not reachable: {e}"
            raise StoreConnectionError(
                msg,
                suggestion="Check that MongoDB is running and MONGODB_URI is correct",
                error_code=ErrorCode.STO_CONN_FAILED.value,
            ) from e
        logger.debug("store_ping_ok", database=self._db.name)

    # Reads

    @contextmanager
    def _reading(self, operation: str, **context: Any) -> Iterator[None]:
        try:
            yield
        except PyMongoError as e:
            logger.error(
                "store_read_failed",
                operation=operation,
                error=str(e),
                error_type=type(e).__name__,
                **context,
            )
            msg = f"{operation} failed: {e}"
            raise StoreReadError(
                msg,
                suggestion="Check the MongoDB connection and re-run; completed cells are kept",
                error_code=ErrorCode.STO_READ_FAILED.value,
                context=context,
            ) from e

    def find_books(self, names: Iterable[str] | None = None) -> list[Book]:
        query: dict[str, Any] = {"isActive": True}
        if names is not None:
            query["name"] = {"$in": list(names)}
        with self._reading("find_books"):
            cursor = self.books.find(query).sort("order", ASCENDING)
            return [_book_from_doc(doc) for doc in cursor]

    def find_book(self, name: str) -> Book | None:
        with self._reading("find_book", book=name):
            doc = self.books.find_one({"name": name, "isActive": True})
        return _book_from_doc(doc) if doc else None

    def find_chapters(self, book_id: str) -> list[Chapter]:
        with self._reading("find_chapters", book_id=book_id):
            cursor = self.chapters.find(
                {"bookId": _object_id(book_id), "isActive": True}
            ).sort("chapterNumber", ASCENDING)
            return [_chapter_from_doc(doc) for doc in cursor]

    def find_chapter(self, book_id: str, chapter_number: int) -> Chapter | None:
        with self._reading("find_chapter", book_id=book_id, chapter=chapter_number):
            doc = self.chapters.find_one(
                {
                    "bookId": _object_id(book_id),
                    "chapterNumber": chapter_number,
                    "isActive": True,
                }
            )
        return _chapter_from_doc(doc) if doc else None

    def find_verses(
        self, book_name: str, chapter_number: int, translation: str
    ) -> list[Verse]:
        with self._reading(
            "find_verses", book=book_name, chapter=chapter_number, translation=translation
        ):
            cursor = self.verses.find(
                {
                    "bookName": book_name,
                    "chapterNumber": chapter_number,
                    "translation": translation,
                    "isActive": True,
                }
            ).sort("verseNumber", ASCENDING)
            return [_verse_from_doc(doc) for doc in cursor]

    def find_verse(self, key: VerseKey) -> Verse | None:
        with self._reading("find_verse", verse=str(key)):
            doc = self.verses.find_one(_key_filter(key))
        return _verse_from_doc(doc) if doc else None

    def count_verses(
        self,
        translation: str | None = None,
        book_name: str | None = None,
        chapter_number: int | None = None,
    ) -> int:
        query: dict[str, Any] = {"isActive": True}
        if translation is not None:
            query["translation"] = translation
        if book_name is not None:
            query["bookName"] = book_name
        if chapter_number is not None:
            query["chapterNumber"] = chapter_number
        with self._reading("count_verses", translation=translation):
            return int(self.verses.count_documents(query))

    def count_verses_by_translation(self) -> dict[str, int]:
        pipeline = [
            {"$match": {"isActive": True}},
            {"$group": {"_id": "$translation", "count": {"$sum": 1}}},
            {"$sort": {"count": -1}},
        ]
        with self._reading("count_verses_by_translation"):
            return {
                row["_id"]: int(row["count"]) for row in self.verses.aggregate(pipeline)
            }

    # Writes

    def insert_verse(self, verse: Verse) -> Verse:
        now = _now()
        doc = {
            "bookId": _object_id(verse.book_id),
            "bookName": verse.book_name,
            "chapterNumber": verse.chapter_number,
            "verseNumber": verse.verse_number,
            "text": verse.text,
            "translation": verse.translation,
            "isActive": verse.is_active,
            "createdAt": now,
            "updatedAt": now,
        }
        try:
            result = self.verses.insert_one(doc)
        except PyMongoError as e:
            raise self._write_error("insert_verse", verse.key, e) from e
        return Verse(
            id=str(result.inserted_id),
            book_id=verse.book_id,
            book_name=verse.book_name,
            chapter_number=verse.chapter_number,
            verse_number=verse.verse_number,
            text=verse.text,
            translation=verse.translation,
            is_active=verse.is_active,
        )

    def update_verse_text(self, verse_id: str, text: str) -> None:
        try:
            self.verses.update_one(
                {"_id": _object_id(verse_id)},
                {"$set": {"text": text, "updatedAt": _now()}},
            )
        except PyMongoError as e:
            msg = f"Failed to update verse {verse_id}: {e}"
            raise StoreWriteError(
                msg, error_code=ErrorCode.STO_WRITE_FAILED.value
            ) from e

    def upsert_verse(self, verse: Verse) -> bool:
        now = _now()
        try:
            result = self.verses.update_one(
                _key_filter(verse.key),
                {
                    "$set": {"text": verse.text, "updatedAt": now},
                    "$setOnInsert": {
                        "bookId": _object_id(verse.book_id),
                        "createdAt": now,
                    },
                },
                upsert=True,
            )
        except PyMongoError as e:
            raise self._write_error("upsert_verse", verse.key, e) from e
        return result.upserted_id is not None

    def update_chapter_verse_count(self, chapter_id: str, verses: int) -> None:
        try:
            self.chapters.update_one(
                {"_id": _object_id(chapter_id)},
                {"$set": {"verses": verses, "updatedAt": _now()}},
            )
        except PyMongoError as e:
            msg = f"Failed to update verse count of chapter {chapter_id}: {e}"
            raise StoreWriteError(
                msg, error_code=ErrorCode.STO_WRITE_FAILED.value
            ) from e

    @staticmethod
    def _write_error(operation: str, key: VerseKey, error: Exception) -> StoreWriteError:
        logger.error(
            "store_write_failed",
            operation=operation,
            verse=str(key),
            error=str(error),
            error_type=type(error).__name__,
        )
        return StoreWriteError(
            f"{operation} failed for {key}: {error}",
            error_code=ErrorCode.STO_WRITE_FAILED.value,
            context={"verse": str(key)},
        )


__all__ = ["MongoCorpusStore"]
