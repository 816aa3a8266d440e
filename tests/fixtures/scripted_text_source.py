"""Scripted implementation of ITextSource for testing."""

from scripture_sync.domain.entities.verse import FetchedVerse
from scripture_sync.domain.interfaces.text_source import FetchResult, ITextSource


class ScriptedTextSource(ITextSource):
    """Serve verse text from dictionaries instead of the network.

    ``chapters`` maps (book, chapter, translation) to {verse_number: text}.
    ``verses`` maps (book, chapter, verse, translation) to text; lookups fall
    back to ``chapters``. Any reference listed in ``failing`` returns a
    failure result.
    """

    def __init__(self):
        self.chapters: dict[tuple[str, int, str], dict[int, str]] = {}
        self.verses: dict[tuple[str, int, int, str], str] = {}
        self.failing: set[tuple] = set()
        self.calls: list[tuple] = []

    def set_chapter(
        self, book: str, chapter: int, size: int, translation: str = "WEB"
    ) -> None:
        self.chapters[(book, chapter, translation)] = {
            n: f"{book} {chapter}:{n} text in {translation}"
            for n in range(1, size + 1)
        }

    def fetch_chapter(
        self, book_name: str, chapter_number: int, translation: str
    ) -> FetchResult[list[FetchedVerse]]:
        ref = (book_name, chapter_number, translation)
        self.calls.append(ref)
        if ref in self.failing or ref not in self.chapters:
            return FetchResult.failure("No verses found in response", attempts=3)
        verses = [
            FetchedVerse(number, text)
            for number, text in sorted(self.chapters[ref].items())
        ]
        return FetchResult.success(verses)

    def fetch_verse(
        self,
        book_name: str,
        chapter_number: int,
        verse_number: int,
        translation: str,
    ) -> FetchResult[str]:
        ref = (book_name, chapter_number, verse_number, translation)
        self.calls.append(ref)
        if ref in self.failing:
            return FetchResult.failure("HTTP 503", attempts=3)
        if ref in self.verses:
            return FetchResult.success(self.verses[ref])
        text = self.chapters.get((book_name, chapter_number, translation), {}).get(
            verse_number
        )
        if text is None:
            return FetchResult.failure("HTTP 404: reference or translation not available")
        return FetchResult.success(text)
