"""Tests for the completeness auditor."""

import pytest

from scripture_sync.sync.auditor import CompletenessAuditor


@pytest.fixture
def mixed_corpus(memory_store):
    """Known expected/actual counts across two books.

    Jonah: ch1 17/17, ch2 7/10, ch3 10/10, ch4 0/11
    Haggai: ch1 15/15, ch2 20/23 (plus 3 soft-deleted verses)
    """
    jonah = memory_store.add_book("Jonah", order=32, chapter_sizes=[17, 10, 10, 11])
    memory_store.add_verses(jonah, 1, range(1, 18))
    memory_store.add_verses(jonah, 2, range(1, 8))
    memory_store.add_verses(jonah, 3, range(1, 11))
    haggai = memory_store.add_book("Haggai", order=37, chapter_sizes=[15, 23])
    memory_store.add_verses(haggai, 1, range(1, 16))
    memory_store.add_verses(haggai, 2, range(1, 21))
    memory_store.add_verses(haggai, 2, range(21, 24), is_active=False)
    # Other translations never count toward base completeness
    memory_store.add_verses(jonah, 4, range(1, 12), translation="KJV")
    return jonah, haggai


def test_deficient_chapters_match_fixture_exactly(memory_store, mixed_corpus):
    report = CompletenessAuditor(memory_store).audit()

    assert [(d.book, d.chapter, d.expected, d.actual, d.missing) for d in report.deficient_chapters] == [
        ("Jonah", 2, 10, 7, 3),
        ("Jonah", 4, 11, 0, 11),
        ("Haggai", 2, 23, 20, 3),
    ]
    assert report.chapters_checked == 6
    assert report.expected_total == 86
    assert report.actual_total == 69
    assert report.missing_total == 17
    assert report.completion_percent == pytest.approx(80.23, abs=0.01)
    assert not report.is_complete


def test_audit_is_read_only(memory_store, mixed_corpus):
    CompletenessAuditor(memory_store).audit()

    assert memory_store.writes == 0


def test_audit_limited_to_selected_books(memory_store, mixed_corpus):
    _, haggai = mixed_corpus

    report = CompletenessAuditor(memory_store).audit([haggai])

    assert report.chapters_checked == 2
    assert [d.book for d in report.deficient_chapters] == ["Haggai"]


def test_empty_corpus_is_complete(memory_store):
    report = CompletenessAuditor(memory_store).audit()

    assert report.is_complete
    assert report.completion_percent == 100.0


def test_report_serializes_computed_fields(memory_store, mixed_corpus):
    data = CompletenessAuditor(memory_store).audit().model_dump()

    assert data["completion_percent"] == pytest.approx(80.23, abs=0.01)
    assert data["deficient_chapters"][0]["missing"] == 3
