"""Tests for text and project statistics."""

from pathlib import Path

import pytest

from inkwell.core.stats.text_stats import (
    calculate_statistics,
    page_count,
    update_project_statistics,
)
from inkwell.models.document import DocumentType
from tests.unit.fakes import make_doc, make_project


def test_empty_text_has_zero_counts() -> None:
    stats = calculate_statistics("")

    assert stats.word_count == 0
    assert stats.line_count == 0


def test_counts() -> None:
    text = "One two three. Four!\n\nFive six?\tseven"

    stats = calculate_statistics(text)

    assert stats.word_count == 7
    assert stats.character_count == len(text)
    assert stats.character_count_no_spaces == len("".join(text.split()))
    assert stats.paragraph_count == 2
    assert stats.sentence_count == 4
    assert stats.line_count == 3


@pytest.mark.parametrize(("words", "pages"), [(0, 0), (1, 1), (250, 1), (251, 2)])
def test_page_count_rounds_up(words: int, pages: int) -> None:
    assert page_count(words) == pages


def test_project_totals_skip_trashed_documents(tmp_path: Path) -> None:
    kept = make_doc("Kept", DocumentType.NOTE, content="alpha beta")
    gone = make_doc("Gone", DocumentType.NOTE, content="gamma delta epsilon")
    gone.content_file_path = "Trashcan/notes/Gone.md"
    project = make_project(tmp_path, kept, gone)

    update_project_statistics(project)

    stats = project.metadata.statistics
    assert stats.total_word_count == 2
    assert stats.total_page_count == 1
    assert stats.last_calculated_at is not None


def test_project_totals_load_content_from_disk(tmp_path: Path) -> None:
    doc = make_doc("Ada", DocumentType.CHARACTER)
    doc.content_file_path = "characters/Ada.md"
    (tmp_path / "characters").mkdir()
    (tmp_path / "characters" / "Ada.md").write_text("a b c", encoding="utf-8")
    project = make_project(tmp_path, doc)

    update_project_statistics(project)

    assert project.metadata.statistics.total_word_count == 3
