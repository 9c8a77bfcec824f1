"""Tests for lazy content loading on Document."""

from pathlib import Path
from unittest.mock import patch

from inkwell.models.document import Document, DocumentType


def _doc_on_disk(tmp_path: Path, text: str) -> Document:
    (tmp_path / "notes").mkdir()
    (tmp_path / "notes" / "Idea.md").write_text(text, encoding="utf-8")
    return Document(title="Idea", type=DocumentType.NOTE, content_file_path="notes/Idea.md")


def test_get_content_loads_lazily(tmp_path: Path) -> None:
    doc = _doc_on_disk(tmp_path, "from disk")

    assert doc.is_loaded is False
    assert doc.get_content(tmp_path) == "from disk"
    assert doc.is_loaded is True


def test_cached_content_wins_over_disk(tmp_path: Path) -> None:
    doc = _doc_on_disk(tmp_path, "from disk")
    doc.set_content("edited")

    assert doc.get_content(tmp_path) == "edited"


def test_empty_cache_is_a_placeholder_reread_from_disk(tmp_path: Path) -> None:
    """A file populated after an empty placeholder was set is picked up."""
    doc = Document(title="Idea", type=DocumentType.NOTE, content_file_path="notes/Idea.md")
    doc.set_content("")
    assert doc.get_content(tmp_path) == ""

    (tmp_path / "notes").mkdir()
    (tmp_path / "notes" / "Idea.md").write_text("written elsewhere", encoding="utf-8")

    assert doc.get_content(tmp_path) == "written elsewhere"


def test_missing_file_is_empty_content(tmp_path: Path) -> None:
    doc = Document(title="New", content_file_path="Manuscript/New/content.md")

    assert doc.get_content(tmp_path) == ""
    assert doc.read_error is None


def test_unset_path_or_directory_is_empty(tmp_path: Path) -> None:
    assert Document(title="x").get_content(tmp_path) == ""
    assert Document(title="x", content_file_path="notes/x.md").get_content(None) == ""


def test_backslash_paths_resolve(tmp_path: Path) -> None:
    _doc_on_disk(tmp_path, "hello")
    doc = Document(title="Idea", type=DocumentType.NOTE, content_file_path="notes\\Idea.md")

    assert doc.get_content(tmp_path) == "hello"


def test_read_failure_returns_empty_and_is_observable(tmp_path: Path) -> None:
    doc = _doc_on_disk(tmp_path, "secret")

    with patch("builtins.open", side_effect=PermissionError("denied")):
        assert doc.get_content(tmp_path) == ""

    assert isinstance(doc.read_error, PermissionError)


def test_flush_does_not_clobber_unreadable_file(tmp_path: Path) -> None:
    doc = _doc_on_disk(tmp_path, "keep me")

    with patch("builtins.open", side_effect=PermissionError("denied")):
        result = doc.flush(tmp_path)

    assert result.ok is False
    assert (tmp_path / "notes" / "Idea.md").read_text(encoding="utf-8") == "keep me"


def test_undecodable_file_is_a_read_error(tmp_path: Path) -> None:
    (tmp_path / "bad.md").write_bytes(b"\xff\xfe\xfa")
    doc = Document(title="bad", content_file_path="bad.md")

    assert doc.get_content(tmp_path) == ""
    assert doc.read_error is not None


def test_set_content_never_touches_disk(tmp_path: Path) -> None:
    doc = Document(title="New", content_file_path="Manuscript/New/content.md")

    doc.set_content("draft")

    assert list(tmp_path.iterdir()) == []


def test_flush_creates_directories_and_stamps_modified(tmp_path: Path) -> None:
    doc = Document(title="New", content_file_path="Manuscript/New/content.md")
    before = doc.modified_at
    doc.set_content("draft")

    result = doc.flush(tmp_path)

    assert result.ok
    assert (tmp_path / "Manuscript" / "New" / "content.md").read_text(encoding="utf-8") == "draft"
    assert doc.modified_at >= before


def test_flush_without_path_is_noop(tmp_path: Path) -> None:
    doc = Document(title="New")
    doc.set_content("draft")

    result = doc.flush(tmp_path)

    assert result.ok
    assert result.strategy == "skipped"
    assert list(tmp_path.iterdir()) == []


def test_statistics_force_lazy_load(tmp_path: Path) -> None:
    doc = _doc_on_disk(tmp_path, "one two  three\nfour")

    assert doc.word_count(tmp_path) == 4
    assert doc.character_count(tmp_path) == len("one two  three\nfour")
    assert doc.character_count_no_spaces(tmp_path) == len("onetwothreefour")


def test_is_trashed_is_case_insensitive() -> None:
    assert Document(title="x", content_file_path="Trashcan/notes/x.md").is_trashed
    assert Document(title="x", content_file_path="trashcan/notes/x.md").is_trashed
    assert not Document(title="x", content_file_path="notes/Trashcan/x.md").is_trashed
    assert not Document(title="x").is_trashed


def test_ids_are_unique() -> None:
    assert Document(title="a").id != Document(title="a").id
