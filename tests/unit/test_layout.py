"""Tests for stored path conventions."""

import pytest

from inkwell.core.paths.layout import (
    first_free,
    numbered_variant,
    strip_trash_prefix,
    to_trash_path,
)


def test_trash_prefix_round_trip() -> None:
    assert to_trash_path("notes/Idea.md") == "Trashcan/notes/Idea.md"
    assert to_trash_path("Trashcan/notes/Idea.md") == "Trashcan/notes/Idea.md"
    assert strip_trash_prefix("Trashcan/notes/Idea.md") == "notes/Idea.md"


@pytest.mark.parametrize(
    ("path", "keep_extension", "expected"),
    [
        ("notes/Idea.md", True, "notes/Idea-2.md"),
        ("Idea.md", True, "Idea-2.md"),
        ("Manuscript/Chapter-1", False, "Manuscript/Chapter-1-2"),
        ("Manuscript/Dr.-Who", False, "Manuscript/Dr.-Who-2"),
        ("research/.hidden", True, "research/.hidden-2"),
    ],
)
def test_numbered_variant(path: str, keep_extension: bool, expected: str) -> None:
    assert numbered_variant(path, 2, keep_extension=keep_extension) == expected


def test_first_free_skips_taken_variants() -> None:
    taken = {"notes/Idea.md", "notes/Idea-2.md"}

    assert first_free("notes/Idea.md", taken.__contains__) == "notes/Idea-3.md"
    assert first_free("notes/Other.md", taken.__contains__) == "notes/Other.md"
