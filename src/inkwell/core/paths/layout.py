"""Project-relative path conventions: separators and the trash prefix.

Stored paths always use "/" regardless of platform and are relative to the
project directory (the directory containing the project index file).
"""

import posixpath
from collections.abc import Callable
from pathlib import Path, PurePosixPath

from inkwell.config import TRASH_DIR_NAME

TRASH_PREFIX = TRASH_DIR_NAME + "/"


def to_posix(path: str) -> str:
    """Normalize a relative path to the stored "/" form."""
    return path.replace("\\", "/")


def resolve(project_dir: Path, relative_path: str) -> Path:
    """Resolve a stored relative path against the project directory."""
    return project_dir.joinpath(*PurePosixPath(to_posix(relative_path)).parts)


def relative_to_project(project_dir: Path, full_path: Path) -> str:
    """Inverse of resolve(): the stored form of a path inside the project."""
    return full_path.relative_to(project_dir).as_posix()


def is_trashed_path(path: str) -> bool:
    """True if the stored path lives under the reserved trash prefix."""
    return to_posix(path).lower().startswith(TRASH_PREFIX.lower())


def to_trash_path(path: str) -> str:
    """Re-target a stored path under the trash, keeping its whole structure."""
    path = to_posix(path)
    if is_trashed_path(path):
        return path
    return TRASH_PREFIX + path


def strip_trash_prefix(path: str) -> str:
    """Return the pre-trash form of a trashed path (unchanged if not trashed)."""
    path = to_posix(path)
    if is_trashed_path(path):
        return path[len(TRASH_PREFIX) :]
    return path


def parent_dir(path: str) -> str:
    """Directory part of a stored path ("" at the project root)."""
    return posixpath.dirname(to_posix(path))


def numbered_variant(path: str, number: int, *, keep_extension: bool = True) -> str:
    """path with "-{number}" appended to its last segment, before any extension.

    >>> numbered_variant("notes/Idea.md", 2)
    'notes/Idea-2.md'
    >>> numbered_variant("Manuscript/Chapter-1", 2, keep_extension=False)
    'Manuscript/Chapter-1-2'
    """
    head, _, name = to_posix(path).rpartition("/")
    stem, ext = name, ""
    if keep_extension and "." in name[1:]:
        stem, _, suffix = name.rpartition(".")
        ext = "." + suffix
    numbered = f"{stem}-{number}{ext}"
    return f"{head}/{numbered}" if head else numbered


def first_free(path: str, is_taken: Callable[[str], bool], *, keep_extension: bool = True) -> str:
    """path itself if it is free, else its first free numbered variant (-2, -3, ...)."""
    candidate, number = path, 2
    while is_taken(candidate):
        candidate = numbered_variant(path, number, keep_extension=keep_extension)
        number += 1
    return candidate
