"""Protocols for the collaborators that use document content."""

from pathlib import Path
from typing import Protocol, runtime_checkable

from inkwell.core.storage.files import FileOpResult


@runtime_checkable
class ContentSource(Protocol):
    """Read-only content access, used by statistics and search."""

    title: str

    def get_content(self, project_dir: Path | None) -> str:
        """Return the text, loading it lazily."""
        ...


@runtime_checkable
class EditableDocument(ContentSource, Protocol):
    """Protocol for whatever an editing surface edits."""

    def set_content(self, text: str) -> None:
        """Replace the in-memory text without touching disk."""
        ...

    def flush(self, project_dir: Path | None) -> FileOpResult:
        """Write the in-memory text to the backing file."""
        ...
