"""The Document entity: one unit of writing backed by one content file."""

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path

from loguru import logger

from inkwell.core.paths.layout import is_trashed_path, resolve
from inkwell.core.stats.text_stats import TextStatistics, calculate_statistics
from inkwell.core.storage.files import FileOpResult, read_text, write_text


class DocumentType(Enum):
    """Closed set of document types. Values are the serialized form."""

    CHAPTER = "chapter"
    SCENE = "scene"
    NOTE = "note"
    RESEARCH = "research"
    CHARACTER = "character"
    LOCATION = "location"
    TIMELINE = "timeline"
    PLOT = "plot"
    OBJECT = "object"
    ENTITY = "entity"
    OTHER = "other"

    @property
    def label(self) -> str:
        return self.name.capitalize()


def new_document_id() -> str:
    return str(uuid.uuid4())


@dataclass
class Document:
    """A single document record.

    The content is not part of the record: it lives in the file at
    content_file_path (relative to the project directory) and in an
    in-memory cache that is filled lazily by get_content().
    """

    title: str
    type: DocumentType = DocumentType.CHAPTER
    id: str = field(default_factory=new_document_id)
    parent_id: str | None = None
    folder_path: str = ""
    content_file_path: str = ""
    order: int = 0
    created_at: datetime = field(default_factory=datetime.now)
    modified_at: datetime = field(default_factory=datetime.now)

    # None means "not loaded yet"; "" is an (possibly placeholder) empty value.
    _content: str | None = field(default=None, repr=False, compare=False)
    # Path from the previous save generation, when a rename cleared the path.
    stale_path: str = field(default="", repr=False, compare=False)
    # Last read failure other than a missing file, None after a clean read.
    read_error: OSError | None = field(default=None, repr=False, compare=False)

    @property
    def is_trashed(self) -> bool:
        return is_trashed_path(self.content_file_path)

    def full_path(self, project_dir: Path | None) -> Path | None:
        """Absolute location of the backing file, or None if it cannot be resolved."""
        if not self.content_file_path or project_dir is None:
            return None
        return resolve(project_dir, self.content_file_path)

    def get_content(self, project_dir: Path | None) -> str:
        """Return the document text, loading it from disk when needed.

        A non-empty cached value wins. An empty cached value is treated as a
        placeholder and re-read if the backing file exists. Read failures
        return "" and are kept on read_error.
        """
        if self._content:
            return self._content

        full_path = self.full_path(project_dir)
        if full_path is None or not full_path.is_file():
            if self._content is None:
                self._content = ""
            return self._content

        self._content = None
        result = read_text(full_path)
        if result.ok:
            self.read_error = None
            self._content = result.value or ""
            return self._content

        if isinstance(result.error, FileNotFoundError):
            self._content = ""
            return self._content

        self.read_error = result.error
        logger.warning(
            "Could not read content of {!r} from {}: {}", self.title, full_path, result.error
        )
        return ""

    def set_content(self, text: str) -> None:
        """Replace the cached text. Nothing is written until flush()."""
        self._content = text or ""

    @property
    def is_loaded(self) -> bool:
        return self._content is not None

    def flush(self, project_dir: Path | None) -> FileOpResult:
        """Write the current content to the backing file."""
        full_path = self.full_path(project_dir)
        if full_path is None:
            return FileOpResult(ok=True, strategy="skipped")

        contents = self.get_content(project_dir)
        if self._content is None and self.read_error is not None:
            # Never clobber a file we failed to read with an empty string.
            return FileOpResult(ok=False, path=full_path, strategy="skipped", error=self.read_error)
        result = write_text(full_path, contents)
        if result.ok:
            self.modified_at = datetime.now()
        else:
            logger.warning("Could not write {!r} to {}: {}", self.title, full_path, result.error)
        return result

    def statistics(self, project_dir: Path | None) -> TextStatistics:
        return calculate_statistics(self.get_content(project_dir))

    def word_count(self, project_dir: Path | None) -> int:
        return self.statistics(project_dir).word_count

    def character_count(self, project_dir: Path | None) -> int:
        return len(self.get_content(project_dir))

    def character_count_no_spaces(self, project_dir: Path | None) -> int:
        return self.statistics(project_dir).character_count_no_spaces
