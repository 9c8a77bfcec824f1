"""Project and project metadata models."""

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any

from inkwell.errors import DocumentNotFoundError
from inkwell.models.document import Document, DocumentType


@dataclass
class WordCountTargets:
    target_word_count: int = 0
    target_character_count: int = 0
    target_page_count: int = 0
    target_date: datetime | None = None
    show_target_in_status_bar: bool = True
    include_notes_in_count: bool = False
    include_research_in_count: bool = False


@dataclass
class ProjectStatistics:
    total_word_count: int = 0
    total_character_count: int = 0
    total_character_count_no_spaces: int = 0
    total_page_count: int = 0
    paragraph_count: int = 0
    sentence_count: int = 0
    last_calculated_at: datetime | None = None


@dataclass
class ProjectMetadata:
    """Descriptive data about a project. Opaque to the path/sync engine.

    settings and extra are carried through save/load untouched; extra holds
    keys this version does not know about.
    """

    title: str = ""
    author: str = ""
    word_count_targets: WordCountTargets = field(default_factory=WordCountTargets)
    statistics: ProjectStatistics = field(default_factory=ProjectStatistics)
    keywords: list[str] = field(default_factory=list)
    tags: list[str] = field(default_factory=list)
    custom_fields: dict[str, str] = field(default_factory=dict)
    settings: dict[str, Any] = field(default_factory=dict)
    version: str = "1.0"
    created_at: datetime = field(default_factory=datetime.now)
    modified_at: datetime = field(default_factory=datetime.now)
    last_opened_at: datetime | None = None
    extra: dict[str, Any] = field(default_factory=dict)


@dataclass
class Project:
    """A writing project: an ordered flat list of documents plus metadata."""

    name: str
    file_path: Path | None = None
    documents: list[Document] = field(default_factory=list)
    metadata: ProjectMetadata = field(default_factory=ProjectMetadata)
    created_at: datetime = field(default_factory=datetime.now)
    modified_at: datetime = field(default_factory=datetime.now)

    @property
    def directory(self) -> Path | None:
        """Directory holding the index file; content paths are relative to it."""
        if self.file_path is None:
            return None
        return self.file_path.parent

    def documents_by_id(self) -> dict[str, Document]:
        return {d.id: d for d in self.documents}

    def get(self, doc_id: str) -> Document:
        for doc in self.documents:
            if doc.id == doc_id:
                return doc
        msg = f"No document with id {doc_id!r} in project {self.name!r}"
        raise DocumentNotFoundError(msg)

    def find(self, key: str) -> Document:
        """Look a document up by id, then by exact title."""
        for doc in self.documents:
            if doc.id == key:
                return doc
        matches = [d for d in self.documents if d.title == key]
        if len(matches) == 1:
            return matches[0]
        if len(matches) > 1:
            msg = f"Title {key!r} is ambiguous ({len(matches)} documents), use the id"
            raise DocumentNotFoundError(msg)
        msg = f"No document with id or title {key!r} in project {self.name!r}"
        raise DocumentNotFoundError(msg)

    def active_documents(self) -> list[Document]:
        return [d for d in self.documents if not d.is_trashed]

    def trashed_documents(self) -> list[Document]:
        return [d for d in self.documents if d.is_trashed]

    def scenes_of(self, chapter_id: str) -> list[Document]:
        return [
            d for d in self.documents
            if d.type is DocumentType.SCENE and d.parent_id == chapter_id
        ]
