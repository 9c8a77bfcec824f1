"""Canonical content paths for documents.

Everything here is pure: no function in this module touches the file system.
"""

import re

from inkwell.errors import OrphanedSceneError
from inkwell.models.document import Document, DocumentType

# Whitelist: letters, digits, whitespace and a little harmless punctuation.
# Everything else (path separators, <>:"|?* , control and shell characters)
# becomes a hyphen.
_INVALID_CHARS = re.compile(r"[^\w\s\-.()',&+]")
_HYPHEN_RUNS = re.compile(r"[\s\-]+")

UNTITLED = "untitled"
MANUSCRIPT_DIR = "Manuscript"
ORPHAN_SCENES_DIR = "scenes"
CHAPTER_CONTENT_FILE = "content.md"

_BUCKET_DIRS: dict[DocumentType, str] = {
    DocumentType.CHAPTER: MANUSCRIPT_DIR,
    DocumentType.SCENE: MANUSCRIPT_DIR,
    DocumentType.CHARACTER: "characters",
    DocumentType.LOCATION: "locations",
    DocumentType.RESEARCH: "research",
    DocumentType.NOTE: "notes",
    DocumentType.TIMELINE: "timeline",
    DocumentType.PLOT: "plot",
    DocumentType.OBJECT: "objects",
    DocumentType.ENTITY: "entities",
    DocumentType.OTHER: "other",
}

# Types whose file goes straight into the bucket, ignoring folder_path.
FLAT_TYPES = frozenset({DocumentType.NOTE, DocumentType.OTHER})


def sanitize(name: str) -> str:
    """Turn an arbitrary title into a single filesystem-safe path segment.

    Idempotent, never empty, never contains a path separator.
    """
    sanitized = _INVALID_CHARS.sub("-", name or "")
    sanitized = _HYPHEN_RUNS.sub("-", sanitized)
    sanitized = sanitized.strip("-. ")
    return sanitized or UNTITLED


def bucket_for(doc_type: DocumentType) -> str:
    """Top-level directory holding documents of this type."""
    return _BUCKET_DIRS[doc_type]


def _in_bucket(bucket: str, folder_path: str, filename: str) -> str:
    if folder_path:
        return f"{bucket}/{sanitize(folder_path)}/{filename}"
    return f"{bucket}/{filename}"


def chapter_dir(chapter: Document) -> str:
    """Directory that holds a chapter's content file and its scenes."""
    return _in_bucket(MANUSCRIPT_DIR, chapter.folder_path, sanitize(chapter.title))


def orphan_scene_path(document: Document) -> str:
    """Degraded location for a Scene whose chapter cannot be resolved."""
    return f"{ORPHAN_SCENES_DIR}/{sanitize(document.title)}.md"


def derive_path(document: Document, documents_by_id: dict[str, Document]) -> str:
    """Return the canonical relative path for a document.

    Raises OrphanedSceneError for a Scene whose parent is not a known Chapter.
    """
    title = sanitize(document.title)

    if document.type is DocumentType.CHAPTER:
        return f"{chapter_dir(document)}/{CHAPTER_CONTENT_FILE}"

    if document.type is DocumentType.SCENE:
        parent = documents_by_id.get(document.parent_id) if document.parent_id else None
        if parent is None or parent.type is not DocumentType.CHAPTER:
            msg = (
                f"Scene {document.title!r} ({document.id}) has no resolvable chapter "
                f"(parent_id={document.parent_id!r})"
            )
            raise OrphanedSceneError(msg)
        return f"{chapter_dir(parent)}/{title}.md"

    bucket = bucket_for(document.type)
    if document.type in FLAT_TYPES:
        return f"{bucket}/{title}.md"
    return _in_bucket(bucket, document.folder_path, f"{title}.md")
