"""Whole-project save and load.

A save walks every document, moves backing files whose canonical path
changed since the last save, flushes in-memory edits, recomputes statistics
and finally writes the project index. A load reads the index back and
reconnects documents with their files.
"""

import json
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from loguru import logger

from inkwell.config import PROJECT_FILE_EXTENSION, SAMPLE_DOCUMENTS, TRASH_DIR_NAME
from inkwell.core.paths.deriver import (
    CHAPTER_CONTENT_FILE,
    derive_path,
    orphan_scene_path,
    sanitize,
)
from inkwell.core.paths.layout import first_free, relative_to_project, resolve
from inkwell.core.persistence.codec import project_to_dict, project_from_dict
from inkwell.core.stats.text_stats import update_project_statistics
from inkwell.core.storage.files import (
    FileOpResult,
    delete_file,
    prune_empty_dirs,
    relocate_file,
    same_file,
    write_text,
    write_text_atomic,
)
from inkwell.errors import (
    InvalidTitleError,
    OrphanedSceneError,
    ProjectLoadError,
    ProjectSaveError,
)
from inkwell.models.document import Document, DocumentType
from inkwell.models.project import Project, ProjectMetadata


@dataclass(frozen=True)
class SaveStats:
    """Summary of a save operation."""

    documents_written: int
    documents_moved: int
    failures: int


def normalize_project_path(path: Path) -> Path:
    """Force the project file extension (case-insensitive check)."""
    if path.suffix.lower() == PROJECT_FILE_EXTENSION:
        return path
    return path.with_suffix(PROJECT_FILE_EXTENSION)


def _expected_path(doc: Document, by_id: dict[str, Document]) -> str | None:
    """Canonical path for doc, or None when it has to stay where it is."""
    try:
        return derive_path(doc, by_id)
    except OrphanedSceneError as e:
        if doc.content_file_path or doc.stale_path:
            logger.warning("{}; keeping it at {}", e, doc.content_file_path or doc.stale_path)
            return None
        fallback = orphan_scene_path(doc)
        logger.warning("{}; storing it at {}", e, fallback)
        return fallback


def _is_unreadable(doc: Document) -> bool:
    return doc.read_error is not None and not doc.is_loaded


def _plan_paths(project: Project, project_dir: Path) -> tuple[dict[str, str], dict[str, str], int]:
    """Decide where every document is stored by this save.

    Returns the target path per document id, the owning document id per
    claimed path (lower-cased) and the number of documents that could not
    take their canonical path. Documents already in place claim their paths
    first. A document whose canonical path is claimed keeps its current path,
    or gets the first free numbered variant, so no two documents ever share
    a file.
    """
    by_id = project.documents_by_id()
    wanted: dict[str, str] = {}
    for doc in project.documents:
        current = doc.content_file_path
        # Trashed documents keep their structure-preserving path until restored.
        wanted[doc.id] = current if doc.is_trashed else _expected_path(doc, by_id) or current

    claimed: dict[str, str] = {}

    def is_taken(rel: str) -> bool:
        return rel.lower() in claimed or resolve(project_dir, rel).exists()

    def settled(doc: Document) -> bool:
        return _is_unreadable(doc) or wanted[doc.id] == doc.content_file_path

    targets: dict[str, str] = {}
    conflicts = 0
    for doc in sorted(project.documents, key=lambda d: not settled(d)):
        current, target = doc.content_file_path, wanted[doc.id]
        owner = claimed.get(target.lower())
        clash = owner is not None and owner != doc.id

        if _is_unreadable(doc):
            # Its bytes can only be moved, never rewritten: keep the old path reserved too.
            claimed[current.lower()] = doc.id
            current_full, target_full = resolve(project_dir, current), resolve(project_dir, target)
            on_disk = target_full.exists() and not same_file(current_full, target_full)
            if clash or on_disk:
                logger.warning(
                    "Cannot move unreadable {!r} to {}, the path is taken", doc.title, target
                )
                conflicts += 1
                target = current
        elif clash:
            fallback = current
            if not current or current.lower() in claimed:
                fallback = first_free(target, is_taken)
            logger.warning(
                "{!r} cannot be stored at {}, already used by {!r}; using {}",
                doc.title, target, by_id[owner].title, fallback,
            )
            conflicts += 1
            target = fallback

        claimed[target.lower()] = doc.id
        targets[doc.id] = target
    return targets, claimed, conflicts


def _write_new(doc: Document, rel: str, text: str, project_dir: Path) -> FileOpResult:
    result = write_text(resolve(project_dir, rel), text)
    if result.ok:
        doc.modified_at = datetime.now()
    else:
        logger.warning("Could not write {!r} to {}: {}", doc.title, rel, result.error)
    return result


def _move_document(
    doc: Document,
    old_rel: str,
    new_rel: str,
    text: str,
    claimed: dict[str, str],
    project_dir: Path,
) -> list[FileOpResult]:
    """Relocate doc's backing file from old_rel to new_rel.

    text, read before any file was touched, is written at the new location
    and the old file removed unless another document now owns that path. On
    failure the path still points at new_rel and the content is flushed there,
    leaving the old file in place.
    """
    old_full = resolve(project_dir, old_rel)
    new_full = resolve(project_dir, new_rel)
    doc.content_file_path = new_rel

    if _is_unreadable(doc) or same_file(old_full, new_full):
        # Move the bytes: the old file could not be read, or only the case differs.
        result = relocate_file(old_full, new_full)
        if not result.ok:
            doc.content_file_path = old_rel
        return [result]

    written = write_text(new_full, text)
    if not written.ok:
        logger.warning(
            "Could not move {!r} to {}: {}; flushing in place", doc.title, new_rel, written.error
        )
        return [written, doc.flush(project_dir)]

    doc.modified_at = datetime.now()
    moved = FileOpResult(ok=True, path=new_full, strategy="move")
    if claimed.get(old_rel.lower(), doc.id) != doc.id:
        logger.debug("{} now belongs to another document, leaving it", old_rel)
        return [moved]

    removed = delete_file(old_full)
    if removed.ok:
        prune_empty_dirs(old_full.parent, project_dir)
    else:
        logger.warning("Moved {!r} but could not remove {}: {}", doc.title, old_full, removed.error)
    logger.debug("Moved {!r}: {} -> {}", doc.title, old_rel, new_rel)
    return [moved, removed]


def _sync_document(
    doc: Document, target: str, text: str, claimed: dict[str, str], project_dir: Path
) -> list[FileOpResult]:
    old_rel = doc.content_file_path
    if old_rel == target:
        return [doc.flush(project_dir)]

    doc.content_file_path = target
    if not old_rel or not resolve(project_dir, old_rel).is_file():
        return [_write_new(doc, target, text, project_dir)]
    return _move_document(doc, old_rel, target, text, claimed, project_dir)


def save_project(project: Project, path: Path) -> SaveStats:
    """Save the index and every document's content.

    Every document's text is read before any file is written or moved, so
    documents swapping paths keep their own text. After a save every
    non-trashed document's path equals its canonical path, unless two
    documents claim the same one: the later one keeps its own path (or a
    numbered variant) and the clash counts as a failure. Per-document file
    failures are logged and counted, never raised. Raises ProjectSaveError
    if the index itself cannot be written.
    """
    path = normalize_project_path(Path(path))
    project_dir = path.parent
    project_dir.mkdir(parents=True, exist_ok=True)
    project.file_path = path

    for doc in project.documents:
        if doc.stale_path:
            doc.content_file_path = doc.content_file_path or doc.stale_path
            doc.stale_path = ""
    texts = {doc.id: doc.get_content(project_dir) for doc in project.documents}
    targets, claimed, conflicts = _plan_paths(project, project_dir)

    written = moved = 0
    failures = conflicts
    # Unreadable files move first, before anything else can be written at their old paths.
    for doc in sorted(project.documents, key=lambda d: not _is_unreadable(d)):
        results = _sync_document(doc, targets[doc.id], texts[doc.id], claimed, project_dir)
        if any(r.strategy == "move" for r in results):
            moved += 1
        elif results[0].ok and results[0].strategy != "skipped":
            written += 1
        failures += sum(1 for r in results if not r.ok)

    update_project_statistics(project)
    now = datetime.now()
    project.modified_at = now
    project.metadata.title = project.name
    project.metadata.modified_at = now

    index = json.dumps(project_to_dict(project), indent=2, ensure_ascii=False) + "\n"
    result = write_text_atomic(path, index)
    if not result.ok:
        msg = f"Could not write project index {path}: {result.error}"
        raise ProjectSaveError(msg)

    logger.info(
        "Saved {!r} to {}: {} written, {} moved, {} failures",
        project.name, path, written, moved, failures,
    )
    return SaveStats(documents_written=written, documents_moved=moved, failures=failures)


def _find_in_trash(doc: Document, project_dir: Path) -> str | None:
    """Look for doc's file under the trash directory by its file name."""
    trash_dir = project_dir / TRASH_DIR_NAME
    if not trash_dir.is_dir():
        return None
    if doc.type is DocumentType.CHAPTER:
        pattern = f"{sanitize(doc.title)}/{CHAPTER_CONTENT_FILE}"
    else:
        pattern = f"{sanitize(doc.title)}.md"
    found = sorted(trash_dir.rglob(pattern))
    if not found:
        return None
    return relative_to_project(project_dir, found[0])


def load_project(path: Path) -> Project:
    """Read a project index and reconnect its documents with their files.

    Raises ProjectLoadError if the file is missing, unreadable or not a
    project index.
    """
    path = Path(path)
    if not path.is_file():
        msg = f"Project file not found: {path}"
        raise ProjectLoadError(msg)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        msg = f"Could not read project file {path}: {e}"
        raise ProjectLoadError(msg) from e

    project, inline_content = project_from_dict(data)
    project.file_path = path
    project_dir = path.parent
    by_id = project.documents_by_id()

    for doc in project.documents:
        if doc.content_file_path:
            if not doc.is_trashed and not resolve(project_dir, doc.content_file_path).is_file():
                trashed = _find_in_trash(doc, project_dir)
                if trashed:
                    logger.info(
                        "{!r} not found at {}, found in trash at {}",
                        doc.title, doc.content_file_path, trashed,
                    )
                    doc.content_file_path = trashed
            continue

        # Older indexes carried the text inline and had no content files.
        legacy = inline_content.get(doc.id)
        if legacy:
            trashed = _find_in_trash(doc, project_dir)
            if trashed:
                doc.content_file_path = trashed
                continue
            doc.set_content(legacy)
            doc.content_file_path = _expected_path(doc, by_id) or orphan_scene_path(doc)
            result = doc.flush(project_dir)
            logger.info("Migrated inline content of {!r} to {}", doc.title, doc.content_file_path)
            if not result.ok:
                logger.warning(
                    "Could not write migrated content of {!r}: {}", doc.title, result.error
                )

    if "metadata" not in data or not data["metadata"]:
        project.metadata = ProjectMetadata(
            title=project.name,
            created_at=project.created_at,
            modified_at=project.modified_at,
        )
    project.metadata.last_opened_at = datetime.now()

    logger.debug("Loaded {!r} from {} ({} documents)", project.name, path, len(project.documents))
    return project


def create_project(name: str) -> Project:
    """A new, unsaved project seeded with sample documents."""
    if not name or not name.strip():
        msg = "Project name cannot be empty"
        raise InvalidTitleError(msg)

    now = datetime.now()
    project = Project(
        name=name,
        created_at=now,
        modified_at=now,
        metadata=ProjectMetadata(title=name, created_at=now, modified_at=now),
    )

    by_title: dict[str, Document] = {}
    for type_value, title, content, parent_title in SAMPLE_DOCUMENTS:
        parent = by_title.get(parent_title) if parent_title else None
        doc = Document(
            title=title,
            type=DocumentType(type_value),
            parent_id=parent.id if parent else None,
            created_at=now,
            modified_at=now,
        )
        doc.set_content(content)
        project.documents.append(doc)
        by_title[title] = doc

    return project
