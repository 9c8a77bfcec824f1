"""Structural edits: add, rename, move and reorder documents.

These only change records. Backing files follow on the next save, which
compares every stored path with the canonical one and moves what changed.
Input is validated before anything is mutated, including that no two active
documents end up with the same canonical path.
"""

from dataclasses import replace

from loguru import logger

from inkwell.core.paths.deriver import FLAT_TYPES, derive_path, sanitize
from inkwell.core.paths.layout import to_posix
from inkwell.errors import (
    AlreadyTrashedError,
    InkwellError,
    InvalidTargetError,
    InvalidTitleError,
    MissingParentError,
    OrphanedSceneError,
)
from inkwell.models.document import Document, DocumentType
from inkwell.models.project import Project


def _clean_title(title: str) -> str:
    title = (title or "").strip()
    if not title:
        msg = "Title cannot be empty"
        raise InvalidTitleError(msg)
    return title


def _clean_folder(folder_path: str) -> str:
    return "/".join(part for part in to_posix(folder_path or "").split("/") if part.strip())


def _require_active(doc: Document) -> None:
    if doc.is_trashed:
        msg = f"{doc.title!r} is in the trash; restore it first"
        raise AlreadyTrashedError(msg)


def _require_chapter(project: Project, chapter_id: str | None) -> Document:
    if not chapter_id:
        msg = "A scene needs a parent chapter"
        raise MissingParentError(msg)
    chapter = project.documents_by_id().get(chapter_id)
    if chapter is None or chapter.type is not DocumentType.CHAPTER or chapter.is_trashed:
        msg = f"{chapter_id!r} is not an active chapter"
        raise MissingParentError(msg)
    return chapter


def _derived_or_none(doc: Document, by_id: dict[str, Document]) -> str | None:
    try:
        return derive_path(doc, by_id)
    except OrphanedSceneError:
        return None


def require_free_paths(
    project: Project, candidates: list[Document], error: type[InkwellError]
) -> None:
    """Raise error if a candidate would share its canonical path with another document.

    candidates are detached copies carrying the proposed change; they stand
    in for the documents with the same id. Paths compare case-insensitively.
    """
    by_id = project.documents_by_id()
    by_id.update({c.id: c for c in candidates})

    taken: dict[str, Document] = {}
    for other in project.active_documents():
        if other.id in by_id and by_id[other.id] is not other:
            continue
        path = _derived_or_none(other, by_id)
        if path:
            taken[path.lower()] = other

    for candidate in candidates:
        path = _derived_or_none(candidate, by_id)
        if path is None:
            continue
        clash = taken.get(path.lower())
        if clash is not None:
            msg = (
                f"{candidate.title!r} would be stored at {path},"
                f" already used by {clash.title!r}"
            )
            raise error(msg)
        taken[path.lower()] = candidate


def _default_title(project: Project, doc_type: DocumentType) -> str:
    number = sum(1 for d in project.documents if d.type is doc_type) + 1
    titles = {d.title for d in project.documents}
    while f"{doc_type.label} {number}" in titles:
        number += 1
    return f"{doc_type.label} {number}"


def siblings(project: Project, doc: Document) -> list[Document]:
    """Active documents sharing doc's display group, in display order."""
    active = project.active_documents()
    if doc.type is DocumentType.SCENE:
        group = [d for d in active if d.type is DocumentType.SCENE and d.parent_id == doc.parent_id]
        return sorted(group, key=lambda d: (d.order, d.created_at))
    group = [d for d in active if d.type is doc.type and d.folder_path == doc.folder_path]
    if doc.type is DocumentType.CHAPTER:
        return sorted(group, key=lambda d: (d.order, d.created_at))
    return sorted(group, key=lambda d: (d.order, d.title))


def _renumber(group: list[Document]) -> None:
    for index, doc in enumerate(group):
        doc.order = index


def add_document(
    project: Project,
    doc_type: DocumentType,
    title: str | None = None,
    *,
    folder_path: str = "",
    parent_id: str | None = None,
) -> Document:
    """Create a document at the end of its sibling group.

    Without a title, a unique default ("Chapter 3", "Scene 1", ...) is used.
    Scenes need an active parent chapter and share its folder.
    """
    title = _default_title(project, doc_type) if title is None else _clean_title(title)
    folder_path = _clean_folder(folder_path)

    if doc_type is DocumentType.SCENE:
        chapter = _require_chapter(project, parent_id)
        folder_path = chapter.folder_path
    else:
        parent_id = None
        if folder_path and doc_type in FLAT_TYPES:
            msg = f"{doc_type.label} documents cannot be placed in subfolders"
            raise InvalidTargetError(msg)

    doc = Document(title=title, type=doc_type, parent_id=parent_id, folder_path=folder_path)
    require_free_paths(project, [doc], InvalidTitleError)
    doc.set_content("")
    doc.order = len(siblings(project, doc))
    project.documents.append(doc)
    logger.info("Added {} {!r}", doc_type.label.lower(), title)
    return doc


def rename_document(project: Project, doc_id: str, new_title: str) -> Document:
    new_title = _clean_title(new_title)
    doc = project.get(doc_id)
    _require_active(doc)
    if doc.title != new_title:
        require_free_paths(project, [replace(doc, title=new_title)], InvalidTitleError)
        logger.info("Renamed {!r} to {!r}", doc.title, new_title)
        doc.title = new_title
    return doc


def rename_subfolder(
    project: Project, doc_type: DocumentType, old_path: str, new_name: str
) -> list[Document]:
    """Rename the last segment of a subfolder and update every document under it.

    Affected documents have their content cached and their stored path
    cleared; the next save writes them at the new location and deletes the
    previous files. Returns the affected documents.
    """
    segment = sanitize(_clean_title(new_name))
    old_path = _clean_folder(old_path)
    if not old_path:
        msg = "Only subfolders can be renamed, not the bucket itself"
        raise InvalidTargetError(msg)
    if doc_type is DocumentType.SCENE:
        doc_type = DocumentType.CHAPTER

    head, _, _ = old_path.rpartition("/")
    new_path = f"{head}/{segment}" if head else segment

    members = {doc_type, DocumentType.SCENE} if doc_type is DocumentType.CHAPTER else {doc_type}
    affected = [
        d for d in project.active_documents()
        if d.type in members
        and (d.folder_path == old_path or d.folder_path.startswith(old_path + "/"))
    ]
    if not affected:
        msg = f"No {doc_type.label.lower()} subfolder {old_path!r}"
        raise InvalidTargetError(msg)
    if new_path == old_path:
        return []

    renamed = {d.id: new_path + d.folder_path[len(old_path) :] for d in affected}
    candidates = [replace(d, folder_path=renamed[d.id]) for d in affected]
    require_free_paths(project, candidates, InvalidTargetError)

    project_dir = project.directory
    for doc in affected:
        doc.folder_path = renamed[doc.id]
        if doc.content_file_path:
            doc.get_content(project_dir)
            doc.stale_path = doc.content_file_path
            doc.content_file_path = ""

    logger.info("Renamed subfolder {!r} to {!r} ({} documents)", old_path, new_path, len(affected))
    return affected


def move_document_to_folder(project: Project, doc_id: str, folder_path: str) -> Document:
    """Move a non-Scene document to another folder of its own bucket.

    An empty folder_path means directly in the bucket. Folders are implicit,
    so moving into a new path creates it.
    """
    doc = project.get(doc_id)
    _require_active(doc)
    folder_path = _clean_folder(folder_path)
    if doc.type is DocumentType.SCENE:
        msg = "Scenes move between chapters, not folders"
        raise InvalidTargetError(msg)
    if folder_path and doc.type in FLAT_TYPES:
        msg = f"{doc.type.label} documents cannot be placed in subfolders"
        raise InvalidTargetError(msg)
    if doc.folder_path == folder_path:
        return doc
    require_free_paths(project, [replace(doc, folder_path=folder_path)], InvalidTargetError)

    old_group = [d for d in siblings(project, doc) if d is not doc]
    doc.folder_path = folder_path
    doc.order = len([d for d in siblings(project, doc) if d is not doc])
    _renumber(old_group)

    if doc.type is DocumentType.CHAPTER:
        for scene in project.scenes_of(doc.id):
            scene.folder_path = folder_path

    logger.info("Moved {!r} to folder {!r}", doc.title, folder_path or "/")
    return doc


def move_scene_to_chapter(project: Project, scene_id: str, chapter_id: str) -> Document:
    scene = project.get(scene_id)
    _require_active(scene)
    if scene.type is not DocumentType.SCENE:
        msg = f"{scene.title!r} is not a scene"
        raise InvalidTargetError(msg)
    chapter = _require_chapter(project, chapter_id)
    if scene.parent_id == chapter.id:
        return scene
    moved = replace(scene, parent_id=chapter.id, folder_path=chapter.folder_path)
    require_free_paths(project, [moved], InvalidTargetError)

    old_group = [d for d in siblings(project, scene) if d is not scene]
    scene.parent_id = chapter.id
    scene.folder_path = chapter.folder_path
    scene.order = len([d for d in siblings(project, scene) if d is not scene])
    _renumber(old_group)

    logger.info("Moved scene {!r} to chapter {!r}", scene.title, chapter.title)
    return scene


def reorder_document(project: Project, doc_id: str, index: int) -> Document:
    """Move a document to position index among its siblings (clamped)."""
    doc = project.get(doc_id)
    _require_active(doc)
    group = [d for d in siblings(project, doc) if d is not doc]
    index = max(0, min(index, len(group)))
    group.insert(index, doc)
    _renumber(group)
    return doc


def _position(project: Project, doc: Document) -> int:
    return next(i for i, d in enumerate(siblings(project, doc)) if d is doc)


def move_up(project: Project, doc_id: str) -> Document:
    doc = project.get(doc_id)
    _require_active(doc)
    return reorder_document(project, doc_id, _position(project, doc) - 1)


def move_down(project: Project, doc_id: str) -> Document:
    doc = project.get(doc_id)
    _require_active(doc)
    return reorder_document(project, doc_id, _position(project, doc) + 1)
