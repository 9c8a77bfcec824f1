"""Soft delete, restore and permanent delete.

Trashing keeps a document's whole relative path under the trash directory,
so restoring it to its own bucket puts the file back exactly where it was.
The record's path is always updated, even when the file operation fails;
the next save (or flush) writes the cached content at the recorded path.
"""

from collections.abc import Callable
from dataclasses import replace
from pathlib import Path

from loguru import logger

from inkwell.config import TRASH_DIR_NAME
from inkwell.core.paths.deriver import (
    CHAPTER_CONTENT_FILE,
    derive_path,
    orphan_scene_path,
    sanitize,
)
from inkwell.core.paths.layout import (
    first_free,
    parent_dir,
    resolve,
    strip_trash_prefix,
    to_trash_path,
)
from inkwell.core.storage.files import (
    FileOpResult,
    delete_file,
    prune_empty_dirs,
    relocate_file,
)
from inkwell.core.sync.structure import require_free_paths
from inkwell.core.tree.builder import NodeKind, TreeNode
from inkwell.errors import (
    AlreadyTrashedError,
    InvalidTargetError,
    NotTrashedError,
    OrphanedSceneError,
)
from inkwell.models.document import Document, DocumentType
from inkwell.models.project import Project


def _current_or_derived(doc: Document, by_id: dict[str, Document]) -> str:
    if doc.content_file_path:
        return doc.content_file_path
    if doc.stale_path:
        return doc.stale_path
    try:
        return derive_path(doc, by_id)
    except OrphanedSceneError:
        return orphan_scene_path(doc)


def _path_checker(
    project: Project, project_dir: Path | None, *exclude: Document
) -> tuple[Callable[[str], bool], Callable[[str], bool], Callable[[str], None]]:
    """Checks for picking paths that no other document or file uses.

    Returns is_taken and dir_taken predicates and a claim function that
    marks a path as used by the caller.
    """
    skip = {d.id for d in exclude}
    taken = {
        (d.content_file_path or d.stale_path).lower()
        for d in project.documents
        if d.id not in skip and (d.content_file_path or d.stale_path)
    }

    def is_taken(rel: str) -> bool:
        on_disk = project_dir is not None and resolve(project_dir, rel).exists()
        return on_disk or rel.lower() in taken

    def dir_taken(rel: str) -> bool:
        prefix = rel.lower() + "/"
        return is_taken(rel) or any(path.startswith(prefix) for path in taken)

    def claim(rel: str) -> None:
        taken.add(rel.lower())

    return is_taken, dir_taken, claim


def _relocate(
    doc: Document, new_rel: str, project_dir: Path | None, prune_stop: Path | None
) -> FileOpResult:
    """Point doc at new_rel and move its file there.

    The content is pulled into the cache first, so a failed move is healed by
    the next flush. A destination that already holds another file is left
    alone and doc keeps its old path.
    """
    old_rel = doc.content_file_path or doc.stale_path
    doc.get_content(project_dir)
    doc.content_file_path = new_rel
    doc.stale_path = ""

    if project_dir is None or not old_rel:
        return FileOpResult(ok=True, strategy="skipped")

    old_full = resolve(project_dir, old_rel)
    result = relocate_file(old_full, resolve(project_dir, new_rel))
    if result.strategy == "conflict":
        doc.content_file_path = old_rel
        logger.warning("{!r} stays at {}, {} is taken", doc.title, old_rel, new_rel)
        return result
    if result.strategy in ("move", "copy") and prune_stop is not None:
        prune_empty_dirs(old_full.parent, prune_stop)
    if not result.ok:
        logger.warning(
            "{!r} now points at {} but its file is still at {}", doc.title, new_rel, old_rel
        )
    return result


def _chapter_dir_of(rel: str) -> str:
    """Directory of a chapter's own content file, "" if rel is not one."""
    if rel.endswith("/" + CHAPTER_CONTENT_FILE):
        return parent_dir(rel)
    return ""


def _sweep_dir(
    project_dir: Path | None, old_dir_rel: str, new_dir_rel: str, prune_stop: Path
) -> list[FileOpResult]:
    """Move every file left under old_dir_rel to the same place under new_dir_rel."""
    if project_dir is None or not old_dir_rel or old_dir_rel == new_dir_rel:
        return []
    old_dir = resolve(project_dir, old_dir_rel)
    if not old_dir.is_dir():
        return []

    results: list[FileOpResult] = []
    new_dir = resolve(project_dir, new_dir_rel)
    for stray in sorted(p for p in old_dir.rglob("*") if p.is_file()):
        target = new_dir / stray.relative_to(old_dir)
        logger.debug("Sweeping stray file {} -> {}", stray, target)
        results.append(relocate_file(stray, target))

    for directory in sorted((p for p in old_dir.rglob("*") if p.is_dir()), reverse=True):
        prune_empty_dirs(directory, old_dir)
    prune_empty_dirs(old_dir, prune_stop)
    return results


def move_to_trash(project: Project, doc_id: str) -> list[FileOpResult]:
    """Soft-delete a document, keeping its relative path under the trash.

    Trashing a Chapter takes its Scenes and any other file in its directory
    along. When the trash already holds something at that path, the first
    free numbered variant is used instead ("Idea-2.md", "Chapter-1-2/").
    """
    doc = project.get(doc_id)
    if doc.is_trashed:
        msg = f"{doc.title!r} is already in the trash"
        raise AlreadyTrashedError(msg)

    project_dir = project.directory
    by_id = project.documents_by_id()
    old_rel = _current_or_derived(doc, by_id)
    if not doc.content_file_path and not doc.stale_path:
        # Never saved: record the path it would have had, so the trash keeps its shape.
        doc.content_file_path = old_rel

    is_taken, dir_taken, claim = _path_checker(project, project_dir, doc)
    old_dir = _chapter_dir_of(old_rel) if doc.type is DocumentType.CHAPTER else ""
    if old_dir:
        trash_dir = first_free(to_trash_path(old_dir), dir_taken, keep_extension=False)
        new_rel = f"{trash_dir}/{CHAPTER_CONTENT_FILE}"
    else:
        new_rel = first_free(to_trash_path(old_rel), is_taken)
    results = [_relocate(doc, new_rel, project_dir, project_dir)]
    claim(new_rel)

    if doc.type is DocumentType.CHAPTER:
        for scene in project.scenes_of(doc.id):
            if scene.is_trashed:
                continue
            scene_rel = _current_or_derived(scene, by_id)
            if not scene.content_file_path and not scene.stale_path:
                scene.content_file_path = scene_rel
            if old_dir and parent_dir(scene_rel) == old_dir:
                scene_trash = f"{trash_dir}/{scene_rel.rpartition('/')[2]}"
            else:
                scene_trash = first_free(to_trash_path(scene_rel), is_taken)
            results.append(_relocate(scene, scene_trash, project_dir, project_dir))
            claim(scene_trash)
        if old_dir and project_dir is not None:
            results.extend(_sweep_dir(project_dir, old_dir, trash_dir, project_dir))

    logger.info("Moved {!r} to the trash", doc.title)
    return results


def _restore_placement(project: Project, doc: Document, target: TreeNode | None) -> Document:
    """Validate target for doc and return a copy of doc placed there."""
    if target is None:
        return replace(doc)

    if doc.type is DocumentType.SCENE:
        if target.kind is not NodeKind.DOCUMENT or target.document_id is None:
            msg = "A scene can only be restored into a chapter"
            raise InvalidTargetError(msg)
        chapter = project.get(target.document_id)
        if chapter.type is not DocumentType.CHAPTER or chapter.is_trashed:
            msg = f"{chapter.title!r} is not an active chapter"
            raise InvalidTargetError(msg)
        return replace(doc, parent_id=chapter.id, folder_path=chapter.folder_path)

    in_bucket = target.kind in (NodeKind.BUCKET, NodeKind.SUBFOLDER)
    if not in_bucket or target.folder_type is not doc.type:
        msg = f"{doc.type.label} {doc.title!r} cannot be restored into {target.name!r}"
        raise InvalidTargetError(msg)
    folder_path = target.folder_path if target.kind is NodeKind.SUBFOLDER else ""
    return replace(doc, folder_path=folder_path)


def restore_from_trash(
    project: Project, doc_id: str, target: TreeNode | None = None
) -> list[FileOpResult]:
    """Bring a trashed document back.

    Without a target the document returns to its own bucket and folder. A
    restored Chapter brings its trashed Scenes back into its new directory.
    Raises InvalidTargetError, changing nothing, if the restored document or
    one of its Scenes would land on a path another document or file uses.
    """
    doc = project.get(doc_id)
    if not doc.is_trashed:
        msg = f"{doc.title!r} is not in the trash"
        raise NotTrashedError(msg)

    placed = _restore_placement(project, doc, target)
    by_id = project.documents_by_id()
    by_id[doc.id] = placed
    trashed_rel = doc.content_file_path
    try:
        new_rel = derive_path(placed, by_id)
    except OrphanedSceneError as e:
        new_rel = strip_trash_prefix(trashed_rel)
        logger.warning("{}; restoring it to {}", e, new_rel)

    returning = [(doc, placed)]
    destinations = {doc.id: new_rel}
    if doc.type is DocumentType.CHAPTER:
        chapter_dir = parent_dir(new_rel)
        for scene in project.scenes_of(doc.id):
            if scene.is_trashed:
                returning.append((scene, replace(scene, folder_path=placed.folder_path)))
                destinations[scene.id] = f"{chapter_dir}/{sanitize(scene.title)}.md"

    project_dir = project.directory
    candidates = [copy for _, copy in returning]
    is_taken, _, _ = _path_checker(project, project_dir, *candidates)
    for rel in destinations.values():
        if is_taken(rel):
            msg = f"Cannot restore {doc.title!r}: {rel} is already in use"
            raise InvalidTargetError(msg)
    require_free_paths(project, candidates, InvalidTargetError)

    trash_root = project_dir / TRASH_DIR_NAME if project_dir is not None else None
    results: list[FileOpResult] = []
    for original, copy in returning:
        original.parent_id = copy.parent_id
        original.folder_path = copy.folder_path
        results.append(_relocate(original, destinations[original.id], project_dir, trash_root))

    old_dir = _chapter_dir_of(trashed_rel) if doc.type is DocumentType.CHAPTER else ""
    if old_dir and trash_root is not None:
        results.extend(_sweep_dir(project_dir, old_dir, parent_dir(new_rel), trash_root))

    logger.info("Restored {!r} to {}", doc.title, new_rel)
    return results


def delete_permanently(project: Project, doc_id: str) -> list[FileOpResult]:
    """Remove a trashed document from the project and delete its file.

    Deleting a Chapter also deletes its trashed Scenes. Failures to delete
    files are logged and otherwise ignored.
    """
    doc = project.get(doc_id)
    if not doc.is_trashed:
        msg = f"{doc.title!r} must be moved to the trash before it can be deleted"
        raise NotTrashedError(msg)

    victims = [doc]
    if doc.type is DocumentType.CHAPTER:
        victims.extend(s for s in project.scenes_of(doc.id) if s.is_trashed)

    project_dir = project.directory
    results: list[FileOpResult] = []
    for victim in victims:
        project.documents.remove(victim)
        full_path = victim.full_path(project_dir)
        if full_path is None:
            continue
        result = delete_file(full_path)
        if result.ok:
            prune_empty_dirs(full_path.parent, project_dir / TRASH_DIR_NAME)
        else:
            logger.warning("Could not delete {}: {}", full_path, result.error)
        results.append(result)

    logger.info("Deleted {!r} permanently", doc.title)
    return results


def empty_trash(project: Project) -> list[FileOpResult]:
    """Permanently delete every trashed document."""
    results: list[FileOpResult] = []
    for doc in project.trashed_documents():
        if doc.id in project.documents_by_id():
            results.extend(delete_permanently(project, doc.id))
    return results
