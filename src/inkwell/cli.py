"""Command line interface for inkwell projects."""

import json
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import asdict
from pathlib import Path
from typing import Annotated

import typer
from loguru import logger

from inkwell.config import DEFAULT_PROJECTS_DIR, PROJECT_FILE_EXTENSION, resolve_project_file
from inkwell.core.paths.deriver import sanitize
from inkwell.core.persistence.service import create_project, load_project, save_project
from inkwell.core.stats.text_stats import update_project_statistics
from inkwell.core.sync import structure, trash
from inkwell.core.tree.builder import NodeKind, TreeNode, bucket_name, build_tree
from inkwell.core.tree.render import render_tree
from inkwell.errors import InkwellError
from inkwell.logging_config import configure_logging
from inkwell.models.document import DocumentType
from inkwell.models.project import Project

app = typer.Typer(help="inkwell: organize a long-form writing project on disk.")

ProjectOption = Annotated[
    Path | None,
    typer.Option("--project", "-p", help="Project file (default: $INKWELL_PROJECT)"),
]


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only log warnings and errors"),
) -> None:
    configure_logging(verbose=verbose, quiet=quiet)


@contextmanager
def _user_errors() -> Iterator[None]:
    """Turn inkwell errors into a logged message and exit status 1."""
    try:
        yield
    except InkwellError as e:
        logger.error("{}", e)
        raise typer.Exit(1) from e


def _open(project_file: Path | None) -> Project:
    try:
        path = resolve_project_file(project_file)
    except RuntimeError as e:
        logger.error("{}", e)
        raise typer.Exit(1) from e
    return load_project(path)


def _save(project: Project) -> None:
    stats = save_project(project, project.file_path or Path())
    if stats.failures:
        logger.warning("{} file operations failed; the next save will retry", stats.failures)


@app.command()
def new(
    name: str = typer.Argument(..., help="Project name"),
    directory: Annotated[
        Path | None,
        typer.Option("--dir", "-d", help="Parent directory for the project"),
    ] = None,
) -> None:
    """Create a project seeded with sample documents."""
    with _user_errors():
        project = create_project(name)
        folder = sanitize(name)
        path = (directory or DEFAULT_PROJECTS_DIR) / folder / f"{folder}{PROJECT_FILE_EXTENSION}"
        if path.exists():
            logger.error("Project file already exists: {}", path)
            raise typer.Exit(1)
        save_project(project, path)
    typer.echo(f"Created {path}")


@app.command()
def tree(
    project_file: ProjectOption = None,
    show_ids: bool = typer.Option(False, "--ids", "-i", help="Show document ids"),
    max_depth: Annotated[
        int | None,
        typer.Option("--max-depth", "-m", help="Max depth levels to render"),
    ] = None,
) -> None:
    """Show the project tree."""
    with _user_errors():
        project = _open(project_file)
    typer.echo(render_tree(build_tree(project), max_depth=max_depth, show_ids=show_ids), nl=False)


@app.command()
def stats(
    project_file: ProjectOption = None,
    output_json: bool = typer.Option(False, "--json", "-j", help="Output as JSON"),
) -> None:
    """Show word, character and page counts (trashed documents excluded)."""
    with _user_errors():
        project = _open(project_file)
    update_project_statistics(project)
    s = project.metadata.statistics

    if output_json:
        typer.echo(json.dumps(asdict(s), indent=2, default=str))
        return
    typer.echo(f"Words:        {s.total_word_count}")
    typer.echo(
        f"Characters:   {s.total_character_count}"
        f" ({s.total_character_count_no_spaces} without spaces)"
    )
    typer.echo(f"Pages:        {s.total_page_count}")
    typer.echo(f"Paragraphs:   {s.paragraph_count}")
    typer.echo(f"Sentences:    {s.sentence_count}")


@app.command()
def save(project_file: ProjectOption = None) -> None:
    """Re-save the project, moving files to their canonical paths."""
    with _user_errors():
        project = _open(project_file)
        _save(project)


@app.command()
def add(
    doc_type: DocumentType = typer.Argument(..., help="Document type"),
    title: str | None = typer.Argument(None, help="Title (default: numbered)"),
    parent: Annotated[
        str | None,
        typer.Option("--chapter", "-c", help="Parent chapter (id or title), scenes only"),
    ] = None,
    folder: str = typer.Option("", "--folder", "-f", help="Subfolder within the bucket"),
    project_file: ProjectOption = None,
) -> None:
    """Add a document."""
    with _user_errors():
        project = _open(project_file)
        parent_id = project.find(parent).id if parent else None
        doc = structure.add_document(
            project, doc_type, title, folder_path=folder, parent_id=parent_id
        )
        _save(project)
    typer.echo(f"Added {doc.title!r} [{doc.id}] at {doc.content_file_path}")


@app.command()
def rename(
    document: str = typer.Argument(..., help="Document id or title"),
    new_title: str = typer.Argument(..., help="New title"),
    project_file: ProjectOption = None,
) -> None:
    """Rename a document (its file follows)."""
    with _user_errors():
        project = _open(project_file)
        doc = structure.rename_document(project, project.find(document).id, new_title)
        _save(project)
    typer.echo(f"Renamed to {doc.title!r}, now at {doc.content_file_path}")


@app.command()
def move(
    document: str = typer.Argument(..., help="Document id or title"),
    folder: Annotated[
        str | None,
        typer.Option("--folder", "-f", help="Target subfolder (\"\" for the bucket itself)"),
    ] = None,
    chapter: Annotated[
        str | None,
        typer.Option("--chapter", "-c", help="Target chapter for a scene"),
    ] = None,
    position: Annotated[
        int | None,
        typer.Option("--position", "-n", help="New position among siblings"),
    ] = None,
    up: bool = typer.Option(False, "--up", help="Move one place up"),
    down: bool = typer.Option(False, "--down", help="Move one place down"),
    project_file: ProjectOption = None,
) -> None:
    """Move a document to another folder or chapter, or reorder it."""
    with _user_errors():
        project = _open(project_file)
        doc = project.find(document)
        if chapter is not None:
            structure.move_scene_to_chapter(project, doc.id, project.find(chapter).id)
        if folder is not None:
            structure.move_document_to_folder(project, doc.id, folder)
        if position is not None:
            structure.reorder_document(project, doc.id, position)
        if up:
            structure.move_up(project, doc.id)
        if down:
            structure.move_down(project, doc.id)
        _save(project)
    typer.echo(f"{doc.title!r} is at {doc.content_file_path}")


@app.command(name="rename-folder")
def rename_folder(
    doc_type: DocumentType = typer.Argument(..., help="Bucket type"),
    folder: str = typer.Argument(..., help="Current subfolder path"),
    new_name: str = typer.Argument(..., help="New name for the last segment"),
    project_file: ProjectOption = None,
) -> None:
    """Rename a subfolder and everything in it."""
    with _user_errors():
        project = _open(project_file)
        affected = structure.rename_subfolder(project, doc_type, folder, new_name)
        _save(project)
    typer.echo(f"Updated {len(affected)} documents in {bucket_name(doc_type)}")


@app.command(name="trash")
def trash_cmd(
    document: str = typer.Argument(..., help="Document id or title"),
    project_file: ProjectOption = None,
) -> None:
    """Move a document (and a chapter's scenes) to the trash."""
    with _user_errors():
        project = _open(project_file)
        doc = project.find(document)
        trash.move_to_trash(project, doc.id)
        _save(project)
    typer.echo(f"Trashed {doc.title!r}")


@app.command()
def restore(
    document: str = typer.Argument(..., help="Document id or title"),
    folder: Annotated[
        str | None,
        typer.Option("--folder", "-f", help="Target subfolder (\"\" for the bucket itself)"),
    ] = None,
    chapter: Annotated[
        str | None,
        typer.Option("--chapter", "-c", help="Target chapter for a scene"),
    ] = None,
    project_file: ProjectOption = None,
) -> None:
    """Restore a document from the trash."""
    with _user_errors():
        project = _open(project_file)
        doc = project.find(document)
        target: TreeNode | None = None
        if chapter is not None:
            target_chapter = project.find(chapter)
            target = TreeNode(
                name=target_chapter.title, kind=NodeKind.DOCUMENT, document_id=target_chapter.id
            )
        elif folder is not None:
            kind = NodeKind.SUBFOLDER if folder else NodeKind.BUCKET
            target = TreeNode(
                name=folder or bucket_name(doc.type),
                kind=kind,
                folder_path=folder,
                folder_type=doc.type,
            )
        trash.restore_from_trash(project, doc.id, target)
        _save(project)
    typer.echo(f"Restored {doc.title!r} to {doc.content_file_path}")


@app.command()
def purge(
    document: str = typer.Argument(..., help="Document id or title"),
    project_file: ProjectOption = None,
) -> None:
    """Permanently delete a trashed document."""
    with _user_errors():
        project = _open(project_file)
        doc = project.find(document)
        trash.delete_permanently(project, doc.id)
        _save(project)
    typer.echo(f"Deleted {doc.title!r}")


@app.command(name="empty-trash")
def empty_trash(project_file: ProjectOption = None) -> None:
    """Permanently delete everything in the trash."""
    with _user_errors():
        project = _open(project_file)
        count = len(project.trashed_documents())
        trash.empty_trash(project)
        _save(project)
    typer.echo(f"Deleted {count} documents")
