"""Tests for structural edits."""

from pathlib import Path

import pytest

from inkwell.core.persistence.service import save_project
from inkwell.core.sync.structure import (
    add_document,
    move_document_to_folder,
    move_down,
    move_scene_to_chapter,
    move_up,
    rename_document,
    rename_subfolder,
    reorder_document,
    siblings,
)
from inkwell.core.sync.trash import move_to_trash
from inkwell.errors import (
    AlreadyTrashedError,
    InvalidTargetError,
    InvalidTitleError,
    MissingParentError,
)
from inkwell.models.document import DocumentType
from inkwell.models.project import Project
from tests.unit.fakes import make_doc, make_project, read


def test_add_chapter_uses_unique_default_title(chapter_project: Project) -> None:
    doc = add_document(chapter_project, DocumentType.CHAPTER)

    assert doc.title == "Chapter 2"
    assert doc.order == 1
    assert doc in chapter_project.documents


def test_add_skips_taken_default_titles(tmp_path: Path) -> None:
    project = make_project(tmp_path, make_doc("Chapter 2"))

    assert add_document(project, DocumentType.CHAPTER).title == "Chapter 3"


def test_add_scene_needs_active_chapter(chapter_project: Project) -> None:
    ada = chapter_project.find("Ada")

    with pytest.raises(MissingParentError):
        add_document(chapter_project, DocumentType.SCENE, "Lost")
    with pytest.raises(MissingParentError):
        add_document(chapter_project, DocumentType.SCENE, "Lost", parent_id=ada.id)
    assert len(chapter_project.documents) == 3


def test_add_scene_appends_to_chapter(chapter_project: Project) -> None:
    chapter = chapter_project.find("Chapter 1")

    scene = add_document(chapter_project, DocumentType.SCENE, parent_id=chapter.id)

    assert scene.title == "Scene 2"
    assert scene.parent_id == chapter.id
    assert scene.order == 1


@pytest.mark.parametrize("title", ["", "   "])
def test_add_rejects_blank_title(chapter_project: Project, title: str) -> None:
    with pytest.raises(InvalidTitleError):
        add_document(chapter_project, DocumentType.NOTE, title)


def test_add_note_in_folder_is_rejected(chapter_project: Project) -> None:
    with pytest.raises(InvalidTargetError):
        add_document(chapter_project, DocumentType.NOTE, "Idea", folder_path="misc")


def test_rename_document_trims_and_validates(chapter_project: Project) -> None:
    ada = chapter_project.find("Ada")

    rename_document(chapter_project, ada.id, "  Ada Lovelace ")

    assert ada.title == "Ada Lovelace"
    with pytest.raises(InvalidTitleError):
        rename_document(chapter_project, ada.id, " ")
    assert ada.title == "Ada Lovelace"


def test_rename_trashed_document_is_rejected(saved_project: Project) -> None:
    ada = saved_project.find("Ada")
    move_to_trash(saved_project, ada.id)

    with pytest.raises(AlreadyTrashedError):
        rename_document(saved_project, ada.id, "Other")


def test_rename_subfolder_rewrites_descendants(tmp_path: Path) -> None:
    a = make_doc("A", DocumentType.CHARACTER, content="a", folder_path="Cast")
    b = make_doc("B", DocumentType.CHARACTER, content="b", folder_path="Cast/Minor")
    c = make_doc("C", DocumentType.CHARACTER, content="c", folder_path="Castaways")
    project = make_project(tmp_path, a, b, c)
    save_project(project, tmp_path / "novel.json")

    affected = rename_subfolder(project, DocumentType.CHARACTER, "Cast", "Crew")

    assert affected == [a, b]
    assert (a.folder_path, b.folder_path, c.folder_path) == ("Crew", "Crew/Minor", "Castaways")
    assert a.content_file_path == ""
    assert a.stale_path == "characters/Cast/A.md"
    assert c.content_file_path == "characters/Castaways/C.md"


def test_rename_subfolder_defers_file_moves_to_save(tmp_path: Path) -> None:
    a = make_doc("A", DocumentType.CHARACTER, content="a", folder_path="Cast")
    project = make_project(tmp_path, a)
    save_project(project, tmp_path / "novel.json")

    rename_subfolder(project, DocumentType.CHARACTER, "Cast", "Crew")

    assert read(tmp_path, "characters/Cast/A.md") == "a"
    save_project(project, tmp_path / "novel.json")
    assert read(tmp_path, "characters/Crew/A.md") == "a"
    assert not (tmp_path / "characters" / "Cast").exists()


def test_rename_chapter_subfolder_moves_chapters_and_scenes(tmp_path: Path) -> None:
    chapter = make_doc("Chapter 1", content="c", folder_path="Part 1")
    scene = make_doc(
        "Scene 1", DocumentType.SCENE, content="s", parent=chapter, folder_path="Part 1"
    )
    project = make_project(tmp_path, chapter, scene)
    save_project(project, tmp_path / "novel.json")

    rename_subfolder(project, DocumentType.CHAPTER, "Part 1", "Book One")
    save_project(project, tmp_path / "novel.json")

    assert scene.content_file_path == "Manuscript/Book-One/Chapter-1/Scene-1.md"
    assert read(tmp_path, "Manuscript/Book-One/Chapter-1/content.md") == "c"
    assert not (tmp_path / "Manuscript" / "Part-1").exists()


def test_rename_unknown_subfolder_raises(chapter_project: Project) -> None:
    with pytest.raises(InvalidTargetError):
        rename_subfolder(chapter_project, DocumentType.CHARACTER, "Nobody", "X")
    with pytest.raises(InvalidTargetError):
        rename_subfolder(chapter_project, DocumentType.CHARACTER, "", "X")


def test_move_document_to_folder_renumbers(tmp_path: Path) -> None:
    a = make_doc("A", DocumentType.LOCATION, order=0)
    b = make_doc("B", DocumentType.LOCATION, order=1)
    c = make_doc("C", DocumentType.LOCATION, order=2)
    d = make_doc("D", DocumentType.LOCATION, folder_path="Cities")
    project = make_project(tmp_path, a, b, c, d)

    move_document_to_folder(project, a.id, "Cities")

    assert a.folder_path == "Cities"
    assert a.order == 1
    assert (b.order, c.order) == (0, 1)


def test_move_chapter_to_folder_takes_scene_folder(chapter_project: Project) -> None:
    chapter = chapter_project.find("Chapter 1")

    move_document_to_folder(chapter_project, chapter.id, "Part 1/")

    assert chapter.folder_path == "Part 1"
    assert chapter_project.find("Scene 1").folder_path == "Part 1"


def test_move_rejects_scene_and_flat_types(chapter_project: Project) -> None:
    note = add_document(chapter_project, DocumentType.NOTE, "Idea")

    with pytest.raises(InvalidTargetError):
        move_document_to_folder(chapter_project, chapter_project.find("Scene 1").id, "x")
    with pytest.raises(InvalidTargetError):
        move_document_to_folder(chapter_project, note.id, "x")


def test_move_scene_to_chapter(chapter_project: Project, tmp_path: Path) -> None:
    second = make_doc("Chapter 2", content="two", folder_path="Part 2", minutes=5)
    chapter_project.documents.append(second)
    save_project(chapter_project, tmp_path / "novel.json")
    scene = chapter_project.find("Scene 1")

    move_scene_to_chapter(chapter_project, scene.id, second.id)
    save_project(chapter_project, tmp_path / "novel.json")

    assert scene.parent_id == second.id
    assert scene.folder_path == "Part 2"
    assert read(tmp_path, "Manuscript/Part-2/Chapter-2/Scene-1.md") == "It was dark."
    assert not (tmp_path / "Manuscript" / "Chapter-1" / "Scene-1.md").exists()


def test_move_scene_to_non_chapter_is_rejected(chapter_project: Project) -> None:
    scene = chapter_project.find("Scene 1")
    ada = chapter_project.find("Ada")

    with pytest.raises(MissingParentError):
        move_scene_to_chapter(chapter_project, scene.id, ada.id)
    with pytest.raises(InvalidTargetError):
        move_scene_to_chapter(chapter_project, ada.id, chapter_project.find("Chapter 1").id)


def test_reorder_and_move_up_down(tmp_path: Path) -> None:
    chapter = make_doc("Chapter 1")
    scenes = [
        make_doc(f"S{i}", DocumentType.SCENE, parent=chapter, order=i, minutes=i) for i in range(3)
    ]
    project = make_project(tmp_path, chapter, *scenes)

    reorder_document(project, scenes[2].id, 0)
    assert [d.title for d in siblings(project, scenes[0])] == ["S2", "S0", "S1"]

    move_down(project, scenes[2].id)
    assert [d.title for d in siblings(project, scenes[0])] == ["S0", "S2", "S1"]

    move_up(project, scenes[0].id)
    assert [d.title for d in siblings(project, scenes[0])] == ["S0", "S2", "S1"]

    reorder_document(project, scenes[0].id, 99)
    assert [d.order for d in siblings(project, scenes[0])] == [0, 1, 2]
    assert siblings(project, scenes[0])[-1] is scenes[0]


def test_add_rejects_title_that_would_share_a_file(chapter_project: Project) -> None:
    with pytest.raises(InvalidTitleError, match="characters/Ada.md"):
        add_document(chapter_project, DocumentType.CHARACTER, "Ada?")
    with pytest.raises(InvalidTitleError):
        add_document(chapter_project, DocumentType.CHARACTER, "ada")
    assert len(chapter_project.documents) == 3

    assert add_document(chapter_project, DocumentType.LOCATION, "Ada").title == "Ada"


def test_add_may_reuse_a_trashed_title(saved_project: Project) -> None:
    move_to_trash(saved_project, saved_project.find("Ada").id)

    doc = add_document(saved_project, DocumentType.CHARACTER, "Ada")

    assert not doc.is_trashed


def test_rename_onto_taken_path_is_rejected(chapter_project: Project) -> None:
    ada = chapter_project.find("Ada")
    grace = add_document(chapter_project, DocumentType.CHARACTER, "Grace")

    with pytest.raises(InvalidTitleError):
        rename_document(chapter_project, grace.id, "Ada")

    assert grace.title == "Grace"
    assert rename_document(chapter_project, ada.id, "ADA").title == "ADA"


def test_move_to_folder_onto_taken_path_is_rejected(tmp_path: Path) -> None:
    a = make_doc("Ada", DocumentType.CHARACTER)
    b = make_doc("Ada", DocumentType.CHARACTER, folder_path="Cast", order=0)
    project = make_project(tmp_path, a, b)

    with pytest.raises(InvalidTargetError):
        move_document_to_folder(project, b.id, "")

    assert b.folder_path == "Cast"
    assert b.order == 0


def test_move_scene_onto_taken_path_is_rejected(chapter_project: Project) -> None:
    first = chapter_project.find("Chapter 1")
    second = add_document(chapter_project, DocumentType.CHAPTER, "Chapter 2")
    twin = add_document(chapter_project, DocumentType.SCENE, "Scene 1", parent_id=second.id)

    with pytest.raises(InvalidTargetError):
        move_scene_to_chapter(chapter_project, twin.id, first.id)

    assert twin.parent_id == second.id


def test_rename_subfolder_onto_taken_paths_changes_nothing(tmp_path: Path) -> None:
    a = make_doc("Ada", DocumentType.CHARACTER, content="a", folder_path="Cast")
    b = make_doc("Ada", DocumentType.CHARACTER, content="b", folder_path="Crew")
    project = make_project(tmp_path, a, b)
    save_project(project, tmp_path / "novel.json")

    with pytest.raises(InvalidTargetError, match="characters/Crew/Ada.md"):
        rename_subfolder(project, DocumentType.CHARACTER, "Cast", "Crew")

    assert a.folder_path == "Cast"
    assert a.content_file_path == "characters/Cast/Ada.md"
