"""Shared test fixtures."""

from pathlib import Path

import pytest

from inkwell.core.persistence.service import save_project
from inkwell.models.document import DocumentType
from inkwell.models.project import Project
from tests.unit.fakes import make_doc, make_project


@pytest.fixture
def chapter_project(tmp_path: Path) -> Project:
    """An unsaved project with Chapter 1 / Scene 1 and a character."""
    chapter = make_doc("Chapter 1", content="Once upon a time.")
    scene = make_doc(
        "Scene 1", DocumentType.SCENE, content="It was dark.", parent=chapter, minutes=1
    )
    character = make_doc("Ada", DocumentType.CHARACTER, content="Protagonist.", minutes=2)
    return make_project(tmp_path, chapter, scene, character)


@pytest.fixture
def saved_project(chapter_project: Project) -> Project:
    """chapter_project after a first save."""
    assert chapter_project.file_path is not None
    save_project(chapter_project, chapter_project.file_path)
    return chapter_project
