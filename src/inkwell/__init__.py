"""Path derivation and file-system sync for long-form writing projects."""

from inkwell.core.persistence.service import SaveStats, create_project, load_project, save_project
from inkwell.core.tree.builder import TreeNode, build_tree
from inkwell.models.document import Document, DocumentType
from inkwell.models.project import Project
from inkwell.protocols import ContentSource, EditableDocument

__all__ = [
    "ContentSource",
    "Document",
    "DocumentType",
    "EditableDocument",
    "Project",
    "SaveStats",
    "TreeNode",
    "build_tree",
    "create_project",
    "load_project",
    "save_project",
]
