"""Build the display tree from a project's flat document list.

The tree is rebuilt from scratch after every structural edit. Nodes refer to
documents by id only; look the document up in the project when needed.
"""

from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum

from inkwell.config import TRASH_DIR_NAME
from inkwell.core.paths.layout import parent_dir, strip_trash_prefix
from inkwell.models.document import Document, DocumentType
from inkwell.models.project import Project

FOLDER_ICON = "📁"
TRASH_ICON = "🗑️"

_DOCUMENT_ICONS: dict[DocumentType, str] = {
    DocumentType.CHAPTER: "📄",
    DocumentType.SCENE: "🎬",
    DocumentType.NOTE: "📝",
    DocumentType.RESEARCH: "🔬",
    DocumentType.CHARACTER: "👤",
    DocumentType.LOCATION: "📍",
    DocumentType.TIMELINE: "🕒",
    DocumentType.PLOT: "🧭",
    DocumentType.OBJECT: "🔑",
    DocumentType.ENTITY: "🏛️",
}

# Bucket order under the root, after Manuscript.
BUCKET_TYPES: tuple[DocumentType, ...] = (
    DocumentType.CHARACTER,
    DocumentType.LOCATION,
    DocumentType.RESEARCH,
    DocumentType.NOTE,
    DocumentType.TIMELINE,
    DocumentType.PLOT,
    DocumentType.OBJECT,
    DocumentType.ENTITY,
    DocumentType.OTHER,
)

_BUCKET_NAMES: dict[DocumentType, str] = {
    DocumentType.CHAPTER: "Manuscript",
    DocumentType.CHARACTER: "Characters",
    DocumentType.LOCATION: "Locations",
    DocumentType.RESEARCH: "Research",
    DocumentType.NOTE: "Notes",
    DocumentType.TIMELINE: "Timeline",
    DocumentType.PLOT: "Plot",
    DocumentType.OBJECT: "Objects",
    DocumentType.ENTITY: "Entities",
    DocumentType.OTHER: "Other",
}


class NodeKind(Enum):
    ROOT = "root"
    BUCKET = "bucket"
    SUBFOLDER = "subfolder"
    DOCUMENT = "document"
    TRASH = "trash"
    TRASH_FOLDER = "trash_folder"


@dataclass
class TreeNode:
    """One node of the display tree.

    Buckets carry folder_type. Subfolders carry folder_type and folder_path.
    Document nodes carry document_id.
    """

    name: str
    kind: NodeKind
    icon: str = FOLDER_ICON
    children: list["TreeNode"] = field(default_factory=list)
    document_id: str | None = None
    folder_path: str = ""
    folder_type: DocumentType | None = None

    @property
    def is_root(self) -> bool:
        return self.kind is NodeKind.ROOT

    @property
    def is_bucket(self) -> bool:
        return self.kind is NodeKind.BUCKET

    @property
    def is_trash(self) -> bool:
        return self.kind is NodeKind.TRASH

    @property
    def is_document(self) -> bool:
        return self.kind is NodeKind.DOCUMENT

    @property
    def is_folder(self) -> bool:
        return self.kind is not NodeKind.DOCUMENT


def icon_for(doc_type: DocumentType) -> str:
    return _DOCUMENT_ICONS.get(doc_type, "📄")


def bucket_name(doc_type: DocumentType) -> str:
    if doc_type is DocumentType.SCENE:
        doc_type = DocumentType.CHAPTER
    return _BUCKET_NAMES[doc_type]


def _document_node(doc: Document) -> TreeNode:
    return TreeNode(
        name=doc.title, kind=NodeKind.DOCUMENT, icon=icon_for(doc.type), document_id=doc.id
    )


def _by_order(doc: Document) -> tuple:
    return (doc.order, doc.created_at)


def _by_order_then_title(doc: Document) -> tuple:
    return (doc.order, doc.title)


def _group_by_first_segment(docs: list[Document]) -> dict[str, list[Document]]:
    groups: dict[str, list[Document]] = {}
    for doc in docs:
        groups.setdefault(doc.folder_path.split("/")[0], []).append(doc)
    return dict(sorted(groups.items()))


def _chapter_node(chapter: Document, scenes: list[Document]) -> TreeNode:
    node = _document_node(chapter)
    for scene in sorted((s for s in scenes if s.parent_id == chapter.id), key=_by_order):
        node.children.append(_document_node(scene))
    return node


def _build_manuscript(chapters: list[Document], scenes: list[Document]) -> TreeNode:
    manuscript = TreeNode(
        name=bucket_name(DocumentType.CHAPTER),
        kind=NodeKind.BUCKET,
        folder_type=DocumentType.CHAPTER,
    )

    root_level = sorted((c for c in chapters if not c.folder_path), key=lambda c: c.created_at)
    for chapter in root_level:
        manuscript.children.append(_chapter_node(chapter, scenes))

    nested = [c for c in chapters if c.folder_path]
    for name, group in _group_by_first_segment(nested).items():
        subfolder = TreeNode(
            name=name, kind=NodeKind.SUBFOLDER, folder_path=name, folder_type=DocumentType.CHAPTER
        )
        for chapter in sorted(group, key=_by_order):
            subfolder.children.append(_chapter_node(chapter, scenes))
        manuscript.children.append(subfolder)

    # Scenes whose chapter is gone or trashed still need a place.
    chapter_ids = {c.id for c in chapters}
    orphans = [s for s in scenes if s.parent_id not in chapter_ids]
    for scene in sorted(orphans, key=_by_order):
        manuscript.children.append(_document_node(scene))

    return manuscript


def _build_bucket(doc_type: DocumentType, docs: list[Document]) -> TreeNode:
    bucket = TreeNode(name=bucket_name(doc_type), kind=NodeKind.BUCKET, folder_type=doc_type)
    own = [d for d in docs if d.type is doc_type]

    for doc in sorted((d for d in own if not d.folder_path), key=_by_order_then_title):
        bucket.children.append(_document_node(doc))

    for name, group in _group_by_first_segment([d for d in own if d.folder_path]).items():
        subfolder = TreeNode(
            name=name, kind=NodeKind.SUBFOLDER, folder_path=name, folder_type=doc_type
        )
        for doc in sorted(group, key=_by_order_then_title):
            subfolder.children.append(_document_node(doc))
        bucket.children.append(subfolder)

    return bucket


def _prune_empty_folders(node: TreeNode) -> None:
    for child in node.children:
        if child.kind is NodeKind.TRASH_FOLDER:
            _prune_empty_folders(child)
    node.children = [c for c in node.children if c.kind is not NodeKind.TRASH_FOLDER or c.children]


def _sort_trash(node: TreeNode) -> None:
    node.children.sort(key=lambda c: (c.is_document, c.name.lower()))
    for child in node.children:
        _sort_trash(child)


def _build_trash(trashed: list[Document]) -> TreeNode:
    trash = TreeNode(name=TRASH_DIR_NAME, kind=NodeKind.TRASH, icon=TRASH_ICON)
    folders: dict[str, TreeNode] = {"": trash}

    def folder_for(path: str) -> TreeNode:
        if path in folders:
            return folders[path]
        parent = folder_for(parent_dir(path))
        name = path.rsplit("/", 1)[-1]
        node = TreeNode(name=name, kind=NodeKind.TRASH_FOLDER, folder_path=path)
        parent.children.append(node)
        folders[path] = node
        return node

    for doc in trashed:
        folder = folder_for(parent_dir(strip_trash_prefix(doc.content_file_path)))
        folder.children.append(_document_node(doc))

    _prune_empty_folders(trash)
    _sort_trash(trash)
    return trash


def build_tree(project: Project) -> TreeNode:
    """Build the full display tree.

    Every document appears exactly once. Every bucket is present even when
    empty, and the trash node is always the last child of the root.
    """
    trashed = project.trashed_documents()
    active = project.active_documents()
    chapters = [d for d in active if d.type is DocumentType.CHAPTER]
    scenes = [d for d in active if d.type is DocumentType.SCENE]
    others = [d for d in active if d.type not in (DocumentType.CHAPTER, DocumentType.SCENE)]

    root = TreeNode(name=project.name, kind=NodeKind.ROOT)
    root.children.append(_build_manuscript(chapters, scenes))
    for doc_type in BUCKET_TYPES:
        root.children.append(_build_bucket(doc_type, others))
    root.children.append(_build_trash(trashed))
    return root


def iter_nodes(node: TreeNode) -> Iterator[TreeNode]:
    """Depth-first, pre-order walk."""
    yield node
    for child in node.children:
        yield from iter_nodes(child)


def iter_document_ids(node: TreeNode) -> Iterator[str]:
    for n in iter_nodes(node):
        if n.document_id is not None:
            yield n.document_id


def find_bucket(root: TreeNode, doc_type: DocumentType) -> TreeNode:
    if doc_type is DocumentType.SCENE:
        doc_type = DocumentType.CHAPTER
    for child in root.children:
        if child.is_bucket and child.folder_type is doc_type:
            return child
    msg = f"No bucket for {doc_type.label} in tree"
    raise LookupError(msg)


def find_subfolder(root: TreeNode, doc_type: DocumentType, folder_path: str) -> TreeNode | None:
    for child in find_bucket(root, doc_type).children:
        if child.kind is NodeKind.SUBFOLDER and child.folder_path == folder_path:
            return child
    return None


def find_trash(root: TreeNode) -> TreeNode:
    for child in root.children:
        if child.is_trash:
            return child
    msg = "No trash node in tree"
    raise LookupError(msg)
