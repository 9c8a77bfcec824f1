"""Convert projects to and from the JSON index structure.

The index holds the project name, the document records and the metadata.
Content text is never part of it. Keys are camelCase.
"""

from dataclasses import fields
from datetime import datetime
from pathlib import Path
from typing import Any

from inkwell.errors import ProjectLoadError
from inkwell.models.document import Document, DocumentType
from inkwell.models.project import (
    Project,
    ProjectMetadata,
    ProjectStatistics,
    WordCountTargets,
)


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.capitalize() for part in rest)


def _dump_time(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def _load_time(value: Any, *, default: datetime | None = None) -> datetime | None:
    if value in (None, ""):
        return default
    if not isinstance(value, str):
        msg = f"expected an ISO timestamp, got {value!r}"
        raise ValueError(msg)
    return datetime.fromisoformat(value)


def _dump_flat(obj: Any) -> dict[str, Any]:
    """Serialize a flat dataclass of scalars and datetimes."""
    out: dict[str, Any] = {}
    for f in fields(obj):
        value = getattr(obj, f.name)
        out[_camel(f.name)] = _dump_time(value) if isinstance(value, datetime) else value
    return out


def _load_flat(cls: type, data: dict[str, Any]) -> Any:
    kwargs: dict[str, Any] = {}
    for f in fields(cls):
        key = _camel(f.name)
        if key not in data:
            continue
        value = data[key]
        if f.name.endswith("_at") or f.name.endswith("_date"):
            value = _load_time(value)
        kwargs[f.name] = value
    return cls(**kwargs)


def document_to_dict(doc: Document) -> dict[str, Any]:
    return {
        "id": doc.id,
        "title": doc.title,
        "parentId": doc.parent_id,
        "folderPath": doc.folder_path,
        "contentFilePath": doc.content_file_path,
        "type": doc.type.value,
        "order": doc.order,
        "createdAt": _dump_time(doc.created_at),
        "modifiedAt": _dump_time(doc.modified_at),
    }


def document_from_dict(data: dict[str, Any]) -> tuple[Document, str | None]:
    """Parse one document record.

    Returns the document and any inline content found in the record (legacy
    indexes stored the text in the index itself).
    """
    now = datetime.now()
    doc = Document(
        id=data["id"],
        title=data.get("title") or "",
        type=DocumentType(str(data.get("type", "chapter")).lower()),
        parent_id=data.get("parentId"),
        folder_path=data.get("folderPath") or "",
        content_file_path=(data.get("contentFilePath") or "").replace("\\", "/"),
        order=int(data.get("order", 0)),
        created_at=_load_time(data.get("createdAt"), default=now) or now,
        modified_at=_load_time(data.get("modifiedAt"), default=now) or now,
    )
    inline = data.get("content")
    return doc, inline if isinstance(inline, str) else None


_METADATA_KEYS = {
    "title", "author", "wordCountTargets", "statistics", "keywords", "tags",
    "customFields", "settings", "version", "createdAt", "modifiedAt", "lastOpenedAt",
}


def metadata_to_dict(meta: ProjectMetadata) -> dict[str, Any]:
    out: dict[str, Any] = dict(meta.extra)
    out.update(
        {
            "title": meta.title,
            "author": meta.author,
            "wordCountTargets": _dump_flat(meta.word_count_targets),
            "statistics": _dump_flat(meta.statistics),
            "keywords": list(meta.keywords),
            "tags": list(meta.tags),
            "customFields": dict(meta.custom_fields),
            "settings": dict(meta.settings),
            "version": meta.version,
            "createdAt": _dump_time(meta.created_at),
            "modifiedAt": _dump_time(meta.modified_at),
            "lastOpenedAt": _dump_time(meta.last_opened_at),
        }
    )
    return out


def metadata_from_dict(data: dict[str, Any]) -> ProjectMetadata:
    now = datetime.now()
    return ProjectMetadata(
        title=data.get("title") or "",
        author=data.get("author") or "",
        word_count_targets=_load_flat(WordCountTargets, data.get("wordCountTargets") or {}),
        statistics=_load_flat(ProjectStatistics, data.get("statistics") or {}),
        keywords=list(data.get("keywords") or []),
        tags=list(data.get("tags") or []),
        custom_fields=dict(data.get("customFields") or {}),
        settings=dict(data.get("settings") or {}),
        version=str(data.get("version") or "1.0"),
        created_at=_load_time(data.get("createdAt"), default=now) or now,
        modified_at=_load_time(data.get("modifiedAt"), default=now) or now,
        last_opened_at=_load_time(data.get("lastOpenedAt")),
        extra={k: v for k, v in data.items() if k not in _METADATA_KEYS},
    )


def project_to_dict(project: Project) -> dict[str, Any]:
    return {
        "name": project.name,
        "filePath": str(project.file_path) if project.file_path else "",
        "documents": [document_to_dict(d) for d in project.documents],
        "metadata": metadata_to_dict(project.metadata),
        "createdAt": _dump_time(project.created_at),
        "modifiedAt": _dump_time(project.modified_at),
    }


def project_from_dict(data: Any) -> tuple[Project, dict[str, str]]:
    """Parse a project index.

    Returns the project and a map of document id -> inline legacy content.
    Raises ProjectLoadError if the structure is not a project index.
    """
    if not isinstance(data, dict) or not isinstance(data.get("documents", []), list):
        msg = "Project index must be an object with a 'documents' list"
        raise ProjectLoadError(msg)

    try:
        documents: list[Document] = []
        inline_content: dict[str, str] = {}
        for record in data.get("documents", []):
            doc, inline = document_from_dict(record)
            documents.append(doc)
            if inline:
                inline_content[doc.id] = inline

        now = datetime.now()
        raw_metadata = data.get("metadata")
        project = Project(
            name=data.get("name") or "",
            file_path=Path(data["filePath"]) if data.get("filePath") else None,
            documents=documents,
            metadata=metadata_from_dict(raw_metadata) if raw_metadata else ProjectMetadata(),
            created_at=_load_time(data.get("createdAt"), default=now) or now,
            modified_at=_load_time(data.get("modifiedAt"), default=now) or now,
        )
    except (KeyError, TypeError, ValueError, AttributeError) as e:
        msg = f"Malformed project index: {e}"
        raise ProjectLoadError(msg) from e

    return project, inline_content
