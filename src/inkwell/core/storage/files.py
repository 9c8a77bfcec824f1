"""Best-effort file operations that report failures instead of raising.

Each function returns a FileOpResult. Callers decide whether a failure
matters; structural edits log it and carry on, so the in-memory model always
reflects what the user asked for even when the disk lags behind.
"""

import os
import shutil
import tempfile
from dataclasses import dataclass
from pathlib import Path

from loguru import logger


@dataclass(frozen=True)
class FileOpResult:
    """Outcome of a single file operation.

    strategy names what was done: "read", "write", "move", "copy",
    "delete", "skipped" (nothing to do), "conflict" (the destination is a
    different, existing file and was left alone), or "path-only" (every
    strategy failed, only the in-memory path was updated).
    """

    ok: bool
    path: Path | None = None
    strategy: str = ""
    error: OSError | None = None
    value: str | None = None


def read_text(path: Path) -> FileOpResult:
    """Read a UTF-8 file. A missing file is a failure with FileNotFoundError."""
    try:
        with open(path, encoding="utf-8") as f:
            contents = f.read()
    except (OSError, UnicodeDecodeError) as e:
        error = e if isinstance(e, OSError) else OSError(str(e))
        return FileOpResult(ok=False, path=path, strategy="read", error=error)
    return FileOpResult(ok=True, path=path, strategy="read", value=contents)


def write_text(path: Path, contents: str) -> FileOpResult:
    """Write a UTF-8 file, creating parent directories as needed."""
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            f.write(contents)
    except OSError as e:
        return FileOpResult(ok=False, path=path, strategy="write", error=e)
    return FileOpResult(ok=True, path=path, strategy="write")


def write_text_atomic(path: Path, contents: str) -> FileOpResult:
    """Write a file through a temporary sibling and rename it into place."""
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(contents)
            os.replace(tmp_name, path)
        except OSError:
            Path(tmp_name).unlink(missing_ok=True)
            raise
    except OSError as e:
        return FileOpResult(ok=False, path=path, strategy="write", error=e)
    return FileOpResult(ok=True, path=path, strategy="write")


def delete_file(path: Path) -> FileOpResult:
    """Delete a file. A file that is already gone counts as success."""
    try:
        path.unlink()
    except FileNotFoundError:
        return FileOpResult(ok=True, path=path, strategy="skipped")
    except OSError as e:
        return FileOpResult(ok=False, path=path, strategy="delete", error=e)
    return FileOpResult(ok=True, path=path, strategy="delete")


def same_file(a: Path, b: Path) -> bool:
    """True if a and b name the same existing file (e.g. differ only by case)."""
    try:
        return os.path.samefile(a, b)
    except OSError:
        return False


def relocate_file(src: Path, dst: Path) -> FileOpResult:
    """Move src to dst: direct move, then copy+delete, then give up.

    A missing source is not an error (the document was never flushed), the
    result is "skipped". An existing, different file at dst is never
    replaced: the result is a failed "conflict". On total failure the
    result has strategy "path-only": the caller has already re-targeted the
    document path and the next flush will write the content at dst.
    """
    if not src.is_file():
        return FileOpResult(ok=True, path=dst, strategy="skipped")
    if src == dst:
        return FileOpResult(ok=True, path=dst, strategy="skipped")
    if dst.exists() and not same_file(src, dst):
        logger.warning("Not moving {} over existing {}", src, dst)
        error = FileExistsError(f"{dst} already exists")
        return FileOpResult(ok=False, path=dst, strategy="conflict", error=error)

    try:
        dst.parent.mkdir(parents=True, exist_ok=True)
        shutil.move(src, dst)
        logger.debug("Moved {} -> {}", src, dst)
        return FileOpResult(ok=True, path=dst, strategy="move")
    except OSError as e:
        logger.debug("Direct move {} -> {} failed ({}), trying copy", src, dst, e)

    try:
        shutil.copy2(src, dst)
        src.unlink()
        logger.debug("Copied {} -> {} and removed source", src, dst)
        return FileOpResult(ok=True, path=dst, strategy="copy")
    except OSError as e:
        logger.warning("Could not relocate {} -> {}: {}", src, dst, e)
        return FileOpResult(ok=False, path=dst, strategy="path-only", error=e)


def prune_empty_dirs(start: Path, stop: Path) -> list[Path]:
    """Remove start and its ancestors while they are empty, stopping at stop.

    stop itself is never removed. Returns the directories removed.
    """
    removed: list[Path] = []
    current = start
    try:
        current.relative_to(stop)
    except ValueError:
        return removed
    while current != stop and current.is_dir():
        if any(current.iterdir()):
            break
        try:
            current.rmdir()
        except OSError as e:
            logger.debug("Could not remove empty directory {}: {}", current, e)
            break
        removed.append(current)
        current = current.parent
    return removed
