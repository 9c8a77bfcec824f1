"""Configuration constants for inkwell."""

import os
from pathlib import Path

# Extension every project index file carries. Case-insensitive on input.
PROJECT_FILE_EXTENSION: str = ".json"

# Reserved directory for soft-deleted documents, relative to the project directory.
TRASH_DIR_NAME: str = "Trashcan"

# Used for the page estimate in project statistics.
WORDS_PER_PAGE: int = 250

# Where `inkwell new` puts projects when no directory is given.
DEFAULT_PROJECTS_DIR: Path = Path("~/.local/share/inkwell").expanduser()

# Environment variable naming the project file, used when no path is passed.
PROJECT_ENV_VAR: str = "INKWELL_PROJECT"

# When set, every log message (DEBUG and up) is also appended to this file.
LOG_FILE_ENV_VAR: str = "INKWELL_LOG_FILE"

# Seed documents for a new project: (type value, title, content, parent title).
SAMPLE_DOCUMENTS: list[tuple[str, str, str, str | None]] = [
    (
        "chapter",
        "Chapter 1",
        "# Chapter 1\n\nThis is the beginning of your story.\n\nStart writing here...",
        None,
    ),
    (
        "scene",
        "Scene 1",
        "# Scene 1\n\nDescribe what happens in this scene.\n\n",
        "Chapter 1",
    ),
    (
        "character",
        "Sample character",
        "# Character name \n\n## Description\n\n## Background\n\n"
        "Add character background here.\n\n## Traits\n\n",
        None,
    ),
    ("location", "Sample location", "# Location name\n\n## Description\n\n", None),
    (
        "research",
        "Sample research note",
        "# Sample research note\n\nAdd your research notes here.\n\n"
        "## Sources\n\n- Source 1\n- Source 2\n",
        None,
    ),
    (
        "note",
        "Sample note",
        "# Ideas or insights\n\n- Idea 1\n- Idea 2\n- Idea 3\n\n"
        "## Notes\n\nAdditional notes and thoughts.\n",
        None,
    ),
]


def resolve_project_file(explicit: Path | None = None) -> Path:
    """Return the project file to operate on.

    The explicit path wins, then the INKWELL_PROJECT environment variable.
    Raises RuntimeError if neither is set.
    """
    if explicit is not None:
        return explicit.expanduser()
    from_env = os.environ.get(PROJECT_ENV_VAR)
    if from_env:
        return Path(from_env).expanduser()
    msg = f"No project file given and {PROJECT_ENV_VAR} is not set"
    raise RuntimeError(msg)
