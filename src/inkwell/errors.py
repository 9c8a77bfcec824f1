"""Exception hierarchy for inkwell."""


class InkwellError(Exception):
    """Base class for all inkwell errors."""


class ProjectLoadError(InkwellError):
    """The project index is missing, unreadable or malformed."""


class ProjectSaveError(InkwellError):
    """The project index could not be written."""


class DocumentNotFoundError(InkwellError, LookupError):
    """No document with the requested id (or title) exists in the project."""


class InvalidTitleError(InkwellError, ValueError):
    """A title or name is empty or blank."""


class MissingParentError(InkwellError, ValueError):
    """A Scene refers to a chapter that does not exist or is not usable."""


class OrphanedSceneError(InkwellError, ValueError):
    """A canonical path was requested for a Scene whose chapter cannot be resolved."""


class InvalidTargetError(InkwellError, ValueError):
    """A document cannot be placed in the requested folder."""


class NotTrashedError(InkwellError, ValueError):
    """The operation is only legal for documents in the trash."""


class AlreadyTrashedError(InkwellError, ValueError):
    """The document is already in the trash."""
