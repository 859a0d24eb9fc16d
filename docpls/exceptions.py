"""Custom exceptions for docpls."""


class DocPlsError(Exception):
    """Base exception for all docpls errors."""


class ProjectNotFoundError(DocPlsError):
    """Raised when a project root does not exist or cannot be read."""


class ProjectNotAnalyzedError(DocPlsError):
    """Raised when a snapshot is requested for a root that was never analyzed."""

    def __init__(self, root: str):
        self.root = root
        super().__init__(
            f"Project not found at {root}. Run 'docpls init {root}' first."
        )


class StoreError(DocPlsError):
    """Raised when the snapshot store cannot be written."""
