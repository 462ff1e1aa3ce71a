"""Error kinds raised by the package model.

All errors derive from `ValueError` so callers that already treat bad input as
`ValueError` keep working. Messages are stable and suitable for test assertions.
"""

from __future__ import annotations


class PackageError(ValueError):
    """Base class for package model errors."""


class InvalidArgumentError(PackageError):
    """A required argument (collaborator, path, name) is missing or malformed."""


class InvalidTargetError(PackageError):
    """A destination or source location on disk does not exist."""

    def __init__(self, path: object, message: str | None = None) -> None:
        super().__init__(message or f"target directory does not exist: {path}")
        self.path = path


class NameConflictError(PackageError):
    """A name collides with an existing sibling, or a file sits where a folder is expected."""

    def __init__(self, name: str, *, where: str = "") -> None:
        loc = f" in '{where}'" if where else ""
        super().__init__(f"name conflict: '{name}' already exists{loc}")
        self.name = name
        self.where = where
