"""Collaborator capabilities consumed by the package model.

These are injected through the `PackageModel` constructor; nothing here is
global. The concrete classes are minimal implementations for non-interactive
use and tests. The interactive ones live in `pkgexplorer.cli`.
"""

from __future__ import annotations

import enum
from collections import deque
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from pkgexplorer.core.content import ContentHandle
from pkgexplorer.core.metadata import EditablePackageMetadata


class SourceKind(enum.Enum):
    LOCAL_PACKAGE = "local"
    REMOTE_PACKAGE = "remote"


@runtime_checkable
class ConfirmationService(Protocol):
    def confirm(self, message: str) -> bool:  # pragma: no cover (protocol)
        ...


@runtime_checkable
class RecentFilesNotifier(Protocol):
    def notify_file_added(self, metadata: EditablePackageMetadata, path: str, kind: SourceKind) -> None:  # pragma: no cover
        ...


@runtime_checkable
class ExternalViewer(Protocol):
    def open(self, name: str, content: ContentHandle) -> None:  # pragma: no cover (protocol)
        ...


class FixedConfirmation:
    """Answers every confirmation with the same value and remembers the prompts."""

    def __init__(self, answer: bool) -> None:
        self.answer = answer
        self.messages: list[str] = []

    def confirm(self, message: str) -> bool:
        self.messages.append(message)
        return self.answer


@dataclass(frozen=True)
class RecentFile:
    package: str
    path: str
    kind: SourceKind


class RecentFilesList:
    """In-memory most-recently-used list; newest first, unique by path."""

    def __init__(self, max_items: int = 10) -> None:
        if max_items < 1:
            raise ValueError("max_items must be >= 1")
        self._items: deque[RecentFile] = deque(maxlen=max_items)

    def notify_file_added(self, metadata: EditablePackageMetadata, path: str, kind: SourceKind) -> None:
        for item in list(self._items):
            if item.path == path:
                self._items.remove(item)
        self._items.appendleft(RecentFile(str(metadata), path, kind))

    @property
    def items(self) -> list[RecentFile]:
        return list(self._items)


class NullViewer:
    def open(self, name: str, content: ContentHandle) -> None:
        return None
