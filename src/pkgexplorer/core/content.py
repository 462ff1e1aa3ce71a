"""Content handles: capabilities to open a read stream for a file's bytes."""

from __future__ import annotations

import io
from pathlib import Path
from typing import BinaryIO, Protocol, runtime_checkable


@runtime_checkable
class ContentHandle(Protocol):
    def open(self) -> BinaryIO:  # pragma: no cover (protocol)
        ...


class BytesContent:
    """In-memory content, e.g. an entry read from a package archive."""

    def __init__(self, data: bytes) -> None:
        if not isinstance(data, (bytes, bytearray)):
            raise TypeError(f"BytesContent: expected bytes, got {type(data).__name__}")
        self._data = bytes(data)

    def open(self) -> BinaryIO:
        return io.BytesIO(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"BytesContent({len(self._data)} bytes)"


class PhysicalFileContent:
    """Content backed by a file on the local filesystem."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def open(self) -> BinaryIO:
        return self.path.open("rb")

    def __repr__(self) -> str:
        return f"PhysicalFileContent({str(self.path)!r})"


def read_bytes(handle: ContentHandle) -> bytes:
    """Read the whole content of a handle."""
    with handle.open() as f:
        return f.read()
