"""Persistence: snapshot, save and export of the current package state."""

from __future__ import annotations

import io
import logging
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Any, BinaryIO, Callable, Iterable, Optional

from pkgexplorer.bundle.io import write_package
from pkgexplorer.bundle.manifest import build_manifest, manifest_file_name, write_manifest
from pkgexplorer.core.content import ContentHandle
from pkgexplorer.core.errors import InvalidArgumentError, InvalidTargetError
from pkgexplorer.core.metadata import EditablePackageMetadata
from pkgexplorer.core.tree import ContentTree
from pkgexplorer.services import ConfirmationService, RecentFilesNotifier, SourceKind

logger = logging.getLogger(__name__)

PackageWriter = Callable[[Path, EditablePackageMetadata, Iterable[tuple[str, ContentHandle]]], Any]


@dataclass(frozen=True)
class ExportResult:
    files: list[Path]
    manifest_path: Path
    manifest_written: bool


class PersistenceCoordinator:
    def __init__(
        self,
        tree: ContentTree,
        metadata: EditablePackageMetadata,
        *,
        confirmation: ConfirmationService,
        recent_files: RecentFilesNotifier,
        on_saved: Optional[Callable[[Path], None]] = None,
        writer: PackageWriter = write_package,
    ) -> None:
        if tree is None:
            raise InvalidArgumentError("tree is required")
        if metadata is None:
            raise InvalidArgumentError("metadata is required")
        if confirmation is None:
            raise InvalidArgumentError("confirmation service is required")
        if recent_files is None:
            raise InvalidArgumentError("recent files notifier is required")
        self.tree = tree
        self.metadata = metadata
        self.confirmation = confirmation
        self.recent_files = recent_files
        self.on_saved = on_saved
        self.writer = writer

    def snapshot(self) -> Optional[BinaryIO]:
        """Serialize the current package and return a stream positioned at the start.

        Returns None when the writer did not produce a file.
        """
        fd, tmp_name = tempfile.mkstemp(suffix=".pkg")
        os.close(fd)
        os.remove(tmp_name)
        try:
            self.writer(Path(tmp_name), self.metadata, self.tree.enumerate_files())
            if not os.path.exists(tmp_name):
                logger.warning("package snapshot was not materialized")
                return None
            with open(tmp_name, "rb") as f:
                data = f.read()
        finally:
            if os.path.exists(tmp_name):
                os.remove(tmp_name)
        return io.BytesIO(data)

    def save(self, destination: str | Path) -> Path:
        if destination is None:
            raise InvalidArgumentError("destination path is required")
        dest = Path(destination)
        self.writer(dest, self.metadata, self.tree.enumerate_files())
        logger.info("saved package %s to %s", self.metadata, dest)
        if self.on_saved is not None:
            self.on_saved(dest)
        self.recent_files.notify_file_added(self.metadata, str(dest), SourceKind.LOCAL_PACKAGE)
        return dest

    def export_manifest(self, destination: str | Path) -> bool:
        """Write the metadata manifest. Returns False when an overwrite was declined."""
        if destination is None:
            raise InvalidArgumentError("manifest path is required")
        dest = Path(destination)
        if dest.exists():
            confirmed = self.confirmation.confirm(
                f"File '{dest}' already exists. Do you want to replace it?"
            )
            if not confirmed:
                logger.info("kept existing manifest %s", dest)
                return False
        write_manifest(dest, build_manifest(self.metadata))
        logger.info("exported manifest to %s", dest)
        return True

    def export(self, root_directory: str | Path) -> ExportResult:
        """Export content files plus `<id>.manifest.json` into an existing directory.

        `manifest_written` is False when replacing an existing manifest was declined.
        """
        if root_directory is None:
            raise InvalidArgumentError("root directory is required")
        root = Path(root_directory)
        if not root.is_dir():
            raise InvalidTargetError(root)
        if not self.metadata.id:
            raise InvalidArgumentError("package id is required to name the exported manifest")

        files = self.tree.export(root)
        manifest_path = root / manifest_file_name(self.metadata.id)
        written = self.export_manifest(manifest_path)
        return ExportResult(files=files, manifest_path=manifest_path, manifest_written=written)
