"""PackageModel: the aggregate root an interactive caller drives.

It composes the content tree, the metadata edit session and the persistence
coordinator, tracks the dirty flag, and owns the "currently displayed content"
reference. State changes are reported to subscribers as `ModelEvent` values,
emitted only when the observed value actually changes.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, BinaryIO, Callable, Optional

from pkgexplorer.bundle.io import PackageSource, read_package, write_package
from pkgexplorer.core.content import ContentHandle, read_bytes
from pkgexplorer.core.edit import EditEvent, EditTransaction
from pkgexplorer.core.errors import InvalidArgumentError
from pkgexplorer.core.metadata import EditablePackageMetadata
from pkgexplorer.core.parts import PackageFile, PackageFolder, PackagePart
from pkgexplorer.core.tree import ContentTree, PackageFileView, TreeChange
from pkgexplorer.persistence import ExportResult, PackageWriter, PersistenceCoordinator
from pkgexplorer.services import ConfirmationService, ExternalViewer, NullViewer, RecentFilesNotifier

logger = logging.getLogger(__name__)

WINDOW_TITLE_PREFIX = "Package Explorer"


class ModelEvent(enum.Enum):
    HAS_EDIT = "has_edit"
    IS_IN_EDIT_MODE = "is_in_edit_mode"
    PACKAGE_METADATA = "package_metadata"
    WINDOW_TITLE = "window_title"
    SHOW_CONTENT_VIEWER = "show_content_viewer"
    CURRENT_FILE_INFO = "current_file_info"
    PACKAGE_SOURCE = "package_source"
    SELECTED_ITEM = "selected_item"


ModelListener = Callable[[ModelEvent], None]


@dataclass(frozen=True)
class FileContentInfo:
    """What the content viewer shows for one file."""

    file: PackageFile
    name: str
    content: Optional[str]
    is_binary: bool

    @classmethod
    def from_file(cls, file: PackageFile) -> "FileContentInfo":
        data = read_bytes(file.content)
        if b"\x00" in data:
            return cls(file, file.name, None, True)
        try:
            text = data.decode("utf-8")
        except UnicodeDecodeError:
            return cls(file, file.name, None, True)
        return cls(file, file.name, text, False)


class PackageModel:
    def __init__(
        self,
        package: PackageSource,
        *,
        confirmation: ConfirmationService,
        recent_files: RecentFilesNotifier,
        viewer: Optional[ExternalViewer] = None,
        source: str | Path | None = None,
        writer: PackageWriter = write_package,
    ) -> None:
        if package is None:
            raise InvalidArgumentError("package is required")
        if confirmation is None:
            raise InvalidArgumentError("confirmation service is required")
        if recent_files is None:
            raise InvalidArgumentError("recent files notifier is required")

        self._listeners: list[ModelListener] = []
        self._has_edit = False
        self._show_content_viewer = False
        self._current_file_info: Optional[FileContentInfo] = None
        self._selected_item: Optional[PackagePart] = None
        self._package_source: Optional[str] = None

        self.viewer: ExternalViewer = viewer or NullViewer()
        self.recent_files = recent_files
        self.confirmation = confirmation

        self.metadata = EditablePackageMetadata.from_manifest(package.metadata.to_manifest_fields())
        self.tree = ContentTree.from_entries(package.entries, listener=self._on_tree_change)
        self.edit = EditTransaction(self.metadata, listener=self._on_edit_event)
        self.persistence = PersistenceCoordinator(
            self.tree,
            self.metadata,
            confirmation=confirmation,
            recent_files=recent_files,
            on_saved=self._on_saved,
            writer=writer,
        )

        if source is None:
            source = package.location
        self._package_source = str(source) if source is not None else None

    @classmethod
    def open(cls, path: str | Path, *, validate_hashes: bool = False, **kwargs: Any) -> "PackageModel":
        package = read_package(path, validate_hashes=validate_hashes)
        return cls(package, source=path, **kwargs)

    # ---- events ----

    def subscribe(self, listener: ModelListener) -> Callable[[], None]:
        """Register a listener; returns a callable that unregisters it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _emit(self, event: ModelEvent) -> None:
        for listener in list(self._listeners):
            listener(event)

    # ---- observed state ----

    @property
    def has_edit(self) -> bool:
        return self._has_edit

    def _set_has_edit(self, value: bool) -> None:
        if self._has_edit != value:
            self._has_edit = value
            self._emit(ModelEvent.HAS_EDIT)

    @property
    def is_in_edit_mode(self) -> bool:
        return self.edit.is_editing

    @property
    def show_content_viewer(self) -> bool:
        return self._show_content_viewer

    @property
    def current_file_info(self) -> Optional[FileContentInfo]:
        return self._current_file_info

    @property
    def package_source(self) -> Optional[str]:
        return self._package_source

    @package_source.setter
    def package_source(self, value: str | Path | None) -> None:
        value = str(value) if value is not None else None
        if self._package_source != value:
            self._package_source = value
            self._emit(ModelEvent.PACKAGE_SOURCE)

    @property
    def selected_item(self) -> Optional[PackagePart]:
        return self._selected_item

    @selected_item.setter
    def selected_item(self, value: Optional[PackagePart]) -> None:
        if self._selected_item is not value:
            self._selected_item = value
            self._emit(ModelEvent.SELECTED_ITEM)

    @property
    def window_title(self) -> str:
        return f"{WINDOW_TITLE_PREFIX} - {self.metadata}"

    @property
    def root_folder(self) -> PackageFolder:
        return self.tree.root

    @property
    def package_parts(self) -> list[PackagePart]:
        return self.tree.root.children

    @property
    def is_valid(self) -> bool:
        """False for a package with no files, no dependencies and no framework assemblies."""
        return bool(self.files()) or bool(self.metadata.dependencies) or bool(self.metadata.framework_assemblies)

    def files(self) -> PackageFileView:
        return self.tree.enumerate_files()

    def find(self, path: str) -> Optional[PackagePart]:
        return self.tree.find(path)

    # ---- content tree ----

    def _on_tree_change(self, change: TreeChange) -> None:
        if change.kind == "deleted":
            self._on_content_deleted(change.part)
        self._set_has_edit(True)

    def _on_content_deleted(self, part: PackagePart) -> None:
        def gone(item: Optional[PackagePart]) -> bool:
            if item is None:
                return False
            return item is part or (isinstance(part, PackageFolder) and part.is_ancestor_of(item))

        info = self._current_file_info
        if info is not None and gone(info.file):
            self.close_content_viewer()
        if gone(self._selected_item):
            self.selected_item = None

    def add_file(self, parent: Optional[PackageFolder], name: str, content: ContentHandle) -> PackageFile:
        return self.tree.add_file(parent or self.tree.root, name, content)

    def add_folder(self, parent: Optional[PackageFolder], name: str) -> PackageFolder:
        return self.tree.add_folder(parent or self.tree.root, name)

    def add_physical_file(self, parent: Optional[PackageFolder], source: str | Path) -> PackageFile:
        return self.tree.add_physical_file(parent or self.tree.root, source)

    def add_physical_folder(self, parent: Optional[PackageFolder], source: str | Path) -> PackageFolder:
        return self.tree.add_physical_folder(parent or self.tree.root, source)

    def delete(self, part: PackagePart) -> PackagePart:
        return self.tree.delete(part)

    def rename(self, part: PackagePart, new_name: str) -> PackagePart:
        return self.tree.rename(part, new_name)

    def move(self, part: PackagePart, new_parent: PackageFolder, new_name: Optional[str] = None) -> PackagePart:
        return self.tree.move(part, new_parent, new_name)

    # ---- content viewer ----

    def show_file(self, file: PackageFile) -> FileContentInfo:
        if not isinstance(file, PackageFile):
            raise InvalidArgumentError("only files can be shown in the content viewer")
        if not self.tree.root.is_ancestor_of(file):
            raise InvalidArgumentError(f"file '{file.path}' is not part of this package")
        info = FileContentInfo.from_file(file)
        if not self._show_content_viewer:
            self._show_content_viewer = True
            self._emit(ModelEvent.SHOW_CONTENT_VIEWER)
        self._current_file_info = info
        self._emit(ModelEvent.CURRENT_FILE_INFO)
        return info

    def close_content_viewer(self) -> None:
        if self._show_content_viewer:
            self._show_content_viewer = False
            self._emit(ModelEvent.SHOW_CONTENT_VIEWER)
        if self._current_file_info is not None:
            self._current_file_info = None
            self._emit(ModelEvent.CURRENT_FILE_INFO)

    def open_external(self, file: PackageFile) -> None:
        if not isinstance(file, PackageFile):
            raise InvalidArgumentError("only files can be opened in a viewer")
        self.viewer.open(file.name, file.content)

    def save_content(self, file: PackageFile, destination: str | Path) -> Path:
        """Write one file's bytes to `destination`."""
        if not isinstance(file, PackageFile):
            raise InvalidArgumentError("only files can be saved")
        if destination is None:
            raise InvalidArgumentError("destination path is required")
        dest = Path(destination)
        dest.parent.mkdir(parents=True, exist_ok=True)
        dest.write_bytes(read_bytes(file.content))
        logger.info("saved %s to %s", file.path, dest)
        return dest

    # ---- metadata edit session ----

    def _on_edit_event(self, event: EditEvent) -> None:
        if event is EditEvent.REBIND:
            self._emit(ModelEvent.PACKAGE_METADATA)
        elif event is EditEvent.MODE_CHANGED:
            self._emit(ModelEvent.IS_IN_EDIT_MODE)
        elif event is EditEvent.COMMITTED:
            self._set_has_edit(True)
            self._emit(ModelEvent.WINDOW_TITLE)

    def begin_edit(self) -> None:
        self.edit.begin_edit()

    def cancel_edit(self) -> None:
        self.edit.cancel_edit()

    def commit_edit(self) -> None:
        self.edit.commit_edit()

    # ---- persistence ----

    def _on_saved(self, path: Path) -> None:
        self._set_has_edit(False)
        self.package_source = path

    def get_current_package_stream(self) -> Optional[BinaryIO]:
        return self.persistence.snapshot()

    def save(self, destination: str | Path) -> Path:
        return self.persistence.save(destination)

    def export(self, root_directory: str | Path) -> ExportResult:
        return self.persistence.export(root_directory)

    def export_manifest(self, destination: str | Path) -> bool:
        return self.persistence.export_manifest(destination)
