"""Content tree: build a folder/file hierarchy from flat package paths and mutate it.

`build_tree` is the pure path-to-tree conversion. `ContentTree` owns the root
folder, routes every structural mutation through one place, and reports each
change to a single listener (the owning model).
"""

from __future__ import annotations

import logging
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable, Iterator, Optional

from .content import ContentHandle, PhysicalFileContent
from .errors import InvalidArgumentError, InvalidTargetError, NameConflictError
from .parts import PATH_SEPARATOR, PackageFile, PackageFolder, PackagePart, check_part_name

logger = logging.getLogger(__name__)


def split_package_path(path: str) -> list[str]:
    """Split a relative package path into segments.

    Both `/` and `\\` delimit segments; leading/trailing slashes are ignored.
    Empty paths and empty inner segments are rejected.
    """
    if not isinstance(path, str):
        raise InvalidArgumentError(f"package path: expected str, got {type(path).__name__}")
    norm = path.replace("\\", PATH_SEPARATOR).strip(PATH_SEPARATOR)
    if not norm:
        raise InvalidArgumentError("package path must be non-empty")
    segments = norm.split(PATH_SEPARATOR)
    for seg in segments:
        if not seg:
            raise InvalidArgumentError(f"package path has an empty segment: {path!r}")
        check_part_name(seg)
    return segments


def build_tree(entries: Iterable[tuple[str, ContentHandle]]) -> PackageFolder:
    """Convert (path, content) pairs into a rooted hierarchy.

    Intermediate folders are created on first sight; children keep first-seen order.

    Raises:
        NameConflictError: a segment that must be a folder already exists as a file,
            a file path collides with an existing folder, or a path repeats.
    """
    root = PackageFolder()
    for path, content in entries:
        *folders, file_name = split_package_path(path)
        node = root
        for seg in folders:
            child = node.get(seg)
            if child is None:
                child = node.add_child(PackageFolder(seg))
            elif not isinstance(child, PackageFolder):
                raise NameConflictError(seg, where=path)
            node = child
        if file_name in node:
            raise NameConflictError(file_name, where=node.path or "/")
        node.add_child(PackageFile(file_name, content))
    return root


class PackageFileView:
    """Lazy, restartable view of (path, content) for every file leaf.

    Each iteration walks the live tree, so the view reflects later mutations.
    """

    def __init__(self, root: PackageFolder) -> None:
        self._root = root

    def __iter__(self) -> Iterator[tuple[str, ContentHandle]]:
        for f in self._root.iter_files():
            yield f.path, f.content

    def __len__(self) -> int:
        return sum(1 for _ in self._root.iter_files())

    def __bool__(self) -> bool:
        return next(self._root.iter_files(), None) is not None

    def paths(self) -> list[str]:
        return [p for p, _ in self]


@dataclass(frozen=True)
class TreeChange:
    kind: str  # "added" | "deleted" | "renamed" | "moved"
    part: PackagePart


TreeListener = Callable[[TreeChange], None]


class ContentTree:
    """Owner of the package's folder/file hierarchy."""

    def __init__(self, root: PackageFolder, *, listener: Optional[TreeListener] = None) -> None:
        if root is None:
            raise InvalidArgumentError("root folder is required")
        self.root = root
        self._listener = listener

    @classmethod
    def from_entries(
        cls,
        entries: Iterable[tuple[str, ContentHandle]],
        *,
        listener: Optional[TreeListener] = None,
    ) -> "ContentTree":
        return cls(build_tree(entries), listener=listener)

    def _changed(self, kind: str, part: PackagePart) -> None:
        logger.debug("content %s: %s", kind, part.path)
        if self._listener is not None:
            self._listener(TreeChange(kind, part))

    def _require_member(self, part: PackagePart, *, what: str) -> None:
        if part is None:
            raise InvalidArgumentError(f"{what} is required")
        if part is not self.root and not self.root.is_ancestor_of(part):
            raise InvalidArgumentError(f"{what} '{part.path}' is not part of this package")

    # ---- queries ----

    def find(self, path: str) -> Optional[PackagePart]:
        return self.root.find(path)

    def enumerate_files(self) -> PackageFileView:
        return PackageFileView(self.root)

    # ---- structural mutation ----

    def add_file(self, parent: PackageFolder, name: str, content: ContentHandle) -> PackageFile:
        self._require_member(parent, what="parent folder")
        part = parent.add_child(PackageFile(check_part_name(name), content))
        self._changed("added", part)
        return part

    def add_folder(self, parent: PackageFolder, name: str) -> PackageFolder:
        self._require_member(parent, what="parent folder")
        part = parent.add_child(PackageFolder(check_part_name(name)))
        self._changed("added", part)
        return part

    def add_physical_file(self, parent: PackageFolder, source: str | Path) -> PackageFile:
        """Add a file from disk under its base name."""
        src = Path(source)
        if not src.is_file():
            raise InvalidTargetError(src, f"source file does not exist: {src}")
        return self.add_file(parent, src.name, PhysicalFileContent(src))

    def add_physical_folder(self, parent: PackageFolder, source: str | Path) -> PackageFolder:
        """Add a directory from disk, recursively, under its base name.

        The subtree is assembled detached and attached in one step, so a failure
        leaves the tree unchanged.
        """
        self._require_member(parent, what="parent folder")
        src = Path(source)
        if not src.is_dir():
            raise InvalidTargetError(src, f"source directory does not exist: {src}")
        name = check_part_name(src.name)
        if name in parent:
            raise NameConflictError(name, where=parent.path or "/")

        folder = PackageFolder(name)
        _populate_from_disk(folder, src)
        parent.add_child(folder)
        self._changed("added", folder)
        return folder

    def delete(self, part: PackagePart) -> PackagePart:
        """Remove a part and its whole subtree."""
        self._require_member(part, what="part")
        if part is self.root:
            raise InvalidArgumentError("the root folder cannot be deleted")
        parent = _parent_of(part)
        logger.debug("content deleted: %s", part.path)
        parent.remove_child(part.name)
        if self._listener is not None:
            self._listener(TreeChange("deleted", part))
        return part

    def rename(self, part: PackagePart, new_name: str) -> PackagePart:
        self._require_member(part, what="part")
        if part is self.root:
            raise InvalidArgumentError("the root folder cannot be renamed")
        parent = _parent_of(part)
        if new_name == part.name:
            return part
        parent.rename_child(part.name, new_name)
        self._changed("renamed", part)
        return part

    def move(self, part: PackagePart, new_parent: PackageFolder, new_name: Optional[str] = None) -> PackagePart:
        """Re-parent a part, optionally under a new name.

        The final name is checked against the destination before anything changes.
        """
        self._require_member(part, what="part")
        self._require_member(new_parent, what="destination folder")
        if part is self.root:
            raise InvalidArgumentError("the root folder cannot be moved")
        if part is new_parent or (isinstance(part, PackageFolder) and part.is_ancestor_of(new_parent)):
            raise InvalidArgumentError(f"cannot move '{part.path}' into itself")
        old_parent = _parent_of(part)
        name = part.name if new_name is None else check_part_name(new_name)
        if old_parent is new_parent:
            return self.rename(part, name)
        if name in new_parent:
            raise NameConflictError(name, where=new_parent.path or "/")
        old_parent.remove_child(part.name)
        part._name = name
        new_parent.add_child(part)
        self._changed("moved", part)
        return part

    # ---- export ----

    def export(self, destination: str | Path) -> list[Path]:
        """Mirror the hierarchy under an existing directory and write every file.

        Existing directories are reused; existing files are overwritten.
        Returns the written file paths.
        """
        if destination is None:
            raise InvalidArgumentError("destination directory is required")
        dest = Path(destination)
        if not dest.is_dir():
            raise InvalidTargetError(dest)

        written: list[Path] = []
        for part in self.root.iter_parts():
            target = dest.joinpath(*part.path.split(PATH_SEPARATOR))
            if isinstance(part, PackageFolder):
                target.mkdir(parents=True, exist_ok=True)
                continue
            if not isinstance(part, PackageFile):
                continue
            target.parent.mkdir(parents=True, exist_ok=True)
            with part.open() as src, target.open("wb") as out:
                shutil.copyfileobj(src, out)
            written.append(target)
        logger.info("exported %d file(s) to %s", len(written), dest)
        return written


def _parent_of(part: PackagePart) -> PackageFolder:
    parent = part.parent
    if parent is None:
        raise InvalidArgumentError(f"part '{part.path}' is not attached to a folder")
    return parent


def _populate_from_disk(folder: PackageFolder, directory: Path) -> None:
    for entry in sorted(directory.iterdir(), key=lambda p: p.name):
        if entry.is_symlink() and entry.is_dir():
            logger.debug("skipping symlinked directory %s", entry)
            continue
        if entry.is_dir():
            child = PackageFolder(check_part_name(entry.name))
            folder.add_child(child)
            _populate_from_disk(child, entry)
        elif entry.is_file():
            folder.add_child(PackageFile(check_part_name(entry.name), PhysicalFileContent(entry)))
