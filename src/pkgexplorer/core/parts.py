"""Package parts: the folder/file nodes of the content hierarchy.

Ownership runs strictly downwards: a folder's child mapping is the only strong
reference to a part. The parent link is a `weakref` used for path derivation and
removal only.
"""

from __future__ import annotations

import weakref
from typing import BinaryIO, Iterator, Optional

from .content import ContentHandle
from .errors import InvalidArgumentError, NameConflictError

PATH_SEPARATOR = "/"


def check_part_name(name: object) -> str:
    """Return `name` if it is usable as a part name, else raise InvalidArgumentError."""
    if not isinstance(name, str) or not name:
        raise InvalidArgumentError("part name must be a non-empty string")
    if "/" in name or "\\" in name:
        raise InvalidArgumentError(f"part name must not contain path separators: {name!r}")
    if name in (".", ".."):
        raise InvalidArgumentError(f"part name is reserved: {name!r}")
    return name


class PackagePart:
    """Base node. `path` is derived by walking ancestors, never stored."""

    def __init__(self, name: str) -> None:
        self._name = name
        self._parent_ref: Optional[weakref.ReferenceType[PackageFolder]] = None

    @property
    def name(self) -> str:
        return self._name

    @property
    def parent(self) -> Optional["PackageFolder"]:
        if self._parent_ref is None:
            return None
        return self._parent_ref()

    @property
    def path(self) -> str:
        names: list[str] = []
        node: Optional[PackagePart] = self
        while node is not None:
            if node.name:
                names.append(node.name)
            node = node.parent
        return PATH_SEPARATOR.join(reversed(names))

    def _attach(self, parent: "PackageFolder") -> None:
        self._parent_ref = weakref.ref(parent)

    def _detach(self) -> None:
        self._parent_ref = None

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.path or '<root>'!r})"


class PackageFile(PackagePart):
    """Leaf node holding a content handle."""

    def __init__(self, name: str, content: ContentHandle) -> None:
        super().__init__(name)
        if content is None:
            raise InvalidArgumentError(f"content handle is required for file '{name}'")
        self.content = content

    def open(self) -> BinaryIO:
        return self.content.open()


class PackageFolder(PackagePart):
    """Folder node; children keep first-seen insertion order and unique names."""

    def __init__(self, name: str = "") -> None:
        super().__init__(name)
        self._children: dict[str, PackagePart] = {}

    @property
    def children(self) -> list[PackagePart]:
        return list(self._children.values())

    def __len__(self) -> int:
        return len(self._children)

    def __iter__(self) -> Iterator[PackagePart]:
        return iter(list(self._children.values()))

    def __contains__(self, name: object) -> bool:
        return name in self._children

    def get(self, name: str) -> Optional[PackagePart]:
        return self._children.get(name)

    def add_child(self, part: PackagePart) -> PackagePart:
        if part.name in self._children:
            raise NameConflictError(part.name, where=self.path or "/")
        if part.parent is not None:
            raise InvalidArgumentError(f"part '{part.path}' is already attached to a folder")
        self._children[part.name] = part
        part._attach(self)
        return part

    def remove_child(self, name: str) -> PackagePart:
        try:
            part = self._children.pop(name)
        except KeyError:
            raise InvalidArgumentError(f"no child named '{name}' in '{self.path or '/'}'") from None
        part._detach()
        return part

    def rename_child(self, old_name: str, new_name: str) -> PackagePart:
        """Rename a direct child in place, keeping its position among siblings."""
        check_part_name(new_name)
        if old_name not in self._children:
            raise InvalidArgumentError(f"no child named '{old_name}' in '{self.path or '/'}'")
        if new_name == old_name:
            return self._children[old_name]
        if new_name in self._children:
            raise NameConflictError(new_name, where=self.path or "/")
        renamed: dict[str, PackagePart] = {}
        for key, child in self._children.items():
            if key == old_name:
                child._name = new_name
                renamed[new_name] = child
            else:
                renamed[key] = child
        self._children = renamed
        return renamed[new_name]

    def find(self, path: str) -> Optional[PackagePart]:
        """Look up a descendant by slash-delimited path relative to this folder."""
        node: PackagePart = self
        for segment in path.replace("\\", PATH_SEPARATOR).strip(PATH_SEPARATOR).split(PATH_SEPARATOR):
            if not segment:
                continue
            if not isinstance(node, PackageFolder):
                return None
            child = node.get(segment)
            if child is None:
                return None
            node = child
        return node

    def is_ancestor_of(self, part: PackagePart) -> bool:
        node = part.parent
        while node is not None:
            if node is self:
                return True
            node = node.parent
        return False

    def iter_parts(self) -> Iterator[PackagePart]:
        """Depth-first pre-order over all descendants, in insertion order."""
        for child in list(self._children.values()):
            yield child
            if isinstance(child, PackageFolder):
                yield from child.iter_parts()

    def iter_files(self) -> Iterator[PackageFile]:
        for part in self.iter_parts():
            if isinstance(part, PackageFile):
                yield part
