"""pkgexplorer core: content tree, metadata record and edit session.

This package must not import bundle/persistence/cli to avoid circular dependencies.
"""

from __future__ import annotations

from .content import BytesContent, ContentHandle, PhysicalFileContent, read_bytes
from .edit import EditEvent, EditState, EditTransaction
from .errors import InvalidArgumentError, InvalidTargetError, NameConflictError, PackageError
from .metadata import EditablePackageMetadata, FrameworkAssemblyReference, PackageDependency
from .parts import PackageFile, PackageFolder, PackagePart
from .tree import ContentTree, PackageFileView, TreeChange, build_tree, split_package_path

__all__ = [
    "BytesContent",
    "ContentHandle",
    "PhysicalFileContent",
    "read_bytes",
    "EditEvent",
    "EditState",
    "EditTransaction",
    "PackageError",
    "InvalidArgumentError",
    "InvalidTargetError",
    "NameConflictError",
    "EditablePackageMetadata",
    "FrameworkAssemblyReference",
    "PackageDependency",
    "PackageFile",
    "PackageFolder",
    "PackagePart",
    "ContentTree",
    "PackageFileView",
    "TreeChange",
    "build_tree",
    "split_package_path",
]
