"""pkgexplorer: an editable package archive model.

A flat set of package file entries is presented as a folder/file tree; package
metadata is edited under begin/commit/cancel control and persisted back to a
package archive or exported to a directory.
"""

from __future__ import annotations

from pkgexplorer.bundle.io import PackageSource, read_package, write_package
from pkgexplorer.core import (
    BytesContent,
    EditablePackageMetadata,
    InvalidArgumentError,
    InvalidTargetError,
    NameConflictError,
    PackageFile,
    PackageFolder,
    build_tree,
)
from pkgexplorer.model import FileContentInfo, ModelEvent, PackageModel

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "BytesContent",
    "EditablePackageMetadata",
    "FileContentInfo",
    "InvalidArgumentError",
    "InvalidTargetError",
    "ModelEvent",
    "NameConflictError",
    "PackageFile",
    "PackageFolder",
    "PackageModel",
    "PackageSource",
    "build_tree",
    "read_package",
    "write_package",
]
