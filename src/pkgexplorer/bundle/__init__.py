"""Package archive I/O (package-on-disk format).

- Read/write zip package archives with an embedded manifest.json
- Build/write metadata manifests
- Tabulate package contents
"""

from __future__ import annotations

from .io import PackageSource, read_package, write_package
from .manifest import MANIFEST_NAME, build_manifest, manifest_file_name, read_manifest, write_manifest

__all__ = [
    "MANIFEST_NAME",
    "PackageSource",
    "build_manifest",
    "manifest_file_name",
    "read_manifest",
    "read_package",
    "write_manifest",
    "write_package",
]
