"""Pytest configuration.

This repo follows the `src/` layout. Some environments may invoke a `pytest`
entrypoint from a different Python install than the one used for
`python -m pip install -e ...`, which can cause `import pkgexplorer` to fail.

To keep the suite robust, we ensure `src/` is on `sys.path` during tests.
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Any


def pytest_configure() -> None:
    repo_root = Path(__file__).resolve().parents[1]
    src_dir = repo_root / "src"
    sys.path.insert(0, str(src_dir))


# =============================================================================
# Shared Test Helpers
# =============================================================================


def make_metadata(**overrides: Any):
    """Create a valid metadata record; keyword arguments override fields."""
    from pkgexplorer.core.metadata import EditablePackageMetadata

    fields: dict[str, Any] = {
        "id": "Demo.Package",
        "version": "1.0.0",
        "authors": ["alice"],
        "description": "A demo package.",
    }
    fields.update(overrides)
    return EditablePackageMetadata(**fields)


def make_source(files: dict[str, bytes], **metadata: Any):
    """Create an in-memory PackageSource from {path: bytes}."""
    from pkgexplorer.bundle.io import PackageSource
    from pkgexplorer.core.content import BytesContent

    return PackageSource(
        metadata=make_metadata(**metadata),
        entries=[(p, BytesContent(b)) for p, b in files.items()],
        manifest={},
    )


def make_model(files: dict[str, bytes] | None = None, *, answer: bool = True, **metadata: Any):
    """Create a PackageModel with recording collaborators attached as attributes."""
    from pkgexplorer.model import PackageModel
    from pkgexplorer.services import FixedConfirmation, RecentFilesList

    return PackageModel(
        make_source(files if files is not None else DEMO_FILES, **metadata),
        confirmation=FixedConfirmation(answer),
        recent_files=RecentFilesList(),
    )


DEMO_FILES: dict[str, bytes] = {
    "lib/net45/Foo.dll": b"\x4d\x5a\x00foo",
    "lib/net45/Bar.dll": b"\x4d\x5a\x00bar",
    "content/readme.txt": b"hello\n",
}


def write_demo_package(path: Path, files: dict[str, bytes] | None = None, **metadata: Any) -> Path:
    from pkgexplorer.bundle.io import write_package
    from pkgexplorer.core.content import BytesContent

    entries = [(p, BytesContent(b)) for p, b in (files if files is not None else DEMO_FILES).items()]
    write_package(path, make_metadata(**metadata), entries)
    return path
