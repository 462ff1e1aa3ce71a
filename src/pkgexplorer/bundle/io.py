"""Package archive read/write.

A package is a zip archive containing:
- the content files at their relative package paths
- manifest.json at the archive root (metadata + per-file size/sha256)

Entries are read into memory on load, so the model never holds the archive
open and saving over the source location is safe.
"""

from __future__ import annotations

import logging
import os
import tempfile
import zipfile
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable

from pkgexplorer.core.content import BytesContent, ContentHandle, read_bytes
from pkgexplorer.core.errors import InvalidArgumentError, InvalidTargetError, NameConflictError
from pkgexplorer.core.metadata import EditablePackageMetadata

from .manifest import MANIFEST_NAME, build_manifest, dumps_manifest, metadata_from_manifest, parse_manifest, sha256_bytes

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PackageSource:
    metadata: EditablePackageMetadata
    entries: list[tuple[str, ContentHandle]]
    manifest: dict[str, Any]
    location: Path | None = None


def _normalize_member(name: str) -> str:
    return name.replace("\\", "/").lstrip("/")


def read_package(path: str | Path, *, validate_hashes: bool = False) -> PackageSource:
    """Load a package archive.

    If validate_hashes is True, recompute sha256 for every content entry and raise
    ValueError on any mismatch or on entries missing from either side.
    """
    p = Path(path)
    if not p.is_file():
        raise InvalidTargetError(p, f"package file does not exist: {p}")

    entries: list[tuple[str, ContentHandle]] = []
    actual: dict[str, str] = {}
    with zipfile.ZipFile(p, "r") as zf:
        try:
            manifest_text = zf.read(MANIFEST_NAME).decode("utf-8")
        except KeyError:
            raise ValueError(f"{p.name}: missing {MANIFEST_NAME}") from None
        manifest = parse_manifest(manifest_text)

        for info in zf.infolist():
            if info.is_dir():
                continue
            name = _normalize_member(info.filename)
            if name == MANIFEST_NAME:
                continue
            data = zf.read(info)
            entries.append((name, BytesContent(data)))
            if validate_hashes:
                actual[name] = sha256_bytes(data)

    if validate_hashes:
        files = manifest.get("files", [])
        if not isinstance(files, list):
            raise ValueError(f"{MANIFEST_NAME}: files must be an array")
        expected: dict[str, str] = {}
        for item in files:
            if not isinstance(item, dict) or not isinstance(item.get("path"), str) or not isinstance(item.get("sha256"), str):
                raise ValueError(f"{MANIFEST_NAME}: files[*] must have string path and sha256")
            expected[item["path"]] = item["sha256"]
        for rel in sorted(set(expected) | set(actual)):
            if rel not in actual:
                raise ValueError(f"{rel}: listed in manifest but missing from archive")
            if rel not in expected:
                raise ValueError(f"{rel}: present in archive but not listed in manifest")
            if actual[rel] != expected[rel]:
                raise ValueError(f"sha256 mismatch for {rel}: expected {expected[rel]}, got {actual[rel]}")

    logger.debug("read package %s (%d entries)", p, len(entries))
    return PackageSource(
        metadata=metadata_from_manifest(manifest),
        entries=entries,
        manifest=manifest,
        location=p,
    )


def write_package(
    path: str | Path,
    metadata: EditablePackageMetadata,
    files: Iterable[tuple[str, ContentHandle]],
) -> dict[str, Any]:
    """Write a package archive and return its manifest dict.

    The archive is written to a temp file beside `path` and then moved into place.
    """
    if path is None:
        raise InvalidArgumentError("package path is required")
    p = Path(path)
    if not p.parent.is_dir():
        raise InvalidTargetError(p.parent)

    fd, tmp_name = tempfile.mkstemp(prefix=f".{p.name}.", suffix=".tmp", dir=str(p.parent))
    os.close(fd)
    try:
        file_entries: list[dict[str, Any]] = []
        with zipfile.ZipFile(tmp_name, "w", compression=zipfile.ZIP_DEFLATED) as zf:
            for rel, content in files:
                rel = _normalize_member(rel)
                if rel == MANIFEST_NAME:
                    raise NameConflictError(MANIFEST_NAME, where="package root")
                data = read_bytes(content)
                zf.writestr(rel, data)
                file_entries.append({"path": rel, "size": len(data), "sha256": sha256_bytes(data)})
            manifest = build_manifest(metadata, files=file_entries)
            zf.writestr(MANIFEST_NAME, dumps_manifest(manifest))
        os.replace(tmp_name, p)
    except BaseException:
        if os.path.exists(tmp_name):
            os.remove(tmp_name)
        raise

    logger.debug("wrote package %s (%d files)", p, len(file_entries))
    return manifest
