"""Package manifest utilities.

This module is intentionally small and dependency-light to avoid import cycles.
It provides:
- sha256 hashing helpers
- manifest.json read/write (stable JSON: indent=2, sort_keys, trailing newline)
- manifest builder from an editable metadata record
"""

from __future__ import annotations

import hashlib
import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from pkgexplorer.core.metadata import EditablePackageMetadata

MANIFEST_NAME = "manifest.json"
MANIFEST_SUFFIX = ".manifest.json"
SCHEMA_VERSION = "pkgexplorer-1.0"


def sha256_bytes(b: bytes) -> str:
    """Return hex-encoded sha256 for bytes."""
    if not isinstance(b, (bytes, bytearray)):
        raise TypeError(f"sha256_bytes: expected bytes, got {type(b).__name__}")
    return hashlib.sha256(bytes(b)).hexdigest()


def _now_utc_iso() -> str:
    # Example: 2025-12-16T00:00:00Z
    return datetime.now(timezone.utc).replace(microsecond=0).isoformat().replace("+00:00", "Z")


def manifest_file_name(package_id: str) -> str:
    """File name used when a manifest is exported next to package content."""
    return f"{package_id}{MANIFEST_SUFFIX}"


def dumps_manifest(manifest: dict[str, Any]) -> str:
    return json.dumps(manifest, indent=2, sort_keys=True) + "\n"


def read_manifest(path: Path) -> dict[str, Any]:
    p = Path(path)
    return parse_manifest(p.read_text(encoding="utf-8"), where=p.name)


def parse_manifest(text: str, *, where: str = MANIFEST_NAME) -> dict[str, Any]:
    obj = json.loads(text)
    if not isinstance(obj, dict):
        raise ValueError(f"{where}: expected JSON object")
    return obj


def write_manifest(path: Path, manifest: dict[str, Any]) -> None:
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(dumps_manifest(manifest), encoding="utf-8")


def build_manifest(
    metadata: EditablePackageMetadata,
    *,
    files: list[dict[str, Any]] | None = None,
    created_utc: str | None = None,
    schema_version: str = SCHEMA_VERSION,
) -> dict[str, Any]:
    """Construct a manifest from the metadata record.

    Required keys: schema_version, created_utc, metadata.
    `files` (list[{path, size, sha256}]) is present only for the in-archive manifest.
    """
    if metadata is None:
        raise TypeError("manifest: metadata is required")
    if created_utc is None:
        created_utc = _now_utc_iso()

    manifest: dict[str, Any] = {
        "schema_version": schema_version,
        "created_utc": created_utc,
        "metadata": metadata.to_manifest_fields(),
    }
    if files is not None:
        if not isinstance(files, list):
            raise TypeError("manifest: files must be a list")
        manifest["files"] = files
    return manifest


def metadata_from_manifest(manifest: dict[str, Any]) -> EditablePackageMetadata:
    meta = manifest.get("metadata")
    if not isinstance(meta, dict):
        raise ValueError(f"{MANIFEST_NAME}: metadata must be an object")
    return EditablePackageMetadata.from_manifest(meta)
