"""Shared CLI plumbing: interactive collaborators and model loading."""

from __future__ import annotations

import tempfile
import zipfile
from pathlib import Path
from typing import Optional

import typer

from pkgexplorer.core.content import ContentHandle, read_bytes
from pkgexplorer.core.parts import PackageFile, PackageFolder, PackagePart
from pkgexplorer.model import PackageModel
from pkgexplorer.services import ConfirmationService, FixedConfirmation, RecentFilesList


class TyperConfirmation:
    """Asks on the terminal."""

    def confirm(self, message: str) -> bool:
        return typer.confirm(message, default=False)


class LaunchViewer:
    """Copies content into one shared view directory and opens it with the system's default application.

    The directory is reused across calls; a file viewed again replaces the previous copy.
    """

    def __init__(self, view_dir: Optional[Path] = None) -> None:
        self.view_dir = Path(view_dir) if view_dir is not None else Path(tempfile.gettempdir()) / "pkgexplorer-view"

    def open(self, name: str, content: ContentHandle) -> None:
        self.view_dir.mkdir(parents=True, exist_ok=True)
        target = self.view_dir / name
        target.write_bytes(read_bytes(content))
        typer.launch(str(target))


def load_model(package: str, *, yes: bool = False, validate_hashes: bool = False) -> PackageModel:
    confirmation: ConfirmationService = FixedConfirmation(True) if yes else TyperConfirmation()
    try:
        return PackageModel.open(
            package,
            validate_hashes=validate_hashes,
            confirmation=confirmation,
            recent_files=RecentFilesList(),
            viewer=LaunchViewer(),
        )
    except (ValueError, zipfile.BadZipFile) as e:
        raise typer.BadParameter(str(e), param_hint="PACKAGE") from e


def require_part(model: PackageModel, path: str) -> PackagePart:
    part = model.find(path)
    if part is None or part is model.root_folder:
        raise typer.BadParameter(f"no such entry in package: {path}", param_hint="PATH")
    return part


def require_file(model: PackageModel, path: str) -> PackageFile:
    part = require_part(model, path)
    if not isinstance(part, PackageFile):
        raise typer.BadParameter(f"not a file: {path}", param_hint="PATH")
    return part


def ensure_folder(model: PackageModel, path: Optional[str]) -> PackageFolder:
    """Return the folder at `path`, creating missing folders along the way."""
    folder = model.root_folder
    if not path:
        return folder
    for segment in path.replace("\\", "/").strip("/").split("/"):
        if not segment:
            continue
        child = folder.get(segment)
        if child is None:
            child = model.add_folder(folder, segment)
        elif not isinstance(child, PackageFolder):
            raise typer.BadParameter(f"not a folder: {child.path}", param_hint="--to")
        folder = child
    return folder
