"""Editing commands: `add`, `rm`, `mv`, `set`.

Each command loads the package, applies one change through the model and saves
to `--out` (default: overwrite the package in place).
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer

from pkgexplorer.cli.common import ensure_folder, load_model, require_part
from pkgexplorer.core.errors import PackageError
from pkgexplorer.core.parts import PackageFolder
from pkgexplorer.model import PackageModel

_LIST_FIELDS = ("dependencies", "framework_assemblies")


def _save(model: PackageModel, package: str, out: Optional[str]) -> None:
    dest = out or package
    model.save(dest)
    typer.echo(dest)


def register(app: typer.Typer) -> None:
    @app.command("add")
    def add(
        package: str = typer.Argument(..., help="Path to a package archive."),
        source: str = typer.Argument(..., help="File or directory to add."),
        to: Optional[str] = typer.Option(None, "--to", help="Folder inside the package (created if missing)."),
        out: Optional[str] = typer.Option(None, "--out", help="Save to this path instead of in place."),
    ) -> None:
        """Add a file or a directory tree to a package."""
        model = load_model(package)
        src = Path(source)
        try:
            parent = ensure_folder(model, to)
            if src.is_dir():
                model.add_physical_folder(parent, src)
            else:
                model.add_physical_file(parent, src)
        except PackageError as e:
            raise typer.BadParameter(str(e), param_hint="SOURCE") from e
        _save(model, package, out)

    @app.command("rm")
    def rm(
        package: str = typer.Argument(..., help="Path to a package archive."),
        path: str = typer.Argument(..., help="File or folder inside the package."),
        out: Optional[str] = typer.Option(None, "--out", help="Save to this path instead of in place."),
    ) -> None:
        """Remove a file or folder (with everything below it) from a package."""
        model = load_model(package)
        model.delete(require_part(model, path))
        _save(model, package, out)

    @app.command("mv")
    def mv(
        package: str = typer.Argument(..., help="Path to a package archive."),
        path: str = typer.Argument(..., help="File or folder inside the package."),
        folder: str = typer.Argument(..., help="Destination folder ('/' for the root; created if missing)."),
        name: Optional[str] = typer.Option(None, "--name", help="New name for the moved part."),
        out: Optional[str] = typer.Option(None, "--out", help="Save to this path instead of in place."),
    ) -> None:
        """Move and optionally rename a part."""
        model = load_model(package)
        part = require_part(model, path)
        try:
            dest: PackageFolder = ensure_folder(model, folder)
            model.move(part, dest, name or None)
        except PackageError as e:
            raise typer.BadParameter(str(e), param_hint="PATH") from e
        _save(model, package, out)

    @app.command("set")
    def set_field(
        package: str = typer.Argument(..., help="Path to a package archive."),
        field: str = typer.Argument(..., help="Metadata field name, e.g. version."),
        value: str = typer.Argument(..., help="New value; lists are comma-separated."),
        out: Optional[str] = typer.Option(None, "--out", help="Save to this path instead of in place."),
    ) -> None:
        """Edit one metadata field."""
        model = load_model(package)
        model.begin_edit()
        try:
            new_value: object = value
            if field in _LIST_FIELDS:
                new_value = [v.strip() for v in value.split(",") if v.strip()]
            error = model.metadata.set_field(field, new_value)
        except PackageError as e:
            model.cancel_edit()
            raise typer.BadParameter(str(e), param_hint="FIELD") from e
        if error:
            model.cancel_edit()
            raise typer.BadParameter(error, param_hint="VALUE")
        model.commit_edit()
        _save(model, package, out)
