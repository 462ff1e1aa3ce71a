"""`pkgexplorer export` and `pkgexplorer export-manifest` commands."""

from __future__ import annotations

import typer

from pkgexplorer.cli.common import load_model
from pkgexplorer.core.errors import PackageError


def register(app: typer.Typer) -> None:
    @app.command("export")
    def export(
        package: str = typer.Argument(..., help="Path to a package archive."),
        dest: str = typer.Argument(..., help="Existing directory to export into."),
        yes: bool = typer.Option(False, "--yes", "-y", help="Replace an existing manifest without asking."),
    ) -> None:
        """Export package content and its manifest into a directory."""
        model = load_model(package, yes=yes)
        try:
            result = model.export(dest)
        except PackageError as e:
            raise typer.BadParameter(str(e), param_hint="DEST") from e
        if not result.manifest_written:
            typer.echo(f"{result.manifest_path}: not replaced", err=True)
            raise typer.Exit(code=1)
        typer.echo(str(result.manifest_path))

    @app.command("export-manifest")
    def export_manifest(
        package: str = typer.Argument(..., help="Path to a package archive."),
        out: str = typer.Argument(..., help="Output manifest path."),
        yes: bool = typer.Option(False, "--yes", "-y", help="Replace an existing file without asking."),
    ) -> None:
        """Write the package manifest to a file."""
        model = load_model(package, yes=yes)
        if not model.export_manifest(out):
            typer.echo("not replaced", err=True)
            raise typer.Exit(code=1)
        typer.echo(out)
