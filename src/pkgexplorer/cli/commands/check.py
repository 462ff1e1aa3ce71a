"""`pkgexplorer check` command.

Validates the metadata record and reports packages that are incomplete
(no files, no dependencies and no framework assemblies). Exit code 1 on any
finding.
"""

from __future__ import annotations

import typer

from pkgexplorer.cli.common import load_model


def register(app: typer.Typer) -> None:
    @app.command("check")
    def check(
        package: str = typer.Argument(..., help="Path to a package archive."),
        validate_hashes: bool = typer.Option(False, "--validate-hashes", help="Recompute sha256 and compare to manifest."),
    ) -> None:
        """Check package metadata and completeness."""
        model = load_model(package, validate_hashes=validate_hashes)
        errors = model.metadata.validate()
        for name in sorted(errors):
            typer.echo(f"{name}: {errors[name]}", err=True)
        if not model.is_valid:
            typer.echo("package has no files, dependencies or framework assemblies", err=True)
        if errors or not model.is_valid:
            raise typer.Exit(code=1)
        typer.echo("OK")
