"""`pkgexplorer ls` and `pkgexplorer cat` commands."""

from __future__ import annotations

from typing import Optional

import typer

from pkgexplorer.bundle.listing import files_table, write_files_table_csv
from pkgexplorer.cli.common import load_model, require_file


def register(app: typer.Typer) -> None:
    @app.command("ls")
    def ls(
        package: str = typer.Argument(..., help="Path to a package archive."),
        csv: Optional[str] = typer.Option(None, "--csv", help="Write the listing as CSV to this path."),
    ) -> None:
        """List the files in a package."""
        model = load_model(package)
        df = files_table(model.files())
        if csv:
            write_files_table_csv(df, csv)
            typer.echo(csv)
            return
        if df.empty:
            typer.echo("(no files)")
            return
        typer.echo(df.loc[:, ["path", "size"]].to_string(index=False))

    @app.command("cat")
    def cat(
        package: str = typer.Argument(..., help="Path to a package archive."),
        path: str = typer.Argument(..., help="Path of a file inside the package."),
        external: bool = typer.Option(False, "--external", help="Open with the system's default application."),
    ) -> None:
        """Show the content of a file inside a package."""
        model = load_model(package)
        file = require_file(model, path)
        if external:
            model.open_external(file)
            return
        info = model.show_file(file)
        if info.is_binary:
            typer.echo(f"{info.name}: binary content", err=True)
            raise typer.Exit(code=1)
        typer.echo(info.content, nl=False)
