"""pkgexplorer CLI entrypoint."""

from __future__ import annotations

import logging

import typer

app = typer.Typer(
    name="pkgexplorer",
    add_completion=False,
    no_args_is_help=True,
    help="Inspect, edit and export package archives.",
)


@app.callback()
def _callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log debug output to stderr."),
) -> None:
    """pkgexplorer CLI."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@app.command("version")
def version() -> None:
    """Print the installed pkgexplorer version."""
    from pkgexplorer import __version__

    typer.echo(__version__)


def _register_commands() -> None:
    """Register CLI subcommands.

    Importing these modules must remain lightweight so `pkgexplorer --help` is fast.
    """
    from pkgexplorer.cli.commands import check as check_cmd
    from pkgexplorer.cli.commands import contents as contents_cmd
    from pkgexplorer.cli.commands import edit as edit_cmd
    from pkgexplorer.cli.commands import export as export_cmd

    contents_cmd.register(app)
    check_cmd.register(app)
    export_cmd.register(app)
    edit_cmd.register(app)


_register_commands()


def main() -> None:
    app()
