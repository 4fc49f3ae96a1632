"""frontindex CLI entry point."""

from __future__ import annotations

import importlib.metadata
from typing import Annotated

import typer

from frontindex.cli.build import build_cmd
from frontindex.cli.check import check_cmd
from frontindex.cli.listing import list_cmd
from frontindex.cli.new import new_cmd


def _version() -> str:
    try:
        return importlib.metadata.version("frontindex")
    except importlib.metadata.PackageNotFoundError:
        return "dev"


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"frontindex {_version()}")
        raise typer.Exit()


app = typer.Typer(
    name="frontindex",
    help=(
        "frontindex — front-matter checker and content manifest builder.\n\n"
        "  frontindex check   Validate front matter of every post.\n"
        "  frontindex build   Write the manifest for the site generator."
    ),
    add_completion=False,
)


@app.callback()
def main_callback(
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            callback=_version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = False,
) -> None:
    """frontindex — front-matter checker and content manifest builder."""


app.command("check")(check_cmd)
app.command("list")(list_cmd)
app.command("build")(build_cmd)
app.command("new")(new_cmd)


@app.command("version")
def version_cmd() -> None:
    """Show the installed frontindex version."""
    typer.echo(f"frontindex {_version()}")


if __name__ == "__main__":
    app()
