"""frontindex new — scaffold a post with a valid front-matter block.

Usage:
  frontindex new "Starting Anew"
  frontindex new "Running Postgres in Podman" --tag podman --tag containers --publish
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console

from frontindex.cli.errors import err_post_exists, err_scaffold_format
from frontindex.cli.project import load_project
from frontindex.content.scaffold import new_post

console = Console()


def new_cmd(
    title: Annotated[
        str,
        typer.Argument(help="Post title; the file name is derived from it."),
    ],
    content_dir: Annotated[
        Path | None,
        typer.Option("--content-dir", "-c", help="Content directory (default: content.dir from config)."),
    ] = None,
    tags: Annotated[
        list[str] | None,
        typer.Option("--tag", "-t", help="Tag to add (repeatable)."),
    ] = None,
    publish: Annotated[
        bool,
        typer.Option("--publish", help="Create as published instead of draft."),
    ] = False,
) -> None:
    """Create a new post file with title, date and draft flag filled in."""
    cfg, root = load_project(console, content_dir)

    if cfg.content.format != "yaml":
        console.print(err_scaffold_format(cfg.content.format))
        raise typer.Exit(1)

    try:
        path = new_post(root, title, draft=not publish, tags=tags or [], fence=cfg.content.fence)
    except FileExistsError as exc:
        console.print(err_post_exists(Path(exc.filename).name if exc.filename else title))
        raise typer.Exit(1)
    except ValueError as exc:
        console.print(f"[red]Error:[/] {exc}\n  Use a title with letters or digits.")
        raise typer.Exit(1)

    state = "published" if publish else "draft"
    console.print(f"[green]✓[/] Created {path} ({state})")
