"""frontindex list — show content in manifest order (newest first)."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from frontindex.cli.errors import err_duplicate_path, warn_skipped_files
from frontindex.cli.project import load_project, scan
from frontindex.content.errors import DuplicatePath
from frontindex.content.manifest import build_manifest

console = Console()


def list_cmd(
    content_dir: Annotated[
        Path | None,
        typer.Option("--content-dir", "-c", help="Content directory (default: content.dir from config)."),
    ] = None,
    drafts: Annotated[
        bool,
        typer.Option("--drafts", help="Show only drafts."),
    ] = False,
    show_all: Annotated[
        bool,
        typer.Option("--all", "-a", help="Show published posts and drafts."),
    ] = False,
) -> None:
    """List posts, newest first. Published posts only unless --drafts or --all."""
    cfg, root = load_project(console, content_dir)
    result = scan(cfg, root)

    try:
        manifest = build_manifest(result.records)
    except DuplicatePath as exc:
        console.print(err_duplicate_path(str(exc.path)))
        raise typer.Exit(1)

    if show_all:
        records = list(manifest)
    elif drafts:
        records = list(manifest.drafts)
    else:
        records = list(manifest.published)

    if not records:
        console.print("[yellow]No matching posts.[/]")
    else:
        table = Table(title=cfg.site.title or "Content", show_header=True, header_style="bold")
        table.add_column("Date")
        table.add_column("Title", style="bold")
        table.add_column("Status")
        table.add_column("Tags")
        table.add_column("Path")

        for r in records:
            status = "[yellow]draft[/]" if r.draft else "[green]published[/]"
            table.add_row(
                r.published_at.date().isoformat(),
                escape(r.title),
                status,
                escape(", ".join(sorted(r.tags))),
                escape(r.sort_path),
            )
        console.print(table)

    console.print(
        f"\n  {len(manifest.published)} published, {len(manifest.drafts)} draft(s)"
    )
    if result.failures:
        console.print(warn_skipped_files(len(result.failures)))
