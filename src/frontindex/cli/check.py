"""frontindex check — validate every content file's front matter.

Exit code 0 when all files parse, 1 when any file fails. Every file is
checked; one failure does not hide the others.
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from frontindex.cli.errors import describe_failure
from frontindex.cli.project import load_project, scan
from frontindex.content.errors import ContentError

console = Console()


def check_cmd(
    content_dir: Annotated[
        Path | None,
        typer.Option("--content-dir", "-c", help="Content directory (default: content.dir from config)."),
    ] = None,
) -> None:
    """Check the front matter of all content files."""
    cfg, root = load_project(console, content_dir)
    result = scan(cfg, root)
    total = len(result.records) + len(result.failures)

    if total == 0:
        console.print(
            f"[yellow]No content files found in {root}/[/] "
            f"(extensions: {', '.join(cfg.content.extensions)})"
        )
        raise typer.Exit(0)

    if result.ok:
        console.print(f"[green]✓[/] {total} file(s) OK in {root}/")
        raise typer.Exit(0)

    table = Table(title="Front-matter errors", show_header=True, header_style="bold")
    table.add_column("File", style="bold")
    table.add_column("Problem")
    table.add_column("Detail")
    table.add_column("Fix")

    for path, exc in result.failures:
        kind, hint = describe_failure(exc)
        detail = exc.message if isinstance(exc, ContentError) else str(exc)
        table.add_row(escape(path.as_posix()), f"[red]{kind}[/]", escape(detail), escape(hint))

    console.print(table)
    console.print(f"\n  {len(result.records)}/{total} OK, {len(result.failures)} failed")
    raise typer.Exit(1)
