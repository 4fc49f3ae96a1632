"""frontindex build — write the content manifest for the site generator.

Files with front-matter errors are skipped and reported; the manifest is
still written from the files that parsed (partial success). --strict turns
any skipped file into a failed build.

Usage:
  frontindex build
  frontindex build --output public/manifest.yaml --format yaml --include-drafts
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console

from frontindex.cli.errors import (
    err_duplicate_path,
    err_file_failed,
    err_output_path_unsafe,
    warn_skipped_files,
)
from frontindex.cli.project import load_project, scan
from frontindex.content.errors import DuplicatePath
from frontindex.content.manifest import (
    OUTPUT_FORMATS,
    build_manifest,
    dump_manifest,
    manifest_to_dict,
    validate_output_path,
    write_output,
)

console = Console()


def build_cmd(
    content_dir: Annotated[
        Path | None,
        typer.Option("--content-dir", "-c", help="Content directory (default: content.dir from config)."),
    ] = None,
    output: Annotated[
        str | None,
        typer.Option("--output", "-o", help="Manifest path (default: manifest.output from config)."),
    ] = None,
    fmt: Annotated[
        str | None,
        typer.Option("--format", "-f", help="Manifest format: json or yaml."),
    ] = None,
    include_drafts: Annotated[
        bool,
        typer.Option("--include-drafts", help="Include draft posts (or set manifest.include_drafts)."),
    ] = False,
    include_body: Annotated[
        bool,
        typer.Option("--include-body", help="Include post bodies (or set manifest.include_body)."),
    ] = False,
    strict: Annotated[
        bool,
        typer.Option("--strict", help="Fail if any file has front-matter errors."),
    ] = False,
) -> None:
    """Build the content manifest consumed by the site generator."""
    cfg, root = load_project(console, content_dir)

    out_fmt = (fmt or cfg.manifest.format).lower()
    if out_fmt not in OUTPUT_FORMATS:
        console.print(
            f"[red]Error:[/] Unknown manifest format '{out_fmt}'.\n"
            f"  Use:  --format {' | '.join(sorted(OUTPUT_FORMATS))}"
        )
        raise typer.Exit(1)

    out_raw = output or cfg.manifest.output
    try:
        out_path = validate_output_path(out_raw)
    except ValueError:
        console.print(err_output_path_unsafe(out_raw))
        raise typer.Exit(1)

    result = scan(cfg, root)
    for path, exc in result.failures:
        console.print(err_file_failed(path.as_posix(), exc))

    if result.failures and strict:
        console.print(f"[red]Build aborted:[/] {len(result.failures)} file(s) failed (--strict).")
        raise typer.Exit(1)

    try:
        manifest = build_manifest(result.records)
    except DuplicatePath as exc:
        console.print(err_duplicate_path(str(exc.path)))
        raise typer.Exit(1)

    data = manifest_to_dict(
        manifest,
        include_drafts=include_drafts or cfg.manifest.include_drafts,
        include_body=include_body or cfg.manifest.include_body,
        site_title=cfg.site.title,
    )
    write_output(out_path, dump_manifest(data, out_fmt))

    console.print(
        f"[green]✓[/] Wrote {out_raw}  "
        f"({data['count']} record(s), {len(manifest.drafts)} draft(s) in source)"
    )
    if result.failures:
        console.print(warn_skipped_files(len(result.failures)))
