"""Shared CLI plumbing: load config, resolve the content dir, scan it."""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console

from frontindex.cli.errors import err_config, err_no_content_dir
from frontindex.config import ConfigError, FrontindexConfig, load_config
from frontindex.content.models import ScanResult
from frontindex.content.parser import load_directory


def load_project(console: Console, content_dir: Path | None) -> tuple[FrontindexConfig, Path]:
    """Load config from CWD and return it with the effective content dir.

    Exits with status 1 on a config error or a missing content dir.
    """
    try:
        cfg = load_config()
    except ConfigError as exc:
        console.print(err_config(str(exc)))
        raise typer.Exit(1)

    resolved = content_dir if content_dir is not None else Path(cfg.content.dir)
    if not resolved.is_dir():
        console.print(err_no_content_dir(str(resolved)))
        raise typer.Exit(1)
    return cfg, resolved


def scan(cfg: FrontindexConfig, content_dir: Path) -> ScanResult:
    return load_directory(
        content_dir,
        extensions=cfg.content.extensions,
        fence=cfg.content.fence,
        fmt=cfg.content.format,
        date_keys=cfg.content.date_keys,
    )
