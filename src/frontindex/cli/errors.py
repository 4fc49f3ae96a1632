"""frontindex rich error messages — actionable feedback.

Every error shown to the user must contain:
  1. What went wrong (clear cause)
  2. The exact action the user should take to fix it

Usage:
    from frontindex.cli.errors import err_no_content_dir
    console.print(err_no_content_dir("content"))
    raise typer.Exit(1)
"""

from __future__ import annotations

from rich.markup import escape

from frontindex.content.errors import (
    ContentError,
    MalformedFrontMatter,
    MissingFrontMatter,
    ValidationError,
)


def err_no_content_dir(content_dir: str) -> str:
    """Content directory does not exist."""
    return (
        f"[red]Error:[/] No content directory found at '{content_dir}'.\n"
        "  Create it, set content.dir in frontindex.yaml, or pass --content-dir <path>."
    )


def err_config(message: str) -> str:
    """Config file could not be loaded."""
    return (
        f"[red]Error:[/] Invalid configuration.\n"
        f"  {message}\n"
        "  Fix frontindex.yaml (or ~/.frontindex/config.yaml) and run the command again."
    )


def describe_failure(exc: Exception) -> tuple[str, str]:
    """Return ``(kind, hint)`` for a per-file failure."""
    if isinstance(exc, MissingFrontMatter):
        return "missing front matter", "Start the file with a '---' line, then title and date."
    if isinstance(exc, MalformedFrontMatter):
        return "malformed front matter", "Close the block with '---' and check key: value syntax."
    if isinstance(exc, ValidationError):
        if exc.field == "title":
            return "invalid title", "Set:  title: \"Post title\""
        if exc.field in ("tags", "categories"):
            return f"invalid {exc.field}", f"Use a list:  {exc.field}: [one, two]"
        if exc.field == "draft":
            return "invalid draft", "Use:  draft: true  or  draft: false"
        return f"invalid {exc.field}", f"Set:  {exc.field}: 2023-05-22T01:00:00+02:00"
    if isinstance(exc, UnicodeDecodeError):
        return "not UTF-8", "Re-save the file with UTF-8 encoding."
    if isinstance(exc, OSError):
        return "unreadable", "Check the file permissions."
    return "error", "Fix the file and run frontindex check again."


def err_file_failed(path: str, exc: Exception) -> str:
    """One content file could not be parsed."""
    kind, hint = describe_failure(exc)
    detail = exc.message if isinstance(exc, ContentError) else str(exc)
    return f"[red]✗[/] {escape(path)}: {kind} — {escape(detail)}\n    {escape(hint)}"


def err_duplicate_path(path: str) -> str:
    """Two records for the same path reached the manifest builder."""
    return (
        f"[red]Error:[/] Duplicate content path: '{path}'.\n"
        "  Each file may appear once. Remove the duplicate entry from --content-dir or content.extensions."
    )


def err_output_path_unsafe(path: str) -> str:
    """--output path fails security validation."""
    return (
        f"[red]Error:[/] Output path is not allowed: '{path}'\n"
        "  Use a path within the current working directory."
    )


def err_post_exists(path: str) -> str:
    """frontindex new would overwrite an existing file."""
    return (
        f"[red]Error:[/] '{path}' already exists.\n"
        "  Use a different title, or edit the existing file."
    )


def err_scaffold_format(fmt: str) -> str:
    """frontindex new only writes YAML front matter."""
    return (
        f"[red]Error:[/] frontindex new writes YAML front matter, but content.format is '{fmt}'.\n"
        "  Set content.format: yaml in frontindex.yaml, or create the file by hand."
    )


def warn_skipped_files(count: int) -> str:
    """Shown by build when some files were left out of the manifest."""
    return (
        f"[yellow]⚠[/] {count} file(s) skipped because of front-matter errors.\n"
        "  Run:  frontindex check  to see the details."
    )
