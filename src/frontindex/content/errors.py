"""Content error taxonomy.

Per-file errors (MissingFrontMatter, MalformedFrontMatter, ValidationError)
are collected by the directory scanner; a bad post never stops the rest of
the site from being indexed. DuplicatePath is raised while assembling a
manifest and is fatal to that build.
"""

from __future__ import annotations

from pathlib import Path


class ContentError(ValueError):
    """Base class for all content parsing and manifest errors."""

    def __init__(self, message: str, path: Path | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.path = path

    def __str__(self) -> str:
        if self.path is not None:
            return f"{self.path}: {self.message}"
        return self.message


class MissingFrontMatter(ContentError):
    """The file does not open with a front-matter fence line."""


class MalformedFrontMatter(ContentError):
    """The front-matter block is unterminated or cannot be decoded as a mapping."""


class ValidationError(ContentError):
    """A front-matter field is missing or has an invalid value.

    Attributes:
        field: Name of the offending field (e.g. ``"title"``).
        reason: Human-readable explanation.
    """

    def __init__(self, field: str, reason: str = "", path: Path | None = None) -> None:
        self.field = field
        self.reason = reason or "missing or invalid"
        super().__init__(f"field '{field}' {self.reason}", path)


class DuplicatePath(ContentError):
    """Two records with the same source path were handed to the manifest builder."""
