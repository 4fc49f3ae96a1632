"""Front-matter parser.

A content file opens with a fence line (``---`` for YAML, ``+++`` for TOML),
followed by the metadata block, a closing fence line, and the body:

    ---
    title: "Starting Anew"
    date: 2023-05-22T01:00:00+02:00
    draft: true
    ---
    Body text, kept verbatim.

Only the first fence pair is metadata; any later ``---`` blocks (e.g. from
two posts pasted into one file) belong to the body.

Usage:
    result = load_directory(Path("content"))
    for path, err in result.failures:
        print(path, err)
"""

from __future__ import annotations

import tomllib
from collections.abc import Iterable, Sequence
from datetime import date, datetime
from pathlib import Path
from types import MappingProxyType
from typing import Any

import yaml

from frontindex.content.errors import (
    ContentError,
    MalformedFrontMatter,
    MissingFrontMatter,
    ValidationError,
)
from frontindex.content.models import ContentRecord, ScanResult

DEFAULT_FENCE = "---"
TOML_FENCE = "+++"
DEFAULT_FORMAT = "yaml"
DEFAULT_DATE_KEYS: tuple[str, ...] = ("date", "publishDate")
DEFAULT_EXTENSIONS: tuple[str, ...] = (".md",)
FORMATS: frozenset[str] = frozenset(["yaml", "toml"])

# Keys consumed by ContentRecord; date keys are added per call.
_RECORD_KEYS: frozenset[str] = frozenset(
    ["title", "description", "tags", "categories", "draft"]
)


# ---------------------------------------------------------------------------
# Block splitting + decoding
# ---------------------------------------------------------------------------


def split_front_matter(text: str, fence: str = DEFAULT_FENCE) -> tuple[str, str]:
    """Split *text* into ``(block, body)`` on the first fence pair.

    The first line must be exactly *fence* (trailing whitespace allowed).
    The body starts right after the closing fence line and is returned
    byte-for-byte.

    Raises:
        MissingFrontMatter: the first line is not a fence.
        MalformedFrontMatter: the opening fence is never closed.
    """
    if text.startswith("\ufeff"):
        text = text[1:]

    lines = text.splitlines(keepends=True)
    if not lines or lines[0].rstrip() != fence:
        raise MissingFrontMatter(f"file does not start with a '{fence}' front-matter fence")

    for i in range(1, len(lines)):
        if lines[i].rstrip() == fence:
            return "".join(lines[1:i]), "".join(lines[i + 1 :])

    raise MalformedFrontMatter(f"front-matter block opened with '{fence}' is never closed")


def decode_block(block: str, fmt: str = DEFAULT_FORMAT) -> dict[str, Any]:
    """Decode a front-matter block into a mapping.

    An empty block yields ``{}``. Anything other than a mapping is malformed.
    """
    if fmt == "yaml":
        # The timestamp constructor raises a bare ValueError for dates like
        # 2023-02-30 that match the pattern but do not exist.
        try:
            data = yaml.safe_load(block)
        except (yaml.YAMLError, ValueError) as exc:
            raise MalformedFrontMatter(f"invalid YAML front matter: {exc}") from exc
    elif fmt == "toml":
        try:
            data = tomllib.loads(block)
        except tomllib.TOMLDecodeError as exc:
            raise MalformedFrontMatter(f"invalid TOML front matter: {exc}") from exc
    else:
        raise ValueError(f"unsupported front-matter format '{fmt}'")

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise MalformedFrontMatter(
            f"front matter must be a mapping of key: value pairs, got {type(data).__name__}"
        )
    return data


# ---------------------------------------------------------------------------
# Field validation
# ---------------------------------------------------------------------------


def _is_scalar_text(value: Any) -> bool:
    return isinstance(value, (str, int, float)) and not isinstance(value, bool)


def _title(meta: dict[str, Any]) -> str:
    value = meta.get("title")
    if value is None:
        raise ValidationError("title", "is required")
    if not _is_scalar_text(value):
        raise ValidationError("title", "must be text")
    title = str(value).strip()
    if not title:
        raise ValidationError("title", "must not be empty")
    return title


def _published_at(meta: dict[str, Any], date_keys: Sequence[str]) -> datetime:
    key = next((k for k in date_keys if meta.get(k) is not None), date_keys[0])
    value = meta.get(key)
    if value is None:
        raise ValidationError(key, "is required")

    if isinstance(value, datetime):
        ts = value
    elif isinstance(value, date):
        raise ValidationError(key, "must include a time and a timezone offset")
    elif isinstance(value, str):
        try:
            ts = datetime.fromisoformat(value.strip())
        except ValueError:
            raise ValidationError(key, f"is not an ISO 8601 date-time: {value!r}") from None
    else:
        raise ValidationError(key, "must be a date-time")

    if ts.tzinfo is None or ts.utcoffset() is None:
        raise ValidationError(key, "must carry a timezone offset (e.g. +02:00 or Z)")
    return ts


def _terms(meta: dict[str, Any], key: str) -> frozenset[str]:
    value = meta.get(key)
    if value is None:
        return frozenset()
    items = [value] if _is_scalar_text(value) else value
    if not isinstance(items, (list, tuple)):
        raise ValidationError(key, "must be a list of text values")

    terms: list[str] = []
    for item in items:
        if not _is_scalar_text(item):
            raise ValidationError(key, f"contains a non-text entry: {item!r}")
        term = str(item).strip()
        if not term:
            raise ValidationError(key, "contains an empty entry")
        terms.append(term)
    # case-sensitive; repeated entries collapse
    return frozenset(terms)


def _description(meta: dict[str, Any]) -> str | None:
    value = meta.get("description")
    if value is None:
        return None
    if not _is_scalar_text(value):
        raise ValidationError("description", "must be text")
    return str(value)


def _draft(meta: dict[str, Any]) -> bool:
    value = meta.get("draft")
    if value is None:
        return False
    if not isinstance(value, bool):
        raise ValidationError("draft", "must be true or false")
    return value


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def parse_text(
    text: str,
    path: Path | str,
    *,
    fence: str = DEFAULT_FENCE,
    fmt: str = DEFAULT_FORMAT,
    date_keys: Sequence[str] = DEFAULT_DATE_KEYS,
) -> ContentRecord:
    """Parse the raw text of one content file into a ContentRecord.

    Args:
        text: Full file contents.
        path: Identity of the record (usually relative to the content root).
        fence: Fence line that opens and closes the metadata block.
        fmt: Block format, ``"yaml"`` or ``"toml"``.
        date_keys: Front-matter keys tried in order for the publish timestamp.

    Returns:
        An immutable ContentRecord.

    Raises:
        MissingFrontMatter, MalformedFrontMatter, ValidationError: with
            ``.path`` set to *path*.
    """
    path = Path(path)
    try:
        block, body = split_front_matter(text, fence)
        meta = decode_block(block, fmt)
        known = _RECORD_KEYS | set(date_keys)
        return ContentRecord(
            path=path,
            title=_title(meta),
            published_at=_published_at(meta, date_keys),
            body=body,
            description=_description(meta),
            tags=_terms(meta, "tags"),
            categories=_terms(meta, "categories"),
            draft=_draft(meta),
            extra=MappingProxyType({k: v for k, v in meta.items() if k not in known}),
        )
    except ContentError as exc:
        exc.path = path
        raise


def parse_file(
    path: Path,
    *,
    root: Path | None = None,
    fence: str = DEFAULT_FENCE,
    fmt: str = DEFAULT_FORMAT,
    date_keys: Sequence[str] = DEFAULT_DATE_KEYS,
) -> ContentRecord:
    """Read *path* as UTF-8 and parse it.

    Newlines are not translated, so the body matches the file exactly.
    The record's path is made relative to *root* when given.

    Raises:
        OSError: if the file cannot be read.
        UnicodeDecodeError: if the file is not UTF-8.
    """
    text = path.read_bytes().decode("utf-8")
    identity = path.relative_to(root) if root is not None else path
    return parse_text(text, identity, fence=fence, fmt=fmt, date_keys=date_keys)


def iter_content_files(
    content_dir: Path, extensions: Iterable[str] = DEFAULT_EXTENSIONS
) -> list[Path]:
    """Return content files under *content_dir*, sorted, skipping hidden entries."""
    wanted = {e.lower() for e in extensions}
    files: list[Path] = []
    for p in content_dir.rglob("*"):
        if not p.is_file() or p.suffix.lower() not in wanted:
            continue
        if any(part.startswith(".") for part in p.relative_to(content_dir).parts):
            continue
        files.append(p)
    return sorted(files)


def load_directory(
    content_dir: Path,
    *,
    extensions: Iterable[str] = DEFAULT_EXTENSIONS,
    fence: str = DEFAULT_FENCE,
    fmt: str = DEFAULT_FORMAT,
    date_keys: Sequence[str] = DEFAULT_DATE_KEYS,
) -> ScanResult:
    """Parse every content file under *content_dir*.

    A file that fails is recorded in ``failures`` and the scan continues.
    Returns an empty result if the directory does not exist.
    """
    result = ScanResult()
    if not content_dir.is_dir():
        return result

    for p in iter_content_files(content_dir, extensions):
        try:
            result.records.append(
                parse_file(p, root=content_dir, fence=fence, fmt=fmt, date_keys=date_keys)
            )
        except (ContentError, OSError, UnicodeDecodeError) as exc:
            result.failures.append((p.relative_to(content_dir), exc))
    return result
