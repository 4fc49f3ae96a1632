"""Manifest builder + export for the site generator.

Responsibilities:
  1. Order parsed records: newest first, ties broken by path ascending.
  2. Refuse duplicate paths (caller bug, never silently overwritten).
  3. Serialise the manifest to JSON or YAML.
  4. Validate the output path and write it atomically (temp file → rename).
"""

from __future__ import annotations

import json
import os
import tempfile
from collections.abc import Iterable
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any

import yaml

from frontindex.content.errors import DuplicatePath
from frontindex.content.models import ContentManifest, ContentRecord

OUTPUT_FORMATS: frozenset[str] = frozenset(["json", "yaml"])


# ------------------------------------------------------------------
# Build
# ------------------------------------------------------------------


def build_manifest(records: Iterable[ContentRecord]) -> ContentManifest:
    """Return a ContentManifest over *records*.

    Timestamps compare as instants, so the same moment written with two
    different offsets ties and falls back to path order.

    Raises:
        DuplicatePath: if two records share a path.
    """
    seen: set[str] = set()
    items: list[ContentRecord] = []
    for record in records:
        if record.sort_path in seen:
            raise DuplicatePath(
                f"more than one record for path '{record.sort_path}'", record.path
            )
        seen.add(record.sort_path)
        items.append(record)

    # Two stable passes: path ascending, then timestamp descending.
    items.sort(key=lambda r: r.sort_path)
    items.sort(key=lambda r: r.published_at, reverse=True)
    return ContentManifest(records=tuple(items))


# ------------------------------------------------------------------
# Serialisation
# ------------------------------------------------------------------


def record_to_dict(record: ContentRecord, *, include_body: bool = False) -> dict[str, Any]:
    data: dict[str, Any] = {
        "path": record.sort_path,
        "title": record.title,
        "date": record.published_at.isoformat(),
        "description": record.description,
        "tags": sorted(record.tags),
        "categories": sorted(record.categories),
        "draft": record.draft,
    }
    if record.extra:
        data["extra"] = {str(k): _plain(v) for k, v in record.extra.items()}
    if include_body:
        data["body"] = record.body
    return data


def manifest_to_dict(
    manifest: ContentManifest,
    *,
    include_drafts: bool = False,
    include_body: bool = False,
    site_title: str = "",
    generated_at: datetime | None = None,
) -> dict[str, Any]:
    """Plain-data form of *manifest*, ready for JSON or YAML output."""
    records = manifest.records if include_drafts else tuple(manifest.published)
    stamp = generated_at or datetime.now(timezone.utc)
    data: dict[str, Any] = {}
    if site_title:
        data["site"] = site_title
    data["generated_at"] = stamp.isoformat()
    data["count"] = len(records)
    data["records"] = [record_to_dict(r, include_body=include_body) for r in records]
    return data


def dump_manifest(data: dict[str, Any], fmt: str = "json") -> str:
    if fmt == "json":
        return json.dumps(data, indent=2, ensure_ascii=False) + "\n"
    if fmt == "yaml":
        return yaml.safe_dump(data, sort_keys=False, allow_unicode=True)
    raise ValueError(f"unsupported manifest format '{fmt}' (expected json or yaml)")


def _plain(value: Any) -> Any:
    """Convert extra front-matter values into JSON-safe data."""
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, dict):
        return {str(k): _plain(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [_plain(v) for v in value]
    return value


# ------------------------------------------------------------------
# Manifest destination
# ------------------------------------------------------------------


def validate_output_path(output: str | Path, allowed_base: Path | None = None) -> Path:
    """Resolve where the manifest goes.

    A relative *output* must land inside the site (``allowed_base``, the
    working directory by default), so a typo in ``manifest.output`` cannot
    drop the manifest somewhere like ``../../``. Absolute paths are taken
    as given.

    Raises:
        ValueError: If a relative *output* resolves outside the site.
    """
    target = Path(output)
    if target.is_absolute():
        return target.resolve()

    site_root = (allowed_base or Path.cwd()).resolve()
    resolved = (site_root / target).resolve()
    if not resolved.is_relative_to(site_root):
        raise ValueError(
            f"Manifest output '{output}' points outside the site directory "
            f"'{site_root}'; leaving the site directory is not allowed."
        )
    return resolved


def write_output(path: Path, content: str) -> None:
    """Replace the manifest at *path* in one step.

    The text goes to a sibling temp file first, so the site generator never
    sees a half-written manifest. Missing parent directories are created.
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as fh:
            fh.write(content)
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise
