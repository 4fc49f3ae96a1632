"""Post scaffolding: render front matter and create new content files."""

from __future__ import annotations

import re
from collections.abc import Iterable
from datetime import datetime
from pathlib import Path
from typing import Any

import yaml

from frontindex.content.parser import DEFAULT_FENCE

_SLUG_RE = re.compile(r"[^a-z0-9-]+")


def slugify(s: str) -> str:
    return re.sub(r"-{2,}", "-", _SLUG_RE.sub("-", s.lower()).strip("-"))


def render_front_matter(data: dict[str, Any], fence: str = DEFAULT_FENCE) -> str:
    dumped = yaml.safe_dump(data, sort_keys=False, allow_unicode=True).rstrip()
    return f"{fence}\n{dumped}\n{fence}\n"


def new_post(
    content_dir: Path,
    title: str,
    *,
    draft: bool = True,
    tags: Iterable[str] = (),
    now: datetime | None = None,
    fence: str = DEFAULT_FENCE,
) -> Path:
    """Create ``<content_dir>/<slug>.md`` with a minimal front-matter block.

    The date is the local time with its UTC offset, so the file parses
    back without further edits.

    Raises:
        ValueError: if *title* yields an empty slug.
        FileExistsError: if the target file already exists.
    """
    slug = slugify(title)
    if not slug:
        raise ValueError(f"cannot derive a file name from title {title!r}")

    stamp = now or datetime.now()
    if stamp.tzinfo is None:
        stamp = stamp.astimezone()
    stamp = stamp.replace(microsecond=0)
    data: dict[str, Any] = {"title": title, "date": stamp, "draft": draft}
    unique_tags = list(dict.fromkeys(t.strip() for t in tags if t.strip()))
    if unique_tags:
        data["tags"] = unique_tags

    content_dir.mkdir(parents=True, exist_ok=True)
    target = content_dir / f"{slug}.md"
    with target.open("x", encoding="utf-8") as f:
        f.write(render_front_matter(data, fence) + "\n")
    return target
