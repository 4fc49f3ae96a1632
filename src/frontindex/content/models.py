"""Domain models for parsed content and the manifest built over it."""

from __future__ import annotations

from collections.abc import Callable, Iterator, Mapping
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from types import MappingProxyType
from typing import Any

from frontindex.content.errors import ContentError, DuplicatePath

TAXONOMIES: tuple[str, ...] = ("tags", "categories")


@dataclass(frozen=True)
class ContentRecord:
    path: Path  # identity: no two records in a manifest share it
    title: str
    published_at: datetime  # always timezone-aware
    body: str = ""
    description: str | None = None
    tags: frozenset[str] = frozenset()
    categories: frozenset[str] = frozenset()
    draft: bool = False
    extra: Mapping[str, Any] = field(
        default_factory=lambda: MappingProxyType({}), hash=False
    )

    @property
    def sort_path(self) -> str:
        return self.path.as_posix()


class RecordView:
    """Filtered, read-only view over a manifest's ordered records.

    Holds no records of its own; iteration re-applies the predicate to the
    parent sequence, so order always matches the manifest.
    """

    def __init__(
        self,
        records: tuple[ContentRecord, ...],
        predicate: Callable[[ContentRecord], bool],
    ) -> None:
        self._records = records
        self._predicate = predicate

    def __iter__(self) -> Iterator[ContentRecord]:
        return (r for r in self._records if self._predicate(r))

    def __len__(self) -> int:
        return sum(1 for _ in self)

    def __contains__(self, item: object) -> bool:
        return any(r is item or r == item for r in self)

    def __bool__(self) -> bool:
        return any(True for _ in self)

    def __repr__(self) -> str:
        return f"RecordView({[r.sort_path for r in self]!r})"


@dataclass(frozen=True)
class ContentManifest:
    """Ordered index over parsed records: newest first, then path ascending.

    Build instances with :func:`frontindex.content.manifest.build_manifest`,
    which sorts its input. Constructing one directly with records that are
    out of order or share a path is rejected.

    Raises:
        DuplicatePath: if two records share a path.
        ValueError: if *records* is not in manifest order.
    """

    records: tuple[ContentRecord, ...] = ()

    def __post_init__(self) -> None:
        records = tuple(self.records)
        object.__setattr__(self, "records", records)

        seen: set[str] = set()
        for record in records:
            if record.sort_path in seen:
                raise DuplicatePath(
                    f"more than one record for path '{record.sort_path}'", record.path
                )
            seen.add(record.sort_path)

        for before, after in zip(records, records[1:]):
            if before.published_at < after.published_at or (
                before.published_at == after.published_at
                and before.sort_path > after.sort_path
            ):
                raise ValueError(
                    f"'{before.sort_path}' is ordered before '{after.sort_path}'; "
                    "records must run newest first, then by path (use build_manifest)"
                )

    def __iter__(self) -> Iterator[ContentRecord]:
        return iter(self.records)

    def __len__(self) -> int:
        return len(self.records)

    @property
    def published(self) -> RecordView:
        return RecordView(self.records, lambda r: not r.draft)

    @property
    def drafts(self) -> RecordView:
        return RecordView(self.records, lambda r: r.draft)

    def get(self, path: Path | str) -> ContentRecord | None:
        key = Path(path).as_posix()
        for record in self.records:
            if record.sort_path == key:
                return record
        return None

    def taxonomy(
        self, name: str, *, include_drafts: bool = False
    ) -> dict[str, tuple[ContentRecord, ...]]:
        """Map each term of *name* ("tags" or "categories") to its records.

        Terms are sorted; each term's records keep manifest order.
        """
        if name not in TAXONOMIES:
            raise ContentError(
                f"unknown taxonomy '{name}' (expected one of: {', '.join(TAXONOMIES)})"
            )
        source = self.records if include_drafts else tuple(self.published)
        terms: dict[str, list[ContentRecord]] = {}
        for record in source:
            for term in getattr(record, name):
                terms.setdefault(term, []).append(record)
        return {term: tuple(terms[term]) for term in sorted(terms)}

    def replace(self, record: ContentRecord) -> ContentManifest:
        """Return a new manifest with *record* replacing the one at its path."""
        from frontindex.content.manifest import build_manifest

        kept = [r for r in self.records if r.sort_path != record.sort_path]
        return build_manifest([*kept, record])


@dataclass
class ScanResult:
    """Outcome of scanning a content directory: records plus per-file failures."""

    records: list[ContentRecord] = field(default_factory=list)
    # ContentError for bad front matter, OSError/UnicodeDecodeError for unreadable files
    failures: list[tuple[Path, Exception]] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures
