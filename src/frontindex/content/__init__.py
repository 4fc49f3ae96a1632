"""frontindex content pipeline — front-matter parser, manifest builder, scaffolding."""

from frontindex.content.errors import (
    ContentError,
    DuplicatePath,
    MalformedFrontMatter,
    MissingFrontMatter,
    ValidationError,
)
from frontindex.content.manifest import build_manifest
from frontindex.content.models import ContentManifest, ContentRecord, ScanResult
from frontindex.content.parser import load_directory, parse_file, parse_text

__all__ = [
    "ContentError",
    "ContentManifest",
    "ContentRecord",
    "DuplicatePath",
    "MalformedFrontMatter",
    "MissingFrontMatter",
    "ScanResult",
    "ValidationError",
    "build_manifest",
    "load_directory",
    "parse_file",
    "parse_text",
]
