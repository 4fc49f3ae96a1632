"""frontindex configuration loader.

Priority (high → low):
  1. CLI flags           (handled at the call site, not in this module)
  2. Environment variables  (FRONTINDEX_CONTENT_DIR, FRONTINDEX_MANIFEST_OUTPUT)
  3. Per-project frontindex.yaml
  4. Global ~/.frontindex/config.yaml
  5. Hardcoded defaults

All YAML reads use yaml.safe_load() — never yaml.load().
"""

from __future__ import annotations

import os
import warnings
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from frontindex.content.manifest import OUTPUT_FORMATS
from frontindex.content.parser import (
    DEFAULT_DATE_KEYS,
    DEFAULT_EXTENSIONS,
    DEFAULT_FENCE,
    DEFAULT_FORMAT,
    FORMATS,
    TOML_FENCE,
)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

_GLOBAL_CONFIG_DIR: Path = Path.home() / ".frontindex"
_GLOBAL_CONFIG_PATH: Path = _GLOBAL_CONFIG_DIR / "config.yaml"
PROJECT_CONFIG_NAME: str = "frontindex.yaml"

# Known top-level sections; unknown keys produce a warning
_KNOWN_SECTIONS: frozenset[str] = frozenset(["site", "content", "manifest"])


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class ConfigError(ValueError):
    """Raised when a config file contains an invalid value."""


# ---------------------------------------------------------------------------
# Data model
# ---------------------------------------------------------------------------


@dataclass
class SiteCfg:
    """Site-level metadata (frontindex.yaml: site:)."""

    title: str = ""


@dataclass
class ContentCfg:
    """Where content lives and how its front matter is fenced (frontindex.yaml: content:).

    Attributes:
        dir: Content root, relative to the project directory.
        extensions: File suffixes treated as content files.
        fence: Line that opens and closes the front-matter block; "+++" when
            format is toml and no fence is set.
        format: Block format — 'yaml' or 'toml'.
        date_keys: Front-matter keys tried in order for the publish timestamp.
    """

    dir: str = "content"
    extensions: tuple[str, ...] = DEFAULT_EXTENSIONS
    fence: str = DEFAULT_FENCE
    format: str = DEFAULT_FORMAT
    date_keys: tuple[str, ...] = DEFAULT_DATE_KEYS


@dataclass
class ManifestCfg:
    """Manifest output settings (frontindex.yaml: manifest:)."""

    output: str = "manifest.json"
    format: str = "json"  # json | yaml
    include_drafts: bool = False
    include_body: bool = False


@dataclass
class FrontindexConfig:
    """Root configuration object, built by load_config() from merged YAML layers."""

    site: SiteCfg = field(default_factory=SiteCfg)
    content: ContentCfg = field(default_factory=ContentCfg)
    manifest: ManifestCfg = field(default_factory=ManifestCfg)


# ---------------------------------------------------------------------------
# Validation helpers
# ---------------------------------------------------------------------------


def _warn_unknown_keys(data: dict[str, Any], source: Path) -> None:
    """Emit a UserWarning for unrecognised top-level keys."""
    for key in data:
        if key not in _KNOWN_SECTIONS:
            warnings.warn(
                f"Unknown config key '{key}' in '{source}' — ignored.",
                UserWarning,
                stacklevel=4,
            )


def _str_tuple(value: Any, name: str) -> tuple[str, ...]:
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, (list, tuple)) or not value:
        raise ConfigError(f"{name} must be a non-empty list of strings")
    return tuple(str(v) for v in value)


def _normalize_extensions(exts: tuple[str, ...]) -> tuple[str, ...]:
    return tuple(e.lower() if e.startswith(".") else f".{e.lower()}" for e in exts)


def _validate(cfg: FrontindexConfig) -> None:
    c = cfg.content
    if not c.fence.strip() or c.fence != c.fence.strip():
        raise ConfigError(
            f"content.fence must be a non-empty marker without surrounding spaces: {c.fence!r}\n"
            "  Example:  content.fence: \"---\""
        )
    if c.format not in FORMATS:
        raise ConfigError(
            f"content.format must be one of {sorted(FORMATS)}, got '{c.format}'"
        )
    if cfg.manifest.format not in OUTPUT_FORMATS:
        raise ConfigError(
            f"manifest.format must be one of {sorted(OUTPUT_FORMATS)}, got '{cfg.manifest.format}'"
        )


# ---------------------------------------------------------------------------
# Merge + build
# ---------------------------------------------------------------------------


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Return a new dict that is *base* deep-merged with *override*."""
    result = dict(base)
    for k, v in override.items():
        if k in result and isinstance(result[k], dict) and isinstance(v, dict):
            result[k] = _deep_merge(result[k], v)
        else:
            result[k] = v
    return result


def _section(data: dict[str, Any], name: str) -> dict[str, Any]:
    section = data[name] or {}
    if not isinstance(section, dict):
        raise ConfigError(
            f"'{name}' must be a mapping of settings, got {type(section).__name__}\n"
            f"  Example:\n    {name}:\n      key: value"
        )
    return section


def _bool(value: Any, name: str) -> bool:
    if not isinstance(value, bool):
        raise ConfigError(f"{name} must be true or false, got {value!r}")
    return value


def _cfg_from_dict(data: dict[str, Any]) -> FrontindexConfig:
    """Build a *FrontindexConfig* from a merged raw YAML dict."""
    cfg = FrontindexConfig()

    if "site" in data:
        s = _section(data, "site")
        cfg.site = SiteCfg(title=str(s.get("title", cfg.site.title)))

    if "content" in data:
        c = _section(data, "content")
        fmt = str(c.get("format", cfg.content.format)).lower()
        cfg.content = ContentCfg(
            dir=str(c.get("dir", cfg.content.dir)),
            extensions=_normalize_extensions(
                _str_tuple(c.get("extensions", cfg.content.extensions), "content.extensions")
            ),
            # TOML front matter is conventionally fenced with +++
            fence=str(c.get("fence", TOML_FENCE if fmt == "toml" else cfg.content.fence)),
            format=fmt,
            date_keys=_str_tuple(c.get("date_keys", cfg.content.date_keys), "content.date_keys"),
        )

    if "manifest" in data:
        m = _section(data, "manifest")
        cfg.manifest = ManifestCfg(
            output=str(m.get("output", cfg.manifest.output)),
            format=str(m.get("format", cfg.manifest.format)).lower(),
            include_drafts=_bool(
                m.get("include_drafts", cfg.manifest.include_drafts), "manifest.include_drafts"
            ),
            include_body=_bool(
                m.get("include_body", cfg.manifest.include_body), "manifest.include_body"
            ),
        )

    return cfg


def _apply_env_overrides(cfg: FrontindexConfig) -> FrontindexConfig:
    """Apply FRONTINDEX_* environment variable overrides."""
    if content_dir := os.environ.get("FRONTINDEX_CONTENT_DIR"):
        cfg.content.dir = content_dir
    if output := os.environ.get("FRONTINDEX_MANIFEST_OUTPUT"):
        cfg.manifest.output = output
    return cfg


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise ConfigError(f"Config file '{path}' is not valid YAML: {exc}") from exc
    if not isinstance(raw, dict):
        raise ConfigError(f"Config file '{path}' must contain a mapping at the top level.")
    return raw


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def load_config(
    project_dir: Path | None = None,
    *,
    global_config_path: Path | None = None,
) -> FrontindexConfig:
    """Load and return a merged *FrontindexConfig*.

    Applies layers in order: global → per-project → env vars.
    CLI flag overrides must be applied by the caller after this function.

    Args:
        project_dir: Directory to search for *frontindex.yaml*. Defaults to CWD.
        global_config_path: Override the global config path (for testing).

    Raises:
        ConfigError: If a config file is not a YAML mapping or holds an
            invalid fence, content format or manifest format.
    """
    global_path = global_config_path if global_config_path is not None else _GLOBAL_CONFIG_PATH
    search_dir = project_dir if project_dir is not None else Path.cwd()

    merged: dict[str, Any] = {}

    # Layer 1: global config
    if global_path.exists():
        raw_global = _read_yaml(global_path)
        _warn_unknown_keys(raw_global, global_path)
        merged = _deep_merge(merged, raw_global)

    # Layer 2: per-project config
    project_cfg_path = search_dir / PROJECT_CONFIG_NAME
    if project_cfg_path.exists():
        raw_project = _read_yaml(project_cfg_path)
        _warn_unknown_keys(raw_project, project_cfg_path)
        merged = _deep_merge(merged, raw_project)

    cfg = _cfg_from_dict(merged)

    # Layer 3: env var overrides
    cfg = _apply_env_overrides(cfg)

    _validate(cfg)
    return cfg
