"""Shared pytest fixtures."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest


@pytest.fixture
def write_post(tmp_path: Path) -> Callable[[str, str], Path]:
    """Write a content file under tmp_path/content and return its path."""
    root = tmp_path / "content"
    root.mkdir(exist_ok=True)

    def _write(name: str, text: str) -> Path:
        p = root / name
        p.parent.mkdir(parents=True, exist_ok=True)
        p.write_text(text, encoding="utf-8")
        return p

    return _write


@pytest.fixture
def site(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Project dir with content/ as CWD, isolated from user config and env."""
    (tmp_path / "content").mkdir(exist_ok=True)
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("FRONTINDEX_CONTENT_DIR", raising=False)
    monkeypatch.delenv("FRONTINDEX_MANIFEST_OUTPUT", raising=False)
    monkeypatch.setattr(
        "frontindex.config._GLOBAL_CONFIG_PATH",
        tmp_path / "home" / ".frontindex" / "config.yaml",
    )
    return tmp_path
