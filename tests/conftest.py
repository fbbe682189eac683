"""Shared pytest fixtures.

Every test gets its own plan directory so storage, API and CLI tests never
touch ``~/.redline`` and never see each other's files.
"""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

import pytest

from redline.core.settings import load_settings


@pytest.fixture(autouse=True)
def plan_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[Path]:
    """Point `REDLINE_PLAN_DIR` at a per-test directory."""
    target = tmp_path / "plans"
    monkeypatch.setenv("REDLINE_PLAN_DIR", str(target))
    load_settings.cache_clear()
    yield target
    load_settings.cache_clear()
