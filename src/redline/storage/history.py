"""Plan version history.

Every review round saves the plan as a numbered version so two rounds can be
compared with the structural diff:

- Filename pattern: ``<slug>-v<N>.md`` in the plan directory
- A legacy ``<slug>.md`` without suffix counts as version 1
- Saving content identical to the latest version is a no-op (``skipped``)

Versions are identified by a truncated SHA-256 of their content, which is
only used to detect "no changes since last save".
"""

from __future__ import annotations

import re
from datetime import UTC, datetime
from hashlib import sha256
from pathlib import Path

from pydantic import Field

from redline.core.contracts.base import Record
from redline.core.settings import get_logger

from .plans import get_plan_dir, plan_path

logger = get_logger(__name__)

_VERSION_SUFFIX_RE = re.compile(r"-v(\d+)$")
_SKIP_MARKERS = (".diff.", "-approved.", "-denied.", ".annotations.")


class PlanVersion(Record):
    """One stored version of a plan."""

    version: int = Field(..., ge=1)
    timestamp: str = Field(..., description="File modification time, ISO-8601 UTC.")
    hash: str = Field(..., description="First 16 hex chars of the content SHA-256.")
    path: str
    slug: str


class VersionSaveResult(Record):
    """Outcome of :func:`save_version`."""

    version: int
    path: str
    skipped: bool


def compute_hash(content: str) -> str:
    """Short content hash used for change detection."""
    return sha256(content.encode("utf-8")).hexdigest()[:16]


def extract_base_slug(filename: str) -> str:
    """``"2026-01-30-my-plan-v3.md"`` -> ``"2026-01-30-my-plan"``."""
    stem = filename[:-3] if filename.endswith(".md") else filename
    return _VERSION_SUFFIX_RE.sub("", stem)


def parse_version_number(filename: str) -> int:
    """Version number from a filename, 0 for legacy unsuffixed files."""
    stem = filename[:-3] if filename.endswith(".md") else filename
    match = _VERSION_SUFFIX_RE.search(stem)
    return int(match.group(1)) if match else 0


def _mtime_iso(path: Path) -> str:
    mtime = datetime.fromtimestamp(path.stat().st_mtime, tz=UTC)
    return mtime.strftime("%Y-%m-%dT%H:%M:%S.%f")[:-3] + "Z"


def list_versions(slug: str, custom_path: str | Path | None = None) -> list[PlanVersion]:
    """List stored versions of ``slug`` sorted by version number."""
    plan_dir = get_plan_dir(custom_path)
    base = extract_base_slug(slug)

    versions: list[PlanVersion] = []
    for path in plan_dir.glob("*.md"):
        name = path.name
        if any(marker in name for marker in _SKIP_MARKERS):
            continue
        if extract_base_slug(name) != base:
            continue
        versions.append(
            PlanVersion(
                version=parse_version_number(name) or 1,
                timestamp=_mtime_iso(path),
                hash=compute_hash(path.read_text(encoding="utf-8")),
                path=str(path),
                slug=base,
            )
        )

    return sorted(versions, key=lambda v: v.version)


def get_latest_version(slug: str, custom_path: str | Path | None = None) -> PlanVersion | None:
    """Return the highest stored version of ``slug``, or None."""
    versions = list_versions(slug, custom_path)
    return versions[-1] if versions else None


def save_version(
    slug: str,
    content: str,
    custom_path: str | Path | None = None,
) -> VersionSaveResult:
    """Save ``content`` as the next version of ``slug``.

    Returns the latest version with ``skipped=True`` when its content hash
    equals ``content``'s. Raises ``ValueError`` for a slug that is not a
    plain filename stem.
    """
    base = extract_base_slug(slug)
    latest = get_latest_version(base, custom_path)
    if latest is not None and latest.hash == compute_hash(content):
        return VersionSaveResult(version=latest.version, path=latest.path, skipped=True)

    next_version = latest.version + 1 if latest is not None else 1
    path = plan_path(f"{base}-v{next_version}", ".md", custom_path)
    path.write_text(content, encoding="utf-8")
    logger.info("Saved version %d: %s", next_version, path)
    return VersionSaveResult(version=next_version, path=str(path), skipped=False)


def load_version(slug: str, version: int, custom_path: str | Path | None = None) -> str | None:
    """Return the content of one version, or None if it does not exist."""
    for entry in list_versions(slug, custom_path):
        if entry.version == version:
            return Path(entry.path).read_text(encoding="utf-8")
    return None


def versions_match(
    slug: str,
    v1: int,
    v2: int,
    custom_path: str | Path | None = None,
) -> bool:
    """True when both versions exist and have identical content."""
    by_number = {v.version: v for v in list_versions(slug, custom_path)}
    first, second = by_number.get(v1), by_number.get(v2)
    if first is None or second is None:
        return False
    return first.hash == second.hash


__all__ = [
    "PlanVersion",
    "VersionSaveResult",
    "compute_hash",
    "extract_base_slug",
    "get_latest_version",
    "list_versions",
    "load_version",
    "parse_version_number",
    "save_version",
    "versions_match",
]
