"""Disk-backed plan storage.

Reviewed plans, their exported feedback and the final approve/deny snapshot
are written as markdown files under one directory:

- Default directory: ``REDLINE_PLAN_DIR`` (settings) or ``~/.redline/plans``
- ``<slug>.md``                 the plan as reviewed
- ``<slug>.annotations.md``     the exported feedback
- ``<slug>-approved.md`` / ``<slug>-denied.md``  plan + feedback snapshot

Slugs look like ``2026-01-30-add-retry-logic``: the date plus a sanitized
version of the plan's first ``#`` heading.
"""

from __future__ import annotations

import re
from datetime import UTC, date, datetime
from pathlib import Path
from typing import Literal

from redline.core.exporter import NO_CHANGES
from redline.core.settings import get_logger, load_settings

logger = get_logger(__name__)

Decision = Literal["approved", "denied"]

_FIRST_HEADING_RE = re.compile(r"^#\s+(.+)$", flags=re.MULTILINE)
_NON_SLUG_RE = re.compile(r"[^a-z0-9]+")
_SLUG_MAX_CHARS = 50

# Slugs become filenames, so they may not contain path separators.
SLUG_PATTERN = r"^[A-Za-z0-9][A-Za-z0-9._-]*$"


def get_plan_dir(custom_path: str | Path | None = None) -> Path:
    """Return the plan directory, creating it if needed.

    Parameters
    ----------
    custom_path:
        Optional override. A leading ``~`` is expanded to the home directory.
        Falls back to ``settings.plan_dir``.
    """
    raw = custom_path if custom_path else load_settings().plan_dir
    plan_dir = Path(raw).expanduser()
    plan_dir.mkdir(parents=True, exist_ok=True)
    return plan_dir


def extract_first_heading(markdown: str) -> str | None:
    """Return the text of the first level-1 heading, if any."""
    match = _FIRST_HEADING_RE.search(markdown)
    return match.group(1).strip() if match else None


def sanitize_tag(text: str) -> str:
    """Lowercase ``text`` and reduce it to ``a-z0-9`` words joined by ``-``."""
    slug = _NON_SLUG_RE.sub("-", text.lower()).strip("-")
    return slug[:_SLUG_MAX_CHARS].rstrip("-")


def generate_slug(plan: str, today: date | None = None) -> str:
    """Build a ``YYYY-MM-DD-<heading>`` slug for ``plan``.

    ``today`` defaults to the current UTC date; tests pass a fixed date.
    """
    day = (today or datetime.now(UTC).date()).isoformat()
    heading = extract_first_heading(plan)
    slug = sanitize_tag(heading) if heading else ""
    return f"{day}-{slug}" if slug else f"{day}-plan"


def plan_path(slug: str, suffix: str, custom_path: str | Path | None = None) -> Path:
    """Return ``<plan dir>/<slug><suffix>``.

    Raises
    ------
    ValueError
        If ``slug`` is not a plain filename stem, or the resulting path
        (after resolving symlinks) lies outside the plan directory.
    """
    if not re.fullmatch(SLUG_PATTERN, slug):
        raise ValueError(f"Invalid plan slug: {slug!r}")
    plan_dir = get_plan_dir(custom_path)
    path = plan_dir / f"{slug}{suffix}"
    if not path.resolve().is_relative_to(plan_dir.resolve()):
        raise ValueError(f"Plan slug {slug!r} points outside {plan_dir}")
    return path


def _write(path: Path, content: str) -> Path:
    path.write_text(content, encoding="utf-8")
    logger.info("Saved %s", path)
    return path


def save_plan(slug: str, content: str, custom_path: str | Path | None = None) -> Path:
    """Write the plan markdown to ``<slug>.md`` and return its path."""
    return _write(plan_path(slug, ".md", custom_path), content)


def save_annotations(slug: str, feedback: str, custom_path: str | Path | None = None) -> Path:
    """Write exported feedback to ``<slug>.annotations.md`` and return its path."""
    return _write(plan_path(slug, ".annotations.md", custom_path), feedback)


def save_final_snapshot(
    slug: str,
    status: Decision,
    plan: str,
    feedback: str,
    custom_path: str | Path | None = None,
) -> Path:
    """Write ``<slug>-<status>.md``: the plan with the feedback appended.

    Feedback is omitted when empty or equal to ``"No changes detected."``.
    """
    content = plan
    if feedback and feedback != NO_CHANGES:
        content += "\n\n---\n\n" + feedback
    return _write(plan_path(slug, f"-{status}.md", custom_path), content)


__all__ = [
    "Decision",
    "SLUG_PATTERN",
    "extract_first_heading",
    "generate_slug",
    "get_plan_dir",
    "plan_path",
    "sanitize_tag",
    "save_annotations",
    "save_final_snapshot",
    "save_plan",
]
