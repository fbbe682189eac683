"""
Validation-Marker Engine.

Validation annotations (``@OK``, ``@APPROVED``, ``@LOCKED``) are persisted
into the plan as HTML comments placed after the block they sign off, so the
next review session (and the agent) can see what was already validated::

    ## Step 1: Initialize
    <!-- @APPROVED by="julien" date="2025-01-24" -->

Operations
----------
- :func:`extract_validation_markers` finds markers and their context.
- :func:`inject_validation_markers` writes markers for validation-tagged
  annotations, skipping ones that are already present.
- :func:`strip_validation_markers` removes them again.

All three are line-oriented regex passes designed to survive repeated
inject/strip cycles: injection is duplicate-suppressed and stripping
collapses the blank lines it leaves behind. None of them raises.

Context snippets (first 30/50 characters of a nearby line) are a lossy,
best-effort hint for UIs, not a uniqueness key.
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass

from redline.core.contracts.annotation import VALIDATION_TAGS, Annotation, ReviewTag
from redline.core.contracts.markers import (
    InjectedMarker,
    MarkerInjectionResult,
    ValidationMarker,
)
from redline.core.settings import get_logger

logger = get_logger(__name__)

MARKER_RE = re.compile(r'<!--\s*(@(?:OK|APPROVED|LOCKED))((?:\s+\w+="[^"]*")*)\s*-->')
_ATTR_RE = re.compile(r'(\w+)="([^"]*)"')
_STRIP_RE = re.compile(r"<!--\s*@(?:OK|APPROVED|LOCKED)[^>]*-->\n?")
_EXCESS_BLANKS_RE = re.compile(r"\n{3,}")
_HEADING_TEXT_RE = re.compile(r"^#{1,6}\s+(.+)$")
_HR_RE = re.compile(r"^-{3,}$")

_CONTEXT_CHARS = 50
_MATCH_CHARS = 30
_LOOKAHEAD_LINES = 3


def _is_marker_line(line: str) -> bool:
    """True for a line that holds nothing but one validation marker."""
    return bool(MARKER_RE.fullmatch(line.strip()))


# ---- Extraction --------------------------------------------------------------


def _context_before(lines: list[str], index: int) -> str | None:
    for prev in reversed(lines[:index]):
        text = prev.strip()
        if not text:
            continue
        heading = _HEADING_TEXT_RE.match(text)
        return heading.group(1) if heading else text[:_CONTEXT_CHARS]
    return None


def extract_validation_markers(markdown: str) -> list[ValidationMarker]:
    """Extract all validation markers from ``markdown``.

    Parameters
    ----------
    markdown:
        Document text to scan.

    Returns
    -------
    list[ValidationMarker]
        One entry per line holding a marker, in document order. ``position``
        is the character offset of the comment, ``line`` is 1-based.
    """
    markers: list[ValidationMarker] = []
    lines = markdown.split("\n")

    offset = 0
    for index, line in enumerate(lines):
        match = MARKER_RE.search(line)
        if match:
            markers.append(
                ValidationMarker(
                    tag=ReviewTag(match.group(1)),
                    position=offset + match.start(),
                    line=index + 1,
                    context=_context_before(lines, index),
                    attributes=dict(_ATTR_RE.findall(match.group(2) or "")),
                )
            )
        offset += len(line) + 1

    return markers


# ---- Injection ---------------------------------------------------------------


def has_existing_marker(markdown: str, context: str, tag: ReviewTag) -> bool:
    """Return True when a ``tag`` marker already sits near ``context``.

    A line "contains the context" when it includes the first 30 characters
    of ``context``; the marker must appear on that line or the two after it.
    """
    needle = context[:_MATCH_CHARS]
    if not needle.strip():
        return False

    lines = markdown.split("\n")
    opening = f"<!-- {tag.value}"
    for i, line in enumerate(lines):
        if needle in line:
            if any(opening in nxt for nxt in lines[i : i + _LOOKAHEAD_LINES]):
                return True
    return False


@dataclass(frozen=True, slots=True)
class _PendingMarker:
    """Insert ``comment`` after 0-based line ``after``."""

    after: int
    tag: ReviewTag
    context: str
    comment: str


def _find_anchor_line(lines: list[str], original: str) -> int | None:
    head = original[:_MATCH_CHARS]
    for i, line in enumerate(lines):
        text = line.strip()
        if not text or _is_marker_line(text):
            continue
        if head in line or text in original:
            return i
    return None


def _block_end(lines: list[str], start: int) -> int:
    """Last line of the block that starts at ``start``."""
    end = start
    for j in range(start + 1, len(lines)):
        text = lines[j].strip()
        if not text or text.startswith("#") or _HR_RE.match(text) or _is_marker_line(text):
            break
        end = j
    return end


def _tag_follows(lines: list[str], after: int, tag: ReviewTag) -> bool:
    """True if the run of marker lines right after ``after`` includes ``tag``."""
    for line in lines[after + 1 :]:
        if not _is_marker_line(line):
            return False
        match = MARKER_RE.search(line)
        if match and match.group(1) == tag.value:
            return True
    return False


def _marker_comment(tag: ReviewTag, author: str | None) -> str:
    if author:
        safe = author.replace('"', "'")
        return f'<!-- {tag.value} by="{safe}" -->'
    return f"<!-- {tag.value} -->"


def inject_validation_markers(
    markdown: str,
    annotations: Sequence[Annotation],
) -> MarkerInjectionResult:
    """Persist validation-tagged annotations as marker comments.

    Only annotations tagged ``@OK``/``@APPROVED``/``@LOCKED`` with a
    non-blank ``original_text`` are considered. A heading gets its marker on
    the next line; any other block gets it after its last line (the block
    ends at a blank line, heading, horizontal rule or existing marker).

    Parameters
    ----------
    markdown:
        Document text.
    annotations:
        All annotations; non-validation ones are ignored.

    Returns
    -------
    MarkerInjectionResult
        The new markdown plus the markers written, each with its 1-based line
        in the returned text. Re-running with the same annotations adds none.
    """
    candidates = [
        (ann, ann.tag)
        for ann in annotations
        if ann.tag is not None and ann.tag in VALIDATION_TAGS and ann.original_text.strip()
    ]
    if not candidates:
        return MarkerInjectionResult(markdown=markdown)

    lines = markdown.split("\n")
    pending: list[_PendingMarker] = []
    seen: set[tuple[int, ReviewTag]] = set()

    for ann, tag in candidates:
        context = ann.original_text.split("\n")[0][:_CONTEXT_CHARS]

        if has_existing_marker(markdown, context, tag):
            logger.debug("Marker %s already present near %r", tag.value, context)
            continue

        anchor = _find_anchor_line(lines, ann.original_text)
        if anchor is None:
            logger.debug("No anchor line for %s annotation %s", tag.value, ann.id)
            continue

        if lines[anchor].strip().startswith("#"):
            after, marker_context = anchor, lines[anchor].strip()
        else:
            after, marker_context = _block_end(lines, anchor), context

        if (after, tag) in seen or _tag_follows(lines, after, tag):
            continue
        seen.add((after, tag))
        pending.append(_PendingMarker(after, tag, marker_context, _marker_comment(tag, ann.author)))

    # Bottom-up so earlier insertions never shift later indices.
    pending.sort(key=lambda p: p.after, reverse=True)
    result_lines = list(lines)
    for marker in pending:
        result_lines.insert(marker.after + 1, marker.comment)

    added: list[InjectedMarker] = []
    for k, marker in enumerate(pending):
        above = sum(1 for other in pending if other.after < marker.after)
        # Same-line markers inserted later land above this one.
        later_same = sum(1 for other in pending[k + 1 :] if other.after == marker.after)
        added.append(
            InjectedMarker(
                tag=marker.tag,
                context=marker.context,
                line=marker.after + above + later_same + 2,
            )
        )

    logger.debug("Injected %d validation markers", len(added))
    return MarkerInjectionResult(
        markdown="\n".join(result_lines),
        markers_added=len(added),
        markers=added,
    )


# ---- Stripping ---------------------------------------------------------------


def strip_validation_markers(markdown: str) -> str:
    """Remove every validation marker and the blank-line runs left behind."""
    without = _STRIP_RE.sub("", markdown)
    return _EXCESS_BLANKS_RE.sub("\n\n", without)


# ---- Utilities ---------------------------------------------------------------


def format_marker_for_display(marker: ValidationMarker) -> str:
    """Format a marker for UI display, e.g. ``"@APPROVED by julien on 2025-01-24"``."""
    parts = [marker.tag.value]
    if by := marker.attributes.get("by"):
        parts.append(f"by {by}")
    if date := marker.attributes.get("date"):
        parts.append(f"on {date}")
    return " ".join(parts)


def is_validation_tag(tag: ReviewTag | None) -> bool:
    """Return True if ``tag`` is one of the persistable validation tags."""
    return tag is not None and tag in VALIDATION_TAGS


def count_validation_annotations(annotations: Sequence[Annotation]) -> int:
    """Count annotations carrying a validation tag."""
    return sum(1 for ann in annotations if is_validation_tag(ann.tag))


__all__ = [
    "MARKER_RE",
    "count_validation_annotations",
    "extract_validation_markers",
    "format_marker_for_display",
    "has_existing_marker",
    "inject_validation_markers",
    "is_validation_tag",
    "strip_validation_markers",
]
