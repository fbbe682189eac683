"""Validation-marker records.

A validation marker is a durable sign-off embedded in the plan itself as an
HTML comment, e.g. ``<!-- @APPROVED by="julien" date="2025-01-24" -->``.
These models describe markers found in a document and the outcome of an
injection pass.
"""

from __future__ import annotations

from pydantic import Field

from .annotation import ReviewTag
from .base import Record


class ValidationMarker(Record):
    """A marker found in markdown by :func:`extract_validation_markers`."""

    tag: ReviewTag
    position: int = Field(..., ge=0, description="Character offset of the comment.")
    line: int = Field(..., ge=1, description="1-based line of the comment.")
    context: str | None = Field(
        default=None,
        description="Best-effort heading/text snippet the marker applies to.",
    )
    attributes: dict[str, str] = Field(default_factory=dict)


class InjectedMarker(Record):
    """One marker written by an injection pass."""

    tag: ReviewTag
    context: str
    line: int = Field(..., ge=1, description="1-based line in the returned markdown.")


class MarkerInjectionResult(Record):
    """Outcome of :func:`inject_validation_markers`."""

    markdown: str
    markers_added: int = 0
    markers: list[InjectedMarker] = Field(default_factory=list)


__all__ = ["ValidationMarker", "InjectedMarker", "MarkerInjectionResult"]
