"""
Request/response models for the redline HTTP API.

All models inherit the camelCase aliasing of
:class:`redline.core.contracts.base.Record`, so browser clients can send
``{"originalText": ...}`` while Python callers use ``original_text``.
"""

from __future__ import annotations

from typing import Annotated, Any

from pydantic import Field

from redline.core.contracts import (
    Annotation,
    Block,
    BlockDiff,
    DiffSummary,
    InjectedMarker,
    Record,
    ValidationMarker,
)
from redline.storage import SLUG_PATTERN, PlanVersion, VersionSaveResult

Threshold = Annotated[float, Field(ge=0.0, le=1.0)]


# ---- Documents ---------------------------------------------------------------


class MarkdownRequest(Record):
    markdown: str


class ParseResponse(Record):
    frontmatter: dict[str, Any] | None = None
    blocks: list[Block]


class ExportRequest(Record):
    """Either ``blocks`` or ``markdown`` supplies block order for sorting."""

    markdown: str | None = None
    blocks: list[Block] | None = None
    annotations: list[Annotation] = Field(default_factory=list)
    global_attachments: list[str] | None = None


class ExportResponse(Record):
    feedback: str
    count: int


class DiffRequest(Record):
    old_markdown: str
    new_markdown: str
    threshold: Threshold | None = None


class DiffResponse(Record):
    diff: list[BlockDiff]
    summary: DiffSummary


# ---- Markers -----------------------------------------------------------------


class MarkersExtractResponse(Record):
    markers: list[ValidationMarker]
    display: list[str]


class MarkersInjectRequest(Record):
    markdown: str
    annotations: list[Annotation] = Field(default_factory=list)


class MarkersInjectResponse(Record):
    markdown: str
    markers_added: int
    markers: list[InjectedMarker]


class MarkersStripResponse(Record):
    markdown: str


# ---- Sharing -----------------------------------------------------------------


class ShareRequest(Record):
    markdown: str
    annotations: list[Annotation] = Field(default_factory=list)
    global_attachments: list[str] | None = None


class ShareResponse(Record):
    url: str


class ShareDecodeRequest(Record):
    url: str


# ---- Plan history ------------------------------------------------------------


class VersionListResponse(Record):
    slug: str
    versions: list[PlanVersion]


class SaveVersionRequest(Record):
    content: str


class VersionContentResponse(Record):
    slug: str
    version: int
    content: str
    blocks: list[Block]


class VersionDiffResponse(Record):
    slug: str
    v1: int
    v2: int
    diff: list[BlockDiff]
    summary: DiffSummary


class DecisionRequest(Record):
    plan: str
    approved: bool
    feedback: str | None = None
    slug: str | None = Field(default=None, pattern=SLUG_PATTERN)


__all__ = [
    "DecisionRequest",
    "DiffRequest",
    "DiffResponse",
    "ExportRequest",
    "ExportResponse",
    "MarkdownRequest",
    "MarkersExtractResponse",
    "MarkersInjectRequest",
    "MarkersInjectResponse",
    "MarkersStripResponse",
    "ParseResponse",
    "SaveVersionRequest",
    "ShareDecodeRequest",
    "ShareRequest",
    "ShareResponse",
    "VersionContentResponse",
    "VersionDiffResponse",
    "VersionListResponse",
    "VersionSaveResult",
]
