"""Pydantic record contracts shared by the core, the API and the CLI."""

from __future__ import annotations

from .annotation import (
    REVIEW_TAG_CATEGORIES,
    VALIDATION_TAGS,
    Annotation,
    AnnotationType,
    ReviewTag,
)
from .base import Record, to_wire
from .block import BLOCK_TYPES, Block, BlockType
from .diff import BlockDiff, DiffSummary, DiffType
from .markers import InjectedMarker, MarkerInjectionResult, ValidationMarker

__all__ = [
    "Annotation",
    "AnnotationType",
    "BLOCK_TYPES",
    "Block",
    "BlockDiff",
    "BlockType",
    "DiffSummary",
    "DiffType",
    "InjectedMarker",
    "MarkerInjectionResult",
    "REVIEW_TAG_CATEGORIES",
    "Record",
    "ReviewTag",
    "VALIDATION_TAGS",
    "ValidationMarker",
    "to_wire",
]
