"""Annotation contracts: one piece of reviewer feedback.

This module defines:

- `AnnotationType`: the five closed feedback kinds.
- `ReviewTag`: optional methodology labels, grouped in
  `REVIEW_TAG_CATEGORIES` (modification / verification / validation).
- `Annotation`: the record a presentation layer hands to the core.

Contract notes
--------------
- The core never computes selection offsets. A UI translates a selection
  into ``(block_id, original_text, type)``; legacy ``startOffset``/
  ``endOffset`` and highlighter metadata are accepted on input and dropped.
- ``block_id == ""`` marks document-global feedback.
- Invariants are enforced at construction: a GLOBAL_COMMENT has no
  ``original_text``; a DELETION has ``original_text`` and no ``text``.
"""

from __future__ import annotations

from enum import Enum

from pydantic import Field, model_validator

from .base import Record


class AnnotationType(str, Enum):
    """Kind of feedback carried by an annotation."""

    DELETION = "DELETION"
    INSERTION = "INSERTION"
    REPLACEMENT = "REPLACEMENT"
    COMMENT = "COMMENT"
    GLOBAL_COMMENT = "GLOBAL_COMMENT"


class ReviewTag(str, Enum):
    """Review methodology tags that tell the agent what kind of action is expected."""

    # Modification (action required)
    TODO = "@TODO"
    FIX = "@FIX"
    CLARIFY = "@CLARIFY"
    MISSING = "@MISSING"
    ADD_EXAMPLE = "@ADD-EXAMPLE"
    # Verification (fact-checking)
    VERIFY = "@VERIFY"
    VERIFY_SOURCES = "@VERIFY-SOURCES"
    CHECK_FORMULA = "@CHECK-FORMULA"
    CHECK_LINK = "@CHECK-LINK"
    # Validation (persisted as markers)
    OK = "@OK"
    APPROVED = "@APPROVED"
    LOCKED = "@LOCKED"


REVIEW_TAG_CATEGORIES: dict[str, tuple[ReviewTag, ...]] = {
    "modification": (
        ReviewTag.TODO,
        ReviewTag.FIX,
        ReviewTag.CLARIFY,
        ReviewTag.MISSING,
        ReviewTag.ADD_EXAMPLE,
    ),
    "verification": (
        ReviewTag.VERIFY,
        ReviewTag.VERIFY_SOURCES,
        ReviewTag.CHECK_FORMULA,
        ReviewTag.CHECK_LINK,
    ),
    "validation": (ReviewTag.OK, ReviewTag.APPROVED, ReviewTag.LOCKED),
}

VALIDATION_TAGS: frozenset[ReviewTag] = frozenset(REVIEW_TAG_CATEGORIES["validation"])


class Annotation(Record):
    """A reviewer feedback item anchored to a block.

    Fields
    ------
    id : str
        Caller-assigned identifier; the core only uses it for removal by ID.
    block_id : str
        Target block ID, or ``""`` for document-global feedback.
    type : AnnotationType
        Feedback kind; drives the export template.
    original_text : str
        The selected text. Empty for global comments and pure insertions.
    text : str | None
        Comment or replacement content.
    tag : ReviewTag | None
        Optional methodology label.
    is_macro : bool
        The change has impact beyond the annotated passage.
    created_at : int
        Monotonic creation timestamp supplied by the caller.
    author : str | None
        Display identity for shared sessions.
    image_paths : list[str] | None
        Attachment references (local paths or URLs).
    """

    id: str
    block_id: str = ""
    type: AnnotationType
    original_text: str = ""
    text: str | None = None
    tag: ReviewTag | None = None
    is_macro: bool = False
    created_at: int = Field(default=0, ge=0)
    author: str | None = None
    image_paths: list[str] | None = None

    @model_validator(mode="after")
    def _check_type_invariants(self) -> Annotation:
        """Reject records whose content contradicts their type."""
        if self.type is AnnotationType.GLOBAL_COMMENT and self.original_text:
            raise ValueError("GLOBAL_COMMENT annotations must have empty originalText")
        if self.type is AnnotationType.DELETION:
            if not self.original_text:
                raise ValueError("DELETION annotations require originalText")
            if self.text is not None:
                raise ValueError("DELETION annotations must not carry text")
        return self


__all__ = [
    "Annotation",
    "AnnotationType",
    "ReviewTag",
    "REVIEW_TAG_CATEGORIES",
    "VALIDATION_TAGS",
]
