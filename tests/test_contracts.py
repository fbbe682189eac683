# tests/test_contracts.py
"""Tests for the pydantic record contracts.

Covers the camelCase wire aliasing, the annotation type invariants and the
review-tag catalogue.
"""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from redline.core.contracts import (
    REVIEW_TAG_CATEGORIES,
    VALIDATION_TAGS,
    Annotation,
    AnnotationType,
    Block,
    BlockDiff,
    ReviewTag,
    to_wire,
)


def test_annotation_accepts_camel_case_and_drops_legacy_fields() -> None:
    ann = Annotation.model_validate(
        {
            "id": "a1",
            "blockId": "block-3",
            "type": "COMMENT",
            "originalText": "retry",
            "text": "How many times?",
            "tag": "@CLARIFY",
            "isMacro": True,
            "createdAt": 17,
            "startOffset": 4,
            "endOffset": 9,
        }
    )

    assert ann.block_id == "block-3"
    assert ann.type is AnnotationType.COMMENT
    assert ann.tag is ReviewTag.CLARIFY
    assert ann.is_macro is True
    assert not hasattr(ann, "start_offset")


def test_annotation_accepts_snake_case() -> None:
    ann = Annotation(id="a", type=AnnotationType.INSERTION, block_id="block-0", text="x")
    assert ann.original_text == ""


def test_to_wire_uses_aliases_and_drops_none() -> None:
    ann = Annotation(id="a", block_id="block-0", type=AnnotationType.DELETION, original_text="x")
    wire = to_wire(ann)

    assert wire["blockId"] == "block-0"
    assert wire["originalText"] == "x"
    assert wire["type"] == "DELETION"
    assert "text" not in wire
    assert "tag" not in wire


def test_global_comment_rejects_original_text() -> None:
    with pytest.raises(ValidationError, match="GLOBAL_COMMENT"):
        Annotation(id="g", type=AnnotationType.GLOBAL_COMMENT, original_text="x", text="hi")


@pytest.mark.parametrize(
    "kwargs",
    [{"original_text": ""}, {"original_text": "x", "text": "y"}],
)
def test_deletion_invariants(kwargs: dict[str, str]) -> None:
    with pytest.raises(ValidationError, match="DELETION"):
        Annotation(id="d", type=AnnotationType.DELETION, **kwargs)


def test_block_is_frozen_and_validated() -> None:
    block = Block(id="block-0", type="heading", content="A", level=1, order=0, start_line=1)

    with pytest.raises(ValidationError):
        block.content = "B"  # type: ignore[misc]
    with pytest.raises(ValidationError):
        Block(id="x", type="section", order=0, start_line=1)  # type: ignore[arg-type]
    with pytest.raises(ValidationError):
        Block(id="x", type="paragraph", order=0, start_line=0)


def test_block_diff_similarity_range() -> None:
    with pytest.raises(ValidationError):
        BlockDiff(type="modified", similarity=1.5)


def test_review_tag_catalogue() -> None:
    all_tags = [tag for group in REVIEW_TAG_CATEGORIES.values() for tag in group]

    assert len(all_tags) == len(ReviewTag) == 12
    assert VALIDATION_TAGS == {ReviewTag.OK, ReviewTag.APPROVED, ReviewTag.LOCKED}
    assert ReviewTag.ADD_EXAMPLE.value == "@ADD-EXAMPLE"
