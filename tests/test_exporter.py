"""Tests for the feedback exporter.

The report is consumed by an agent, so most assertions pin exact text.
"""

from __future__ import annotations

from typing import Any

import pytest

from redline.core.contracts import Annotation, AnnotationType, ReviewTag
from redline.core.exporter import NO_CHANGES, export_diff
from redline.core.parser import parse_markdown_to_blocks

PLAN = "# Title\n\nSome text\n\nMore text"


@pytest.fixture()
def blocks() -> Any:
    return parse_markdown_to_blocks(PLAN)


def _ann(id_: str, type_: AnnotationType, **kwargs: Any) -> Annotation:
    return Annotation(id=id_, type=type_, **kwargs)


def test_nothing_to_report(blocks: Any) -> None:
    assert export_diff(blocks, []) == NO_CHANGES
    assert export_diff(blocks, [], []) == "No changes detected."


def test_single_comment_exact_output(blocks: Any) -> None:
    ann = _ann(
        "1",
        AnnotationType.COMMENT,
        block_id="block-1",
        original_text="Some text",
        text="Why?",
    )

    assert export_diff(blocks, [ann]) == (
        "# Plan Feedback\n\n"
        "I've reviewed this plan and have 1 piece of feedback:\n\n"
        '## 1. Feedback on: "Some text"\n'
        "> Why?\n\n"
        "---\n"
    )


def test_templates_per_type(blocks: Any) -> None:
    anns = [
        _ann("d", AnnotationType.DELETION, block_id="block-1", original_text="old"),
        _ann(
            "r",
            AnnotationType.REPLACEMENT,
            block_id="block-1",
            original_text="before",
            text="after",
        ),
        _ann("i", AnnotationType.INSERTION, block_id="block-2", text="new step"),
        _ann("g", AnnotationType.GLOBAL_COMMENT, text="Overall\ngood"),
    ]
    out = export_diff(blocks, anns)

    assert "I've reviewed this plan and have 4 pieces of feedback:" in out
    assert "## 1. General feedback about the plan\n> Overall\n> good\n" in out
    assert "## 2. Remove this\n```\nold\n```\n> I don't want this in the plan.\n" in out
    assert "## 3. Change this\n**From:**\n```\nbefore\n```\n**To:**\n```\nafter\n```\n" in out
    assert "## 4. Add this\n```\nnew step\n```\n" in out
    assert out.startswith("# Plan Feedback\n\n")
    assert out.endswith("---\n")


def test_sorting_global_then_block_order_then_unknown(blocks: Any) -> None:
    anns = [
        _ann("a", AnnotationType.COMMENT, block_id="block-2", original_text="x", text="third"),
        _ann("b", AnnotationType.COMMENT, block_id="gone", original_text="x", text="last"),
        _ann("c", AnnotationType.COMMENT, block_id="block-0", original_text="x", text="second"),
        _ann("d", AnnotationType.GLOBAL_COMMENT, text="first"),
        _ann("e", AnnotationType.COMMENT, block_id="block-0", original_text="x", text="second-b"),
    ]
    out = export_diff(blocks, anns)

    positions = [out.index(f"> {t}\n") for t in ("first", "second", "second-b", "third", "last")]
    assert positions == sorted(positions)


def test_tag_prefix_and_macro_suffix(blocks: Any) -> None:
    ann = _ann(
        "1",
        AnnotationType.COMMENT,
        block_id="block-1",
        original_text="Some text",
        text="Wrong",
        tag=ReviewTag.FIX,
        is_macro=True,
    )

    assert '## 1. @FIX Feedback on: "Some text" [MACRO]\n' in export_diff(blocks, [ann])


def test_long_comment_title_is_truncated(blocks: Any) -> None:
    ann = _ann("1", AnnotationType.COMMENT, block_id="block-1", original_text="a" * 100, text="t")

    assert f'## 1. Feedback on: "{"a" * 77}..."\n' in export_diff(blocks, [ann])


def test_annotation_images_are_listed(blocks: Any) -> None:
    ann = _ann(
        "1",
        AnnotationType.COMMENT,
        block_id="block-1",
        original_text="Some text",
        text="See screenshot",
        image_paths=["/tmp/shot.png"],
    )

    assert "**Attached images:**\n- `/tmp/shot.png`\n" in export_diff(blocks, [ann])


def test_global_attachments_only(blocks: Any) -> None:
    out = export_diff(blocks, [], ["a.png", "b.png"])

    assert out != NO_CHANGES
    assert "## Reference Images\n" in out
    assert "1. `a.png`\n2. `b.png`\n" in out
    assert "I've reviewed this plan" not in out


def test_export_is_pure(blocks: Any) -> None:
    anns = [_ann("g", AnnotationType.GLOBAL_COMMENT, text="ok")]
    assert export_diff(blocks, anns) == export_diff(blocks, anns)


def test_three_annotations_plural(blocks: Any) -> None:
    anns = [_ann(str(i), AnnotationType.GLOBAL_COMMENT, text=f"note {i}") for i in range(3)]
    assert "3 pieces of feedback" in export_diff(blocks, anns)


def test_block_order_beats_insertion_order(blocks: Any) -> None:
    later = _ann("a", AnnotationType.COMMENT, block_id="block-2", original_text="M", text="on 2")
    earlier = _ann("b", AnnotationType.COMMENT, block_id="block-1", original_text="S", text="on 1")
    out = export_diff(blocks, [later, earlier])

    assert out.index("> on 1") < out.index("> on 2")
