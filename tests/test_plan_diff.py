"""Tests for the block-level structural diff."""

from __future__ import annotations

import pytest

from redline.core.parser import parse_markdown_to_blocks
from redline.core.plan_diff import diff_blocks, diff_summary, levenshtein_distance, similarity


def _diff(old: str, new: str, threshold: float = 0.5) -> list:
    return diff_blocks(parse_markdown_to_blocks(old), parse_markdown_to_blocks(new), threshold)


@pytest.mark.parametrize(
    ("a", "b", "expected"),
    [("kitten", "sitting", 3), ("", "abc", 3), ("abc", "abc", 0), ("flaw", "lawn", 2)],
)
def test_levenshtein_distance(a: str, b: str, expected: int) -> None:
    assert levenshtein_distance(a, b) == expected
    assert levenshtein_distance(b, a) == expected


def test_similarity_bounds() -> None:
    assert similarity("", "") == 1.0
    assert similarity("abc", "abc") == 1.0
    assert similarity("abc", "") == 0.0
    assert similarity("abc", "xyz") == 0.0
    assert similarity("kitten", "sitting") == pytest.approx(1 - 3 / 7)


def test_identical_documents_are_unchanged() -> None:
    text = "# A\n\nOne\n\n- two"
    diff = _diff(text, text)

    assert [d.type for d in diff] == ["unchanged"] * 3
    assert diff_summary(diff).unchanged == 3


def test_added_block() -> None:
    diff = _diff("# A\n\nOne", "# A\n\nOne\n\nTwo")

    assert [d.type for d in diff] == ["unchanged", "unchanged", "added"]
    assert diff[-1].old_block is None
    assert diff[-1].new_block is not None and diff[-1].new_block.content == "Two"


def test_removals_come_first() -> None:
    diff = _diff("# A\n\nOne\n\nTwo", "# A\n\nOne")

    assert [d.type for d in diff] == ["removed", "unchanged", "unchanged"]
    assert diff[0].new_block is None
    assert diff[0].old_block is not None and diff[0].old_block.content == "Two"


def test_similar_block_is_modified() -> None:
    diff = _diff("Run the tests before merging.", "Run all the tests before merging.")

    (row,) = diff
    assert row.type == "modified"
    assert row.similarity == pytest.approx(1 - 4 / 33)
    assert row.old_block is not None and row.new_block is not None


def test_type_change_is_never_modified() -> None:
    diff = _diff("Same text", "# Same text")
    assert [d.type for d in diff] == ["removed", "added"]


def test_threshold_controls_pairing() -> None:
    assert [d.type for d in _diff("abc", "abd", threshold=1.0)] == ["removed", "added"]

    (row,) = _diff("abc", "xyz", threshold=0.0)
    assert row.type == "modified"
    assert row.similarity == 0.0


def test_greedy_pairing_prefers_first_of_equal_candidates() -> None:
    diff = _diff("aaaa", "aaab\n\naaac")

    assert [d.type for d in diff] == ["modified", "added"]
    assert diff[0].new_block is not None and diff[0].new_block.content == "aaab"


def test_summary_counts_every_row() -> None:
    diff = _diff(
        "# Plan\n\nKeep me\n\nRemove me entirely\n\nEdit this line",
        "# Plan\n\nKeep me\n\nEdit this line now\n\n- brand new",
    )
    summary = diff_summary(diff)

    assert summary.unchanged == 2
    assert summary.modified == 1
    assert summary.removed == 1
    assert summary.added == 1
    assert sum(summary.model_dump().values()) == len(diff)


def test_empty_inputs() -> None:
    assert diff_blocks([], []) == []
    assert [d.type for d in _diff("", "# A")] == ["added"]


def test_similarity_exactly_at_threshold_is_modified() -> None:
    assert similarity("abcd", "abce") == 0.75

    (row,) = _diff("abcd", "abce", threshold=0.75)
    assert row.type == "modified"
    assert [d.type for d in _diff("abcd", "abce", threshold=0.76)] == ["removed", "added"]


def test_summary_accounts_for_every_block() -> None:
    old = parse_markdown_to_blocks("# T\n\nalpha\n\nbeta\n\n- one\n- two\n\n```\ncode\n```")
    new = parse_markdown_to_blocks("# T\n\nalpha!\n\n- one\n- three\n\nfresh\n\n---")
    summary = diff_summary(diff_blocks(old, new))

    assert summary.unchanged + summary.modified + summary.removed == len(old)
    assert summary.unchanged + summary.modified + summary.added == len(new)
