"""Tests for the markdown block parser and frontmatter extraction."""

from __future__ import annotations

from redline.core.parser import extract_frontmatter, parse_markdown_to_blocks


def _types(markdown: str) -> list[str]:
    return [b.type for b in parse_markdown_to_blocks(markdown)]


def test_empty_document_has_no_blocks() -> None:
    assert parse_markdown_to_blocks("") == []
    assert parse_markdown_to_blocks("\n\n  \n") == []


def test_headings_keep_level_and_text() -> None:
    blocks = parse_markdown_to_blocks("# A\n## B\n### C")

    assert [b.type for b in blocks] == ["heading"] * 3
    assert [b.level for b in blocks] == [1, 2, 3]
    assert [b.content for b in blocks] == ["A", "B", "C"]


def test_order_ids_and_start_lines() -> None:
    blocks = parse_markdown_to_blocks("# A\n\nPara\n\n- item")

    assert [b.order for b in blocks] == [0, 1, 2]
    assert [b.id for b in blocks] == ["block-0", "block-1", "block-2"]
    assert [b.start_line for b in blocks] == [1, 3, 5]


def test_parse_is_deterministic() -> None:
    text = "# Plan\n\n- [x] one\n- two\n\n```sh\nls\n```"
    assert parse_markdown_to_blocks(text) == parse_markdown_to_blocks(text)


def test_consecutive_lines_join_into_one_paragraph() -> None:
    blocks = parse_markdown_to_blocks("Line one\nline two\n\nNext")

    assert [b.type for b in blocks] == ["paragraph", "paragraph"]
    assert blocks[0].content == "Line one\nline two"
    assert blocks[1].content == "Next"


def test_fenced_code_block_with_language() -> None:
    (block,) = parse_markdown_to_blocks("```python\nprint(1)\n\nprint(2)\n```")

    assert block.type == "code"
    assert block.language == "python"
    assert block.content == "print(1)\n\nprint(2)"


def test_unclosed_fence_degrades_to_paragraph() -> None:
    (block,) = parse_markdown_to_blocks("```python\nprint(1)")

    assert block.type == "paragraph"
    assert block.content == "```python\nprint(1)"


def test_table_requires_separator_row() -> None:
    (table,) = parse_markdown_to_blocks("| a | b |\n|---|:-:|\n| 1 | 2 |")
    assert table.type == "table"
    assert table.content.split("\n") == ["| a | b |", "|---|:-:|", "| 1 | 2 |"]

    assert _types("| a | b |\n| 1 | 2 |") == ["paragraph"]


def test_blockquote_groups_consecutive_lines() -> None:
    blocks = parse_markdown_to_blocks("> one\n> two\n\nText")

    assert [b.type for b in blocks] == ["blockquote", "paragraph"]
    assert blocks[0].content == "one\ntwo"


def test_list_items_levels_and_checkboxes() -> None:
    blocks = parse_markdown_to_blocks("- a\n  - b\n\t- c\n- [x] done\n- [ ] todo\n1. first")

    assert all(b.type == "list-item" for b in blocks)
    assert [b.level for b in blocks] == [0, 1, 1, 0, 0, 0]
    assert [b.content for b in blocks] == ["a", "b", "c", "done", "todo", "first"]
    assert [b.checked for b in blocks] == [None, None, None, True, False, None]


def test_horizontal_rules() -> None:
    blocks = parse_markdown_to_blocks("Intro\n\n---\n\n***\n\nOutro")

    assert [b.type for b in blocks] == ["paragraph", "hr", "hr", "paragraph"]
    assert blocks[1].content == ""


def test_crlf_line_endings() -> None:
    assert _types("# A\r\n\r\nText\r\n") == ["heading", "paragraph"]


def test_frontmatter_is_extracted() -> None:
    text = "---\ntitle: \"My Plan\"\ntags:\n  - api\n  - auth\n---\n\n# Heading"
    result = extract_frontmatter(text)

    assert result.frontmatter == {"title": "My Plan", "tags": ["api", "auth"]}
    assert result.content == "# Heading"


def test_frontmatter_lines_count_toward_start_line() -> None:
    text = "---\ntitle: X\n---\n\n# Heading\n\nBody"
    blocks = parse_markdown_to_blocks(text)

    assert [b.type for b in blocks] == ["heading", "paragraph"]
    assert [b.start_line for b in blocks] == [5, 7]


def test_document_without_frontmatter() -> None:
    result = extract_frontmatter("# Plan\n\nBody")

    assert result.frontmatter is None
    assert result.content == "# Plan\n\nBody"


def test_unclosed_frontmatter_is_left_in_place() -> None:
    text = "---\ntitle: X\n\nBody"
    result = extract_frontmatter(text)

    assert result.frontmatter is None
    assert result.content == text
    assert _types(text)[0] == "hr"


def test_nested_list_indentation() -> None:
    blocks = parse_markdown_to_blocks("- a\n  - b\n    - c\n- d")
    assert [b.level for b in blocks] == [0, 1, 2, 0]


def test_checkbox_states() -> None:
    blocks = parse_markdown_to_blocks("- [x] Done\n- [ ] Pending\n- Plain")
    assert [b.checked for b in blocks] == [True, False, None]
    assert [b.content for b in blocks] == ["Done", "Pending", "Plain"]


def test_frontmatter_values_are_flattened_to_strings() -> None:
    text = "---\ndraft: true\npriority: 2\ncreated: 2026-01-30\nempty:\nowner:\n  name: sam\n---\nBody"
    result = extract_frontmatter(text)

    assert result.frontmatter == {
        "draft": "true",
        "priority": "2",
        "created": "2026-01-30",
        "empty": "",
    }
    assert result.content == "Body"


def test_invalid_yaml_header_degrades_to_empty_mapping() -> None:
    result = extract_frontmatter("---\ntitle: [unclosed\n---\n\nBody")

    assert result.frontmatter == {}
    assert result.content == "Body"


def test_non_mapping_header_degrades_to_empty_mapping() -> None:
    result = extract_frontmatter("---\n- just\n- a list\n---\nBody")

    assert result.frontmatter == {}
    assert _types("---\n- just\n- a list\n---\nBody") == ["paragraph"]
