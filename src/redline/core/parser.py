"""
Block Parser: markdown plan -> ordered list of typed :class:`Block` records.

This is a deliberately small, line-oriented classifier, not a CommonMark
implementation. It recognizes exactly the block types the review surfaces
need and degrades anything ambiguous or malformed to ``paragraph``.

Pipeline
--------
1. Frontmatter: a ``---`` delimited header at the top of the document is
   read as YAML and flattened to a key -> str / list[str] mapping. An unclosed
   header is left in place and parsed as ordinary text.
2. Line scan, first matching rule wins:

   - blank line               -> ends the open paragraph
   - ```` ```lang ```` ... ```` ``` ```` -> one ``code`` block (needs a closing fence)
   - ``#``..``######`` + space -> ``heading``
   - ``---`` / ``***`` / ``___`` -> ``hr``
   - ``|`` row + separator row -> ``table`` (raw rows kept)
   - ``>`` lines              -> one ``blockquote`` per run of quoted lines
   - ``-``/``*``/``+``/``1.`` -> ``list-item`` (indent level, checkbox)
   - anything else            -> accumulates into ``paragraph``

3. Every block gets ``order`` = its output index, ``id`` = ``block-<order>``
   and ``start_line`` = 1-based line in the *original* input, frontmatter
   included, so UIs can scroll to the source line.

Guarantees
----------
- Never raises on any string input.
- Deterministic: the same input always yields the same blocks, IDs included.

Examples
--------
>>> [b.level for b in parse_markdown_to_blocks("# A\\n## B\\n### C")]
[1, 2, 3]
>>> extract_frontmatter("---\\ntitle: X\\n---\\n\\nBody").content
'Body'
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any

import yaml

from redline.core.contracts.block import Block, BlockType
from redline.core.settings import get_logger

logger = get_logger(__name__)

Frontmatter = dict[str, str | list[str]]

_FENCE = "```"
_HEADING_RE = re.compile(r"^(#{1,6})\s+(.*?)\s*$")
_HR_RE = re.compile(r"^(?:-{3,}|\*{3,}|_{3,})$")
_TABLE_SEPARATOR_RE = re.compile(r"^[\s|:-]*-[\s|:-]*$")
_LIST_ITEM_RE = re.compile(r"^([ \t]*)(?:[-*+]|\d+[.)])\s+(.*)$")
_CHECKBOX_RE = re.compile(r"^\[([ xX])\](?:\s+|$)")
_QUOTE_PREFIX_RE = re.compile(r"^>\s?")

# Columns per list nesting level; a tab counts as one level.
_INDENT_UNIT = 2


# ===========================================================================
# Frontmatter
# ===========================================================================


@dataclass(frozen=True, slots=True)
class FrontmatterResult:
    """Outcome of :func:`extract_frontmatter`.

    Attributes
    ----------
    frontmatter : Frontmatter | None
        Parsed header, or ``None`` when the document has no closed header.
    content : str
        Document body with the header (and blank lines after it) removed,
        or the untouched input when there is no header.
    """

    frontmatter: Frontmatter | None
    content: str


def _flatten_value(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _parse_frontmatter_lines(lines: list[str]) -> Frontmatter:
    """Parse the body of a frontmatter header into a flat mapping.

    The header is read with ``yaml.safe_load`` and reduced to scalars
    (``str``) and sequences (``list[str]``); nested mappings are dropped.
    A header that is not valid YAML, or not a mapping, yields ``{}``.
    """
    try:
        loaded = yaml.safe_load("\n".join(lines))
    except yaml.YAMLError as e:
        logger.debug("Frontmatter is not valid YAML: %s", e)
        return {}
    if not isinstance(loaded, dict):
        return {}

    data: Frontmatter = {}
    for key, value in loaded.items():
        if isinstance(value, dict):
            continue
        if isinstance(value, list):
            data[str(key)] = [_flatten_value(item) for item in value]
        else:
            data[str(key)] = _flatten_value(value)
    return data


def _split_frontmatter(markdown: str) -> tuple[Frontmatter | None, str, int]:
    """Split ``markdown`` into (frontmatter, body, number of lines removed)."""
    lines = markdown.split("\n")

    start = 0
    while start < len(lines) and not lines[start].strip():
        start += 1
    if start >= len(lines) or lines[start].strip() != "---":
        return None, markdown, 0

    end = next(
        (i for i in range(start + 1, len(lines)) if lines[i].strip() == "---"),
        None,
    )
    if end is None:
        logger.debug("Unclosed frontmatter; parsing document as-is")
        return None, markdown, 0

    frontmatter = _parse_frontmatter_lines(lines[start + 1 : end])

    body_start = end + 1
    while body_start < len(lines) and not lines[body_start].strip():
        body_start += 1
    return frontmatter, "\n".join(lines[body_start:]), body_start


def extract_frontmatter(markdown: str) -> FrontmatterResult:
    """Extract a YAML frontmatter header from the top of ``markdown``.

    Parameters
    ----------
    markdown:
        Full document text.

    Returns
    -------
    FrontmatterResult
        ``frontmatter`` is ``None`` (and ``content`` the original text) when
        the document does not start with a closed ``---`` header.
    """
    frontmatter, content, _ = _split_frontmatter(markdown)
    return FrontmatterResult(frontmatter=frontmatter, content=content)


# ===========================================================================
# Line classification helpers
# ===========================================================================


def _is_fence(line: str) -> bool:
    return line.strip().startswith(_FENCE)


def _closing_fence_index(lines: list[str], start: int) -> int | None:
    """Return the index of the fence closing the one opened at ``start``."""
    for j in range(start + 1, len(lines)):
        if _is_fence(lines[j]):
            return j
    return None


def _is_table_start(lines: list[str], i: int) -> bool:
    """A ``|`` row followed by a separator row such as ``|---|:--:|``."""
    if not lines[i].strip().startswith("|") or i + 1 >= len(lines):
        return False
    nxt = lines[i + 1].strip()
    return "|" in nxt and bool(_TABLE_SEPARATOR_RE.match(nxt))


def _indent_level(indent: str) -> int:
    columns = len(indent.replace("\t", " " * _INDENT_UNIT))
    return columns // _INDENT_UNIT


def _starts_block(lines: list[str], i: int) -> bool:
    """True when line ``i`` would open a non-paragraph block."""
    stripped = lines[i].strip()
    if not stripped:
        return True
    if stripped.startswith(_FENCE) and _closing_fence_index(lines, i) is not None:
        return True
    return bool(
        _HEADING_RE.match(stripped)
        or _HR_RE.match(stripped)
        or _is_table_start(lines, i)
        or stripped.startswith(">")
        or _LIST_ITEM_RE.match(lines[i])
    )


# ===========================================================================
# Parser
# ===========================================================================


class _BlockBuilder:
    """Collects blocks, assigning order, IDs and absolute line numbers."""

    __slots__ = ("blocks", "_line_offset")

    def __init__(self, line_offset: int) -> None:
        self.blocks: list[Block] = []
        self._line_offset = line_offset

    def add(
        self,
        type_: BlockType,
        content: str,
        index: int,
        *,
        level: int | None = None,
        language: str | None = None,
        checked: bool | None = None,
    ) -> None:
        order = len(self.blocks)
        self.blocks.append(
            Block(
                id=f"block-{order}",
                type=type_,
                content=content,
                level=level,
                language=language,
                checked=checked,
                order=order,
                start_line=self._line_offset + index + 1,
            )
        )


def parse_markdown_to_blocks(markdown: str) -> list[Block]:
    """Parse ``markdown`` into blocks in document order.

    Parameters
    ----------
    markdown:
        Raw plan text, optionally starting with a frontmatter header.

    Returns
    -------
    list[Block]
        Fresh blocks; ``order`` is strictly increasing and IDs are unique.
    """
    _, content, line_offset = _split_frontmatter(markdown)
    lines = content.replace("\r\n", "\n").replace("\r", "\n").split("\n")
    out = _BlockBuilder(line_offset)

    paragraph: list[str] = []
    paragraph_start = 0

    def flush_paragraph() -> None:
        if paragraph:
            out.add("paragraph", "\n".join(paragraph), paragraph_start)
            paragraph.clear()

    i = 0
    while i < len(lines):
        line = lines[i]
        stripped = line.strip()

        if not stripped:
            flush_paragraph()
            i += 1
            continue

        if stripped.startswith(_FENCE):
            close = _closing_fence_index(lines, i)
            if close is not None:
                flush_paragraph()
                language = stripped[len(_FENCE) :].strip() or None
                out.add("code", "\n".join(lines[i + 1 : close]), i, language=language)
                i = close + 1
                continue

        heading = _HEADING_RE.match(stripped)
        if heading:
            flush_paragraph()
            out.add("heading", heading.group(2), i, level=len(heading.group(1)))
            i += 1
            continue

        if _HR_RE.match(stripped):
            flush_paragraph()
            out.add("hr", "", i)
            i += 1
            continue

        if _is_table_start(lines, i):
            flush_paragraph()
            start = i
            rows: list[str] = []
            while i < len(lines) and lines[i].strip().startswith("|"):
                rows.append(lines[i].strip())
                i += 1
            out.add("table", "\n".join(rows), start)
            continue

        if stripped.startswith(">"):
            flush_paragraph()
            start = i
            quoted: list[str] = []
            while i < len(lines) and lines[i].strip().startswith(">"):
                quoted.append(_QUOTE_PREFIX_RE.sub("", lines[i].strip()).rstrip())
                i += 1
            out.add("blockquote", "\n".join(quoted), start)
            continue

        item = _LIST_ITEM_RE.match(line)
        if item:
            flush_paragraph()
            text = item.group(2).strip()
            checked: bool | None = None
            box = _CHECKBOX_RE.match(text)
            if box:
                checked = box.group(1).lower() == "x"
                text = text[box.end() :].strip()
            out.add("list-item", text, i, level=_indent_level(item.group(1)), checked=checked)
            i += 1
            continue

        # Paragraph text: also reached by unclosed fences and pipe rows
        # without a separator, which degrade to plain text.
        if not paragraph:
            paragraph_start = i
        paragraph.append(stripped)
        i += 1
        while i < len(lines) and not _starts_block(lines, i):
            paragraph.append(lines[i].strip())
            i += 1

    flush_paragraph()
    logger.debug("Parsed %d blocks from %d lines", len(out.blocks), len(lines))
    return out.blocks


__all__ = ["Frontmatter", "FrontmatterResult", "extract_frontmatter", "parse_markdown_to_blocks"]
