"""
Block Contract

One structural unit of a parsed markdown plan. A Block is produced by
:func:`redline.core.parser.parse_markdown_to_blocks` and is never mutated
afterwards: the next parse supersedes the whole list.

Identity
--------
``id`` is only unique inside one parse result (``block-0``, ``block-1``...).
Cross-version correlation is the job of the structural diff, which matches
blocks by content, not by ID.
"""

from __future__ import annotations

from typing import Literal

from pydantic import ConfigDict, Field

from .base import Record

BlockType = Literal["paragraph", "heading", "blockquote", "list-item", "code", "hr", "table"]

BLOCK_TYPES: tuple[BlockType, ...] = (
    "paragraph",
    "heading",
    "blockquote",
    "list-item",
    "code",
    "hr",
    "table",
)


class Block(Record):
    """A structured block extracted from a markdown document."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Identifier unique within one parse (e.g. 'block-3').")
    type: BlockType = Field(..., description="Block type.")
    content: str = Field(
        "",
        description="Plain text. Fence body for code, raw pipe rows for tables.",
    )
    level: int | None = Field(
        default=None,
        ge=0,
        description="Heading depth (1-6) or 0-based list nesting depth.",
    )
    language: str | None = Field(default=None, description="Fence language tag for code blocks.")
    checked: bool | None = Field(
        default=None,
        description="Checkbox state for list items; None when the item has no checkbox.",
    )
    order: int = Field(..., ge=0, description="Position in document order.")
    start_line: int = Field(..., ge=1, description="1-based source line where the block starts.")


__all__ = ["Block", "BlockType", "BLOCK_TYPES"]
