"""Structural diff rows and their summary."""

from __future__ import annotations

from typing import Annotated, Literal

from pydantic import Field

from .base import Record
from .block import Block

DiffType = Literal["unchanged", "added", "removed", "modified"]


class BlockDiff(Record):
    """One row of a block-level comparison.

    ``old_block`` is absent for ``added`` rows, ``new_block`` for ``removed``
    rows. ``similarity`` is only set on ``modified`` rows.
    """

    type: DiffType
    old_block: Block | None = None
    new_block: Block | None = None
    similarity: Annotated[float, Field(ge=0.0, le=1.0)] | None = None


class DiffSummary(Record):
    """Per-type row counts of a diff."""

    unchanged: int = 0
    added: int = 0
    removed: int = 0
    modified: int = 0


__all__ = ["BlockDiff", "DiffSummary", "DiffType"]
