"""Shared base for all redline record contracts.

Python code uses snake_case attributes; JSON payloads use the camelCase
field names the browser and terminal surfaces already speak (``blockId``,
``startLine``, ``originalText``...). Both spellings are accepted on input.

Dump records for the wire with ``model.model_dump(by_alias=True,
exclude_none=True)``; :func:`to_wire` does exactly that.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class Record(BaseModel):
    """Base model with camelCase aliases and name-based population."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


def to_wire(record: BaseModel) -> dict[str, Any]:
    """Dump ``record`` to a JSON-ready dict using camelCase keys."""
    return record.model_dump(mode="json", by_alias=True, exclude_none=True)


__all__ = ["Record", "to_wire"]
