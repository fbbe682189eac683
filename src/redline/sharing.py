"""
URL sharing codec for a plan and its annotations.

A share link carries the whole review in the URL fragment, so nothing has to
be stored server-side:

    <base_url>/#<base64url(deflate-raw(json(payload)))>

Payload (compact keys)::

    {"p": plan markdown,
     "a": [compact annotation, ...],
     "g": [global image path, ...]}      # optional

Compact annotations are positional lists keyed by the first letter of the
type: ``["D", original, author, images?]``, ``["R"|"C"|"I", original, text,
author, images?]`` and ``["G", text, author, images?]``. Images are plain
path strings; ``[path, name]`` pairs from newer clients are accepted too.

Block anchoring is not part of the payload. Restored annotations have
``block_id == ""`` until a presentation layer re-locates their text.
"""

from __future__ import annotations

import base64
import binascii
import json
import zlib
from collections.abc import Sequence
from typing import Any

from pydantic import Field

from redline.core.contracts.annotation import Annotation, AnnotationType
from redline.core.contracts.base import Record
from redline.core.settings import load_settings

_RAW_DEFLATE_WBITS = -15

_TYPE_CODES: dict[AnnotationType, str] = {
    AnnotationType.DELETION: "D",
    AnnotationType.REPLACEMENT: "R",
    AnnotationType.COMMENT: "C",
    AnnotationType.INSERTION: "I",
    AnnotationType.GLOBAL_COMMENT: "G",
}
_CODE_TYPES = {code: kind for kind, code in _TYPE_CODES.items()}


class ShareDecodeError(ValueError):
    """Raised when a share hash or payload cannot be decoded."""


class SharePayload(Record):
    """Decoded content of a share link."""

    plan: str
    annotations: list[Annotation] = Field(default_factory=list)
    global_attachments: list[str] = Field(default_factory=list)


# ---- Byte codec --------------------------------------------------------------


def compress(data: Any) -> str:
    """JSON-encode ``data``, raw-deflate it and return unpadded base64url."""
    raw = json.dumps(data, ensure_ascii=False, separators=(",", ":")).encode("utf-8")
    packer = zlib.compressobj(level=9, wbits=_RAW_DEFLATE_WBITS)
    packed = packer.compress(raw) + packer.flush()
    return base64.urlsafe_b64encode(packed).decode("ascii").rstrip("=")


def decompress(text: str) -> Any:
    """Reverse :func:`compress`.

    Raises
    ------
    ShareDecodeError
        If ``text`` is not valid base64url, deflate or JSON.
    """
    padded = text.strip() + "=" * (-len(text.strip()) % 4)
    try:
        packed = base64.urlsafe_b64decode(padded.encode("ascii"))
        raw = zlib.decompress(packed, wbits=_RAW_DEFLATE_WBITS)
        return json.loads(raw.decode("utf-8"))
    except (binascii.Error, UnicodeError, zlib.error, ValueError) as e:
        raise ShareDecodeError(f"Invalid share payload: {e}") from e


# ---- Annotation compaction ---------------------------------------------------


def _image_path(item: Any) -> str:
    if isinstance(item, list | tuple) and item:
        return str(item[0])
    return str(item)


def _images(raw: Any) -> list[str] | None:
    if not isinstance(raw, list) or not raw:
        return None
    return [_image_path(item) for item in raw]


def to_shareable(annotations: Sequence[Annotation]) -> list[list[Any]]:
    """Convert annotations to the compact positional format."""
    out: list[list[Any]] = []
    for ann in annotations:
        code = _TYPE_CODES[ann.type]
        author = ann.author or None
        if code == "G":
            item: list[Any] = ["G", ann.text or "", author]
        elif code == "D":
            item = ["D", ann.original_text, author]
        else:
            item = [code, ann.original_text, ann.text or "", author]
        if ann.image_paths:
            item.append(list(ann.image_paths))
        out.append(item)
    return out


def from_shareable(items: Sequence[Sequence[Any]]) -> list[Annotation]:
    """Restore annotations from the compact format.

    Raises
    ------
    ShareDecodeError
        If ``items`` is not a list, or on an unknown type code or a
        malformed entry.
    """
    if not isinstance(items, list | tuple):
        raise ShareDecodeError(f"Shared annotations must be a list, got {type(items).__name__}")

    restored: list[Annotation] = []
    for index, item in enumerate(items):
        if (
            not isinstance(item, list | tuple)
            or not item
            or not isinstance(item[0], str)
            or item[0] not in _CODE_TYPES
        ):
            raise ShareDecodeError(f"Unknown shared annotation at index {index}: {item!r}")
        code = item[0]
        fields = list(item[1:]) + [None] * 4

        if code == "G":
            text, author, images = fields[0], fields[1], fields[2]
            original = ""
        elif code == "D":
            original, author, images = fields[0], fields[1], fields[2]
            text = None
        else:
            original, text, author, images = fields[0], fields[1], fields[2], fields[3]

        try:
            restored.append(
                Annotation(
                    id=f"shared-{index}",
                    block_id="",
                    type=_CODE_TYPES[code],
                    original_text=original or "",
                    text=text or None,
                    created_at=index,
                    author=author or None,
                    image_paths=_images(images),
                )
            )
        except ValueError as e:
            raise ShareDecodeError(f"Malformed shared annotation at index {index}: {e}") from e
    return restored


# ---- URLs --------------------------------------------------------------------


def generate_share_url(
    markdown: str,
    annotations: Sequence[Annotation],
    global_attachments: Sequence[str] | None = None,
    base_url: str | None = None,
) -> str:
    """Build a share URL for ``markdown`` and its annotations."""
    payload: dict[str, Any] = {"p": markdown, "a": to_shareable(annotations)}
    if global_attachments:
        payload["g"] = list(global_attachments)
    base = (base_url or load_settings().share_base_url).rstrip("/")
    return f"{base}/#{compress(payload)}"


def parse_share_url(url_or_hash: str) -> SharePayload:
    """Decode a share URL (or just its fragment) into a :class:`SharePayload`."""
    fragment = url_or_hash.split("#", 1)[1] if "#" in url_or_hash else url_or_hash
    data = decompress(fragment)
    if not isinstance(data, dict) or not isinstance(data.get("p"), str):
        raise ShareDecodeError("Share payload is missing the plan")
    if data.get("g") is not None and not isinstance(data["g"], list):
        raise ShareDecodeError("Share payload attachments must be a list")

    return SharePayload(
        plan=data["p"],
        annotations=from_shareable(data.get("a") or []),
        global_attachments=_images(data.get("g")) or [],
    )


__all__ = [
    "ShareDecodeError",
    "SharePayload",
    "compress",
    "decompress",
    "from_shareable",
    "generate_share_url",
    "parse_share_url",
    "to_shareable",
]
