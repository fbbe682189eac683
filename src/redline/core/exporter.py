"""
Feedback Exporter: blocks + annotations -> markdown report for an agent.

The report is what the reviewer "sends back": a numbered list of feedback
entries, each rendered with a template chosen by :class:`AnnotationType`.

Ordering
--------
Entries are sorted by a three-part key:

1. document-global feedback (``block_id == ""``) first,
2. then annotations on known blocks by ``Block.order``,
3. then annotations whose ``block_id`` matches no supplied block;

ties keep the caller's insertion order (``sorted`` is stable).

Output shape
------------
::

    # Plan Feedback

    ## Reference Images            (only with global attachments)
    ...
    I've reviewed this plan and have 2 pieces of feedback:

    ## 1. @FIX Feedback on: "the selected text" [MACRO]
    > the comment
    ...
    ---

The function is pure: identical inputs give byte-identical output.
"""

from __future__ import annotations

import re
from collections.abc import Sequence

from redline.core.contracts.annotation import Annotation, AnnotationType
from redline.core.contracts.block import Block

NO_CHANGES = "No changes detected."

_TITLE_MAX_CHARS = 80
_WS_RE = re.compile(r"\s+")


def _truncate(text: str, limit: int = _TITLE_MAX_CHARS) -> str:
    """Collapse whitespace and cut ``text`` to ``limit`` characters."""
    flat = _WS_RE.sub(" ", text).strip()
    if len(flat) <= limit:
        return flat
    return flat[: limit - 3].rstrip() + "..."


def _quote(text: str | None) -> str:
    """Render ``text`` as a markdown blockquote, one ``> `` per line."""
    return "\n".join(f"> {line}".rstrip() for line in (text or "").split("\n")) + "\n"


def _fenced(text: str | None) -> str:
    return f"```\n{text or ''}\n```\n"


def _pluralize_feedback(count: int) -> str:
    return f"{count} piece of feedback" if count == 1 else f"{count} pieces of feedback"


def _sort_annotations(blocks: Sequence[Block], annotations: Sequence[Annotation]) -> list[Annotation]:
    order_by_id = {block.id: block.order for block in blocks}

    def key(entry: tuple[int, Annotation]) -> tuple[int, int, int]:
        index, ann = entry
        if not ann.block_id:
            return (0, 0, index)
        order = order_by_id.get(ann.block_id)
        if order is None:
            return (2, 0, index)
        return (1, order, index)

    return [ann for _, ann in sorted(enumerate(annotations), key=key)]


def _title(ann: Annotation) -> str:
    match ann.type:
        case AnnotationType.DELETION:
            return "Remove this"
        case AnnotationType.INSERTION:
            return "Add this"
        case AnnotationType.REPLACEMENT:
            return "Change this"
        case AnnotationType.COMMENT:
            return f'Feedback on: "{_truncate(ann.original_text)}"'
        case AnnotationType.GLOBAL_COMMENT:
            return "General feedback about the plan"


def _body(ann: Annotation) -> str:
    match ann.type:
        case AnnotationType.DELETION:
            return _fenced(ann.original_text) + "> I don't want this in the plan.\n"
        case AnnotationType.INSERTION:
            return _fenced(ann.text)
        case AnnotationType.REPLACEMENT:
            return f"**From:**\n{_fenced(ann.original_text)}**To:**\n{_fenced(ann.text)}"
        case AnnotationType.COMMENT | AnnotationType.GLOBAL_COMMENT:
            return _quote(ann.text)


def _render_entry(index: int, ann: Annotation) -> str:
    heading = _title(ann)
    if ann.tag is not None:
        heading = f"{ann.tag.value} {heading}"
    if ann.is_macro:
        heading = f"{heading} [MACRO]"

    out = f"## {index}. {heading}\n" + _body(ann)
    if ann.image_paths:
        out += "**Attached images:**\n"
        out += "".join(f"- `{path}`\n" for path in ann.image_paths)
    return out + "\n"


def export_diff(
    blocks: Sequence[Block],
    annotations: Sequence[Annotation],
    global_attachments: Sequence[str] | None = None,
) -> str:
    """Render reviewer feedback as a markdown report.

    Parameters
    ----------
    blocks:
        Blocks of the reviewed document; only used to resolve block order.
    annotations:
        Feedback items in insertion order.
    global_attachments:
        Optional image paths that apply to the whole plan.

    Returns
    -------
    str
        The report, or ``"No changes detected."`` when there are neither
        annotations nor global attachments.
    """
    attachments = list(global_attachments or [])
    if not annotations and not attachments:
        return NO_CHANGES

    out = "# Plan Feedback\n\n"

    if attachments:
        out += "## Reference Images\n"
        out += "Please review these screenshots (use the Read tool to view):\n"
        out += "".join(f"{n}. `{path}`\n" for n, path in enumerate(attachments, start=1))
        out += "\n"

    if annotations:
        out += f"I've reviewed this plan and have {_pluralize_feedback(len(annotations))}:\n\n"

    for n, ann in enumerate(_sort_annotations(blocks, annotations), start=1):
        out += _render_entry(n, ann)

    return out + "---\n"


__all__ = ["NO_CHANGES", "export_diff"]
