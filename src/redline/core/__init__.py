"""Core document model and algorithms for redline.

The five components are pure functions over plain records:

- :mod:`redline.core.parser`    markdown -> blocks (+ frontmatter)
- :mod:`redline.core.exporter`  blocks + annotations -> feedback report
- :mod:`redline.core.markers`   validation markers: extract / inject / strip
- :mod:`redline.core.plan_diff` block-level structural diff

Record shapes live in :mod:`redline.core.contracts`.
"""

from __future__ import annotations

from .exporter import export_diff
from .markers import (
    count_validation_annotations,
    extract_validation_markers,
    format_marker_for_display,
    inject_validation_markers,
    is_validation_tag,
    strip_validation_markers,
)
from .parser import FrontmatterResult, extract_frontmatter, parse_markdown_to_blocks
from .plan_diff import diff_blocks, diff_summary

__all__ = [
    "FrontmatterResult",
    "count_validation_annotations",
    "diff_blocks",
    "diff_summary",
    "export_diff",
    "extract_frontmatter",
    "extract_validation_markers",
    "format_marker_for_display",
    "inject_validation_markers",
    "is_validation_tag",
    "parse_markdown_to_blocks",
    "strip_validation_markers",
]
