"""Plan storage: plan files, feedback snapshots and version history."""

from __future__ import annotations

from .decisions import DecisionRecord, record_decision
from .history import (
    PlanVersion,
    VersionSaveResult,
    get_latest_version,
    list_versions,
    load_version,
    save_version,
    versions_match,
)
from .plans import (
    SLUG_PATTERN,
    extract_first_heading,
    generate_slug,
    get_plan_dir,
    plan_path,
    sanitize_tag,
    save_annotations,
    save_final_snapshot,
    save_plan,
)

__all__ = [
    "SLUG_PATTERN",
    "DecisionRecord",
    "PlanVersion",
    "VersionSaveResult",
    "extract_first_heading",
    "generate_slug",
    "get_latest_version",
    "get_plan_dir",
    "list_versions",
    "load_version",
    "plan_path",
    "record_decision",
    "sanitize_tag",
    "save_annotations",
    "save_final_snapshot",
    "save_plan",
    "save_version",
    "versions_match",
]
