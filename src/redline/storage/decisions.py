"""Persist the outcome of a review round (approve or deny)."""

from __future__ import annotations

from pathlib import Path

from redline.core.contracts.base import Record

from .history import VersionSaveResult, save_version
from .plans import generate_slug, save_annotations, save_final_snapshot

DEFAULT_DENY_FEEDBACK = "Plan rejected by user"


class DecisionRecord(Record):
    """Files written for one decision."""

    slug: str
    approved: bool
    version: VersionSaveResult
    annotations_path: str | None = None
    snapshot_path: str


def record_decision(
    plan: str,
    approved: bool,
    feedback: str | None = None,
    *,
    slug: str | None = None,
    custom_path: str | Path | None = None,
) -> DecisionRecord:
    """Save a version, the feedback file and the final snapshot.

    A denial without feedback is recorded with a default message. An
    approval without feedback writes no annotations file.
    """
    slug = slug or generate_slug(plan)
    if not approved and not feedback:
        feedback = DEFAULT_DENY_FEEDBACK

    version = save_version(slug, plan, custom_path)

    annotations_path: Path | None = None
    if feedback:
        annotations_path = save_annotations(slug, feedback, custom_path)

    snapshot = save_final_snapshot(
        slug,
        "approved" if approved else "denied",
        plan,
        feedback or "",
        custom_path,
    )
    return DecisionRecord(
        slug=slug,
        approved=approved,
        version=version,
        annotations_path=str(annotations_path) if annotations_path else None,
        snapshot_path=str(snapshot),
    )


__all__ = ["DEFAULT_DENY_FEEDBACK", "DecisionRecord", "record_decision"]
