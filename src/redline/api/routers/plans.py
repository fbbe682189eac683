"""
API Routes for plan version history and review decisions.

Endpoints
---------
- `GET  /plans/{slug}/versions`: list stored versions.
- `POST /plans/{slug}/versions`: save a new version (no-op if unchanged).
- `GET  /plans/{slug}/versions/{version}`: content + parsed blocks.
- `GET  /plans/{slug}/diff?v1=&v2=`: structural diff between two versions.
- `POST /plans/decision`: approve/deny; writes version, feedback and snapshot.

Storage lives in the directory configured by ``REDLINE_PLAN_DIR``.
Handlers are plain functions: they read and hash files, so FastAPI runs
them in its threadpool instead of on the event loop.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, HTTPException, Path, Query, status

from redline.api.schemas import (
    DecisionRequest,
    SaveVersionRequest,
    VersionContentResponse,
    VersionDiffResponse,
    VersionListResponse,
)
from redline.core import diff_blocks, diff_summary, parse_markdown_to_blocks
from redline.core.settings import load_settings
from redline.storage import (
    SLUG_PATTERN,
    DecisionRecord,
    VersionSaveResult,
    list_versions,
    load_version,
    record_decision,
    save_version,
)

router = APIRouter(prefix="/plans", tags=["Plans"])

Slug = Annotated[
    str,
    Path(pattern=SLUG_PATTERN, description="Plan slug, a plain filename stem."),
]


def _load_or_404(slug: str, version: int) -> str:
    content = load_version(slug, version)
    if content is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Version {version} not found",
        )
    return content


@router.get("/{slug}/versions", response_model=VersionListResponse)
def get_versions(slug: Slug) -> VersionListResponse:
    return VersionListResponse(slug=slug, versions=list_versions(slug))


@router.post(
    "/{slug}/versions",
    response_model=VersionSaveResult,
    status_code=status.HTTP_201_CREATED,
)
def post_version(slug: Slug, request: SaveVersionRequest) -> VersionSaveResult:
    return save_version(slug, request.content)


@router.get("/{slug}/versions/{version}", response_model=VersionContentResponse)
def get_version(slug: Slug, version: int) -> VersionContentResponse:
    content = _load_or_404(slug, version)
    return VersionContentResponse(
        slug=slug,
        version=version,
        content=content,
        blocks=parse_markdown_to_blocks(content),
    )


@router.get("/{slug}/diff", response_model=VersionDiffResponse)
def get_version_diff(
    slug: Slug,
    v1: int = Query(..., ge=1),
    v2: int = Query(..., ge=1),
) -> VersionDiffResponse:
    """Diff two stored versions; 404 names the first missing one."""
    old = _load_or_404(slug, v1)
    new = _load_or_404(slug, v2)
    diff = diff_blocks(
        parse_markdown_to_blocks(old),
        parse_markdown_to_blocks(new),
        load_settings().modify_threshold,
    )
    return VersionDiffResponse(slug=slug, v1=v1, v2=v2, diff=diff, summary=diff_summary(diff))


@router.post("/decision", response_model=DecisionRecord)
def post_decision(request: DecisionRequest) -> DecisionRecord:
    return record_decision(
        request.plan,
        request.approved,
        request.feedback,
        slug=request.slug,
    )


__all__ = ["router"]
