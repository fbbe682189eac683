"""
API Routes for stateless document operations.

Endpoints
---------
- `POST /documents/parse`: markdown -> frontmatter + blocks.
- `POST /documents/export`: blocks/markdown + annotations -> feedback report.
- `POST /documents/diff`: two markdown versions -> block diff + summary.
- `POST /markers/extract|inject|strip`: validation-marker round trip.
- `POST /share`, `POST /share/decode`: URL sharing codec.

Every handler is a thin wrapper around a pure core function; nothing here
touches the filesystem. The diff handler is a plain function because the
LCS table is quadratic in block count, so it runs in the threadpool.
"""

from __future__ import annotations

from fastapi import APIRouter

from redline.api.schemas import (
    DiffRequest,
    DiffResponse,
    ExportRequest,
    ExportResponse,
    MarkdownRequest,
    MarkersExtractResponse,
    MarkersInjectRequest,
    MarkersInjectResponse,
    MarkersStripResponse,
    ParseResponse,
    ShareDecodeRequest,
    ShareRequest,
    ShareResponse,
)
from redline.core import (
    diff_blocks,
    diff_summary,
    export_diff,
    extract_frontmatter,
    extract_validation_markers,
    format_marker_for_display,
    inject_validation_markers,
    parse_markdown_to_blocks,
    strip_validation_markers,
)
from redline.core.settings import load_settings
from redline.sharing import SharePayload, generate_share_url, parse_share_url

router = APIRouter(tags=["Documents"])


@router.post("/documents/parse", response_model=ParseResponse, summary="Parse markdown into blocks")
async def parse_document(request: MarkdownRequest) -> ParseResponse:
    return ParseResponse(
        frontmatter=extract_frontmatter(request.markdown).frontmatter,
        blocks=parse_markdown_to_blocks(request.markdown),
    )


@router.post("/documents/export", response_model=ExportResponse, summary="Export feedback")
async def export_feedback(request: ExportRequest) -> ExportResponse:
    """Render annotations as the markdown report sent back to the agent.

    Block order comes from ``blocks`` when given, otherwise from parsing
    ``markdown``. Block IDs are only stable within one parse, so clients
    that anchored annotations against their own parse should send it.
    """
    if request.blocks is not None:
        blocks = request.blocks
    else:
        blocks = parse_markdown_to_blocks(request.markdown or "")
    feedback = export_diff(blocks, request.annotations, request.global_attachments)
    return ExportResponse(feedback=feedback, count=len(request.annotations))


@router.post("/documents/diff", response_model=DiffResponse, summary="Diff two plan versions")
def diff_documents(request: DiffRequest) -> DiffResponse:
    threshold = (
        request.threshold if request.threshold is not None else load_settings().modify_threshold
    )
    diff = diff_blocks(
        parse_markdown_to_blocks(request.old_markdown),
        parse_markdown_to_blocks(request.new_markdown),
        threshold,
    )
    return DiffResponse(diff=diff, summary=diff_summary(diff))


@router.post("/markers/extract", response_model=MarkersExtractResponse)
async def extract_markers(request: MarkdownRequest) -> MarkersExtractResponse:
    markers = extract_validation_markers(request.markdown)
    return MarkersExtractResponse(
        markers=markers,
        display=[format_marker_for_display(m) for m in markers],
    )


@router.post("/markers/inject", response_model=MarkersInjectResponse)
async def inject_markers(request: MarkersInjectRequest) -> MarkersInjectResponse:
    result = inject_validation_markers(request.markdown, request.annotations)
    return MarkersInjectResponse(
        markdown=result.markdown,
        markers_added=result.markers_added,
        markers=result.markers,
    )


@router.post("/markers/strip", response_model=MarkersStripResponse)
async def strip_markers(request: MarkdownRequest) -> MarkersStripResponse:
    return MarkersStripResponse(markdown=strip_validation_markers(request.markdown))


@router.post("/share", response_model=ShareResponse, summary="Create a share URL")
async def create_share(request: ShareRequest) -> ShareResponse:
    url = generate_share_url(request.markdown, request.annotations, request.global_attachments)
    return ShareResponse(url=url)


@router.post("/share/decode", response_model=SharePayload, summary="Decode a share URL")
async def decode_share(request: ShareDecodeRequest) -> SharePayload:
    # ShareDecodeError is a ValueError -> 400 via the app-level handler.
    return parse_share_url(request.url)


__all__ = ["router"]
