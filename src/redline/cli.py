# src/redline/cli.py
"""
redline Command Line Interface (CLI).

This module implements the terminal surface using `typer` and `rich`. Every
command is a thin wrapper over the core functions or the plan storage, so
the same behaviour is reachable from scripts, hooks and the HTTP API.

Usage
-----
    # Inspect how a plan is split into blocks
    $ redline parse plan.md

    # Turn a JSON list of annotations into the feedback report
    $ redline export plan.md annotations.json --attach screenshot.png

    # Structural diff between two plan revisions
    $ redline diff plan-v1.md plan-v2.md

    # Version history kept under REDLINE_PLAN_DIR
    $ redline versions save auth-refactor plan.md
    $ redline versions diff auth-refactor 1 2

Annotation files are JSON arrays of annotation objects; both camelCase
(``originalText``) and snake_case (``original_text``) keys are accepted.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Annotated

import typer
from dotenv import load_dotenv
from pydantic import TypeAdapter
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

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
from redline.core.contracts import Annotation, Block, BlockDiff, to_wire
from redline.core.settings import load_settings
from redline.sharing import generate_share_url
from redline.storage import list_versions, load_version, record_decision, save_version

# Pick up REDLINE_* overrides from a local .env before any command runs.
load_dotenv()

app = typer.Typer(
    help="redline: review agent plans, export feedback, track versions.",
    rich_markup_mode="markdown",
    no_args_is_help=True,
)
markers_app = typer.Typer(help="Extract, inject or strip validation markers.")
versions_app = typer.Typer(help="Browse and diff saved plan versions.")
app.add_typer(markers_app, name="markers")
app.add_typer(versions_app, name="versions")

console = Console()

_ANNOTATIONS = TypeAdapter(list[Annotation])

_DIFF_STYLES = {
    "added": "green",
    "removed": "red",
    "modified": "yellow",
    "unchanged": "dim",
}

ExistingFile = Annotated[
    Path,
    typer.Argument(exists=True, file_okay=True, dir_okay=False, readable=True),
]


# --------------------------------------------------------------------------- #
# Helpers: I/O & Rendering
# --------------------------------------------------------------------------- #


def _fail(label: str, exc: Exception) -> typer.Exit:
    """Print a red error line and return the exit to raise."""
    console.print(f"[bold red]❌ {label}:[/bold red] {escape(str(exc))}")
    return typer.Exit(code=1)


def _read(path: Path) -> str:
    return path.read_text(encoding="utf-8")


def _load_annotations(path: Path | None) -> list[Annotation]:
    """Validate an annotation JSON file; a missing path means no annotations."""
    if path is None:
        return []
    return _ANNOTATIONS.validate_json(path.read_bytes())


def _emit(text: str, output: Path | None) -> None:
    """Write ``text`` to ``output`` or echo it unmodified to stdout."""
    if output is None:
        typer.echo(text, nl=not text.endswith("\n"))
        return
    output.write_text(text, encoding="utf-8")
    console.print(f"[dim]Wrote {escape(str(output))}[/dim]")


def _preview(content: str, width: int = 60) -> str:
    first = content.splitlines()[0] if content else ""
    return first if len(first) <= width else first[: width - 1] + "…"


def _render_diff(diff: list[BlockDiff]) -> None:
    summary = diff_summary(diff)
    table = Table(show_header=True, header_style="bold")
    table.add_column("Change")
    table.add_column("Type")
    table.add_column("Content")
    table.add_column("Sim.", justify="right")

    for entry in diff:
        block = entry.new_block or entry.old_block
        if block is None:
            continue
        style = _DIFF_STYLES[entry.type]
        sim = f"{entry.similarity:.2f}" if entry.similarity is not None else ""
        table.add_row(
            f"[{style}]{entry.type}[/{style}]",
            block.type,
            escape(_preview(block.content)),
            sim,
        )

    console.print(table)
    console.print(
        f"[green]+{summary.added}[/green] "
        f"[red]-{summary.removed}[/red] "
        f"[yellow]~{summary.modified}[/yellow] "
        f"[dim]={summary.unchanged}[/dim]"
    )


def _echo_json(payload: object) -> None:
    typer.echo(json.dumps(payload, indent=2, ensure_ascii=False))


# --------------------------------------------------------------------------- #
# Commands: documents
# --------------------------------------------------------------------------- #


@app.command()  # type: ignore[misc]
def parse(
    file: ExistingFile,
    as_json: Annotated[
        bool,
        typer.Option("--json", help="Print blocks as JSON instead of a table."),
    ] = False,
) -> None:
    """Split a markdown plan into review blocks."""
    markdown = _read(file)
    blocks = parse_markdown_to_blocks(markdown)
    frontmatter = extract_frontmatter(markdown).frontmatter

    if as_json:
        _echo_json({"frontmatter": frontmatter, "blocks": [to_wire(b) for b in blocks]})
        return

    if frontmatter:
        console.print(Panel.fit(escape(json.dumps(frontmatter)), title="Frontmatter"))

    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("#", justify="right")
    table.add_column("Line", justify="right")
    table.add_column("Type")
    table.add_column("Lvl", justify="right")
    table.add_column("Content")
    for block in blocks:
        table.add_row(
            str(block.order),
            str(block.start_line),
            block.type,
            "" if block.level is None else str(block.level),
            escape(_preview(block.content)),
        )
    console.print(table)


@app.command()  # type: ignore[misc]
def export(
    plan: ExistingFile,
    annotations: ExistingFile,
    attach: Annotated[
        list[str] | None,
        typer.Option("--attach", "-a", help="Global reference image path (repeatable)."),
    ] = None,
    output: Annotated[
        Path | None,
        typer.Option("--output", "-o", help="Write the report to a file instead of stdout."),
    ] = None,
) -> None:
    """Render annotations on a plan as the markdown feedback report."""
    try:
        blocks = parse_markdown_to_blocks(_read(plan))
        feedback = export_diff(blocks, _load_annotations(annotations), attach)
    except ValueError as e:
        raise _fail("Export Error", e) from e
    _emit(feedback, output)


@app.command()  # type: ignore[misc]
def diff(
    old: ExistingFile,
    new: ExistingFile,
    threshold: Annotated[
        float | None,
        typer.Option(
            "--threshold",
            "-t",
            min=0.0,
            max=1.0,
            help="Similarity needed to pair a removed and an added block as modified.",
        ),
    ] = None,
    as_json: Annotated[bool, typer.Option("--json", help="Print the diff as JSON.")] = False,
) -> None:
    """Show which blocks were added, removed or modified between two plans."""
    result = diff_blocks(
        parse_markdown_to_blocks(_read(old)),
        parse_markdown_to_blocks(_read(new)),
        threshold if threshold is not None else load_settings().modify_threshold,
    )
    if as_json:
        _echo_json(
            {
                "diff": [to_wire(d) for d in result],
                "summary": to_wire(diff_summary(result)),
            }
        )
        return
    _render_diff(result)


@app.command()  # type: ignore[misc]
def share(
    plan: ExistingFile,
    annotations: Annotated[
        Path | None,
        typer.Argument(exists=True, dir_okay=False, readable=True),
    ] = None,
    base_url: Annotated[
        str | None,
        typer.Option("--base-url", help="Override REDLINE_SHARE_URL."),
    ] = None,
) -> None:
    """Print a share URL that embeds the plan and its annotations."""
    try:
        url = generate_share_url(_read(plan), _load_annotations(annotations), base_url=base_url)
    except ValueError as e:
        raise _fail("Share Error", e) from e
    typer.echo(url)


@app.command()  # type: ignore[misc]
def decide(
    plan: ExistingFile,
    approve: Annotated[
        bool,
        typer.Option("--approve/--deny", help="Record the plan as approved or denied."),
    ] = False,
    feedback: Annotated[
        Path | None,
        typer.Option("--feedback", "-f", exists=True, dir_okay=False, help="Feedback report."),
    ] = None,
    slug: Annotated[str | None, typer.Option("--slug", help="Plan slug override.")] = None,
) -> None:
    """Record an approve/deny decision with a version and a snapshot."""
    try:
        record = record_decision(
            _read(plan),
            approve,
            _read(feedback) if feedback else None,
            slug=slug,
        )
    except (OSError, ValueError) as e:
        raise _fail("Storage Error", e) from e

    verdict = "[green]approved[/green]" if record.approved else "[red]denied[/red]"
    console.print(f"{escape(record.slug)} {verdict} (v{record.version.version})")
    console.print(f"[dim]Snapshot: {escape(record.snapshot_path)}[/dim]")


@app.command()  # type: ignore[misc]
def serve(
    host: Annotated[str | None, typer.Option("--host", help="Bind address.")] = None,
    port: Annotated[int | None, typer.Option("--port", "-p", help="Bind port.")] = None,
    reload: Annotated[bool, typer.Option("--reload", help="Auto-reload on changes.")] = False,
) -> None:
    """Run the HTTP API with uvicorn."""
    from redline.api.server import main

    main(host=host, port=port, reload=reload)


# --------------------------------------------------------------------------- #
# Commands: markers
# --------------------------------------------------------------------------- #


@markers_app.command("extract")  # type: ignore[misc]
def markers_extract(file: ExistingFile) -> None:
    """List validation markers already present in a plan."""
    found = extract_validation_markers(_read(file))
    if not found:
        console.print("[dim]No validation markers.[/dim]")
        return
    for marker in found:
        console.print(escape(format_marker_for_display(marker)))


@markers_app.command("inject")  # type: ignore[misc]
def markers_inject(
    file: ExistingFile,
    annotations: ExistingFile,
    output: Annotated[Path | None, typer.Option("--output", "-o")] = None,
) -> None:
    """Insert markers for validation-tagged annotations."""
    try:
        result = inject_validation_markers(_read(file), _load_annotations(annotations))
    except ValueError as e:
        raise _fail("Marker Error", e) from e
    _emit(result.markdown, output)
    if output is not None:
        console.print(f"Added {result.markers_added} marker(s).")


@markers_app.command("strip")  # type: ignore[misc]
def markers_strip(
    file: ExistingFile,
    output: Annotated[Path | None, typer.Option("--output", "-o")] = None,
) -> None:
    """Remove every validation marker from a plan."""
    _emit(strip_validation_markers(_read(file)), output)


# --------------------------------------------------------------------------- #
# Commands: versions
# --------------------------------------------------------------------------- #


@versions_app.command("list")  # type: ignore[misc]
def versions_list(slug: str) -> None:
    """List saved versions of a plan."""
    found = list_versions(slug)
    if not found:
        console.print(f"[dim]No versions saved for {escape(slug)}.[/dim]")
        return

    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("Version", justify="right")
    table.add_column("Saved")
    table.add_column("Hash")
    for v in found:
        table.add_row(str(v.version), v.timestamp, v.hash)
    console.print(table)


@versions_app.command("save")  # type: ignore[misc]
def versions_save(slug: str, file: ExistingFile) -> None:
    """Save a plan as the next version unless it matches the latest."""
    try:
        result = save_version(slug, _read(file))
    except (OSError, ValueError) as e:
        raise _fail("Storage Error", e) from e

    if result.skipped:
        console.print(f"[dim]Unchanged; latest is v{result.version}.[/dim]")
    else:
        console.print(f"[green]Saved v{result.version}[/green] → {escape(result.path)}")


def _version_or_exit(slug: str, version: int) -> str:
    content = load_version(slug, version)
    if content is None:
        raise _fail("Not Found", LookupError(f"{slug} has no version {version}"))
    return content


@versions_app.command("show")  # type: ignore[misc]
def versions_show(slug: str, version: int) -> None:
    """Print the content of one saved version."""
    typer.echo(_version_or_exit(slug, version), nl=False)


@versions_app.command("diff")  # type: ignore[misc]
def versions_diff(slug: str, v1: int, v2: int) -> None:
    """Diff two saved versions of a plan."""
    old: list[Block] = parse_markdown_to_blocks(_version_or_exit(slug, v1))
    new: list[Block] = parse_markdown_to_blocks(_version_or_exit(slug, v2))
    _render_diff(diff_blocks(old, new, load_settings().modify_threshold))


if __name__ == "__main__":
    app()
