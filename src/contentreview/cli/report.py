"""Pages-due-for-review report command."""

from __future__ import annotations

import json
from datetime import datetime
from typing import Annotated, Optional
from uuid import UUID

import typer
from rich.table import Table
from sqlalchemy.exc import SQLAlchemyError

from contentreview.cli import console, fail, run_async
from contentreview.exceptions import ContentReviewError
from contentreview.review.report import PageReviewState, ReportFilter


def _date(value: datetime | None) -> str:
    return value.strftime("%Y-%m-%d") if value is not None else "-"


def render_report_table(states: list[PageReviewState]) -> Table:
    """Build the Rich table for the report."""
    table = Table(title="Pages due for review")
    table.add_column("Title", style="bold")
    table.add_column("Last reviewed", style="dim")
    table.add_column("Due", style="red")
    table.add_column("Owners")
    table.add_column("Last edited by", style="dim")
    table.add_column("URL", style="cyan")
    table.add_column("Settings", style="magenta")

    for state in states:
        marker = "live" if state.live_link else "draft"
        table.add_row(
            f"[link={state.edit_link}]{state.title}[/link]",
            _date(state.last_review_date),
            _date(state.next_review_date),
            state.owner_names or "-",
            state.last_edited_by_name or "-",
            f"{state.link} ({marker})",
            state.settings_label,
        )
    return table


def report(
    include_virtual: Annotated[
        bool,
        typer.Option("--include-virtual", help="Include virtual pages"),
    ] = False,
    owner: Annotated[
        Optional[UUID],
        typer.Option("--owner", "-o", help="Only pages owned by this member ID"),
    ] = None,
    format: Annotated[
        str,
        typer.Option("--format", "-f", help="Output format (table or json)"),
    ] = "table",
) -> None:
    """List live pages whose review is overdue."""
    from contentreview.main import get_app_context

    ctx = get_app_context()

    if format not in ("table", "json"):
        console.print(f"[red]Invalid format:[/red] {format}. Valid values: table, json")
        raise typer.Exit(code=1)

    report_filter = ReportFilter(include_virtual=include_virtual, only_owned_by=owner)
    try:
        states = run_async(
            ctx, ctx.service.pages_due_for_review(report_filter, requester_id=owner)
        )
    except (ContentReviewError, SQLAlchemyError) as e:
        fail("Error building report", e)

    if format == "json":
        console.print_json(json.dumps([state.model_dump(mode="json") for state in states]))
        return

    if not states:
        console.print("[green]No pages are due for review[/green]")
        return
    console.print(render_report_table(states))
