"""Review commands: mark pages reviewed and inspect review state."""

from __future__ import annotations

from typing import Annotated
from uuid import UUID

import typer
from rich.panel import Panel
from rich.table import Table
from sqlalchemy.exc import SQLAlchemyError

from contentreview.cli import console, fail, run_async
from contentreview.database.models.page import Stage
from contentreview.exceptions import ContentReviewError
from contentreview.review.schedule import get_schedule

app = typer.Typer(help="Review commands")


@app.command()
def mark(
    page_id: Annotated[UUID, typer.Argument(help="Page ID")],
    member_id: Annotated[UUID, typer.Argument(help="Reviewing member ID")],
    note: Annotated[
        str,
        typer.Option("--note", "-n", help="Review note"),
    ] = "",
) -> None:
    """Mark a page as reviewed."""
    from contentreview.main import get_app_context

    ctx = get_app_context()

    try:
        entry = run_async(ctx, ctx.service.mark_reviewed(page_id, member_id, note))
    except (ContentReviewError, SQLAlchemyError) as e:
        fail("Error marking page reviewed", e)

    console.print(
        Panel(
            f"[green]Page marked as reviewed[/green]\n\n"
            f"[bold]Log ID:[/bold] {entry.id}\n"
            f"[bold]Page:[/bold] {entry.page_id}\n"
            f"[bold]Reviewed:[/bold] {entry.created_at.strftime('%Y-%m-%d %H:%M:%S')}",
            title="Review Logged",
            border_style="green",
        )
    )


@app.command()
def status(
    page_id: Annotated[UUID, typer.Argument(help="Page ID")],
    draft: Annotated[
        bool,
        typer.Option("--draft", help="Read the draft stage instead of live"),
    ] = False,
) -> None:
    """Show the review state of a page."""
    from contentreview.main import get_app_context

    ctx = get_app_context()
    stage = Stage.draft if draft else Stage.live

    try:
        state = run_async(ctx, ctx.service.get_review_state(page_id, stage))
    except (ContentReviewError, SQLAlchemyError) as e:
        fail("Error reading review state", e)

    due = state.next_review_date.strftime("%Y-%m-%d %H:%M") if state.next_review_date else "-"
    last = state.last_review_date.strftime("%Y-%m-%d %H:%M") if state.last_review_date else "-"
    border = "red" if state.is_overdue else "green"
    console.print(
        Panel(
            f"[bold]Title:[/bold] {state.title}\n"
            f"[bold]Settings:[/bold] {state.settings_label}\n"
            f"[bold]Period:[/bold] {state.review_period_days} days\n"
            f"[bold]Owners:[/bold] {state.owner_names or '-'}\n"
            f"[bold]Last reviewed:[/bold] {last}\n"
            f"[bold]Next review:[/bold] {due}\n"
            f"[bold]Overdue:[/bold] {'yes' if state.is_overdue else 'no'}",
            title=f"Review state ({state.stage})",
            border_style=border,
        )
    )


@app.command()
def publish(
    page_id: Annotated[UUID, typer.Argument(help="Page ID")],
) -> None:
    """Copy a page's draft to the live stage."""
    from contentreview.main import get_app_context

    ctx = get_app_context()

    try:
        live = run_async(ctx, ctx.service.publish_page(page_id))
    except (ContentReviewError, SQLAlchemyError) as e:
        fail("Error publishing page", e)

    console.print(f"[green]Published[/green] {live.title} ({live.id})")


@app.command()
def unpublish(
    page_id: Annotated[UUID, typer.Argument(help="Page ID")],
) -> None:
    """Remove a page from the live stage."""
    from contentreview.main import get_app_context

    ctx = get_app_context()

    try:
        removed = run_async(ctx, ctx.service.unpublish_page(page_id))
    except (ContentReviewError, SQLAlchemyError) as e:
        fail("Error unpublishing page", e)

    if removed:
        console.print(f"[green]Unpublished[/green] {page_id}")
    else:
        console.print(f"[yellow]Page {page_id} was not published[/yellow]")


@app.command()
def schedule() -> None:
    """List the review frequency choices."""
    table = Table(title="Review schedule")
    table.add_column("Days", style="cyan", justify="right")
    table.add_column("Label")
    for days, label in get_schedule().items():
        table.add_row(str(days), label)
    console.print(table)


@app.command()
def history(
    page_id: Annotated[UUID, typer.Argument(help="Page ID")],
) -> None:
    """List the review log of a page, newest first."""
    from contentreview.main import get_app_context

    ctx = get_app_context()

    try:
        entries = run_async(ctx, ctx.service.get_review_history(page_id))
    except (ContentReviewError, SQLAlchemyError) as e:
        fail("Error reading review history", e)

    if not entries:
        console.print("[yellow]Page has never been reviewed[/yellow]")
        return

    table = Table(title="Review history")
    table.add_column("Reviewed", style="dim")
    table.add_column("Reviewer", style="bold")
    table.add_column("Note")
    for entry in entries:
        table.add_row(
            entry.created_at.strftime("%Y-%m-%d %H:%M"),
            entry.reviewer.name if entry.reviewer else "-",
            entry.note or "",
        )
    console.print(table)
