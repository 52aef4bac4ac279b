"""Scheduled job commands."""

from __future__ import annotations

import typer
from rich.table import Table
from sqlalchemy.exc import SQLAlchemyError

from contentreview.cli import console, fail, run_async
from contentreview.database.models.base import utcnow
from contentreview.exceptions import ContentReviewError
from contentreview.review.notifications import run_notification_job

app = typer.Typer(help="Scheduled job commands")


@app.command(name="run-notifications")
def run_notifications() -> None:
    """Run the review notification job now."""
    from contentreview.main import get_app_context

    ctx = get_app_context()

    async def _run():
        async with ctx.session_factory() as session:
            async with session.begin():
                return await run_notification_job(session, ctx.config, utcnow())

    try:
        digests = run_async(ctx, _run())
    except (ContentReviewError, SQLAlchemyError) as e:
        fail("Error running notification job", e)

    if not digests:
        console.print("[green]No owners have pages due for review[/green]")
        return

    table = Table(title="Review notifications")
    table.add_column("Owner", style="bold")
    table.add_column("Email", style="cyan")
    table.add_column("Pages due", justify="right")
    for digest in digests.values():
        table.add_row(digest.member.name, digest.member.email, str(len(digest.pages)))
    console.print(table)
