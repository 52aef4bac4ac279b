"""Main CLI entry point for Content Review.

This module provides the main Typer application with sub-commands for the
review report, review actions and the notification job.

Usage:
    contentreview install
    contentreview report --owner <member-id>
    contentreview review mark <page-id> <member-id> --note "Checked"
    contentreview jobs run-notifications
"""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console
from sqlalchemy.exc import SQLAlchemyError

from contentreview.cli import jobs as jobs_cli
from contentreview.cli import report as report_cli
from contentreview.cli import review as review_cli
from contentreview.config import ContentReviewConfig, load_config
from contentreview.database.connection import create_schema, get_engine, get_session_factory
from contentreview.database.models.base import utcnow
from contentreview.database.queries.site_config import get_or_create_site_config
from contentreview.logging import get_logger, setup_logging
from contentreview.review.notifications import ensure_notification_job
from contentreview.review.service import ContentReviewService

app = typer.Typer(
    name="contentreview",
    help="Content Review: scheduled review of CMS pages",
    no_args_is_help=True,
)

app.add_typer(review_cli.app, name="review", help="Review pages")
app.add_typer(jobs_cli.app, name="jobs", help="Run scheduled jobs")
app.command(name="report")(report_cli.report)

console = Console()
logger = get_logger(__name__)


class AppContext:
    """Application context shared across CLI commands.

    Attributes:
        config: Loaded Content Review configuration
        engine: Async SQLAlchemy engine
        session_factory: Factory for creating database sessions
        service: Review service bound to session_factory
    """

    def __init__(self, config: ContentReviewConfig):
        self.config = config
        self.engine = get_engine(config.database)
        self.session_factory = get_session_factory(self.engine)
        self.service = ContentReviewService(self.session_factory, config)


_app_context: AppContext | None = None


def get_app_context() -> AppContext:
    """Get the shared application context.

    Raises:
        RuntimeError: If context has not been initialized
    """
    if _app_context is None:
        raise RuntimeError("Application context not initialized. Call initialize_context first.")
    return _app_context


def initialize_context(config: ContentReviewConfig) -> AppContext:
    """Initialize the global application context."""
    global _app_context
    _app_context = AppContext(config)
    return _app_context


@app.command()
def install() -> None:
    """Create the database tables and queue the notification job."""
    ctx = get_app_context()

    async def _install():
        try:
            await create_schema(ctx.engine)
            async with ctx.session_factory() as session:
                async with session.begin():
                    site_config = await get_or_create_site_config(session)
                    job = await ensure_notification_job(session, ctx.config, utcnow())
            return site_config, job
        finally:
            await ctx.engine.dispose()

    try:
        site_config, job = asyncio.run(_install())
    except SQLAlchemyError as e:
        console.print(f"[red]Error installing schema:[/red] {e}")
        raise typer.Exit(code=1)

    console.print("[green]Schema installed[/green]")
    console.print(f"[dim]Site review period:[/dim] {site_config.review_period_days} days")
    if job is None:
        console.print("[yellow]Notification job disabled[/yellow]")
    else:
        console.print(f"[dim]Notification job runs after:[/dim] {job.start_after.isoformat()}")


@app.command()
def serve(
    host: Annotated[
        Optional[str],
        typer.Option("--host", "-h", help="Host to bind to (default from config)"),
    ] = None,
    port: Annotated[
        Optional[int],
        typer.Option("--port", "-p", help="Port to bind to (default from config)"),
    ] = None,
    reload: Annotated[
        bool,
        typer.Option("--reload", "-r", help="Enable auto-reload (development)"),
    ] = False,
) -> None:
    """Start the Content Review web API."""
    import uvicorn

    from contentreview.web.app import create_app

    config = get_app_context().config
    host = host or config.web.host
    port = port or config.web.port

    console.print("[bold cyan]Starting Content Review API[/bold cyan]")
    console.print(f"[dim]Host:[/dim] {host}")
    console.print(f"[dim]Port:[/dim] {port}")
    console.print()

    uvicorn.run(
        create_app(config),
        host=host,
        port=port,
        reload=reload,
        log_level=config.logging.level.lower(),
    )


@app.callback()
def main_callback(
    config_path: Annotated[
        Optional[Path],
        typer.Option(
            "--config",
            "-c",
            help="Path to configuration file (TOML format)",
            exists=True,
            dir_okay=False,
            readable=True,
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable debug logging"),
    ] = False,
) -> None:
    """Load configuration, set up logging and initialize the application context."""
    try:
        config = load_config(config_path)
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[red]Error loading configuration:[/red] {e}")
        raise typer.Exit(code=1)

    logging_config = config.logging
    if verbose:
        logging_config = logging_config.model_copy(update={"level": "DEBUG"})
    setup_logging(logging_config, stream=sys.stderr)

    try:
        initialize_context(config)
    except (SQLAlchemyError, ValueError) as e:
        console.print(f"[red]Error initializing application:[/red] {e}")
        raise typer.Exit(code=1)

    logger.debug("cli_initialized", config_path=str(config_path) if config_path else None)


if __name__ == "__main__":
    app()
