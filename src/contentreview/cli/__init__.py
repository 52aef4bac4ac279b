"""CLI sub-commands for Content Review."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable
from typing import TYPE_CHECKING, NoReturn, TypeVar

import typer
from rich.console import Console

if TYPE_CHECKING:
    from contentreview.main import AppContext

T = TypeVar("T")

console = Console()


def run_async(ctx: AppContext, awaitable: Awaitable[T]) -> T:
    """Run a coroutine to completion, then dispose the context's engine."""

    async def _run() -> T:
        try:
            return await awaitable
        finally:
            await ctx.engine.dispose()

    return asyncio.run(_run())


def fail(message: str, error: Exception) -> NoReturn:
    """Print an error and exit with status 1."""
    console.print(f"[red]{message}:[/red] {error}")
    raise typer.Exit(code=1)
