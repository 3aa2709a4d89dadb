"""CLI entry point for Duckboard.

- serve: run the dashboard API with background polling
- sync: synchronize once and print the resulting state
"""

from __future__ import annotations

import asyncio
import json
import sys
from pathlib import Path

import click

from duckboard import __version__
from duckboard.api.models import unreachable_message
from duckboard.config import ConfigError, DashboardConfig, find_config, load_config
from duckboard.logging import setup_logging
from duckboard.sync import DuckClient, LoggingProgress, SyncState, SyncStore


def _load(config_path: Path | None) -> DashboardConfig:
    try:
        return load_config(config_path or find_config())
    except ConfigError as e:
        click.echo(f"Configuration error: {e}", err=True)
        sys.exit(2)


@click.group()
@click.version_option(__version__)
def main() -> None:
    """Duckboard - build status dashboard for a Duck CI server."""
    pass


@main.command()
@click.option(
    "-c",
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Path to duckboard.yaml (auto-detected if not specified)",
)
@click.option("--host", default="127.0.0.1", show_default=True, help="Address to bind to")
@click.option("--port", default=8000, show_default=True, type=int, help="Port to bind to")
@click.option("--no-poll", is_flag=True, help="Only synchronize on POST /dashboard/sync")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
def serve(
    config_path: Path | None,
    host: str,
    port: int,
    no_poll: bool,
    verbose: bool,
) -> None:
    """Run the dashboard API."""
    import uvicorn  # noqa: PLC0415

    from duckboard.api.app import create_app  # noqa: PLC0415

    setup_logging(level="DEBUG" if verbose else None)
    config = _load(config_path)

    uvicorn.run(create_app(config, poll=not no_poll), host=host, port=port, log_level="info")


@main.command("sync")
@click.option(
    "-c",
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Path to duckboard.yaml (auto-detected if not specified)",
)
@click.option("-s", "--server", default=None, help="Server address (default: configured server)")
@click.option("--view", default=None, help="View slug to filter builds by")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
def sync_command(
    config_path: Path | None,
    server: str | None,
    view: str | None,
    verbose: bool,
) -> None:
    """Synchronize once and print the dashboard state as JSON.

    Exits with status 1 when the Duck server could not be reached.
    """
    setup_logging(level="DEBUG" if verbose else "WARNING", console=verbose)
    config = _load(config_path)

    state = asyncio.run(_sync_once(config, server, view or config.default_view))

    click.echo(json.dumps(state.snapshot(), indent=2))
    if state.error:
        click.echo(unreachable_message(state.server), err=True)
        sys.exit(1)


async def _sync_once(config: DashboardConfig, server: str | None, view: str | None) -> SyncState:
    state = SyncState(version=config.version)
    client = DuckClient(base_url=config.base_url, timeout=config.request_timeout)
    store = SyncStore(state, client, default_server=config.default_server)
    try:
        await store.synchronize(LoggingProgress(), server=server, view=view)
    finally:
        await client.aclose()
    return state


if __name__ == "__main__":
    main()
