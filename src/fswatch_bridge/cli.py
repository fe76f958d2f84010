"""
Command line entry point: stream a path's events to the terminal.

Usage:
    fswatch-bridge PATH [--snapshot] [--duration SECONDS] [--verbose]
"""

import asyncio
import logging
import logging.config
from pathlib import Path

import click
from rich.console import Console

from fswatch_bridge.channels import ConsoleChannel
from fswatch_bridge.config import BridgeConfig, get_config
from fswatch_bridge.models import WatchMode
from fswatch_bridge.session import open_session

logger = logging.getLogger(__name__)

console = Console()
status_console = Console(stderr=True)


async def run_watch(channel: ConsoleChannel, config: BridgeConfig, duration: float | None) -> None:
    """Serve one session on channel until it closes or duration elapses."""
    session = await open_session(channel, config=config)
    try:
        if await channel.wait_closed(duration):
            return
        await session.close()
    finally:
        await session.dispose()


@click.command()
@click.argument('path', type=click.Path(path_type=Path))
@click.option('--snapshot', '-s', is_flag=True, help='List the directory before streaming changes')
@click.option('--duration', '-t', type=float, default=None, help='Stop after this many seconds')
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose logging')
def main(path: Path, snapshot: bool, duration: float | None, verbose: bool):
    """Stream filesystem events for PATH as JSON lines."""
    config = get_config()
    if verbose:
        config = config.model_copy(update={"debug_mode": True})
    logging.config.dictConfig(config.get_log_config())

    mode = WatchMode.SNAPSHOT if snapshot else WatchMode.WATCH
    channel = ConsoleChannel({"path": str(path), "payload": mode.value}, console=console, status_console=status_console)

    try:
        asyncio.run(run_watch(channel, config, duration))
    except KeyboardInterrupt:
        status_console.print("[yellow]interrupted[/yellow]")

    if channel.problem:
        raise SystemExit(1)


if __name__ == '__main__':
    main()
