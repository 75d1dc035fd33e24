"""CLI handling for lanclip.

This module provides the command-line interface for lanclip, handling
argument parsing via click, configuration and logging setup, and
dispatching to the history daemon or to one of the one-shot actions.

Usage:
    lanclip [--config PATH] [--max-size N] [--interval MS] [--storage PATH]
            [--no-sync] [--verbose]
    lanclip --show | --clear
"""

import dataclasses
import sys

import click

from lanclip.config import Config, ConfigurationError, load_config
from lanclip.main_logging import configure_logging
from lanclip.main_options import MutuallyExclusiveOption


@click.command()
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="YAML configuration file (default: in the user config directory)",
)
@click.option(
    "--max-size",
    type=click.IntRange(min=1),
    default=None,
    help="Maximum number of history entries",
)
@click.option(
    "--interval",
    type=click.IntRange(min=1),
    default=None,
    help="Clipboard polling interval in milliseconds",
)
@click.option(
    "--storage",
    type=click.Path(dir_okay=False),
    default=None,
    help="History JSON file",
)
@click.option(
    "--no-sync",
    is_flag=True,
    help="Disable LAN discovery and history sync",
)
@click.option(
    "--show",
    is_flag=True,
    cls=MutuallyExclusiveOption,
    exclusive_with=["clear"],
    help="Print the stored history and exit",
)
@click.option(
    "--clear",
    is_flag=True,
    cls=MutuallyExclusiveOption,
    exclusive_with=["show"],
    help="Clear the stored history and exit",
)
@click.option(
    "--verbose",
    is_flag=True,
    help="Enable DEBUG-level logging",
)
def main(
    config_path: str | None,
    max_size: int | None,
    interval: int | None,
    storage: str | None,
    no_sync: bool,
    show: bool,
    clear: bool,
    verbose: bool,
) -> None:
    """Keep a ranked clipboard history and share it with instances on the LAN."""
    configure_logging(verbose)

    try:
        config = _build_config(config_path, max_size, interval, storage, no_sync)
    except ConfigurationError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    if show:
        _show_history(config)
    elif clear:
        _clear_history(config)
    else:
        _run_daemon(config)


def _build_config(
    config_path: str | None,
    max_size: int | None,
    interval: int | None,
    storage: str | None,
    no_sync: bool,
) -> Config:
    """Load the config file and apply command-line overrides.

    Raises:
        ConfigurationError: If the file or a resulting value is invalid.
    """
    config = load_config(config_path)
    overrides: dict = {}
    if max_size is not None:
        overrides["max_history_size"] = max_size
    if interval is not None:
        overrides["check_interval_ms"] = interval
    if storage is not None:
        overrides["storage_path"] = storage
    if no_sync:
        overrides["sync_enabled"] = False
    return dataclasses.replace(config, **overrides)


def _show_history(config: Config) -> None:
    """Print the stored history, one ranked entry per line."""
    from lanclip.app import load_saved_history
    from lanclip.history import rank
    from lanclip.persistence import HistoryFile

    history = rank(load_saved_history(HistoryFile(config.storage_path)))
    if not history:
        click.echo("History is empty")
        return
    for position, item in enumerate(history[: config.max_history_size], start=1):
        preview = item.preview.replace("\n", " ")
        click.echo(f"{position:3d}. [{item.click_count}] {preview}")


def _clear_history(config: Config) -> None:
    """Empty the stored history."""
    from lanclip.persistence import HistoryFile

    try:
        HistoryFile(config.storage_path).save([])
    except OSError as e:
        click.echo(f"Error: Cannot clear history: {e}", err=True)
        sys.exit(1)
    click.echo("History cleared")


def _run_daemon(config: Config) -> None:
    """Run the history daemon until interrupted.

    Args:
        config: Runtime configuration.
    """
    import asyncio

    from lanclip.app import run_app
    from lanclip.clipboard import X11Clipboard

    clipboard = X11Clipboard.open()
    try:
        asyncio.run(run_app(config, clipboard))
    finally:
        clipboard.close()
