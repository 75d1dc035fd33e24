#!/usr/bin/env python3
"""Application wiring for lanclip.

ClipboardApp connects the history store to its collaborators:
- every local history change is saved to disk and pushed to all peers
- every valid snapshot from a peer replaces the local history and is saved;
  if that changes the history it is pushed on to the other peers, but not
  back to the host it came from
- the clipboard monitor feeds captures into the store

Persistence failures are logged; the in-memory history stays
authoritative. If the sync ports cannot be bound the app keeps running
without sync.
"""

from __future__ import annotations

import asyncio
import logging
import signal
from typing import TYPE_CHECKING

from lanclip.history import HistoryStore
from lanclip.monitor import run_clipboard_monitor
from lanclip.persistence import HistoryFile, PersistenceError
from lanclip.sync_service import SyncService
from lanclip.sync_socket import SyncStartupError

if TYPE_CHECKING:
    from lanclip.capture_item import CaptureItem
    from lanclip.clipboard import ClipboardBackend
    from lanclip.config import Config

logger = logging.getLogger(__name__)


def load_saved_history(history_file: HistoryFile) -> list[CaptureItem]:
    """Load the persisted history, or an empty one if it cannot be read."""
    try:
        return history_file.load()
    except PersistenceError as e:
        logger.error("%s, starting with an empty history", e)
        return []


class ClipboardApp:
    """The clipboard history application.

    Args:
        config: Runtime configuration.
        clipboard: Clipboard backend, or None when running headless.
        history_file: Persistence collaborator, defaults to a HistoryFile
            at config.storage_path.
        sync: Sync subsystem, or None to create the default one when
            config.sync_enabled is set.
    """

    def __init__(
        self,
        config: Config,
        clipboard: ClipboardBackend | None = None,
        history_file: HistoryFile | None = None,
        sync: SyncService | None = None,
    ) -> None:
        self.config = config
        self.clipboard = clipboard
        self.history_file = history_file or HistoryFile(config.storage_path)
        self.store = HistoryStore(
            config.max_history_size,
            load_saved_history(self.history_file),
            on_change=self._on_history_changed,
        )
        if sync is None and config.sync_enabled:
            sync = SyncService(self.store.get_history, self.merge_remote)
        self.sync = sync

    def capture(self, content: str) -> None:
        """Add clipboard content to the history."""
        self.store.capture(content)

    async def select(self, content: str) -> None:
        """Put a history entry back on the clipboard and count the selection.

        Entry point for a history picker UI; the daemon itself only captures.

        Raises:
            ClipboardError: If the clipboard cannot be set.
        """
        if self.clipboard is not None:
            await asyncio.to_thread(self.clipboard.write, content)
        self.store.record_selection(content)

    def clear(self) -> None:
        """Remove every history entry."""
        self.store.clear()

    def set_max_size(self, max_size: int) -> None:
        """Change the history capacity, truncating immediately.

        Raises:
            ConfigurationError: If max_size is not a positive integer.
        """
        self.store.set_max_size(max_size)
        self.config.max_history_size = max_size

    def merge_remote(self, items: list[CaptureItem], origin: str) -> None:
        """Replace the history with a snapshot received from origin and save it."""
        logger.debug("Merging %d history items from %s", len(items), origin)
        self.store.replace_all(items, origin=origin)
        self.save()

    def save(self) -> None:
        """Persist the current history, logging failures."""
        self._save(self.store.get_history())

    def _save(self, history: list[CaptureItem]) -> None:
        try:
            self.history_file.save(history)
        except OSError as e:
            logger.error("Error saving history: %s", e)

    def _on_history_changed(self, history: list[CaptureItem], origin: str | None) -> None:
        if origin is None:
            self._save(history)
        if self.sync is not None:
            self.sync.schedule_push(history, exclude_host=origin)

    async def start_sync(self) -> bool:
        """Start the sync subsystem, disabling sync if it cannot start.

        Returns:
            True if sync is running.
        """
        if self.sync is None:
            return False
        try:
            await self.sync.start()
        except SyncStartupError as e:
            logger.error("%s, running without sync", e)
            self.sync = None
            return False
        return True

    async def run(self, shutdown: asyncio.Event) -> None:
        """Run until shutdown is set.

        Starts sync, polls the clipboard if there is one, and on shutdown
        stops sync and saves the history.
        """
        await self.start_sync()
        try:
            if self.clipboard is not None:
                await run_clipboard_monitor(
                    self.clipboard, self.capture, self.config.check_interval, shutdown
                )
            else:
                await shutdown.wait()
        finally:
            if self.sync is not None:
                await self.sync.stop()
            self.save()


async def run_app(config: Config, clipboard: ClipboardBackend | None) -> None:
    """Run the application until SIGINT or SIGTERM.

    Args:
        config: Runtime configuration.
        clipboard: Clipboard backend to monitor.
    """
    app = ClipboardApp(config, clipboard)

    shutdown = asyncio.Event()
    loop = asyncio.get_running_loop()
    loop.add_signal_handler(signal.SIGINT, shutdown.set)
    loop.add_signal_handler(signal.SIGTERM, shutdown.set)

    await app.run(shutdown)
