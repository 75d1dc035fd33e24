#!/usr/bin/env python3
"""Inbound history snapshots.

Each datagram on the sync port is decoded in its own task. Malformed
payloads are logged and dropped without touching local state; valid
snapshots are handed to the history callback together with the sender's
host.

Every datagram spawns a task with no upper bound, so a flood of datagrams
creates a matching amount of concurrent work.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Callable

from lanclip.codec import DecodeError, decode_message

if TYPE_CHECKING:
    from lanclip.capture_item import CaptureItem

logger = logging.getLogger(__name__)

HistoryCallback = Callable[["list[CaptureItem]", str], None]


async def handle_payload(data: bytes, source_host: str, on_history: HistoryCallback) -> bool:
    """Decode one sync datagram and deliver its history.

    Args:
        data: Raw datagram payload.
        source_host: IP address the datagram came from.
        on_history: Called with (items, source_host) for a valid snapshot.

    Returns:
        True if a snapshot was delivered, False if the datagram was dropped.
    """
    try:
        message = decode_message(data)
    except DecodeError as e:
        logger.warning("Dropping sync datagram from %s: %s", source_host, e)
        return False

    logger.debug("Received %d history items from %s", len(message.history), source_host)
    on_history(message.history, source_host)
    return True


class SyncReceiver(asyncio.DatagramProtocol):
    """Datagram protocol for the sync port.

    Args:
        on_history: Called with (items, source_host) for each valid snapshot.
        spawn: Schedules a coroutine as a background task.
    """

    def __init__(self, on_history: HistoryCallback, spawn: Callable) -> None:
        self.on_history = on_history
        self.spawn = spawn

    def datagram_received(self, data: bytes, addr: tuple[str, int]) -> None:
        self.spawn(handle_payload(data, addr[0], self.on_history))

    def error_received(self, exc: Exception) -> None:
        logger.warning("Sync socket error: %s", exc)
