#!/usr/bin/env python3
"""Discovery announcement handling.

Receives announcements on the discovery port and grows the peer registry.
A peer seen for the first time immediately gets a full history push so it
does not have to wait for the next local change; repeated announcements
from a known peer are ignored.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Callable

from lanclip.discovery_message import parse_announcement
from lanclip.peers import PeerAddress

if TYPE_CHECKING:
    from lanclip.capture_item import CaptureItem
    from lanclip.peers import PeerRegistry
    from lanclip.sync_sender import SyncSender

logger = logging.getLogger(__name__)


class DiscoveryListener(asyncio.DatagramProtocol):
    """Datagram protocol for the discovery port.

    Args:
        registry: Registry of known peers.
        sender: Sender used for the bootstrap push to new peers.
        get_history: Returns the current local history snapshot.
        is_self: Returns True for this instance's own sync endpoint, so
            that our own broadcasts do not register us as a peer.
        spawn: Schedules a coroutine as a background task.
    """

    def __init__(
        self,
        registry: PeerRegistry,
        sender: SyncSender,
        get_history: Callable[[], list[CaptureItem]],
        is_self: Callable[[PeerAddress], bool],
        spawn: Callable,
    ) -> None:
        self.registry = registry
        self.sender = sender
        self.get_history = get_history
        self.is_self = is_self
        self.spawn = spawn

    def datagram_received(self, data: bytes, addr: tuple[str, int]) -> None:
        self.handle_announcement(data, addr[0])

    def handle_announcement(self, data: bytes, source_host: str) -> PeerAddress | None:
        """Process one announcement.

        Args:
            data: Raw datagram payload.
            source_host: IP address the datagram came from.

        Returns:
            The peer if it was newly registered, None otherwise.
        """
        port = parse_announcement(data)
        if port is None:
            logger.debug("Ignoring non-announcement datagram from %s", source_host)
            return None

        peer = PeerAddress(source_host, port)
        if self.is_self(peer):
            return None

        if not self.registry.add_if_new(peer):
            logger.debug("Peer %s already known", peer)
            return None

        logger.info("Discovered peer %s, %d peers known", peer, len(self.registry))
        self.spawn(self.sender.push_to_one(peer, self.get_history()))
        return peer

    def error_received(self, exc: Exception) -> None:
        logger.warning("Discovery socket error: %s", exc)
