#!/usr/bin/env python3
"""History push to peers.

The sender encodes a history snapshot once and unicasts it to every known
peer through transient UDP sockets. Sends run concurrently in worker
threads so that a slow or unreachable peer delays nobody; each failure is
logged and does not affect the other peers.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from lanclip.codec import encode_history, validate_payload_size
from lanclip.sync_socket import send_datagram

if TYPE_CHECKING:
    from lanclip.capture_item import CaptureItem
    from lanclip.peers import PeerAddress, PeerRegistry

logger = logging.getLogger(__name__)


def encode_for_datagram(history: list[CaptureItem]) -> bytes | None:
    """Encode history, or return None if it does not fit in one datagram."""
    payload = encode_history(history)
    if not validate_payload_size(payload):
        logger.warning(
            "History of %d items encodes to %d bytes, too large for one datagram, not sending",
            len(history),
            len(payload),
        )
        return None
    return payload


class SyncSender:
    """Pushes history snapshots to the peers of a registry."""

    def __init__(self, registry: PeerRegistry) -> None:
        self.registry = registry

    async def push_to_all(
        self, history: list[CaptureItem], exclude_host: str | None = None
    ) -> int:
        """Send history to every known peer.

        Args:
            history: The snapshot to send.
            exclude_host: Skip peers on this host, used to avoid echoing a
                snapshot straight back to the peer it came from.

        Returns:
            Number of peers the snapshot was sent to successfully.
        """
        peers = [peer for peer in self.registry.snapshot() if peer.host != exclude_host]
        if not peers:
            logger.debug("No peers known, skipping history push")
            return 0

        payload = encode_for_datagram(history)
        if payload is None:
            return 0

        results = await asyncio.gather(*(self._send(payload, peer) for peer in peers))
        sent = sum(results)
        logger.debug("Pushed %d history items to %d of %d peers", len(history), sent, len(peers))
        return sent

    async def push_to_one(self, peer: PeerAddress, history: list[CaptureItem]) -> bool:
        """Send history to a single peer.

        Returns:
            True if the datagram was sent.
        """
        payload = encode_for_datagram(history)
        if payload is None:
            return False
        return await self._send(payload, peer)

    async def _send(self, payload: bytes, peer: PeerAddress) -> bool:
        try:
            await asyncio.to_thread(send_datagram, payload, peer.host, peer.port)
        except OSError as e:
            logger.warning("Failed to send history to %s: %s", peer, e)
            return False
        logger.debug("Sent %d bytes to %s", len(payload), peer)
        return True
