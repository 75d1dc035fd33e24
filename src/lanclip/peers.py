#!/usr/bin/env python3
"""Registry of known peers.

A peer is identified by the IP address it announced from and the sync port
it announced. The registry only grows: peers are never expired.
"""

from __future__ import annotations

import threading
from typing import NamedTuple


class PeerAddress(NamedTuple):
    """A remote instance's sync endpoint."""

    host: str
    port: int

    def __str__(self) -> str:
        return f"{self.host}:{self.port}"


class PeerRegistry:
    """Thread-safe, de-duplicated set of peer addresses.

    Insertion order is kept for readable logs but carries no meaning.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._peers: dict[PeerAddress, None] = {}

    def add_if_new(self, address: PeerAddress) -> bool:
        """Add a peer unless already known.

        Args:
            address: The peer's sync endpoint.

        Returns:
            True if the peer was newly added, False if it was known.
        """
        with self._lock:
            if address in self._peers:
                return False
            self._peers[address] = None
            return True

    def snapshot(self) -> list[PeerAddress]:
        """Return a copy of the known peers for iteration outside the lock."""
        with self._lock:
            return list(self._peers)

    def __contains__(self, address: object) -> bool:
        with self._lock:
            return address in self._peers

    def __len__(self) -> int:
        with self._lock:
            return len(self._peers)
