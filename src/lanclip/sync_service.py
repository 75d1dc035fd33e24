#!/usr/bin/env python3
"""LAN sync subsystem.

SyncService owns everything needed to replicate the history to other
instances: the peer registry, the sender, the sync and discovery listeners
and the broadcaster task. Both listening ports are bound at start; if
either cannot be bound the service raises SyncStartupError and the
application carries on without sync.

Background tasks (per-datagram handling, pushes) are fire-and-forget. They
are kept in a set until done and their failures are logged.

Usage:
    service = SyncService(store.get_history, on_history)
    await service.start()
    service.schedule_push(store.get_history())
    ...
    await service.stop()
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Callable, Coroutine

from lanclip.constants import (
    BROADCAST_ADDRESS,
    BROADCAST_INTERVAL,
    DISCOVERY_PORT,
    SYNC_PORT,
)
from lanclip.discovery_broadcaster import SourceLister, run_broadcaster
from lanclip.discovery_listener import DiscoveryListener
from lanclip.interfaces import list_broadcast_sources, local_ipv4_addresses
from lanclip.peers import PeerAddress, PeerRegistry
from lanclip.sync_receiver import HistoryCallback, SyncReceiver
from lanclip.sync_sender import SyncSender
from lanclip.sync_socket import SyncStartupError, bind_udp_socket

if TYPE_CHECKING:
    from lanclip.capture_item import CaptureItem

logger = logging.getLogger(__name__)


class SyncService:
    """Discovery and history sync over UDP.

    Args:
        get_history: Returns the current local history snapshot.
        on_history: Called with (items, source_host) for each valid inbound
            snapshot.
        sync_port: Port receiving snapshots, announced to peers.
        discovery_port: Port receiving announcements.
        announce_port: Port announcements are sent to, defaults to
            discovery_port.
        bind_host: Local address both listeners bind to, "" for all.
        broadcast_address: Destination of announcements.
        broadcast_interval: Seconds between announcement rounds.
        sources: Returns the (interface, IPv4 address) pairs to announce from.
        local_addresses: Returns this machine's IPv4 addresses.
    """

    def __init__(
        self,
        get_history: Callable[[], list[CaptureItem]],
        on_history: HistoryCallback,
        sync_port: int = SYNC_PORT,
        discovery_port: int = DISCOVERY_PORT,
        announce_port: int | None = None,
        bind_host: str = "",
        broadcast_address: str = BROADCAST_ADDRESS,
        broadcast_interval: float = BROADCAST_INTERVAL,
        sources: SourceLister = list_broadcast_sources,
        local_addresses: Callable[[], set[str]] = local_ipv4_addresses,
    ) -> None:
        self.get_history = get_history
        self.on_history = on_history
        self.sync_port = sync_port
        self.discovery_port = discovery_port
        self.announce_port = announce_port if announce_port is not None else discovery_port
        self.bind_host = bind_host
        self.broadcast_address = broadcast_address
        self.broadcast_interval = broadcast_interval
        self.sources = sources
        self.local_addresses = local_addresses

        self.registry = PeerRegistry()
        self.sender = SyncSender(self.registry)

        self._loop: asyncio.AbstractEventLoop | None = None
        self._transports: list[asyncio.DatagramTransport] = []
        self._broadcaster: asyncio.Task | None = None
        self._tasks: set[asyncio.Task] = set()

    @property
    def running(self) -> bool:
        return self._loop is not None

    async def start(self) -> None:
        """Bind both listeners and start broadcasting.

        Raises:
            SyncStartupError: If the sync or discovery port cannot be bound.
        """
        if self.running:
            return

        try:
            sync_sock = bind_udp_socket(self.bind_host, self.sync_port)
        except OSError as e:
            raise SyncStartupError(f"Cannot bind sync port {self.sync_port}: {e}") from e
        try:
            discovery_sock = bind_udp_socket(self.bind_host, self.discovery_port, broadcast=True)
        except OSError as e:
            sync_sock.close()
            raise SyncStartupError(
                f"Cannot bind discovery port {self.discovery_port}: {e}"
            ) from e

        loop = asyncio.get_running_loop()
        sync_transport, _ = await loop.create_datagram_endpoint(
            lambda: SyncReceiver(self.on_history, self.spawn), sock=sync_sock
        )
        discovery_transport, _ = await loop.create_datagram_endpoint(
            lambda: DiscoveryListener(
                self.registry, self.sender, self.get_history, self.is_self, self.spawn
            ),
            sock=discovery_sock,
        )
        self._transports = [sync_transport, discovery_transport]
        self._broadcaster = asyncio.create_task(
            run_broadcaster(
                self.sync_port,
                self.announce_port,
                self.broadcast_address,
                self.broadcast_interval,
                self.sources,
            )
        )
        self._loop = loop
        logger.info(
            "Sync listening on UDP %d, discovery on UDP %d", self.sync_port, self.discovery_port
        )

    async def stop(self) -> None:
        """Close the listeners and cancel background work."""
        if not self.running:
            return
        self._loop = None

        for transport in self._transports:
            transport.close()
        self._transports = []

        pending = list(self._tasks)
        if self._broadcaster is not None:
            pending.append(self._broadcaster)
            self._broadcaster = None
        for task in pending:
            task.cancel()
        await asyncio.gather(*pending, return_exceptions=True)
        logger.debug("Sync stopped")

    def is_self(self, peer: PeerAddress) -> bool:
        """Return True if peer is this instance's own sync endpoint."""
        if peer.port != self.sync_port:
            return False
        try:
            return peer.host in self.local_addresses()
        except OSError as e:
            logger.debug("Cannot list local addresses: %s", e)
            return False

    def spawn(self, coro: Coroutine) -> asyncio.Task:
        """Run coro as a background task on the running loop."""
        task = asyncio.get_running_loop().create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._task_done)
        return task

    def _task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.error("Background sync task failed: %r", task.exception())

    def schedule_push(self, history: list[CaptureItem], exclude_host: str | None = None) -> None:
        """Push history to all peers without waiting for the sends.

        Safe to call from any thread. No-op when the service is not running.

        Args:
            history: The snapshot to send.
            exclude_host: Skip peers on this host.
        """
        loop = self._loop
        if loop is None:
            return
        loop.call_soon_threadsafe(
            lambda: self.spawn(self.sender.push_to_all(history, exclude_host))
        )
