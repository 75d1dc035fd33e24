#!/usr/bin/env python3
"""Periodic discovery broadcasts.

Every BROADCAST_INTERVAL seconds this instance announces its sync port to
the local network, once per IPv4 address of every active non-loopback
interface. Sends are fire-and-forget; a failing address is logged and the
remaining ones are still tried.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Callable

from lanclip.constants import BROADCAST_ADDRESS, BROADCAST_INTERVAL, DISCOVERY_PORT
from lanclip.discovery_message import encode_announcement
from lanclip.interfaces import list_broadcast_sources
from lanclip.sync_socket import send_broadcast

logger = logging.getLogger(__name__)

SourceLister = Callable[[], list[tuple[str, str]]]


def broadcast_once(
    sync_port: int,
    port: int = DISCOVERY_PORT,
    destination: str = BROADCAST_ADDRESS,
    sources: SourceLister = list_broadcast_sources,
) -> int:
    """Send one round of discovery announcements.

    Blocking; run it in a worker thread from the event loop.

    Args:
        sync_port: This instance's sync port, carried in the payload.
        port: Discovery port the announcements are sent to.
        destination: Broadcast address the announcements are sent to.
        sources: Returns the (interface, IPv4 address) pairs to send from.

    Returns:
        Number of announcements sent successfully.
    """
    payload = encode_announcement(sync_port)
    try:
        pairs = sources()
    except OSError as e:
        logger.warning("Cannot list network interfaces: %s", e)
        return 0

    sent = 0
    for iface, address in pairs:
        try:
            send_broadcast(payload, address, destination, port)
        except OSError as e:
            logger.warning("Discovery broadcast on %s (%s) failed: %s", iface, address, e)
            continue
        sent += 1
        logger.debug("Sent discovery broadcast on %s (%s)", iface, address)
    return sent


async def run_broadcaster(
    sync_port: int,
    port: int = DISCOVERY_PORT,
    destination: str = BROADCAST_ADDRESS,
    interval: float = BROADCAST_INTERVAL,
    sources: SourceLister = list_broadcast_sources,
) -> None:
    """Announce this instance every interval seconds until cancelled.

    The first round goes out one interval after start.

    Args:
        sync_port: This instance's sync port.
        port: Discovery port the announcements are sent to.
        destination: Broadcast address the announcements are sent to.
        interval: Seconds between rounds.
        sources: Returns the (interface, IPv4 address) pairs to send from.
    """
    while True:
        await asyncio.sleep(interval)
        await asyncio.to_thread(broadcast_once, sync_port, port, destination, sources)
