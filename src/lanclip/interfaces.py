#!/usr/bin/env python3
"""Local network interface enumeration.

Uses psutil to list the interfaces and their IPv4 addresses. Discovery
broadcasts go out once per IPv4 address of every interface that is up and
not a loopback interface.
"""

from __future__ import annotations

import ipaddress
import logging
import socket

import psutil

logger = logging.getLogger(__name__)


def _is_loopback(address: str) -> bool:
    return ipaddress.ip_address(address).is_loopback


def list_broadcast_sources() -> list[tuple[str, str]]:
    """List (interface name, IPv4 address) pairs to broadcast from.

    Interfaces that are down or flagged as loopback are skipped, as are
    loopback addresses on any interface.

    Returns:
        The pairs, in psutil's interface order.
    """
    stats = psutil.net_if_stats()
    sources = []
    for name, addresses in psutil.net_if_addrs().items():
        iface = stats.get(name)
        if iface is None or not iface.isup:
            continue
        if "loopback" in getattr(iface, "flags", "").split(","):
            continue
        for address in addresses:
            if address.family != socket.AF_INET or _is_loopback(address.address):
                continue
            sources.append((name, address.address))
    logger.debug("Broadcast sources: %s", sources)
    return sources


def local_ipv4_addresses() -> set[str]:
    """Return every IPv4 address bound on this machine, loopback included.

    Used to recognize this instance's own discovery announcements.
    """
    return {
        address.address
        for addresses in psutil.net_if_addrs().values()
        for address in addresses
        if address.family == socket.AF_INET
    }
