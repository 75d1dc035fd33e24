#!/usr/bin/env python3
"""UDP socket utilities for lanclip.

This module provides the socket helpers used by the sync subsystem:
- Binding the listening sockets for sync and discovery, retried with
  tenacity since a restarted instance may find its port briefly in use
- Sending a single datagram through a transient socket
- Sending a broadcast datagram from a specific local address
"""

from __future__ import annotations

import logging
import socket

from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from lanclip.constants import BIND_ATTEMPTS, BIND_INITIAL_WAIT, BIND_MAX_WAIT, BIND_WAIT_MULTIPLIER

logger = logging.getLogger(__name__)


class SyncStartupError(Exception):
    """Raised when the sync subsystem cannot bind its sockets.

    The application keeps running with sync disabled when this happens.
    """

    pass


@retry(
    wait=wait_exponential(
        multiplier=BIND_WAIT_MULTIPLIER,
        min=BIND_INITIAL_WAIT,
        max=BIND_MAX_WAIT,
    ),
    retry=retry_if_exception_type(OSError),
    stop=stop_after_attempt(BIND_ATTEMPTS),
    reraise=True,
)
def bind_udp_socket(host: str, port: int, broadcast: bool = False) -> socket.socket:
    """Create a non-blocking UDP socket bound to (host, port).

    Args:
        host: Local address to bind, "" for all interfaces.
        port: Local port to bind.
        broadcast: If True, allow address reuse and broadcast reception,
            as needed by the discovery listener.

    Returns:
        The bound socket, ready for loop.create_datagram_endpoint(sock=...).

    Raises:
        OSError: If binding still fails after BIND_ATTEMPTS attempts.
    """
    sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    try:
        if broadcast:
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_BROADCAST, 1)
        sock.bind((host, port))
    except OSError as e:
        sock.close()
        logger.warning("Cannot bind UDP %s:%d: %s", host or "*", port, e)
        raise
    sock.setblocking(False)
    return sock


def send_datagram(payload: bytes, host: str, port: int) -> None:
    """Send one datagram through a transient socket.

    Blocking; callers on the event loop run it in a worker thread.

    Args:
        payload: The datagram payload.
        host: Destination IP address.
        port: Destination UDP port.

    Raises:
        OSError: If the socket cannot be created or the send fails.
    """
    with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as sock:
        sock.sendto(payload, (host, port))


def send_broadcast(payload: bytes, source: str, destination: str, port: int) -> None:
    """Send one broadcast datagram out of a specific local address.

    The transient socket is bound to source, so the datagram carries that
    source address. The outgoing interface is still chosen by the routing
    table; binding does not pin the datagram to the owning interface.

    Args:
        payload: The datagram payload.
        source: Local IPv4 address to send from.
        destination: Broadcast address to send to.
        port: Destination UDP port.

    Raises:
        OSError: If the socket cannot be bound or the send fails.
    """
    with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as sock:
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_BROADCAST, 1)
        sock.bind((source, 0))
        sock.sendto(payload, (destination, port))
