#!/usr/bin/env python3
"""Discovery announcement format.

An announcement is the ASCII string "<DISCOVERY_MAGIC>:<sync port>". It
tells receivers that an instance is present at the datagram's source
address and accepts history snapshots on the given port.
"""

from __future__ import annotations

from lanclip.constants import DISCOVERY_MAGIC

SEPARATOR = ":"


def encode_announcement(sync_port: int) -> bytes:
    """Build the announcement payload for an instance's sync port."""
    return f"{DISCOVERY_MAGIC}{SEPARATOR}{sync_port}".encode("ascii")


def parse_announcement(data: bytes) -> int | None:
    """Extract the sync port from an announcement.

    Args:
        data: Raw datagram payload.

    Returns:
        The announced sync port, or None if the payload is not an
        announcement or its port is not a valid port number.
    """
    try:
        message = data.decode("ascii")
    except UnicodeDecodeError:
        return None

    if not message.startswith(DISCOVERY_MAGIC):
        return None

    parts = message.split(SEPARATOR)
    if len(parts) != 2 or parts[0] != DISCOVERY_MAGIC:
        return None

    port_text = parts[1].strip()
    if not port_text.isdigit():
        return None
    port = int(port_text)
    if not 0 < port < 65536:
        return None
    return port
