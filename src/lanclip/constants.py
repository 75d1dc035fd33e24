#!/usr/bin/env python3
"""Protocol and runtime constants for lanclip.

Ports and magic strings are shared by every instance on the network and
must not differ between peers. Timing values control discovery, clipboard
polling and socket bind retries.
"""

# UDP port on which each instance receives history snapshots.
SYNC_PORT: int = 9999

# UDP port on which each instance listens for discovery announcements.
DISCOVERY_PORT: int = 9998

# Prefix of every discovery announcement: "<DISCOVERY_MAGIC>:<sync port>".
DISCOVERY_MAGIC: str = "SMART_CLIPBOARD_DISCOVER"

# IPv4 limited-broadcast address announcements are sent to.
BROADCAST_ADDRESS: str = "255.255.255.255"

# Seconds between two discovery broadcast rounds.
BROADCAST_INTERVAL: float = 5.0

# Largest payload a single UDP/IPv4 datagram can carry.
# History snapshots above this size are not sent (no chunking).
MAX_DATAGRAM_SIZE: int = 65507

# Receive buffer for discovery announcements; they are a few dozen bytes.
MAX_ANNOUNCEMENT_SIZE: int = 1024

# Number of content characters kept in an item preview.
PREVIEW_LENGTH: int = 100

# Marker appended to a preview whose content was truncated.
PREVIEW_SUFFIX: str = "..."

# Default capacity of the history.
DEFAULT_MAX_HISTORY_SIZE: int = 100

# Default clipboard polling interval in milliseconds.
DEFAULT_CHECK_INTERVAL_MS: int = 1000

# Timeout in seconds for a clipboard read round trip with the X server.
CLIPBOARD_TIMEOUT: float = 2.0

# Retry parameters for binding the sync and discovery sockets.
# A restarted instance may briefly find its port still in use.
BIND_ATTEMPTS: int = 4
BIND_INITIAL_WAIT: float = 0.5
BIND_MAX_WAIT: float = 4.0
BIND_WAIT_MULTIPLIER: float = 2.0
