#!/usr/bin/env python3
"""Pytest fixtures for lanclip tests.

Provides item construction helpers, temporary history files and
configurations, and free loopback UDP ports.
"""

import socket
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from lanclip.capture_item import CaptureItem
from lanclip.config import Config
from lanclip.persistence import HistoryFile

BASE_TIME = datetime(2024, 5, 1, 12, 0, 0, 123456, tzinfo=timezone.utc)

# JSON nested deeper than the decoder's recursion limit.
DEEPLY_NESTED = b"[" * 100000 + b"]" * 100000

# Envelope whose click_count exceeds the int digit limit of the JSON decoder.
HUGE_CLICK_COUNT = (
    b'{"format":"lanclip","version":1,"kind":"history","history":'
    b'[{"content":"a","timestamp":"2024-05-01T12:00:00+00:00","click_count":'
    + b"9" * 5000
    + b"}]}"
)


def make_item(content: str, seconds: float = 0, clicks: int = 0) -> CaptureItem:
    """Create an item captured `seconds` after BASE_TIME."""
    return CaptureItem(content, BASE_TIME + timedelta(seconds=seconds), clicks)


def free_udp_port() -> int:
    """Return a UDP port on 127.0.0.1 that is free right now."""
    with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]


@pytest.fixture
def history_path(tmp_path: Path) -> Path:
    """Provide a temporary path for the history file."""
    return tmp_path / "lanclip" / "history.json"


@pytest.fixture
def history_file(history_path: Path) -> HistoryFile:
    """Create a HistoryFile in a temporary directory."""
    return HistoryFile(str(history_path))


@pytest.fixture
def config(history_path: Path) -> Config:
    """Create a Config with sync disabled and temporary storage."""
    return Config(
        max_history_size=5,
        check_interval_ms=10,
        storage_path=str(history_path),
        sync_enabled=False,
    )
