#!/usr/bin/env python3
"""
Unit tests for clipboard polling.
"""
import asyncio
from unittest.mock import MagicMock

import pytest

from lanclip.monitor import read_clipboard, run_clipboard_monitor


class FakeClipboard:
    """Clipboard returning queued values, then repeating the last one."""

    def __init__(self, *values) -> None:
        self.values = list(values)
        self.last = None

    def read(self):
        if self.values:
            value = self.values.pop(0)
            if isinstance(value, Exception):
                raise value
            self.last = value
        return self.last

    def write(self, text: str) -> None:
        self.last = text


async def run_until_drained(clipboard: FakeClipboard, on_content: MagicMock) -> None:
    shutdown = asyncio.Event()
    task = asyncio.create_task(run_clipboard_monitor(clipboard, on_content, 0.001, shutdown))
    for _ in range(500):
        if not clipboard.values:
            break
        await asyncio.sleep(0.001)
    await asyncio.sleep(0.02)
    shutdown.set()
    await asyncio.wait_for(task, timeout=1.0)


@pytest.mark.asyncio
async def test_initial_content_is_not_captured() -> None:
    """Test the clipboard at startup is remembered, not reported."""
    on_content = MagicMock()
    await run_until_drained(FakeClipboard("startup"), on_content)
    on_content.assert_not_called()


@pytest.mark.asyncio
async def test_changes_are_reported_once() -> None:
    """Test each distinct change is reported and repeats are not."""
    on_content = MagicMock()
    await run_until_drained(FakeClipboard("startup", "a", "a", "b"), on_content)
    assert [call.args[0] for call in on_content.call_args_list] == ["a", "b"]


@pytest.mark.asyncio
async def test_empty_and_failed_reads_are_skipped() -> None:
    """Test empty content and read errors do not reach the callback."""
    on_content = MagicMock()
    await run_until_drained(
        FakeClipboard(None, "", RuntimeError("X11 went away"), "x"), on_content
    )
    on_content.assert_called_once_with("x")


@pytest.mark.asyncio
async def test_read_clipboard_swallows_errors() -> None:
    """Test read failures are reported as None."""
    clipboard = MagicMock()
    clipboard.read.side_effect = RuntimeError("boom")
    assert await read_clipboard(clipboard) is None


@pytest.mark.asyncio
async def test_monitor_stops_on_shutdown() -> None:
    """Test a set shutdown event ends the monitor promptly."""
    shutdown = asyncio.Event()
    shutdown.set()
    await asyncio.wait_for(
        run_clipboard_monitor(FakeClipboard("x"), MagicMock(), 10.0, shutdown), timeout=1.0
    )
