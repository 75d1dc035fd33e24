#!/usr/bin/env python3
"""Clipboard polling.

The monitor reads the clipboard every interval and reports content that
differs from the previous read. Whatever is on the clipboard at startup
is remembered but not reported, so starting the program does not re-capture
the current clipboard.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Callable

if TYPE_CHECKING:
    from lanclip.clipboard import ClipboardBackend

logger = logging.getLogger(__name__)


async def read_clipboard(clipboard: ClipboardBackend) -> str | None:
    """Read the clipboard in a worker thread.

    Returns:
        The clipboard text, or None if it is empty or unreadable.
    """
    try:
        return await asyncio.to_thread(clipboard.read)
    except Exception as e:
        logger.debug("Clipboard read failed: %s", e)
        return None


async def run_clipboard_monitor(
    clipboard: ClipboardBackend,
    on_content: Callable[[str], None],
    interval: float,
    shutdown: asyncio.Event,
) -> None:
    """Poll the clipboard until shutdown is set.

    Args:
        clipboard: The clipboard backend to read.
        on_content: Called with each new non-empty clipboard text.
        interval: Seconds between reads.
        shutdown: Stops the monitor when set.
    """
    last = await read_clipboard(clipboard)
    if last:
        logger.debug("Initial clipboard content: %r", last[:20])

    while not shutdown.is_set():
        try:
            await asyncio.wait_for(shutdown.wait(), timeout=interval)
        except asyncio.TimeoutError:
            pass
        else:
            break

        content = await read_clipboard(clipboard)
        if not content or content == last:
            continue
        last = content
        logger.debug("Clipboard changed: %r", content[:20])
        on_content(content)
