#!/usr/bin/env python3
"""Clipboard capture items.

A CaptureItem is one entry of the clipboard history: the captured text,
when it was last captured, and how often the user picked it from the
history. The preview shown in menus is derived from the content and is
never set on its own.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta, timezone

from lanclip.constants import PREVIEW_LENGTH, PREVIEW_SUFFIX


def make_preview(content: str) -> str:
    """Return the display preview of clipboard content.

    Args:
        content: The full captured text.

    Returns:
        The content itself when it fits in PREVIEW_LENGTH characters,
        otherwise its first PREVIEW_LENGTH characters followed by
        PREVIEW_SUFFIX.
    """
    if len(content) <= PREVIEW_LENGTH:
        return content
    return content[:PREVIEW_LENGTH] + PREVIEW_SUFFIX


def utc_now() -> datetime:
    """Return the current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class CaptureItem:
    """One clipboard history entry.

    Attributes:
        content: The full captured text.
        captured_at: Time of the most recent (re-)capture, always UTC-aware.
            Naive datetimes are interpreted as UTC, aware ones are converted.
        click_count: How many times the entry was selected from the history.
        preview: Derived from content, see make_preview().
    """

    content: str
    captured_at: datetime
    click_count: int = 0
    preview: str = field(init=False)

    def __post_init__(self) -> None:
        if self.click_count < 0:
            raise ValueError(f"click_count must be non-negative, got {self.click_count}")
        if self.captured_at.tzinfo is None:
            object.__setattr__(
                self, "captured_at", self.captured_at.replace(tzinfo=timezone.utc)
            )
        elif self.captured_at.utcoffset() != timedelta(0):
            object.__setattr__(self, "captured_at", self.captured_at.astimezone(timezone.utc))
        object.__setattr__(self, "preview", make_preview(self.content))

    def clicked(self) -> CaptureItem:
        """Return a copy of this item with click_count incremented by one."""
        return replace(self, click_count=self.click_count + 1)
