#!/usr/bin/env python3
"""On-disk clipboard history.

The history is stored as a pretty-printed JSON array of item records, the
same records the wire codec uses. Saves write a temporary file next to the
target and rename it over the target, so a crash never leaves a half
written history behind.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from contextlib import suppress
from typing import TYPE_CHECKING

from lanclip.codec import DecodeError, item_to_record, items_from_records

if TYPE_CHECKING:
    from lanclip.capture_item import CaptureItem

logger = logging.getLogger(__name__)


class PersistenceError(Exception):
    """Raised when the history file exists but cannot be read or parsed."""

    pass


class HistoryFile:
    """JSON file holding the persisted history.

    Args:
        path: Location of the file. Parent directories are created on save.
    """

    def __init__(self, path: str) -> None:
        self.path = path

    def load(self) -> list[CaptureItem]:
        """Read the persisted history.

        Returns:
            The stored items, or an empty list if the file does not exist.

        Raises:
            PersistenceError: If the file cannot be read or is malformed.
        """
        if not os.path.exists(self.path):
            return []
        try:
            with open(self.path, encoding="utf-8") as f:
                records = json.load(f)
            return items_from_records(records)
        except (OSError, ValueError, RecursionError, DecodeError) as e:
            raise PersistenceError(f"Cannot load history from {self.path}: {e}") from e

    def save(self, history: list[CaptureItem]) -> None:
        """Write the history, replacing the previous file atomically.

        Raises:
            OSError: If the file cannot be written.
        """
        directory = os.path.dirname(os.path.abspath(self.path))
        os.makedirs(directory, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(prefix=".history-", suffix=".json", dir=directory)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump([item_to_record(item) for item in history], f, ensure_ascii=False, indent=2)
            os.replace(tmp_path, self.path)
        except BaseException:
            with suppress(OSError):
                os.unlink(tmp_path)
            raise
        logger.debug("Saved %d history items to %s", len(history), self.path)
