#!/usr/bin/env python3
"""Ranked, size-bounded clipboard history.

The history holds at most one item per distinct content and is kept in a
total order: items selected more often come first, ties are broken by the
most recent capture. The order is recomputed by a full sort after every
mutation.

When the history exceeds its capacity the lowest-ranked items are dropped,
so the least-clicked, oldest entries go first.

Mutations are serialized by one lock. Observers registered through
on_change are called after the lock is released, and only when the
observable history actually changed. Re-applying a snapshot the store
already holds produces no notification.
"""

from __future__ import annotations

import logging
import threading
from typing import Callable, Iterable, Optional

from lanclip.capture_item import CaptureItem, utc_now
from lanclip.config import validate_max_size

logger = logging.getLogger(__name__)

# Called with (snapshot, origin). origin is the host a remote snapshot came
# from, or None for local mutations.
ChangeListener = Callable[[list[CaptureItem], Optional[str]], None]


def rank_key(item: CaptureItem) -> tuple:
    """Sort key of the ranking rule (sorted in descending order)."""
    return (item.click_count, item.captured_at)


def rank(items: Iterable[CaptureItem]) -> list[CaptureItem]:
    """Return items in ranking order.

    The sort is stable, so items with equal keys keep their relative order
    and ranking an already ranked list leaves it unchanged.
    """
    return sorted(items, key=rank_key, reverse=True)


class HistoryStore:
    """The canonical local clipboard history.

    Args:
        max_size: Capacity, a positive integer.
        items: Initial items (e.g. loaded from disk). Ranked and truncated
            without notifying.
        on_change: Optional observer, see ChangeListener.

    Raises:
        ConfigurationError: If max_size is not a positive integer.
    """

    def __init__(
        self,
        max_size: int,
        items: Iterable[CaptureItem] = (),
        on_change: ChangeListener | None = None,
    ) -> None:
        self._max_size = validate_max_size(max_size)
        self._lock = threading.Lock()
        self._items = rank(items)[: self._max_size]
        self._on_change = on_change

    @property
    def max_size(self) -> int:
        return self._max_size

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)

    def get_history(self) -> list[CaptureItem]:
        """Return a snapshot of the ranked history.

        The returned list is a copy; mutating it does not affect the store.
        """
        with self._lock:
            return list(self._items)

    def capture(self, content: str) -> None:
        """Record a clipboard capture.

        An existing item with identical content is replaced by a fresh one
        that keeps its click count. Empty content is ignored.

        Args:
            content: The captured text.
        """
        if not content:
            return

        def mutate(items: list[CaptureItem]) -> list[CaptureItem]:
            click_count = 0
            kept = []
            for item in items:
                if item.content == content:
                    click_count = item.click_count
                else:
                    kept.append(item)
            kept.insert(0, CaptureItem(content, utc_now(), click_count))
            return kept

        self._mutate(mutate)

    def record_selection(self, content: str) -> None:
        """Increment the click count of the item holding content.

        No-op if no such item exists.

        Args:
            content: Content of the selected item.
        """
        def mutate(items: list[CaptureItem]) -> list[CaptureItem]:
            return [item.clicked() if item.content == content else item for item in items]

        self._mutate(mutate)

    def replace_all(self, items: Iterable[CaptureItem], origin: str | None = None) -> None:
        """Replace the whole history, e.g. with a snapshot from a peer.

        The caller guarantees that items holds no duplicate content; the
        wire codec and the persistence loader reject such input.

        Args:
            items: The new items, in any order.
            origin: Host the snapshot came from, passed on to the observer.
        """
        new_items = list(items)
        self._mutate(lambda _: new_items, origin)

    def clear(self) -> None:
        """Remove every item."""
        self._mutate(lambda _: [])

    def set_max_size(self, max_size: int) -> None:
        """Change the capacity and truncate immediately if needed.

        Args:
            max_size: New capacity, a positive integer.

        Raises:
            ConfigurationError: If max_size is not a positive integer.
        """
        validate_max_size(max_size)
        with self._lock:
            self._max_size = max_size
        self._mutate(lambda items: items)

    def _mutate(
        self,
        change: Callable[[list[CaptureItem]], list[CaptureItem]],
        origin: str | None = None,
    ) -> None:
        """Apply change under the lock, re-rank, truncate, then notify."""
        with self._lock:
            before = self._items
            after = rank(change(list(before)))[: self._max_size]
            self._items = after
            changed = after != before
            snapshot = list(after)

        if changed and self._on_change is not None:
            logger.debug("History changed, %d items", len(snapshot))
            self._on_change(snapshot, origin)
