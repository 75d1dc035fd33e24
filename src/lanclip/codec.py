#!/usr/bin/env python3
"""
Wire codec for history snapshots.

Every sync datagram carries one JSON envelope, UTF-8 encoded:

    {"format": "lanclip", "version": 1, "kind": "history",
     "history": [{"content": "...", "preview": "...",
                  "timestamp": "2024-05-01T12:00:00.123456+00:00",
                  "click_count": 0}, ...]}

The format tag and version make the envelope self-identifying; payloads
that do not carry them are rejected rather than guessed at. Timestamps are
ISO 8601 with microseconds so they round-trip exactly. The preview field is
written for readability but recomputed from content on decode.

The item record functions are shared with the on-disk history file.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Iterable

from lanclip.capture_item import CaptureItem
from lanclip.constants import MAX_DATAGRAM_SIZE

FORMAT_TAG: str = "lanclip"
FORMAT_VERSION: int = 1

# The only message kind: a full history snapshot.
KIND_HISTORY: str = "history"


class DecodeError(Exception):
    """
    Raised when a payload is not a valid sync envelope.

    Covers invalid UTF-8 or JSON, truncated data, foreign or unsupported
    envelopes, unknown message kinds and malformed items. No partial
    history is ever returned alongside this error.
    """

    pass


@dataclass(frozen=True)
class SyncMessage:
    """A decoded sync envelope."""

    kind: str
    history: list[CaptureItem]


def item_to_record(item: CaptureItem) -> dict[str, Any]:
    """Convert an item to its JSON-compatible record."""
    return {
        "content": item.content,
        "preview": item.preview,
        "timestamp": item.captured_at.isoformat(),
        "click_count": item.click_count,
    }


def item_from_record(record: Any) -> CaptureItem:
    """
    Build an item from a JSON record.

    Args:
        record: A decoded JSON value expected to be an item object.

    Returns:
        The CaptureItem, with its preview recomputed.

    Raises:
        DecodeError: If the record is not an object or has missing or
            mistyped fields.
    """
    if not isinstance(record, dict):
        raise DecodeError(f"History item must be an object, got {type(record).__name__}")

    content = record.get("content")
    if not isinstance(content, str):
        raise DecodeError("History item content must be a string")

    click_count = record.get("click_count", 0)
    if isinstance(click_count, bool) or not isinstance(click_count, int) or click_count < 0:
        raise DecodeError(f"Invalid click_count: {click_count!r}")

    timestamp = record.get("timestamp")
    if not isinstance(timestamp, str):
        raise DecodeError("History item timestamp must be a string")
    try:
        captured_at = datetime.fromisoformat(timestamp)
    except ValueError as e:
        raise DecodeError(f"Invalid timestamp {timestamp!r}") from e

    return CaptureItem(content, captured_at, click_count)


def items_from_records(records: Any) -> list[CaptureItem]:
    """
    Build a list of items from a JSON array of records.

    Raises:
        DecodeError: If records is not an array, an item is malformed, or
            two items share the same content.
    """
    if not isinstance(records, list):
        raise DecodeError("History must be an array")

    items = [item_from_record(record) for record in records]
    seen: set[str] = set()
    for item in items:
        if item.content in seen:
            raise DecodeError(f"Duplicate content in history: {item.preview!r}")
        seen.add(item.content)
    return items


def encode_history(history: Iterable[CaptureItem]) -> bytes:
    """
    Encode a history snapshot as a sync envelope.

    Args:
        history: The items to send, in ranking order.

    Returns:
        UTF-8 encoded JSON envelope bytes.
    """
    envelope = {
        "format": FORMAT_TAG,
        "version": FORMAT_VERSION,
        "kind": KIND_HISTORY,
        "history": [item_to_record(item) for item in history],
    }
    return json.dumps(envelope, ensure_ascii=False, separators=(",", ":")).encode("utf-8")


def decode_message(data: bytes) -> SyncMessage:
    """
    Decode a sync envelope.

    Args:
        data: Raw datagram payload.

    Returns:
        The decoded SyncMessage.

    Raises:
        DecodeError: On any malformed, foreign, truncated or unsupported
            payload.
    """
    try:
        envelope = json.loads(data.decode("utf-8"))
    except UnicodeDecodeError as e:
        raise DecodeError(f"Payload is not valid UTF-8: {e}") from e
    except (ValueError, RecursionError) as e:
        # Includes oversized integer literals and over-deep nesting.
        raise DecodeError(f"Payload is not valid JSON: {e}") from e

    if not isinstance(envelope, dict):
        raise DecodeError("Envelope must be a JSON object")
    if envelope.get("format") != FORMAT_TAG:
        raise DecodeError(f"Unrecognized envelope format: {envelope.get('format')!r}")
    version = envelope.get("version")
    if isinstance(version, bool) or version != FORMAT_VERSION:
        raise DecodeError(f"Unsupported envelope version: {version!r}")

    kind = envelope.get("kind")
    if kind != KIND_HISTORY:
        raise DecodeError(f"Unknown message kind: {kind!r}")
    if "history" not in envelope:
        raise DecodeError("Envelope has no history")

    return SyncMessage(kind=kind, history=items_from_records(envelope["history"]))


def validate_payload_size(data: bytes) -> bool:
    """
    Check whether a payload fits in a single UDP datagram.

    Args:
        data: Encoded envelope bytes.

    Returns:
        True if len(data) <= MAX_DATAGRAM_SIZE, False otherwise.
    """
    return len(data) <= MAX_DATAGRAM_SIZE
