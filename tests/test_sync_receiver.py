#!/usr/bin/env python3
"""
Unit tests for inbound sync datagram handling.
"""
from unittest.mock import MagicMock

import pytest

from conftest import DEEPLY_NESTED, HUGE_CLICK_COUNT, make_item
from lanclip.codec import encode_history
from lanclip.sync_receiver import SyncReceiver, handle_payload


@pytest.mark.asyncio
async def test_valid_payload_is_delivered() -> None:
    """Test a valid snapshot reaches the callback with the source host."""
    history = [make_item("b", 1, clicks=2), make_item("a")]
    on_history = MagicMock()

    assert await handle_payload(encode_history(history), "10.0.0.5", on_history) is True
    on_history.assert_called_once_with(history, "10.0.0.5")


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "payload",
    [
        b"not json",
        b"{}",
        b"\xff\xfe",
        b"[]",
        pytest.param(DEEPLY_NESTED, id="deeply-nested"),
        pytest.param(HUGE_CLICK_COUNT, id="huge-integer"),
    ],
)
async def test_malformed_payload_is_dropped(
    payload: bytes, caplog: pytest.LogCaptureFixture
) -> None:
    """Test malformed datagrams are logged and never delivered."""
    on_history = MagicMock()

    assert await handle_payload(payload, "10.0.0.5", on_history) is False
    on_history.assert_not_called()
    assert "Dropping sync datagram from 10.0.0.5" in caplog.text


@pytest.mark.asyncio
async def test_empty_history_is_delivered() -> None:
    """Test an empty snapshot is a valid snapshot."""
    on_history = MagicMock()
    assert await handle_payload(encode_history([]), "10.0.0.5", on_history) is True
    on_history.assert_called_once_with([], "10.0.0.5")


def test_receiver_spawns_one_task_per_datagram() -> None:
    """Test each datagram is handed to spawn."""
    spawn = MagicMock(side_effect=lambda coro: coro.close())
    receiver = SyncReceiver(MagicMock(), spawn)

    receiver.datagram_received(b"x", ("10.0.0.5", 5000))
    receiver.datagram_received(b"y", ("10.0.0.6", 5000))

    assert spawn.call_count == 2
