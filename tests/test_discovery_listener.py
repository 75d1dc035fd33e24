#!/usr/bin/env python3
"""
Unit tests for DiscoveryListener announcement handling.
"""
from unittest.mock import MagicMock

import pytest

from conftest import make_item
from lanclip.discovery_listener import DiscoveryListener
from lanclip.peers import PeerAddress, PeerRegistry


@pytest.fixture
def listener() -> DiscoveryListener:
    """Create a listener with a real registry and mocked collaborators."""
    sender = MagicMock()
    sender.push_to_one.return_value = "push-coro"
    return DiscoveryListener(
        PeerRegistry(),
        sender,
        get_history=lambda: [make_item("a")],
        is_self=lambda peer: peer == PeerAddress("192.168.1.10", 9999),
        spawn=MagicMock(),
    )


def test_new_peer_is_registered_and_bootstrapped(listener: DiscoveryListener) -> None:
    """Test a first announcement registers the peer and pushes history to it."""
    peer = listener.handle_announcement(b"SMART_CLIPBOARD_DISCOVER:9999", "192.168.1.20")

    assert peer == PeerAddress("192.168.1.20", 9999)
    assert peer in listener.registry
    listener.sender.push_to_one.assert_called_once_with(peer, [make_item("a")])
    listener.spawn.assert_called_once_with("push-coro")


def test_known_peer_is_not_bootstrapped_again(listener: DiscoveryListener) -> None:
    """Test a repeated announcement changes nothing."""
    listener.handle_announcement(b"SMART_CLIPBOARD_DISCOVER:9999", "192.168.1.20")
    assert listener.handle_announcement(b"SMART_CLIPBOARD_DISCOVER:9999", "192.168.1.20") is None

    assert len(listener.registry) == 1
    assert listener.spawn.call_count == 1


def test_announcement_port_is_used(listener: DiscoveryListener) -> None:
    """Test the peer's sync port comes from the payload, not the source port."""
    listener.datagram_received(b"SMART_CLIPBOARD_DISCOVER:12000", ("192.168.1.20", 40123))
    assert listener.registry.snapshot() == [PeerAddress("192.168.1.20", 12000)]


@pytest.mark.parametrize(
    "payload",
    [b"HELLO:9999", b"SMART_CLIPBOARD_DISCOVER:notaport", b"SMART_CLIPBOARD_DISCOVER:0"],
)
def test_invalid_announcement_is_ignored(listener: DiscoveryListener, payload: bytes) -> None:
    """Test malformed announcements register nothing."""
    assert listener.handle_announcement(payload, "192.168.1.20") is None
    assert len(listener.registry) == 0
    listener.spawn.assert_not_called()


def test_own_announcement_is_ignored(listener: DiscoveryListener) -> None:
    """Test our own broadcast does not register us as a peer."""
    assert listener.handle_announcement(b"SMART_CLIPBOARD_DISCOVER:9999", "192.168.1.10") is None
    assert len(listener.registry) == 0


def test_same_host_other_port_is_a_peer(listener: DiscoveryListener) -> None:
    """Test another instance on our host with a different port is accepted."""
    peer = listener.handle_announcement(b"SMART_CLIPBOARD_DISCOVER:10000", "192.168.1.10")
    assert peer == PeerAddress("192.168.1.10", 10000)
