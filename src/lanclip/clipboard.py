"""X11 clipboard access via python-xlib.

This module provides the clipboard collaborator used by the application:
reading the CLIPBOARD selection as text and setting it. It works with a
hidden window that requests selection conversions and, after a write, owns
the selection and serves its content to other applications.

The module handles:
- Validating X11 display connectivity
- Creating the hidden window used for selection traffic
- Reading CLIPBOARD content as UTF8_STRING with a timeout
- Taking CLIPBOARD ownership and answering SelectionRequest events

Owned content is served whenever the clipboard is read, which the monitor
does every polling interval.
"""

from __future__ import annotations

import os
import sys
import threading
import time
from typing import TYPE_CHECKING, Protocol

from Xlib import X, Xatom

from lanclip.constants import CLIPBOARD_TIMEOUT

if TYPE_CHECKING:
    from Xlib.display import Display
    from Xlib.protocol.event import SelectionRequest
    from Xlib.protocol.rq import Event
    from Xlib.xobject.drawable import Window

# Seconds to sleep between polls for pending X11 events.
EVENT_POLL_INTERVAL: float = 0.01


class ClipboardError(Exception):
    """Raised when clipboard content cannot be set."""

    pass


class ClipboardBackend(Protocol):
    """Clipboard collaborator interface."""

    def read(self) -> str | None: ...

    def write(self, text: str) -> None: ...


def validate_display() -> Display:
    """Validate X11 connectivity and return Display object.

    Returns:
        Display object for X11 operations.

    Raises:
        SystemExit: If DISPLAY is unset or X11 connection fails.
    """
    display_name = os.environ.get("DISPLAY")
    if not display_name:
        print("Error: DISPLAY environment variable is not set.", file=sys.stderr)
        print("X11 display is required for clipboard access.", file=sys.stderr)
        sys.exit(1)

    try:
        from Xlib.display import Display as XDisplay
        return XDisplay(display_name)
    except Exception as e:
        print(f"Error: Failed to connect to X11 display: {e}", file=sys.stderr)
        sys.exit(1)


def create_hidden_window(display: Display) -> Window:
    """Create a 1x1 unmapped window for selection requests and ownership."""
    screen = display.screen()
    return screen.root.create_window(
        0, 0, 1, 1, 0, screen.root_depth, event_mask=X.PropertyChangeMask,
    )


class X11Clipboard:
    """Text access to the X11 CLIPBOARD selection.

    All methods block and are serialized by an internal lock; call them
    through asyncio.to_thread() from the event loop.

    Args:
        display: The X11 display connection.
        window: Hidden window used for selection traffic.
        timeout: Seconds to wait for the selection owner to answer.
    """

    def __init__(self, display: Display, window: Window, timeout: float = CLIPBOARD_TIMEOUT) -> None:
        self.display = display
        self.window = window
        self.timeout = timeout
        self._lock = threading.Lock()
        self._clipboard_atom = display.intern_atom("CLIPBOARD")
        self._utf8_atom = display.intern_atom("UTF8_STRING")
        self._targets_atom = display.intern_atom("TARGETS")
        self._property_atom = display.intern_atom("LANCLIP_SELECTION")
        self._owned: bytes | None = None

    @classmethod
    def open(cls) -> X11Clipboard:
        """Connect to $DISPLAY and create the hidden window.

        Raises:
            SystemExit: If the X11 display is unavailable.
        """
        display = validate_display()
        return cls(display, create_hidden_window(display))

    def read(self) -> str | None:
        """Return the current clipboard text.

        Returns:
            The text, or None if the clipboard is empty, holds no text, or
            its owner did not answer within the timeout.
        """
        with self._lock:
            self._serve_pending()
            if self._owned is not None:
                return self._owned.decode("utf-8", errors="replace")

            if self.display.get_selection_owner(self._clipboard_atom) == X.NONE:
                return None

            self.window.convert_selection(
                self._clipboard_atom, self._utf8_atom, self._property_atom, X.CurrentTime
            )
            self.display.flush()

            event = self._wait_for(X.SelectionNotify)
            if event is None or event.property == X.NONE:
                return None
            return self._take_property()

    def write(self, text: str) -> None:
        """Take CLIPBOARD ownership and serve text to other applications.

        Raises:
            ClipboardError: If ownership could not be acquired.
        """
        with self._lock:
            self.window.set_selection_owner(self._clipboard_atom, X.CurrentTime)
            self.display.flush()
            if self.display.get_selection_owner(self._clipboard_atom) != self.window:
                raise ClipboardError("Failed to acquire clipboard ownership")
            self._owned = text.encode("utf-8")

    def close(self) -> None:
        self.display.close()

    def _take_property(self) -> str | None:
        prop = self.window.get_full_property(self._property_atom, X.AnyPropertyType)
        self.window.delete_property(self._property_atom)
        self.display.flush()
        if prop is None:
            return None
        data = prop.value
        if isinstance(data, str):
            return data
        return bytes(data).decode("utf-8", errors="replace")

    def _wait_for(self, event_type: int) -> Event | None:
        """Poll for an event of event_type, serving other events meanwhile."""
        deadline = time.monotonic() + self.timeout
        while time.monotonic() < deadline:
            while self.display.pending_events() > 0:
                event = self.display.next_event()
                if event.type == event_type:
                    return event
                self._dispatch(event)
            time.sleep(EVENT_POLL_INTERVAL)
        return None

    def _serve_pending(self) -> None:
        while self.display.pending_events() > 0:
            self._dispatch(self.display.next_event())

    def _dispatch(self, event: Event) -> None:
        if event.type == X.SelectionRequest:
            self._answer_request(event)
        elif event.type == X.SelectionClear:
            # Another application took the clipboard.
            self._owned = None

    def _answer_request(self, event: SelectionRequest) -> None:
        """Serve owned content for TARGETS, UTF8_STRING and STRING."""
        from Xlib.protocol.event import SelectionNotify

        prop = event.property
        if self._owned is None:
            prop = X.NONE
        elif event.target == self._targets_atom:
            targets = [self._targets_atom, self._utf8_atom, Xatom.STRING]
            event.requestor.change_property(prop, Xatom.ATOM, 32, targets)
        elif event.target in (self._utf8_atom, Xatom.STRING):
            event.requestor.change_property(prop, event.target, 8, self._owned)
        else:
            prop = X.NONE

        event.requestor.send_event(
            SelectionNotify(
                time=event.time,
                requestor=event.requestor.id,
                selection=event.selection,
                target=event.target,
                property=prop,
            ),
            event_mask=0,
        )
        self.display.flush()
