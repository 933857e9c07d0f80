# SPDX-License-Identifier: MIT
# Copyright (c) 2026 ADNT Sarl <info@adnt.io>

"""
Minimal event emitter.

Listeners run synchronously in the emitting thread, in registration order.
"""

import logging
import threading
from typing import Callable

log = logging.getLogger(__name__)

Listener = Callable[..., None]


class EventEmitter:
    """Named events with callback listeners."""

    def __init__(self):
        self._listeners: dict[str, list[Listener]] = {}
        self._listeners_lock = threading.Lock()

    def on(self, event: str, listener: Listener) -> Listener:
        """Register a listener. Returns it, so this works as a decorator."""
        with self._listeners_lock:
            self._listeners.setdefault(event, []).append(listener)
        return listener

    def once(self, event: str, listener: Listener) -> Listener:
        """Register a listener that is removed after its first call."""
        def wrapper(*args):
            self.off(event, wrapper)
            listener(*args)

        wrapper.listener = listener
        self.on(event, wrapper)
        return listener

    def off(self, event: str, listener: Listener) -> None:
        """Remove a listener (or a once() wrapper around it)."""
        with self._listeners_lock:
            registered = self._listeners.get(event, [])
            for candidate in registered:
                if candidate == listener or getattr(candidate, "listener", None) == listener:
                    registered.remove(candidate)
                    break
            if not registered:
                self._listeners.pop(event, None)

    def listeners(self, event: str) -> list[Listener]:
        with self._listeners_lock:
            return list(self._listeners.get(event, []))

    def remove_all_listeners(self, event: str = None) -> None:
        with self._listeners_lock:
            if event is None:
                self._listeners.clear()
            else:
                self._listeners.pop(event, None)

    def emit(self, event: str, *args) -> bool:
        """
        Call every listener of an event.

        A listener that raises is logged and does not prevent the others
        from running.

        Returns:
            True if the event had listeners
        """
        listeners = self.listeners(event)
        if not listeners:
            if event == "error":
                log.warning("Unhandled error event: %s", args[0] if args else None)
            return False

        for listener in listeners:
            try:
                listener(*args)
            except Exception:
                log.exception("Listener for %r failed", event)
        return True
