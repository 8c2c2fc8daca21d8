"""Observable — per-object publish/subscribe side channel."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

logger = logging.getLogger(__name__)

Listener = Callable[..., Any]


class Observable:
    """
    Mixin giving an object ``on`` / ``off`` / ``emit``.

    Listeners run synchronously, in registration order, inside ``emit``.
    A listener that raises aborts the emission and the error propagates to
    the emitter.
    """

    def __init__(self) -> None:
        self._listeners: dict[str, list[Listener]] = {}

    # ── Registration ─────────────────────────────────────────────

    def on(self, event: str, listener: Listener) -> None:
        listeners = self._listeners.setdefault(event, [])
        if listener not in listeners:
            listeners.append(listener)

    def off(self, event: str, listener: Listener | None = None) -> None:
        """Remove *listener*, or every listener of *event* when omitted."""
        if listener is None:
            self._listeners.pop(event, None)
            return
        listeners = self._listeners.get(event, [])
        if listener in listeners:
            listeners.remove(listener)

    def listener_count(self, event: str) -> int:
        return len(self._listeners.get(event, []))

    # ── Emission ─────────────────────────────────────────────────

    def emit(self, event: str, *args: Any) -> None:
        listeners = list(self._listeners.get(event, []))
        if listeners:
            logger.debug("Emitting %s to %d listener(s)", event, len(listeners))
        for listener in listeners:
            listener(*args)
