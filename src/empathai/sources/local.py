"""In-process event source that hosts push events into."""

from __future__ import annotations

import threading

import structlog

from empathai.sources.base import InputHandler, KeyEventSource, PointerEventSource

logger = structlog.get_logger(__name__)


class LocalEventSource(PointerEventSource, KeyEventSource):
    """Fan out pushed pointer and key events to attached handlers.

    Useful for UI bindings that already own an event loop and only need
    to forward deltas and key names::

        source = LocalEventSource()
        engine = EmotionEngine(pointer_source=source, key_source=source)
        engine.start()
        source.push_pointer(12, -4)
        source.push_key("Backspace")
    """

    def __init__(self) -> None:
        self._pointer_handlers: list[InputHandler] = []
        self._key_handlers: list[InputHandler] = []
        self._lock = threading.Lock()

    # ── Registration ──────────────────────────────────────────

    def attach_pointer(self, handler: InputHandler) -> None:
        with self._lock:
            if handler not in self._pointer_handlers:
                self._pointer_handlers.append(handler)

    def detach_pointer(self, handler: InputHandler) -> None:
        with self._lock:
            if handler in self._pointer_handlers:
                self._pointer_handlers.remove(handler)

    def attach_keys(self, handler: InputHandler) -> None:
        with self._lock:
            if handler not in self._key_handlers:
                self._key_handlers.append(handler)

    def detach_keys(self, handler: InputHandler) -> None:
        with self._lock:
            if handler in self._key_handlers:
                self._key_handlers.remove(handler)

    @property
    def handler_count(self) -> int:
        return len(self._pointer_handlers) + len(self._key_handlers)

    # ── Producer side ─────────────────────────────────────────

    def push_pointer(self, delta_x: float, delta_y: float) -> None:
        with self._lock:
            handlers = list(self._pointer_handlers)
        for handler in handlers:
            handler.on_pointer_move(delta_x, delta_y)

    def push_key(self, key: str) -> None:
        with self._lock:
            handlers = list(self._key_handlers)
        for handler in handlers:
            handler.on_key_down(key)
