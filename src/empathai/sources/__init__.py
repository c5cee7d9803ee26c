"""Input-event sources feeding the engine."""

from empathai.sources.base import InputHandler, KeyEventSource, PointerEventSource
from empathai.sources.local import LocalEventSource

__all__ = ["InputHandler", "KeyEventSource", "LocalEventSource", "PointerEventSource"]
