"""Abstract input-event contracts between a host and the engine.

A host adapts its platform events (window listeners, OS hooks, replayed
traces) to one of the source interfaces below.  The engine registers an
owned :class:`InputHandler` with each enabled source on ``start`` and
detaches that same object on ``stop``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


class InputHandler(ABC):
    """Fixed ingestion interface implemented by the engine."""

    @abstractmethod
    def on_pointer_move(self, delta_x: float, delta_y: float) -> None:
        """Receive one pointer-move event."""

    @abstractmethod
    def on_key_down(self, key: str) -> None:
        """Receive one key-down event."""


class PointerEventSource(ABC):
    """Delivers ``(delta_x, delta_y)`` pairs to attached handlers."""

    @abstractmethod
    def attach_pointer(self, handler: InputHandler) -> None:
        """Start delivering pointer events to *handler*."""

    @abstractmethod
    def detach_pointer(self, handler: InputHandler) -> None:
        """Stop delivering to *handler*.  Unknown handlers are ignored."""


class KeyEventSource(ABC):
    """Delivers key identifiers to attached handlers."""

    @abstractmethod
    def attach_keys(self, handler: InputHandler) -> None:
        """Start delivering key-down events to *handler*."""

    @abstractmethod
    def detach_keys(self, handler: InputHandler) -> None:
        """Stop delivering to *handler*.  Unknown handlers are ignored."""
