"""Time-windowed signal buffers: ingestion, throttling and eviction.

:class:`SignalBuffers` holds the two append-only sample sequences the
engine aggregates over.  It does no locking of its own; the owning
engine serialises every call.
"""

from __future__ import annotations

from collections import deque

from empathai.models import KeySample, PointerSample


class SignalBuffers:
    """Pointer-speed and key-press samples, oldest first.

    Parameters
    ----------
    window_ms : float
        Samples older than this (relative to the eviction instant) are
        dropped by :meth:`evict`.
    throttle_ms : float
        Minimum spacing between accepted pointer samples.
    """

    def __init__(self, window_ms: float, throttle_ms: float) -> None:
        self._window_ms = window_ms
        self._throttle_ms = throttle_ms
        self._pointer: deque[PointerSample] = deque()
        self._keys: deque[KeySample] = deque()
        self._last_pointer_ms: float | None = None

    # ── Ingestion ─────────────────────────────────────────────

    def add_pointer(self, delta_x: float, delta_y: float, now: float) -> bool:
        """Append a pointer sample unless throttled.  Return ``True`` if kept."""
        if self._last_pointer_ms is not None and now - self._last_pointer_ms < self._throttle_ms:
            return False
        self._pointer.append(PointerSample(speed=abs(delta_x) + abs(delta_y), timestamp=now))
        self._last_pointer_ms = now
        return True

    def add_key(self, key: str, now: float) -> None:
        self._keys.append(KeySample(key=key, timestamp=now))

    # ── Windowing ─────────────────────────────────────────────

    def evict(self, now: float) -> int:
        """Drop samples outside the window ending at *now*.

        Returns the number of samples removed.  Relative order of the
        survivors is preserved.
        """
        before = len(self._pointer) + len(self._keys)
        self._pointer = deque(s for s in self._pointer if now - s.timestamp <= self._window_ms)
        self._keys = deque(s for s in self._keys if now - s.timestamp <= self._window_ms)
        return before - len(self._pointer) - len(self._keys)

    def clear(self) -> None:
        """Empty both buffers and forget the throttle marker."""
        self._pointer.clear()
        self._keys.clear()
        self._last_pointer_ms = None

    # ── Accessors ─────────────────────────────────────────────

    @property
    def pointer_samples(self) -> list[PointerSample]:
        return list(self._pointer)

    @property
    def key_samples(self) -> list[KeySample]:
        return list(self._keys)

    @property
    def pointer_size(self) -> int:
        return len(self._pointer)

    @property
    def key_size(self) -> int:
        return len(self._keys)
