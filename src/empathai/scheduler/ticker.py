"""Periodic tickers driving the engine's analysis cycle.

Architecture
~~~~~~~~~~~~
* **Ticker**: abstract fixed-period timer with synchronous
  ``start`` / ``stop``.
* **AsyncioTicker**: re-arms ``loop.call_later`` on an asyncio loop.
* **ThreadTicker**: background daemon thread for hosts without a loop.

Deterministic time for tests lives in :mod:`empathai.testing`.

Integration::

    ticker = AsyncioTicker()
    ticker.start(1.0, engine.tick)
    ...
    ticker.stop()
"""

from __future__ import annotations

import asyncio
import threading
from abc import ABC, abstractmethod
from typing import Callable

import structlog

logger = structlog.get_logger(__name__)

TickCallback = Callable[[], None]


class Ticker(ABC):
    """Contract for fixed-period timers."""

    @abstractmethod
    def start(self, interval_s: float, callback: TickCallback) -> None:
        """Invoke *callback* every *interval_s* seconds until stopped."""

    @abstractmethod
    def stop(self) -> None:
        """Cancel the timer.  No callback starts after this returns."""

    @property
    @abstractmethod
    def is_running(self) -> bool: ...


class AsyncioTicker(Ticker):
    """Timer backed by an asyncio event loop.

    ``start`` must be called from the loop's thread unless *loop* is
    passed explicitly.  Raises :class:`RuntimeError` when no loop is
    available.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop
        self._handle: asyncio.TimerHandle | None = None
        self._interval = 0.0
        self._callback: TickCallback | None = None

    def start(self, interval_s: float, callback: TickCallback) -> None:
        if self.is_running:
            return
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        self._interval = interval_s
        self._callback = callback
        self._handle = self._loop.call_later(interval_s, self._fire)

    def _fire(self) -> None:
        callback = self._callback
        if callback is None:
            return
        # Re-arm first so a slow callback does not drift the cadence.
        self._handle = self._loop.call_later(self._interval, self._fire)
        try:
            callback()
        except Exception:
            logger.exception("ticker.callback_error")

    def stop(self) -> None:
        self._callback = None
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    @property
    def is_running(self) -> bool:
        return self._handle is not None


class ThreadTicker(Ticker):
    """Timer running on a background daemon thread."""

    def __init__(self, name: str = "empathai-ticker") -> None:
        self._name = name
        self._thread: threading.Thread | None = None
        self._stop_event = threading.Event()

    def start(self, interval_s: float, callback: TickCallback) -> None:
        if self.is_running:
            return
        self._stop_event = threading.Event()
        stop_event = self._stop_event

        def _run() -> None:
            while not stop_event.wait(interval_s):
                try:
                    callback()
                except Exception:
                    logger.exception("ticker.callback_error")

        self._thread = threading.Thread(target=_run, name=self._name, daemon=True)
        self._thread.start()

    def stop(self) -> None:
        self._stop_event.set()
        thread, self._thread = self._thread, None
        if thread is not None and thread is not threading.current_thread():
            thread.join()

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()
