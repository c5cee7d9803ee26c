"""Deterministic time utilities for tests and trace replay.

ManualClock replaces the engine's monotonic clock; ManualTicker replaces
its periodic timer.  Advancing the clock fires every tick that falls due,
in order, with the clock set to each tick's instant.

Example:
    >>> clock = ManualClock()
    >>> ticker = ManualTicker(clock)
    >>> engine = EmotionEngine(clock=clock, ticker=ticker)
    >>> engine.start()
    >>> clock.advance(1000)       # runs exactly one analysis tick
"""

from __future__ import annotations

from empathai.scheduler.ticker import TickCallback, Ticker


class ManualClock:
    """Monotonic millisecond clock that only moves when told to."""

    def __init__(self, start_ms: float = 0.0) -> None:
        self._now = start_ms
        self._tickers: list[ManualTicker] = []

    def __call__(self) -> float:
        return self._now

    @property
    def now(self) -> float:
        return self._now

    def _register(self, ticker: ManualTicker) -> None:
        self._tickers.append(ticker)

    def advance(self, ms: float) -> None:
        """Move time forward by *ms*, firing due ticks along the way."""
        if ms < 0:
            raise ValueError("cannot move a monotonic clock backwards")
        target = self._now + ms
        while True:
            due = [t for t in self._tickers if t.next_due is not None and t.next_due <= target]
            if not due:
                break
            ticker = min(due, key=lambda t: t.next_due)
            self._now = ticker.next_due
            ticker.fire()
        self._now = target

    def set(self, ms: float) -> None:
        """Jump to absolute instant *ms* (firing due ticks)."""
        self.advance(ms - self._now)


class ManualTicker(Ticker):
    """Ticker driven by a :class:`ManualClock`."""

    def __init__(self, clock: ManualClock) -> None:
        self._clock = clock
        self._interval_ms = 0.0
        self._callback: TickCallback | None = None
        self.next_due: float | None = None
        self.fired = 0
        clock._register(self)

    def start(self, interval_s: float, callback: TickCallback) -> None:
        if self.is_running:
            return
        self._interval_ms = interval_s * 1000.0
        self._callback = callback
        self.next_due = self._clock.now + self._interval_ms

    def fire(self) -> None:
        callback = self._callback
        if callback is None or self.next_due is None:
            return
        self.next_due += self._interval_ms
        self.fired += 1
        callback()

    def stop(self) -> None:
        self._callback = None
        self.next_due = None

    @property
    def is_running(self) -> bool:
        return self.next_due is not None
