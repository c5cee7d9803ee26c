"""Scheduler sub-package: periodic analysis timers."""

from empathai.scheduler.ticker import AsyncioTicker, ThreadTicker, Ticker

__all__ = ["AsyncioTicker", "ThreadTicker", "Ticker"]
