"""Shared pytest fixtures."""

from __future__ import annotations

from typing import Callable

import pytest

from empathai.config import EngineOptions
from empathai.engine import EmotionEngine
from empathai.models import EmotionSnapshot, SignalFeatures
from empathai.sources.local import LocalEventSource
from empathai.testing import ManualClock, ManualTicker


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture
def ticker(clock: ManualClock) -> ManualTicker:
    return ManualTicker(clock)


@pytest.fixture
def source() -> LocalEventSource:
    return LocalEventSource()


@pytest.fixture
def make_engine(clock: ManualClock, ticker: ManualTicker) -> Callable[..., EmotionEngine]:
    """Factory for manual-clock engines; keyword args become options."""

    def _make(**option_overrides) -> EmotionEngine:
        extra = {
            k: option_overrides.pop(k)
            for k in list(option_overrides)
            if k in ("pointer_source", "key_source", "rules", "on_init", "on_emotion_detected")
        }
        return EmotionEngine(
            EngineOptions(**option_overrides), clock=clock, ticker=ticker, **extra
        )

    return _make


@pytest.fixture
def engine(make_engine) -> EmotionEngine:
    return make_engine()


@pytest.fixture
def received(engine: EmotionEngine) -> list[EmotionSnapshot]:
    """Snapshots delivered to an observer on the default ``engine``."""
    snapshots: list[EmotionSnapshot] = []
    engine.subscribe(snapshots.append)
    return snapshots


@pytest.fixture
def features() -> Callable[..., SignalFeatures]:
    """Build a feature vector; ``error_rate`` is derived unless given."""

    def _build(**values) -> SignalFeatures:
        keys = values.get("key_count", 0)
        corrections = values.get("correction_count", 0)
        values.setdefault("error_rate", corrections / keys if keys else 0.0)
        return SignalFeatures(**values)

    return _build
