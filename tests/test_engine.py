"""Tests for the emotion engine lifecycle, ingestion and emission."""

from __future__ import annotations

import threading
import time

import pytest
from structlog.testing import capture_logs

from empathai.classifier.rules import EmotionRule
from empathai.config import EngineOptions
from empathai.engine import EmotionEngine, create_engine
from empathai.models import EmotionLabel
from empathai.scheduler.ticker import ThreadTicker


def _pointer_burst(engine, clock, count=20, spacing_ms=50):
    """Alternate 40/120 speeds: mean 80, population std-dev 40."""
    for i in range(count):
        clock.set(i * spacing_ms)
        dx, dy = (40, 0) if i % 2 == 0 else (80, 40)
        assert engine.record_pointer_movement(dx, dy) is True


# ── End-to-end scenarios ──────────────────────────────────────


class TestScenarios:
    def test_tracking_disabled_never_emits(self, make_engine, clock, ticker):
        engine = make_engine(enable_pointer_tracking=False, enable_keyboard_tracking=False)
        received = []
        engine.subscribe(received.append)

        engine.start()
        clock.advance(60_000)

        assert engine.current_snapshot().label == EmotionLabel.NEUTRAL
        assert received == []
        assert ticker.is_running is False

    def test_fast_erratic_pointer_with_corrections_is_frustrated(self, engine, clock, received):
        engine.start()
        _pointer_burst(engine, clock)
        for t in (960, 965, 970, 975, 980):
            clock.set(t)
            engine.record_key_press("Backspace")

        clock.advance(1000 - clock.now)

        assert [(s.label, s.confidence) for s in received] == [(EmotionLabel.FRUSTRATED, 0.85)]

    def test_steady_typing_is_focused(self, engine, clock, received):
        engine.start()
        for i in range(20):
            clock.set(i * 10)
            engine.record_key_press("a")

        clock.set(1000)

        assert [(s.label, s.confidence) for s in received] == [(EmotionLabel.FOCUSED, 0.75)]

    def test_no_activity_is_bored(self, engine, clock, received):
        engine.start()
        clock.advance(1000)

        assert [(s.label, s.confidence) for s in received] == [(EmotionLabel.BORED, 0.60)]
        snap = engine.current_snapshot()
        assert (snap.label, snap.confidence) == (EmotionLabel.BORED, 0.60)


# ── Emission rules ────────────────────────────────────────────


class TestEmission:
    def test_repeated_label_emits_once(self, engine, clock, received):
        engine.start()
        clock.advance(10_000)
        assert len(received) == 1
        assert engine.metrics().analysis_count == 10

    def test_confidence_below_floor_never_emits(self, make_engine, clock):
        engine = make_engine(confidence_threshold=0.9)
        received = []
        engine.subscribe(received.append)

        engine.start()
        clock.advance(5000)

        assert received == []
        snap = engine.current_snapshot()
        assert (snap.label, snap.confidence) == (EmotionLabel.NEUTRAL, 0.5)

    def test_confidence_only_change_does_not_emit(self, make_engine, clock):
        rules = [
            EmotionRule(EmotionLabel.BORED, 0.6, lambda f: f.key_count == 0),
            EmotionRule(EmotionLabel.BORED, 0.9, lambda f: True),
        ]
        engine = make_engine(rules=rules)
        received = []
        engine.subscribe(received.append)

        engine.start()
        clock.advance(1000)
        engine.record_key_press("a")
        clock.advance(1000)

        assert [s.confidence for s in received] == [0.6]
        assert engine.current_snapshot().confidence == 0.6

    def test_label_changes_emit_new_snapshots(self, engine, clock, received):
        engine.start()
        clock.advance(1000)  # bored
        for i in range(20):
            clock.set(1000 + i * 10)
            engine.record_key_press("a")
        clock.set(2000)  # focused
        clock.set(6000)  # window empties -> bored again

        assert [s.label for s in received] == [
            EmotionLabel.BORED,
            EmotionLabel.FOCUSED,
            EmotionLabel.BORED,
        ]
        assert received[0] is not received[2]

    def test_tick_returns_emitted_snapshot(self, engine):
        engine.start()
        snapshot = engine.tick()
        assert snapshot is not None and snapshot.label == EmotionLabel.BORED
        assert engine.tick() is None

    def test_failing_observer_does_not_block_others(self, engine, clock):
        received = []

        def boom(_):
            raise ValueError("observer failure")

        engine.subscribe(boom)
        engine.subscribe(received.append)
        engine.start()
        clock.advance(1000)

        assert len(received) == 1
        assert engine.current_snapshot().label == EmotionLabel.BORED

    def test_unsubscribed_observer_gets_nothing(self, engine, clock):
        received = []
        unsubscribe = engine.subscribe(received.append)
        assert engine.metrics().observer_count == 1

        unsubscribe()
        unsubscribe()
        engine.start()
        clock.advance(1000)

        assert received == []
        assert engine.metrics().observer_count == 0

    def test_on_emotion_detected_callback(self, make_engine, clock):
        detected = []
        engine = make_engine(on_emotion_detected=detected.append)
        engine.start()
        clock.advance(1000)
        assert [s.label for s in detected] == [EmotionLabel.BORED]


# ── Windowing & throttling ────────────────────────────────────


class TestWindowing:
    def test_samples_older_than_window_are_evicted(self, engine, clock):
        engine.start()
        engine.record_key_press("a")
        engine.record_pointer_movement(3, 4)

        clock.advance(3000)
        metrics = engine.metrics()
        assert (metrics.pointer_buffer_size, metrics.key_buffer_size) == (1, 1)

        clock.advance(1000)
        metrics = engine.metrics()
        assert (metrics.pointer_buffer_size, metrics.key_buffer_size) == (0, 0)

    def test_throttled_pointer_events_record_one_sample(self, engine, clock):
        engine.start()
        clock.set(100)
        results = [engine.record_pointer_movement(1, 1, now=100 + i) for i in range(25)]

        assert results.count(True) == 1
        assert engine.metrics().pointer_buffer_size == 1

    def test_integer_key_codes_are_accepted(self, make_engine, source):
        engine = make_engine(pointer_source=source, key_source=source)
        engine.start()
        source.push_key(65)
        assert engine.record_key_press(8) is True
        assert engine.metrics().key_buffer_size == 2

    def test_keys_are_not_throttled(self, engine):
        engine.start()
        for _ in range(5):
            engine.record_key_press("Backspace")
        assert engine.metrics().key_buffer_size == 5


# ── Lifecycle ─────────────────────────────────────────────────


class TestLifecycle:
    def test_recording_before_start_is_noop(self, engine):
        assert engine.record_pointer_movement(5, 5) is False
        assert engine.record_key_press("a") is False
        assert engine.metrics().key_buffer_size == 0

    def test_double_start_is_single_start(self, make_engine, clock, ticker, source):
        inits = []
        engine = make_engine(pointer_source=source, key_source=source,
                             on_init=lambda: inits.append(1))
        engine.start()
        engine.start()

        assert source.handler_count == 2
        assert inits == [1]
        clock.advance(1000)
        assert ticker.fired == 1

    def test_double_stop_is_single_stop(self, engine, clock, ticker):
        engine.start()
        engine.stop()
        engine.stop()
        assert engine.is_active is False
        assert ticker.is_running is False

    def test_stop_clears_buffers_and_halts_analysis(self, engine, clock, ticker, received):
        engine.start()
        engine.record_key_press("a")
        engine.stop()

        metrics = engine.metrics()
        assert metrics.key_buffer_size == 0
        assert metrics.is_active is False

        clock.advance(10_000)
        assert ticker.fired == 0
        assert received == []
        assert engine.record_key_press("a") is False

    def test_restart_resumes_analysis(self, engine, clock, received):
        engine.start()
        engine.stop()
        engine.start()
        clock.advance(1000)
        assert [s.label for s in received] == [EmotionLabel.BORED]

    def test_stop_from_observer_prevents_further_ticks(self, engine, clock, ticker):
        engine.subscribe(lambda s: engine.stop())
        engine.start()
        clock.advance(5000)
        assert ticker.fired == 1
        assert engine.is_active is False

    def test_sources_are_attached_and_detached(self, make_engine, clock, source):
        engine = make_engine(pointer_source=source, key_source=source)
        engine.start()
        source.push_key("a")
        source.push_pointer(10, 0)
        assert engine.metrics().key_buffer_size == 1
        assert engine.metrics().pointer_buffer_size == 1

        engine.stop()
        assert source.handler_count == 0
        source.push_key("late")
        engine.start()
        assert engine.metrics().key_buffer_size == 0

    def test_disabled_channel_is_not_attached(self, make_engine, source):
        engine = make_engine(enable_keyboard_tracking=False, pointer_source=source, key_source=source)
        engine.start()
        source.push_key("a")
        assert engine.record_key_press("b") is False
        assert engine.metrics().key_buffer_size == 0
        assert source.handler_count == 1

    def test_failing_on_init_does_not_break_start(self, make_engine):
        def boom():
            raise RuntimeError("init hook failure")

        engine = make_engine(on_init=boom)
        engine.start()
        assert engine.is_active is True

    def test_context_manager(self, engine):
        with engine as running:
            assert running.is_active
        assert not engine.is_active

    def test_start_during_concurrent_stop_keeps_ticking(self):
        stop_entered = threading.Event()

        class SlowStopTicker(ThreadTicker):
            def stop(self):
                stop_entered.set()
                time.sleep(0.05)
                super().stop()

        ticker = SlowStopTicker()
        engine = EmotionEngine(EngineOptions(analysis_interval_ms=10), ticker=ticker)
        engine.start()

        stopper = threading.Thread(target=engine.stop)
        stopper.start()
        assert stop_entered.wait(1.0)
        engine.start()
        stopper.join()
        try:
            baseline = engine.metrics().analysis_count
            time.sleep(0.2)
            assert engine.is_active is True
            assert ticker.is_running is True
            assert engine.metrics().analysis_count > baseline
        finally:
            engine.stop()
        assert ticker.is_running is False


# ── Instances, concurrency, diagnostics ───────────────────────


class TestEngineMisc:
    def test_instances_are_independent(self, clock):
        from empathai.testing import ManualTicker

        a = EmotionEngine(clock=clock, ticker=ManualTicker(clock))
        b = EmotionEngine(clock=clock, ticker=ManualTicker(clock))
        a.start()
        b.start()
        a.record_key_press("x")
        assert a.metrics().key_buffer_size == 1
        assert b.metrics().key_buffer_size == 0

    def test_concurrent_key_ingestion(self, engine):
        engine.start()

        def _type():
            for _ in range(250):
                engine.record_key_press("a")

        threads = [threading.Thread(target=_type) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert engine.metrics().key_buffer_size == 2000

    def test_current_snapshot_is_freshly_stamped(self, engine):
        first = engine.current_snapshot()
        second = engine.current_snapshot()
        assert first is not second
        assert second.timestamp >= first.timestamp
        assert first.label == second.label

    def test_debug_mode_logs_each_analysis(self, make_engine, clock):
        engine = make_engine(debug_mode=True)
        engine.start()
        with capture_logs() as logs:
            clock.advance(2000)
        analyses = [e for e in logs if e["event"] == "emotion_engine.analysis"]
        assert len(analyses) == 2
        assert analyses[0]["candidate"] == "bored"
        assert analyses[0]["key_count"] == 0
        assert {e["log_level"] for e in analyses} == {"debug"}

    def test_create_engine_rejects_unknown_option(self):
        with pytest.raises(ValueError, match="bogus"):
            create_engine({"bogus": 1})

    def test_create_engine_from_mapping(self):
        engine = create_engine({"signal_window_ms": 5000})
        assert engine.options.signal_window_ms == 5000
