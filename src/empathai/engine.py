"""Emotion engine: observe, aggregate, classify, notify.

:class:`EmotionEngine` owns every piece of mutable state: both signal
buffers, the settled label and confidence, the throttle marker and the
active flag.  Ingestion calls append samples; a periodic tick evicts
stale samples, extracts features, runs the rule cascade and emits a
snapshot when the label changes with enough confidence.

All state changes happen under one re-entrant lock, so events may be
delivered from several threads while the analysis tick runs on its own
timer.
"""

from __future__ import annotations

import asyncio
import threading
import time
from typing import Any, Callable, Mapping, Sequence

import structlog

from empathai.classifier.rules import EmotionRule, RuleCascade
from empathai.config import EngineOptions
from empathai.models import EmotionLabel, EmotionSnapshot, EngineMetrics, SignalFeatures
from empathai.notifications.observers import Observer, ObserverRegistry, Subscription
from empathai.scheduler.ticker import AsyncioTicker, ThreadTicker, Ticker
from empathai.signals.buffers import SignalBuffers
from empathai.signals.features import extract_features
from empathai.sources.base import InputHandler, KeyEventSource, PointerEventSource

logger = structlog.get_logger(__name__)

Clock = Callable[[], float]

_INITIAL_LABEL = EmotionLabel.NEUTRAL
_INITIAL_CONFIDENCE = 0.5


def _monotonic_ms() -> float:
    return time.monotonic() * 1000.0


def _default_ticker() -> Ticker:
    """Use the running asyncio loop when there is one, else a thread."""
    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:
        return ThreadTicker()
    return AsyncioTicker(loop)


class _EngineInputHandler(InputHandler):
    """Handler object attached to event sources on behalf of one engine."""

    def __init__(self, engine: EmotionEngine) -> None:
        self._engine = engine

    def on_pointer_move(self, delta_x: float, delta_y: float) -> None:
        self._engine.record_pointer_movement(delta_x, delta_y)

    def on_key_down(self, key: str) -> None:
        self._engine.record_key_press(key)


class EmotionEngine:
    """Behavioural emotion-inference engine.

    Parameters
    ----------
    options : EngineOptions | None
        Immutable configuration; defaults apply when omitted.
    pointer_source, key_source
        Event sources the engine attaches to on :meth:`start`.  Either may
        be ``None`` when the host calls the ``record_*`` methods directly.
    rules : Sequence[EmotionRule] | None
        Ordered rule list; the default decision table when omitted.
    clock : Callable[[], float] | None
        Monotonic millisecond clock.
    ticker : Ticker | None
        Periodic timer.  When omitted a fresh one is chosen on every
        :meth:`start`: asyncio if a loop is running, else a thread.
    on_init : Callable[[], None] | None
        Called after each effective :meth:`start`.
    on_emotion_detected : Callable[[EmotionSnapshot], None] | None
        Called after observers for every emitted snapshot.
    """

    def __init__(
        self,
        options: EngineOptions | None = None,
        *,
        pointer_source: PointerEventSource | None = None,
        key_source: KeyEventSource | None = None,
        rules: Sequence[EmotionRule] | None = None,
        clock: Clock | None = None,
        ticker: Ticker | None = None,
        on_init: Callable[[], None] | None = None,
        on_emotion_detected: Callable[[EmotionSnapshot], None] | None = None,
    ) -> None:
        self._options = options or EngineOptions()
        self._pointer_source = pointer_source
        self._key_source = key_source
        self._cascade = RuleCascade(rules)
        self._clock = clock or _monotonic_ms
        self._given_ticker = ticker
        self._ticker: Ticker | None = None
        self._on_init = on_init
        self._on_emotion_detected = on_emotion_detected

        self._lock = threading.RLock()
        # Signalled once a stopping ticker has been fully released.
        self._ticker_released = threading.Condition(self._lock)
        self._releasing_ticker = False
        self._handler = _EngineInputHandler(self)
        self._observers = ObserverRegistry()
        self._buffers = SignalBuffers(
            window_ms=self._options.signal_window_ms,
            throttle_ms=self._options.pointer_throttle_ms,
        )

        self._active = False
        self._current_label = _INITIAL_LABEL
        self._current_confidence = _INITIAL_CONFIDENCE
        self._analysis_count = 0
        self._emission_count = 0

    # ── Lifecycle ─────────────────────────────────────────────

    def start(self) -> None:
        """Attach event sources and start the analysis timer (idempotent).

        Blocks while a concurrent :meth:`stop` is still cancelling the
        previous timer.
        """
        with self._lock:
            self._ticker_released.wait_for(lambda: not self._releasing_ticker)
            if self._active:
                return
            self._active = True
            opts = self._options

            if opts.enable_pointer_tracking and self._pointer_source is not None:
                self._pointer_source.attach_pointer(self._handler)
            if opts.enable_keyboard_tracking and self._key_source is not None:
                self._key_source.attach_keys(self._handler)

            # With no channel enabled there is nothing to analyse.
            if opts.tracks_anything:
                self._ticker = self._given_ticker or _default_ticker()
                self._ticker.start(opts.analysis_interval_ms / 1000.0, self.tick)

        logger.info(
            "emotion_engine.started",
            pointer=opts.enable_pointer_tracking,
            keyboard=opts.enable_keyboard_tracking,
            window_ms=opts.signal_window_ms,
            interval_ms=opts.analysis_interval_ms,
        )
        if self._on_init is not None:
            self._invoke_callback("on_init", self._on_init)

    def stop(self) -> None:
        """Detach sources, cancel the timer and clear both buffers (idempotent).

        Once this returns no tick runs and no sample is recorded until
        :meth:`start` is called again.
        """
        with self._lock:
            if not self._active:
                return
            self._active = False
            if self._pointer_source is not None:
                self._pointer_source.detach_pointer(self._handler)
            if self._key_source is not None:
                self._key_source.detach_keys(self._handler)
            self._buffers.clear()
            ticker, self._ticker = self._ticker, None
            self._releasing_ticker = ticker is not None

        # Outside the lock: a thread ticker joins its worker, which may be
        # waiting on the lock and will then see the engine inactive.
        if ticker is not None:
            try:
                ticker.stop()
            finally:
                with self._lock:
                    self._releasing_ticker = False
                    self._ticker_released.notify_all()
        logger.info("emotion_engine.stopped")

    @property
    def is_active(self) -> bool:
        return self._active

    @property
    def options(self) -> EngineOptions:
        return self._options

    def __enter__(self) -> EmotionEngine:
        self.start()
        return self

    def __exit__(self, *exc: object) -> None:
        self.stop()

    # ── Ingestion ─────────────────────────────────────────────

    def record_pointer_movement(
        self, delta_x: float, delta_y: float, now: float | None = None
    ) -> bool:
        """Record one pointer move.  Return ``True`` if a sample was kept.

        Dropped silently when inactive, when pointer tracking is disabled,
        or when inside the throttle interval of the last accepted event.
        """
        with self._lock:
            if not self._active or not self._options.enable_pointer_tracking:
                return False
            return self._buffers.add_pointer(
                delta_x, delta_y, self._clock() if now is None else now
            )

    def record_key_press(self, key: str | int, now: float | None = None) -> bool:
        """Record one key-down.  Return ``True`` if a sample was kept."""
        with self._lock:
            if not self._active or not self._options.enable_keyboard_tracking:
                return False
            # OS hooks may report integer key codes.
            self._buffers.add_key(str(key), self._clock() if now is None else now)
            return True

    # ── Analysis ──────────────────────────────────────────────

    def tick(self) -> EmotionSnapshot | None:
        """Run one analysis cycle.  Return the emitted snapshot, if any."""
        with self._lock:
            if not self._active:
                return None
            now = self._clock()
            self._buffers.evict(now)
            features = extract_features(self._buffers.pointer_samples, self._buffers.key_samples)
            label, confidence = self._cascade.classify(features)
            self._analysis_count += 1

            if self._options.debug_mode:
                self._log_analysis(features, label, confidence)

            return self._maybe_emit(label, confidence)

    def _maybe_emit(self, label: EmotionLabel, confidence: float) -> EmotionSnapshot | None:
        if label == self._current_label:
            return None
        if confidence < self._options.confidence_threshold:
            return None

        self._current_label = label
        self._current_confidence = confidence
        self._emission_count += 1
        snapshot = EmotionSnapshot(label=label, confidence=confidence)
        logger.info("emotion_engine.emitted", label=label.value, confidence=confidence)

        self._observers.dispatch(snapshot)
        if self._on_emotion_detected is not None:
            self._invoke_callback("on_emotion_detected", self._on_emotion_detected, snapshot)
        return snapshot

    def _log_analysis(
        self, features: SignalFeatures, label: EmotionLabel, confidence: float
    ) -> None:
        logger.debug(
            "emotion_engine.analysis",
            candidate=label.value,
            confidence=confidence,
            current=self._current_label.value,
            **features.model_dump(),
        )

    @staticmethod
    def _invoke_callback(name: str, fn: Callable[..., Any], *args: Any) -> None:
        try:
            fn(*args)
        except Exception:
            logger.exception("emotion_engine.callback_error", callback=name)

    # ── Outputs ───────────────────────────────────────────────

    def subscribe(self, observer: Observer) -> Subscription:
        """Register *observer* for state-change snapshots."""
        return self._observers.subscribe(observer)

    def current_snapshot(self) -> EmotionSnapshot:
        """Return the settled label and confidence, stamped now."""
        with self._lock:
            return EmotionSnapshot(
                label=self._current_label, confidence=self._current_confidence
            )

    def metrics(self) -> EngineMetrics:
        with self._lock:
            return EngineMetrics(
                pointer_buffer_size=self._buffers.pointer_size,
                key_buffer_size=self._buffers.key_size,
                observer_count=len(self._observers),
                is_active=self._active,
                analysis_count=self._analysis_count,
                emission_count=self._emission_count,
            )


# ── Factory ───────────────────────────────────────────────────


def create_engine(
    options: EngineOptions | Mapping[str, Any] | None = None,
    **kwargs: Any,
) -> EmotionEngine:
    """Build a fresh, independent :class:`EmotionEngine`.

    *options* may be a mapping of option names; unknown names or invalid
    values raise immediately.  Remaining keyword arguments are passed to
    the engine constructor.
    """
    if options is not None and not isinstance(options, EngineOptions):
        options = EngineOptions(**dict(options))
    return EmotionEngine(options, **kwargs)
