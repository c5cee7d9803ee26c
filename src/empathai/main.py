"""Command-line entrypoint: replay recorded input traces or classify features."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Iterable

from pydantic import ValidationError

from empathai.classifier.rules import classify
from empathai.config import EngineOptions, get_settings
from empathai.engine import EmotionEngine
from empathai.logger import setup_logging
from empathai.models import EmotionSnapshot, SignalFeatures
from empathai.testing import ManualClock, ManualTicker


def load_trace(lines: Iterable[str]) -> list[dict[str, Any]]:
    """Parse JSON-lines trace events, sorted by their ``t`` instant (ms).

    Each event is ``{"t": ms, "type": "pointer", "dx": .., "dy": ..}`` or
    ``{"t": ms, "type": "key", "key": ".."}``.  Blank lines are skipped.
    """
    events: list[dict[str, Any]] = []
    for lineno, line in enumerate(lines, start=1):
        if not line.strip():
            continue
        try:
            event = json.loads(line)
        except json.JSONDecodeError as exc:
            raise ValueError(f"line {lineno}: invalid JSON ({exc.msg})") from exc
        if not isinstance(event, dict):
            raise ValueError(f"line {lineno}: expected a JSON object")
        if event.get("type") not in ("pointer", "key") or "t" not in event:
            raise ValueError(f"line {lineno}: expected a pointer or key event with 't'")
        try:
            event["t"] = float(event["t"])
        except (TypeError, ValueError):
            raise ValueError(f"line {lineno}: 't' must be a number") from None
        if event["t"] < 0:
            raise ValueError(f"line {lineno}: 't' must not be negative")
        events.append(event)
    events.sort(key=lambda e: e["t"])
    return events


def replay(
    events: list[dict[str, Any]],
    options: EngineOptions,
    *,
    tail_ms: float | None = None,
) -> list[EmotionSnapshot]:
    """Drive a manual-clock engine through *events*; return emitted snapshots.

    After the last event time keeps running for *tail_ms* (one analysis
    interval by default) so trailing samples get classified.
    """
    # Traces recorded against another origin may start before zero.
    clock = ManualClock(min([0.0, *(float(e["t"]) for e in events)]))
    emitted: list[EmotionSnapshot] = []
    engine = EmotionEngine(options, clock=clock, ticker=ManualTicker(clock))
    engine.subscribe(emitted.append)

    with engine:
        for event in events:
            clock.set(float(event["t"]))
            if event["type"] == "pointer":
                engine.record_pointer_movement(float(event.get("dx", 0)), float(event.get("dy", 0)))
            else:
                engine.record_key_press(str(event.get("key", "")))
        clock.advance(options.analysis_interval_ms if tail_ms is None else tail_ms)
    return emitted


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="empathai",
        description="Behavioural emotion inference from pointer and keyboard signals.",
    )
    sub = parser.add_subparsers(dest="command")

    # ── replay ────────────────────────────────────────────────
    replay_parser = sub.add_parser("replay", help="Replay a JSON-lines input trace.")
    replay_parser.add_argument("trace", type=Path)
    replay_parser.add_argument("--window-ms", type=float, default=None)
    replay_parser.add_argument("--interval-ms", type=float, default=None)
    replay_parser.add_argument("--throttle-ms", type=float, default=None)
    replay_parser.add_argument("--threshold", type=float, default=None)
    replay_parser.add_argument("--tail-ms", type=float, default=None)
    replay_parser.add_argument("--debug", action="store_true")

    # ── classify ──────────────────────────────────────────────
    classify_parser = sub.add_parser("classify", help="Classify a single feature vector.")
    classify_parser.add_argument("--avg-speed", type=float, default=0.0)
    classify_parser.add_argument("--variance", type=float, default=0.0)
    classify_parser.add_argument("--pointer-samples", type=int, default=0)
    classify_parser.add_argument("--keys", type=int, default=0)
    classify_parser.add_argument("--corrections", type=int, default=0)

    args = parser.parse_args(argv)
    settings = get_settings()
    debug = getattr(args, "debug", False)
    setup_logging("DEBUG" if debug else settings.log_level)

    if args.command == "replay":
        overrides = {
            name: value
            for name, value in (
                ("signal_window_ms", args.window_ms),
                ("analysis_interval_ms", args.interval_ms),
                ("pointer_throttle_ms", args.throttle_ms),
                ("confidence_threshold", args.threshold),
            )
            if value is not None
        }
        if debug:
            overrides["debug_mode"] = True
        try:
            options = EngineOptions.from_settings(settings, **overrides)
            with args.trace.open(encoding="utf-8") as fh:
                events = load_trace(fh)
            snapshots = replay(events, options, tail_ms=args.tail_ms)
        except (ValidationError, ValueError, TypeError, OSError) as exc:
            sys.exit(f"empathai: {exc}")
        for snapshot in snapshots:
            print(snapshot.model_dump_json())
    elif args.command == "classify":
        if args.corrections > args.keys:
            sys.exit("empathai: --corrections cannot exceed --keys")
        features = SignalFeatures(
            avg_pointer_speed=args.avg_speed,
            pointer_variance=args.variance,
            pointer_sample_count=args.pointer_samples,
            key_count=args.keys,
            correction_count=args.corrections,
            error_rate=args.corrections / args.keys if args.keys else 0.0,
        )
        label, confidence = classify(features)
        print(json.dumps({"label": label.value, "confidence": confidence}))
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
