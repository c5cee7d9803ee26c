"""Feature extraction: pure functions of the current window contents.

Turns the (already evicted) pointer and key buffers into a
:class:`SignalFeatures` vector for the classifier.  Empty buffers yield
zero-valued features rather than division errors.
"""

from __future__ import annotations

import statistics
from typing import Sequence

from empathai.models import KeySample, PointerSample, SignalFeatures

# Key identifiers that count as a correction (compared case-insensitively).
CORRECTION_KEYS = frozenset({"backspace", "delete"})


def is_correction_key(key: str) -> bool:
    return key.lower() in CORRECTION_KEYS


def _speed_stats(speeds: Sequence[float]) -> tuple[float, float]:
    """Return ``(mean, population std-dev)``; std-dev is 0 below two points."""
    if not speeds:
        return 0.0, 0.0
    mean = statistics.fmean(speeds)
    if len(speeds) < 2:
        return mean, 0.0
    return mean, statistics.pstdev(speeds, mu=mean)


def extract_features(
    pointer_samples: Sequence[PointerSample],
    key_samples: Sequence[KeySample],
) -> SignalFeatures:
    """Build a :class:`SignalFeatures` vector from buffer contents."""
    avg_speed, variance = _speed_stats([s.speed for s in pointer_samples])

    key_count = len(key_samples)
    correction_count = sum(1 for k in key_samples if is_correction_key(k.key))
    error_rate = correction_count / key_count if key_count else 0.0

    return SignalFeatures(
        avg_pointer_speed=avg_speed,
        pointer_variance=variance,
        pointer_sample_count=len(pointer_samples),
        key_count=key_count,
        correction_count=correction_count,
        error_rate=error_rate,
    )
