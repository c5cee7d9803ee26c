"""Default decision table for behavioural emotion classification.

The thresholds are empirical and carry no calibration data; they are kept
exactly as tuned.  Priority follows list order.
"""

from __future__ import annotations

from empathai.classifier.rules import EmotionRule
from empathai.models import EmotionLabel, SignalFeatures


def _frustrated(f: SignalFeatures) -> bool:
    return f.avg_pointer_speed > 60 and f.correction_count > 2 and f.pointer_variance > 30


def _stressed(f: SignalFeatures) -> bool:
    return f.key_count > 20 and f.error_rate > 0.3 and f.avg_pointer_speed > 50


def _focused(f: SignalFeatures) -> bool:
    return f.key_count > 15 and f.error_rate < 0.1 and f.pointer_variance < 20


def _curious(f: SignalFeatures) -> bool:
    return f.pointer_sample_count > 10 and 20 < f.pointer_variance < 50 and f.key_count < 10


def _happy(f: SignalFeatures) -> bool:
    return (
        20 < f.avg_pointer_speed < 50
        and f.pointer_variance < 15
        and f.key_count > 5
        and f.error_rate < 0.15
    )


def _bored(f: SignalFeatures) -> bool:
    return f.key_count == 0 and f.pointer_sample_count < 3


def default_emotion_rules() -> list[EmotionRule]:
    """Return the default ordered rule list.

    Anything that matches none of these falls back to ``neutral`` at 0.5.
    """
    return [
        EmotionRule(
            label=EmotionLabel.FRUSTRATED,
            confidence=0.85,
            condition=_frustrated,
            description="fast, erratic pointer with repeated corrections",
        ),
        EmotionRule(
            label=EmotionLabel.STRESSED,
            confidence=0.80,
            condition=_stressed,
            description="heavy typing with a high error rate and fast pointer",
        ),
        EmotionRule(
            label=EmotionLabel.FOCUSED,
            confidence=0.75,
            condition=_focused,
            description="sustained accurate typing with a steady pointer",
        ),
        EmotionRule(
            label=EmotionLabel.CURIOUS,
            confidence=0.70,
            condition=_curious,
            description="exploratory pointer movement with little typing",
        ),
        EmotionRule(
            label=EmotionLabel.HAPPY,
            confidence=0.65,
            condition=_happy,
            description="relaxed, smooth pointer with light accurate typing",
        ),
        EmotionRule(
            label=EmotionLabel.BORED,
            confidence=0.60,
            condition=_bored,
            description="almost no input activity",
        ),
    ]


DEFAULT_RULES: tuple[EmotionRule, ...] = tuple(default_emotion_rules())
