"""EmpathAI: privacy-first emotional-state inference from input behaviour.

The engine watches pointer movement and keystrokes only (no camera,
microphone or biometric sensor), aggregates them over a short sliding
window, and applies an ordered, explainable rule table to estimate one of
seven states: neutral, focused, frustrated, happy, bored, curious,
stressed.

Quick start::

    from empathai import LocalEventSource, create_engine

    source = LocalEventSource()
    engine = create_engine(pointer_source=source, key_source=source)
    unsubscribe = engine.subscribe(lambda s: print(s.label, s.confidence))
    engine.start()
"""

from empathai.classifier import EmotionRule, RuleCascade, classify, default_emotion_rules
from empathai.config import EngineOptions, Settings, get_settings
from empathai.engine import EmotionEngine, create_engine
from empathai.models import (
    EmotionLabel,
    EmotionSnapshot,
    EngineMetrics,
    KeySample,
    PointerSample,
    SignalFeatures,
)
from empathai.notifications import Subscription
from empathai.signals import extract_features
from empathai.sources import InputHandler, KeyEventSource, LocalEventSource, PointerEventSource

__all__ = [
    "EmotionEngine",
    "EmotionLabel",
    "EmotionRule",
    "EmotionSnapshot",
    "EngineMetrics",
    "EngineOptions",
    "InputHandler",
    "KeyEventSource",
    "KeySample",
    "LocalEventSource",
    "PointerEventSource",
    "PointerSample",
    "RuleCascade",
    "Settings",
    "SignalFeatures",
    "Subscription",
    "classify",
    "create_engine",
    "default_emotion_rules",
    "extract_features",
    "get_settings",
]
