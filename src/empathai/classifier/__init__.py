"""Classifier sub-package: ordered, deterministic rule cascade."""

from empathai.classifier.defaults import DEFAULT_RULES, default_emotion_rules
from empathai.classifier.rules import EmotionRule, RuleCascade, classify

__all__ = ["DEFAULT_RULES", "EmotionRule", "RuleCascade", "classify", "default_emotion_rules"]
