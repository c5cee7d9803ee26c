"""Rule cascade: maps a :class:`SignalFeatures` vector to a label.

Rules are evaluated in list order and the first match wins; later rules
are never consulted.  Overlapping conditions are expected, so the order
of the list encodes priority.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Sequence

from empathai.models import EmotionLabel, SignalFeatures

# Confidence returned when no rule matches.
FALLBACK_CONFIDENCE = 0.5


@dataclass(frozen=True, slots=True)
class EmotionRule:
    """A single row of the decision table."""

    label: EmotionLabel
    confidence: float
    condition: Callable[[SignalFeatures], bool]
    description: str = ""

    def matches(self, features: SignalFeatures) -> bool:
        return bool(self.condition(features))


def classify(
    features: SignalFeatures,
    rules: Sequence[EmotionRule] | None = None,
    *,
    fallback: tuple[EmotionLabel, float] = (EmotionLabel.NEUTRAL, FALLBACK_CONFIDENCE),
) -> tuple[EmotionLabel, float]:
    """Return ``(label, confidence)`` for *features*.

    Stateless: the result depends only on *features* and *rules*.  When
    *rules* is ``None`` the default decision table is used.
    """
    if rules is None:
        from empathai.classifier.defaults import DEFAULT_RULES

        rules = DEFAULT_RULES
    for rule in rules:
        if rule.matches(features):
            return rule.label, rule.confidence
    return fallback


class RuleCascade:
    """Ordered, editable rule list bound to :func:`classify`.

    Example::

        cascade = RuleCascade(default_emotion_rules())
        label, confidence = cascade.classify(features)
    """

    def __init__(self, rules: Sequence[EmotionRule] | None = None) -> None:
        if rules is None:
            from empathai.classifier.defaults import default_emotion_rules

            rules = default_emotion_rules()
        self._rules: list[EmotionRule] = list(rules)

    # ── Rule management ───────────────────────────────────────

    def insert_rule(self, index: int, rule: EmotionRule) -> None:
        """Insert *rule* at priority *index* (0 is evaluated first)."""
        self._rules.insert(index, rule)

    def remove_rule(self, label: EmotionLabel) -> bool:
        """Remove every rule producing *label*.  Return ``True`` if any was removed."""
        before = len(self._rules)
        self._rules = [r for r in self._rules if r.label != label]
        return len(self._rules) < before

    def list_rules(self) -> list[EmotionRule]:
        return list(self._rules)

    # ── Evaluation ────────────────────────────────────────────

    def classify(self, features: SignalFeatures) -> tuple[EmotionLabel, float]:
        return classify(features, self._rules)
