"""Shared Pydantic models used across the engine."""

from __future__ import annotations

from datetime import UTC, datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

# ── Enums ─────────────────────────────────────────────────────


class EmotionLabel(str, Enum):
    """Mutually exclusive emotional-state labels produced by the classifier."""

    NEUTRAL = "neutral"
    FOCUSED = "focused"
    FRUSTRATED = "frustrated"
    HAPPY = "happy"
    BORED = "bored"
    CURIOUS = "curious"
    STRESSED = "stressed"


# ── Raw samples ───────────────────────────────────────────────


class PointerSample(BaseModel):
    """One accepted pointer-move event.

    ``speed`` is the sum of absolute axis deltas since the previous event;
    ``timestamp`` is a monotonic instant in milliseconds.
    """

    model_config = ConfigDict(frozen=True)

    speed: float = Field(ge=0.0)
    timestamp: float


class KeySample(BaseModel):
    """One key-down event."""

    model_config = ConfigDict(frozen=True)

    key: str
    timestamp: float


# ── Derived values ────────────────────────────────────────────


class SignalFeatures(BaseModel):
    """Scalar features extracted from the current signal window."""

    model_config = ConfigDict(frozen=True)

    avg_pointer_speed: float = 0.0
    pointer_variance: float = 0.0  # population std-dev of speeds
    pointer_sample_count: int = 0
    key_count: int = 0
    correction_count: int = 0
    error_rate: float = 0.0


class EmotionSnapshot(BaseModel):
    """Emitted emotional-state estimate.  Never mutated after construction."""

    model_config = ConfigDict(frozen=True)

    label: EmotionLabel
    confidence: float = Field(ge=0.0, le=1.0)
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))


class EngineMetrics(BaseModel):
    """Point-in-time counters exposed for external monitoring."""

    pointer_buffer_size: int = 0
    key_buffer_size: int = 0
    observer_count: int = 0
    is_active: bool = False
    analysis_count: int = 0
    emission_count: int = 0
