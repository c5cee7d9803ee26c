"""Centralised settings and per-engine options.

Two layers:

* :class:`Settings`: process-level defaults read from the environment /
  ``.env`` file (``EMPATHAI_`` prefix) via *pydantic-settings*.
* :class:`EngineOptions`: the immutable option record captured when an
  :class:`~empathai.engine.EmotionEngine` is constructed.  Unknown names
  and out-of-range values are rejected immediately; nothing is clamped.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent

# ── Documented defaults ───────────────────────────────────────

DEFAULT_SIGNAL_WINDOW_MS = 3000.0
DEFAULT_ANALYSIS_INTERVAL_MS = 1000.0
DEFAULT_POINTER_THROTTLE_MS = 50.0
DEFAULT_CONFIDENCE_THRESHOLD = 0.3


class Settings(BaseSettings):
    """Runtime configuration for hosts embedding the engine.

    Values are read from environment variables first, then from a *.env*
    file at the project root.  Every variable lives in the flat
    ``EMPATHAI_`` namespace.
    """

    model_config = SettingsConfigDict(
        env_prefix="EMPATHAI_",
        env_file=str(_PROJECT_ROOT / ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Logging ───────────────────────────────────────────────
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    # ── Engine defaults ───────────────────────────────────────
    signal_window_ms: float = DEFAULT_SIGNAL_WINDOW_MS
    analysis_interval_ms: float = DEFAULT_ANALYSIS_INTERVAL_MS
    pointer_throttle_ms: float = DEFAULT_POINTER_THROTTLE_MS
    confidence_threshold: float = DEFAULT_CONFIDENCE_THRESHOLD
    enable_pointer_tracking: bool = True
    enable_keyboard_tracking: bool = True
    debug_mode: bool = False


@lru_cache
def get_settings() -> Settings:
    """Return a cached :class:`Settings` singleton."""
    return Settings()


class EngineOptions(BaseModel):
    """Immutable engine configuration.

    Raises :class:`pydantic.ValidationError` (a :class:`ValueError`) naming
    the offending option when a value is unknown or out of range.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    # ── Feature toggles
    enable_pointer_tracking: bool = True
    enable_keyboard_tracking: bool = True
    enable_mic_tracking: bool = False
    enable_camera_tracking: bool = False

    # ── Performance tuning
    signal_window_ms: float = Field(
        DEFAULT_SIGNAL_WINDOW_MS, gt=0,
        description="Trailing span over which samples are retained.",
    )
    analysis_interval_ms: float = Field(
        DEFAULT_ANALYSIS_INTERVAL_MS, gt=0,
        description="Period between successive classification runs.",
    )
    pointer_throttle_ms: float = Field(
        DEFAULT_POINTER_THROTTLE_MS, gt=0,
        description="Minimum spacing between accepted pointer events.",
    )

    # ── Detection tuning
    confidence_threshold: float = Field(
        DEFAULT_CONFIDENCE_THRESHOLD, ge=0.0, le=1.0,
        description="Minimum confidence for a classification to be emitted.",
    )

    # ── Debugging
    debug_mode: bool = False

    @field_validator("enable_mic_tracking", "enable_camera_tracking")
    @classmethod
    def _reject_unimplemented_channels(cls, value: bool, info) -> bool:
        if value:
            raise ValueError(f"{info.field_name} is not supported by this engine")
        return value

    @property
    def tracks_anything(self) -> bool:
        return self.enable_pointer_tracking or self.enable_keyboard_tracking

    @classmethod
    def from_settings(cls, settings: Settings | None = None, **overrides) -> EngineOptions:
        """Build options from environment defaults, then apply *overrides*."""
        settings = settings or get_settings()
        values = {
            "signal_window_ms": settings.signal_window_ms,
            "analysis_interval_ms": settings.analysis_interval_ms,
            "pointer_throttle_ms": settings.pointer_throttle_ms,
            "confidence_threshold": settings.confidence_threshold,
            "enable_pointer_tracking": settings.enable_pointer_tracking,
            "enable_keyboard_tracking": settings.enable_keyboard_tracking,
            "debug_mode": settings.debug_mode,
        }
        values.update(overrides)
        return cls(**values)
