"""Signal sub-package: windowed buffers and feature extraction."""

from empathai.signals.buffers import SignalBuffers
from empathai.signals.features import extract_features, is_correction_key

__all__ = ["SignalBuffers", "extract_features", "is_correction_key"]
