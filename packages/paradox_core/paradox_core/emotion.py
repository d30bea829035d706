from __future__ import annotations

from typing import Optional

from .models import EmotionalVector, clamp01, finite_or

DEFAULT_INTENSITY = 0.5


def emotional_intensity(emotion: Optional[EmotionalVector]) -> float:
    """
    Collapse an emotional vector into one instability score in [0, 1].

    intensity = (|valence| + arousal + dominance) / 3, instability = entropy,
    result = (intensity + instability) / 2. Fields are sanitized first, so
    NaN or infinite inputs fall back to their defaults instead of leaking out.
    """
    if emotion is None:
        return DEFAULT_INTENSITY
    safe = emotion.sanitized()
    intensity = (abs(safe.valence) + safe.arousal + safe.dominance) / 3
    instability = safe.entropy
    return clamp01(finite_or((intensity + instability) / 2, DEFAULT_INTENSITY))
