from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional


PHI = 1.618033988749895
PHI_INVERSE = 1 / PHI
# φ - 1, the starting coherence of a paradox nobody has resolved yet
PHI_BASELINE = 0.618


class SynthesisType(str, Enum):
    DIALECTICAL = "dialectical"
    RECURSIVE = "recursive"
    TRANSCENDENT = "transcendent"


class ResolutionPath(str, Enum):
    COLLAPSE = "collapse"
    SUSTAIN = "sustain"
    TRANSCEND = "transcend"


class QuantumState(str, Enum):
    COLLAPSED = "collapsed"
    ENTANGLED = "entangled"
    SUPERPOSITION = "superposition"


class ResolutionStrategy(str, Enum):
    DIALECTICAL_MERGE = "dialectical_merge"
    RECURSIVE_LOOP = "recursive_loop"
    TRANSCENDENT_LEAP = "transcendent_leap"
    QUANTUM_SUPERPOSITION = "quantum_superposition"


class TargetSync(str, Enum):
    PASSIVE = "Passive"
    ACTIVE = "Active"
    RECURSIVE = "Recursive"


def finite_or(value: Any, fallback: float) -> float:
    """Return ``value`` as a float, or ``fallback`` if it is NaN, infinite or not a number."""
    try:
        number = float(value)
    except (TypeError, ValueError):
        return fallback
    if math.isnan(number) or math.isinf(number):
        return fallback
    return number


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def clamp01(value: float) -> float:
    return clamp(value, 0.0, 1.0)


@dataclass(frozen=True)
class EmotionalVector:
    valence: float = 0.0
    arousal: float = 0.5
    dominance: float = 0.5
    entropy: float = 0.5

    def sanitized(self) -> "EmotionalVector":
        """
        Replace non-finite fields with their defaults and clamp the rest:
        valence -> 0 in [-1, 1]; arousal, dominance, entropy -> 0.5 in [0, 1].
        """
        return EmotionalVector(
            valence=clamp(finite_or(self.valence, 0.0), -1.0, 1.0),
            arousal=clamp01(finite_or(self.arousal, 0.5)),
            dominance=clamp01(finite_or(self.dominance, 0.5)),
            entropy=clamp01(finite_or(self.entropy, 0.5)),
        )

    def to_dict(self) -> Dict[str, float]:
        return {
            "valence": self.valence,
            "arousal": self.arousal,
            "dominance": self.dominance,
            "entropy": self.entropy,
        }


@dataclass(frozen=True)
class PostSelection:
    target_coherence: Optional[float] = None
    target_sync: Optional[TargetSync] = None
    descriptor: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {}
        if self.target_coherence is not None:
            out["targetCoherence"] = self.target_coherence
        if self.target_sync is not None:
            out["targetSync"] = TargetSync(self.target_sync).value
        if self.descriptor is not None:
            out["descriptor"] = self.descriptor
        return out


@dataclass(frozen=True)
class ParadoxInput:
    session_id: str
    thesis: str
    antithesis: str
    emotion: Optional[EmotionalVector] = None
    post: Optional[PostSelection] = None
    metadata: Optional[Dict[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "sessionId": self.session_id,
            "thesis": self.thesis,
            "antithesis": self.antithesis,
        }
        if self.emotion is not None:
            out["emotion"] = self.emotion.to_dict()
        if self.post is not None:
            out["post"] = self.post.to_dict()
        if self.metadata:
            out["metadata"] = dict(self.metadata)
        return out


@dataclass(frozen=True)
class ParadoxMetrics:
    similarity: float
    opposition: float
    tension: float
    complexity: float
    phi_gate: float
    emotional_delta: float
    two_state_support: Optional[float] = None
    memory_baseline: Optional[float] = None
    memory_boost: Optional[float] = None

    def to_dict(self) -> Dict[str, float]:
        out = {
            "similarity": self.similarity,
            "opposition": self.opposition,
            "tension": self.tension,
            "complexity": self.complexity,
            "phiGate": self.phi_gate,
            "emotionalDelta": self.emotional_delta,
        }
        if self.two_state_support is not None:
            out["twoStateSupport"] = self.two_state_support
        if self.memory_baseline is not None:
            out["memoryBaseline"] = self.memory_baseline
        if self.memory_boost is not None:
            out["memoryBoost"] = self.memory_boost
        return out


@dataclass(frozen=True)
class ParadoxSynthesis:
    type: SynthesisType
    overlay: List[str]
    statement: str
    metrics: ParadoxMetrics
    content_hash: str
    timestamp: str
    resolution_path: ResolutionPath
    quantum_state: QuantumState

    @property
    def synthesis_symbol(self) -> str:
        return "".join(self.overlay)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type.value,
            "overlay": list(self.overlay),
            "statement": self.statement,
            "metrics": self.metrics.to_dict(),
            "contentHash": self.content_hash,
            "timestamp": self.timestamp,
            "resolutionPath": self.resolution_path.value,
            "quantumState": self.quantum_state.value,
        }
