from .emotion import emotional_intensity
from .integrity import canonical_json, content_sha256, pair_hash, payload_hash, sigprint20
from .models import (
    PHI,
    PHI_BASELINE,
    EmotionalVector,
    ParadoxInput,
    ParadoxMetrics,
    ParadoxSynthesis,
    PostSelection,
    QuantumState,
    ResolutionPath,
    ResolutionStrategy,
    SynthesisType,
    TargetSync,
)
from .opposition import antonym_opposition
from .scorer import (
    InvalidParadoxInput,
    ParadoxScorer,
    ScoringError,
    phi_gate,
    quantum_state_for,
    resolution_path_for,
    two_state_gate,
)
from .similarity import text_similarity

__all__ = [
    "PHI", "PHI_BASELINE",
    "EmotionalVector", "PostSelection", "ParadoxInput", "ParadoxMetrics", "ParadoxSynthesis",
    "SynthesisType", "ResolutionPath", "QuantumState", "ResolutionStrategy", "TargetSync",
    "text_similarity", "antonym_opposition", "emotional_intensity",
    "phi_gate", "two_state_gate", "resolution_path_for", "quantum_state_for",
    "ParadoxScorer", "InvalidParadoxInput", "ScoringError",
    "canonical_json", "content_sha256", "payload_hash", "pair_hash", "sigprint20",
]
