from __future__ import annotations

import logging
import math
from datetime import datetime, timezone
from typing import Dict, List, Optional, Protocol, Tuple

from .emotion import emotional_intensity
from .integrity import payload_hash
from .models import (
    PHI,
    PHI_BASELINE,
    PHI_INVERSE,
    ParadoxInput,
    ParadoxMetrics,
    ParadoxSynthesis,
    QuantumState,
    ResolutionPath,
    ResolutionStrategy,
    SynthesisType,
    clamp,
    clamp01,
    finite_or,
)
from .opposition import antonym_opposition
from .similarity import text_similarity

logger = logging.getLogger(__name__)

EPS = 1e-6
PHI_GATE_K = 4
TWO_STATE_K = 8
MEMORY_BOOST_WEIGHT = 0.2
RETRO_SLOPE = 0.7
TRANSCENDENT_OVERRIDE = 0.68
TRANSCEND_THRESHOLD = 0.8
COMPLEXITY_THRESHOLD = 1.2
RECURSIVE_THRESHOLD = 0.6
MEMORY_SYMBOL_THRESHOLD = 0.1

ACCORD_SYMBOL = "✶"
MEMORY_SYMBOL = "🧠"
OVERLAYS: Dict[SynthesisType, Tuple[str, ...]] = {
    SynthesisType.TRANSCENDENT: ("∇", "🪞", "φ", "∞"),
    SynthesisType.RECURSIVE: ("◯", "◐", "◑", "●"),
    SynthesisType.DIALECTICAL: ("⬟", "⬢", "◈"),
}

_QUANTUM_STATES = {
    ResolutionStrategy.QUANTUM_SUPERPOSITION: QuantumState.SUPERPOSITION,
    ResolutionStrategy.RECURSIVE_LOOP: QuantumState.ENTANGLED,
}


class InvalidParadoxInput(ValueError):
    """The call shape is wrong (e.g. thesis is not a string). Numeric edge cases never raise this."""


class ScoringError(RuntimeError):
    def __init__(self, stage: str, message: str):
        super().__init__(f"{stage}: {message}")
        self.stage = stage


class BaselineSource(Protocol):
    def predict_baseline(self, thesis: str, antithesis: str) -> Optional[float]:
        ...


def sigmoid(x: float) -> float:
    return 1 / (1 + math.exp(-x))


def phi_gate(similarity: float, opposition: float) -> float:
    """Single-state gate: the further from unity and the more opposed, the higher."""
    similarity = clamp01(finite_or(similarity, 0.0))
    opposition = clamp01(finite_or(opposition, 0.0))
    tension = 1 - similarity + opposition
    return finite_or(sigmoid(PHI_GATE_K * (tension - PHI_INVERSE)), 0.5)


def two_state_gate(candidate: str, t1: str, t2: str, memory_boost: float = 0.0) -> Tuple[float, float]:
    """
    Gate a candidate statement by how well it is supported from both ends.

    Returns ``(gate, support)`` where support is sim(candidate, T1) * sim(candidate, T2),
    normalized by the overlap of T1 and T2 before it enters the sigmoid.
    """
    boost = finite_or(memory_boost, 0.0)
    overlap = max(EPS, text_similarity(t1, t2))
    support = finite_or(text_similarity(candidate, t1) * text_similarity(candidate, t2), 0.0)
    weak_gain = support / overlap + boost * MEMORY_BOOST_WEIGHT
    return finite_or(sigmoid(TWO_STATE_K * (weak_gain - PHI_INVERSE)), 0.5), support


def choose_type(tension: float, emotional_delta: float) -> SynthesisType:
    if emotional_delta + tension > COMPLEXITY_THRESHOLD:
        return SynthesisType.TRANSCENDENT
    if tension > RECURSIVE_THRESHOLD:
        return SynthesisType.RECURSIVE
    return SynthesisType.DIALECTICAL


def craft_statement(kind: SynthesisType, t1: str, t2: str) -> str:
    if kind is SynthesisType.TRANSCENDENT:
        return f'Both "{t1}" and "{t2}" exist in superposition; the paradox reveals they are movements of the same dance.'
    if kind is SynthesisType.RECURSIVE:
        return f"Through recursive layers: {t1} becomes {t2} becomes synthesis, each opposition creates new understanding."
    return f"{t1} transforms through {t2}: synthesis emerges from the tension between opposites."


def resolution_path_for(gate: float) -> ResolutionPath:
    if gate > TRANSCEND_THRESHOLD:
        return ResolutionPath.TRANSCEND
    if gate > PHI_BASELINE:
        return ResolutionPath.SUSTAIN
    return ResolutionPath.COLLAPSE


def quantum_state_for(strategy: ResolutionStrategy) -> QuantumState:
    return _QUANTUM_STATES.get(ResolutionStrategy(strategy), QuantumState.COLLAPSED)


def _require_text(value, name: str) -> str:
    if not isinstance(value, str):
        raise InvalidParadoxInput(f"{name} must be a string, got {type(value).__name__}")
    return value


class ParadoxScorer:
    """
    Turns a ParadoxInput into a ParadoxSynthesis.

    Output is a pure function of the input and, when a memory is attached, of
    the baseline that memory predicts for the pair. Only ``timestamp`` varies
    between identical calls and it is left out of ``content_hash``.
    """

    def __init__(self, memory: Optional[BaselineSource] = None):
        self.memory = memory

    def score(
        self,
        paradox: ParadoxInput,
        strategy: ResolutionStrategy = ResolutionStrategy.TRANSCENDENT_LEAP,
    ) -> ParadoxSynthesis:
        t1 = _require_text(paradox.thesis, "thesis")
        antithesis = _require_text(paradox.antithesis, "antithesis")
        _require_text(paradox.session_id, "sessionId")

        stage = "resolve_target"
        try:
            descriptor = paradox.post.descriptor if paradox.post is not None else None
            t2 = descriptor if descriptor and descriptor.strip() else antithesis

            stage = "memory_baseline"
            baseline = self.memory.predict_baseline(t1, antithesis) if self.memory is not None else None
            if baseline is not None:
                baseline = finite_or(baseline, PHI_BASELINE)
            memory_boost = baseline - PHI_BASELINE if baseline is not None else 0.0

            stage = "base_metrics"
            similarity = text_similarity(t1, antithesis)
            opposition = antonym_opposition(t1, antithesis)
            emotional_delta = emotional_intensity(paradox.emotion)
            gate_tension = 1 - similarity + opposition
            base_gate = phi_gate(similarity, opposition)
            complexity = clamp01(0.5 * (1 - similarity) + 0.5 * opposition)

            stage = "provisional_statement"
            provisional = choose_type(gate_tension, emotional_delta)
            candidate = craft_statement(provisional, t1, antithesis or t2)

            stage = "two_state_gate"
            support: Optional[float] = None
            g2 = 0.5
            if t2:
                g2, support = two_state_gate(candidate, t1, t2, memory_boost)

            stage = "blend"
            raw_gate = clamp01(0.5 * base_gate + 0.5 * g2)
            if baseline is not None:
                final_gate = clamp(baseline + (raw_gate - PHI_BASELINE) * RETRO_SLOPE, 0.0, PHI)
            else:
                final_gate = raw_gate
            final_gate = finite_or(final_gate, 0.5)

            stage = "finalize"
            kind = SynthesisType.TRANSCENDENT if final_gate > TRANSCENDENT_OVERRIDE else provisional
            statement = candidate if kind is provisional else craft_statement(kind, t1, antithesis or t2)
            overlay: List[str] = list(OVERLAYS[kind])
            if t2 and ACCORD_SYMBOL not in overlay:
                overlay.append(ACCORD_SYMBOL)
            if memory_boost > MEMORY_SYMBOL_THRESHOLD and MEMORY_SYMBOL not in overlay:
                overlay.append(MEMORY_SYMBOL)

            metrics = ParadoxMetrics(
                similarity=similarity,
                opposition=opposition,
                tension=clamp01(1 - similarity),
                complexity=complexity,
                phi_gate=final_gate,
                emotional_delta=emotional_delta,
                two_state_support=support,
                memory_baseline=baseline,
                memory_boost=memory_boost if baseline is not None else None,
            )

            stage = "content_hash"
            content_hash = payload_hash({
                "input": paradox.to_dict(),
                "type": kind.value,
                "statement": statement,
                "metrics": metrics.to_dict(),
                "overlay": overlay,
            })
        except InvalidParadoxInput:
            raise
        except Exception as e:
            raise ScoringError(stage, str(e)) from e

        logger.debug(
            f"Paradox scored: base {base_gate:.3f} two-state {g2:.3f} raw {raw_gate:.3f} "
            f"-> final {final_gate:.3f} ({kind.value}, baseline {baseline})"
        )

        return ParadoxSynthesis(
            type=kind,
            overlay=overlay,
            statement=statement,
            metrics=metrics,
            content_hash=content_hash,
            timestamp=datetime.now(timezone.utc).isoformat(),
            resolution_path=resolution_path_for(final_gate),
            quantum_state=quantum_state_for(strategy),
        )
