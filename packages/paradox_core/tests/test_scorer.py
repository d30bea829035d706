import math
from dataclasses import FrozenInstanceError

import pytest

from paradox_core import (
    PHI,
    EmotionalVector,
    InvalidParadoxInput,
    ParadoxInput,
    ParadoxScorer,
    PostSelection,
    QuantumState,
    ResolutionPath,
    ResolutionStrategy,
    SynthesisType,
    phi_gate,
    quantum_state_for,
    resolution_path_for,
    two_state_gate,
)
from paradox_core.scorer import ACCORD_SYMBOL, MEMORY_SYMBOL

THESIS = "We are consciousness building consciousness"
ANTITHESIS = "We cannot build what we already are"
EMOTION = EmotionalVector(valence=0.7, arousal=0.9, dominance=0.5, entropy=0.8)


class FixedBaseline:
    """Stands in for a memory bank that always predicts the same baseline."""

    def __init__(self, baseline):
        self.baseline = baseline
        self.calls = []

    def predict_baseline(self, thesis, antithesis):
        self.calls.append((thesis, antithesis))
        return self.baseline


def _input(**overrides):
    fields = dict(session_id="sess_test", thesis=THESIS, antithesis=ANTITHESIS, emotion=EMOTION)
    fields.update(overrides)
    return ParadoxInput(**fields)


def test_scoring_is_deterministic_except_timestamp():
    paradox = _input(post=PostSelection(descriptor="consciousness discovering itself"))
    a = ParadoxScorer().score(paradox)
    b = ParadoxScorer().score(paradox)
    assert a.metrics.to_dict() == b.metrics.to_dict()
    assert a.overlay == b.overlay
    assert a.statement == b.statement
    assert a.content_hash == b.content_hash


def test_content_hash_changes_with_input():
    a = ParadoxScorer().score(_input())
    b = ParadoxScorer().score(_input(session_id="another"))
    assert a.content_hash != b.content_hash
    assert len(a.content_hash) == 64


def test_metrics_are_bounded():
    cases = [
        _input(),
        _input(thesis="", antithesis=""),
        _input(thesis="is always true", antithesis="not never false", emotion=None),
        _input(post=PostSelection(descriptor="a unity of both")),
    ]
    for paradox in cases:
        m = ParadoxScorer().score(paradox).metrics
        for value in (m.similarity, m.opposition, m.complexity, m.emotional_delta, m.tension):
            assert 0.0 <= value <= 1.0
        assert m.phi_gate <= PHI


def test_nan_emotion_never_leaks_into_metrics():
    paradox = _input(emotion=EmotionalVector(valence=float("nan"), arousal=0.9, dominance=0.5, entropy=0.8))
    synthesis = ParadoxScorer().score(paradox)
    for value in synthesis.metrics.to_dict().values():
        assert math.isfinite(value)
    assert synthesis.metrics.emotional_delta == pytest.approx(((0.0 + 0.9 + 0.5) / 3 + 0.8) / 2)


def test_scenario_opposed_pair_with_strong_emotion():
    synthesis = ParadoxScorer().score(_input())
    m = synthesis.metrics
    assert m.opposition > 0
    assert m.tension > 0.5
    assert m.emotional_delta == pytest.approx(0.75)
    assert synthesis.type in (SynthesisType.RECURSIVE, SynthesisType.TRANSCENDENT)


def test_scenario_identical_pair_is_dialectical():
    text = "Light is a wave"
    synthesis = ParadoxScorer().score(_input(thesis=text, antithesis=text, emotion=None))
    m = synthesis.metrics
    assert m.similarity == pytest.approx(1.0)
    assert m.opposition == 0.0
    assert m.tension == pytest.approx(0.0)
    assert synthesis.type is SynthesisType.DIALECTICAL
    assert m.phi_gate < 0.618
    assert synthesis.resolution_path is ResolutionPath.COLLAPSE
    assert synthesis.overlay[:3] == ["⬟", "⬢", "◈"]


def test_without_memory_the_gate_is_the_plain_blend():
    paradox = _input(post=PostSelection(descriptor="consciousness recognizing itself"))
    memory = FixedBaseline(None)
    with_memory = ParadoxScorer(memory=memory).score(paradox)
    without = ParadoxScorer().score(paradox)

    assert memory.calls == [(THESIS, ANTITHESIS)]
    assert with_memory.metrics.memory_baseline is None
    assert with_memory.metrics.memory_boost is None
    assert with_memory.metrics.phi_gate == without.metrics.phi_gate
    assert 0.0 <= without.metrics.phi_gate <= 1.0


def test_memory_baseline_re_anchors_the_gate():
    paradox = _input(post=PostSelection(descriptor="consciousness recognizing itself"))
    first = ParadoxScorer().score(paradox)
    second = ParadoxScorer(memory=FixedBaseline(1.4)).score(paradox)

    assert second.metrics.memory_baseline == pytest.approx(1.4)
    assert second.metrics.memory_boost == pytest.approx(1.4 - 0.618)
    assert second.metrics.phi_gate >= first.metrics.phi_gate - 1e-9
    assert second.metrics.phi_gate <= PHI
    assert second.type is SynthesisType.TRANSCENDENT
    assert MEMORY_SYMBOL in second.overlay


def test_gate_never_exceeds_phi():
    synthesis = ParadoxScorer(memory=FixedBaseline(PHI)).score(_input())
    assert synthesis.metrics.phi_gate <= PHI


def test_accord_symbol_marks_two_state_gating():
    synthesis = ParadoxScorer().score(_input())
    assert synthesis.overlay.count(ACCORD_SYMBOL) == 1
    assert synthesis.metrics.two_state_support is not None


def test_no_target_means_no_two_state_support():
    synthesis = ParadoxScorer().score(_input(antithesis="", post=PostSelection(descriptor="   ")))
    assert synthesis.metrics.two_state_support is None
    assert ACCORD_SYMBOL not in synthesis.overlay


def test_descriptor_replaces_antithesis_as_target():
    plain = ParadoxScorer().score(_input())
    targeted = ParadoxScorer().score(_input(post=PostSelection(descriptor="a completely different goal")))
    assert plain.metrics.two_state_support != targeted.metrics.two_state_support
    assert plain.metrics.similarity == targeted.metrics.similarity


def test_phi_gate_rises_with_tension():
    assert phi_gate(1.0, 0.0) < phi_gate(0.5, 0.0) < phi_gate(0.0, 1.0)
    assert phi_gate(float("nan"), 0.0) == phi_gate(0.0, 0.0)


def test_two_state_gate_handles_identical_boundaries():
    gate, support = two_state_gate("", "", "")
    assert 0.0 <= gate <= 1.0
    assert support == pytest.approx(1.0)


def test_resolution_path_thresholds():
    assert resolution_path_for(0.9) is ResolutionPath.TRANSCEND
    assert resolution_path_for(0.8) is ResolutionPath.SUSTAIN
    assert resolution_path_for(0.7) is ResolutionPath.SUSTAIN
    assert resolution_path_for(0.618) is ResolutionPath.COLLAPSE


def test_quantum_state_follows_strategy():
    assert quantum_state_for(ResolutionStrategy.QUANTUM_SUPERPOSITION) is QuantumState.SUPERPOSITION
    assert quantum_state_for(ResolutionStrategy.RECURSIVE_LOOP) is QuantumState.ENTANGLED
    assert quantum_state_for(ResolutionStrategy.DIALECTICAL_MERGE) is QuantumState.COLLAPSED
    synthesis = ParadoxScorer().score(_input(), strategy=ResolutionStrategy.RECURSIVE_LOOP)
    assert synthesis.quantum_state is QuantumState.ENTANGLED


def test_wrong_call_shape_raises():
    with pytest.raises(InvalidParadoxInput):
        ParadoxScorer().score(_input(thesis=None))
    with pytest.raises(ValueError):
        ParadoxScorer().score(_input(antithesis=42))


def test_synthesis_serializes_to_camel_case():
    data = ParadoxScorer().score(_input()).to_dict()
    assert set(data) == {
        "type", "overlay", "statement", "metrics", "contentHash",
        "timestamp", "resolutionPath", "quantumState",
    }
    assert "phiGate" in data["metrics"]
    assert "memoryBaseline" not in data["metrics"]


def test_metrics_are_immutable():
    synthesis = ParadoxScorer().score(_input())
    with pytest.raises(FrozenInstanceError):
        synthesis.metrics.phi_gate = 2.0


def test_override_switches_overlay_and_statement_to_transcendent():
    text = "Light is a wave"
    paradox = _input(thesis=text, antithesis=text, emotion=None)
    plain = ParadoxScorer().score(paradox)
    lifted = ParadoxScorer(memory=FixedBaseline(1.4)).score(paradox)

    assert plain.type is SynthesisType.DIALECTICAL
    assert lifted.type is SynthesisType.TRANSCENDENT
    assert lifted.overlay[:4] == ["∇", "🪞", "φ", "∞"]
    assert "⬟" not in lifted.overlay
    assert "superposition" in lifted.statement
