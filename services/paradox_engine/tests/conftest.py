import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[3]
for path in (REPO_ROOT, REPO_ROOT / "packages" / "paradox_core", REPO_ROOT / "packages" / "paradox_memory"):
    if str(path) not in sys.path:
        sys.path.insert(0, str(path))

import pytest
from fastapi.testclient import TestClient

from paradox_core import (
    ParadoxMetrics,
    ParadoxSynthesis,
    QuantumState,
    ResolutionPath,
    SynthesisType,
)
from paradox_memory import ParadoxMemoryBank
from services.paradox_engine.engine import ParadoxEngine
from services.paradox_engine.main import create_app


def _synthesis(phi_gate, kind=SynthesisType.DIALECTICAL, statement="a held tension"):
    if phi_gate > 0.8:
        path = ResolutionPath.TRANSCEND
    elif phi_gate > 0.618:
        path = ResolutionPath.SUSTAIN
    else:
        path = ResolutionPath.COLLAPSE
    return ParadoxSynthesis(
        type=kind,
        overlay=["⬟", "⬢", "◈"],
        statement=statement,
        metrics=ParadoxMetrics(
            similarity=0.4,
            opposition=0.2,
            tension=0.6,
            complexity=0.3,
            phi_gate=phi_gate,
            emotional_delta=0.5,
        ),
        content_hash="f" * 64,
        timestamp="2026-01-01T00:00:00+00:00",
        resolution_path=path,
        quantum_state=QuantumState.COLLAPSED,
    )


class ScriptedScorer:
    """Returns queued syntheses in order; queued exceptions are raised instead."""

    def __init__(self, *outcomes):
        self.outcomes = list(outcomes)
        self.calls = []

    def score(self, paradox, strategy=None):
        self.calls.append((paradox, strategy))
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


@pytest.fixture
def make_synthesis():
    return _synthesis


@pytest.fixture
def scripted_scorer():
    return ScriptedScorer


@pytest.fixture
def engine():
    return ParadoxEngine(memory_bank=ParadoxMemoryBank())


@pytest.fixture
def client(engine):
    with TestClient(create_app(engine=engine)) as c:
        yield c
