from __future__ import annotations

import dataclasses
import logging
import math
import threading
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from paradox_core import (
    PHI_BASELINE,
    EmotionalVector,
    ParadoxSynthesis,
    ResolutionPath,
    ResolutionStrategy,
    SynthesisType,
)

logger = logging.getLogger(__name__)


class ResolutionState(str, Enum):
    UNRESOLVED = "unresolved"
    RESOLVING = "resolving"
    SYNTHESIZED = "synthesized"
    TRANSCENDED = "transcended"


TERMINAL_STATES = (ResolutionState.SYNTHESIZED, ResolutionState.TRANSCENDED)


def _utcnow() -> str:
    return datetime.now(timezone.utc).isoformat()


def _new_id(prefix: str) -> str:
    return f"{prefix}_{uuid.uuid4().hex[:12]}"


@dataclass
class ResolutionAttempt:
    attempt_id: str
    strategy: ResolutionStrategy
    session_id: Optional[str]
    generated_synthesis: str
    coherence_score: float
    emotional_resonance: EmotionalVector
    success: bool
    failure_reason: Optional[str]
    timestamp: str

    @classmethod
    def from_synthesis(
        cls,
        strategy: ResolutionStrategy,
        synthesis: ParadoxSynthesis,
        session_id: Optional[str] = None,
    ) -> "ResolutionAttempt":
        m = synthesis.metrics
        success = m.phi_gate > PHI_BASELINE
        return cls(
            attempt_id=_new_id("attempt"),
            strategy=ResolutionStrategy(strategy),
            session_id=session_id,
            generated_synthesis=synthesis.statement,
            coherence_score=m.phi_gate * 100,
            emotional_resonance=EmotionalVector(
                valence=math.tanh(m.similarity - 0.5),
                arousal=m.tension,
                dominance=m.complexity,
                entropy=m.emotional_delta,
            ),
            success=success,
            failure_reason=None if success else "Below φ-gate threshold",
            timestamp=_utcnow(),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "attemptId": self.attempt_id,
            "strategy": self.strategy.value,
            "sessionId": self.session_id,
            "generatedSynthesis": self.generated_synthesis,
            "coherenceScore": self.coherence_score,
            "emotionalResonance": self.emotional_resonance.to_dict(),
            "success": self.success,
            "failureReason": self.failure_reason,
            "timestamp": self.timestamp,
        }


@dataclass
class ResolutionRecord:
    """An active paradox and every attempt made to resolve it."""
    paradox_id: str
    thesis: str
    antithesis: str
    tension_score: float
    current_state: ResolutionState = ResolutionState.UNRESOLVED
    resolution_attempts: List[ResolutionAttempt] = field(default_factory=list)
    created_at: str = field(default_factory=_utcnow)
    last_modified_at: str = field(default_factory=_utcnow)
    synthesis: Optional[ParadoxSynthesis] = None
    memory_context: Optional[Dict[str, Any]] = None

    @property
    def is_terminal(self) -> bool:
        return self.current_state in TERMINAL_STATES

    def best_coherence(self) -> float:
        """Best phiGate this record has reached: its synthesis, else its best attempt."""
        if self.synthesis is not None:
            return self.synthesis.metrics.phi_gate
        if not self.resolution_attempts:
            return 0.0
        return max(a.coherence_score for a in self.resolution_attempts) / 100

    def to_dict(self) -> Dict[str, Any]:
        return {
            "paradoxId": self.paradox_id,
            "thesis": self.thesis,
            "antithesis": self.antithesis,
            "tensionScore": self.tension_score,
            "resolutionAttempts": [a.to_dict() for a in self.resolution_attempts],
            "currentState": self.current_state.value,
            "createdAt": self.created_at,
            "lastModifiedAt": self.last_modified_at,
            "synthesis": self.synthesis.to_dict() if self.synthesis is not None else None,
            "memoryContext": self.memory_context,
        }


@dataclass
class GenealogyEntry:
    parent_synthesis: str
    mutation_type: str
    child_syntheses: List[str] = field(default_factory=list)
    archived: Optional[Dict[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "parentSynthesis": self.parent_synthesis,
            "childSyntheses": list(self.child_syntheses),
            "mutationType": self.mutation_type,
            "archived": self.archived,
        }


def _mutation_type(synthesis: ParadoxSynthesis) -> str:
    return "transcendence" if synthesis.type is SynthesisType.TRANSCENDENT else "evolution"


def _snapshot(record: ResolutionRecord) -> ResolutionRecord:
    return dataclasses.replace(record, resolution_attempts=list(record.resolution_attempts))


def _entry_snapshot(entry: GenealogyEntry) -> GenealogyEntry:
    return dataclasses.replace(entry, child_syntheses=list(entry.child_syntheses))


class ResolutionRegistry:
    """
    In-memory set of active paradoxes plus the genealogy of resolved ones.

    State machine per record:
      unresolved -> synthesized | transcended  (attempt with phiGate > 0.618 / > 0.8)
      unresolved -> resolving                  (attempt below the gate)
      resolving  -> synthesized | transcended
    A resolved record never falls back to resolving and keeps its strongest
    synthesis, so a later attempt can lift synthesized to transcended but not
    the reverse. Records leave only through ``archive_resolved``.

    Every public read returns a copy taken under the lock; records are only
    mutated inside ``record_attempt``.
    """

    def __init__(self):
        self._records: Dict[str, ResolutionRecord] = {}
        self._genealogy: List[GenealogyEntry] = []
        self._lock = threading.RLock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    def get(self, paradox_id: str) -> Optional[ResolutionRecord]:
        with self._lock:
            record = self._records.get(paradox_id)
            return _snapshot(record) if record is not None else None

    def _find_by_pair(self, thesis: str, antithesis: str) -> Optional[ResolutionRecord]:
        for record in self._records.values():
            if record.thesis == thesis and record.antithesis == antithesis:
                return record
        return None

    def find_by_pair(self, thesis: str, antithesis: str) -> Optional[ResolutionRecord]:
        with self._lock:
            record = self._find_by_pair(thesis, antithesis)
            return _snapshot(record) if record is not None else None

    def _create(
        self,
        thesis: str,
        antithesis: str,
        tension_score: float,
        memory_context: Optional[Dict[str, Any]],
    ) -> ResolutionRecord:
        record = ResolutionRecord(
            paradox_id=_new_id("paradox"),
            thesis=thesis,
            antithesis=antithesis,
            tension_score=tension_score,
            memory_context=memory_context,
        )
        self._records[record.paradox_id] = record
        logger.info(f"New paradox created: {record.paradox_id}")
        return record

    def get_or_create(
        self,
        thesis: str,
        antithesis: str,
        tension_score: float,
        memory_context: Optional[Dict[str, Any]] = None,
    ) -> Tuple[ResolutionRecord, bool]:
        with self._lock:
            existing = self._find_by_pair(thesis, antithesis)
            if existing is not None:
                return _snapshot(existing), False
            return _snapshot(self._create(thesis, antithesis, tension_score, memory_context)), True

    def record_attempt(
        self,
        record: ResolutionRecord,
        attempt: ResolutionAttempt,
        synthesis: ParadoxSynthesis,
    ) -> Tuple[ResolutionRecord, ResolutionState]:
        """
        Attach an attempt to ``record`` and advance its state.

        If the record was archived while the attempt was being scored, the
        attempt lands on the pair's current active record, or on a new one
        opened with the same thesis, antithesis, tension and memory context.
        Returns a copy of the updated record and its state.
        """
        with self._lock:
            live = self._records.get(record.paradox_id)
            if live is None:
                live = self._find_by_pair(record.thesis, record.antithesis)
            if live is None:
                logger.info(f"Paradox {record.paradox_id} was archived during an attempt, reopening")
                live = self._create(record.thesis, record.antithesis, record.tension_score, record.memory_context)

            live.resolution_attempts.append(attempt)
            live.last_modified_at = attempt.timestamp

            if attempt.success:
                best = live.synthesis
                if best is None or synthesis.metrics.phi_gate >= best.metrics.phi_gate:
                    live.synthesis = synthesis
                    live.current_state = (
                        ResolutionState.TRANSCENDED
                        if synthesis.resolution_path is ResolutionPath.TRANSCEND
                        else ResolutionState.SYNTHESIZED
                    )
                self._ensure_genealogy(live)
                logger.info(f"Paradox resolved: {live.paradox_id} {live.current_state.value} via {synthesis.resolution_path.value}")
            elif not live.is_terminal:
                live.current_state = ResolutionState.RESOLVING
                logger.info(f"Paradox attempt below gate, {live.paradox_id} still resolving")
            return _snapshot(live), live.current_state

    def _ensure_genealogy(self, record: ResolutionRecord) -> GenealogyEntry:
        for entry in self._genealogy:
            if entry.parent_synthesis == record.paradox_id:
                return entry
        entry = GenealogyEntry(
            parent_synthesis=record.paradox_id,
            mutation_type=_mutation_type(record.synthesis),
        )
        self._genealogy.append(entry)
        return entry

    def archive_resolved(self) -> List[GenealogyEntry]:
        """Move every synthesized/transcended record into the genealogy. Returns copies of their entries."""
        with self._lock:
            resolved = [r for r in self._records.values() if r.is_terminal]
            archived = []
            for record in resolved:
                entry = self._ensure_genealogy(record)
                entry.archived = record.to_dict()
                archived.append(_entry_snapshot(entry))
                del self._records[record.paradox_id]
            if archived:
                logger.info(f"Archived {len(archived)} resolved paradoxes, {len(self._records)} remain active")
            return archived

    def records(self) -> List[ResolutionRecord]:
        with self._lock:
            return [_snapshot(r) for r in self._records.values()]

    def genealogy(self) -> List[GenealogyEntry]:
        with self._lock:
            return [_entry_snapshot(e) for e in self._genealogy]

    def count_by_state(self) -> Dict[str, int]:
        with self._lock:
            counts = {state.value: 0 for state in ResolutionState}
            for record in self._records.values():
                counts[record.current_state.value] += 1
            return counts
