from __future__ import annotations

import logging
import statistics
from enum import Enum
from typing import Any, Dict, List, Optional

from paradox_core import (
    PHI,
    PHI_BASELINE,
    ParadoxInput,
    ParadoxScorer,
    ResolutionStrategy,
    antonym_opposition,
    text_similarity,
)
from paradox_memory import ParadoxMemoryBank

from .config import EngineSettings
from .genealogy_store import GenealogyStore
from .registry import ResolutionAttempt, ResolutionRecord, ResolutionRegistry, ResolutionState

logger = logging.getLogger(__name__)

SIMILAR_QUERY_THRESHOLD = 0.5
MAX_QUERY_LIMIT = 50
MEMORY_INFLUENCE_STEP = 0.02
MEMORY_INFLUENCE_CAP = 0.4
IDLE_MEMORY_WEIGHT = 0.3


class MemoryQueryType(str, Enum):
    SIMILAR_PARADOXES = "similarParadoxes"
    MEMORY_STATS = "memoryStats"
    BASELINE_PREDICTION = "baselinePrediction"
    MEMORY_EVOLUTION = "memoryEvolution"


class BatchStatus(str, Enum):
    RESOLVED = "resolved"
    SKIPPED = "skipped"
    FAILED = "failed"


def tension_score(thesis: str, antithesis: str) -> float:
    return min(100.0, (1 - text_similarity(thesis, antithesis)) * 100 + antonym_opposition(thesis, antithesis) * 50)


class ParadoxEngine:
    """
    Owns one memory bank and one resolution registry.

    Built once at startup and handed to request handlers; there is no
    module-level engine. ``startup``/``shutdown`` load and save the memory
    snapshot when a path is configured.
    """

    def __init__(
        self,
        memory_bank: Optional[ParadoxMemoryBank] = None,
        registry: Optional[ResolutionRegistry] = None,
        genealogy_store: Optional[GenealogyStore] = None,
        default_strategy: ResolutionStrategy = ResolutionStrategy.TRANSCENDENT_LEAP,
        memory_path: Optional[str] = None,
    ):
        self.memory_bank = memory_bank if memory_bank is not None else ParadoxMemoryBank()
        self.registry = registry if registry is not None else ResolutionRegistry()
        self.scorer = ParadoxScorer(memory=self.memory_bank)
        self.genealogy_store = genealogy_store
        self.default_strategy = ResolutionStrategy(default_strategy)
        self.memory_path = memory_path

    @classmethod
    def from_settings(cls, settings: EngineSettings) -> "ParadoxEngine":
        bank = ParadoxMemoryBank(
            capacity=settings.memory_capacity,
            similarity_threshold=settings.similarity_threshold,
        )
        store = GenealogyStore(settings.genealogy_path) if settings.genealogy_path else None
        return cls(
            memory_bank=bank,
            genealogy_store=store,
            default_strategy=settings.default_strategy,
            memory_path=settings.memory_path,
        )

    def startup(self) -> None:
        if self.memory_path:
            self.memory_bank.load(self.memory_path)

    def shutdown(self) -> None:
        if self.memory_path:
            self.memory_bank.save(self.memory_path)

    # --- coherence ---

    def quantum_coherence(self) -> float:
        """
        Mean best phiGate of the active paradoxes blended with the bank's
        average baseline; the bank's weight grows with its size (2% per
        memory, capped at 40%). With nothing active it drifts from φ-1
        toward the bank's wisdom.
        """
        wisdom = self.memory_bank.average_baseline()
        records = self.registry.records()
        if not records:
            return min(PHI, wisdom * IDLE_MEMORY_WEIGHT + PHI_BASELINE * (1 - IDLE_MEMORY_WEIGHT))

        active = statistics.mean(r.best_coherence() for r in records)
        influence = min(MEMORY_INFLUENCE_CAP, len(self.memory_bank) * MEMORY_INFLUENCE_STEP)
        return active * (1 - influence) + wisdom * influence

    def engine_stats(self) -> Dict[str, Any]:
        records = self.registry.records()
        return {
            "activeParadoxes": len(records),
            "quantumCoherence": self.quantum_coherence(),
            "resolvedCount": sum(1 for r in records if r.synthesis is not None),
            "transcendedCount": sum(1 for r in records if r.current_state is ResolutionState.TRANSCENDED),
        }

    # --- operations ---

    def _memory_context(self, thesis: str, antithesis: str) -> Optional[Dict[str, Any]]:
        similar = self.memory_bank.find_similar(thesis, antithesis)
        if not similar:
            return None
        context = {
            "similarCount": len(similar),
            "avgBaseline": statistics.mean(m.baseline_coherence for m in similar),
            "learnedPatterns": "".join(m.synthesis_symbol for m in similar),
        }
        logger.info(
            f"Found {context['similarCount']} similar paradox memories, avg baseline {context['avgBaseline']:.3f}"
        )
        return context

    def _attempt(
        self,
        record: ResolutionRecord,
        paradox: ParadoxInput,
        strategy: ResolutionStrategy,
    ):
        synthesis = self.scorer.score(paradox, strategy=strategy)
        attempt = ResolutionAttempt.from_synthesis(strategy, synthesis, paradox.session_id)
        record, state = self.registry.record_attempt(record, attempt, synthesis)
        if attempt.success:
            self.memory_bank.store(record, synthesis)
        return record, synthesis, attempt, state

    def run(self, paradox: ParadoxInput, strategy: Optional[ResolutionStrategy] = None) -> Dict[str, Any]:
        """Score a paradox, attach the attempt to its active record and learn from it on success."""
        strategy = ResolutionStrategy(strategy or self.default_strategy)
        record = self.registry.find_by_pair(paradox.thesis, paradox.antithesis)
        if record is None:
            record, _ = self.registry.get_or_create(
                paradox.thesis,
                paradox.antithesis,
                tension_score=tension_score(paradox.thesis, paradox.antithesis),
                memory_context=self._memory_context(paradox.thesis, paradox.antithesis),
            )

        record, synthesis, attempt, state = self._attempt(record, paradox, strategy)
        stats = self.engine_stats()
        logger.info(
            f"Paradox synthesis complete: {record.paradox_id} {synthesis.type.value} "
            f"phiGate {synthesis.metrics.phi_gate:.3f} -> {state.value}, "
            f"coherence {stats['quantumCoherence']:.3f}, hash {synthesis.content_hash[:8]}"
        )
        return {
            "synthesis": synthesis.to_dict(),
            "paradoxId": record.paradox_id,
            "resolutionState": state.value,
            "engineStats": stats,
        }

    def resolve_batch(
        self,
        paradox_ids: List[str],
        strategy: Optional[ResolutionStrategy] = None,
        session_id: Optional[str] = None,
    ) -> Dict[str, Any]:
        strategy = ResolutionStrategy(strategy or self.default_strategy)
        logger.info(f"Batch resolving {len(paradox_ids)} paradoxes with strategy {strategy.value}")

        results: List[Dict[str, Any]] = []
        for paradox_id in paradox_ids:
            record = self.registry.get(paradox_id)
            if record is None:
                results.append({"paradoxId": paradox_id, "status": BatchStatus.SKIPPED.value, "reason": "not found"})
                continue
            if record.synthesis is not None:
                results.append({"paradoxId": paradox_id, "status": BatchStatus.SKIPPED.value, "reason": "already resolved"})
                continue

            paradox = ParadoxInput(
                session_id=session_id or "batch_resolution",
                thesis=record.thesis,
                antithesis=record.antithesis,
            )
            try:
                _, synthesis, attempt, _ = self._attempt(record, paradox, strategy)
            except Exception as e:
                logger.exception(f"Batch resolution of {paradox_id} failed")
                results.append({"paradoxId": paradox_id, "status": BatchStatus.FAILED.value, "error": str(e)})
                continue

            if attempt.success:
                results.append({
                    "paradoxId": paradox_id,
                    "status": BatchStatus.RESOLVED.value,
                    "synthesis": synthesis.to_dict(),
                })
            else:
                results.append({
                    "paradoxId": paradox_id,
                    "status": BatchStatus.FAILED.value,
                    "reason": attempt.failure_reason,
                    "coherence": attempt.coherence_score,
                })

        resolved = sum(1 for r in results if r["status"] == BatchStatus.RESOLVED.value)
        coherence = self.quantum_coherence()
        logger.info(f"Batch resolution complete: {resolved} resolved, quantum coherence {coherence:.3f}")
        records = self.registry.records()
        return {
            "results": results,
            "newQuantumCoherence": coherence,
            "engineStats": {
                "totalParadoxes": len(records),
                "resolvedCount": sum(1 for r in records if r.synthesis is not None),
            },
        }

    def archive_resolved(self) -> Dict[str, Any]:
        archived = self.registry.archive_resolved()
        write_failures = 0
        if self.genealogy_store is not None:
            for entry in archived:
                try:
                    self.genealogy_store.append(entry.to_dict())
                except Exception:
                    write_failures += 1
                    logger.exception(f"Failed to write genealogy entry for archived paradox {entry.parent_synthesis}")
        remaining = len(self.registry)
        return {
            "clearedCount": len(archived),
            "remainingCount": remaining,
            "archivedToGenealogy": len(archived),
            "newQuantumCoherence": self.quantum_coherence(),
            "genealogyDepth": len(self.registry.genealogy()),
            "genealogyWriteFailures": write_failures,
        }

    def state(self) -> Dict[str, Any]:
        records = self.registry.records()
        counts = self.registry.count_by_state()
        recent = sorted(records, key=lambda r: r.last_modified_at, reverse=True)[:5]
        return {
            "stats": {
                "totalParadoxes": len(records),
                **counts,
                "quantumCoherence": self.quantum_coherence(),
                "averageTension": statistics.mean(r.tension_score for r in records) if records else 0.0,
                "synthesisGenealogyDepth": len(self.registry.genealogy()),
                "memoryBankSize": len(self.memory_bank),
            },
            "recentParadoxes": [r.to_dict() for r in recent],
        }

    # --- memory queries ---

    def query_memory(
        self,
        query_type: str,
        thesis: Optional[str] = None,
        antithesis: Optional[str] = None,
        limit: int = 10,
    ) -> Dict[str, Any]:
        """Answer a memory query. Never raises: failures come back as ``{"success": False, "error": ...}``."""
        logger.info(f"Querying paradox memory: {query_type}")
        try:
            kind = MemoryQueryType(query_type)
        except ValueError:
            return {"success": False, "error": f"Unknown query type: {query_type}", "data": None}

        limit = max(1, min(MAX_QUERY_LIMIT, int(limit)))
        try:
            if kind is MemoryQueryType.MEMORY_STATS:
                data = self.memory_bank.stats()
            elif kind is MemoryQueryType.MEMORY_EVOLUTION:
                data = self.memory_bank.evolution(limit)
            else:
                if not thesis or not antithesis:
                    return {
                        "success": False,
                        "error": f"thesis and antithesis required for {kind.value} query",
                        "data": None,
                    }
                if kind is MemoryQueryType.SIMILAR_PARADOXES:
                    data = self._similar_paradoxes(thesis, antithesis, limit)
                else:
                    data = self._baseline_prediction(thesis, antithesis)
        except Exception as e:
            logger.exception(f"Memory query {kind.value} failed")
            return {"success": False, "error": str(e), "data": None}
        return {"success": True, "data": data, "error": None}

    def _similar_paradoxes(self, thesis: str, antithesis: str, limit: int) -> Dict[str, Any]:
        similar = self.memory_bank.find_similar(thesis, antithesis, threshold=SIMILAR_QUERY_THRESHOLD)
        baseline = self.memory_bank.baseline(thesis, antithesis)
        return {
            "similarMemories": [m.to_dict() for m in similar[:limit]],
            "predictedBaseline": baseline,
            "memoryBoost": baseline - PHI_BASELINE,
            "totalSimilar": len(similar),
        }

    def _baseline_prediction(self, thesis: str, antithesis: str) -> Dict[str, Any]:
        similar = self.memory_bank.find_similar(thesis, antithesis)
        baseline = self.memory_bank.baseline(thesis, antithesis)
        return {
            "predictedBaseline": baseline,
            "defaultBaseline": PHI_BASELINE,
            "memoryEnhancement": baseline - PHI_BASELINE,
            "confidence": min(1.0, len(similar) * 0.2),
            "contributingMemories": len(similar),
            "learnedPatterns": "".join(m.synthesis_symbol for m in similar),
        }
