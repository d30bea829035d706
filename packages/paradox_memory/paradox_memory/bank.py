from __future__ import annotations

import dataclasses
import json
import logging
import os
import statistics
import threading
import time
from typing import Any, Callable, Dict, List, Optional

from paradox_core import PHI, PHI_BASELINE, ParadoxSynthesis, pair_hash

from .embedding import context_embedding, embedding_distance
from .models import ParadoxMemory

logger = logging.getLogger(__name__)

DEFAULT_CAPACITY = 100
DEFAULT_THRESHOLD = 0.3
MAX_SIMILAR = 5
DELTA_WEIGHT = 0.3
PROGRESSIVE_STEP = 0.05
PROGRESSIVE_CAP = 0.2


def _now_ms() -> int:
    return int(time.time() * 1000)


class ParadoxMemoryBank:
    """
    Bounded memory of past paradox resolutions.

    Remembers the best coherence ever reached for each (thesis, antithesis)
    pair and turns the memories of similar pairs into a rising starting
    baseline for new ones. Entries are evicted oldest-first once the bank
    grows past ``capacity``.

    Every read and write holds one re-entrant lock and reads hand out copies,
    so a reader never sees an entry halfway through an update or eviction.
    """

    def __init__(
        self,
        capacity: int = DEFAULT_CAPACITY,
        similarity_threshold: float = DEFAULT_THRESHOLD,
        clock: Optional[Callable[[], int]] = None,
    ):
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self.capacity = capacity
        self.similarity_threshold = similarity_threshold
        self._clock = clock or _now_ms
        self._memories: Dict[str, ParadoxMemory] = {}
        self._sequence = 0
        self._lock = threading.RLock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._memories)

    @staticmethod
    def paradox_hash(thesis: str, antithesis: str) -> str:
        return pair_hash(thesis, antithesis)

    @staticmethod
    def embed(thesis: str, antithesis: str) -> List[float]:
        return context_embedding(thesis, antithesis)

    def memories(self) -> List[ParadoxMemory]:
        with self._lock:
            return [dataclasses.replace(m) for m in self._memories.values()]

    def get(self, thesis: str, antithesis: str) -> Optional[ParadoxMemory]:
        with self._lock:
            memory = self._memories.get(self.paradox_hash(thesis, antithesis))
            return dataclasses.replace(memory) if memory is not None else None

    def find_similar(
        self,
        thesis: str,
        antithesis: str,
        threshold: Optional[float] = None,
        limit: int = MAX_SIMILAR,
    ) -> List[ParadoxMemory]:
        """Memories within ``threshold`` embedding distance, nearest first, at most ``limit``."""
        threshold = self.similarity_threshold if threshold is None else threshold
        query = self.embed(thesis, antithesis)
        with self._lock:
            scored = [
                (embedding_distance(query, m.context_embedding), m.sequence, m)
                for m in self._memories.values()
            ]
            scored = [s for s in scored if s[0] <= threshold]
            scored.sort(key=lambda s: (s[0], s[1]))
            return [dataclasses.replace(m) for _, _, m in scored[:limit]]

    def predict_baseline(self, thesis: str, antithesis: str) -> Optional[float]:
        """Learned baseline for the pair, or None if nothing similar has been resolved yet."""
        similar = self.find_similar(thesis, antithesis)
        if not similar:
            return None
        max_baseline = max(m.baseline_coherence for m in similar)
        avg_delta = statistics.mean(m.coherence_delta for m in similar)
        progressive_bonus = min(PROGRESSIVE_CAP, len(similar) * PROGRESSIVE_STEP)
        return min(PHI, max_baseline + avg_delta * DELTA_WEIGHT + progressive_bonus)

    def baseline(self, thesis: str, antithesis: str) -> float:
        predicted = self.predict_baseline(thesis, antithesis)
        return PHI_BASELINE if predicted is None else predicted

    def store(self, resolution: Any, synthesis: ParadoxSynthesis) -> ParadoxMemory:
        """
        Remember a resolution. ``resolution`` is anything with ``thesis`` and
        ``antithesis`` attributes (normally a ResolutionRecord).

        A recurring pair keeps the max of its baseline and delta and gets a
        fresh timestamp; a new pair is inserted and the oldest entries are
        evicted if the bank is over capacity.
        """
        thesis, antithesis = resolution.thesis, resolution.antithesis
        key = self.paradox_hash(thesis, antithesis)
        gate = synthesis.metrics.phi_gate

        with self._lock:
            self._sequence += 1
            existing = self._memories.get(key)
            if existing is not None:
                existing.coherence_delta = max(existing.coherence_delta, gate - PHI_BASELINE)
                existing.baseline_coherence = max(existing.baseline_coherence, gate)
                existing.final_coherence = gate
                existing.timestamp_ms = self._clock()
                existing.sequence = self._sequence
                logger.info(
                    f"Updated paradox memory {key[:8]}: baseline {existing.baseline_coherence:.3f}"
                )
                return dataclasses.replace(existing)

            memory = ParadoxMemory(
                paradox_hash=key,
                thesis=thesis,
                antithesis=antithesis,
                resolution_path=synthesis.resolution_path.value,
                coherence_delta=gate - PHI_BASELINE,
                final_coherence=gate,
                timestamp_ms=self._clock(),
                context_embedding=self.embed(thesis, antithesis),
                synthesis_symbol=synthesis.synthesis_symbol,
                baseline_coherence=gate,
                sequence=self._sequence,
            )
            self._memories[key] = memory
            self._evict()
            logger.info(f"Stored paradox memory {key[:8]}: delta {memory.coherence_delta:.3f}")
            return dataclasses.replace(memory)

    def _evict(self) -> None:
        overflow = len(self._memories) - self.capacity
        if overflow <= 0:
            return
        oldest = sorted(self._memories.values(), key=lambda m: (m.timestamp_ms, m.sequence))[:overflow]
        for memory in oldest:
            del self._memories[memory.paradox_hash]
        logger.debug(f"Evicted {overflow} paradox memories")

    def average_baseline(self) -> float:
        with self._lock:
            if not self._memories:
                return PHI_BASELINE
            return statistics.mean(m.baseline_coherence for m in self._memories.values())

    def stats(self) -> Dict[str, Any]:
        with self._lock:
            memories = list(self._memories.values())
            total = len(memories)
            paths: Dict[str, int] = {}
            for m in memories:
                paths[m.resolution_path] = paths.get(m.resolution_path, 0) + 1
            avg_baseline = self.average_baseline()
            return {
                "totalMemories": total,
                "capacity": self.capacity,
                "averageBaseline": avg_baseline,
                "averageDelta": statistics.mean(m.coherence_delta for m in memories) if memories else 0.0,
                "resolutionPaths": paths,
                "memoryBankWisdom": avg_baseline,
                "oldestMemory": min(m.timestamp_ms for m in memories) if memories else None,
                "newestMemory": max(m.timestamp_ms for m in memories) if memories else None,
            }

    def evolution(self, limit: int = 10) -> Dict[str, Any]:
        with self._lock:
            ordered = sorted(self._memories.values(), key=lambda m: (m.timestamp_ms, m.sequence))
            recent = ordered[-limit:] if limit > 0 else []
            timeline = [
                {
                    "timestampMs": m.timestamp_ms,
                    "baselineCoherence": m.baseline_coherence,
                    "coherenceDelta": m.coherence_delta,
                    "resolutionPath": m.resolution_path,
                    "synthesisSymbol": m.synthesis_symbol,
                    "sequenceNumber": i + 1,
                }
                for i, m in enumerate(recent)
            ]

        velocity = 0.0
        if len(timeline) > 1:
            velocity = (timeline[-1]["baselineCoherence"] - timeline[0]["baselineCoherence"]) / len(timeline)
        return {
            "evolutionTimeline": timeline,
            "coherenceTrend": [e["baselineCoherence"] for e in timeline],
            "resolutionEvolution": [e["resolutionPath"] for e in timeline],
            "symbolEvolution": [e["synthesisSymbol"] for e in timeline],
            "learningVelocity": velocity,
        }

    def save(self, path: str) -> None:
        with self._lock:
            ordered = sorted(self._memories.values(), key=lambda m: m.sequence)
            payload = {"capacity": self.capacity, "memories": [m.to_dict() for m in ordered]}
        directory = os.path.dirname(path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(payload, f, ensure_ascii=False)
        logger.info(f"Saved {len(payload['memories'])} paradox memories to {path}")

    def load(self, path: str) -> int:
        """Replace the bank's contents with a snapshot written by ``save``. Returns the entry count."""
        if not os.path.exists(path):
            logger.warning(f"Paradox memory snapshot {path} not found. Starting empty.")
            return 0
        with open(path, "r", encoding="utf-8") as f:
            payload = json.load(f)

        with self._lock:
            self._memories = {}
            self._sequence = 0
            for entry in payload.get("memories", []):
                self._sequence += 1
                memory = ParadoxMemory.from_dict(entry, sequence=self._sequence)
                self._memories[memory.paradox_hash] = memory
            self._evict()
            count = len(self._memories)
        logger.info(f"Loaded {count} paradox memories from {path}")
        return count
