from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List


@dataclass
class ParadoxMemory:
    """One archived resolution. Owned by the bank; updated in place when its pair recurs."""
    paradox_hash: str
    thesis: str
    antithesis: str
    resolution_path: str
    coherence_delta: float
    final_coherence: float
    timestamp_ms: int
    context_embedding: List[float]
    synthesis_symbol: str
    baseline_coherence: float
    sequence: int = 0  # insertion order, breaks timestamp ties on eviction

    def to_dict(self) -> Dict[str, Any]:
        return {
            "paradoxHash": self.paradox_hash,
            "thesis": self.thesis,
            "antithesis": self.antithesis,
            "resolutionPath": self.resolution_path,
            "coherenceDelta": self.coherence_delta,
            "finalCoherence": self.final_coherence,
            "timestampMs": self.timestamp_ms,
            "contextEmbedding": list(self.context_embedding),
            "synthesisSymbol": self.synthesis_symbol,
            "baselineCoherence": self.baseline_coherence,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any], sequence: int = 0) -> "ParadoxMemory":
        return cls(
            paradox_hash=data["paradoxHash"],
            thesis=data.get("thesis", ""),
            antithesis=data.get("antithesis", ""),
            resolution_path=data["resolutionPath"],
            coherence_delta=float(data["coherenceDelta"]),
            final_coherence=float(data.get("finalCoherence", data["baselineCoherence"])),
            timestamp_ms=int(data["timestampMs"]),
            context_embedding=[float(v) for v in data["contextEmbedding"]],
            synthesis_symbol=data.get("synthesisSymbol", ""),
            baseline_coherence=float(data["baselineCoherence"]),
            sequence=sequence,
        )
