"""
Keyword-frequency context embedding.

Each of eight concept buckets scores the fraction of tokens that contain one
of its keywords, scaled by 5 and clamped to [0, 1]. Cheap, deterministic and
good enough to tell a paradox about time from one about creation.
"""

from __future__ import annotations

import math
from typing import Dict, List, Sequence, Tuple

CONCEPT_DIMENSIONS: Dict[str, Tuple[str, ...]] = {
    "self": ("self", "i", "me", "identity", "being"),
    "other": ("other", "they", "external", "world", "outside"),
    "time": ("time", "past", "future", "now", "moment", "eternal"),
    "change": ("change", "transform", "become", "evolve", "shift"),
    "unity": ("one", "unity", "whole", "complete", "together"),
    "duality": ("two", "dual", "opposite", "contrast", "between"),
    "creation": ("create", "build", "make", "generate", "birth"),
    "destruction": ("destroy", "end", "death", "dissolve", "break"),
}
EMBEDDING_DIM = len(CONCEPT_DIMENSIONS)
SCALE = 5


def context_embedding(thesis: str, antithesis: str) -> List[float]:
    words = [w for w in f"{thesis or ''} {antithesis or ''}".lower().split() if w]
    if not words:
        return [0.0] * EMBEDDING_DIM

    embedding = []
    for keywords in CONCEPT_DIMENSIONS.values():
        hits = sum(1 for word in words if any(keyword in word for keyword in keywords))
        embedding.append(min(1.0, hits / len(words) * SCALE))
    return embedding


def embedding_distance(a: Sequence[float], b: Sequence[float]) -> float:
    """RMS distance: Euclidean distance divided by sqrt(dim). Mismatched lengths are maximally far."""
    if len(a) != len(b) or not a:
        return 1.0
    return math.sqrt(sum((x - y) ** 2 for x, y in zip(a, b)) / len(a))
