"""
Text similarity between a thesis and an antithesis.

Blends a normalized Levenshtein distance with word-set Jaccard overlap:

    similarity = 0.6 * (1 - distance / max_len) + 0.4 * overlap
"""

from __future__ import annotations

import math
from typing import Set

from rapidfuzz.distance import Levenshtein

from .models import clamp01

EDIT_WEIGHT = 0.6
OVERLAP_WEIGHT = 0.4


def word_set(text: str) -> Set[str]:
    return {w for w in (text or "").lower().split() if w}


def word_overlap(a: str, b: str) -> float:
    """Jaccard overlap of lowercase whitespace tokens. Both empty -> 1, one empty -> 0."""
    words_a, words_b = word_set(a), word_set(b)
    if not words_a and not words_b:
        return 1.0
    if not words_a or not words_b:
        return 0.0
    return len(words_a & words_b) / len(words_a | words_b)


def semantic_distance(a: str, b: str) -> float:
    """Edit distance over lowercased strings, normalized by the longer length."""
    a, b = (a or "").lower(), (b or "").lower()
    return Levenshtein.distance(a, b) / max(len(a), len(b), 1)


def text_similarity(a: str, b: str) -> float:
    similarity = EDIT_WEIGHT * (1 - semantic_distance(a, b)) + OVERLAP_WEIGHT * word_overlap(a, b)
    if math.isnan(similarity) or math.isinf(similarity):
        return 0.0
    return clamp01(similarity)
