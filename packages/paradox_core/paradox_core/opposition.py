from __future__ import annotations

from typing import FrozenSet, List, Tuple

from .models import clamp01

OPPOSITION_PAIRS: List[Tuple[str, str]] = [
    ("not", "is"),
    ("not", "are"),
    ("cannot", "can"),
    ("never", "always"),
    ("impossible", "possible"),
    ("false", "true"),
    ("wrong", "right"),
    ("build", "destroy"),
    ("create", "eliminate"),
    ("already", "becoming"),
]
PAIR_INCREMENT = 0.2

# negating contractions also count as a bare "not"
NEGATIONS = frozenset({
    "cannot", "can't", "isn't", "aren't", "won't", "don't",
    "doesn't", "didn't", "wasn't", "weren't",
})

_STRIP = ".,;:!?\"'()[]{}"


def tokens(text: str) -> FrozenSet[str]:
    words = set()
    for raw in (text or "").lower().split():
        word = raw.strip(_STRIP)
        if not word:
            continue
        words.add(word)
        if word in NEGATIONS:
            words.add("not")
    return frozenset(words)


def antonym_opposition(a: str, b: str) -> float:
    """
    Score how strongly two texts oppose each other on a fixed antonym table.

    Each pair adds 0.2 when one text holds one word and the other text holds
    its opposite, provided the texts do not agree on the pair (a text never
    opposes itself). The total is clamped to 1.
    """
    words_a, words_b = tokens(a), tokens(b)
    score = 0.0
    for first, second in OPPOSITION_PAIRS:
        pattern_a = (first in words_a, second in words_a)
        pattern_b = (first in words_b, second in words_b)
        if pattern_a == pattern_b:
            continue
        if (first in words_a and second in words_b) or (second in words_a and first in words_b):
            score += PAIR_INCREMENT
    return clamp01(score)
