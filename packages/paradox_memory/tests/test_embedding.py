import math

import pytest

from paradox_memory import CONCEPT_DIMENSIONS, context_embedding, embedding_distance


def test_embedding_has_one_value_per_concept():
    emb = context_embedding("We are consciousness building consciousness", "We cannot build what we already are")
    assert len(emb) == len(CONCEPT_DIMENSIONS) == 8
    assert all(0.0 <= v <= 1.0 for v in emb)


def test_empty_text_embeds_to_zeros():
    assert context_embedding("", "") == [0.0] * 8


def test_keyword_fraction_is_scaled():
    # 10 tokens, one creation hit and one destruction hit: 1/10 * 5 each
    emb = context_embedding("create aa bb cc dd", "destroy ee ff gg hh")
    assert emb[:6] == [0.0] * 6
    assert emb[6] == pytest.approx(0.5)
    assert emb[7] == pytest.approx(0.5)


def test_embedding_is_clamped():
    emb = context_embedding("time", "future")
    assert emb[2] == 1.0


def test_distance_is_rms():
    assert embedding_distance([0.0] * 8, [0.0] * 8) == 0.0
    assert embedding_distance([0.0] * 8, [1.0] * 8) == pytest.approx(1.0)
    assert embedding_distance([1.0] + [0.0] * 7, [0.0] * 8) == pytest.approx(math.sqrt(1 / 8))


def test_mismatched_lengths_are_far_apart():
    assert embedding_distance([0.0] * 8, [0.0] * 4) == 1.0
