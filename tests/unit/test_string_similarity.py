from __future__ import annotations

import pytest

from dompetku.domain.similarity import levenshtein, rank_by_similarity, similarity


def test_levenshtein_classic_example():
    assert levenshtein("kitten", "sitting") == 3
    assert levenshtein("", "abc") == 3
    assert levenshtein("sama", "sama") == 0


def test_similarity_is_symmetric_and_bounded():
    pairs = [("tabungan", "tabungn"), ("saldo", "salod"), ("a", "xyz"), ("", "")]
    for a, b in pairs:
        score = similarity(a, b)
        assert score == similarity(b, a)
        assert 0.0 <= score <= 1.0
    assert similarity("investasi", "investasi") == 1.0


def test_rank_by_similarity_threshold_is_strict_unless_inclusive():
    # similarity("ab", "ac") == 0.5
    assert rank_by_similarity("ab", ["ac"], threshold=0.5) == []
    assert rank_by_similarity("ab", ["ac"], threshold=0.5, inclusive=True) == [("ac", 0.5)]


def test_rank_by_similarity_orders_by_score_and_keeps_ties_stable():
    ranked = rank_by_similarity("saldo", ["salto", "saldo", "salde"], threshold=0.3)
    assert ranked[0] == ("saldo", 1.0)
    assert [word for word, _ in ranked[1:]] == ["salto", "salde"]


def test_rank_by_similarity_limit():
    ranked = rank_by_similarity("aaaa", ["aaab", "aabb", "abbb"], threshold=0.0, limit=2)
    assert [word for word, _ in ranked] == ["aaab", "aabb"]


def test_similarity_matches_rapidfuzz_normalized_score():
    from rapidfuzz.distance import Levenshtein

    for a, b in [("tabungan", "tabungn"), ("kredit", "debit"), ("aset", "asset")]:
        assert similarity(a, b) == pytest.approx(Levenshtein.normalized_similarity(a, b))
