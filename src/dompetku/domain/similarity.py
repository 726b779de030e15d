"""String similarity based on normalized Levenshtein distance.

similarity(a, b) = 1 - levenshtein(a, b) / max(len(a), len(b))

The score is symmetric, bounded in [0, 1] and equals 1 for identical strings.
"""

from __future__ import annotations

from collections.abc import Iterable

from rapidfuzz.distance import Levenshtein


def levenshtein(a: str, b: str) -> int:
    """Edit distance (insertions, deletions, substitutions) between two strings."""
    return Levenshtein.distance(a, b)


def similarity(a: str, b: str) -> float:
    """Normalized similarity in [0, 1]; two empty strings are identical."""
    longest = max(len(a), len(b))
    if longest == 0:
        return 1.0
    return 1.0 - levenshtein(a, b) / longest


def rank_by_similarity(
    query: str,
    candidates: Iterable[str],
    threshold: float,
    limit: int | None = None,
    inclusive: bool = False,
) -> list[tuple[str, float]]:
    """Scores candidates against query and keeps those above threshold.

    Results are sorted by score, highest first. Ties keep the order in which
    candidates were given (`sorted` is stable).

    Args:
        query: token to match
        candidates: known words, in insertion order
        threshold: minimum score
        limit: maximum number of results (None = all)
        inclusive: accept scores equal to the threshold
    """
    scored: list[tuple[str, float]] = []
    for candidate in candidates:
        score = similarity(query, candidate)
        if score > threshold or (inclusive and score == threshold):
            scored.append((candidate, score))

    ranked = sorted(scored, key=lambda item: item[1], reverse=True)
    if limit is not None:
        return ranked[:limit]
    return ranked
