"""Deterministic keyword intent matcher for stress/confidence labels.

Stands in for a trained text classifier behind the `IntentMatcher` protocol.
Each labelled phrase is reduced to its content words; an utterance scores
``matched words / phrase words`` against every phrase and a label keeps its
best score. Phrases scoring below `min_weight` are ignored.
"""

from __future__ import annotations

import re
from collections.abc import Iterable

from dompetku.domain.models import IntentScore

# Phrases are written in standard Indonesian (the matcher sees normalized text).
DEFAULT_PHRASES: tuple[tuple[str, str], ...] = (
    # stress.high
    ("saya khawatir tidak bisa bayar utang", "stress.high"),
    ("uang saya tidak cukup untuk kebutuhan", "stress.high"),
    ("bingung bagaimana bayar tagihan", "stress.high"),
    ("takut bangkrut", "stress.high"),
    ("terlilit utang", "stress.high"),
    # stress.medium
    ("pengeluaran lebih besar dari pemasukan", "stress.medium"),
    ("butuh tambahan penghasilan", "stress.medium"),
    ("tabungan menipis", "stress.medium"),
    # stress.low
    ("ingin mengatur keuangan lebih baik", "stress.low"),
    ("mau mulai nabung", "stress.low"),
    ("bagaimana cara investasi yang baik", "stress.low"),
    # confidence.high
    ("berhasil menabung bulan ini", "confidence.high"),
    ("investasi saya berkembang", "confidence.high"),
    ("bisa mencapai target keuangan", "confidence.high"),
    # confidence.medium
    ("mulai bisa mengatur pengeluaran", "confidence.medium"),
    ("ada sedikit tabungan", "confidence.medium"),
    # confidence.low
    ("ragu dengan keputusan keuangan", "confidence.low"),
    ("tidak yakin dengan investasi", "confidence.low"),
)

# Function words carry no signal on their own.
STOPWORDS: frozenset[str] = frozenset({
    "saya", "aku", "yang", "untuk", "dengan", "dari", "di", "ke", "ini", "itu",
    "bisa", "ada", "mau", "ingin", "cara", "dan",
})

_WORD = re.compile(r"[a-z0-9]+")


def content_words(text: str) -> frozenset[str]:
    return frozenset(word for word in _WORD.findall(text.lower()) if word not in STOPWORDS)


class KeywordIntentMatcher:
    """Token-overlap matcher over a fixed list of labelled phrases."""

    def __init__(
        self,
        phrases: Iterable[tuple[str, str]] = DEFAULT_PHRASES,
        min_weight: float = 0.6,
    ) -> None:
        self._phrases: list[tuple[frozenset[str], str]] = []
        for phrase, label in phrases:
            words = content_words(phrase)
            if words:
                self._phrases.append((words, label))
        self._min_weight = min_weight

    def classify_intents(self, text: str) -> list[IntentScore]:
        words = content_words(text or "")
        if not words:
            return []

        best: dict[str, float] = {}
        for phrase_words, label in self._phrases:
            weight = len(phrase_words & words) / len(phrase_words)
            if weight >= self._min_weight and weight > best.get(label, 0.0):
                best[label] = weight

        return [
            IntentScore(label=label, weight=round(weight, 3))
            for label, weight in sorted(best.items(), key=lambda item: item[1], reverse=True)
        ]
