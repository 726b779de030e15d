"""Financial stress/confidence classifier and response template selection.

The intent matcher is pluggable; only the decision table that turns its
labels into levels and a canned reply lives here.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from dompetku.domain.enums import TemplateId
from dompetku.domain.models import IntentScore, SentimentResult
from dompetku.domain.protocols.intent_matcher import IntentMatcher
from dompetku.observability.logging import get_logger, log_fallback

logger: logging.Logger = get_logger(__name__)

LEVELS: dict[str, int] = {"high": 3, "medium": 2, "low": 1}
MAX_LEVEL = 3


@dataclass(frozen=True, slots=True)
class ResponseTemplate:
    template_id: TemplateId
    message: str
    suggestions: tuple[str, ...]


TEMPLATES: dict[TemplateId, ResponseTemplate] = {
    TemplateId.CRISIS_SUPPORT: ResponseTemplate(
        TemplateId.CRISIS_SUPPORT,
        "Saya mengerti Anda sedang menghadapi situasi keuangan yang sulit. "
        "Mari kita cari solusi bersama.",
        (
            "Membuat rencana pengelolaan utang",
            "Tips menghemat pengeluaran",
            "Konsultasi dengan ahli keuangan",
        ),
    ),
    TemplateId.BUDGET_ADJUSTMENT: ResponseTemplate(
        TemplateId.BUDGET_ADJUSTMENT,
        "Terlihat ada beberapa tantangan keuangan yang Anda hadapi. "
        "Saya bisa membantu Anda mengelolanya.",
        (
            "Analisis pengeluaran bulanan",
            "Strategi penyesuaian anggaran",
            "Tips meningkatkan penghasilan",
        ),
    ),
    TemplateId.GROWTH_PLANNING: ResponseTemplate(
        TemplateId.GROWTH_PLANNING,
        "Bagus! Anda sudah di jalur yang tepat dalam mengelola keuangan.",
        (
            "Tips investasi lanjutan",
            "Strategi diversifikasi",
            "Perencanaan keuangan jangka panjang",
        ),
    ),
    TemplateId.BEGINNER_HABITS: ResponseTemplate(
        TemplateId.BEGINNER_HABITS,
        "Mari mulai dengan langkah-langkah kecil dalam mengelola keuangan Anda.",
        (
            "Membuat anggaran sederhana",
            "Tips menabung rutin",
            "Dasar-dasar investasi",
        ),
    ),
}


def select_template(stress_level: int, confidence_level: int) -> ResponseTemplate:
    """Decision table over stress x confidence (both 0-3).

    stress 3 -> crisis support; stress 2 -> budget adjustment;
    confidence >= 2 -> growth planning; anything else -> beginner habits.
    """
    for name, level in (("stress_level", stress_level), ("confidence_level", confidence_level)):
        if not 0 <= level <= MAX_LEVEL:
            raise ValueError(f"{name} must be between 0 and {MAX_LEVEL}, got {level}")

    if stress_level == 3:
        return TEMPLATES[TemplateId.CRISIS_SUPPORT]
    if stress_level == 2:
        return TEMPLATES[TemplateId.BUDGET_ADJUSTMENT]
    if confidence_level >= 2:
        return TEMPLATES[TemplateId.GROWTH_PLANNING]
    return TEMPLATES[TemplateId.BEGINNER_HABITS]


def level_for_family(scores: list[IntentScore], family: str) -> int:
    """Level of the highest-weight label in a family (``stress``/``confidence``).

    Ties go to the label listed first. Unknown labels are ignored.
    """
    best: IntentScore | None = None
    for score in scores:
        prefix, _, grade = score.label.removeprefix("sentiment.").partition(".")
        if prefix != family or grade not in LEVELS:
            continue
        if best is None or score.weight > best.weight:
            best = score
    if best is None:
        return 0
    return LEVELS[best.label.rsplit(".", 1)[-1]]


class SentimentClassifier:
    """Scores an utterance on the stress and confidence scales."""

    def __init__(self, matcher: IntentMatcher) -> None:
        self._matcher = matcher

    def classify(self, text: str) -> SentimentResult:
        try:
            scores = self._matcher.classify_intents(text)
        except Exception as e:
            logger.warning("intent_matcher_failed", extra={"error": type(e).__name__})
            log_fallback(logger, "sentiment", reason="matcher_error")
            scores = []

        if not scores:
            log_fallback(logger, "sentiment", reason="no_label")

        stress = level_for_family(scores, "stress")
        confidence = level_for_family(scores, "confidence")
        template = select_template(stress, confidence)

        return SentimentResult(
            stress_level=stress,
            confidence_level=confidence,
            template_id=template.template_id,
            message=template.message,
            suggestions=template.suggestions,
        )
