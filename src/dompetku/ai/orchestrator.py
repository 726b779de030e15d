"""NLU orchestrator: normalizer -> sentiment -> dialogue -> lexicon.

Responsibilities:
- Run the four stages for one utterance
- Pick the sub-result that drives the reply:
  stress override > dialogue context > lexicon explanation > fallback
- Never propagate an exception: any fault becomes one apology envelope
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from dompetku.domain.enums import ResponseType
from dompetku.domain.models import (
    NormalizationResult,
    ResponseEnvelope,
    SentimentResult,
    Term,
    TermSuggestion,
)
from dompetku.observability.logging import get_logger, mask_user_id
from dompetku.observability.timing import timed

if TYPE_CHECKING:
    from dompetku.ai.lexicon import DomainLexicon
    from dompetku.ai.normalizer import LexicalNormalizer
    from dompetku.ai.sentiment import SentimentClassifier
    from dompetku.application.session.manager import ConversationSessionStore, DialogueTurn
    from dompetku.config.settings import Settings

logger: logging.Logger = get_logger(__name__)

APOLOGY_TEXT = "Maaf, terjadi kesalahan dalam memproses pesan Anda."
FALLBACK_TEXT = "Maaf, saya tidak mengerti. Silakan coba perintah lain."
SUGGESTION_PREFIX = "Mungkin maksud Anda: "

# INITIAL replies that answer the user directly instead of "not understood".
INFORMATIONAL_REPLIES = frozenset({"show_balance", "show_transactions"})


@dataclass(frozen=True, slots=True)
class TermHit:
    """A token of the utterance found in the lexicon."""

    token: str
    term: Term
    synonyms: tuple[str, ...] = ()
    category: str | None = None


@dataclass(slots=True)
class LexiconEnrichment:
    """Lexicon hits plus suggestions for every unknown token."""

    hits: list[TermHit] = field(default_factory=list)
    suggestions: dict[str, list[TermSuggestion]] = field(default_factory=dict)


@dataclass(slots=True)
class OrchestratorResult:
    """Reply envelope plus the analysis that produced it."""

    envelope: ResponseEnvelope
    normalization: NormalizationResult | None = None
    sentiment: SentimentResult | None = None
    turn: DialogueTurn | None = None
    enrichment: LexiconEnrichment | None = None
    error: bool = False
    timings: dict[str, float] = field(default_factory=dict)

    @property
    def standardized_text(self) -> str:
        return self.normalization.standardized if self.normalization else ""


def explain_term(hit: TermHit) -> str:
    """'Mengenai X, <definition>. Istilah ini juga dikenal sebagai ... Contohnya: ...'"""
    parts = [f"Mengenai {hit.token}, "]
    if hit.term.definition:
        parts.append(f"{hit.term.definition}. ")
    if hit.synonyms:
        parts.append(f"Istilah ini juga dikenal sebagai {', '.join(hit.synonyms)}. ")
    if hit.term.examples:
        parts.append(f"Contohnya: {hit.term.examples[0]}")
    return "".join(parts).strip()


class NLUOrchestrator:
    """Sequences the NLU stages and assembles one ResponseEnvelope."""

    def __init__(
        self,
        normalizer: LexicalNormalizer,
        classifier: SentimentClassifier,
        sessions: ConversationSessionStore,
        lexicon: DomainLexicon,
        settings: Settings,
    ) -> None:
        self._normalizer = normalizer
        self._classifier = classifier
        self._sessions = sessions
        self._lexicon = lexicon
        self._stress_threshold = settings.stress_override_threshold
        self._suggestion_limit = settings.term_suggestion_limit

    def process(
        self,
        user_id: str,
        text: str,
        metadata: dict[str, Any] | None = None,
    ) -> OrchestratorResult:
        """Runs the pipeline for one utterance. Never raises."""
        message_id = (metadata or {}).get("message_id")
        timings: dict[str, float] = {}
        try:
            with timed("normalizer", timings=timings):
                normalization = self._normalizer.normalize(text)
            standardized = normalization.standardized

            with timed("sentiment", timings=timings):
                sentiment = self._classifier.classify(standardized)

            with timed("dialogue", timings=timings):
                turn = self._sessions.advance(user_id, standardized)

            with timed("lexicon", timings=timings):
                enrichment = self.enrich(standardized)

            envelope = self._select_response(sentiment, turn, enrichment)
        except Exception as e:
            logger.error(
                "orchestrator_failed",
                extra={
                    "user_id": mask_user_id(user_id),
                    "message_id": message_id,
                    "error": type(e).__name__,
                },
                exc_info=True,
            )
            return OrchestratorResult(
                envelope=ResponseEnvelope(text=APOLOGY_TEXT, type=ResponseType.ERROR),
                error=True,
                timings=timings,
            )

        logger.info(
            "orchestrator_completed",
            extra={
                "user_id": mask_user_id(user_id),
                "message_id": message_id,
                "response_type": envelope.type,
                "stress_level": sentiment.stress_level,
                "dialogue_state": turn.state_after,
                "contains_dialect": normalization.contains_dialect,
            },
        )
        return OrchestratorResult(
            envelope=envelope,
            normalization=normalization,
            sentiment=sentiment,
            turn=turn,
            enrichment=enrichment,
            timings=timings,
        )

    def enrich(self, text: str) -> LexiconEnrichment:
        """Looks up every whitespace token; unknown tokens get suggestions."""
        enrichment = LexiconEnrichment()
        for token in text.split():
            word = token.strip("?!.,;:")
            if not word:
                continue
            term = self._lexicon.lookup(word)
            if term is not None:
                enrichment.hits.append(
                    TermHit(
                        token=word,
                        term=term,
                        synonyms=tuple(self._lexicon.synonyms_of(word)),
                        category=self._lexicon.category_of(word),
                    )
                )
            elif word not in enrichment.suggestions and not word.isdigit():
                enrichment.suggestions[word] = self._lexicon.suggest(
                    word, limit=self._suggestion_limit
                )
        return enrichment

    def _select_response(
        self,
        sentiment: SentimentResult,
        turn: DialogueTurn,
        enrichment: LexiconEnrichment,
    ) -> ResponseEnvelope:
        # 1. Stress overrides dialogue context (any open draft is left as-is).
        if sentiment.stress_level >= self._stress_threshold:
            return ResponseEnvelope(
                text=sentiment.message,
                suggestions=list(sentiment.suggestions),
                type=ResponseType.SUPPORT,
            )

        # 2. Dialogue in progress, or a draft that this turn completed/cancelled.
        if turn.touched_draft:
            action = None
            if turn.completed_draft:
                action = {"type": "create_transaction", "data": turn.completed_draft}
            return ResponseEnvelope(text=turn.reply, type=ResponseType.DIALOGUE, action=action)

        # 3. Explain the first financial term mentioned.
        if enrichment.hits:
            return ResponseEnvelope(
                text=explain_term(enrichment.hits[0]),
                suggestions=self._term_suggestions(enrichment),
                type=ResponseType.FINANCIAL_GUIDANCE,
            )

        # 4. Direct informational replies, else "not understood".
        if turn.reply_key in INFORMATIONAL_REPLIES:
            return ResponseEnvelope(text=turn.reply, type=ResponseType.DIALOGUE)
        return ResponseEnvelope(
            text=FALLBACK_TEXT,
            suggestions=self._term_suggestions(enrichment),
            type=ResponseType.FALLBACK,
        )

    def _term_suggestions(self, enrichment: LexiconEnrichment) -> list[str]:
        suggestions: list[str] = []
        for candidates in enrichment.suggestions.values():
            words = list(dict.fromkeys(candidate.word for candidate in candidates))
            if words:
                suggestions.append(SUGGESTION_PREFIX + ", ".join(words))
            if len(suggestions) >= self._suggestion_limit:
                break
        return suggestions
