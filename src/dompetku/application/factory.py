"""Factory for the assistant pipeline.

Responsibilities:
- Know infra and settings
- Build every stage with explicit instances (no module singletons), so
  several isolated pipelines can live in one process
- Return an `AssistantService`

No business logic here.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from dompetku.ai.intent_matcher import KeywordIntentMatcher
from dompetku.ai.lexicon import DomainLexicon
from dompetku.ai.normalizer import LexicalNormalizer
from dompetku.ai.orchestrator import NLUOrchestrator
from dompetku.ai.sentiment import SentimentClassifier
from dompetku.application.assistant import AssistantService
from dompetku.application.router import CommandRouter
from dompetku.application.session.manager import ConversationSessionStore
from dompetku.config.settings import Settings, get_settings
from dompetku.domain.protocols.finance_backend import FinanceBackend
from dompetku.domain.protocols.intent_matcher import IntentMatcher
from dompetku.domain.protocols.session_store import SessionRepository
from dompetku.observability.logging import get_logger

logger = get_logger(__name__)


@dataclass(slots=True)
class AssistantComponents:
    """Every stage of one pipeline, exposed for wiring and tests."""

    assistant: AssistantService
    orchestrator: NLUOrchestrator
    router: CommandRouter
    sessions: ConversationSessionStore
    normalizer: LexicalNormalizer
    lexicon: DomainLexicon
    classifier: SentimentClassifier


def build_components(
    *,
    settings: Settings | None = None,
    backend: FinanceBackend | None = None,
    matcher: IntentMatcher | None = None,
    repository: SessionRepository | None = None,
    redis_client: Any | None = None,
    clock: Callable[[], datetime] | None = None,
) -> AssistantComponents:
    """Builds a full pipeline; explicit arguments win over settings."""
    settings = settings or get_settings()

    from dompetku.infra import InMemoryFinanceBackend, create_session_repository

    if repository is None:
        repository = create_session_repository(settings.session_store_backend, redis_client)
        logger.debug(
            "factory: created session repository",
            extra={"backend": settings.session_store_backend},
        )
    if backend is None:
        backend = InMemoryFinanceBackend()
        logger.debug("factory: using in-memory finance backend")

    store_kwargs: dict[str, Any] = {"timeout_seconds": settings.session_timeout_seconds}
    if clock is not None:
        store_kwargs["clock"] = clock
    sessions = ConversationSessionStore(repository, **store_kwargs)

    normalizer = LexicalNormalizer(
        suggestion_threshold=settings.dialect_similarity_threshold,
        suggestion_limit=settings.dialect_suggestion_limit,
    )
    lexicon = DomainLexicon(suggestion_threshold=settings.lexicon_similarity_threshold)
    classifier = SentimentClassifier(
        matcher or KeywordIntentMatcher(min_weight=settings.intent_min_weight)
    )
    orchestrator = NLUOrchestrator(
        normalizer=normalizer,
        classifier=classifier,
        sessions=sessions,
        lexicon=lexicon,
        settings=settings,
    )
    router = CommandRouter(backend)
    assistant = AssistantService(orchestrator=orchestrator, router=router, sessions=sessions)

    return AssistantComponents(
        assistant=assistant,
        orchestrator=orchestrator,
        router=router,
        sessions=sessions,
        normalizer=normalizer,
        lexicon=lexicon,
        classifier=classifier,
    )


def build_assistant(
    settings: Settings | None = None,
    backend: FinanceBackend | None = None,
    matcher: IntentMatcher | None = None,
    repository: SessionRepository | None = None,
) -> AssistantService:
    """Shortcut returning only the AssistantService."""
    return build_components(
        settings=settings, backend=backend, matcher=matcher, repository=repository
    ).assistant
