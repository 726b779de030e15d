"""ConversationSessionStore: the single owner of dialogue sessions.

Every read-modify-write of a session (load, expiry check, transition, save)
runs under a per-user lock, so two messages from the same user are applied
one after the other while different users proceed independently.

Expiry is lazy: a session whose last activity is older than the timeout is
reset to INITIAL (empty draft) before the incoming text is applied, and
`current()` reports it as absent. `purge_expired()` only reclaims memory.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any

from dompetku.application.dialogue import DialogueEngine
from dompetku.application.session.locks import KeyedLock
from dompetku.domain.protocols.session_store import SessionRepository
from dompetku.domain.session import (
    ConversationSession,
    DialogueSignal,
    DialogueState,
    TransactionDraft,
)
from dompetku.observability.logging import get_logger, mask_user_id

DEFAULT_TIMEOUT_SECONDS = 300


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


@dataclass(frozen=True, slots=True)
class DialogueTurn:
    """What one utterance did to a user's dialogue."""

    user_id: str
    state_before: DialogueState
    state_after: DialogueState
    signal: DialogueSignal
    reply_key: str
    reply: str
    draft: TransactionDraft
    completed_draft: dict[str, Any] | None = None
    expired: bool = False

    @property
    def is_active(self) -> bool:
        """True when a draft is being collected after this turn."""
        return self.state_after != DialogueState.INITIAL

    @property
    def touched_draft(self) -> bool:
        """True when the turn continued, finished or cancelled a draft."""
        return self.state_before != DialogueState.INITIAL or self.is_active


class ConversationSessionStore:
    """Per-user dialogue state with a time-boxed lifetime."""

    def __init__(
        self,
        repository: SessionRepository,
        engine: DialogueEngine | None = None,
        timeout_seconds: int = DEFAULT_TIMEOUT_SECONDS,
        clock: Callable[[], datetime] = _utcnow,
        logger: logging.Logger | None = None,
    ) -> None:
        self._repository = repository
        self._engine = engine or DialogueEngine()
        self._timeout = timedelta(seconds=timeout_seconds)
        self._timeout_seconds = timeout_seconds
        self._clock = clock
        self._locks = KeyedLock()
        self._logger = logger or get_logger(__name__)

    @property
    def timeout(self) -> timedelta:
        return self._timeout

    def advance(self, user_id: str, text: str) -> DialogueTurn:
        """Applies text to the user's dialogue and persists the result."""
        with self._locks.hold(user_id):
            now = self._clock()
            session = self._repository.load(user_id)
            expired = False

            if session is None:
                session = ConversationSession(user_id=user_id, created_at=now, last_activity=now)
            elif session.is_expired(now, self._timeout):
                expired = True
                self._logger.info(
                    "dialogue_session_expired",
                    extra={"user_id": mask_user_id(user_id), "state": session.state},
                )
                session = self._engine.expire(session, now).session

            step = self._engine.apply(session, text, now)
            self._persist(step.session)

        if step.completed_draft:
            self._logger.info(
                "dialogue_draft_completed",
                extra={"user_id": mask_user_id(user_id)},
            )

        return DialogueTurn(
            user_id=user_id,
            state_before=session.state,
            state_after=step.session.state,
            signal=step.signal,
            reply_key=step.transition.reply_key,
            reply=step.reply,
            draft=step.session.draft.model_copy(),
            completed_draft=step.completed_draft,
            expired=expired,
        )

    def current(self, user_id: str) -> ConversationSession | None:
        """The live session of a user, or None when absent or expired."""
        with self._locks.hold(user_id):
            session = self._repository.load(user_id)
        if session is None or session.is_expired(self._clock(), self._timeout):
            return None
        return session

    def reset(self, user_id: str) -> bool:
        """Drops the user's session (and any draft). Returns True if one existed."""
        with self._locks.hold(user_id):
            removed = self._repository.delete(user_id)
        if removed:
            self._logger.info("dialogue_session_reset", extra={"user_id": mask_user_id(user_id)})
        return removed

    def purge_expired(self) -> int:
        """Reclaims idle sessions when the repository supports it."""
        purge = getattr(self._repository, "purge_expired", None)
        if purge is None:
            # Redis expires keys by TTL on its own.
            return 0
        return purge(self._clock(), self._timeout)

    def _persist(self, session: ConversationSession) -> None:
        # INITIAL with an empty draft is indistinguishable from no session.
        if session.is_idle():
            self._repository.delete(session.user_id)
            return
        self._repository.save(session, ttl_seconds=self._timeout_seconds)
