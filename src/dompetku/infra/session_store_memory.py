"""In-memory SessionRepository (development, tests, single worker)."""

from __future__ import annotations

import logging
import threading
from datetime import datetime, timedelta
from typing import TYPE_CHECKING

from dompetku.domain.protocols.session_store import SessionRepository
from dompetku.observability.logging import get_logger, mask_user_id

if TYPE_CHECKING:
    from dompetku.domain.session.models import ConversationSession

logger: logging.Logger = get_logger(__name__)


class InMemorySessionRepository(SessionRepository):
    """Keeps sessions in a dict (not shared between processes).

    There is no clock here: the session store expires sessions from
    `last_activity` and idle entries are reclaimed by `purge_expired`.
    """

    def __init__(self) -> None:
        self._sessions: dict[str, ConversationSession] = {}
        self._guard = threading.Lock()

    def save(self, session: ConversationSession, ttl_seconds: int = 300) -> None:
        snapshot = session.model_copy(deep=True)
        with self._guard:
            self._sessions[session.user_id] = snapshot
        logger.debug(
            "Session saved (in-memory)",
            extra={"user_id": mask_user_id(session.user_id), "ttl_seconds": ttl_seconds},
        )

    def load(self, user_id: str) -> ConversationSession | None:
        with self._guard:
            session = self._sessions.get(user_id)
        if session is None:
            return None
        return session.model_copy(deep=True)

    def delete(self, user_id: str) -> bool:
        with self._guard:
            removed = self._sessions.pop(user_id, None) is not None
        if removed:
            logger.debug("Session deleted (in-memory)", extra={"user_id": mask_user_id(user_id)})
        return removed

    def exists(self, user_id: str) -> bool:
        with self._guard:
            return user_id in self._sessions

    def purge_expired(self, now: datetime, timeout: timedelta) -> int:
        """Drops sessions idle for longer than timeout. Returns how many."""
        with self._guard:
            stale = [
                user_id
                for user_id, session in self._sessions.items()
                if session.is_expired(now, timeout)
            ]
            for user_id in stale:
                del self._sessions[user_id]

        if stale:
            logger.info("Idle sessions purged (in-memory)", extra={"purged": len(stale)})
        return len(stale)

    def __len__(self) -> int:
        return len(self._sessions)
