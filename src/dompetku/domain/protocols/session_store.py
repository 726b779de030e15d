"""Domain protocol for dialogue session persistence."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from dompetku.domain.session.models import ConversationSession


class SessionRepository(ABC):
    """Minimal contract for storing one ConversationSession per user id.

    Repositories only store and fetch; expiry by inactivity is decided by the
    session store from `last_activity`, so a repository TTL is a memory
    reclaim hint and never a correctness requirement.
    """

    @abstractmethod
    def save(self, session: ConversationSession, ttl_seconds: int = 300) -> None: ...

    @abstractmethod
    def load(self, user_id: str) -> ConversationSession | None: ...

    @abstractmethod
    def delete(self, user_id: str) -> bool: ...

    @abstractmethod
    def exists(self, user_id: str) -> bool: ...
