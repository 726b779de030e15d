"""SessionRepository backed by Redis (multi-worker deployments)."""

from __future__ import annotations

import logging
from typing import Any

from dompetku.domain.errors import SessionStoreError
from dompetku.domain.protocols.session_store import SessionRepository
from dompetku.domain.session.models import ConversationSession
from dompetku.observability.logging import get_logger, mask_user_id

logger: logging.Logger = get_logger(__name__)

KEY_PREFIX = "dialogue:"


class RedisSessionRepository(SessionRepository):
    """Stores each session as JSON under ``dialogue:{user_id}`` with a TTL."""

    def __init__(self, redis_client: Any, key_prefix: str = KEY_PREFIX) -> None:
        self._redis = redis_client
        self._prefix = key_prefix

    def _key(self, user_id: str) -> str:
        return f"{self._prefix}{user_id}"

    def save(self, session: ConversationSession, ttl_seconds: int = 300) -> None:
        payload = session.model_dump_json()

        try:
            self._redis.setex(self._key(session.user_id), ttl_seconds, payload)
            logger.debug(
                "Session saved (Redis)",
                extra={"user_id": mask_user_id(session.user_id), "ttl_seconds": ttl_seconds},
            )
        except Exception as e:
            logger.error(
                "Failed to save session to Redis",
                extra={"user_id": mask_user_id(session.user_id), "error": type(e).__name__},
            )
            raise SessionStoreError(f"Redis save failed: {e}") from e

    def load(self, user_id: str) -> ConversationSession | None:
        try:
            payload = self._redis.get(self._key(user_id))
        except Exception as e:
            logger.error(
                "Failed to load session from Redis",
                extra={"user_id": mask_user_id(user_id), "error": type(e).__name__},
            )
            raise SessionStoreError(f"Redis load failed: {e}") from e

        if not payload:
            return None

        if isinstance(payload, bytes):
            payload = payload.decode("utf-8")

        try:
            return ConversationSession.model_validate_json(payload)
        except ValueError:
            # A corrupt entry behaves like a missing one; the next save overwrites it.
            logger.warning(
                "Discarding unreadable session payload (Redis)",
                extra={"user_id": mask_user_id(user_id)},
            )
            return None

    def delete(self, user_id: str) -> bool:
        try:
            deleted = self._redis.delete(self._key(user_id))
        except Exception as e:
            logger.error(
                "Failed to delete session from Redis",
                extra={"user_id": mask_user_id(user_id), "error": type(e).__name__},
            )
            raise SessionStoreError(f"Redis delete failed: {e}") from e
        return bool(deleted)

    def exists(self, user_id: str) -> bool:
        try:
            return bool(self._redis.exists(self._key(user_id)))
        except Exception as e:
            logger.error(
                "Failed to check session existence in Redis",
                extra={"user_id": mask_user_id(user_id), "error": type(e).__name__},
            )
            raise SessionStoreError(f"Redis exists failed: {e}") from e
