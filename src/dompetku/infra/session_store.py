"""Factory for SessionRepository backends."""

from __future__ import annotations

from typing import Any

from dompetku.domain.protocols.session_store import SessionRepository
from dompetku.infra.session_store_memory import InMemorySessionRepository
from dompetku.infra.session_store_redis import RedisSessionRepository


def create_redis_client(redis_url: str) -> Any:
    """Builds a redis-py client that returns str payloads."""
    import redis

    return redis.from_url(redis_url, decode_responses=True)


def create_session_repository(backend: str = "memory", client: Any = None) -> SessionRepository:
    """Returns the repository for the configured backend.

    Args:
        backend: "memory" or "redis"
        client: redis client (required for "redis")
    """
    backend = backend.lower()
    if backend == "memory":
        return InMemorySessionRepository()
    if backend == "redis":
        if client is None:
            raise ValueError("redis session backend requires a client")
        return RedisSessionRepository(client)
    raise ValueError(f"Unknown session store backend: {backend}")
