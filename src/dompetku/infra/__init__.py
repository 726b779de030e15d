"""Infrastructure layer: adapters for storage and external collaborators.

Exports:
- Session: InMemorySessionRepository, RedisSessionRepository, create_session_repository
- Finance: InMemoryFinanceBackend

Typical use:
    from dompetku.infra import create_session_repository

Infrastructure never decides business rules.
"""

from dompetku.infra.finance_memory import InMemoryFinanceBackend
from dompetku.infra.session_store import create_redis_client, create_session_repository
from dompetku.infra.session_store_memory import InMemorySessionRepository
from dompetku.infra.session_store_redis import RedisSessionRepository

__all__ = [
    "InMemoryFinanceBackend",
    "InMemorySessionRepository",
    "RedisSessionRepository",
    "create_redis_client",
    "create_session_repository",
]
