"""Redis-backed dialogue session repository (redis client mocked)."""

from __future__ import annotations

import json
from unittest.mock import MagicMock

import pytest

from dompetku.domain.errors import SessionStoreError
from dompetku.domain.session import ConversationSession, DialogueState, TransactionDraft
from dompetku.infra import RedisSessionRepository, create_session_repository


def _session() -> ConversationSession:
    return ConversationSession(
        user_id="6281234567890",
        state=DialogueState.AWAITING_CONFIRMATION,
        draft=TransactionDraft(type="income", amount=5_000_000, category="gaji"),
    )


class TestRedisSessionRepositorySave:
    def test_save_uses_setex_with_ttl(self):
        mock_redis = MagicMock()
        RedisSessionRepository(mock_redis).save(_session(), ttl_seconds=300)

        mock_redis.setex.assert_called_once()
        key, ttl, payload = mock_redis.setex.call_args[0]
        assert key == "dialogue:6281234567890"
        assert ttl == 300
        data = json.loads(payload)
        assert data["state"] == "AWAITING_CONFIRMATION"
        assert data["draft"]["category"] == "gaji"

    def test_save_error_raises_store_error(self):
        mock_redis = MagicMock()
        mock_redis.setex.side_effect = Exception("connection refused")
        with pytest.raises(SessionStoreError):
            RedisSessionRepository(mock_redis).save(_session())


class TestRedisSessionRepositoryLoad:
    def test_load_parses_payload(self):
        mock_redis = MagicMock()
        mock_redis.get.return_value = _session().model_dump_json().encode("utf-8")

        loaded = RedisSessionRepository(mock_redis).load("6281234567890")
        mock_redis.get.assert_called_once_with("dialogue:6281234567890")
        assert loaded.state == DialogueState.AWAITING_CONFIRMATION
        assert loaded.draft.amount == 5_000_000

    def test_missing_key(self):
        mock_redis = MagicMock()
        mock_redis.get.return_value = None
        assert RedisSessionRepository(mock_redis).load("u1") is None

    def test_corrupt_payload_is_treated_as_missing(self):
        mock_redis = MagicMock()
        mock_redis.get.return_value = "{not json"
        assert RedisSessionRepository(mock_redis).load("u1") is None

    def test_load_error_raises_store_error(self):
        mock_redis = MagicMock()
        mock_redis.get.side_effect = Exception("timeout")
        with pytest.raises(SessionStoreError):
            RedisSessionRepository(mock_redis).load("u1")


class TestRedisSessionRepositoryDelete:
    def test_delete_and_exists(self):
        mock_redis = MagicMock()
        mock_redis.delete.return_value = 1
        mock_redis.exists.return_value = 0
        repo = RedisSessionRepository(mock_redis, key_prefix="t:")

        assert repo.delete("u1") is True
        mock_redis.delete.assert_called_once_with("t:u1")
        assert repo.exists("u1") is False


def test_factory_requires_client_for_redis():
    with pytest.raises(ValueError):
        create_session_repository("redis")
    assert isinstance(create_session_repository("redis", MagicMock()), RedisSessionRepository)
    with pytest.raises(ValueError):
        create_session_repository("firestore")
