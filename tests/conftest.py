from __future__ import annotations

import logging
from datetime import UTC, datetime, timedelta

import pytest
from fastapi.testclient import TestClient
from pythonjsonlogger.json import JsonFormatter

from dompetku.api.app import create_app
from dompetku.application.factory import build_components
from dompetku.config.settings import Settings, get_settings
from dompetku.infra import InMemoryFinanceBackend, InMemorySessionRepository


class FakeClock:
    """Manually advanced clock for expiry tests."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2026, 1, 15, 9, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


@pytest.fixture(autouse=True)
def _restore_root_logger():
    """configure_logging replaces root handlers; undo it after each test."""
    root = logging.getLogger()
    level = root.level
    yield
    root.handlers = [h for h in root.handlers if not isinstance(h.formatter, JsonFormatter)]
    root.setLevel(level)


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def settings() -> Settings:
    return Settings(environment="test", session_store_backend="memory")


@pytest.fixture()
def backend() -> InMemoryFinanceBackend:
    return InMemoryFinanceBackend()


@pytest.fixture()
def components(settings, backend, clock):
    return build_components(
        settings=settings,
        backend=backend,
        repository=InMemorySessionRepository(),
        clock=clock,
    )


@pytest.fixture()
def client(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("DOMPETKU_ENVIRONMENT", "test")
    monkeypatch.setenv("DOMPETKU_SESSION_STORE_BACKEND", "memory")
    get_settings.cache_clear()
    app = create_app()
    with TestClient(app) as test_client:
        yield test_client
    get_settings.cache_clear()
