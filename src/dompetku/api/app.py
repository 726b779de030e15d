"""FastAPI application factory."""

from __future__ import annotations

from fastapi import FastAPI

from dompetku.api.routes import router
from dompetku.application.factory import build_components
from dompetku.config.settings import Settings, get_settings
from dompetku.domain.protocols.finance_backend import FinanceBackend
from dompetku.infra.session_store import create_redis_client
from dompetku.observability.logging import configure_logging, get_logger
from dompetku.observability.middleware import CorrelationIdMiddleware

logger = get_logger(__name__)


def create_app(
    settings: Settings | None = None,
    backend: FinanceBackend | None = None,
) -> FastAPI:
    """Creates the FastAPI application.

    Raises:
        ValueError: when the configuration is invalid
    """
    settings = settings or get_settings()
    configure_logging(settings.log_level, settings.service_name, settings.environment)

    validation_errors = settings.validate_all()
    if validation_errors:
        raise ValueError(f"Invalid configuration: {'; '.join(validation_errors)}")

    app = FastAPI(title=settings.service_name, version=settings.version)
    app.add_middleware(CorrelationIdMiddleware)
    app.include_router(router)

    redis_client = None
    if settings.session_store_backend.lower() == "redis":
        # validate_all guarantees redis_url here
        redis_client = create_redis_client(settings.redis_url or "")

    components = build_components(settings=settings, backend=backend, redis_client=redis_client)

    app.state.settings = settings
    app.state.components = components
    app.state.assistant = components.assistant

    logger.info(
        "app_created",
        extra={
            "environment": settings.environment,
            "session_store_backend": settings.session_store_backend,
        },
    )
    return app
