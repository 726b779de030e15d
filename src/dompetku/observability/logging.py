"""Structured (JSON) logging configuration."""

from __future__ import annotations

import logging

from pythonjsonlogger.json import JsonFormatter

from dompetku.observability.middleware import get_correlation_id

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s %(correlation_id)s"


class CorrelationIdFilter(logging.Filter):
    """Adds the bound correlation_id to every log record.

    Never put raw message text or full user identifiers in log records.
    """

    def filter(self, record: logging.LogRecord) -> bool:  # noqa: A003
        # Keep a correlation_id passed explicitly through `extra`.
        if not getattr(record, "correlation_id", None):
            record.correlation_id = get_correlation_id()
        return True


def configure_logging(level: str, service_name: str, environment: str | None = None) -> None:
    """Installs a single JSON handler on the root logger.

    Service name and environment are static fields of every record.
    """
    static_fields = {"service": service_name}
    if environment:
        static_fields["environment"] = environment

    formatter = JsonFormatter(
        LOG_FORMAT,
        rename_fields={"levelname": "level", "name": "logger"},
        static_fields=static_fields,
    )

    handler = logging.StreamHandler()
    handler.setLevel(level)
    handler.setFormatter(formatter)
    handler.addFilter(CorrelationIdFilter())

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers = [handler]


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def mask_user_id(user_id: str | None) -> str | None:
    """Truncates a user id (usually a phone number) for logging."""
    if not user_id:
        return None
    return user_id[:6] + "..."


def log_fallback(
    logger: logging.Logger,
    component: str,
    reason: str | None = None,
    elapsed_ms: float | None = None,
) -> None:
    """Observable log entry for a fallback path (no message text).

    Args:
        logger: Logger instance
        component: pipeline stage (e.g. "sentiment", "normalizer")
        reason: why the fallback was taken (e.g. "no_label", "matcher_error")
        elapsed_ms: elapsed time in ms, when relevant

    Example:
        log_fallback(logger, "sentiment", reason="no_label")
    """
    extra: dict[str, object] = {"fallback_used": True, "component": component}
    if reason:
        extra["reason"] = reason
    if elapsed_ms is not None:
        extra["elapsed_ms"] = elapsed_ms

    logger.info("fallback_applied", extra=extra)
