"""Correlation ids for HTTP requests and transport-delivered messages."""

from __future__ import annotations

import contextlib
import re
import uuid
from collections.abc import Iterator
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

CORRELATION_HEADER = "x-correlation-id"

_correlation_id: ContextVar[str] = ContextVar("correlation_id", default="")

# Incoming ids end up in every log record; anything else is replaced.
_SAFE_ID = re.compile(r"[A-Za-z0-9._:-]{1,64}")


def get_correlation_id() -> str:
    """Returns the current correlation_id (or an empty string)."""

    return _correlation_id.get()


def new_correlation_id(candidate: str | None = None) -> str:
    """Keeps a well-formed candidate, otherwise generates a uuid4."""
    if candidate and _SAFE_ID.fullmatch(candidate):
        return candidate
    return str(uuid.uuid4())


@contextlib.contextmanager
def correlation_scope(candidate: str | None = None) -> Iterator[str]:
    """Binds a correlation_id for code running outside an HTTP request.

    An id already bound by the middleware is reused as is.
    """
    current = _correlation_id.get()
    if current:
        yield current
        return

    correlation_id = new_correlation_id(candidate)
    token = _correlation_id.set(correlation_id)
    try:
        yield correlation_id
    finally:
        _correlation_id.reset(token)


class CorrelationIdMiddleware(BaseHTTPMiddleware):
    """Propagates (or generates) a correlation_id on each request."""

    def __init__(self, app: ASGIApp, header_name: str = CORRELATION_HEADER) -> None:
        super().__init__(app)
        self._header_name = header_name

    async def dispatch(self, request: Request, call_next) -> Response:  # type: ignore[override]
        correlation_id = new_correlation_id(request.headers.get(self._header_name))
        token = _correlation_id.set(correlation_id)
        try:
            response = await call_next(request)
        finally:
            _correlation_id.reset(token)

        response.headers[self._header_name] = correlation_id
        return response
