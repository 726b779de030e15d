"""Dependencies injected into the routes."""

from __future__ import annotations

from fastapi import Request

from dompetku.application.assistant import AssistantService
from dompetku.config.settings import Settings


def get_settings(request: Request) -> Settings:
    """Returns the application settings."""

    return request.app.state.settings


def get_assistant(request: Request) -> AssistantService:
    """Returns the assistant pipeline of this app."""

    return request.app.state.assistant
