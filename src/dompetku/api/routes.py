"""HTTP routes: health check and the inbound message endpoint."""

from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from dompetku.api.dependencies import get_assistant, get_settings
from dompetku.application.assistant import AssistantService
from dompetku.config.settings import Settings
from dompetku.domain.models import ResponseEnvelope
from dompetku.observability.logging import get_logger, mask_user_id

logger = get_logger(__name__)

router = APIRouter()


class MessageRequest(BaseModel):
    """Body of POST /v1/messages."""

    user_id: str = Field(min_length=1)
    text: str
    message_id: str | None = None
    timestamp: datetime | None = None


@router.get("/health")
def health(settings: Settings = Depends(get_settings)) -> dict[str, str]:
    """Simple health check."""
    return {"status": "ok", "service": settings.service_name, "version": settings.version}


@router.post("/v1/messages", response_model=ResponseEnvelope)
async def post_message(
    body: MessageRequest,
    assistant: AssistantService = Depends(get_assistant),
) -> ResponseEnvelope:
    """Runs one utterance through the assistant and returns its reply."""
    logger.info(
        "message_received",
        extra={"user_id": mask_user_id(body.user_id), "message_id": body.message_id},
    )
    return await assistant.handle_utterance(
        body.user_id,
        body.text,
        {"message_id": body.message_id, "timestamp": body.timestamp},
    )
