"""AssistantService: the inbound `handle_utterance` entry point.

Order of precedence for one message:
1. support reply (stress override); a draft confirmed by the same message is
   still persisted and its confirmation appended
2. a draft confirmed in the dialogue -> persisted through the router
3. an active dialogue -> the dialogue's prompt
4. a keyword command (raw text first, then normalized) -> router dispatch
5. the orchestrator's own reply

Every collaborator call is awaited before the reply is returned.
"""

from __future__ import annotations

import logging
from typing import Any

from dompetku.ai.entities import extract_parameters
from dompetku.ai.orchestrator import APOLOGY_TEXT, NLUOrchestrator, OrchestratorResult
from dompetku.application.router import CommandRouter
from dompetku.application.session.manager import ConversationSessionStore
from dompetku.domain.enums import CommandAction, CommandDomain, ResponseType
from dompetku.domain.models import Command, ResponseEnvelope, Utterance
from dompetku.domain.session import DialogueState
from dompetku.observability.logging import get_logger, mask_user_id
from dompetku.observability.middleware import correlation_scope

logger: logging.Logger = get_logger(__name__)


class AssistantService:
    """Glues the orchestrator, the session store and the command router."""

    def __init__(
        self,
        orchestrator: NLUOrchestrator,
        router: CommandRouter,
        sessions: ConversationSessionStore,
    ) -> None:
        self._orchestrator = orchestrator
        self._router = router
        self._sessions = sessions

    async def handle(self, utterance: Utterance) -> ResponseEnvelope:
        return await self.handle_utterance(
            utterance.user_id,
            utterance.text,
            {"message_id": utterance.message_id, "timestamp": utterance.received_at},
        )

    async def handle_utterance(
        self,
        user_id: str,
        text: str,
        metadata: dict[str, Any] | None = None,
    ) -> ResponseEnvelope:
        """Produces the reply for one inbound message. Never raises."""
        message_id = (metadata or {}).get("message_id")
        with correlation_scope(str(message_id) if message_id else None):
            try:
                return await self._handle(user_id, text, metadata)
            except Exception as e:
                logger.error(
                    "assistant_failed",
                    extra={"user_id": mask_user_id(user_id), "error": type(e).__name__},
                    exc_info=True,
                )
                return ResponseEnvelope(text=APOLOGY_TEXT, type=ResponseType.ERROR)

    async def _handle(
        self, user_id: str, text: str, metadata: dict[str, Any] | None
    ) -> ResponseEnvelope:
        result = self._orchestrator.process(user_id, text, metadata)
        envelope = result.envelope
        if result.error:
            return envelope

        turn = result.turn
        if envelope.type == ResponseType.SUPPORT:
            if turn is not None and turn.completed_draft:
                # The dialogue already closed the session; the draft exists only here.
                saved = await self._router.persist_draft(user_id, turn.completed_draft)
                return envelope.model_copy(
                    update={"text": f"{envelope.text}\n\n{saved.text}", "action": saved.action}
                )
            return envelope

        if turn is not None and turn.completed_draft:
            return await self._router.persist_draft(user_id, turn.completed_draft)

        command = self._router.identify(text) or self._router.identify(result.standardized_text)

        if turn is not None and turn.touched_draft:
            if turn.state_before == DialogueState.INITIAL and self._is_one_shot(command, result):
                # "catat pengeluaran 50rb untuk makan" carries every slot at once.
                self._sessions.reset(user_id)
                return await self._router.dispatch(user_id, command, result)
            return envelope

        if command is not None:
            logger.info(
                "command_identified",
                extra={"user_id": mask_user_id(user_id), "command": command.keyword},
            )
            return await self._router.dispatch(user_id, command, result)

        return envelope

    @staticmethod
    def _is_one_shot(command: Command | None, result: OrchestratorResult) -> bool:
        if command is None:
            return False
        if (command.domain, command.action) != (CommandDomain.TRANSACTION, CommandAction.CREATE):
            return False
        params = extract_parameters(result.standardized_text)
        return params.amount is not None and bool(params.category)
