"""Conversation session model.

A ConversationSession is the per-user dialogue state:
- one session per user id
- serializable (JSON) so it can live in Redis
- owned by the session store; other components only read snapshots
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import Any

from pydantic import BaseModel, Field

from dompetku.domain.enums import TransactionType
from dompetku.domain.session.states import DialogueState


class TransactionDraft(BaseModel):
    """Slot bag: the partially filled transaction being collected."""

    type: TransactionType | None = None
    amount: int | None = None
    category: str | None = None

    def is_empty(self) -> bool:
        return self.type is None and self.amount is None and self.category is None

    def is_complete(self) -> bool:
        return self.type is not None and self.amount is not None and bool(self.category)

    def as_payload(self) -> dict[str, Any]:
        """Plain dict handed to the command router for persistence."""
        return {
            "type": self.type.value if self.type else None,
            "amount": self.amount,
            "category": self.category,
        }


class ConversationSession(BaseModel):
    """Dialogue state of one user."""

    user_id: str
    state: DialogueState = DialogueState.INITIAL
    draft: TransactionDraft = Field(default_factory=TransactionDraft)
    created_at: datetime = Field(default_factory=lambda: datetime.now(tz=UTC))
    last_activity: datetime = Field(default_factory=lambda: datetime.now(tz=UTC))

    def is_expired(self, now: datetime, timeout: timedelta) -> bool:
        """True when the session was idle for longer than timeout."""
        return now - self.last_activity > timeout

    def is_idle(self) -> bool:
        """True when nothing is in progress (safe to drop from storage)."""
        return self.state == DialogueState.INITIAL and self.draft.is_empty()

    def touch(self, now: datetime) -> None:
        self.last_activity = now
