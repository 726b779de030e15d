"""Dialogue FSM: states, signals, transitions and the session model.

Exports:
- DialogueState: the four canonical states
- DialogueSignal: detected input signals
- TRANSITIONS / lookup_transition: the transition table
- ConversationSession / TransactionDraft: per-user state and slot bag
"""

from dompetku.domain.session.events import DialogueSignal
from dompetku.domain.session.models import ConversationSession, TransactionDraft
from dompetku.domain.session.states import DRAFTING_STATES, DialogueState
from dompetku.domain.session.transitions import (
    ACCEPTED_SIGNALS,
    TRANSITIONS,
    SlotUpdate,
    Transition,
    lookup_transition,
)

__all__ = [
    "ACCEPTED_SIGNALS",
    "DRAFTING_STATES",
    "TRANSITIONS",
    "ConversationSession",
    "DialogueSignal",
    "DialogueState",
    "SlotUpdate",
    "TransactionDraft",
    "Transition",
    "lookup_transition",
]
