"""Package `session`: dialogue session lifecycle.

Main exports:
- ConversationSessionStore: owner of per-user dialogue state (session/manager.py)
- DialogueTurn: outcome of one utterance (session/manager.py)
- KeyedLock: per-user mutual exclusion (session/locks.py)
"""

from __future__ import annotations

from dompetku.application.session.locks import KeyedLock
from dompetku.application.session.typos import TYPO_CORRECTIONS, correct_typos

__all__ = [
    "TYPO_CORRECTIONS",
    "ConversationSessionStore",
    "DialogueTurn",
    "KeyedLock",
    "correct_typos",
]


def __getattr__(name: str):
    """Lazy import for the store (dialogue.py imports session.typos)."""
    if name in ("ConversationSessionStore", "DialogueTurn"):
        from dompetku.application.session.manager import (
            ConversationSessionStore,
            DialogueTurn,
        )

        return {
            "ConversationSessionStore": ConversationSessionStore,
            "DialogueTurn": DialogueTurn,
        }[name]
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
