"""Re-exports of the domain protocols for the application layer."""

from __future__ import annotations

from dompetku.domain.protocols.finance_backend import (
    FinanceBackend,
    GoalRef,
    SummaryData,
    TransactionRef,
)
from dompetku.domain.protocols.intent_matcher import IntentMatcher
from dompetku.domain.protocols.session_store import SessionRepository

__all__ = [
    "FinanceBackend",
    "GoalRef",
    "IntentMatcher",
    "SessionRepository",
    "SummaryData",
    "TransactionRef",
]
