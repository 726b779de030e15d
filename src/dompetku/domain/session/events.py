"""Signals detected in user input that drive dialogue transitions.

Each state only listens to its own subset of signals (see
`transitions.ACCEPTED_SIGNALS`); EXPIRED is accepted by every state.
"""

from __future__ import annotations

from enum import StrEnum


class DialogueSignal(StrEnum):
    """Canonical signals consumed by the transition table."""

    # === INITIAL ===
    CREATE_EXPENSE = "CREATE_EXPENSE"
    """Create trigger ("catat"/"tambah") plus an expense qualifier."""

    CREATE_INCOME = "CREATE_INCOME"
    """Create trigger plus an income qualifier."""

    VIEW_BALANCE = "VIEW_BALANCE"
    """View trigger ("lihat"/"cek") about the balance."""

    VIEW_TRANSACTIONS = "VIEW_TRANSACTIONS"
    """View trigger about the transaction history."""

    UNKNOWN = "UNKNOWN"
    """Nothing recognized."""

    # === AWAITING_AMOUNT ===
    AMOUNT_PARSED = "AMOUNT_PARSED"
    AMOUNT_INVALID = "AMOUNT_INVALID"

    # === AWAITING_CATEGORY ===
    CATEGORY_GIVEN = "CATEGORY_GIVEN"
    CATEGORY_EMPTY = "CATEGORY_EMPTY"

    # === AWAITING_CONFIRMATION ===
    CONFIRMED = "CONFIRMED"
    REJECTED = "REJECTED"
    UNCLEAR = "UNCLEAR"

    # === Any state ===
    EXPIRED = "EXPIRED"
    """Inactivity timeout elapsed since the last activity."""
