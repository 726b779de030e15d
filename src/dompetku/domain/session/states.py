"""Dialogue states of a multi-turn transaction capture.

A session only ever leaves INITIAL to collect one transaction draft
(amount, then category, then a yes/no confirmation) and always returns to
INITIAL on completion, cancellation or expiry.
"""

from __future__ import annotations

from enum import StrEnum


class DialogueState(StrEnum):
    """The four canonical dialogue states."""

    INITIAL = "INITIAL"
    """No draft in progress."""

    AWAITING_AMOUNT = "AWAITING_AMOUNT"
    """Transaction type known; waiting for an amount."""

    AWAITING_CATEGORY = "AWAITING_CATEGORY"
    """Amount known; waiting for a category label."""

    AWAITING_CONFIRMATION = "AWAITING_CONFIRMATION"
    """Draft complete; waiting for yes/no."""


DRAFTING_STATES = frozenset({
    DialogueState.AWAITING_AMOUNT,
    DialogueState.AWAITING_CATEGORY,
    DialogueState.AWAITING_CONFIRMATION,
})
"""States in which a draft is being collected."""
