"""Dialogue transition table.

TRANSITIONS[(state, signal)] = Transition(next_state, slot_update, reply_key)

- Pure data plus a pure lookup; no side effects.
- Exhaustive: every signal a state accepts has exactly one entry, and every
  state accepts EXPIRED (checked at import time by `ensure_exhaustive`).
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

from dompetku.domain.session.events import DialogueSignal
from dompetku.domain.session.states import DialogueState


class SlotUpdate(StrEnum):
    """How a transition changes the draft."""

    NONE = "NONE"
    SEED_TYPE = "SEED_TYPE"
    SET_AMOUNT = "SET_AMOUNT"
    SET_CATEGORY = "SET_CATEGORY"
    CLEAR = "CLEAR"


@dataclass(frozen=True, slots=True)
class Transition:
    next_state: DialogueState
    slot_update: SlotUpdate
    reply_key: str
    completes_draft: bool = False


ACCEPTED_SIGNALS: dict[DialogueState, frozenset[DialogueSignal]] = {
    DialogueState.INITIAL: frozenset({
        DialogueSignal.CREATE_EXPENSE,
        DialogueSignal.CREATE_INCOME,
        DialogueSignal.VIEW_BALANCE,
        DialogueSignal.VIEW_TRANSACTIONS,
        DialogueSignal.UNKNOWN,
    }),
    DialogueState.AWAITING_AMOUNT: frozenset({
        DialogueSignal.AMOUNT_PARSED,
        DialogueSignal.AMOUNT_INVALID,
    }),
    DialogueState.AWAITING_CATEGORY: frozenset({
        DialogueSignal.CATEGORY_GIVEN,
        DialogueSignal.CATEGORY_EMPTY,
    }),
    DialogueState.AWAITING_CONFIRMATION: frozenset({
        DialogueSignal.CONFIRMED,
        DialogueSignal.REJECTED,
        DialogueSignal.UNCLEAR,
    }),
}

_S = DialogueState
_E = DialogueSignal

TRANSITIONS: dict[tuple[DialogueState, DialogueSignal], Transition] = {
    # === INITIAL → ... ===
    (_S.INITIAL, _E.CREATE_EXPENSE): Transition(
        _S.AWAITING_AMOUNT, SlotUpdate.SEED_TYPE, "ask_amount_expense"
    ),
    (_S.INITIAL, _E.CREATE_INCOME): Transition(
        _S.AWAITING_AMOUNT, SlotUpdate.SEED_TYPE, "ask_amount_income"
    ),
    (_S.INITIAL, _E.VIEW_BALANCE): Transition(_S.INITIAL, SlotUpdate.NONE, "show_balance"),
    (_S.INITIAL, _E.VIEW_TRANSACTIONS): Transition(
        _S.INITIAL, SlotUpdate.NONE, "show_transactions"
    ),
    (_S.INITIAL, _E.UNKNOWN): Transition(_S.INITIAL, SlotUpdate.NONE, "not_understood"),
    # === AWAITING_AMOUNT → ... ===
    (_S.AWAITING_AMOUNT, _E.AMOUNT_PARSED): Transition(
        _S.AWAITING_CATEGORY, SlotUpdate.SET_AMOUNT, "ask_category"
    ),
    (_S.AWAITING_AMOUNT, _E.AMOUNT_INVALID): Transition(
        _S.AWAITING_AMOUNT, SlotUpdate.NONE, "reprompt_amount"
    ),
    # === AWAITING_CATEGORY → ... ===
    (_S.AWAITING_CATEGORY, _E.CATEGORY_GIVEN): Transition(
        _S.AWAITING_CONFIRMATION, SlotUpdate.SET_CATEGORY, "confirm_draft"
    ),
    (_S.AWAITING_CATEGORY, _E.CATEGORY_EMPTY): Transition(
        _S.AWAITING_CATEGORY, SlotUpdate.NONE, "reprompt_category"
    ),
    # === AWAITING_CONFIRMATION → ... ===
    (_S.AWAITING_CONFIRMATION, _E.CONFIRMED): Transition(
        _S.INITIAL, SlotUpdate.CLEAR, "draft_saved", completes_draft=True
    ),
    (_S.AWAITING_CONFIRMATION, _E.REJECTED): Transition(
        _S.INITIAL, SlotUpdate.CLEAR, "draft_cancelled"
    ),
    (_S.AWAITING_CONFIRMATION, _E.UNCLEAR): Transition(
        _S.AWAITING_CONFIRMATION, SlotUpdate.NONE, "reprompt_confirmation"
    ),
    # === Expiry: any state → INITIAL ===
    **{
        (state, _E.EXPIRED): Transition(_S.INITIAL, SlotUpdate.CLEAR, "expired")
        for state in DialogueState
    },
}


def lookup_transition(state: DialogueState, signal: DialogueSignal) -> Transition | None:
    """Returns the transition for (state, signal), or None if not allowed.

    Never raises; callers decide what an invalid pair means.
    """
    return TRANSITIONS.get((state, signal))


def ensure_exhaustive() -> None:
    """Raises if a state accepts a signal without a transition (or misses EXPIRED)."""
    missing: list[str] = []
    for state in DialogueState:
        for signal in (*ACCEPTED_SIGNALS.get(state, ()), DialogueSignal.EXPIRED):
            if (state, signal) not in TRANSITIONS:
                missing.append(f"{state}/{signal}")
    if missing:
        raise RuntimeError(f"Dialogue transition table incomplete: {', '.join(missing)}")


ensure_exhaustive()
