"""The dialogue transition table is exhaustive and closed."""

from __future__ import annotations

import pytest

from dompetku.domain.session import (
    ACCEPTED_SIGNALS,
    TRANSITIONS,
    DialogueSignal,
    DialogueState,
    SlotUpdate,
    lookup_transition,
)
from dompetku.domain.session.transitions import ensure_exhaustive


def test_table_is_exhaustive():
    ensure_exhaustive()
    for state, signals in ACCEPTED_SIGNALS.items():
        for signal in signals:
            assert lookup_transition(state, signal) is not None


@pytest.mark.parametrize("state", list(DialogueState))
def test_every_state_expires_to_initial(state):
    transition = lookup_transition(state, DialogueSignal.EXPIRED)
    assert transition.next_state == DialogueState.INITIAL
    assert transition.slot_update == SlotUpdate.CLEAR


def test_signals_of_other_states_are_not_allowed():
    assert lookup_transition(DialogueState.INITIAL, DialogueSignal.CONFIRMED) is None
    assert lookup_transition(DialogueState.AWAITING_AMOUNT, DialogueSignal.CATEGORY_GIVEN) is None


def test_only_confirmation_completes_a_draft():
    completing = [key for key, t in TRANSITIONS.items() if t.completes_draft]
    assert completing == [(DialogueState.AWAITING_CONFIRMATION, DialogueSignal.CONFIRMED)]


def test_targets_are_known_states():
    assert {t.next_state for t in TRANSITIONS.values()} <= set(DialogueState)
