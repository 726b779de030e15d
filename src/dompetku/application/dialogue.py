"""Dialogue engine: pure signal detection and transition application.

- Pure: (session, text, now) in, new session + reply out; the input session
  is never mutated and nothing is persisted here.
- Deterministic: same input, same output.
- Never raises for a valid state; every (state, signal) it can produce has a
  transition table entry.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from dompetku.application.session.typos import correct_typos
from dompetku.domain.amounts import find_amount, format_rupiah, parse_amount
from dompetku.domain.enums import TransactionType
from dompetku.domain.session import (
    ConversationSession,
    DialogueSignal,
    DialogueState,
    SlotUpdate,
    TransactionDraft,
    Transition,
    lookup_transition,
)
from dompetku.observability.logging import get_logger

logger: logging.Logger = get_logger(__name__)

CREATE_TRIGGERS = frozenset({"catat", "tambah", "tambahkan", "simpan", "masukkan"})
VIEW_TRIGGERS = frozenset({"lihat", "cek"})

# Negative answers are checked first: "bukan, saya batal" must not confirm.
NEGATIVE_WORDS = frozenset({
    "tidak", "tdk", "gak", "ga", "nggak", "enggak", "engga", "batal", "bukan", "jangan", "no",
})
AFFIRMATIVE_WORDS = frozenset({
    "ya", "iya", "yes", "y", "ok", "oke", "okay", "benar", "betul", "bener", "sip", "yup",
})

REPLIES: dict[str, str] = {
    "ask_amount_expense": "Berapa jumlah pengeluarannya?",
    "ask_amount_income": "Berapa jumlah pemasukannya?",
    "show_balance": "Menampilkan informasi saldo Anda...",
    "show_transactions": "Menampilkan riwayat transaksi Anda...",
    "not_understood": "Maaf, saya tidak mengerti. Silakan coba perintah lain.",
    "ask_category": "Untuk kategori apa?",
    "reprompt_amount": (
        "Maaf, saya tidak mengerti jumlahnya. "
        "Mohon masukkan jumlah yang valid (contoh: 50000 atau 50rb)."
    ),
    "confirm_draft": "Konfirmasi: {kind} sebesar {amount} untuk {category}. Benar? (ya/tidak)",
    "reprompt_category": "Untuk kategori apa? Mohon tuliskan nama kategorinya.",
    "draft_saved": "Transaksi berhasil dicatat!",
    "draft_cancelled": "Baik, transaksi dibatalkan. Ada yang bisa saya bantu lagi?",
    "reprompt_confirmation": 'Mohon jawab dengan "ya" atau "tidak".',
    "expired": "Sesi sebelumnya telah berakhir karena tidak ada aktivitas.",
}

_KIND_LABELS = {TransactionType.EXPENSE: "pengeluaran", TransactionType.INCOME: "pemasukan"}

_WORD = re.compile(r"[a-z0-9]+")


@dataclass(frozen=True, slots=True)
class DetectedSignal:
    """A signal plus the slot value it carries (amount, category, type)."""

    signal: DialogueSignal
    value: Any = None


@dataclass(frozen=True, slots=True)
class DialogueStep:
    """Outcome of applying one utterance to a session."""

    signal: DialogueSignal
    transition: Transition
    session: ConversationSession
    reply: str
    completed_draft: dict[str, Any] | None = None


def _words(text: str) -> set[str]:
    return set(_WORD.findall(text.lower()))


def detect_initial(text: str) -> DetectedSignal:
    words = _words(correct_typos(text))
    if words & CREATE_TRIGGERS:
        if "pengeluaran" in words:
            return DetectedSignal(DialogueSignal.CREATE_EXPENSE, TransactionType.EXPENSE)
        if "pemasukan" in words:
            return DetectedSignal(DialogueSignal.CREATE_INCOME, TransactionType.INCOME)
    if words & VIEW_TRIGGERS:
        if "saldo" in words:
            return DetectedSignal(DialogueSignal.VIEW_BALANCE)
        if "transaksi" in words:
            return DetectedSignal(DialogueSignal.VIEW_TRANSACTIONS)
    return DetectedSignal(DialogueSignal.UNKNOWN)


def detect_amount(text: str) -> DetectedSignal:
    amount = parse_amount(text) or find_amount(text)
    if amount is None:
        return DetectedSignal(DialogueSignal.AMOUNT_INVALID)
    return DetectedSignal(DialogueSignal.AMOUNT_PARSED, amount)


def detect_category(text: str) -> DetectedSignal:
    category = " ".join(text.split()).strip(" .,!?")
    if not category:
        return DetectedSignal(DialogueSignal.CATEGORY_EMPTY)
    return DetectedSignal(DialogueSignal.CATEGORY_GIVEN, category)


def detect_confirmation(text: str) -> DetectedSignal:
    lowered = text.lower()
    words = _words(lowered)
    if words & NEGATIVE_WORDS or "tidak" in lowered:
        return DetectedSignal(DialogueSignal.REJECTED)
    if words & AFFIRMATIVE_WORDS or "ya" in lowered:
        return DetectedSignal(DialogueSignal.CONFIRMED)
    return DetectedSignal(DialogueSignal.UNCLEAR)


_DETECTORS = {
    DialogueState.INITIAL: detect_initial,
    DialogueState.AWAITING_AMOUNT: detect_amount,
    DialogueState.AWAITING_CATEGORY: detect_category,
    DialogueState.AWAITING_CONFIRMATION: detect_confirmation,
}


def render_reply(reply_key: str, draft: TransactionDraft) -> str:
    template = REPLIES[reply_key]
    if reply_key != "confirm_draft":
        return template
    return template.format(
        kind=_KIND_LABELS.get(draft.type, "transaksi"),
        amount=format_rupiah(draft.amount or 0),
        category=draft.category,
    )


def _apply_slot_update(
    draft: TransactionDraft, update: SlotUpdate, value: Any
) -> TransactionDraft:
    if update == SlotUpdate.SEED_TYPE:
        return TransactionDraft(type=value)
    if update == SlotUpdate.SET_AMOUNT:
        return draft.model_copy(update={"amount": value})
    if update == SlotUpdate.SET_CATEGORY:
        return draft.model_copy(update={"category": value})
    if update == SlotUpdate.CLEAR:
        return TransactionDraft()
    return draft.model_copy()


class DialogueEngine:
    """Applies the transition table to one session at a time."""

    def detect(self, state: DialogueState, text: str) -> DetectedSignal:
        return _DETECTORS[state](text or "")

    def _step(
        self,
        session: ConversationSession,
        detected: DetectedSignal,
        now: datetime,
    ) -> DialogueStep:
        transition = lookup_transition(session.state, detected.signal)
        if transition is None:
            # Detectors only emit accepted signals; reaching this is a table bug.
            raise RuntimeError(f"No transition for {session.state}/{detected.signal}")

        draft = _apply_slot_update(session.draft, transition.slot_update, detected.value)
        completed = session.draft.as_payload() if transition.completes_draft else None
        updated = session.model_copy(
            update={"state": transition.next_state, "draft": draft, "last_activity": now}
        )
        # Confirmation renders against the draft just built.
        reply = render_reply(transition.reply_key, draft)

        logger.debug(
            "dialogue_transition",
            extra={
                "from_state": session.state,
                "signal": detected.signal,
                "to_state": transition.next_state,
            },
        )
        return DialogueStep(
            signal=detected.signal,
            transition=transition,
            session=updated,
            reply=reply,
            completed_draft=completed,
        )

    def apply(self, session: ConversationSession, text: str, now: datetime) -> DialogueStep:
        """Detects the signal for the session's state and applies it."""
        return self._step(session, self.detect(session.state, text), now)

    def expire(self, session: ConversationSession, now: datetime) -> DialogueStep:
        """Resets a stale session to INITIAL with an empty draft."""
        return self._step(session, DetectedSignal(DialogueSignal.EXPIRED), now)
